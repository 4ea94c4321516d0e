from __future__ import annotations


SCAN_XP = 10
NMAP_XP = 25

CONNECT_CHANCE_SOFT_FIREWALL = 0.8
CONNECT_CHANCE_HARD_FIREWALL = 0.6
CONNECT_FIREWALL_THRESHOLD = 5
CONNECT_XP = 15
CONNECT_DETECTED_STRESS = 10
CONNECT_LOCKOUT_TURNS = 2

DOWNLOAD_XP = 20
DOWNLOAD_DETECTION_CHANCE = 0.3
DOWNLOAD_DETECTED_STRESS = 15

UPLOAD_CHANCE = 0.8
UPLOAD_XP = 25
UPLOAD_FAILED_STRESS = 10

EXPLOIT_BASE = 0.6
EXPLOIT_SEVERITY_PENALTY = 0.05
EXPLOIT_ADMIN_SEVERITY = 8
EXPLOIT_XP = 50
EXPLOIT_ADMIN_XP = 100
EXPLOIT_SKILL_GAIN = 5
EXPLOIT_DETECTED_STRESS = 25

CRACK_BASE = 0.4
CRACK_XP = 75
CRACK_SKILL_GAIN = 3
CRACK_FAILED_STRESS = 5

DECRYPT_BASE = 0.3
DECRYPT_XP = 60
DECRYPT_FAILED_STRESS = 5

BACKDOOR_BASE = 0.7
BACKDOOR_XP = 80
BACKDOOR_SKILL_GAIN = 4
BACKDOOR_DETECTED_STRESS = 20

ROOTKIT_BASE = 0.8
ROOTKIT_XP = 150
ROOTKIT_STANDING = 25
ROOTKIT_HACKING_GAIN = 8
ROOTKIT_ANONYMITY_GAIN = 5
ROOTKIT_FAILED_STRESS = 30

TRACE_XP = 15
TRACE_SAFE_ANONYMITY = 50
TRACE_EXPOSED_STRESS = 10

PROXY_CHANCE = 0.8
PROXY_ANONYMITY_GAIN = 10
PROXY_STRESS_RELIEF = 10
PROXY_XP = 20

TOR_CHANCE = 0.9
TOR_ANONYMITY_GAIN = 25
TOR_STRESS_RELIEF = 20
TOR_XP = 40

VPN_CHANCE = 0.85
VPN_ANONYMITY_GAIN = 5
VPN_STRESS_RELIEF = 5
VPN_XP = 15

SOCIAL_BASE = 0.2
SOCIAL_WEIGHT = 0.8
SOCIAL_XP = 40
SOCIAL_SKILL_GAIN = 3
SOCIAL_FAILED_STRESS = 5

DDOS_BASE = 0.3
DDOS_WEIGHT = 0.7
DDOS_XP = 60
DDOS_STANDING = -10
DDOS_SKILL_GAIN = 4
DDOS_STRESS = 25
DDOS_FAILED_STRESS = 15

MITM_BASE = 0.2
MITM_WEIGHT = 0.6
MITM_XP = 80
MITM_NETSEC_GAIN = 5
MITM_CRYPTO_GAIN = 3
MITM_FAILED_STRESS = 20
MITM_EXPOSURE_CHANCE = 0.5
MITM_EXPOSURE_STRESS = 30

KEYLOG_CHANCE = 0.75
KEYLOG_XP = 70
KEYLOG_FAILED_STRESS = 10

SCREEN_CHANCE = 0.8
SCREEN_XP = 30

WEBCAM_CHANCE = 0.6
WEBCAM_XP = 50
WEBCAM_FAILED_STRESS = 15
WEBCAM_FAILED_STANDING = -5

MIC_CHANCE = 0.7
MIC_XP = 45
MIC_FAILED_STRESS = 12

MAIL_CHANCE = 0.85
MAIL_XP = 35

DB_CHANCE = 0.7
DB_XP = 55
DB_SKILL_GAIN = 3

LOG_XP = 25
LOG_SKILL_GAIN = 2

PS_XP = 15

KILL_BASE = 0.8
KILL_FAILED_STRESS = 10
KILL_DEFAULT_XP = 30
KILL_PROCESS_BONUSES = {
    "nuclear_control_system": {"xp": 200, "standing": 50, "flag": "nuclear_control_disabled"},
    "firewall_daemon": {"xp": 100, "standing": 0, "flag": ""},
    "intrusion_detector": {"xp": 80, "standing": 0, "flag": ""},
}

MOUNT_CHANCE = 0.75
MOUNT_XP = 40

FORMAT_CHANCE = 0.9
FORMAT_XP = 25
FORMAT_EVIDENCE_STANDING = -20
FORMAT_SENSITIVE_MARKERS = ("backup", "evidence")

WIPE_CHANCE = 0.85
WIPE_XP = 50
WIPE_SENSITIVE_XP = 150
WIPE_SENSITIVE_STANDING = 30
WIPE_SENSITIVE_MARKERS = ("nuclear", "evidence", "secret")

RECOVER_BASE = 0.2
RECOVER_WEIGHT = 0.7
RECOVER_SKILL_GAIN = 5
RECOVER_FAILED_STRESS = 5

ANALYZE_HIDDEN_CHANCE = 0.6
ANALYZE_XP = 45
ANALYZE_SKILL_GAIN = 3

DISASM_CHANCE = 0.7
DISASM_XP = 75
DISASM_SKILL_GAIN = 6
DISASM_EXTENSIONS = (".exe", ".dll", ".bin")

DEBUG_CHANCE = 0.6
DEBUG_XP = 90
DEBUG_REVENG_GAIN = 5
DEBUG_PROGRAMMING_GAIN = 4

COMPILE_BASE = 0.4
COMPILE_WEIGHT = 0.8
COMPILE_XP = 65
COMPILE_SKILL_GAIN = 5
COMPILE_FAILED_STRESS = 5
COMPILE_EXTENSIONS = (".c", ".cpp", ".py", ".rs", ".go", ".asm")

RUN_PROFILES = (
    ("exploit", 0.6, 100),
    ("payload", 0.6, 100),
    ("scanner", 1.0, 50),
    ("keylog", 1.0, 70),
    ("backdoor", 1.0, 120),
)
RUN_DEFAULT_CHANCE = 0.7
RUN_DEFAULT_XP = 30

STRESS_WARNING_LEVEL = 80

HACKER_COMMUNITY_FACTION = "UndergroundHackers"
