from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional


class CompromiseStage(IntEnum):
    UNDISCOVERED = 0
    SCANNED = 1
    CONNECTED = 2
    COMPROMISED = 3
    ADMIN_ACCESS = 4
    ROOTKIT_HIDDEN = 5

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass
class File:
    name: str
    content: str = ""
    size_kb: int = 1
    permissions: str = "rw-r--r--"
    encrypted: bool = False
    password: Optional[str] = None


@dataclass
class Service:
    name: str
    port: int
    version: str = ""
    running: bool = True
    vulnerable: bool = False


@dataclass
class Vulnerability:
    name: str
    description: str = ""
    severity: int = 5
    exploit_code: str = ""


@dataclass
class Process:
    pid: int
    name: str
    user: str = "root"


@dataclass
class System:
    address: str
    name: str = ""
    os: str = "Linux"
    security_level: int = 1
    firewall_strength: int = 1
    intrusion_detection: bool = False
    stage: CompromiseStage = CompromiseStage.SCANNED
    files: Dict[str, File] = field(default_factory=dict)
    services: List[Service] = field(default_factory=list)
    vulnerabilities: List[Vulnerability] = field(default_factory=list)
    processes: Dict[int, Process] = field(default_factory=dict)
    backdoor_installed: bool = False
    nmap_scanned: bool = False
    mounted_devices: List[str] = field(default_factory=list)
    wiped_files: Dict[str, File] = field(default_factory=dict)
    lockout_until_turn: int = 0

    @property
    def is_compromised(self) -> bool:
        return self.stage >= CompromiseStage.COMPROMISED

    @property
    def admin_access(self) -> bool:
        return self.stage >= CompromiseStage.ADMIN_ACCESS

    @property
    def rootkit_installed(self) -> bool:
        return self.stage >= CompromiseStage.ROOTKIT_HIDDEN

    def advance_to(self, stage: CompromiseStage) -> bool:
        """Move forward along the compromise ladder. Never regresses."""

        target = CompromiseStage(stage)
        if target <= self.stage:
            return False
        self.stage = target
        return True

    def find_vulnerability(self, name: str) -> Optional[Vulnerability]:
        needle = str(name or "").strip().lower()
        if not needle:
            return None
        for vulnerability in self.vulnerabilities:
            if vulnerability.name.lower() == needle:
                return vulnerability
        for vulnerability in self.vulnerabilities:
            if needle in vulnerability.name.lower():
                return vulnerability
        return None


@dataclass
class Network:
    address: str
    name: str = ""
    security_level: int = 1
    firewall_strength: int = 1
    intrusion_detection: bool = False
    systems: Dict[str, System] = field(default_factory=dict)

    def system(self, address: str) -> Optional[System]:
        return self.systems.get(str(address or "").strip())
