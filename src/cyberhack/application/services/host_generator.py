from __future__ import annotations

import random
from typing import Any, Dict, List, Mapping

from cyberhack.application.services.seed_policy import seeded_random
from cyberhack.domain.models.network import File, Network, Process, Service, System, Vulnerability


OPERATING_SYSTEMS = ("Linux", "Windows Server", "FreeBSD", "macOS", "Ubuntu", "CentOS")

SERVICE_TEMPLATES = (
    ("SSH", 22),
    ("HTTP", 80),
    ("HTTPS", 443),
    ("FTP", 21),
    ("Telnet", 23),
    ("SMTP", 25),
    ("DNS", 53),
    ("MySQL", 3306),
    ("PostgreSQL", 5432),
    ("RDP", 3389),
)
SERVICE_PRESENT_CHANCE = 0.7
SERVICE_VULNERABLE_CHANCE = 0.3

VULNERABILITY_TEMPLATES = (
    ("CVE-2019-14287", "Sudo privilege escalation", 8),
    ("CVE-2017-0144", "EternalBlue SMB remote execution", 9),
    ("CVE-2014-0160", "Heartbleed memory disclosure", 7),
    ("CVE-2012-2982", "Webmin command injection", 6),
    ("CVE-2018-1111", "DHCP client command injection", 8),
    ("Buffer Overflow", "Unchecked input length in a daemon", 7),
    ("Weak Passwords", "Default or guessable credentials", 5),
    ("Directory Traversal", "Path traversal in a file handler", 6),
)
VULNERABILITY_PRESENT_CHANCE = 0.4

FILE_TEMPLATES = (
    ("system.log", "Routine system events. Nothing unusual.", 24, False),
    ("passwords.txt", "admin:hunter2\nroot:toor", 2, True),
    ("email.txt", "Re: quarterly numbers. Delete after reading.", 6, False),
    ("database.sql", "CREATE TABLE clients (id INT, name TEXT);", 512, False),
    ("source.cpp", "int main() { return 0; }", 12, False),
    ("config.ini", "[auth]\ntoken=8f1d2c", 1, True),
    ("nuclear_codes.enc", "LAUNCH-SEQUENCE-REDACTED", 4, True),
    ("budget.xls", "Q3 black budget allocations", 96, False),
    ("updater.bin", "ELF stub with an unsigned update channel", 300, False),
)
FILE_PRESENT_CHANCE = 0.5
DEFAULT_FILE_PASSWORD = "password123"

BASE_PROCESSES = (
    (1, "init", "root"),
    (456, "sshd", "root"),
    (789, "apache2", "www-data"),
    (1234, "mysql", "mysql"),
    (2001, "firewall_daemon", "root"),
    (2456, "intrusion_detector", "root"),
)

HOST_COUNT_RANGE = (3, 11)
HOST_ONLINE_CHANCE = 0.7
IDS_CHANCE = 0.6


def normalize_range(address_range: str) -> str:
    """``192.168.1.0/24`` and ``192.168.1.0`` both normalise to ``192.168.1``."""

    token = str(address_range or "").strip().lower()
    if "/" in token:
        token = token.split("/", 1)[0]
    parts = token.split(".")
    if len(parts) == 4 and all(part.isdigit() for part in parts):
        return ".".join(parts[:3])
    return token


class HostGenerator:
    def __init__(self, story_networks: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self.story_networks: Dict[str, Mapping[str, Any]] = {
            str(key).strip().lower(): value for key, value in dict(story_networks or {}).items()
        }

    def discover(self, *, world_seed: int, address_range: str) -> Network:
        """Build the network a scan of ``address_range`` reveals. Same input, same hosts."""

        key = normalize_range(address_range)
        template = self.story_networks.get(key)
        if template is not None:
            return self._from_template(key, template)
        rng = seeded_random("scan", {"world_seed": int(world_seed), "range": key})
        return self._synthesize(key, rng)

    def _synthesize(self, key: str, rng: random.Random) -> Network:
        network = Network(
            address=key,
            name=f"net-{key}",
            security_level=rng.randint(1, 7),
            firewall_strength=rng.randint(1, 9),
            intrusion_detection=rng.random() < IDS_CHANCE,
        )
        for index in range(1, rng.randint(*HOST_COUNT_RANGE) + 1):
            if rng.random() >= HOST_ONLINE_CHANCE:
                continue
            address = f"{key}.{index}"
            network.systems[address] = System(
                address=address,
                name=f"host-{index}",
                os=rng.choice(OPERATING_SYSTEMS),
                security_level=rng.randint(1, 9),
                firewall_strength=rng.randint(1, 9),
                intrusion_detection=rng.random() < IDS_CHANCE,
                files=_generate_files(rng),
                services=_generate_services(rng),
                vulnerabilities=_generate_vulnerabilities(rng),
                processes={pid: Process(pid=pid, name=name, user=user) for pid, name, user in BASE_PROCESSES},
            )
        return network

    def _from_template(self, key: str, template: Mapping[str, Any]) -> Network:
        network = Network(
            address=key,
            name=str(template.get("name", key)),
            security_level=int(template.get("security_level", 5)),
            firewall_strength=int(template.get("firewall_strength", 5)),
            intrusion_detection=bool(template.get("intrusion_detection", True)),
        )
        for row in template.get("systems", []):
            system = system_from_template(row)
            network.systems[system.address] = system
        return network


def system_from_template(row: Mapping[str, Any]) -> System:
    processes = row.get("processes")
    if processes is None:
        process_rows = [{"pid": pid, "name": name, "user": user} for pid, name, user in BASE_PROCESSES]
    else:
        process_rows = list(processes)
    return System(
        address=str(row["address"]),
        name=str(row.get("name", row["address"])),
        os=str(row.get("os", "Linux")),
        security_level=int(row.get("security_level", 5)),
        firewall_strength=int(row.get("firewall_strength", 5)),
        intrusion_detection=bool(row.get("intrusion_detection", True)),
        files={
            str(item["name"]): File(
                name=str(item["name"]),
                content=str(item.get("content", "")),
                size_kb=int(item.get("size_kb", 1)),
                encrypted=bool(item.get("encrypted", False)),
                password=item.get("password"),
            )
            for item in row.get("files", [])
        },
        services=[
            Service(
                name=str(item["name"]),
                port=int(item["port"]),
                version=str(item.get("version", "")),
                vulnerable=bool(item.get("vulnerable", False)),
            )
            for item in row.get("services", [])
        ],
        vulnerabilities=[
            Vulnerability(
                name=str(item["name"]),
                description=str(item.get("description", "")),
                severity=int(item.get("severity", 5)),
            )
            for item in row.get("vulnerabilities", [])
        ],
        processes={
            int(item["pid"]): Process(pid=int(item["pid"]), name=str(item["name"]), user=str(item.get("user", "root")))
            for item in process_rows
        },
    )


def _generate_files(rng: random.Random) -> Dict[str, File]:
    files: Dict[str, File] = {}
    for name, content, size_kb, encrypted in FILE_TEMPLATES:
        if rng.random() >= FILE_PRESENT_CHANCE:
            continue
        files[name] = File(
            name=name,
            content=content,
            size_kb=size_kb,
            encrypted=encrypted,
            password=DEFAULT_FILE_PASSWORD if encrypted else None,
            permissions="rw-------" if encrypted else "rw-r--r--",
        )
    return files


def _generate_services(rng: random.Random) -> List[Service]:
    services: List[Service] = []
    for name, port in SERVICE_TEMPLATES:
        if rng.random() >= SERVICE_PRESENT_CHANCE:
            continue
        services.append(
            Service(
                name=name,
                port=port,
                version=f"{rng.randint(1, 9)}.{rng.randint(0, 9)}",
                vulnerable=rng.random() < SERVICE_VULNERABLE_CHANCE,
            )
        )
    return services


def _generate_vulnerabilities(rng: random.Random) -> List[Vulnerability]:
    return [
        Vulnerability(name=name, description=description, severity=severity)
        for name, description, severity in VULNERABILITY_TEMPLATES
        if rng.random() < VULNERABILITY_PRESENT_CHANCE
    ]
