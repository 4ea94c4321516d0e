from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


STRESS_MIN = 0
STRESS_MAX = 100
ANONYMITY_CAP = 100
LOCAL_TERMINAL = "Local Terminal"

DEFAULT_SKILLS: Dict[str, int] = {
    "Hacking": 10,
    "Social Engineering": 5,
    "Cryptography": 8,
    "Network Security": 12,
    "Programming": 15,
    "Anonymity": 7,
    "Forensics": 3,
    "Reverse Engineering": 6,
}


def canonical_skill_name(name: str) -> str:
    """Map loose spellings such as ``hacking`` or ``social_engineering`` onto skill keys."""

    token = str(name or "").strip().replace("_", " ").lower()
    for known in DEFAULT_SKILLS:
        if known.lower() == token:
            return known
    return " ".join(part.capitalize() for part in token.split())


@dataclass
class Player:
    name: str = "Anonymous"
    level: int = 1
    experience: int = 0
    health: int = 100
    max_health: int = 100
    stress: int = 0
    money: int = 1000
    skills: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_SKILLS))
    inventory: List[str] = field(default_factory=list)
    current_system: Optional[str] = None
    current_location: str = LOCAL_TERMINAL

    @property
    def is_connected(self) -> bool:
        return self.current_system is not None

    def skill(self, name: str) -> int:
        return int(self.skills.get(canonical_skill_name(name), 0) or 0)

    def raise_skill(self, name: str, amount: int, *, cap: int | None = None) -> int:
        key = canonical_skill_name(name)
        value = int(self.skills.get(key, 0) or 0) + int(amount)
        if cap is not None:
            value = min(int(cap), value)
        self.skills[key] = value
        return value

    def add_stress(self, amount: int) -> int:
        """Shift stress by ``amount`` and return the applied change."""

        before = int(self.stress)
        self.stress = max(STRESS_MIN, min(STRESS_MAX, before + int(amount)))
        return self.stress - before

    def has_item(self, fragment: str) -> bool:
        needle = str(fragment or "").strip().lower()
        if not needle:
            return False
        return any(needle in str(item).lower() for item in self.inventory)

    def find_item(self, fragment: str) -> Optional[str]:
        needle = str(fragment or "").strip().lower()
        for item in self.inventory:
            if needle and needle in str(item).lower():
                return item
        return None

    def next_level_experience(self) -> int:
        return int(self.level) * 100

    def apply_level_ups(self) -> int:
        gained = 0
        while self.experience >= self.next_level_experience():
            self.experience -= self.next_level_experience()
            self.level += 1
            self.max_health += 10
            self.health = self.max_health
            gained += 1
        return gained
