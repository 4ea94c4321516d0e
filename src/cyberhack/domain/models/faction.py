from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


STANDING_MIN = -100
STANDING_MAX = 100

RANK_THRESHOLDS: tuple[tuple[str, int], ...] = (
    ("Leader", 90),
    ("Elite", 75),
    ("Trusted", 50),
    ("Member", 25),
)


class StandingThreshold(str, Enum):
    HOSTILE = "hostile"
    UNFRIENDLY = "unfriendly"
    NEUTRAL = "neutral"
    FRIENDLY = "friendly"
    ALLIED = "allied"


@dataclass
class Faction:
    id: str
    name: str
    power_level: int = 50
    allies: List[str] = field(default_factory=list)
    enemies: List[str] = field(default_factory=list)
    description: str = ""
    services: List[str] = field(default_factory=list)

    def available_services(self, standing: int) -> List[str]:
        score = int(standing)
        if score >= 75:
            return list(self.services)
        if score >= 50:
            return list(self.services[:3])
        if score >= 0:
            return list(self.services[:1])
        return []


def clamp_standing(value: int) -> int:
    return max(STANDING_MIN, min(STANDING_MAX, int(value)))


def standing_threshold(standing: int) -> StandingThreshold:
    score = int(standing)
    if score >= 50:
        return StandingThreshold.ALLIED
    if score >= 10:
        return StandingThreshold.FRIENDLY
    if score <= -50:
        return StandingThreshold.HOSTILE
    if score <= -10:
        return StandingThreshold.UNFRIENDLY
    return StandingThreshold.NEUTRAL


def faction_rank(standing: int) -> str | None:
    score = int(standing)
    for rank, minimum in RANK_THRESHOLDS:
        if score >= minimum:
            return rank
    return None
