from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional


def clamp_probability(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def resolve_chance(base: float, skill: int = 0, penalty: float = 0.0, *, weight: float = 1.0) -> float:
    """``base + skill/100 * weight - penalty`` clamped into [0, 1]."""

    return clamp_probability(float(base) + (float(skill) / 100.0) * float(weight) - float(penalty))


@dataclass(frozen=True)
class Roll:
    chance: float
    value: float

    @property
    def success(self) -> bool:
        return self.value < self.chance


class ChanceRoller:
    """Single source of randomness for resolvers and dialogue checks."""

    def __init__(self, rng: Optional[random.Random] = None, *, seed: Optional[int] = None) -> None:
        self.rng = rng if rng is not None else random.Random(seed)

    def roll(self, chance: float) -> Roll:
        return Roll(chance=clamp_probability(chance), value=self.rng.random())

    def check(self, base: float, skill: int = 0, penalty: float = 0.0, *, weight: float = 1.0) -> Roll:
        return self.roll(resolve_chance(base, skill, penalty, weight=weight))

    def randint(self, low: int, high: int) -> int:
        return self.rng.randint(int(low), int(high))

    def choice(self, options):
        return self.rng.choice(list(options))
