from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


ANY_TARGET = "any"


@dataclass
class Objective:
    description: str
    action: str
    target: str = ANY_TARGET
    completed: bool = False

    def matches(self, verb: str, subjects: tuple[str, ...]) -> bool:
        if self.completed:
            return False
        if self.action != str(verb or "").strip().lower():
            return False
        wanted = str(self.target or "").strip().lower()
        if wanted == ANY_TARGET:
            return True
        return wanted in {str(subject or "").strip().lower() for subject in subjects if subject}

    def complete(self) -> bool:
        """Flip to completed once; later calls report no change."""

        if self.completed:
            return False
        self.completed = True
        return True


@dataclass(frozen=True)
class QuestReward:
    experience: int = 0
    money: int = 0
    items: tuple[str, ...] = ()
    standings: tuple[tuple[str, int], ...] = ()
    flags: tuple[str, ...] = ()


@dataclass
class Quest:
    id: str
    title: str
    description: str = ""
    chapter: int = 1
    objectives: List[Objective] = field(default_factory=list)
    reward: QuestReward = field(default_factory=QuestReward)
    difficulty: int = 1

    @property
    def is_complete(self) -> bool:
        return bool(self.objectives) and all(objective.completed for objective in self.objectives)

    def first_open_match(self, verb: str, subjects: tuple[str, ...]) -> Optional[Objective]:
        for objective in self.objectives:
            if objective.matches(verb, subjects):
                return objective
        return None

    def progress(self) -> Dict[str, int]:
        done = sum(1 for objective in self.objectives if objective.completed)
        return {"completed": done, "total": len(self.objectives)}
