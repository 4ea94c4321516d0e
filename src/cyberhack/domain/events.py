from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from cyberhack.domain.models.world import WorldState
from cyberhack.domain.outcomes import ActionOutcome


@dataclass
class ActionResolved:
    world: WorldState
    outcome: ActionOutcome
    turn: int


@dataclass
class IntrusionDetected:
    system_address: str
    verb: str
    stress_delta: int
    turn: int


@dataclass
class FactionStandingChanged:
    faction_id: str
    delta: int
    standing_after: int
    reason: str
    propagated_from: Optional[str] = None


@dataclass
class ObjectiveCompleted:
    quest_id: str
    description: str
    turn: int


@dataclass
class QuestCompleted:
    quest_id: str
    chapter_after: int
    next_quest_id: Optional[str]


@dataclass
class PlayerLeveledUp:
    from_level: int
    to_level: int


@dataclass
class DialogueOptionChosen:
    character_id: str
    option_id: str
    node_after: Optional[str]
    skill_check_passed: Optional[bool] = None


@dataclass
class EndingReached:
    ending_id: str
    title: str
