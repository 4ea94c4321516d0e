from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class StatusView:
    name: str
    level: int
    experience: int
    next_level_experience: int
    health: int
    max_health: int
    stress: int
    money: int
    location: str
    connected_to: Optional[str]
    mode: str
    chapter: int
    reputation: int
    turn: int


@dataclass
class ContactView:
    name: str
    handle: str
    relationship: int
    faction: str
    standing: int
    rank: Optional[str]
    services: List[str] = field(default_factory=list)


@dataclass
class DialogueOptionView:
    id: str
    text: str
    skill: Optional[str] = None
    difficulty: Optional[int] = None


@dataclass
class DialogueView:
    character_id: str
    speaker: str
    node_id: str
    text: str
    options: List[DialogueOptionView] = field(default_factory=list)
    ended: bool = False


@dataclass
class DialogueStep:
    accepted: bool
    reason: str = ""
    view: Optional[DialogueView] = None
    chance: Optional[float] = None
    check_passed: Optional[bool] = None
    critical: bool = False
    messages: List[str] = field(default_factory=list)
