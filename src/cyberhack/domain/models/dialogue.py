from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


EFFECT_KINDS = (
    "give_money",
    "take_money",
    "give_item",
    "take_item",
    "set_flag",
    "clear_flag",
    "stress",
    "experience",
)


@dataclass(frozen=True)
class TextVariant:
    text: str
    requires: tuple[str, ...] = ()
    mood: str = ""


@dataclass(frozen=True)
class SkillCheck:
    skill: str
    difficulty: int
    success_node: str
    failure_node: str
    critical_success_node: Optional[str] = None
    critical_failure_node: Optional[str] = None


@dataclass(frozen=True)
class DialogueEffect:
    kind: str
    value: str = ""
    amount: int = 0


@dataclass(frozen=True)
class DialogueOption:
    id: str
    text: str
    requires: tuple[str, ...] = ()
    target_node: Optional[str] = None
    skill_check: Optional[SkillCheck] = None
    relationship_delta: int = 0
    standing_deltas: tuple[tuple[str, int], ...] = ()
    effects: tuple[DialogueEffect, ...] = ()


@dataclass(frozen=True)
class DialogueNode:
    id: str
    speaker: str
    text: str
    variants: tuple[TextVariant, ...] = ()
    options: tuple[DialogueOption, ...] = ()

    def option(self, option_id: str) -> Optional[DialogueOption]:
        key = str(option_id or "").strip().lower()
        for option in self.options:
            if option.id == key:
                return option
        return None


@dataclass
class DialogueTree:
    character_id: str
    name: str
    root: str
    nodes: Dict[str, DialogueNode] = field(default_factory=dict)
    faction_id: Optional[str] = None


@dataclass
class ConversationState:
    character_id: str
    node_id: str
    history: List[str] = field(default_factory=list)
