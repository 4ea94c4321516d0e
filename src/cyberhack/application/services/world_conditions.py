from __future__ import annotations

import operator
import re
from typing import Callable, Dict, Iterable, List, Optional

from cyberhack.application.services import balance_tables as bt
from cyberhack.application.services.faction_graph import resolve_faction_id
from cyberhack.domain.models.player import canonical_skill_name
from cyberhack.domain.models.world import WorldState


_COMPARISON = re.compile(r"^(?P<subject>[a-z_][a-z0-9_ ]*(?::[a-z0-9_ ]+)?)\s*(?P<op>>=|<=|==|!=|>|<)\s*(?P<value>-?\d+)$", re.IGNORECASE)

_OPERATORS: Dict[str, Callable[[int, int], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
}

_PREDICATE_PREFIXES = ("flag:", "has_item:", "quest_completed:", "mode:")
_PLAIN_SUBJECTS = {"money", "stress", "level", "chapter", "relationship", "trust_level", "reputation", "health"}


def _subject_value(world: WorldState, subject: str, character_id: Optional[str]) -> Optional[int]:
    key = subject.strip()
    lowered = key.lower()
    player = world.player
    if lowered == "money":
        return int(player.money)
    if lowered == "stress":
        return int(player.stress)
    if lowered == "level":
        return int(player.level)
    if lowered == "health":
        return int(player.health)
    if lowered == "chapter":
        return int(world.chapter)
    if lowered in {"relationship", "trust_level"}:
        contact = world.contacts.get(str(character_id or ""))
        return int(contact.relationship) if contact is not None else 0
    if lowered == "reputation":
        return world.standing(bt.HACKER_COMMUNITY_FACTION)
    if lowered.startswith("skill:"):
        return player.skill(key.split(":", 1)[1])
    if lowered.startswith("standing:"):
        return world.standing(resolve_faction_id(world, key.split(":", 1)[1]))
    if lowered.endswith("_skill"):
        return player.skill(canonical_skill_name(lowered[: -len("_skill")]))
    return None


def _predicate(world: WorldState, token: str, character_id: Optional[str]) -> Optional[bool]:
    lowered = token.lower()
    if lowered == "first_meeting":
        return str(character_id or "") not in world.met_characters
    if lowered.startswith("flag:"):
        return world.flag(lowered.split(":", 1)[1])
    if lowered.startswith("has_item:"):
        return world.player.has_item(token.split(":", 1)[1])
    if lowered.startswith("quest_completed:"):
        return lowered.split(":", 1)[1].strip() in world.completed_quest_ids
    if lowered.startswith("mode:"):
        return world.mode.value == lowered.split(":", 1)[1].strip()
    return None


def requirement_met(world: WorldState, requirement: str, *, character_id: Optional[str] = None) -> bool:
    """Evaluate one requirement token. Unknown tokens are unmet."""

    token = str(requirement or "").strip()
    if not token:
        return True
    if token.startswith("!"):
        return not requirement_met(world, token[1:], character_id=character_id)

    match = _COMPARISON.match(token)
    if match is not None:
        value = _subject_value(world, match.group("subject"), character_id)
        if value is None:
            return False
        return _OPERATORS[match.group("op")](value, int(match.group("value")))

    result = _predicate(world, token, character_id)
    return bool(result) if result is not None else False


def failed_requirements(world: WorldState, requirements: Iterable[str], *, character_id: Optional[str] = None) -> List[str]:
    return [
        str(token).strip()
        for token in requirements
        if not requirement_met(world, str(token), character_id=character_id)
    ]


def is_known_requirement(requirement: str) -> bool:
    token = str(requirement or "").strip()
    if token.startswith("!"):
        token = token[1:]
    if not token:
        return False
    match = _COMPARISON.match(token)
    if match is not None:
        subject = match.group("subject").strip().lower()
        return (
            subject in _PLAIN_SUBJECTS
            or subject.startswith("skill:")
            or subject.startswith("standing:")
            or subject.endswith("_skill")
        )
    lowered = token.lower()
    return lowered == "first_meeting" or lowered.startswith(_PREDICATE_PREFIXES)


def requirement_reason(requirement: str) -> str:
    token = str(requirement or "").strip()
    negated = token.startswith("!")
    if negated:
        token = token[1:]
    match = _COMPARISON.match(token)
    if match is not None:
        subject = match.group("subject").strip()
        label = subject.split(":", 1)[1] if ":" in subject else subject.replace("_", " ")
        return f"Requires {label} {match.group('op')} {match.group('value')}."
    lowered = token.lower()
    if lowered.startswith("flag:"):
        name = token.split(":", 1)[1].replace("_", " ")
        return f"Requires that {name} has {'not ' if negated else ''}happened."
    if lowered.startswith("has_item:"):
        return f"Requires {token.split(':', 1)[1]} in your inventory."
    if lowered.startswith("quest_completed:"):
        return f"Requires completing {token.split(':', 1)[1]}."
    if lowered == "first_meeting":
        return "Only available on a first meeting." if not negated else "Only available after a first meeting."
    return "Unavailable due to unmet requirement."
