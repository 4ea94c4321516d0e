from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence

from cyberhack.application.services.chapter_quests import FINAL_CHAPTER
from cyberhack.application.services.event_bus import EventBus
from cyberhack.application.services.world_conditions import failed_requirements, is_known_requirement
from cyberhack.domain.events import EndingReached
from cyberhack.domain.models.ending import Ending
from cyberhack.domain.models.world import WorldState


FALLBACK_ENDING = Ending(
    id="unresolved",
    title="Loose Ends",
    summary="NEXUS bleeds but survives. You disappear into the noise and wait for the next call.",
)


def endings_from_payload(payload: Mapping[str, Any]) -> List[Ending]:
    return [
        Ending(
            id=str(row["id"]),
            title=str(row.get("title", row["id"])),
            summary=str(row.get("summary", "")),
            requires=tuple(str(token) for token in row.get("requires", [])),
        )
        for row in payload.get("endings", [])
    ]


def validate_endings(payload: object) -> list[str]:
    if not isinstance(payload, dict) or not isinstance(payload.get("endings"), list):
        return ["payload.endings must be a list"]
    errors: list[str] = []
    for index, row in enumerate(payload["endings"]):
        if not isinstance(row, dict) or not str(row.get("id", "")).strip():
            errors.append(f"endings[{index}].id is required")
            continue
        for token in row.get("requires", []):
            if not is_known_requirement(str(token)):
                errors.append(f"endings[{index}].requires '{token}' is not a recognised requirement")
    return errors


class EndingService:
    """Chooses the first ending whose requirements all hold once the story is over."""

    def __init__(self, endings: Sequence[Ending] = (), event_bus: Optional[EventBus] = None) -> None:
        self.endings = list(endings)
        self.event_bus = event_bus

    @staticmethod
    def story_finished(world: WorldState) -> bool:
        return world.quest is None and world.chapter > FINAL_CHAPTER

    def eligible(self, world: WorldState) -> Iterable[Ending]:
        for ending in self.endings:
            if not failed_requirements(world, ending.requires):
                yield ending

    def resolve(self, world: WorldState) -> Optional[Ending]:
        if world.ending_id is not None or not self.story_finished(world):
            return None
        ending = next(iter(self.eligible(world)), FALLBACK_ENDING)
        world.ending_id = ending.id
        if self.event_bus is not None:
            self.event_bus.publish(EndingReached(ending_id=ending.id, title=ending.title))
        return ending

    def lookup(self, ending_id: Optional[str]) -> Optional[Ending]:
        for ending in [*self.endings, FALLBACK_ENDING]:
            if ending.id == ending_id:
                return ending
        return None
