from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from cyberhack.application.services.chapter_quests import FINAL_CHAPTER, quest_for_chapter
from cyberhack.application.services.event_bus import EventBus
from cyberhack.application.services.faction_graph import FactionReputationGraph
from cyberhack.domain.events import ActionResolved, ObjectiveCompleted, QuestCompleted
from cyberhack.domain.models.quest import Quest
from cyberhack.domain.models.world import GameMode, WorldState
from cyberhack.domain.outcomes import ActionOutcome


QuestSource = Callable[[int], Optional[Quest]]


@dataclass
class QuestProgress:
    completed_objectives: List[str] = field(default_factory=list)
    archived_quest_id: Optional[str] = None
    next_quest_id: Optional[str] = None
    messages: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.completed_objectives)


class QuestTracker:
    def __init__(
        self,
        graph: FactionReputationGraph,
        event_bus: Optional[EventBus] = None,
        quest_source: QuestSource = quest_for_chapter,
    ) -> None:
        self.graph = graph
        self.event_bus = event_bus
        self.quest_source = quest_source

    def register_handlers(self) -> None:
        if self.event_bus is None:
            return
        self.event_bus.subscribe(ActionResolved, self.on_action_resolved, priority=20)

    def on_action_resolved(self, event: ActionResolved) -> None:
        progress = self.observe(event.world, event.outcome)
        event.outcome.notes.extend(progress.messages)

    def ensure_quest(self, world: WorldState) -> Optional[Quest]:
        """Hand out the quest for the current chapter when none is active."""

        if world.quest is None and world.chapter <= FINAL_CHAPTER:
            candidate = self.quest_source(world.chapter)
            if candidate is not None and candidate.id not in world.completed_quest_ids:
                world.quest = candidate
        return world.quest

    def observe(self, world: WorldState, outcome: ActionOutcome) -> QuestProgress:
        progress = QuestProgress()
        quest = world.quest
        if quest is None or world.mode == GameMode.SANDBOX or not outcome.succeeded:
            return progress

        objective = quest.first_open_match(outcome.verb, outcome.subjects())
        if objective is None or not objective.complete():
            return progress

        progress.completed_objectives.append(objective.description)
        progress.messages.append(f"Objective complete: {objective.description}")
        if self.event_bus is not None:
            self.event_bus.publish(ObjectiveCompleted(quest_id=quest.id, description=objective.description, turn=world.turn))

        if quest.is_complete:
            self._archive(world, quest, progress)
        return progress

    def _archive(self, world: WorldState, quest: Quest, progress: QuestProgress) -> None:
        if quest.id not in world.completed_quest_ids:
            world.completed_quest_ids.append(quest.id)
        progress.archived_quest_id = quest.id
        progress.messages.append(f"Quest complete: {quest.title}")
        self._grant(world, quest, progress)

        world.chapter += 1
        world.quest = None
        next_quest = self.ensure_quest(world)
        progress.next_quest_id = next_quest.id if next_quest is not None else None
        if next_quest is not None:
            progress.messages.append(f"New quest: {next_quest.title}")
        else:
            progress.messages.append("The story has reached its end.")
        if self.event_bus is not None:
            self.event_bus.publish(
                QuestCompleted(quest_id=quest.id, chapter_after=world.chapter, next_quest_id=progress.next_quest_id)
            )

    def _grant(self, world: WorldState, quest: Quest, progress: QuestProgress) -> None:
        reward = quest.reward
        player = world.player
        if reward.experience:
            player.experience += int(reward.experience)
            progress.messages.append(f"+{reward.experience} XP")
        if reward.money:
            player.money += int(reward.money)
            progress.messages.append(f"+${reward.money}")
        for item in reward.items:
            if item not in player.inventory:
                player.inventory.append(item)
                progress.messages.append(f"Received {item}")
        for flag in reward.flags:
            world.story_flags[flag] = True
        for faction_id, delta in reward.standings:
            applied = self.graph.update_standing(world, faction_id, int(delta), reason=f"quest:{quest.id}")
            progress.messages.extend(self.graph.describe_changes(world, applied))

    @staticmethod
    def describe(world: WorldState) -> List[str]:
        quest = world.quest
        if quest is None:
            if world.chapter > FINAL_CHAPTER:
                return ["All chapters complete."]
            return ["No active quest."]
        lines = [f"Chapter {quest.chapter}: {quest.title}", quest.description]
        for objective in quest.objectives:
            mark = "x" if objective.completed else " "
            lines.append(f"[{mark}] {objective.description}")
        if world.mode == GameMode.SANDBOX:
            lines.append("Sandbox mode: quest progress is paused.")
        return lines


def register_quest_tracker_handlers(*, graph: FactionReputationGraph, event_bus: EventBus) -> QuestTracker:
    tracker = QuestTracker(graph=graph, event_bus=event_bus)
    tracker.register_handlers()
    return tracker
