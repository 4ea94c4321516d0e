from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from cyberhack.application.commands import Command, Verb, parse_command
from cyberhack.application.dtos import ContactView, DialogueStep, DialogueView, StatusView
from cyberhack.application.services import balance_tables as bt
from cyberhack.application.services.action_resolver import ActionResolver
from cyberhack.application.services.dialogue_engine import DialogueEngine
from cyberhack.application.services.ending_service import EndingService
from cyberhack.application.services.event_bus import EventBus
from cyberhack.application.services.faction_graph import FactionReputationGraph
from cyberhack.application.services.quest_tracker import QuestTracker
from cyberhack.domain.errors import SaveSlotError, UnknownVerbError
from cyberhack.domain.events import ActionResolved, PlayerLeveledUp
from cyberhack.domain.models.world import GameMode, WorldState
from cyberhack.domain.outcomes import ActionOutcome, OutcomeStatus
from cyberhack.domain.repositories import SaveRepository


_logger = logging.getLogger(__name__)

DEFAULT_SAVE_SLOT = 1

MetaHandler = Callable[[Command], ActionOutcome]


class GameSession:
    """Owns the WorldState for one play session and routes every command."""

    def __init__(
        self,
        world: WorldState,
        *,
        resolver: ActionResolver,
        tracker: QuestTracker,
        graph: FactionReputationGraph,
        dialogue: DialogueEngine,
        endings: EndingService,
        save_repo: SaveRepository,
        event_bus: EventBus,
    ) -> None:
        self.world = world
        self.resolver = resolver
        self.tracker = tracker
        self.graph = graph
        self.dialogue = dialogue
        self.endings = endings
        self.save_repo = save_repo
        self.event_bus = event_bus
        self._meta: Dict[Verb, MetaHandler] = {
            Verb.STATUS: self._status,
            Verb.INVENTORY: self._inventory,
            Verb.SKILLS: self._skills,
            Verb.CONTACTS: self._contacts,
            Verb.QUEST: self._quest,
            Verb.SAVE: self._save,
            Verb.LOAD: self._load,
            Verb.QUIT: self._quit,
            Verb.SANDBOX: self._sandbox,
            Verb.STORY: self._story,
        }
        self.tracker.ensure_quest(self.world)

    # -- commands -------------------------------------------------------------------

    def submit_command_intent(self, raw: str) -> ActionOutcome:
        try:
            command = parse_command(raw)
        except UnknownVerbError as exc:
            return ActionOutcome(
                verb=exc.verb,
                status=OutcomeStatus.REJECTED,
                messages=[f"Unknown command: {exc.verb or '(empty)'}. Type help for the command list."],
            )

        meta = self._meta.get(command.verb)
        if meta is not None:
            return meta(command)

        outcome = self.resolver.resolve(self.world, command)
        self.world.turn += 1
        self.event_bus.publish(ActionResolved(world=self.world, outcome=outcome, turn=self.world.turn))
        self._after_action(outcome)
        _logger.debug("turn %s: %s -> %s", self.world.turn, command.raw, outcome.status.value)
        return outcome

    def _after_action(self, outcome: ActionOutcome) -> None:
        outcome.notes.extend(self._progress_notes(stress_raised=outcome.stress_delta > 0))

    def _progress_notes(self, *, stress_raised: bool) -> List[str]:
        """Level-ups, stress warnings and the ending, shared by actions and dialogue."""
        notes: List[str] = []
        player = self.world.player
        before = player.level
        if player.apply_level_ups():
            notes.append(f"Level up! You are now level {player.level}.")
            self.event_bus.publish(PlayerLeveledUp(from_level=before, to_level=player.level))
        if stress_raised and player.stress >= bt.STRESS_WARNING_LEVEL:
            notes.append(f"Stress is critical ({player.stress}). Cover your tracks.")
        ending = self.endings.resolve(self.world)
        if ending is not None:
            notes.append(f"ENDING: {ending.title}")
            notes.append(ending.summary)
        return notes

    # -- meta verbs -----------------------------------------------------------------

    @staticmethod
    def _info(command: Command, lines: List[str]) -> ActionOutcome:
        return ActionOutcome(verb=command.verb.value, status=OutcomeStatus.INFO, messages=lines)

    def _status(self, command: Command) -> ActionOutcome:
        view = self.status_view()
        lines = [
            f"{view.name}  level {view.level}  XP {view.experience}/{view.next_level_experience}",
            f"Health {view.health}/{view.max_health}  Stress {view.stress}  Money ${view.money}",
            f"Location {view.location}  Mode {view.mode}  Chapter {view.chapter}",
            f"Reputation {view.reputation}",
        ]
        return self._info(command, lines)

    def _inventory(self, command: Command) -> ActionOutcome:
        items = list(self.world.player.inventory)
        return self._info(command, items or ["Inventory is empty."])

    def _skills(self, command: Command) -> ActionOutcome:
        return self._info(command, [f"{name}: {level}" for name, level in self.skill_rows()])

    def _contacts(self, command: Command) -> ActionOutcome:
        lines = []
        for view in self.contact_views():
            rank = f" [{view.rank}]" if view.rank else ""
            lines.append(f"{view.name} ({view.handle}) trust {view.relationship}, {view.faction} {view.standing:+d}{rank}")
            if view.services:
                lines.append(f"  services: {', '.join(view.services)}")
        return self._info(command, lines or ["No contacts."])

    def _quest(self, command: Command) -> ActionOutcome:
        return self._info(command, self.tracker.describe(self.world))

    def _slot(self, command: Command) -> Optional[int]:
        raw = command.arg(0)
        if raw is None:
            return DEFAULT_SAVE_SLOT
        try:
            return int(raw)
        except ValueError:
            return None

    def _save(self, command: Command) -> ActionOutcome:
        slot = self._slot(command)
        if slot is None:
            return ActionOutcome(verb=command.verb.value, status=OutcomeStatus.BLOCKED, messages=["Save slot must be a number."])
        try:
            self.save_repo.save(slot, self.world)
        except SaveSlotError as exc:
            return ActionOutcome(verb=command.verb.value, status=OutcomeStatus.IO_ERROR, messages=[str(exc)], target=str(slot))
        return ActionOutcome(verb=command.verb.value, status=OutcomeStatus.SUCCESS, messages=[f"Game saved to slot {slot}."], target=str(slot))

    def _load(self, command: Command) -> ActionOutcome:
        slot = self._slot(command)
        if slot is None:
            return ActionOutcome(verb=command.verb.value, status=OutcomeStatus.BLOCKED, messages=["Save slot must be a number."])
        try:
            loaded = self.save_repo.load(slot)
        except SaveSlotError as exc:
            return ActionOutcome(
                verb=command.verb.value,
                status=OutcomeStatus.IO_ERROR,
                messages=[str(exc), "Current game left unchanged."],
                target=str(slot),
            )
        self.world = loaded
        return ActionOutcome(verb=command.verb.value, status=OutcomeStatus.SUCCESS, messages=[f"Loaded slot {slot}."], target=str(slot))

    def _quit(self, command: Command) -> ActionOutcome:
        return ActionOutcome(verb=command.verb.value, status=OutcomeStatus.INFO, messages=["Disconnecting. Stay paranoid."], quit=True)

    def _sandbox(self, command: Command) -> ActionOutcome:
        self.world.mode = GameMode.SANDBOX
        return self._info(command, ["Sandbox mode: explore freely, quest progress is paused."])

    def _story(self, command: Command) -> ActionOutcome:
        self.world.mode = GameMode.STORY
        quest = self.tracker.ensure_quest(self.world)
        lines = ["Story mode resumed."]
        if quest is not None:
            lines.append(f"Current quest: {quest.title}")
        return self._info(command, lines)

    # -- dialogue -------------------------------------------------------------------

    def talk_intent(self, character_id: str) -> DialogueView:
        return self.dialogue.start_conversation(self.world, character_id)

    def choose_dialogue_option_intent(self, option_id: str) -> DialogueStep:
        stress_before = self.world.player.stress
        step = self.dialogue.choose_option(self.world, option_id)
        if step.accepted:
            step.messages.extend(self._progress_notes(stress_raised=self.world.player.stress > stress_before))
        return step

    def leave_conversation_intent(self) -> bool:
        return self.dialogue.end_conversation(self.world)

    def talkable_characters(self) -> List[str]:
        return self.dialogue.characters()

    # -- views ----------------------------------------------------------------------

    def status_view(self) -> StatusView:
        player = self.world.player
        return StatusView(
            name=player.name,
            level=player.level,
            experience=player.experience,
            next_level_experience=player.next_level_experience(),
            health=player.health,
            max_health=player.max_health,
            stress=player.stress,
            money=player.money,
            location=player.current_location,
            connected_to=player.current_system,
            mode=self.world.mode.value,
            chapter=self.world.chapter,
            reputation=self.world.standing(bt.HACKER_COMMUNITY_FACTION),
            turn=self.world.turn,
        )

    def skill_rows(self) -> List[tuple[str, int]]:
        return sorted(self.world.player.skills.items())

    def contact_views(self) -> List[ContactView]:
        views = []
        for contact in self.world.contacts.values():
            faction = self.world.factions.get(str(contact.faction_id or ""))
            standing = self.world.standing(faction.id) if faction is not None else 0
            views.append(
                ContactView(
                    name=contact.name,
                    handle=contact.handle,
                    relationship=contact.relationship,
                    faction=faction.name if faction is not None else "Independent",
                    standing=standing,
                    rank=self.graph.rank(self.world, faction.id) if faction is not None else None,
                    services=self.graph.services_for(self.world, faction) if faction is not None else [],
                )
            )
        return views
