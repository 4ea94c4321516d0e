from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from cyberhack.application.dtos import DialogueOptionView, DialogueStep, DialogueView
from cyberhack.application.services.chance import ChanceRoller
from cyberhack.application.services.event_bus import EventBus
from cyberhack.application.services.faction_graph import FactionReputationGraph
from cyberhack.application.services.world_conditions import failed_requirements, requirement_reason
from cyberhack.domain.errors import DialogueError
from cyberhack.domain.events import DialogueOptionChosen
from cyberhack.domain.models.contact import Contact
from cyberhack.domain.models.dialogue import (
    ConversationState,
    DialogueEffect,
    DialogueNode,
    DialogueOption,
    DialogueTree,
    SkillCheck,
)
from cyberhack.domain.models.world import DEFAULT_PLAYER_ID, WorldState


_logger = logging.getLogger(__name__)

SKILL_CHECK_BASE = 0.5
CRITICAL_SUCCESS_ROLL = 0.05
CRITICAL_FAILURE_ROLL = 0.95


class DialogueEngine:
    def __init__(
        self,
        trees: Mapping[str, DialogueTree],
        graph: FactionReputationGraph,
        roller: ChanceRoller,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.trees: Dict[str, DialogueTree] = {str(key).lower(): tree for key, tree in trees.items()}
        self.graph = graph
        self.roller = roller
        self.event_bus = event_bus

    def characters(self) -> List[str]:
        return sorted(self.trees)

    def _tree(self, character_id: str) -> DialogueTree:
        tree = self.trees.get(str(character_id or "").strip().lower())
        if tree is None:
            raise DialogueError(f"Nobody called {character_id} is answering.")
        return tree

    # -- traversal ------------------------------------------------------------------

    def node_text(self, world: WorldState, tree: DialogueTree, node: DialogueNode) -> str:
        for variant in node.variants:
            if not failed_requirements(world, variant.requires, character_id=tree.character_id):
                return variant.text
        return node.text

    def available_options(self, world: WorldState, tree: DialogueTree, node: DialogueNode) -> List[DialogueOption]:
        return [
            option
            for option in node.options
            if not failed_requirements(world, option.requires, character_id=tree.character_id)
        ]

    def _view(self, world: WorldState, tree: DialogueTree, node: DialogueNode) -> DialogueView:
        options = self.available_options(world, tree, node)
        return DialogueView(
            character_id=tree.character_id,
            speaker=node.speaker,
            node_id=node.id,
            text=self.node_text(world, tree, node),
            options=[
                DialogueOptionView(
                    id=option.id,
                    text=option.text,
                    skill=option.skill_check.skill if option.skill_check else None,
                    difficulty=option.skill_check.difficulty if option.skill_check else None,
                )
                for option in options
            ],
            ended=not node.options,
        )

    def start_conversation(self, world: WorldState, character_id: str, *, player_id: str = DEFAULT_PLAYER_ID) -> DialogueView:
        tree = self._tree(character_id)
        root = tree.nodes[tree.root]
        world.conversations[player_id] = ConversationState(character_id=tree.character_id, node_id=root.id)
        view = self._view(world, tree, root)
        self._mark_met(world, tree)
        if view.ended:
            self.end_conversation(world, player_id=player_id)
        return view

    def current_view(self, world: WorldState, *, player_id: str = DEFAULT_PLAYER_ID) -> Optional[DialogueView]:
        state = world.conversations.get(player_id)
        if state is None:
            return None
        tree = self._tree(state.character_id)
        return self._view(world, tree, tree.nodes[state.node_id])

    def end_conversation(self, world: WorldState, *, player_id: str = DEFAULT_PLAYER_ID) -> bool:
        return world.conversations.pop(player_id, None) is not None

    @staticmethod
    def _mark_met(world: WorldState, tree: DialogueTree) -> None:
        if tree.character_id not in world.met_characters:
            world.met_characters.append(tree.character_id)
        contact = world.contacts.get(tree.character_id)
        if contact is None:
            contact = Contact(id=tree.character_id, name=tree.name, handle=tree.character_id, faction_id=tree.faction_id)
            world.contacts[tree.character_id] = contact
        contact.met = True

    # -- choices --------------------------------------------------------------------

    def choose_option(self, world: WorldState, option_id: str, *, player_id: str = DEFAULT_PLAYER_ID) -> DialogueStep:
        state = world.conversations.get(player_id)
        if state is None:
            return DialogueStep(accepted=False, reason="No active conversation.")
        tree = self._tree(state.character_id)
        node = tree.nodes[state.node_id]
        option = node.option(option_id)
        if option is None:
            return DialogueStep(accepted=False, reason="That is not one of the options.")

        unmet = failed_requirements(world, option.requires, character_id=tree.character_id)
        if unmet:
            return DialogueStep(accepted=False, reason=requirement_reason(unmet[0]))
        problem = self._effect_problem(world, option.effects)
        if problem:
            return DialogueStep(accepted=False, reason=problem)

        step = DialogueStep(accepted=True)
        next_node = option.target_node
        if option.skill_check is not None:
            next_node = self._skill_check(world, option.skill_check, step)

        self._apply(world, tree, option, step)
        state.history.append(option.id)

        if next_node is None or next_node not in tree.nodes:
            self.end_conversation(world, player_id=player_id)
        else:
            state.node_id = next_node
            step.view = self._view(world, tree, tree.nodes[next_node])
            if step.view.ended:
                self.end_conversation(world, player_id=player_id)

        if self.event_bus is not None:
            self.event_bus.publish(
                DialogueOptionChosen(
                    character_id=tree.character_id,
                    option_id=option.id,
                    node_after=next_node,
                    skill_check_passed=step.check_passed,
                )
            )
        return step

    def _skill_check(self, world: WorldState, check: SkillCheck, step: DialogueStep) -> str:
        roll = self.roller.check(SKILL_CHECK_BASE, world.player.skill(check.skill), int(check.difficulty) / 100.0)
        step.chance = roll.chance
        step.check_passed = roll.success
        if roll.success and roll.value <= CRITICAL_SUCCESS_ROLL:
            step.critical = True
            step.messages.append(f"Critical success on {check.skill}.")
            return check.critical_success_node or check.success_node
        if not roll.success and roll.value >= CRITICAL_FAILURE_ROLL:
            step.critical = True
            step.messages.append(f"Critical failure on {check.skill}.")
            return check.critical_failure_node or check.failure_node
        step.messages.append(f"{check.skill} check {'passed' if roll.success else 'failed'}.")
        return check.success_node if roll.success else check.failure_node

    @staticmethod
    def _effect_problem(world: WorldState, effects: tuple[DialogueEffect, ...]) -> str:
        """Dry run of resource transfers so the whole effect list applies or none of it does."""

        money = int(world.player.money)
        inventory = list(world.player.inventory)
        for effect in effects:
            if effect.kind == "take_money":
                if money < effect.amount:
                    return f"You need ${effect.amount} for that."
                money -= effect.amount
            elif effect.kind == "give_money":
                money += effect.amount
            elif effect.kind == "take_item":
                held = next((item for item in inventory if effect.value.lower() in item.lower()), None)
                if held is None:
                    return f"You need {effect.value} for that."
                inventory.remove(held)
            elif effect.kind == "give_item":
                inventory.append(effect.value)
        return ""

    def _apply(self, world: WorldState, tree: DialogueTree, option: DialogueOption, step: DialogueStep) -> None:
        player = world.player
        if option.relationship_delta:
            contact = world.contacts.get(tree.character_id)
            if contact is not None:
                change = contact.adjust_relationship(option.relationship_delta)
                if change:
                    step.messages.append(f"{contact.name} relationship {change:+d}")
        for faction_id, delta in option.standing_deltas:
            applied = self.graph.update_standing(world, faction_id, delta, reason=f"dialogue:{tree.character_id}")
            step.messages.extend(self.graph.describe_changes(world, applied))
        for effect in option.effects:
            if effect.kind == "give_money":
                player.money += effect.amount
                step.messages.append(f"+${effect.amount}")
            elif effect.kind == "take_money":
                player.money -= effect.amount
                step.messages.append(f"-${effect.amount}")
            elif effect.kind == "give_item":
                player.inventory.append(effect.value)
                step.messages.append(f"Received {effect.value}")
            elif effect.kind == "take_item":
                held = player.find_item(effect.value)
                if held is not None:
                    player.inventory.remove(held)
                    step.messages.append(f"Handed over {held}")
            elif effect.kind == "set_flag":
                world.story_flags[effect.value.strip().lower()] = True
            elif effect.kind == "clear_flag":
                world.story_flags.pop(effect.value.strip().lower(), None)
            elif effect.kind == "stress":
                player.add_stress(effect.amount)
            elif effect.kind == "experience":
                player.experience += effect.amount
                step.messages.append(f"+{effect.amount} XP")
            else:
                _logger.warning("Ignoring unknown dialogue effect %s", effect.kind)
