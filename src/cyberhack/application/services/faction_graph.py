from __future__ import annotations

import logging
from typing import Dict, List, Optional

from cyberhack.application.services.event_bus import EventBus
from cyberhack.domain.events import ActionResolved, FactionStandingChanged
from cyberhack.domain.models.faction import Faction, clamp_standing, faction_rank, standing_threshold
from cyberhack.domain.models.world import WorldState


_logger = logging.getLogger(__name__)


def _truncating_div(value: int, divisor: int) -> int:
    return int(value / divisor)


def _squash(name: str) -> str:
    return "".join(ch for ch in str(name or "").lower() if ch.isalnum())


def resolve_faction_id(world: WorldState, name: str) -> str:
    """Match ``name`` against faction ids and display names, ignoring case and spacing."""

    raw = str(name or "").strip()
    if raw in world.factions:
        return raw
    wanted = _squash(raw)
    for faction_id, faction in world.factions.items():
        if _squash(faction_id) == wanted or _squash(faction.name) == wanted:
            return faction_id
    return raw


class FactionReputationGraph:
    """Sole writer of ``WorldState.standings``.

    A direct change spreads one hop: allies receive delta/3 and enemies -delta/2,
    both truncated toward zero, and every touched standing is clamped to [-100, 100].
    """

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self.event_bus = event_bus

    def register_handlers(self) -> None:
        if self.event_bus is None:
            return
        self.event_bus.subscribe(ActionResolved, self.on_action_resolved, priority=40)

    def on_action_resolved(self, event: ActionResolved) -> None:
        outcome = event.outcome
        for faction_name, delta in list(outcome.standing_deltas.items()):
            applied = self.update_standing(event.world, faction_name, int(delta), reason=outcome.verb)
            outcome.notes.extend(self.describe_changes(event.world, applied))

    def update_standing(self, world: WorldState, faction_name: str, delta: int, *, reason: str = "") -> Dict[str, int]:
        """Apply ``delta`` to a faction and propagate it. Returns the applied change per faction."""

        faction_id = resolve_faction_id(world, faction_name)
        applied: Dict[str, int] = {}
        change = self._apply(world, faction_id, int(delta), reason=reason, source=None)
        applied[faction_id] = change

        faction = world.factions.get(faction_id)
        if faction is None:
            _logger.debug("Standing change for unlisted faction %s has no propagation edges", faction_id)
            return applied

        ally_delta = _truncating_div(int(delta), 3)
        enemy_delta = _truncating_div(-int(delta), 2)
        for ally_name in faction.allies:
            ally_id = resolve_faction_id(world, ally_name)
            if ally_id != faction_id and ally_delta:
                applied[ally_id] = applied.get(ally_id, 0) + self._apply(world, ally_id, ally_delta, reason=reason, source=faction_id)
        for enemy_name in faction.enemies:
            enemy_id = resolve_faction_id(world, enemy_name)
            if enemy_id != faction_id and enemy_delta:
                applied[enemy_id] = applied.get(enemy_id, 0) + self._apply(world, enemy_id, enemy_delta, reason=reason, source=faction_id)
        return applied

    def _apply(self, world: WorldState, faction_id: str, delta: int, *, reason: str, source: Optional[str]) -> int:
        before = int(world.standings.setdefault(faction_id, 0))
        after = clamp_standing(before + int(delta))
        world.standings[faction_id] = after
        if self.event_bus is not None and after != before:
            self.event_bus.publish(
                FactionStandingChanged(
                    faction_id=faction_id,
                    delta=after - before,
                    standing_after=after,
                    reason=str(reason or ""),
                    propagated_from=source,
                )
            )
        return after - before

    @staticmethod
    def describe_changes(world: WorldState, applied: Dict[str, int]) -> List[str]:
        lines: List[str] = []
        for faction_id, change in applied.items():
            if not change:
                continue
            faction = world.factions.get(faction_id)
            label = faction.name if faction is not None else faction_id
            lines.append(f"{label} standing {change:+d} (now {world.standing(faction_id)})")
        return lines

    @staticmethod
    def rank(world: WorldState, faction_id: str) -> Optional[str]:
        return faction_rank(world.standing(faction_id))

    @staticmethod
    def attitude(world: WorldState, faction_id: str) -> str:
        return standing_threshold(world.standing(faction_id)).value

    @staticmethod
    def services_for(world: WorldState, faction: Faction) -> List[str]:
        return faction.available_services(world.standing(faction.id))


def register_faction_graph_handlers(*, event_bus: EventBus) -> FactionReputationGraph:
    graph = FactionReputationGraph(event_bus=event_bus)
    graph.register_handlers()
    return graph
