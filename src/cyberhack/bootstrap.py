from __future__ import annotations

import logging
import os
from typing import Optional

from cyberhack.application.services.action_resolver import ActionResolver
from cyberhack.application.services.chance import ChanceRoller
from cyberhack.application.services.dialogue_engine import DialogueEngine
from cyberhack.application.services.ending_service import EndingService
from cyberhack.application.services.event_bus import EventBus
from cyberhack.application.services.faction_graph import register_faction_graph_handlers
from cyberhack.application.services.game_session import GameSession
from cyberhack.application.services.host_generator import HostGenerator
from cyberhack.application.services.quest_tracker import register_quest_tracker_handlers
from cyberhack.application.services.world_factory import new_world, parse_mode
from cyberhack.domain.errors import SaveSlotError
from cyberhack.domain.repositories import SaveRepository
from cyberhack.infrastructure.content_loader import load_dialogue_library, load_endings, load_story_networks
from cyberhack.infrastructure.inmemory.faction_catalog import INITIAL_STANDINGS, default_factions
from cyberhack.infrastructure.persistence.connection import create_save_engine, create_session_factory
from cyberhack.infrastructure.persistence.save_repository import InMemorySaveRepository, SqlSaveRepository


_logger = logging.getLogger(__name__)


def _env_seed() -> Optional[int]:
    raw = os.getenv("CYBERHACK_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        _logger.warning("Ignoring non-numeric CYBERHACK_SEED=%r", raw)
        return None


def _build_save_repository(database_url: Optional[str] = None) -> SaveRepository:
    if os.getenv("CYBERHACK_SAVES_IN_MEMORY", "0").strip().lower() in {"1", "true", "yes"}:
        return InMemorySaveRepository()
    repo = SqlSaveRepository(create_session_factory(create_save_engine(database_url)))
    try:
        repo.ensure_schema()
    except SaveSlotError as exc:
        _logger.warning("Save database unavailable, saves will not persist: %s", exc)
        return InMemorySaveRepository()
    return repo


def create_game_session(
    *,
    seed: Optional[int] = None,
    roller: Optional[ChanceRoller] = None,
    save_repo: Optional[SaveRepository] = None,
    database_url: Optional[str] = None,
) -> GameSession:
    """Wire one playable session from environment settings and bundled content."""

    world_seed = seed if seed is not None else _env_seed()
    event_bus = EventBus()
    roller = roller or ChanceRoller(seed=world_seed)

    graph = register_faction_graph_handlers(event_bus=event_bus)
    tracker = register_quest_tracker_handlers(graph=graph, event_bus=event_bus)
    resolver = ActionResolver(roller, HostGenerator(load_story_networks()), event_bus=event_bus)
    dialogue = DialogueEngine(
        load_dialogue_library(
            os.getenv("CYBERHACK_DIALOGUE_PATH") or None,
            pack_url=os.getenv("CYBERHACK_CONTENT_PACK_URL") or None,
        ),
        graph,
        roller,
        event_bus=event_bus,
    )
    endings = EndingService(load_endings(), event_bus=event_bus)

    world = new_world(
        factions=default_factions(),
        standings=INITIAL_STANDINGS,
        seed=world_seed if world_seed is not None else roller.randint(1, 2**31 - 1),
        player_name=os.getenv("CYBERHACK_PLAYER_NAME", "Anonymous"),
        mode=parse_mode(os.getenv("CYBERHACK_START_MODE")),
    )
    _logger.info("New session seed=%s mode=%s", world.seed, world.mode.value)

    return GameSession(
        world,
        resolver=resolver,
        tracker=tracker,
        graph=graph,
        dialogue=dialogue,
        endings=endings,
        save_repo=save_repo or _build_save_repository(database_url),
        event_bus=event_bus,
    )
