from __future__ import annotations

import copy
from typing import Mapping, Optional

from cyberhack.application.services.chapter_quests import quest_for_chapter
from cyberhack.domain.models.faction import Faction, clamp_standing
from cyberhack.domain.models.player import Player
from cyberhack.domain.models.world import GameMode, WorldState


def new_world(
    *,
    factions: Mapping[str, Faction],
    standings: Mapping[str, int],
    seed: int = 0,
    player_name: str = "Anonymous",
    mode: GameMode = GameMode.STORY,
    chapter: int = 1,
) -> WorldState:
    world = WorldState(
        player=Player(name=str(player_name or "Anonymous").strip() or "Anonymous"),
        seed=int(seed),
        mode=GameMode(mode),
        chapter=int(chapter),
        factions={key: copy.deepcopy(value) for key, value in factions.items()},
        standings={str(key): clamp_standing(value) for key, value in standings.items()},
    )
    world.quest = quest_for_chapter(world.chapter)
    return world


def parse_mode(value: Optional[str]) -> GameMode:
    token = str(value or "").strip().lower()
    if token == GameMode.SANDBOX.value:
        return GameMode.SANDBOX
    return GameMode.STORY
