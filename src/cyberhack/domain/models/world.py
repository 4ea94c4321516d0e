from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from cyberhack.domain.models.contact import Contact, default_contacts
from cyberhack.domain.models.dialogue import ConversationState
from cyberhack.domain.models.faction import Faction
from cyberhack.domain.models.network import Network, System
from cyberhack.domain.models.player import Player
from cyberhack.domain.models.quest import Quest


DEFAULT_PLAYER_ID = "player"
FIRST_CHAPTER = 1


class GameMode(str, Enum):
    STORY = "story"
    SANDBOX = "sandbox"


@dataclass
class WorldState:
    player: Player = field(default_factory=Player)
    seed: int = 0
    turn: int = 0
    mode: GameMode = GameMode.STORY
    networks: Dict[str, Network] = field(default_factory=dict)
    quest: Optional[Quest] = None
    completed_quest_ids: List[str] = field(default_factory=list)
    chapter: int = FIRST_CHAPTER
    factions: Dict[str, Faction] = field(default_factory=dict)
    standings: Dict[str, int] = field(default_factory=dict)
    contacts: Dict[str, Contact] = field(default_factory=default_contacts)
    story_flags: Dict[str, bool] = field(default_factory=dict)
    conversations: Dict[str, ConversationState] = field(default_factory=dict)
    met_characters: List[str] = field(default_factory=list)
    ending_id: Optional[str] = None

    def find_system(self, address: str) -> Optional[tuple[Network, System]]:
        key = str(address or "").strip()
        if not key:
            return None
        for network in self.networks.values():
            system = network.systems.get(key)
            if system is not None:
                return network, system
        return None

    def connected_system(self) -> Optional[tuple[Network, System]]:
        if self.player.current_system is None:
            return None
        return self.find_system(self.player.current_system)

    def standing(self, faction_id: str) -> int:
        return int(self.standings.get(str(faction_id), 0))

    def flag(self, name: str) -> bool:
        return bool(self.story_flags.get(str(name or "").strip().lower(), False))

    def all_systems(self) -> List[System]:
        return [system for network in self.networks.values() for system in network.systems.values()]
