import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cyberhack.application.services.world_conditions import (
    failed_requirements,
    is_known_requirement,
    requirement_met,
    requirement_reason,
)
from cyberhack.application.services.world_factory import new_world
from cyberhack.domain.models.world import GameMode
from cyberhack.infrastructure.inmemory.faction_catalog import INITIAL_STANDINGS, default_factions


class RequirementTests(unittest.TestCase):
    def setUp(self) -> None:
        self.world = new_world(factions=default_factions(), standings=INITIAL_STANDINGS)

    def test_player_comparisons(self) -> None:
        self.assertTrue(requirement_met(self.world, "money >= 1000"))
        self.assertFalse(requirement_met(self.world, "money > 1000"))
        self.assertTrue(requirement_met(self.world, "hacking_skill >= 10"))
        self.assertTrue(requirement_met(self.world, "skill:Social Engineering == 5"))
        self.assertTrue(requirement_met(self.world, "chapter == 1"))

    def test_standing_and_reputation_read_the_graph_store(self) -> None:
        self.assertTrue(requirement_met(self.world, "standing:Cyber Freedom >= 50"))
        self.assertTrue(requirement_met(self.world, "reputation == 25"))
        self.world.standings["UndergroundHackers"] = 60
        self.assertTrue(requirement_met(self.world, "reputation >= 60"))

    def test_relationship_is_per_character(self) -> None:
        self.assertTrue(requirement_met(self.world, "relationship >= 25", character_id="shadow"))
        self.assertFalse(requirement_met(self.world, "relationship >= 25", character_id="ghost"))
        self.assertFalse(requirement_met(self.world, "trust_level > 0", character_id="stranger"))

    def test_predicates_and_negation(self) -> None:
        self.assertTrue(requirement_met(self.world, "first_meeting", character_id="shadow"))
        self.world.met_characters.append("shadow")
        self.assertFalse(requirement_met(self.world, "first_meeting", character_id="shadow"))
        self.assertTrue(requirement_met(self.world, "!flag:timer_disabled"))
        self.world.story_flags["timer_disabled"] = True
        self.assertTrue(requirement_met(self.world, "flag:timer_disabled"))
        self.world.player.inventory.append("Backdoor to nexus_server")
        self.assertTrue(requirement_met(self.world, "has_item:backdoor"))
        self.world.mode = GameMode.SANDBOX
        self.assertTrue(requirement_met(self.world, "mode:sandbox"))

    def test_unknown_tokens_are_unmet(self) -> None:
        self.assertFalse(requirement_met(self.world, "moon_phase == full"))
        self.assertFalse(requirement_met(self.world, "charisma >= 1"))
        self.assertFalse(is_known_requirement("charisma >= 1"))
        self.assertTrue(is_known_requirement("!quest_completed:mission_start"))

    def test_failed_requirements_lists_each_unmet_token(self) -> None:
        unmet = failed_requirements(self.world, ["money >= 1", "level >= 5", "flag:x"])
        self.assertEqual(["level >= 5", "flag:x"], unmet)
        self.assertEqual("Requires level >= 5.", requirement_reason("level >= 5"))


if __name__ == "__main__":
    unittest.main()
