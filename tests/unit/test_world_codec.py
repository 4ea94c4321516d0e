import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cyberhack.application.services.world_factory import new_world
from cyberhack.domain.models.contact import default_contacts
from cyberhack.infrastructure.inmemory.faction_catalog import INITIAL_STANDINGS, default_factions
from cyberhack.infrastructure.world_codec import WorldDecodeError, decode_world, encode_world


def _payload() -> dict:
    world = new_world(factions=default_factions(), standings=INITIAL_STANDINGS, seed=3)
    world.contacts = default_contacts()
    return encode_world(world)


class WorldCodecTests(unittest.TestCase):
    def test_out_of_range_standings_are_clamped_on_load(self) -> None:
        payload = _payload()
        payload["standings"]["NEXUS"] = 500
        payload["standings"]["CorporateSecurity"] = -250

        world = decode_world(payload)

        self.assertEqual(100, world.standing("NEXUS"))
        self.assertEqual(-100, world.standing("CorporateSecurity"))
        self.assertEqual(50, world.standing("CyberFreedom"))

    def test_out_of_range_relationships_are_clamped_on_load(self) -> None:
        payload = _payload()
        payload["contacts"][0]["relationship"] = 180

        world = decode_world(payload)

        contact_id = payload["contacts"][0]["id"]
        self.assertEqual(100, world.contacts[contact_id].relationship)

    def test_non_numeric_standing_is_rejected(self) -> None:
        payload = _payload()
        payload["standings"]["NEXUS"] = "hostile"
        with self.assertRaises(WorldDecodeError):
            decode_world(payload)


if __name__ == "__main__":
    unittest.main()
