import random
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cyberhack.application.services.action_resolver import connect_chance, exploit_chance
from cyberhack.application.services.chance import ChanceRoller, Roll, clamp_probability, resolve_chance
from cyberhack.domain.models.network import Network, System


class ResolveChanceTests(unittest.TestCase):
    def test_clamps_into_unit_interval(self) -> None:
        self.assertEqual(0.0, clamp_probability(-0.4))
        self.assertEqual(1.0, clamp_probability(1.7))
        self.assertEqual(1.0, resolve_chance(0.9, 80))
        self.assertEqual(0.0, resolve_chance(0.1, 0, 0.5))

    def test_skill_is_scaled_and_weighted(self) -> None:
        self.assertAlmostEqual(0.5, resolve_chance(0.2, 30))
        self.assertAlmostEqual(0.44, resolve_chance(0.2, 30, weight=0.8))

    def test_severity_nine_exploit_with_no_hacking_skill(self) -> None:
        self.assertAlmostEqual(0.15, exploit_chance(0, 9))

    def test_hard_firewall_uses_lower_connect_branch(self) -> None:
        system = System(address="10.0.0.5")
        self.assertAlmostEqual(0.6, connect_chance(Network(address="10.0.0", firewall_strength=9), system))
        self.assertAlmostEqual(0.8, connect_chance(Network(address="10.0.0", firewall_strength=5), system))

    def test_backdoored_host_always_connects(self) -> None:
        system = System(address="10.0.0.5", backdoor_installed=True)
        self.assertEqual(1.0, connect_chance(Network(address="10.0.0", firewall_strength=9), system))


class ChanceRollerTests(unittest.TestCase):
    def test_roll_succeeds_strictly_below_chance(self) -> None:
        self.assertTrue(Roll(chance=0.5, value=0.49).success)
        self.assertFalse(Roll(chance=0.5, value=0.5).success)
        self.assertFalse(Roll(chance=0.0, value=0.0).success)

    def test_seeded_rollers_are_reproducible(self) -> None:
        first = ChanceRoller(seed=42)
        second = ChanceRoller(seed=42)
        self.assertEqual([first.roll(0.5).value for _ in range(5)], [second.roll(0.5).value for _ in range(5)])

    def test_injected_rng_is_used(self) -> None:
        roller = ChanceRoller(random.Random(7))
        expected = random.Random(7).random()
        self.assertEqual(expected, roller.check(0.3, 10).value)


if __name__ == "__main__":
    unittest.main()
