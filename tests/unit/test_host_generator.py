import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cyberhack.application.services.host_generator import HostGenerator, normalize_range
from cyberhack.application.services.seed_policy import derive_seed
from cyberhack.domain.models.network import CompromiseStage
from cyberhack.infrastructure.content_loader import load_story_networks


def _fingerprint(network):
    return [
        (system.address, system.os, system.firewall_strength, sorted(system.files), [v.name for v in system.vulnerabilities])
        for system in network.systems.values()
    ]


class HostGeneratorTests(unittest.TestCase):
    def test_same_seed_and_range_give_same_hosts(self) -> None:
        generator = HostGenerator()
        first = generator.discover(world_seed=99, address_range="192.168.1.0/24")
        second = generator.discover(world_seed=99, address_range="192.168.1")
        self.assertEqual(_fingerprint(first), _fingerprint(second))
        self.assertEqual("192.168.1", first.address)

    def test_different_seeds_differ(self) -> None:
        generator = HostGenerator()
        prints = {str(_fingerprint(generator.discover(world_seed=seed, address_range="10.1.1"))) for seed in range(6)}
        self.assertGreater(len(prints), 1)

    def test_synthesized_hosts_start_scanned_with_base_processes(self) -> None:
        network = HostGenerator().discover(world_seed=3, address_range="172.16.0")
        for system in network.systems.values():
            self.assertEqual(CompromiseStage.SCANNED, system.stage)
            self.assertIn(1, system.processes)
            self.assertTrue(system.address.startswith("172.16.0."))

    def test_story_networks_come_from_bundled_content(self) -> None:
        generator = HostGenerator(load_story_networks())
        nuclear = generator.discover(world_seed=1, address_range="nuclear.gov")
        control = nuclear.systems["nuclear_control"]
        self.assertEqual("nuclear_control_system", control.processes[1234].name)
        self.assertEqual(9, nuclear.firewall_strength)

        nexus = generator.discover(world_seed=1, address_range="NEXUS.CORP")
        server = nexus.systems["nexus_server"]
        self.assertTrue(server.files["project_apocalypse.enc"].encrypted)
        self.assertGreaterEqual(max(v.severity for v in server.vulnerabilities), 8)

    def test_normalize_range(self) -> None:
        self.assertEqual("10.0.0", normalize_range("10.0.0.0/24"))
        self.assertEqual("10.0.0", normalize_range("10.0.0.7"))
        self.assertEqual("nexus.corp", normalize_range(" Nexus.Corp "))

    def test_derived_seed_ignores_key_order(self) -> None:
        self.assertEqual(
            derive_seed("scan", {"world_seed": 1, "range": "10.0.0"}),
            derive_seed("scan", {"range": "10.0.0", "world_seed": 1}),
        )
        self.assertNotEqual(derive_seed("scan", {"world_seed": 1}), derive_seed("scan", {"world_seed": 2}))


if __name__ == "__main__":
    unittest.main()
