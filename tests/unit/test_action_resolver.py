import random
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cyberhack.application.commands import parse_command
from cyberhack.application.services.action_resolver import ActionResolver
from cyberhack.application.services.chance import ChanceRoller
from cyberhack.application.services.event_bus import EventBus
from cyberhack.application.services.host_generator import HostGenerator
from cyberhack.domain.events import IntrusionDetected
from cyberhack.domain.models.network import CompromiseStage, File, Network, Process, System, Vulnerability
from cyberhack.domain.models.world import WorldState
from cyberhack.domain.outcomes import OutcomeStatus
from cyberhack.infrastructure.content_loader import load_story_networks
from cyberhack.infrastructure.inmemory.faction_catalog import INITIAL_STANDINGS, default_factions


class ScriptedRandom(random.Random):
    def __init__(self, values) -> None:
        super().__init__(0)
        self.values = list(values)

    def random(self) -> float:
        return self.values.pop(0) if self.values else 0.0


def _world() -> WorldState:
    target = System(
        address="10.0.0.5",
        vulnerabilities=[
            Vulnerability(name="CVE-2017-0144", severity=9),
            Vulnerability(name="Weak Passwords", severity=5),
        ],
        files={
            "notes.txt": File(name="notes.txt", content="hello"),
            "project_apocalypse.enc": File(name="project_apocalypse.enc", content="launch override", encrypted=True, password="s3cret"),
        },
        processes={
            1234: Process(pid=1234, name="nuclear_control_system"),
            2456: Process(pid=2456, name="intrusion_detector"),
        },
    )
    neighbour = System(address="10.0.0.6", intrusion_detection=True)
    network = Network(address="10.0.0", firewall_strength=9, intrusion_detection=False, systems={
        target.address: target,
        neighbour.address: neighbour,
    })
    return WorldState(
        seed=1,
        networks={network.address: network},
        factions=default_factions(),
        standings=dict(INITIAL_STANDINGS),
    )


def _resolver(values, event_bus=None) -> ActionResolver:
    return ActionResolver(ChanceRoller(ScriptedRandom(values)), HostGenerator(load_story_networks()), event_bus=event_bus)


def _attach(world: WorldState, stage: CompromiseStage = CompromiseStage.CONNECTED) -> System:
    system = world.networks["10.0.0"].systems["10.0.0.5"]
    system.advance_to(stage)
    world.player.current_system = system.address
    world.player.current_location = f"{system.address}:/home/user"
    return system


class ConnectTests(unittest.TestCase):
    def test_hard_firewall_connect_fails_on_roll_between_branches(self) -> None:
        world = _world()
        outcome = _resolver([0.7]).resolve(world, parse_command("connect 10.0.0.5"))

        self.assertEqual(OutcomeStatus.FAILED, outcome.status)
        self.assertAlmostEqual(0.6, outcome.chance)
        self.assertIsNone(world.player.current_system)
        self.assertFalse(outcome.detected)
        self.assertEqual(0, world.networks["10.0.0"].systems["10.0.0.5"].lockout_until_turn)

    def test_successful_connect_moves_player_and_advances_stage(self) -> None:
        world = _world()
        outcome = _resolver([0.1]).resolve(world, parse_command("connect 10.0.0.5"))

        self.assertEqual(OutcomeStatus.SUCCESS, outcome.status)
        self.assertEqual("10.0.0.5", world.player.current_system)
        self.assertEqual(CompromiseStage.CONNECTED, world.networks["10.0.0"].systems["10.0.0.5"].stage)
        self.assertEqual(15, outcome.experience_delta)

    def test_detected_connect_failure_adds_stress_and_lockout(self) -> None:
        world = _world()
        world.turn = 3
        bus = EventBus()
        seen = []
        bus.subscribe(IntrusionDetected, seen.append)
        resolver = _resolver([0.99], event_bus=bus)

        outcome = resolver.resolve(world, parse_command("connect 10.0.0.6"))

        self.assertTrue(outcome.detected)
        self.assertEqual(10, world.player.stress)
        self.assertEqual(5, world.networks["10.0.0"].systems["10.0.0.6"].lockout_until_turn)
        self.assertEqual(1, len(seen))

        retry = resolver.resolve(world, parse_command("connect 10.0.0.6"))
        self.assertEqual(OutcomeStatus.BLOCKED, retry.status)

    def test_unknown_host_and_double_connect_are_refused(self) -> None:
        world = _world()
        resolver = _resolver([0.0])
        self.assertEqual(OutcomeStatus.NOT_FOUND, resolver.resolve(world, parse_command("connect 1.2.3.4")).status)
        _attach(world)
        self.assertEqual(OutcomeStatus.BLOCKED, resolver.resolve(world, parse_command("connect 10.0.0.6")).status)

    def test_missing_argument_reports_usage(self) -> None:
        outcome = _resolver([]).resolve(_world(), parse_command("connect"))
        self.assertEqual(OutcomeStatus.BLOCKED, outcome.status)
        self.assertIn("Usage: connect <host>", outcome.messages[0])


class CompromiseLadderTests(unittest.TestCase):
    def test_exploit_requires_connection(self) -> None:
        outcome = _resolver([0.0]).resolve(_world(), parse_command("exploit CVE-2017-0144"))
        self.assertEqual(OutcomeStatus.BLOCKED, outcome.status)

    def test_high_severity_exploit_grants_admin(self) -> None:
        world = _world()
        system = _attach(world)
        outcome = _resolver([0.1]).resolve(world, parse_command("exploit CVE-2017-0144"))

        self.assertEqual(OutcomeStatus.SUCCESS, outcome.status)
        self.assertAlmostEqual(0.25, outcome.chance)
        self.assertTrue(system.admin_access)
        self.assertEqual(15, world.player.skill("Hacking"))

    def test_low_severity_exploit_only_compromises(self) -> None:
        world = _world()
        system = _attach(world)
        _resolver([0.0]).resolve(world, parse_command("exploit weak"))
        self.assertTrue(system.is_compromised)
        self.assertFalse(system.admin_access)

    def test_failed_exploit_never_regresses_stage(self) -> None:
        world = _world()
        system = _attach(world, CompromiseStage.ADMIN_ACCESS)
        outcome = _resolver([0.99]).resolve(world, parse_command("exploit CVE-2017-0144"))
        self.assertEqual(OutcomeStatus.FAILED, outcome.status)
        self.assertEqual(CompromiseStage.ADMIN_ACCESS, system.stage)

    def test_backdoor_needs_compromise_first(self) -> None:
        world = _world()
        _attach(world)
        outcome = _resolver([0.0]).resolve(world, parse_command("backdoor"))
        self.assertEqual(OutcomeStatus.BLOCKED, outcome.status)

    def test_rootkit_blinds_network_and_target_only(self) -> None:
        world = _world()
        network = world.networks["10.0.0"]
        network.intrusion_detection = True
        system = _attach(world, CompromiseStage.ADMIN_ACCESS)
        system.intrusion_detection = True
        neighbour = network.systems["10.0.0.6"]

        outcome = _resolver([0.0]).resolve(world, parse_command("rootkit"))

        self.assertEqual(OutcomeStatus.SUCCESS, outcome.status)
        self.assertFalse(network.intrusion_detection)
        self.assertFalse(system.intrusion_detection)
        self.assertTrue(system.rootkit_installed)
        self.assertTrue(neighbour.intrusion_detection)
        self.assertEqual(CompromiseStage.SCANNED, neighbour.stage)

    def test_standing_changes_are_recorded_not_applied(self) -> None:
        world = _world()
        _attach(world, CompromiseStage.ADMIN_ACCESS)
        outcome = _resolver([0.0]).resolve(world, parse_command("rootkit"))
        self.assertEqual({"UndergroundHackers": 25}, outcome.standing_deltas)
        self.assertEqual(25, world.standing("UndergroundHackers"))


class PostExploitationTests(unittest.TestCase):
    def test_decrypt_with_correct_key_sets_story_flag(self) -> None:
        world = _world()
        _attach(world)
        outcome = _resolver([]).resolve(world, parse_command("decrypt project_apocalypse.enc s3cret"))
        self.assertEqual(OutcomeStatus.SUCCESS, outcome.status)
        self.assertEqual(1.0, outcome.chance)
        self.assertTrue(world.flag("project_apocalypse_decrypted"))

    def test_decrypt_with_wrong_key_fails_without_stress(self) -> None:
        world = _world()
        _attach(world)
        outcome = _resolver([]).resolve(world, parse_command("decrypt project_apocalypse.enc nope"))
        self.assertEqual(OutcomeStatus.FAILED, outcome.status)
        self.assertEqual(0, world.player.stress)

    def test_cat_refuses_encrypted_file(self) -> None:
        world = _world()
        _attach(world)
        outcome = _resolver([]).resolve(world, parse_command("cat project_apocalypse.enc"))
        self.assertEqual(OutcomeStatus.BLOCKED, outcome.status)

    def test_kill_launch_process_sets_flag_and_standing(self) -> None:
        world = _world()
        system = _attach(world, CompromiseStage.ADMIN_ACCESS)
        outcome = _resolver([0.0]).resolve(world, parse_command("kill 1234"))

        self.assertEqual(OutcomeStatus.SUCCESS, outcome.status)
        self.assertNotIn(1234, system.processes)
        self.assertTrue(world.flag("nuclear_control_disabled"))
        self.assertEqual(50, outcome.standing_deltas["UndergroundHackers"])
        self.assertEqual("1234", outcome.target)

    def test_kill_needs_admin_and_numeric_pid(self) -> None:
        world = _world()
        _attach(world, CompromiseStage.COMPROMISED)
        self.assertEqual(OutcomeStatus.BLOCKED, _resolver([]).resolve(world, parse_command("kill 1234")).status)
        _attach(world, CompromiseStage.ADMIN_ACCESS)
        self.assertEqual(OutcomeStatus.BLOCKED, _resolver([]).resolve(world, parse_command("kill abc")).status)
        self.assertEqual(OutcomeStatus.NOT_FOUND, _resolver([]).resolve(world, parse_command("kill 99")).status)

    def test_wiped_file_can_be_recovered(self) -> None:
        world = _world()
        system = _attach(world)
        world.player.skills["Forensics"] = 100
        resolver = _resolver([0.0, 0.0])

        resolver.resolve(world, parse_command("wipe notes.txt"))
        self.assertNotIn("notes.txt", system.files)
        resolver.resolve(world, parse_command("recover notes.txt"))
        self.assertIn("notes.txt", system.files)

    def test_stress_is_clamped_at_maximum(self) -> None:
        world = _world()
        world.player.stress = 95
        outcome = _resolver([0.99]).resolve(world, parse_command("connect 10.0.0.6"))
        self.assertEqual(100, world.player.stress)
        self.assertEqual(5, outcome.stress_delta)

    def test_meta_verbs_are_not_hacking_actions(self) -> None:
        outcome = _resolver([]).resolve(_world(), parse_command("status"))
        self.assertEqual(OutcomeStatus.REJECTED, outcome.status)


class ScanTests(unittest.TestCase):
    def test_scanning_story_range_reveals_its_hosts(self) -> None:
        world = _world()
        outcome = _resolver([]).resolve(world, parse_command("scan nexus.corp"))
        self.assertEqual("nexus.corp", outcome.network_address)
        self.assertIsNotNone(world.find_system("nexus_server"))

    def test_rescan_keeps_existing_host_state(self) -> None:
        world = _world()
        resolver = _resolver([])
        resolver.resolve(world, parse_command("scan nexus.corp"))
        _, server = world.find_system("nexus_server")
        server.advance_to(CompromiseStage.COMPROMISED)
        resolver.resolve(world, parse_command("scan nexus.corp"))
        self.assertTrue(world.find_system("nexus_server")[1].is_compromised)


if __name__ == "__main__":
    unittest.main()
