import random
import sys
import tempfile
from pathlib import Path
import unittest

from sqlalchemy import text

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cyberhack.application.commands import parse_command
from cyberhack.application.services.action_resolver import ActionResolver
from cyberhack.application.services.chance import ChanceRoller
from cyberhack.application.services.host_generator import HostGenerator
from cyberhack.application.services.world_factory import new_world
from cyberhack.bootstrap import create_game_session
from cyberhack.domain.errors import SaveSlotError
from cyberhack.domain.models.network import CompromiseStage
from cyberhack.domain.outcomes import OutcomeStatus
from cyberhack.infrastructure.content_loader import load_story_networks
from cyberhack.infrastructure.inmemory.faction_catalog import INITIAL_STANDINGS, default_factions
from cyberhack.infrastructure.persistence.connection import create_save_engine, create_session_factory
from cyberhack.infrastructure.persistence.save_repository import SqlSaveRepository


def _repo() -> SqlSaveRepository:
    return SqlSaveRepository(create_session_factory(create_save_engine("sqlite://")))


def _played_world():
    world = new_world(factions=default_factions(), standings=INITIAL_STANDINGS, seed=21, player_name="zero_cool")
    resolver = ActionResolver(ChanceRoller(random.Random(0)), HostGenerator(load_story_networks()))
    resolver.resolve(world, parse_command("scan nexus.corp"))
    _, server = world.find_system("nexus_server")
    server.advance_to(CompromiseStage.ADMIN_ACCESS)
    server.processes.pop(456, None)
    world.player.current_system = "nexus_server"
    world.player.inventory.append("Backdoor to nexus_server")
    world.story_flags["nexus_breached"] = True
    world.met_characters.append("shadow")
    world.quest.objectives[0].completed = True
    world.turn = 17
    return world


class SqlSaveRepositoryTests(unittest.TestCase):
    def test_round_trip_preserves_world_state(self) -> None:
        repo = _repo()
        world = _played_world()
        repo.save(1, world)

        loaded = repo.load(1)

        self.assertIsNot(world, loaded)
        self.assertEqual("zero_cool", loaded.player.name)
        self.assertEqual(17, loaded.turn)
        _, server = loaded.find_system("nexus_server")
        self.assertEqual(CompromiseStage.ADMIN_ACCESS, server.stage)
        self.assertNotIn(456, server.processes)
        self.assertTrue(server.files["project_apocalypse.enc"].encrypted)
        self.assertTrue(loaded.flag("nexus_breached"))
        self.assertTrue(loaded.quest.objectives[0].completed)
        self.assertEqual(world.standings, loaded.standings)
        self.assertEqual(["UndergroundHackers", "AcademicConsortium"], loaded.factions["CyberFreedom"].allies)
        self.assertEqual(dict(world.quest.reward.standings), dict(loaded.quest.reward.standings))

    def test_saving_twice_overwrites_slot(self) -> None:
        repo = _repo()
        world = _played_world()
        repo.save(3, world)
        world.player.money = 77
        repo.save(3, world)
        self.assertEqual([3], repo.list_slots())
        self.assertEqual(77, repo.load(3).player.money)

    def test_missing_slot_raises(self) -> None:
        with self.assertRaises(SaveSlotError) as ctx:
            _repo().load(4)
        self.assertEqual(4, ctx.exception.slot)

    def test_corrupt_payload_raises(self) -> None:
        repo = _repo()
        repo.save(1, _played_world())
        with repo.SessionLocal.begin() as session:
            session.execute(text("UPDATE save_slot SET payload = :payload WHERE slot = 1"), {"payload": "{not json"})
        with self.assertRaises(SaveSlotError):
            repo.load(1)

        with repo.SessionLocal.begin() as session:
            session.execute(text("UPDATE save_slot SET payload = :payload WHERE slot = 1"), {"payload": '{"format_version": 99}'})
        with self.assertRaises(SaveSlotError):
            repo.load(1)

    def test_delete(self) -> None:
        repo = _repo()
        repo.save(2, _played_world())
        self.assertTrue(repo.delete(2))
        self.assertFalse(repo.delete(2))
        self.assertEqual([], repo.list_slots())

    def test_database_errors_on_list_and_delete_become_slot_errors(self) -> None:
        repo = _repo()
        repo.save(2, _played_world())
        with repo.SessionLocal.begin() as session:
            session.execute(text("DROP TABLE save_slot"))

        with self.assertRaises(SaveSlotError):
            repo.list_slots()
        with self.assertRaises(SaveSlotError) as ctx:
            repo.delete(2)
        self.assertEqual(2, ctx.exception.slot)

    def test_unreachable_database_reports_the_requested_slot(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            url = f"sqlite:///{Path(tmp) / 'missing' / 'saves.db'}"
            repo = SqlSaveRepository(create_session_factory(create_save_engine(url)))
            with self.assertRaises(SaveSlotError) as ctx:
                repo.load(7)
            self.assertEqual(7, ctx.exception.slot)
            with self.assertRaises(SaveSlotError) as ctx:
                repo.save(3, _played_world())
            self.assertEqual(3, ctx.exception.slot)


class SessionPersistenceTests(unittest.TestCase):
    def test_session_save_and_load_through_sql(self) -> None:
        session = create_game_session(seed=3, save_repo=_repo())
        session.world.player.money = 31337
        self.assertEqual(OutcomeStatus.SUCCESS, session.submit_command_intent("save").status)
        session.world.player.money = 0
        self.assertEqual(OutcomeStatus.SUCCESS, session.submit_command_intent("load").status)
        self.assertEqual(31337, session.world.player.money)

    def test_failed_load_keeps_current_world(self) -> None:
        session = create_game_session(seed=3, save_repo=_repo())
        session.world.player.money = 5
        before = session.world
        outcome = session.submit_command_intent("load 8")
        self.assertEqual(OutcomeStatus.IO_ERROR, outcome.status)
        self.assertIs(before, session.world)
        self.assertEqual(5, session.world.player.money)


if __name__ == "__main__":
    unittest.main()
