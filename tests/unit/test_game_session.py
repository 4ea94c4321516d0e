import random
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cyberhack.application.services.chance import ChanceRoller
from cyberhack.application.services.chapter_quests import FINAL_CHAPTER
from cyberhack.bootstrap import create_game_session
from cyberhack.domain.events import EndingReached, PlayerLeveledUp
from cyberhack.domain.models.world import GameMode
from cyberhack.domain.outcomes import OutcomeStatus
from cyberhack.infrastructure.persistence.save_repository import InMemorySaveRepository


class ScriptedRandom(random.Random):
    def __init__(self, values) -> None:
        super().__init__(0)
        self.values = list(values)

    def random(self) -> float:
        return self.values.pop(0) if self.values else 0.0


def _session(values=()):
    return create_game_session(seed=11, roller=ChanceRoller(ScriptedRandom(values)), save_repo=InMemorySaveRepository())


class GameSessionCommandTests(unittest.TestCase):
    def test_unknown_verb_is_rejected_without_spending_a_turn(self) -> None:
        session = _session()
        outcome = session.submit_command_intent("hack mainframe")
        self.assertEqual(OutcomeStatus.REJECTED, outcome.status)
        self.assertEqual(0, session.world.turn)

    def test_meta_verbs_do_not_advance_turn(self) -> None:
        session = _session()
        for raw in ("status", "inventory", "skills", "contacts", "quest"):
            outcome = session.submit_command_intent(raw)
            self.assertEqual(OutcomeStatus.INFO, outcome.status, raw)
        self.assertEqual(0, session.world.turn)

    def test_action_standing_is_applied_through_the_graph(self) -> None:
        session = _session([0.0])
        outcome = session.submit_command_intent("ddos nexus.corp")
        self.assertEqual(OutcomeStatus.SUCCESS, outcome.status)
        self.assertEqual(1, session.world.turn)
        self.assertEqual(15, session.world.standing("UndergroundHackers"))
        self.assertEqual(15, session.status_view().reputation)

    def test_first_chapter_can_be_completed_through_commands(self) -> None:
        session = _session()
        session.submit_command_intent("scan 192.168.1.0/24")
        hosts = list(session.world.networks["192.168.1"].systems)
        if not hosts:
            self.skipTest("seed produced an empty range")
        session.submit_command_intent(f"connect {hosts[0]}")
        outcome = session.submit_command_intent("ls")
        self.assertEqual(2, session.world.chapter)
        self.assertIn("mission_start", session.world.completed_quest_ids)
        self.assertTrue(any("Quest complete" in note for note in outcome.notes))

    def test_level_up_is_reported(self) -> None:
        session = _session()
        seen = []
        session.event_bus.subscribe(PlayerLeveledUp, seen.append)
        session.world.player.experience = 95
        outcome = session.submit_command_intent("trace 8.8.8.8")
        self.assertEqual(2, session.world.player.level)
        self.assertTrue(any("Level up" in note for note in outcome.notes))
        self.assertEqual(1, len(seen))

    def test_sandbox_pauses_and_story_resumes(self) -> None:
        session = _session()
        session.submit_command_intent("sandbox")
        self.assertEqual(GameMode.SANDBOX, session.world.mode)
        session.submit_command_intent("scan 192.168.1.0/24")
        self.assertFalse(session.world.quest.objectives[0].completed)
        session.submit_command_intent("story")
        session.submit_command_intent("scan 192.168.1.0/24")
        self.assertTrue(session.world.quest.objectives[0].completed)

    def test_quit_marks_outcome(self) -> None:
        self.assertTrue(_session().submit_command_intent("quit").quit)


class GameSessionSaveTests(unittest.TestCase):
    def test_load_replaces_the_whole_world(self) -> None:
        session = _session()
        session.world.player.money = 4242
        self.assertEqual(OutcomeStatus.SUCCESS, session.submit_command_intent("save 2").status)
        session.world.player.money = 1
        session.world.story_flags["dirty"] = True

        self.assertEqual(OutcomeStatus.SUCCESS, session.submit_command_intent("load 2").status)
        self.assertEqual(4242, session.world.player.money)
        self.assertFalse(session.world.flag("dirty"))

    def test_missing_slot_leaves_world_untouched(self) -> None:
        session = _session()
        before = session.world
        outcome = session.submit_command_intent("load 9")
        self.assertEqual(OutcomeStatus.IO_ERROR, outcome.status)
        self.assertIs(before, session.world)

    def test_non_numeric_slot_is_blocked(self) -> None:
        self.assertEqual(OutcomeStatus.BLOCKED, _session().submit_command_intent("save abc").status)


class GameSessionEndingTests(unittest.TestCase):
    def test_first_matching_ending_is_chosen_once_story_is_over(self) -> None:
        session = _session()
        seen = []
        session.event_bus.subscribe(EndingReached, seen.append)
        session.world.quest = None
        session.world.chapter = FINAL_CHAPTER + 1
        session.world.story_flags["timer_disabled"] = True

        outcome = session.submit_command_intent("tor")

        self.assertEqual("pyrrhic_victory", session.world.ending_id)
        self.assertIn("ENDING: Pyrrhic Victory", outcome.notes)
        session.submit_command_intent("tor")
        self.assertEqual(1, len(seen))

    def test_fallback_ending_when_nothing_matches(self) -> None:
        session = _session()
        session.world.quest = None
        session.world.chapter = FINAL_CHAPTER + 1
        session.submit_command_intent("tor")
        self.assertEqual("unresolved", session.world.ending_id)

    def test_no_ending_mid_story(self) -> None:
        session = _session()
        session.submit_command_intent("tor")
        self.assertIsNone(session.world.ending_id)


class GameSessionDialogueTests(unittest.TestCase):
    def test_talk_and_choose_through_session(self) -> None:
        session = _session()
        self.assertIn("ghost", session.talkable_characters())
        view = session.talk_intent("ghost")
        self.assertEqual("greeting", view.node_id)
        step = session.choose_dialogue_option_intent("leave")
        self.assertTrue(step.view.ended)
        self.assertFalse(session.leave_conversation_intent())

    def test_dialogue_choice_reports_ending_without_another_command(self) -> None:
        session = _session()
        seen = []
        session.event_bus.subscribe(EndingReached, seen.append)
        session.talk_intent("ghost")
        session.world.quest = None
        session.world.chapter = FINAL_CHAPTER + 1
        session.world.story_flags["timer_disabled"] = True

        step = session.choose_dialogue_option_intent("leave")

        self.assertEqual("pyrrhic_victory", session.world.ending_id)
        self.assertIn("ENDING: Pyrrhic Victory", step.messages)
        self.assertEqual(1, len(seen))
        self.assertEqual(0, session.world.turn)

    def test_dialogue_choice_applies_pending_level_up(self) -> None:
        session = _session()
        seen = []
        session.event_bus.subscribe(PlayerLeveledUp, seen.append)
        session.talk_intent("ghost")
        session.world.player.experience = session.world.player.next_level_experience()

        step = session.choose_dialogue_option_intent("leave")

        self.assertEqual(2, session.world.player.level)
        self.assertIn("Level up! You are now level 2.", step.messages)
        self.assertEqual(1, len(seen))


if __name__ == "__main__":
    unittest.main()
