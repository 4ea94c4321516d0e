import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cyberhack.application.commands import Verb, parse_command
from cyberhack.application.services.action_resolver import ActionResolver
from cyberhack.application.services.chance import ChanceRoller
from cyberhack.domain.errors import ActionBlocked, UnknownVerbError


class ParseCommandTests(unittest.TestCase):
    def test_verb_is_case_insensitive_and_args_are_split(self) -> None:
        command = parse_command("  MITM 10.0.0.1 10.0.0.2 ")
        self.assertEqual(Verb.MITM, command.verb)
        self.assertEqual(("10.0.0.1", "10.0.0.2"), command.args)

    def test_quoted_arguments_stay_together(self) -> None:
        command = parse_command('social "NEXUS helpdesk"')
        self.assertEqual(("NEXUS helpdesk",), command.args)

    def test_unbalanced_quotes_fall_back_to_whitespace(self) -> None:
        command = parse_command('db "select * from users')
        self.assertEqual(Verb.DB, command.verb)
        self.assertEqual('"select * from users', command.rest())

    def test_unknown_and_empty_input_are_rejected_at_parse(self) -> None:
        with self.assertRaises(UnknownVerbError) as ctx:
            parse_command("hack the planet")
        self.assertEqual("hack", ctx.exception.verb)
        with self.assertRaises(UnknownVerbError):
            parse_command("   ")

    def test_require_raises_with_usage(self) -> None:
        with self.assertRaises(ActionBlocked) as ctx:
            parse_command("kill").require(0)
        self.assertIn("kill <pid>", str(ctx.exception))

    def test_every_verb_has_a_handler(self) -> None:
        resolver = ActionResolver(ChanceRoller(seed=1))
        meta = {Verb.STATUS, Verb.INVENTORY, Verb.SKILLS, Verb.CONTACTS, Verb.QUEST, Verb.SAVE, Verb.LOAD, Verb.QUIT, Verb.SANDBOX, Verb.STORY}
        self.assertEqual(50, len(Verb))
        for verb in Verb:
            self.assertTrue(resolver.handles(verb) or verb in meta, verb)


if __name__ == "__main__":
    unittest.main()
