from __future__ import annotations

import logging
from typing import Callable, List, Optional

from rich.console import Console
from rich.markup import escape

from cyberhack.application.commands import USAGE, Verb
from cyberhack.application.services.game_session import GameSession
from cyberhack.domain.errors import DialogueError
from cyberhack.presentation.renderer import TerminalRenderer


_logger = logging.getLogger(__name__)

_LEAVE_WORDS = {"bye", "leave", "exit"}
_PROMPT = "[bold green]{location}[/bold green]$ "


def help_entries() -> List[tuple[str, str]]:
    rows = [(verb.value, USAGE.get(verb, verb.value)) for verb in Verb]
    rows.append(("talk", "talk <character>"))
    rows.append(("help", "help"))
    return rows


def _read(input_fn: Callable[[str], str], prompt: str) -> Optional[str]:
    try:
        return input_fn(prompt)
    except EOFError:
        return None


def _run_conversation(session: GameSession, renderer: TerminalRenderer, input_fn: Callable[[str], str], character_id: str) -> None:
    try:
        view = session.talk_intent(character_id)
    except DialogueError as exc:
        known = ", ".join(session.talkable_characters())
        renderer.message_panel("Dialogue", [escape(str(exc)), f"Available: {known}"], border_style="yellow")
        return
    renderer.dialogue(view)
    while not view.ended:
        raw = _read(input_fn, "> ")
        if raw is None:
            session.leave_conversation_intent()
            return
        choice = raw.strip().lower()
        if choice in _LEAVE_WORDS:
            session.leave_conversation_intent()
            renderer.message_panel("Dialogue", ["You close the channel."], border_style="magenta")
            return
        option_id = choice
        if choice.isdigit():
            index = int(choice) - 1
            if not 0 <= index < len(view.options):
                renderer.message_panel("Dialogue", ["Pick one of the listed numbers."], border_style="yellow")
                continue
            option_id = view.options[index].id
        step = session.choose_dialogue_option_intent(option_id)
        renderer.dialogue_step(step)
        if step.accepted:
            if step.view is None:
                return
            view = step.view


def _render_meta(session: GameSession, renderer: TerminalRenderer, verb: str, outcome) -> bool:
    if verb == Verb.STATUS.value:
        renderer.status(session.status_view())
    elif verb == Verb.SKILLS.value:
        renderer.skills(session.skill_rows())
    elif verb == Verb.CONTACTS.value:
        renderer.contacts(session.contact_views())
    elif verb == Verb.QUEST.value:
        renderer.quest(outcome.messages)
    else:
        return False
    return True


def run_game_loop(
    session: GameSession,
    *,
    input_fn: Optional[Callable[[str], str]] = None,
    console: Optional[Console] = None,
) -> int:
    """Read commands until quit or end of input. Returns the process exit code."""

    input_fn = input_fn or input
    renderer = TerminalRenderer(console)
    renderer.message_panel(
        "CyberHack",
        ["Connection established. Type help for commands.", *(escape(line) for line in session.tracker.describe(session.world))],
        border_style="green",
    )
    while True:
        renderer.console.print(_PROMPT.format(location=escape(session.world.player.current_location)), end="")
        raw = _read(input_fn, "")
        if raw is None:
            return 0
        line = raw.strip()
        if not line:
            continue
        head, _, rest = line.partition(" ")
        head = head.lower()

        if head == "help":
            renderer.help(help_entries())
            continue
        if head == "talk":
            target = rest.strip()
            if not target:
                renderer.message_panel("talk", [f"Usage: talk <character> ({', '.join(session.talkable_characters())})"], border_style="yellow")
                continue
            _run_conversation(session, renderer, input_fn, target)
            continue

        outcome = session.submit_command_intent(line)
        if not (outcome.messages and _render_meta(session, renderer, outcome.verb, outcome)):
            renderer.outcome(outcome)
        if outcome.quit:
            _logger.info("Session ended on turn %s", session.world.turn)
            return 0
