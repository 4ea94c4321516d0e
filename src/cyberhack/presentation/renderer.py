from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cyberhack.application.dtos import ContactView, DialogueStep, DialogueView, StatusView
from cyberhack.domain.outcomes import ActionOutcome, Severity


_BORDER_BY_SEVERITY = {
    Severity.INFO: "cyan",
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}
_BORDER_STATUS = "bright_cyan"
_BORDER_DIALOGUE = "magenta"
_BORDER_QUEST = "bright_magenta"


def _title(text: str) -> str:
    core = str(text or "").strip() or "Terminal"
    return f"[bold green]{core}[/bold green]"


class TerminalRenderer:
    """Draws outcomes and views onto a rich console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def message_panel(self, title: str, lines: Iterable[str], *, border_style: str = "cyan", subtitle: str = "") -> None:
        rows = [str(line) for line in lines if str(line).strip()]
        self.console.print(
            Panel.fit(
                "\n".join(rows) if rows else "No output.",
                title=_title(title),
                subtitle=f"[dim]{subtitle}[/dim]" if subtitle else None,
                subtitle_align="left",
                border_style=border_style,
            )
        )

    def outcome(self, outcome: ActionOutcome) -> None:
        subtitle = outcome.status.value
        if outcome.chance is not None:
            subtitle = f"{subtitle} ({outcome.chance:.0%} chance)"
        lines = [escape(line) for line in outcome.messages]
        if outcome.detected:
            lines.append("[bold red]Intrusion detected.[/bold red]")
        lines.extend(escape(note) for note in outcome.notes)
        self.message_panel(
            outcome.verb or "?",
            lines,
            border_style=_BORDER_BY_SEVERITY.get(outcome.severity, "cyan"),
            subtitle=subtitle,
        )

    def status(self, view: StatusView) -> None:
        grid = Table.grid(padding=(0, 1))
        grid.add_column(style="bold green", justify="right")
        grid.add_column(style="white")
        grid.add_row("Handle", view.name)
        grid.add_row("Level", f"{view.level} ({view.experience}/{view.next_level_experience} XP)")
        grid.add_row("Health", f"{view.health}/{view.max_health}")
        grid.add_row("Stress", str(view.stress))
        grid.add_row("Money", f"${view.money}")
        grid.add_row("Location", view.location)
        grid.add_row("Reputation", str(view.reputation))
        grid.add_row("Mode", f"{view.mode} / chapter {view.chapter}")
        grid.add_row("Turn", str(view.turn))
        self.console.print(Panel.fit(grid, title=_title("Status"), border_style=_BORDER_STATUS))

    def skills(self, rows: Iterable[tuple[str, int]]) -> None:
        table = Table(show_header=True, header_style="bold green")
        table.add_column("Skill")
        table.add_column("Level", justify="right")
        for name, level in rows:
            table.add_row(name, str(level))
        self.console.print(Panel.fit(table, title=_title("Skills"), border_style=_BORDER_STATUS))

    def contacts(self, views: Iterable[ContactView]) -> None:
        table = Table(show_header=True, header_style="bold green")
        table.add_column("Contact")
        table.add_column("Trust", justify="right")
        table.add_column("Faction")
        table.add_column("Standing", justify="right")
        table.add_column("Services")
        for view in views:
            rank = escape(f" [{view.rank}]") if view.rank else ""
            table.add_row(
                f"{view.name} ({view.handle})",
                str(view.relationship),
                f"{view.faction}{rank}",
                f"{view.standing:+d}",
                escape(", ".join(view.services)) or "-",
            )
        self.console.print(Panel.fit(table, title=_title("Contacts"), border_style=_BORDER_STATUS))

    def quest(self, lines: Iterable[str]) -> None:
        self.message_panel("Quest", [escape(line) for line in lines], border_style=_BORDER_QUEST)

    def dialogue(self, view: DialogueView) -> None:
        lines = [escape(view.text), ""]
        for index, option in enumerate(view.options, start=1):
            check = f" [dim]({option.skill} {option.difficulty})[/dim]" if option.skill else ""
            lines.append(f"{index}. {escape(option.text)}{check}")
        if view.ended:
            lines.append("[dim]The conversation is over.[/dim]")
        else:
            lines.append("[dim]Pick a number, or type bye to leave.[/dim]")
        self.message_panel(view.speaker, lines, border_style=_BORDER_DIALOGUE, subtitle=view.node_id)

    def dialogue_step(self, step: DialogueStep) -> None:
        if not step.accepted:
            self.message_panel("Dialogue", [escape(step.reason)], border_style="yellow")
            return
        if step.messages:
            self.message_panel("Dialogue", [escape(line) for line in step.messages], border_style=_BORDER_DIALOGUE)
        if step.view is not None:
            self.dialogue(step.view)

    def help(self, entries: Iterable[tuple[str, str]]) -> None:
        table = Table(show_header=True, header_style="bold green")
        table.add_column("Command")
        table.add_column("Usage")
        for verb, usage in entries:
            table.add_row(verb, escape(usage))
        self.console.print(Panel.fit(table, title=_title("Commands"), border_style="cyan"))
