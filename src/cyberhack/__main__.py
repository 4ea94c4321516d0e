from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from cyberhack.bootstrap import create_game_session
from cyberhack.presentation.game_loop import run_game_loop


def _configure_logging() -> None:
    level = os.getenv("CYBERHACK_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
    )


def _print_help_surface(console: Console) -> None:
    console.print("\nHelp:")
    console.print("- Type help inside the game for the command list.")
    console.print("- Startup issues: check CYBERHACK_DATABASE_URL or set CYBERHACK_SAVES_IN_MEMORY=1.")
    console.print("- Content issues: run cyberhack-validate-dialogue on your dialogue file.")


def main() -> int:
    load_dotenv()
    _configure_logging()
    console = Console()
    try:
        session = create_game_session()
        return run_game_loop(session, console=console)
    except KeyboardInterrupt:
        console.print("\nSession ended.")
        return 130
    except (OSError, ValueError, RuntimeError) as exc:
        logging.getLogger(__name__).debug("Startup failure", exc_info=True)
        console.print("An unexpected error occurred. The game closed safely.")
        console.print(f"Reason: {exc}")
        _print_help_surface(console)
        return 1


if __name__ == "__main__":
    sys.exit(main())
