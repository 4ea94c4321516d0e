"""Check bundled or modded CyberHack content before it reaches a session.

    cyberhack-validate-dialogue
    cyberhack-validate-dialogue --path mod/dialogue_trees.json --endings mod/endings.json
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Callable, Sequence

from cyberhack.application.services.dialogue_content import validate_dialogue_content
from cyberhack.application.services.ending_service import validate_endings
from cyberhack.infrastructure.content_loader import DIALOGUE_FILE, ENDINGS_FILE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check dialogue trees and endings for broken links and unknown requirements")
    parser.add_argument("--path", default=str(DIALOGUE_FILE), help="dialogue tree JSON")
    parser.add_argument("--endings", default=str(ENDINGS_FILE), help="endings JSON")
    parser.add_argument("--skip-endings", action="store_true")
    return parser


def check_file(path: str | Path, validator: Callable[[object], list[str]]) -> list[str]:
    source = Path(path)
    try:
        raw = source.read_text(encoding="utf-8")
    except OSError as exc:
        return [f"cannot read {source}: {exc.strerror or exc}"]
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        return [f"not JSON (line {exc.lineno}): {exc.msg}"]
    return validator(payload)


def validate_dialogue_file(path: str | Path) -> list[str]:
    return check_file(path, validate_dialogue_content)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    reports = [(args.path, validate_dialogue_file(args.path))]
    if not args.skip_endings:
        reports.append((args.endings, check_file(args.endings, validate_endings)))

    problems = 0
    for path, errors in reports:
        name = Path(path).name
        if not errors:
            print(f"{name}: valid")
            continue
        problems += len(errors)
        print(f"{name}: invalid, {len(errors)} problem(s)")
        for message in errors:
            print(f"  {message}")
    return 1 if problems else 0


if __name__ == "__main__":
    raise SystemExit(main())
