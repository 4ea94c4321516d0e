from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Ending:
    id: str
    title: str
    summary: str
    requires: tuple[str, ...] = ()
