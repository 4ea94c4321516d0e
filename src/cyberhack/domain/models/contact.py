from __future__ import annotations

from dataclasses import dataclass


RELATIONSHIP_MIN = -100
RELATIONSHIP_MAX = 100


@dataclass
class Contact:
    id: str
    name: str
    handle: str
    relationship: int = 0
    faction_id: str | None = None
    specialty: str = ""
    met: bool = False

    def adjust_relationship(self, delta: int) -> int:
        before = int(self.relationship)
        self.relationship = max(RELATIONSHIP_MIN, min(RELATIONSHIP_MAX, before + int(delta)))
        return self.relationship - before


def default_contacts() -> dict[str, Contact]:
    return {
        "shadow": Contact(
            id="shadow",
            name="Shadow",
            handle="shadow_hunter",
            relationship=25,
            faction_id="CyberFreedom",
            specialty="Corporate intelligence",
        ),
        "ghost": Contact(
            id="ghost",
            name="Ghost",
            handle="ghost_in_shell",
            relationship=15,
            faction_id="UndergroundHackers",
            specialty="Zero-day brokering",
        ),
    }
