from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    BLOCKED = "blocked"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"
    INFO = "info"
    IO_ERROR = "io_error"


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_DEFAULT_SEVERITY = {
    OutcomeStatus.SUCCESS: Severity.SUCCESS,
    OutcomeStatus.FAILED: Severity.WARNING,
    OutcomeStatus.BLOCKED: Severity.WARNING,
    OutcomeStatus.NOT_FOUND: Severity.WARNING,
    OutcomeStatus.REJECTED: Severity.ERROR,
    OutcomeStatus.INFO: Severity.INFO,
    OutcomeStatus.IO_ERROR: Severity.ERROR,
}


@dataclass
class ActionOutcome:
    verb: str
    status: OutcomeStatus
    messages: List[str] = field(default_factory=list)
    target: Optional[str] = None
    system_address: Optional[str] = None
    network_address: Optional[str] = None
    severity: Optional[Severity] = None
    chance: Optional[float] = None
    experience_delta: int = 0
    stress_delta: int = 0
    money_delta: int = 0
    standing_deltas: Dict[str, int] = field(default_factory=dict)
    skill_deltas: Dict[str, int] = field(default_factory=dict)
    items_gained: List[str] = field(default_factory=list)
    detected: bool = False
    quit: bool = False
    notes: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.severity is None:
            self.severity = _DEFAULT_SEVERITY[self.status]

    def mark(self, status: OutcomeStatus) -> None:
        self.status = status
        self.severity = _DEFAULT_SEVERITY[status]

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    def subjects(self) -> tuple[str, ...]:
        return tuple(value for value in (self.target, self.system_address, self.network_address) if value)

    def all_messages(self) -> List[str]:
        return list(self.messages) + list(self.notes)
