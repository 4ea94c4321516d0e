from __future__ import annotations


class ActionError(Exception):
    """Deterministic refusal raised by a verb handler before any roll is made."""


class ActionBlocked(ActionError):
    pass


class TargetNotFound(ActionError):
    pass


class UnknownVerbError(ValueError):
    def __init__(self, verb: str) -> None:
        super().__init__(f"Unknown command: {verb}")
        self.verb = verb


class SaveSlotError(RuntimeError):
    def __init__(self, slot: int, reason: str) -> None:
        super().__init__(f"Save slot {slot}: {reason}")
        self.slot = int(slot)
        self.reason = reason


class DialogueError(RuntimeError):
    pass
