from __future__ import annotations

import copy
import json
import logging
from datetime import datetime, timezone
from typing import Dict, List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from cyberhack.domain.errors import SaveSlotError
from cyberhack.domain.models.world import WorldState
from cyberhack.domain.repositories import SaveRepository
from cyberhack.infrastructure.world_codec import FORMAT_VERSION, WorldDecodeError, decode_world, encode_world


_logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS save_slot (
    slot INTEGER PRIMARY KEY,
    format_version INTEGER NOT NULL,
    saved_at VARCHAR(40) NOT NULL,
    payload TEXT NOT NULL
)
"""


class SqlSaveRepository(SaveRepository):
    """One row per slot holding the JSON snapshot of a whole WorldState."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self.SessionLocal = session_factory
        self._schema_ready = False

    def ensure_schema(self, slot: int = 0) -> None:
        if self._schema_ready:
            return
        try:
            with self.SessionLocal.begin() as session:
                session.execute(text(_SCHEMA))
        except SQLAlchemyError as exc:
            raise SaveSlotError(slot, f"save database unavailable ({exc.__class__.__name__})") from exc
        self._schema_ready = True

    def save(self, slot: int, world: WorldState) -> None:
        self.ensure_schema(slot)
        payload = json.dumps(encode_world(world), sort_keys=True)
        params = {
            "slot": int(slot),
            "version": FORMAT_VERSION,
            "saved_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "payload": payload,
        }
        try:
            with self.SessionLocal.begin() as session:
                dialect = session.bind.dialect.name if session.bind is not None else "sqlite"
                if dialect == "mysql":
                    statement = text(
                        """
                        INSERT INTO save_slot (slot, format_version, saved_at, payload)
                        VALUES (:slot, :version, :saved_at, :payload)
                        ON DUPLICATE KEY UPDATE
                            format_version = VALUES(format_version),
                            saved_at = VALUES(saved_at),
                            payload = VALUES(payload)
                        """
                    )
                else:
                    statement = text(
                        """
                        INSERT INTO save_slot (slot, format_version, saved_at, payload)
                        VALUES (:slot, :version, :saved_at, :payload)
                        ON CONFLICT(slot) DO UPDATE SET
                            format_version = excluded.format_version,
                            saved_at = excluded.saved_at,
                            payload = excluded.payload
                        """
                    )
                session.execute(statement, params)
        except SQLAlchemyError as exc:
            raise SaveSlotError(slot, f"write failed ({exc.__class__.__name__})") from exc
        _logger.info("Saved world to slot %s", slot, extra={"slot": int(slot), "turn": world.turn})

    def load(self, slot: int) -> WorldState:
        self.ensure_schema(slot)
        try:
            with self.SessionLocal() as session:
                row = session.execute(
                    text("SELECT payload FROM save_slot WHERE slot = :slot"),
                    {"slot": int(slot)},
                ).first()
        except SQLAlchemyError as exc:
            raise SaveSlotError(slot, f"read failed ({exc.__class__.__name__})") from exc
        if row is None:
            raise SaveSlotError(slot, "no saved game")
        try:
            world = decode_world(json.loads(row.payload))
        except (json.JSONDecodeError, WorldDecodeError) as exc:
            _logger.warning("Save slot %s is corrupt: %s", slot, exc)
            raise SaveSlotError(slot, "saved game is corrupt") from exc
        _logger.info("Loaded world from slot %s", slot)
        return world

    def list_slots(self) -> List[int]:
        self.ensure_schema()
        try:
            with self.SessionLocal() as session:
                rows = session.execute(text("SELECT slot FROM save_slot ORDER BY slot")).all()
        except SQLAlchemyError as exc:
            raise SaveSlotError(0, f"listing failed ({exc.__class__.__name__})") from exc
        return [int(row.slot) for row in rows]

    def delete(self, slot: int) -> bool:
        self.ensure_schema(slot)
        try:
            with self.SessionLocal.begin() as session:
                result = session.execute(text("DELETE FROM save_slot WHERE slot = :slot"), {"slot": int(slot)})
        except SQLAlchemyError as exc:
            raise SaveSlotError(slot, f"delete failed ({exc.__class__.__name__})") from exc
        return bool(result.rowcount)


class InMemorySaveRepository(SaveRepository):
    """Keeps encoded snapshots so a loaded world never aliases the saved one."""

    def __init__(self) -> None:
        self._slots: Dict[int, dict] = {}

    def save(self, slot: int, world: WorldState) -> None:
        self._slots[int(slot)] = encode_world(world)

    def load(self, slot: int) -> WorldState:
        payload = self._slots.get(int(slot))
        if payload is None:
            raise SaveSlotError(slot, "no saved game")
        try:
            return decode_world(copy.deepcopy(payload))
        except WorldDecodeError as exc:
            raise SaveSlotError(slot, "saved game is corrupt") from exc

    def list_slots(self) -> List[int]:
        return sorted(self._slots)

    def delete(self, slot: int) -> bool:
        return self._slots.pop(int(slot), None) is not None
