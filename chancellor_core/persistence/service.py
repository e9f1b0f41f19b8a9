"""
Save Game Service — named save slots and an append-only turn log.

This service provides the persistence operations the engine needs:
- Save a full SimulationState snapshot to a named slot (overwriting it)
- Load a slot back, tolerating partial or older payloads
- Record every processed turn's summary in an append-only log
- Verify that stored payloads still match their SHA-256 digest

Persistence is an external collaborator of the engine: the orchestrator
computes a turn first, and only then is the result handed here.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import create_engine, delete, select
from sqlalchemy.orm import sessionmaker

from chancellor_core.model.schema import SimulationState, TurnSummary
from chancellor_core.persistence.codec import dump_state, load_state, payload_digest
from chancellor_core.persistence.models import Base, SaveSlotDB, TurnLogDB

logger = logging.getLogger(__name__)


class SaveIntegrityError(Exception):
    """Raised when a stored payload no longer matches its digest."""
    pass


class SaveGameService:
    """
    Save-game store backed by any SQLAlchemy database (SQLite by default).

    Usage:
        service = SaveGameService("sqlite:///chancellor_saves.db")
        service.initialize()

        service.save("autosave", state)
        state = service.load("autosave")
    """

    def __init__(self, database_url: str) -> None:
        """
        Initialize the save-game service.

        Args:
            database_url: SQLAlchemy connection string.
        """
        self.engine = create_engine(database_url, echo=False)
        self.SessionLocal = sessionmaker(bind=self.engine)

    def initialize(self) -> None:
        """Create tables if they do not exist."""
        Base.metadata.create_all(self.engine)

    # ── Slots ───────────────────────────────────────────────────

    def save(self, slot_name: str, state: SimulationState) -> dict[str, Any]:
        """Write `state` to `slot_name`, replacing whatever was there."""
        payload = dump_state(state)
        digest = payload_digest(payload)
        now = datetime.now(timezone.utc)

        with self.SessionLocal() as session:
            slot = session.execute(
                select(SaveSlotDB).where(SaveSlotDB.slot_name == slot_name)
            ).scalar_one_or_none()
            if slot is None:
                slot = SaveSlotDB(slot_name=slot_name)
                session.add(slot)
            slot.turn = state.turn
            slot.status = state.status.value
            slot.regime_id = state.fiscal.regime_id.value
            slot.format_version = state.format_version
            slot.payload = payload
            slot.payload_hash = digest
            slot.saved_at = now
            session.commit()
            info = self._slot_info(slot)

        logger.info(
            "Game saved: slot=%s turn=%d hash=%s", slot_name, state.turn, digest[:16]
        )
        return info

    def load(self, slot_name: str) -> SimulationState | None:
        """
        Load a slot. Returns None when the slot does not exist.

        Raises:
            SaveIntegrityError: If the payload does not match its digest.
        """
        with self.SessionLocal() as session:
            slot = session.execute(
                select(SaveSlotDB).where(SaveSlotDB.slot_name == slot_name)
            ).scalar_one_or_none()
            if slot is None:
                return None
            payload, stored_hash = slot.payload, slot.payload_hash

        if payload_digest(payload) != stored_hash:
            raise SaveIntegrityError(
                f"Save slot {slot_name!r} does not match its stored digest"
            )
        state = load_state(payload)
        logger.info("Game loaded: slot=%s turn=%d", slot_name, state.turn)
        return state

    def list_slots(self) -> list[dict[str, Any]]:
        """All slots, most recently saved first."""
        with self.SessionLocal() as session:
            slots = session.execute(
                select(SaveSlotDB).order_by(SaveSlotDB.saved_at.desc())
            ).scalars().all()
            return [self._slot_info(slot) for slot in slots]

    def delete_slot(self, slot_name: str) -> bool:
        """Remove a slot and its turn log. Returns False if it did not exist."""
        with self.SessionLocal() as session:
            result = session.execute(
                delete(SaveSlotDB).where(SaveSlotDB.slot_name == slot_name)
            )
            session.execute(delete(TurnLogDB).where(TurnLogDB.slot_name == slot_name))
            session.commit()
            removed = result.rowcount > 0
        if removed:
            logger.info("Save slot deleted: %s", slot_name)
        return removed

    def verify_slot(self, slot_name: str) -> tuple[bool, str]:
        """Recompute a slot's digest and compare it with the stored one."""
        with self.SessionLocal() as session:
            slot = session.execute(
                select(SaveSlotDB).where(SaveSlotDB.slot_name == slot_name)
            ).scalar_one_or_none()
            if slot is None:
                return False, f"No save slot named {slot_name!r}"
            computed = payload_digest(slot.payload)
            if computed != slot.payload_hash:
                return (
                    False,
                    f"Hash mismatch: stored={slot.payload_hash[:16]}... "
                    f"computed={computed[:16]}...",
                )
            return True, f"Slot {slot_name!r} verified at turn {slot.turn}"

    # ── Turn log ────────────────────────────────────────────────

    def append_turn(self, slot_name: str, summary: TurnSummary) -> None:
        """Append a turn summary to the slot's log. There is no update."""
        with self.SessionLocal() as session:
            session.add(
                TurnLogDB(
                    slot_name=slot_name,
                    turn=summary.turn,
                    status=summary.status.value,
                    summary=summary.model_dump(mode="json"),
                    recorded_at=datetime.now(timezone.utc),
                )
            )
            session.commit()

    def get_turn_log(self, slot_name: str, limit: int = 24) -> list[dict[str, Any]]:
        """The most recent `limit` turn summaries for a slot, oldest first."""
        with self.SessionLocal() as session:
            rows = session.execute(
                select(TurnLogDB)
                .where(TurnLogDB.slot_name == slot_name)
                .order_by(TurnLogDB.id.desc())
                .limit(limit)
            ).scalars().all()
            return [row.summary for row in reversed(rows)]

    # ── Internal ────────────────────────────────────────────────

    @staticmethod
    def _slot_info(slot: SaveSlotDB) -> dict[str, Any]:
        return {
            "slot_name": slot.slot_name,
            "turn": slot.turn,
            "status": slot.status,
            "regime_id": slot.regime_id,
            "format_version": slot.format_version,
            "payload_hash": slot.payload_hash,
            "saved_at": slot.saved_at.isoformat() if slot.saved_at else None,
        }
