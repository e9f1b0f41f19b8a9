"""
Save Games — SQLAlchemy models for persisted simulation state.

Two tables:

1. save_slots — one row per named slot holding the latest full snapshot,
   its SHA-256 digest and the snapshot format version
2. turn_log   — append-only record of every turn summary written to a slot,
   used for post-game review

The snapshot is stored as JSON produced by `SimulationState.model_dump`;
the digest lets the store detect payloads edited or corrupted on disk.
"""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all save-game models."""
    pass


class SaveSlotDB(Base):
    """The most recent snapshot written to a named slot."""

    __tablename__ = "save_slots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_name = Column(String(100), nullable=False, unique=True, index=True)
    turn = Column(Integer, nullable=False)
    status = Column(String(30), nullable=False)
    regime_id = Column(String(30), nullable=False)
    format_version = Column(Integer, nullable=False)
    payload = Column(JSON, nullable=False)
    payload_hash = Column(String(64), nullable=False)
    saved_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<SaveSlot {self.slot_name} turn={self.turn} status={self.status}>"


class TurnLogDB(Base):
    """
    One processed turn, as reported to the player.

    APPEND-ONLY: rows are never updated. Deleting a slot removes its log.
    """

    __tablename__ = "turn_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_name = Column(String(100), nullable=False)
    turn = Column(Integer, nullable=False)
    status = Column(String(30), nullable=False)
    summary = Column(JSON, nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_turn_log_slot_turn", "slot_name", "turn"),
    )

    def __repr__(self) -> str:
        return f"<TurnLog {self.slot_name} turn={self.turn}>"
