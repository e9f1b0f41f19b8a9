"""
Tests for save games.

Validates:
- Save / load round trip through SQLite
- Slot listing, overwrite and deletion
- Digest verification and tamper detection
- Append-only turn log ordering
- Lenient loading of partial or malformed snapshots
"""

from __future__ import annotations

import logging

import pytest
from sqlalchemy import update

from chancellor_core.model.schema import SimulationState
from chancellor_core.orchestrator import TurnOrchestrator, turn_rng
from chancellor_core.persistence.codec import dump_state, load_state, payload_digest
from chancellor_core.persistence.models import SaveSlotDB
from chancellor_core.persistence.service import SaveGameService, SaveIntegrityError
from chancellor_core.politics.backbench import generate_population


@pytest.fixture
def service(tmp_path):
    svc = SaveGameService(f"sqlite:///{tmp_path / 'saves.db'}")
    svc.initialize()
    return svc


@pytest.fixture
def played():
    orchestrator = TurnOrchestrator()
    state = orchestrator.new_game(seed=99)
    summaries = []
    for _ in range(3):
        result = orchestrator.advance_turn(state)
        state = result.state
        summaries.append(result.summary)
    return state, summaries


class TestSaveSlots:

    def test_round_trip(self, service, played):
        state, _ = played
        info = service.save("slot-a", state)
        assert info["turn"] == 3
        assert info["status"] == "active"
        assert info["payload_hash"] == payload_digest(dump_state(state))

        loaded = service.load("slot-a")
        assert loaded.model_dump() == state.model_dump()

    def test_missing_slot(self, service):
        assert service.load("nope") is None

    def test_overwrite_keeps_one_row(self, service, played):
        state, _ = played
        service.save("slot-a", state)
        later = state.model_copy(update={"turn": 4})
        service.save("slot-a", later)
        slots = service.list_slots()
        assert len(slots) == 1
        assert slots[0]["turn"] == 4

    def test_delete(self, service, played):
        state, _ = played
        service.save("slot-a", state)
        assert service.delete_slot("slot-a")
        assert not service.delete_slot("slot-a")
        assert service.load("slot-a") is None


class TestIntegrity:

    def test_verify_clean_slot(self, service, played):
        state, _ = played
        service.save("slot-a", state)
        valid, message = service.verify_slot("slot-a")
        assert valid
        assert "verified" in message

    def test_tampered_payload_detected(self, service, played):
        state, _ = played
        service.save("slot-a", state)
        tampered = dump_state(state)
        tampered["executive"]["trust"] = 100.0
        with service.SessionLocal() as session:
            session.execute(
                update(SaveSlotDB)
                .where(SaveSlotDB.slot_name == "slot-a")
                .values(payload=tampered)
            )
            session.commit()

        valid, message = service.verify_slot("slot-a")
        assert not valid
        assert "mismatch" in message
        with pytest.raises(SaveIntegrityError):
            service.load("slot-a")

    def test_non_object_payload_tamper_detected(self, service, played):
        state, _ = played
        service.save("slot-a", state)
        with service.SessionLocal() as session:
            session.execute(
                update(SaveSlotDB)
                .where(SaveSlotDB.slot_name == "slot-a")
                .values(payload=["not", "a", "state"])
            )
            session.commit()

        with pytest.raises(SaveIntegrityError):
            service.load("slot-a")

    def test_digest_ignores_key_order(self):
        assert payload_digest({"a": 1, "b": 2}) == payload_digest({"b": 2, "a": 1})


class TestTurnLog:

    def test_most_recent_entries_oldest_first(self, service, played):
        _, summaries = played
        for summary in summaries:
            service.append_turn("slot-a", summary)
        log = service.get_turn_log("slot-a", limit=2)
        assert [entry["turn"] for entry in log] == [2, 3]

    def test_log_removed_with_slot(self, service, played):
        state, summaries = played
        service.save("slot-a", state)
        service.append_turn("slot-a", summaries[0])
        service.delete_slot("slot-a")
        assert service.get_turn_log("slot-a") == []


class TestLenientLoad:

    def setup_method(self):
        self.state = TurnOrchestrator().new_game(seed=55)
        self.payload = dump_state(self.state)

    def test_well_formed_payload_round_trips(self):
        assert load_state(self.payload).model_dump() == self.state.model_dump()

    def test_invalid_field_falls_back_to_default(self):
        self.payload["executive"]["trust"] = 250.0
        self.payload["executive"]["patience"] = 33.0
        loaded = load_state(self.payload)
        assert loaded.executive.trust == 75.0
        assert loaded.executive.patience == 33.0
        assert loaded.seed == 55

    def test_missing_sections_use_defaults(self):
        del self.payload["polling"]
        del self.payload["manifesto"]
        loaded = load_state(self.payload)
        assert loaded.polling.national_approval == 45.0
        assert loaded.manifesto.total == 0
        assert loaded.turn == self.state.turn

    def test_population_regenerated_from_seed(self):
        self.payload["backbenchers"] = self.payload["backbenchers"][:50]
        self.payload["executive"]["trust"] = "high"
        loaded = load_state(self.payload)
        expected = generate_population(turn_rng(55, 0))
        assert len(loaded.backbenchers) == 200
        assert [r.model_dump() for r in loaded.backbenchers] == [r.model_dump() for r in expected]

    def test_bad_representative_record_repaired(self):
        self.payload["backbenchers"][7]["loyalty"] = -40
        self.payload["backbenchers"][8] = "garbage"
        loaded = load_state(self.payload)
        assert len(loaded.backbenchers) == 200
        assert loaded.backbenchers[7].loyalty == 85.0
        assert loaded.backbenchers[7].ideology == self.state.backbenchers[7].ideology
        assert loaded.backbenchers[8].id == 8

    def test_newer_format_version_warns(self, caplog):
        self.payload["format_version"] = 99
        with caplog.at_level(logging.WARNING, logger="chancellor_core.persistence.codec"):
            loaded = load_state(self.payload)
        assert loaded.turn == self.state.turn
        assert "newer than supported" in caplog.text

    def test_non_object_payload(self):
        loaded = load_state(["not", "a", "state"])
        assert isinstance(loaded, SimulationState)
        assert loaded.turn == 0
        assert len(loaded.backbenchers) == 200
