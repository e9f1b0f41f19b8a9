"""
Chancellor Core — HTTP API for a game front end.

FastAPI application exposing the player input surface:
- New game, current state and save slots
- Advance turn (optionally carrying policy deltas)
- Resolve the pending intervention (comply | defy)
- What-if projection over copies of the current state

Every response carries the run `status`, so a client can tell "needs a
choice" (intervention_pending) from "game over" (terminated). Invalid
transitions come back as 409 Conflict. Each processed turn is autosaved and
appended to the turn log when the save store is available.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from chancellor_core.config import settings
from chancellor_core.model.schema import (
    FiscalRegimeId,
    InterventionChoice,
    PolicyDelta,
    PreconditionViolation,
    SimulationState,
    TurnSummary,
)
from chancellor_core.orchestrator import TurnOrchestrator

logger = logging.getLogger(__name__)


# ── Pydantic request models ────────────────────────────────────


class NewGameRequest(BaseModel):
    seed: int | None = None
    regime_id: FiscalRegimeId = FiscalRegimeId.STARMER_REEVES


class TurnRequest(BaseModel):
    delta: PolicyDelta | None = None


class InterventionRequest(BaseModel):
    choice: InterventionChoice


class ProjectionRequest(BaseModel):
    turns: int = Field(default=6, ge=1, le=60)
    delta: PolicyDelta | None = None


class GameSession:
    """Mutable application state injected at startup."""

    def __init__(self) -> None:
        self.orchestrator: TurnOrchestrator = TurnOrchestrator()
        self.save_service: Any = None
        self.game: SimulationState | None = None
        self.last_summary: TurnSummary | None = None
        self.startup_time: datetime = datetime.now(timezone.utc)


session = GameSession()


# ── Application lifecycle ──────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup & shutdown lifecycle — connect the save store, start a game."""
    logger.info("Chancellor API starting — regime: %s", settings.default_regime)

    try:
        from chancellor_core.persistence.service import SaveGameService

        service = SaveGameService(settings.database_url)
        service.initialize()
        session.save_service = service
        logger.info("Chancellor API connected to save store")
    except Exception as exc:
        logger.warning("Chancellor API could not open the save store: %s", exc)

    if session.game is None:
        session.game = session.orchestrator.new_game(
            seed=settings.default_seed, regime_id=settings.default_regime
        )

    yield

    logger.info("Chancellor API shutting down")


app = FastAPI(
    title="Chancellor Core",
    description="Turn-based political-fiscal simulation engine",
    version="0.1.0",
    lifespan=lifespan,
)


# ── Helpers ────────────────────────────────────────────────────


def _require_game() -> SimulationState:
    if session.game is None:
        raise HTTPException(status_code=503, detail="No game in progress")
    return session.game


def _overview(game: SimulationState) -> dict[str, Any]:
    rel = game.executive
    return {
        "status": game.status.value,
        "turn": game.turn,
        "month": game.calendar_label,
        "regime_id": game.fiscal.regime_id.value,
        "headroom_bn": game.headroom_bn,
        "compliant": game.compliance.overall_compliant,
        "approval": game.polling.national_approval,
        "backbench_mood": game.sentiment.overall_mood,
        "rebellion_risk": game.sentiment.rebellion_risk.value,
        "trust": rel.trust,
        "patience": rel.patience,
        "reshuffle_risk": rel.reshuffle_risk,
        "pending_intervention": (
            rel.pending_intervention.model_dump(mode="json")
            if rel.pending_intervention
            else None
        ),
        "reshuffle": rel.reshuffle.model_dump(mode="json") if rel.reshuffle else None,
    }


def _conflict(exc: PreconditionViolation, game: SimulationState) -> HTTPException:
    return HTTPException(
        status_code=409, detail={"error": str(exc), "status": game.status.value}
    )


def _autosave(game: SimulationState, summary: TurnSummary | None = None) -> None:
    if session.save_service is None:
        return
    session.save_service.save(settings.autosave_slot, game)
    if summary is not None:
        session.save_service.append_turn(settings.autosave_slot, summary)


# ── Routes: Game ───────────────────────────────────────────────


@app.post("/api/game")
async def api_new_game(req: NewGameRequest):
    """Start a new term, replacing the game in progress."""
    session.game = session.orchestrator.new_game(seed=req.seed, regime_id=req.regime_id)
    session.last_summary = None
    _autosave(session.game)
    return JSONResponse({"created": True, **_overview(session.game)})


@app.get("/api/state")
async def api_state():
    """Overview plus the full serialized state."""
    game = _require_game()
    return JSONResponse({**_overview(game), "state": game.model_dump(mode="json")})


@app.post("/api/turn")
async def api_advance_turn(req: TurnRequest):
    """Advance one month, applying the submitted policy deltas first."""
    game = _require_game()
    try:
        result = session.orchestrator.advance_turn(game, req.delta)
    except PreconditionViolation as exc:
        raise _conflict(exc, game) from exc

    session.game = result.state
    session.last_summary = result.summary
    _autosave(result.state, result.summary)
    return JSONResponse(
        {**_overview(result.state), "summary": result.summary.model_dump(mode="json")}
    )


@app.post("/api/intervention")
async def api_resolve_intervention(req: InterventionRequest):
    """Comply with or defy the Prime Minister's pending intervention."""
    game = _require_game()
    try:
        result = session.orchestrator.resolve_intervention(game, req.choice)
    except PreconditionViolation as exc:
        raise _conflict(exc, game) from exc

    session.game = result.state
    _autosave(result.state)
    return JSONResponse(
        {
            **_overview(result.state),
            "outcome": result.outcome.model_dump(mode="json"),
            "applied": result.applied.model_dump(mode="json"),
        }
    )


@app.post("/api/projection")
async def api_projection(req: ProjectionRequest):
    """What-if: simulate ahead on a copy; the live game is untouched."""
    game = _require_game()
    summaries = session.orchestrator.project(game, req.turns, req.delta)
    return JSONResponse(
        {
            "status": game.status.value,
            "turns": [s.model_dump(mode="json") for s in summaries],
        }
    )


# ── Routes: Save slots ─────────────────────────────────────────


@app.get("/api/saves")
async def api_list_saves():
    if session.save_service is None:
        return JSONResponse({"slots": [], "message": "Save store not initialized"})
    return JSONResponse({"slots": session.save_service.list_slots()})


@app.post("/api/saves/{slot_name}")
async def api_save(slot_name: str):
    game = _require_game()
    if session.save_service is None:
        raise HTTPException(status_code=503, detail="Save store not initialized")
    info = session.save_service.save(slot_name, game)
    return JSONResponse({"saved": True, **info})


@app.post("/api/saves/{slot_name}/load")
async def api_load(slot_name: str):
    if session.save_service is None:
        raise HTTPException(status_code=503, detail="Save store not initialized")

    from chancellor_core.persistence.service import SaveIntegrityError

    try:
        loaded = session.save_service.load(slot_name)
    except SaveIntegrityError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if loaded is None:
        raise HTTPException(status_code=404, detail=f"No save slot named {slot_name!r}")

    session.game = loaded
    session.last_summary = None
    return JSONResponse({"loaded": True, **_overview(loaded)})


# ── Health ─────────────────────────────────────────────────────


@app.get("/health")
async def health():
    """Health check endpoint."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": (datetime.now(timezone.utc) - session.startup_time).total_seconds(),
        "game_in_progress": session.game is not None,
        "save_store_available": session.save_service is not None,
    })


def serve() -> None:
    """Run the API with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.dashboard_host, port=settings.dashboard_port)


if __name__ == "__main__":
    serve()
