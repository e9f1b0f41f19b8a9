"""
Snapshot codec — serialize SimulationState and load it back leniently.

Saving is a plain `model_dump(mode="json")`; loading a well-formed payload
is a plain `model_validate` and round-trips exactly.

A malformed or partial payload (an old save missing a late-added field, a
hand-edited value out of range) degrades field by field: anything missing
or invalid falls back to the model's documented default and a warning is
logged, instead of failing the whole load. The backbench population is
regenerated from the run's seed when it is unusable as a whole.
"""

from __future__ import annotations

import hashlib
import json
import logging
import types
import typing
from typing import Any

from pydantic import BaseModel, ValidationError

from chancellor_core.model.schema import (
    POPULATION_SIZE,
    STATE_FORMAT_VERSION,
    Representative,
    SimulationState,
)
from chancellor_core.orchestrator import turn_rng
from chancellor_core.politics.backbench import generate_population

logger = logging.getLogger(__name__)


def dump_state(state: SimulationState) -> dict[str, Any]:
    return state.model_dump(mode="json")


def payload_digest(payload: Any) -> str:
    """SHA-256 over canonical JSON (sorted keys, no whitespace)."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()


def load_state(payload: Any) -> SimulationState:
    """Rebuild a SimulationState, substituting defaults for bad fields."""
    if not isinstance(payload, dict):
        logger.warning("Snapshot is not an object (%s); starting from defaults",
                       type(payload).__name__)
        payload = {}

    version = payload.get("format_version")
    if isinstance(version, int) and version > STATE_FORMAT_VERSION:
        logger.warning("Snapshot format %d is newer than supported %d",
                       version, STATE_FORMAT_VERSION)

    try:
        state = SimulationState.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Snapshot failed strict validation (%d errors); loading leniently",
                       exc.error_count())
    else:
        if len(state.backbenchers) != POPULATION_SIZE:
            state.backbenchers = _load_population(None, state.seed)
        return state

    values = dict(payload)
    values.pop("backbenchers", None)
    state = _lenient(SimulationState, values, "state")
    if state is None:
        state = SimulationState()
    state.backbenchers = _load_population(payload.get("backbenchers"), state.seed)
    return state


# ════════════════════════════════════════════════════════════════
# Internal
# ════════════════════════════════════════════════════════════════


def _model_type(annotation: Any) -> tuple[type[BaseModel] | None, bool]:
    """Return (model class, is_list) for `Model`, `Model | None` or `list[Model]`."""
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return _model_type(args[0])
        return None, False
    if origin is list:
        args = typing.get_args(annotation)
        if args and isinstance(args[0], type) and issubclass(args[0], BaseModel):
            return args[0], True
        return None, False
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation, False
    return None, False


def _lenient(model: type[BaseModel], data: Any, path: str) -> Any:
    """Validate `data` as `model`, dropping invalid fields to their defaults.

    Returns None when the model cannot be built at all (a required field
    without a default is missing or invalid).
    """
    if not isinstance(data, dict):
        logger.warning("%s: expected an object, got %s", path, type(data).__name__)
        data = {}
    values = dict(data)

    for name, field in model.model_fields.items():
        if name not in values:
            continue
        nested, is_list = _model_type(field.annotation)
        if nested is None:
            continue
        raw = values[name]
        if is_list:
            if not isinstance(raw, list):
                logger.warning("%s.%s: expected a list; using default", path, name)
                values.pop(name)
                continue
            items = [_lenient(nested, item, f"{path}.{name}[{i}]") for i, item in enumerate(raw)]
            values[name] = [item for item in items if item is not None]
        elif isinstance(raw, dict):
            built = _lenient(nested, raw, f"{path}.{name}")
            if built is None:
                values.pop(name)
            else:
                values[name] = built

    for _ in range(len(model.model_fields) + 1):
        try:
            return model.model_validate(values)
        except ValidationError as exc:
            bad = {err["loc"][0] for err in exc.errors() if err["loc"]}
            droppable = bad & set(values)
            if not droppable:
                logger.warning("%s: unrecoverable (%s); dropped", path, exc.errors()[0]["msg"])
                return None
            for name in sorted(droppable):
                logger.warning("%s.%s: invalid value %r; using default", path, name, values[name])
                values.pop(name)
    return None


def _load_population(raw: Any, seed: int) -> list[Representative]:
    if not isinstance(raw, list) or len(raw) != POPULATION_SIZE:
        logger.warning("Backbench population unusable; regenerating from seed %d", seed)
        return generate_population(turn_rng(seed, 0))

    population: list[Representative] = []
    for index, record in enumerate(raw):
        values = dict(record) if isinstance(record, dict) else {}
        values["id"] = index
        rep = _lenient(Representative, values, f"state.backbenchers[{index}]")
        population.append(rep if rep is not None else Representative(id=index))
    return population
