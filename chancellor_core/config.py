"""Chancellor Core — Application configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CHANCELLOR_",
        "extra": "ignore",
    }

    # ── Save Games (SQLite by default) ─────────────────────────
    database_url: str = "sqlite:///chancellor_saves.db"
    autosave_slot: str = "autosave"

    # ── New Game Defaults ──────────────────────────────────────
    default_regime: str = "starmer-reeves"
    default_seed: int | None = None

    # ── Dashboard ──────────────────────────────────────────────
    dashboard_host: str = "127.0.0.1"
    dashboard_port: int = 8000

    # ── Logging ────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"


settings = EngineSettings()
