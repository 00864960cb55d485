"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

from .constants import MAX_PAYOFF_MONTHS, STRATEGY_AVALANCHE, STRATEGY_SNOWBALL

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "DebtSage"
    DB_FILENAME = "debtsage.db"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("DEBTSAGE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("DEBTSAGE_DATABASE_URL", self._build_sqlite_url())
        self.MAX_PAYOFF_MONTHS = _env_int("DEBTSAGE_MAX_PAYOFF_MONTHS", MAX_PAYOFF_MONTHS)
        self.DEFAULT_STRATEGY = (
            os.getenv("DEBTSAGE_DEFAULT_STRATEGY", STRATEGY_AVALANCHE).strip().lower()
        )
        if self.DEFAULT_STRATEGY not in {STRATEGY_AVALANCHE, STRATEGY_SNOWBALL}:
            raise ValueError(
                f"DEBTSAGE_DEFAULT_STRATEGY must be avalanche or snowball, "
                f"got {self.DEFAULT_STRATEGY!r}"
            )

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("DEBTSAGE_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations block writes; fall back to user-local storage.
            fallback_path = Path.home() / f".{self.APP_NAME.lower()}"
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if not self.DATABASE_URL.startswith("sqlite"):
            return {}
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if self.DATABASE_URL in {"sqlite://", "sqlite:///:memory:"}:
            # Every session must see the same in-memory database.
            options["poolclass"] = StaticPool
        return options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class MemoryConfig(BaseConfig):
    """Configuration backed by a throwaway in-memory database."""

    DEBUG = True
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = "sqlite://"
