#!/usr/bin/env python3
"""
Configuration Management for Ledger Import

Settings come from environment variables (optionally via a .env file) and are
grouped into a top-level Config plus an ImportConfig section holding the
reconciliation defaults.

The import pipeline never reads the environment directly; the CLI builds
explicit ImportOptions from this configuration.
"""

import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

ENV_PREFIX = "LEDGER_IMPORT_"


def _env(name: str, default: str) -> str:
    return os.getenv(ENV_PREFIX + name, default)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("false", "0", "no", "off", "")


class Environment(Enum):
    """Where ledger-import is running."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class ImportConfig:
    """Reconciliation pipeline defaults."""

    matching_enabled: bool = True
    auto_merge_threshold: int = 90
    chunk_size: int = 100
    default_currency: str = "USD"

    @classmethod
    def from_environment(cls) -> "ImportConfig":
        return cls(
            matching_enabled=_env_flag(ENV_PREFIX + "MATCHING_ENABLED", True),
            auto_merge_threshold=int(_env("AUTO_MERGE_THRESHOLD", "90")),
            chunk_size=int(_env("CHUNK_SIZE", "100")),
            default_currency=_env("DEFAULT_CURRENCY", "USD").strip().upper(),
        )

    def problems(self) -> list[str]:
        found = []
        if not 1 <= self.auto_merge_threshold <= 100:
            found.append(f"Auto-merge threshold must be between 1 and 100, got {self.auto_merge_threshold}")
        if self.chunk_size <= 0:
            found.append(f"Chunk size must be positive, got {self.chunk_size}")
        if len(self.default_currency) != 3:
            found.append(f"Default currency must be a 3-letter code, got {self.default_currency!r}")
        return found


@dataclass
class Config:
    """
    Main configuration class for ledger-import.

    The data directory defaults to ./data, or to a scratch directory under the
    system temp dir when running tests. The JSON workspace used by the CLI
    lives in its ``workspace`` subdirectory.
    """

    environment: Environment
    data_dir: Path
    workspace_dir: Path
    importing: ImportConfig
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        environment = Environment(_env("ENV", "development"))

        configured = os.getenv(ENV_PREFIX + "DATA_DIR")
        if configured:
            data_dir = Path(configured).expanduser()
        elif environment == Environment.TEST:
            data_dir = Path(tempfile.gettempdir()) / "test_ledger_import"
        else:
            data_dir = Path("./data")
        if environment != Environment.TEST:
            data_dir = data_dir.resolve()

        workspace_dir = data_dir / "workspace"
        workspace_dir.mkdir(parents=True, exist_ok=True)

        return cls(
            environment=environment,
            data_dir=data_dir,
            workspace_dir=workspace_dir,
            importing=ImportConfig.from_environment(),
            debug=_env_flag("DEBUG", False),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = [f"{name} does not exist: {path}" for name, path in self._directories() if not path.is_dir()]
        return errors + self.importing.problems()

    def _directories(self) -> list[tuple[str, Path]]:
        return [("data_dir", self.data_dir), ("workspace_dir", self.workspace_dir)]

    def setup_logging(self) -> None:
        """Configure the root logger for this environment."""
        if self.environment == Environment.DEVELOPMENT:
            log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            log_format = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(
            level=getattr(logging, self.log_level, logging.INFO),
            format=log_format,
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a JSON-friendly dictionary."""
        result = asdict(self)
        result["environment"] = self.environment.value
        for name, path in self._directories():
            result[name] = str(path)
        return result


_config: Config | None = None


def get_config() -> Config:
    """Load, validate and cache the process-wide configuration."""
    global _config
    if _config is None:
        config = Config.from_environment()
        errors = config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")
        config.setup_logging()
        _config = config
    return _config


def reload_config() -> Config:
    """Drop the cached configuration and load it again (used by tests)."""
    global _config
    _config = None
    return get_config()


def get_data_dir() -> Path:
    return get_config().data_dir
