"""Configuration loading from environment variables and rolecontext.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "rolecontext.toml"
_DEFAULT_CACHE_MAX_AGE_MS = 5 * 60 * 1000
_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class StoreConfig:
    """Context store behaviour, fixed at construction."""

    cache_max_age_ms: int = _DEFAULT_CACHE_MAX_AGE_MS
    silent_errors: bool = False
    verbose_logging: bool = False


@dataclass
class RoleContextConfig:
    """Top-level configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    log_level: str = "INFO"


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _env_bool(name: str, default: object) -> bool:
    value = os.getenv(name)
    return _as_bool(default if value is None else value)


def load_config(config_path: Path | None = None) -> RoleContextConfig:
    """Load configuration from environment variables and optional rolecontext.toml.

    Priority: environment variables > rolecontext.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.rolecontext/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".rolecontext" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    store_data = file_data.get("store", {})

    return RoleContextConfig(
        store=StoreConfig(
            cache_max_age_ms=int(
                os.getenv(
                    "ROLECONTEXT_CACHE_MAX_AGE_MS",
                    store_data.get("cache_max_age_ms", _DEFAULT_CACHE_MAX_AGE_MS),
                )
            ),
            silent_errors=_env_bool(
                "ROLECONTEXT_SILENT_ERRORS", store_data.get("silent_errors", False)
            ),
            verbose_logging=_env_bool(
                "ROLECONTEXT_VERBOSE", store_data.get("verbose_logging", False)
            ),
        ),
        log_level=os.getenv("ROLECONTEXT_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
