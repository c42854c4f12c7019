"""Settings loaded from environment variables (+ optional YAML config file).

Precedence: environment > config file (TASKMAN_CONFIG) > defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from taskman.domain.errors import StorageError

ENV_PREFIX = "TASKMAN"

DEFAULT_TASKS_FILE = Path("./data/tasks.yaml")
DEFAULT_LOG_DIR = Path(".local/taskman")
DEFAULT_LOG_LEVEL = "WARNING"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str) -> Optional[str]:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v


def _load_config_file(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StorageError(f"cannot read config file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise StorageError(f"config file {path} is not valid UTF-8: {e}") from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise StorageError(f"invalid YAML in config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StorageError(f"config file {path} must contain a mapping")
    return data


def _pick(name: str, file_values: Mapping[str, Any], default: str) -> str:
    env_value = _env(_k(name.upper()))
    if env_value is not None:
        return env_value
    file_value = file_values.get(name)
    if file_value is not None and str(file_value).strip() != "":
        return str(file_value)
    return default


@dataclass(frozen=True, slots=True)
class Settings:
    tasks_file: Path
    log_dir: Path
    log_level: str

    @property
    def console_level(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.WARNING

    @staticmethod
    def from_env() -> "Settings":
        config_path = _env(_k("CONFIG"))
        file_values = _load_config_file(Path(config_path).expanduser()) if config_path else {}

        return Settings(
            tasks_file=Path(_pick("tasks_file", file_values, str(DEFAULT_TASKS_FILE))).expanduser(),
            log_dir=Path(_pick("log_dir", file_values, str(DEFAULT_LOG_DIR))).expanduser(),
            log_level=_pick("log_level", file_values, DEFAULT_LOG_LEVEL),
        )
