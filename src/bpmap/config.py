"""
Global Configuration and Defaults.

Constants shared across the package, plus the ``Settings`` model read from
``.bpmap/config.yaml``. The core (store, index, projector, navigator) only
consumes plain values; reading the file is the CLI's job.
"""

import logging
import os
from enum import StrEnum
from pathlib import Path
from typing import List, Optional

import pydantic
import yaml
from pydantic import BaseModel, Field, field_validator

from .core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# --- Locations ---
DATA_DIR = ".bpmap"
CONFIG_FILENAME = "config.yaml"
DEFAULT_JSON_FILENAME = "model.json"
DEFAULT_SQLITE_FILENAME = "bpmap.db"

# Overrides the config file location.
CONFIG_ENV_VAR = "BPMAP_CONFIG"

# --- View ---
DEFAULT_ROOT_LABEL = "All Processes"


class StorageBackend(StrEnum):
    JSON = "json"
    SQLITE = "sqlite"


class StorageSettings(BaseModel):
    backend: StorageBackend = StorageBackend.JSON
    path: Optional[str] = None

    def resolve_path(self, root: Path) -> Path:
        """Storage file location, relative paths taken from the project root."""
        if self.path:
            path = Path(self.path)
            return path if path.is_absolute() else root / path
        filename = DEFAULT_SQLITE_FILENAME if self.backend == StorageBackend.SQLITE else DEFAULT_JSON_FILENAME
        return root / DATA_DIR / filename


class ViewSettings(BaseModel):
    root_label: str = DEFAULT_ROOT_LABEL
    hide: List[str] = Field(default_factory=list)

    @field_validator("hide")
    @classmethod
    def _only_leaf_kinds(cls, value: List[str]) -> List[str]:
        allowed = {"system", "vendor"}
        unknown = [kind for kind in value if kind not in allowed]
        if unknown:
            raise ValueError(f"only 'system' and 'vendor' can be hidden, got {unknown}")
        return value


class LoggingSettings(BaseModel):
    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


class Settings(BaseModel):
    """Contents of .bpmap/config.yaml."""
    version: str = "1.0"
    project_name: str = "bpmap"
    storage: StorageSettings = Field(default_factory=StorageSettings)
    view: ViewSettings = Field(default_factory=ViewSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """
        Read settings from a YAML file.

        A missing file yields the defaults.

        Raises:
            ConfigError: If the file is not valid YAML or fails validation.
        """
        if not path.exists():
            logger.debug("No config at %s, using defaults", path)
            return cls()

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {path}")

        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, sort_keys=False, default_flow_style=False)


def config_path(root: Path) -> Path:
    """Location of the config file, honouring BPMAP_CONFIG."""
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return root / DATA_DIR / CONFIG_FILENAME


def load_settings(root: Path) -> Settings:
    return Settings.load(config_path(root))
