"""Loading :class:`UndoConfig` from a YAML file."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models.config import UndoConfig

logger = logging.getLogger(__name__)


def load_undo_config(path: Path) -> UndoConfig:
    """Read *path* and return the undo configuration it describes.

    A missing file yields the defaults.  The file must contain a YAML mapping;
    keys other than those known to :class:`UndoConfig` are ignored.
    """
    if not path.exists():
        logger.debug("No undo config at %s, using defaults", path)
        return UndoConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return UndoConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(data).__name__}")

    try:
        return UndoConfig.from_mapping(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid undo config in {path}: {exc}") from exc
