"""Configuration model for the undo engine."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_HISTORY_BRANCH_NAME = "forge-history"
HISTORY_BRANCH_CONFIG_KEY = "forge-undo-branch"


class UndoConfig(BaseModel):
    """Settings consumed by the undo engine.

    ``history_branch_name`` is read from the ``forge-undo-branch`` key; a
    missing or blank value falls back to ``forge-history``.
    """

    model_config = ConfigDict(populate_by_name=True)

    history_branch_name: str = Field(
        default=DEFAULT_HISTORY_BRANCH_NAME,
        alias=HISTORY_BRANCH_CONFIG_KEY,
    )
    author_name: str = "aioundo"
    author_email: str = "aioundo@localhost"
    ignore_file: str = ".gitignore"

    @field_validator("history_branch_name", mode="before")
    @classmethod
    def _default_blank_branch(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_HISTORY_BRANCH_NAME
        return value.strip() if isinstance(value, str) else value

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> UndoConfig:
        """Build a config from an arbitrary key/value store, ignoring unknown keys."""
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if v is not None}
        return cls.model_validate(known)
