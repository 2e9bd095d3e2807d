from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILENAME = "pyrethrum.toml"

OutputFormat = Literal["text", "json"]


class PyrethrumConfig(BaseModel):
    """Configuration for a pyrethrum check run."""

    model_config = ConfigDict(extra="forbid")

    strict: bool = Field(
        default=False,
        description="Fail the run on warnings as well as errors",
    )
    format: OutputFormat = Field(
        default="text",
        description="Diagnostic output format",
    )
    ignore: list[str] = Field(
        default_factory=list,
        description="Glob patterns for diagnostic file paths to suppress",
    )

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.lower()
        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> PyrethrumConfig:
    """Load configuration from pyrethrum.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return PyrethrumConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return PyrethrumConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
