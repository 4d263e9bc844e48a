"""Parser configuration loaded from YAML files."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ntfsmft.core.cache import DEFAULT_CACHE_SIZE
from ntfsmft.core.errors import ConfigError

OutputFormat = Literal["json", "jsonl", "csv"]


class ParserConfig(BaseModel):
    """Settings for MftParser and the dump command."""

    entry_size: int | None = Field(
        default=None,
        gt=0,
        description="Fixed MFT entry size in bytes; probed from the input when unset",
    )

    path_cache_size: int = Field(
        default=DEFAULT_CACHE_SIZE,
        ge=1,
        description="Capacity of the resolved-path LRU cache",
    )

    skip_entry_errors: bool = Field(
        default=True,
        description="Log and skip entries that fail to decode instead of aborting",
    )

    output_format: OutputFormat = Field(
        default="jsonl",
        description="Default output format for dump",
    )

    model_config = {"extra": "forbid"}

    @field_validator("entry_size")
    @classmethod
    def _sector_multiple(cls, value: int | None) -> int | None:
        if value is not None and value % 512 != 0:
            raise ValueError(f"entry_size must be a multiple of 512, got {value}")
        return value

    def merged(self, **overrides: Any) -> "ParserConfig":
        """Return a copy with the non-None overrides applied (CLI flags)."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        return ParserConfig.model_validate({**self.model_dump(), **values})


def load_config(path: Path) -> ParserConfig:
    """Load a ParserConfig from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated configuration; an empty file yields the defaults

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}", path=str(path)) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Config file '{path}' is not valid YAML", path=str(path), errors=[str(e)]
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file '{path}' must contain a mapping", path=str(path)
        )

    try:
        return ParserConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigError(
            f"Config file '{path}' failed validation", path=str(path), errors=errors
        ) from e
