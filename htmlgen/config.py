"""Render configuration model and loading helpers."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from pathlib import Path
from collections.abc import Mapping
from typing import Any, Iterator, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidConfigurationError


class RenderConfig(BaseModel):
    """Options controlling how a node tree is serialized."""

    mode: Literal["pretty", "compact"] = Field(
        "compact", description="Whitespace framing: pretty-printed or compact."
    )
    indentation: str = Field(
        "  ", description="Indentation unit used for each nesting level in pretty mode."
    )
    force_important: bool = Field(
        False, description="Append !important to every generated stylesheet rule."
    )
    chunk_size: int = Field(
        4096,
        gt=0,
        description="Number of buffered bytes after which a streamed chunk is emitted.",
    )
    flush_on_boundary: bool = Field(
        False,
        description="Emit a streamed chunk after every top-level child as well.",
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("indentation")
    @classmethod
    def _indentation_is_whitespace(cls, value: str) -> str:
        if value.strip():
            raise ValueError("indentation must contain only whitespace")
        return value

    @property
    def pretty(self) -> bool:
        return self.mode == "pretty"

    @property
    def newline(self) -> bytes:
        return b"\n" if self.pretty else b""

    @property
    def indent_unit(self) -> bytes:
        return self.indentation.encode("utf-8") if self.pretty else b""

    @classmethod
    def coerce(cls, value: Union["RenderConfig", str, Mapping[str, Any], None] = None) -> "RenderConfig":
        """Normalize a configuration argument, failing fast on unknown values."""

        if value is None:
            return current_config()
        if isinstance(value, RenderConfig):
            return value
        if isinstance(value, str):
            payload: dict[str, Any] = {"mode": value}
        elif isinstance(value, Mapping):
            payload = dict(value)
        else:
            raise InvalidConfigurationError(
                f"Unsupported configuration value: {value!r}"
            )
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise InvalidConfigurationError(f"Invalid render configuration: {exc}") from exc


COMPACT = RenderConfig()
PRETTY = RenderConfig(mode="pretty")
EMAIL = RenderConfig(mode="pretty", indentation=" ", force_important=True)

_current: contextvars.ContextVar[RenderConfig] = contextvars.ContextVar(
    "htmlgen_render_config", default=COMPACT
)


def current_config() -> RenderConfig:
    """Return the configuration used when a render call passes none."""

    return _current.get()


@contextmanager
def config_scope(config: Union[RenderConfig, str, Mapping[str, Any]]) -> Iterator[RenderConfig]:
    """Temporarily replace the default configuration for the current task."""

    resolved = RenderConfig.coerce(config)
    token = _current.set(resolved)
    try:
        yield resolved
    finally:
        _current.reset(token)


def load_config(path: Path, overrides: Optional[Mapping[str, Any]] = None) -> RenderConfig:
    """Load a configuration mapping from YAML."""

    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(f"{path} must contain a mapping of options.")
    if overrides:
        data.update(overrides)
    return RenderConfig.coerce(data)


__all__ = [
    "COMPACT",
    "EMAIL",
    "PRETTY",
    "RenderConfig",
    "config_scope",
    "current_config",
    "load_config",
]
