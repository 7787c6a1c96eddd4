"""Per-render mutable state."""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from .config import RenderConfig
from .errors import InvalidStateError
from .styles import DeclarationTable


class ContextState(Enum):
    OPEN = "open"
    RENDERING = "rendering"
    FINALIZED = "finalized"


class RenderContext:
    """Traversal state for one render call.

    Holds the output accumulator, the declaration table and the current
    indentation. A context is never shared between renders; once
    :meth:`finalize` has returned the output it refuses further use.
    """

    def __init__(
        self,
        config: Union[RenderConfig, str, Mapping[str, Any], None] = None,
        *,
        reserved_classes: Iterable[str] = (),
    ) -> None:
        self.config = RenderConfig.coerce(config)
        self.declarations = DeclarationTable(reserved_classes)
        self.buffer = bytearray()
        self.indentation = b""
        self._state = ContextState.OPEN

    @property
    def state(self) -> ContextState:
        return self._state

    def _require_open(self) -> None:
        if self._state is ContextState.FINALIZED:
            raise InvalidStateError("Render context was already finalized; create a new one.")
        if self._state is ContextState.RENDERING:
            raise InvalidStateError("Render context is already in use by another render.")

    @contextmanager
    def rendering(self) -> Iterator["RenderContext"]:
        self._require_open()
        self._state = ContextState.RENDERING
        try:
            yield self
        finally:
            self._state = ContextState.OPEN
            self.indentation = b""

    def write(self, data: bytes) -> None:
        if self._state is not ContextState.RENDERING:
            raise InvalidStateError(f"Cannot write to a render context in state {self._state.value!r}.")
        self.buffer += data

    def finalize(self) -> bytes:
        """Return the accumulated output and retire the context."""

        self._require_open()
        self._state = ContextState.FINALIZED
        output = bytes(self.buffer)
        self.buffer = bytearray()
        return output

    def stylesheet(self, base_indentation: Optional[bytes] = None) -> bytes:
        return self.declarations.stylesheet(self.config, base_indentation or b"")


__all__ = ["ContextState", "RenderContext"]
