"""Materialized and chunked byte sinks over the serializer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, AsyncIterator, Iterable, Iterator, Optional, Union

from .config import RenderConfig
from .context import RenderContext
from .errors import InvalidConfigurationError
from .nodes import coerce
from .serializer import BOUNDARY, Token, render, stream_tokens

logger = logging.getLogger(__name__)

ConfigLike = Union[RenderConfig, str, Mapping[str, Any], None]


def render_bytes(node: Any, config: ConfigLike = None) -> bytes:
    """Render a tree to one fully materialized byte string."""

    context = RenderContext(config)
    render(coerce(node), context)
    output = context.finalize()
    logger.debug("Materialized %d bytes", len(output))
    return output


def render_string(node: Any, config: ConfigLike = None) -> str:
    return render_bytes(node, config).decode("utf-8")


def _chunk_size(context: RenderContext, override: Optional[int]) -> int:
    if override is None:
        return context.config.chunk_size
    if override <= 0:
        raise InvalidConfigurationError(f"chunk_size must be positive, got {override}")
    return override


def _chunked(tokens: Iterable[Token], chunk_size: int, flush_on_boundary: bool) -> Iterator[bytes]:
    """Group whole tokens into chunks; a token is never split across chunks."""

    pending = bytearray()
    for token in tokens:
        if token is BOUNDARY:
            if flush_on_boundary and pending:
                yield bytes(pending)
                pending.clear()
            continue
        pending += token
        if len(pending) >= chunk_size:
            yield bytes(pending)
            pending.clear()
    if pending:
        yield bytes(pending)


def iter_chunks(
    node: Any,
    config: ConfigLike = None,
    *,
    chunk_size: Optional[int] = None,
    context: Optional[RenderContext] = None,
) -> Iterator[bytes]:
    """Synchronously yield chunks while the traversal is still running."""

    context = context if context is not None else RenderContext(config)
    size = _chunk_size(context, chunk_size)
    yield from _chunked(
        stream_tokens(coerce(node), context), size, context.config.flush_on_boundary
    )
    context.finalize()


async def render_chunks(
    node: Any,
    config: ConfigLike = None,
    *,
    chunk_size: Optional[int] = None,
    context: Optional[RenderContext] = None,
) -> AsyncIterator[bytes]:
    """Cooperatively stream a render, suspending after every chunk.

    Closing the generator early abandons the render; its context is
    discarded with it.
    """

    context = context if context is not None else RenderContext(config)
    size = _chunk_size(context, chunk_size)
    count = 0
    for chunk in _chunked(
        stream_tokens(coerce(node), context), size, context.config.flush_on_boundary
    ):
        count += 1
        yield chunk
        await asyncio.sleep(0)
    context.finalize()
    logger.debug("Streamed %d chunk(s) with chunk size %d", count, size)


async def collect_chunks(node: Any, config: ConfigLike = None, *, chunk_size: Optional[int] = None) -> bytes:
    """Drain :func:`render_chunks` into a single byte string."""

    parts = [chunk async for chunk in render_chunks(node, config, chunk_size=chunk_size)]
    return b"".join(parts)


__all__ = [
    "collect_chunks",
    "iter_chunks",
    "render_bytes",
    "render_chunks",
    "render_string",
]
