"""Depth-first serialization of node trees.

The traversal is a single generator, :func:`walk`, yielding whole tokens
(an opening tag, an escaped text run, a closing tag) plus :data:`BOUNDARY`
markers after each top-level child. Materialized and chunked outputs both
consume this generator, so they cannot disagree on content.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Set, Tuple, Union

from .attributes import AttributeSet, MergePolicy, merge_attribute
from .context import RenderContext
from .entities import DOCTYPE, escape_attribute, escape_text
from .errors import InvalidStateError
from .nodes import (
    Attribute,
    Document,
    Element,
    Empty,
    Erased,
    Group,
    Node,
    Raw,
    Repeated,
    Text,
)
from .styles import StyleDeclaration

logger = logging.getLogger(__name__)


class _Boundary:
    def __repr__(self) -> str:
        return "BOUNDARY"


BOUNDARY = _Boundary()

Token = Union[bytes, _Boundary]

_VISIT, _EMIT, _INDENT, _MARK = range(4)


def resolve_attributes(element: Element, context: RenderContext) -> AttributeSet:
    """Fold an element's contributions, in order, into its final attribute set."""

    attrs = AttributeSet()
    for contribution in element.contributions:
        if isinstance(contribution, StyleDeclaration):
            class_name = context.declarations.class_name(contribution)
            attrs = merge_attribute(attrs, "class", class_name, MergePolicy.APPEND_UNIQUE_TOKEN)
        else:
            attrs = merge_attribute(attrs, contribution.name, contribution.value, contribution.policy)
    return attrs


def _attribute_bytes(attrs: AttributeSet) -> bytes:
    out = bytearray()
    for name, value in attrs.items():
        out += b" " + name.encode("utf-8")
        if value is True or value == "":
            continue
        out += b'="' + escape_attribute(str(value)) + b'"'
    return bytes(out)


def _open_element(element: Element, context: RenderContext) -> Tuple[bytes, bool]:
    attrs = resolve_attributes(element, context)
    block = context.config.pretty and element.is_block
    prefix = context.config.newline + context.indentation if block else b""
    opening = prefix + b"<" + element.tag.encode("utf-8") + _attribute_bytes(attrs) + b">"
    return opening, block


def walk(node: Node, context: RenderContext) -> Iterator[Token]:
    """Yield the tokens of ``node`` in document order."""

    stack: List[tuple] = [(_VISIT, node, True)]
    while stack:
        op, payload, top = stack.pop()
        if op == _EMIT:
            yield payload
            continue
        if op == _INDENT:
            context.indentation = payload
            continue
        if op == _MARK:
            yield BOUNDARY
            continue

        current = payload
        if isinstance(current, Empty):
            continue
        if isinstance(current, (Group, Repeated)):
            children = current.children if isinstance(current, Group) else current.items
            for child in reversed(children):
                stack.append((_VISIT, child, top))
            continue
        if isinstance(current, Erased):
            stack.append((_VISIT, current.base, top))
            continue

        if top:
            stack.append((_MARK, None, False))

        if isinstance(current, Text):
            if current.content:
                yield escape_text(current.content)
        elif isinstance(current, Raw):
            content = current.content
            if content:
                yield content.encode("utf-8") if isinstance(content, str) else bytes(content)
        elif isinstance(current, Element):
            opening, block = _open_element(current, context)
            yield opening
            if current.void:
                continue
            inline_layout = not block or current.tag.lower() == "pre"
            parent_indentation = context.indentation
            closing = b"</" + current.tag.encode("utf-8") + b">"
            if inline_layout:
                child_indentation = parent_indentation
            else:
                child_indentation = parent_indentation + context.config.indent_unit
                closing = context.config.newline + parent_indentation + closing
            stack.append((_EMIT, closing, False))
            stack.append((_INDENT, parent_indentation, False))
            stack.append((_VISIT, current.children, False))
            stack.append((_INDENT, child_indentation, False))
        elif isinstance(current, Document):
            yield from _document_tokens(current, context, top)
        else:
            raise TypeError(f"Cannot render {type(current).__name__}")


def _document_tokens(doc: Document, context: RenderContext, top: bool) -> Iterator[Token]:
    """Two passes: the body first, so its stylesheet can precede it in the head."""

    config = context.config
    newline = config.newline
    indent = config.indent_unit
    saved = context.indentation

    context.indentation = indent * 2
    body = [token for token in walk(doc.body, context) if top or token is not BOUNDARY]
    context.indentation = indent * 2
    head = b"".join(token for token in walk(doc.head, context) if token is not BOUNDARY)
    context.indentation = saved

    html_open = b"<html"
    if doc.lang:
        html_open += b' lang="' + escape_attribute(doc.lang) + b'"'
    html_open += b">"

    preamble = bytearray(DOCTYPE)
    preamble += newline + html_open
    preamble += newline + indent + b"<head>"
    preamble += head
    if len(context.declarations):
        preamble += newline + indent * 2 + b"<style>"
        preamble += context.stylesheet(indent * 3)
        preamble += newline + indent * 2 + b"</style>"
    preamble += newline + indent + b"</head>"
    preamble += newline + indent + b"<body>"
    yield bytes(preamble)

    yield from body

    yield newline + indent + b"</body>" + newline + b"</html>"


def collect_class_tokens(node: Node) -> Set[str]:
    """Collect every caller-supplied class token in the tree."""

    tokens: Set[str] = set()
    pending: List[Node] = [node]
    while pending:
        current = pending.pop()
        if isinstance(current, Group):
            pending.extend(current.children)
        elif isinstance(current, Repeated):
            pending.extend(current.items)
        elif isinstance(current, Erased):
            pending.append(current.base)
        elif isinstance(current, Document):
            pending.extend((current.head, current.body))
        elif isinstance(current, Element):
            for contribution in current.contributions:
                if (
                    isinstance(contribution, Attribute)
                    and contribution.name.lower() == "class"
                    and isinstance(contribution.value, str)
                ):
                    tokens.update(contribution.value.split())
            pending.append(current.children)
    return tokens


def stream_tokens(node: Node, context: RenderContext) -> Iterator[Token]:
    """Walk ``node`` while holding ``context`` in the rendering state."""

    with context.rendering():
        tokens = collect_class_tokens(node)
        clashes = tokens & context.declarations.issued()
        if clashes:
            raise InvalidStateError(
                "Class names already generated in this render context: "
                + ", ".join(sorted(clashes))
            )
        context.declarations.reserve(tokens)
        yield from walk(node, context)


def render(node: Node, context: RenderContext) -> None:
    """Append the bytes of ``node`` to the context accumulator."""

    for token in stream_tokens(node, context):
        if token is not BOUNDARY:
            context.write(token)
    logger.debug(
        "Rendered %s into context (%d bytes buffered, %d style rules)",
        type(node).__name__,
        len(context.buffer),
        len(context.declarations),
    )


__all__ = [
    "BOUNDARY",
    "Token",
    "collect_class_tokens",
    "render",
    "resolve_attributes",
    "stream_tokens",
    "walk",
]
