"""Immutable node model and builder functions for renderable trees."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, Tuple, Union

from .attributes import AttributeValue, MergePolicy
from .styles import StyleDeclaration

VOID_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "command",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Inline elements are laid out without newlines or indentation in pretty mode.
INLINE_TAGS = frozenset(
    {
        "a",
        "abbr",
        "acronym",
        "b",
        "bdo",
        "big",
        "br",
        "button",
        "cite",
        "code",
        "del",
        "dfn",
        "em",
        "i",
        "img",
        "input",
        "ins",
        "kbd",
        "label",
        "map",
        "mark",
        "object",
        "output",
        "q",
        "s",
        "samp",
        "script",
        "select",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "textarea",
        "time",
        "tt",
        "u",
        "var",
    }
)

_TAG_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9:_.-]*$")
_ATTRIBUTE_NAME = re.compile(r"^[^\s\"'<>/=\x00-\x1f]+$")


@dataclass(frozen=True)
class Empty:
    """Renders to nothing."""


EMPTY = Empty()


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class Raw:
    """Trusted markup emitted without escaping."""

    content: Union[str, bytes]


@dataclass(frozen=True)
class Group:
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Repeated:
    items: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Attribute:
    name: str
    value: AttributeValue
    policy: Optional[MergePolicy] = None


Contribution = Union[Attribute, StyleDeclaration]


@dataclass(frozen=True)
class Element:
    """A markup element with ordered attribute and style contributions."""

    tag: str
    children: "Node" = EMPTY
    void: bool = False
    contributions: Tuple[Contribution, ...] = field(default=())

    @property
    def is_block(self) -> bool:
        return self.tag.lower() not in INLINE_TAGS

    def __call__(self, *children: Any) -> "Element":
        return replace(self, children=_wrap(children))

    def with_children(self, *children: Any) -> "Element":
        return self(*children)

    def attribute(
        self, name: str, value: AttributeValue = True, policy: Optional[MergePolicy] = None
    ) -> "Element":
        if not _ATTRIBUTE_NAME.match(name):
            raise ValueError(f"Invalid attribute name: {name!r}")
        return replace(self, contributions=self.contributions + (Attribute(name, value, policy),))

    def attributes(self, values: Mapping[str, AttributeValue]) -> "Element":
        element = self
        for name, value in values.items():
            element = element.attribute(name, value)
        return element

    def add_class(self, *tokens: str) -> "Element":
        return self.attribute("class", " ".join(tokens), MergePolicy.APPEND_UNIQUE_TOKEN)

    def inline_style(
        self,
        property: str,
        value: Optional[str],
        *,
        at_rule: Optional[str] = None,
        media: Optional[str] = None,
        selector: Optional[str] = None,
        pseudo: Optional[str] = None,
    ) -> "Element":
        """Attach a declaration that renders as a generated utility class.

        ``media`` is an alias of ``at_rule``. A ``None`` value leaves the
        element unchanged.
        """

        if value is None:
            return self
        if not property.strip():
            raise ValueError("Style property must not be empty")
        declaration = StyleDeclaration(
            property=property,
            value=value,
            at_rule=at_rule or media,
            selector=selector,
            pseudo=pseudo,
        )
        return replace(self, contributions=self.contributions + (declaration,))


@dataclass(frozen=True)
class Document:
    body: "Node" = EMPTY
    head: "Node" = EMPTY
    lang: Optional[str] = None


@dataclass(frozen=True)
class Erased:
    """Type-erased box; every operation goes to the boxed node."""

    base: "Node"

    def attribute(self, name: str, value: AttributeValue = True, policy: Optional[MergePolicy] = None) -> "Erased":
        return Erased(_push_down(self.base, lambda element: element.attribute(name, value, policy)))

    def add_class(self, *tokens: str) -> "Erased":
        return Erased(_push_down(self.base, lambda element: element.add_class(*tokens)))

    def inline_style(self, property: str, value: Optional[str], **qualifiers: Optional[str]) -> "Erased":
        return Erased(_push_down(self.base, lambda element: element.inline_style(property, value, **qualifiers)))


def _push_down(node: "Node", apply: Callable[[Element], Element]) -> "Node":
    """Apply an element operation to ``node`` or to the elements a group renders.

    Text, raw markup and empty nodes have nothing to carry attributes and are
    returned unchanged.
    """

    if isinstance(node, Element):
        return apply(node)
    if isinstance(node, Group):
        return Group(tuple(_push_down(child, apply) for child in node.children))
    if isinstance(node, Repeated):
        return Repeated(tuple(_push_down(item, apply) for item in node.items))
    if isinstance(node, Erased):
        return Erased(_push_down(node.base, apply))
    return node


Node = Union[Empty, Text, Raw, Group, Repeated, Element, Document, Erased]

NODE_TYPES = (Empty, Text, Raw, Group, Repeated, Element, Document, Erased)


def coerce(child: Any) -> Node:
    """Turn builder input into a node: strings become text, lists become groups."""

    if isinstance(child, NODE_TYPES):
        return child
    if child is None:
        return EMPTY
    if isinstance(child, str):
        return Text(child)
    if isinstance(child, (list, tuple)):
        return Group(tuple(coerce(item) for item in child))
    if isinstance(child, (bytes, bytearray, Mapping)):
        raise TypeError(f"Cannot use {type(child).__name__} as a node; wrap trusted markup with raw()")
    if isinstance(child, Iterable):
        return Repeated(tuple(coerce(item) for item in child))
    raise TypeError(f"Cannot use {type(child).__name__} as a node")


def _wrap(children: Tuple[Any, ...]) -> Node:
    if not children:
        return EMPTY
    if len(children) == 1:
        return coerce(children[0])
    return Group(tuple(coerce(child) for child in children))


def tag(name: str, *children: Any, void: Optional[bool] = None) -> Element:
    if not _TAG_NAME.match(name):
        raise ValueError(f"Invalid tag name: {name!r}")
    is_void = name.lower() in VOID_TAGS if void is None else void
    return Element(tag=name, children=_wrap(children), void=is_void)


def text(content: str) -> Text:
    return Text(content)


def raw(content: Union[str, bytes]) -> Raw:
    return Raw(content)


def group(*children: Any) -> Group:
    return Group(tuple(coerce(child) for child in children))


def for_each(source: Iterable[Any], build: Optional[Callable[[Any], Any]] = None) -> Repeated:
    """Build one node per item of ``source``; an empty source renders nothing."""

    if build is None:
        return Repeated(tuple(coerce(item) for item in source))
    return Repeated(tuple(coerce(build(item)) for item in source))


def erase(node: Any) -> Erased:
    return Erased(coerce(node))


def document(*body: Any, head: Any = None, lang: Optional[str] = None) -> Document:
    return Document(body=_wrap(body), head=coerce(head), lang=lang)


__all__ = [
    "Attribute",
    "Contribution",
    "Document",
    "EMPTY",
    "Element",
    "Empty",
    "Erased",
    "Group",
    "INLINE_TAGS",
    "NODE_TYPES",
    "Node",
    "Raw",
    "Repeated",
    "Text",
    "VOID_TAGS",
    "coerce",
    "document",
    "erase",
    "for_each",
    "group",
    "raw",
    "tag",
    "text",
]
