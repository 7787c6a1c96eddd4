"""Attribute sets and per-name merge policies."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

AttributeValue = Union[str, bool, None]


class MergePolicy(Enum):
    """How a new value for an attribute combines with the current one."""

    APPEND_UNIQUE_TOKEN = "append-unique-token"
    BOOLEAN_PRESENCE = "boolean-presence"
    LAST_WRITE_WINS = "last-write-wins"


TOKEN_ATTRIBUTES = frozenset({"class"})

BOOLEAN_ATTRIBUTES = frozenset(
    {
        "allowfullscreen",
        "async",
        "autofocus",
        "autoplay",
        "checked",
        "controls",
        "default",
        "defer",
        "disabled",
        "formnovalidate",
        "hidden",
        "inert",
        "ismap",
        "loop",
        "multiple",
        "muted",
        "nomodule",
        "novalidate",
        "open",
        "playsinline",
        "readonly",
        "required",
        "reversed",
        "selected",
    }
)


def policy_for(key: str) -> MergePolicy:
    name = key.lower()
    if name in TOKEN_ATTRIBUTES:
        return MergePolicy.APPEND_UNIQUE_TOKEN
    if name in BOOLEAN_ATTRIBUTES:
        return MergePolicy.BOOLEAN_PRESENCE
    return MergePolicy.LAST_WRITE_WINS


class AttributeSet:
    """Insertion-ordered attribute mapping.

    Values are strings, or ``True`` for a bare attribute such as ``disabled``.
    Instances are treated as immutable; :func:`merge_attribute` returns a new set.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Optional[Dict[str, Union[str, bool]]] = None) -> None:
        self._items: Dict[str, Union[str, bool]] = dict(items or {})

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __getitem__(self, key: str) -> Union[str, bool]:
        return self._items[key]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeSet):
            return NotImplemented
        return list(self._items.items()) == list(other._items.items())

    def __repr__(self) -> str:
        return f"AttributeSet({self._items!r})"

    def get(self, key: str, default: Optional[Union[str, bool]] = None) -> Optional[Union[str, bool]]:
        return self._items.get(key, default)

    def items(self) -> List[Tuple[str, Union[str, bool]]]:
        return list(self._items.items())

    def class_tokens(self) -> List[str]:
        value = self._items.get("class")
        return value.split() if isinstance(value, str) else []


def _append_tokens(existing: Union[str, bool, None], value: Union[str, bool]) -> str:
    tokens = existing.split() if isinstance(existing, str) else []
    seen = set(tokens)
    incoming = value.split() if isinstance(value, str) else []
    for token in incoming:
        if token not in seen:
            seen.add(token)
            tokens.append(token)
    return " ".join(tokens)


def merge_attribute(
    current: AttributeSet,
    key: str,
    value: AttributeValue,
    policy: Optional[MergePolicy] = None,
) -> AttributeSet:
    """Return ``current`` with ``key`` merged according to its policy.

    Names are case-insensitive and stored lowercased. ``None`` removes the
    attribute whatever the policy, and so does ``False``.
    """

    key = key.lower()
    policy = policy or policy_for(key)
    items = dict(current.items())

    if value is None or value is False:
        items.pop(key, None)
        return AttributeSet(items)

    if policy is MergePolicy.APPEND_UNIQUE_TOKEN:
        merged = _append_tokens(items.get(key), value)
        if merged:
            items[key] = merged
    elif policy is MergePolicy.BOOLEAN_PRESENCE:
        items[key] = True
    else:
        items[key] = value
    return AttributeSet(items)


__all__ = [
    "AttributeSet",
    "AttributeValue",
    "BOOLEAN_ATTRIBUTES",
    "MergePolicy",
    "TOKEN_ATTRIBUTES",
    "merge_attribute",
    "policy_for",
]
