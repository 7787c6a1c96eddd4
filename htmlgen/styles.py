"""Style declarations and the per-render declaration table."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from .config import RenderConfig

logger = logging.getLogger(__name__)

_CLASS_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


class Media:
    """Common at-rules for conditional declarations."""

    DARK = "@media (prefers-color-scheme: dark)"
    LIGHT = "@media (prefers-color-scheme: light)"
    PRINT = "@media print"
    SCREEN = "@media screen"
    REDUCED_MOTION = "@media (prefers-reduced-motion: reduce)"

    @staticmethod
    def query(condition: str) -> str:
        return f"@media {condition.strip()}"

    @staticmethod
    def min_width(width: str) -> str:
        return f"@media (min-width: {width})"

    @staticmethod
    def max_width(width: str) -> str:
        return f"@media (max-width: {width})"


class Pseudo:
    """Pseudo-classes and pseudo-elements appended to a generated selector."""

    HOVER = ":hover"
    FOCUS = ":focus"
    FOCUS_VISIBLE = ":focus-visible"
    ACTIVE = ":active"
    VISITED = ":visited"
    LINK = ":link"
    CHECKED = ":checked"
    DISABLED = ":disabled"
    ENABLED = ":enabled"
    REQUIRED = ":required"
    INVALID = ":invalid"
    FIRST_CHILD = ":first-child"
    LAST_CHILD = ":last-child"
    ONLY_CHILD = ":only-child"
    EMPTY = ":empty"
    BEFORE = "::before"
    AFTER = "::after"
    FIRST_LINE = "::first-line"
    PLACEHOLDER = "::placeholder"


@dataclass(frozen=True)
class StyleDeclaration:
    """A single CSS declaration authored on an element."""

    property: str
    value: str
    at_rule: Optional[str] = None
    selector: Optional[str] = None
    pseudo: Optional[str] = None

    def __post_init__(self) -> None:
        # Rules are written verbatim inside <style>; "<" could close it.
        for part in (self.property, self.value, self.at_rule, self.selector, self.pseudo):
            if part and "<" in part:
                raise ValueError(f"Style declaration must not contain '<': {part!r}")

    @property
    def normalized_property(self) -> str:
        return self.property.strip().lower()

    def key(self) -> str:
        """Normalized ``property:value[;at-rule][;selector][;pseudo]`` lookup key."""

        parts = [f"{self.normalized_property}:{self.value.strip()}"]
        for qualifier in (self.at_rule, self.selector, self.pseudo):
            parts.append(qualifier.strip() if qualifier else "")
        return ";".join(parts)


@dataclass(frozen=True)
class StyleRule:
    class_name: str
    selector: str
    at_rule: Optional[str]
    body: str


def _class_stem(prop: str) -> str:
    stem = _CLASS_UNSAFE.sub("-", prop)
    return stem or "style"


def _build_selector(class_name: str, declaration: StyleDeclaration) -> str:
    selector = f".{class_name}"
    if declaration.selector:
        selector = f"{declaration.selector.strip()} {selector}"
    if declaration.pseudo:
        selector += declaration.pseudo.strip()
    return selector


class DeclarationTable:
    """Maps normalized declarations to generated class names for one render.

    Names are ``<property>-<n>`` with ``n`` counting up from zero. Tokens in
    the reserved set (class names supplied by the caller) are never issued;
    the counter simply moves past them.
    """

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self._reserved: Set[str] = set(reserved)
        self._counter = 0
        self._names: Dict[str, str] = {}
        self._rules: List[StyleRule] = []

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, declaration: object) -> bool:
        return isinstance(declaration, StyleDeclaration) and declaration.key() in self._names

    @property
    def rules(self) -> List[StyleRule]:
        return list(self._rules)

    def issued(self) -> Set[str]:
        """Class names handed out so far."""

        return set(self._names.values())

    def reserve(self, tokens: Iterable[str]) -> None:
        self._reserved.update(tokens)

    def class_name(self, declaration: StyleDeclaration) -> str:
        """Return the class for ``declaration``, registering it on first sight."""

        key = declaration.key()
        existing = self._names.get(key)
        if existing is not None:
            return existing

        stem = _class_stem(declaration.normalized_property)
        name = f"{stem}-{self._counter}"
        self._counter += 1
        while name in self._reserved:
            logger.debug("Skipping generated class %s: reserved by caller markup", name)
            name = f"{stem}-{self._counter}"
            self._counter += 1

        self._names[key] = name
        self._rules.append(
            StyleRule(
                class_name=name,
                selector=_build_selector(name, declaration),
                at_rule=declaration.at_rule.strip() if declaration.at_rule else None,
                body=f"{declaration.normalized_property}:{declaration.value.strip()}",
            )
        )
        return name

    def stylesheet(self, config: RenderConfig, base_indentation: bytes = b"") -> bytes:
        """Serialize rules, plain rules first, then one block per at-rule."""

        grouped: Dict[Optional[str], List[StyleRule]] = {None: []}
        for rule in self._rules:
            grouped.setdefault(rule.at_rule, []).append(rule)

        newline = config.newline
        indent = config.indent_unit
        important = b" !important" if config.force_important else b""

        sheet = bytearray()
        for at_rule, rules in grouped.items():
            if not rules:
                continue
            if at_rule is not None:
                sheet += newline + base_indentation + at_rule.encode("utf-8") + b"{"
            for rule in rules:
                sheet += newline + base_indentation
                if at_rule is not None:
                    sheet += indent
                sheet += rule.selector.encode("utf-8") + b"{" + rule.body.encode("utf-8")
                sheet += important + b"}"
            if at_rule is not None:
                sheet += newline + base_indentation + b"}"
        return bytes(sheet)


__all__ = ["DeclarationTable", "Media", "Pseudo", "StyleDeclaration", "StyleRule"]
