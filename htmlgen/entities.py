"""HTML character entities and escaping helpers."""

from __future__ import annotations

AMPERSAND = b"&amp;"
LESS_THAN = b"&lt;"
GREATER_THAN = b"&gt;"
QUOTATION_MARK = b"&quot;"
APOSTROPHE = b"&#39;"

DOCTYPE = b"<!doctype html>"

# Ampersand goes first so later replacements are not escaped twice.
_TEXT_TABLE = (
    (b"&", AMPERSAND),
    (b"<", LESS_THAN),
    (b">", GREATER_THAN),
)

_ATTRIBUTE_TABLE = _TEXT_TABLE + (
    (b'"', QUOTATION_MARK),
    (b"'", APOSTROPHE),
)


def _escape(data: bytes, table) -> bytes:
    for char, entity in table:
        if char in data:
            data = data.replace(char, entity)
    return data


def escape_text(value: str) -> bytes:
    """Encode text content as UTF-8, escaping ``&``, ``<`` and ``>``."""

    return _escape(value.encode("utf-8"), _TEXT_TABLE)


def escape_attribute(value: str) -> bytes:
    """Encode an attribute value, additionally escaping both quote characters."""

    return _escape(value.encode("utf-8"), _ATTRIBUTE_TABLE)


__all__ = [
    "AMPERSAND",
    "APOSTROPHE",
    "DOCTYPE",
    "GREATER_THAN",
    "LESS_THAN",
    "QUOTATION_MARK",
    "escape_attribute",
    "escape_text",
]
