"""Input sanitization helpers for request payloads."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _strip_control_chars(value: str, *, allow_newlines: bool) -> str:
    cleaned: list[str] = []
    for ch in value:
        if ch == "\n" and allow_newlines:
            cleaned.append(ch)
            continue
        if unicodedata.category(ch) == "Cc":
            continue
        cleaned.append(ch)
    return "".join(cleaned)


def clean_text(value: str | None, *, allow_newlines: bool = False) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    value = _strip_control_chars(value, allow_newlines=allow_newlines)
    value = value.strip()
    if not allow_newlines:
        value = _WHITESPACE_RE.sub(" ", value)
    else:
        value = "\n".join(line.strip() for line in value.split("\n"))
        value = re.sub(r"\n{3,}", "\n\n", value)
    return value


def clean_single_line(value: str | None) -> str:
    return clean_text(value, allow_newlines=False)


def clean_multiline(value: str | None) -> str:
    return clean_text(value, allow_newlines=True)


def clean_email(value: str | None) -> str:
    return clean_single_line(value).lower()


def contains_control_chars(value: str) -> bool:
    return any(unicodedata.category(ch) == "Cc" for ch in value)


def slugify(value: str) -> str:
    """Lower-case ASCII slug, e.g. ``"The Forest Hiker"`` -> ``"the-forest-hiker"``."""
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _SLUG_RE.sub("-", ascii_value.lower()).strip("-")
