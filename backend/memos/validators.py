"""
Memos Backend — Input Validation Helpers
=========================================

What:  Small pure functions that normalise and check raw client input.
How:   Body-field helpers raise ValueError so Pydantic validators can reuse
       them; path/query helpers raise the application's ValidationError.
Who:   Used by schemas (request bodies) and routes/services (ids, dates).

Limits:
    content     1–10000 characters after trimming
    tag name    1–50 characters after trimming
    id          positive integer, decimal digits only
    date        YYYY-MM-DD naming a real calendar day
"""

import re
from datetime import date, datetime
from typing import Any, Iterable, List

from memos.exceptions import ValidationError
from memos.models.memo import TAG_NAME_MAX_LENGTH

CONTENT_MAX_LENGTH = 10_000

_ID_PATTERN = re.compile(r"\d+", re.ASCII)
# Largest value a signed 64-bit INTEGER column holds
MAX_ID = 2**63 - 1
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

INVALID_DATE_MESSAGE = "Invalid date format. Use YYYY-MM-DD"


def clean_content(value: Any) -> str:
    """Trim memo content and enforce the length bounds."""
    if not isinstance(value, str):
        raise ValueError("Content must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Content cannot be empty")
    if len(trimmed) > CONTENT_MAX_LENGTH:
        raise ValueError(f"Content too long (max {CONTENT_MAX_LENGTH} characters)")
    return trimmed


def clean_tag_name(value: Any) -> str:
    """Trim a tag name and enforce the length bounds."""
    if not isinstance(value, str):
        raise ValueError("Tag name must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Tag name cannot be empty")
    if len(trimmed) > TAG_NAME_MAX_LENGTH:
        raise ValueError(f"Tag name too long (max {TAG_NAME_MAX_LENGTH} characters)")
    return trimmed


def clean_tag_names(values: Iterable[Any]) -> List[str]:
    """
    Clean every tag name and drop repeats, keeping first-seen order.

    ["work", " work ", "idea"] -> ["work", "idea"]
    """
    seen = set()
    names: List[str] = []
    for value in values:
        name = clean_tag_name(value)
        if name not in seen:
            seen.add(name)
            names.append(name)
    return names


def parse_id(raw: str) -> int:
    """Parse a path id; anything but a positive decimal integer is rejected."""
    if raw is None or not _ID_PATTERN.fullmatch(str(raw)):
        raise ValidationError("Invalid ID", field="id")
    value = int(raw)
    if value <= 0 or value > MAX_ID:
        raise ValidationError("Invalid ID", field="id")
    return value


def parse_date(raw: str) -> date:
    """Parse a YYYY-MM-DD query value, rejecting impossible days like 2024-13-40."""
    if not _DATE_PATTERN.fullmatch(raw):
        raise ValidationError(INVALID_DATE_MESSAGE, field="date")
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(INVALID_DATE_MESSAGE, field="date")


def escape_like(term: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so a search term matches literally."""
    return (
        term.replace(escape, escape + escape)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )
