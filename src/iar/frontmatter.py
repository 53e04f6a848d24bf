# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Frontmatter splitting and validation for intent documents."""

import logging
import re
from typing import cast

from iar.model import INTENT_STATUSES, RISK_LEVELS, IntentFrontmatter, IntentStatus, RiskLevel

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"
REQUIRED_KEYS: tuple[str, ...] = ("id", "from", "status", "files")
LIST_KEYS: frozenset[str] = frozenset({"files", "tags"})

_KEY_VALUE_RE = re.compile(r"^([\w-]+):\s*(.*)$")
_LIST_ITEM_RE = re.compile(r"^\s*-\s*(.*)$")

FrontmatterValue = str | list[str]


class ParseError(RuntimeError):
    """Represent a structural failure while parsing an intent document."""


class MalformedFrontmatterError(ParseError):
    """Represent missing delimiters, missing keys, or invalid frontmatter values."""


def split_frontmatter(text: str) -> tuple[list[str], str]:
    """Split document text into frontmatter lines and the remaining body.

    Args:
        text: Full document text with ``\\n`` line endings.

    Returns:
        Frontmatter lines (without delimiters) and the body text.

    Raises:
        MalformedFrontmatterError: If the opening or closing ``---`` line is missing.
    """
    lines = text.split("\n")
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        raise MalformedFrontmatterError("Document does not start with a '---' line.")
    for index in range(1, len(lines)):
        if lines[index].strip() == FRONTMATTER_DELIMITER:
            return lines[1:index], "\n".join(lines[index + 1 :])
    raise MalformedFrontmatterError("Frontmatter closing '---' line is missing.")


def parse_frontmatter_values(lines: list[str]) -> dict[str, FrontmatterValue]:
    """Parse the restricted key/value syntax used in intent frontmatter.

    Block lists (``key:`` followed by ``- item`` lines) and inline lists
    (``key: [a, b]``) both produce ``list[str]``.
    """
    values: dict[str, FrontmatterValue] = {}
    current_key: str | None = None
    for line in lines:
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        item = _LIST_ITEM_RE.match(line)
        if item is not None and current_key is not None:
            existing = values.get(current_key)
            if not isinstance(existing, list):
                existing = [] if not existing else [existing]
                values[current_key] = existing
            value = _unquote(item.group(1))
            if value:
                existing.append(value)
            continue
        key_value = _KEY_VALUE_RE.match(line)
        if key_value is None:
            logger.debug(f"Ignoring unrecognized frontmatter line (line={line!r})")
            continue
        current_key = key_value.group(1)
        raw_value = key_value.group(2).strip()
        if not raw_value:
            values[current_key] = []
        elif raw_value.startswith("[") and raw_value.endswith("]"):
            values[current_key] = [
                _unquote(part) for part in raw_value[1:-1].split(",") if part.strip()
            ]
        else:
            values[current_key] = _unquote(raw_value)
    return values


def build_frontmatter(values: dict[str, FrontmatterValue]) -> IntentFrontmatter:
    """Validate parsed values and build the frontmatter model.

    Raises:
        MalformedFrontmatterError: If a required key is missing or a value is invalid.
    """
    missing = [key for key in REQUIRED_KEYS if not values.get(key)]
    if missing:
        raise MalformedFrontmatterError(
            f"Frontmatter is missing required keys: {', '.join(missing)}"
        )

    status = _scalar(values, "status")
    if status not in INTENT_STATUSES:
        raise MalformedFrontmatterError(f"Unsupported intent status: {status}")
    superseded_by = _scalar(values, "superseded_by")
    if status == "superseded" and not superseded_by:
        raise MalformedFrontmatterError("Superseded intent must declare superseded_by.")
    risk = _scalar(values, "risk")
    if risk is not None and risk not in RISK_LEVELS:
        raise MalformedFrontmatterError(f"Unsupported risk level: {risk}")

    return IntentFrontmatter(
        id=cast(str, _scalar(values, "id")),
        from_ref=cast(str, _scalar(values, "from")),
        status=cast(IntentStatus, status),
        files=_list(values, "files"),
        author=_scalar(values, "author"),
        date=_scalar(values, "date"),
        superseded_by=superseded_by,
        risk=cast(RiskLevel | None, risk),
        tags=_list(values, "tags"),
    )


def _scalar(values: dict[str, FrontmatterValue], key: str) -> str | None:
    value = values.get(key)
    if isinstance(value, list):
        return ", ".join(value) if value else None
    return value or None


def _list(values: dict[str, FrontmatterValue], key: str) -> list[str]:
    value = values.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value
