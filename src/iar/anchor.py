# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Anchor grammar parsing helpers."""

import re
from dataclasses import dataclass
from typing import Literal

AnchorKind = Literal["class", "function", "pattern", "line"]

ANCHOR_KINDS: frozenset[str] = frozenset({"class", "function", "pattern", "line"})

_ANCHOR_RE = re.compile(r"^@(\w+):(.*)$", re.DOTALL)
_LINE_SPEC_RE = re.compile(r"^(\d+)(?:-(\d+))?$")
_CROSS_FILE_RE = re.compile(r"^([^@\s]+)(@\w+:.*)$", re.DOTALL)


@dataclass(frozen=True)
class Anchor:
    """Represent one parsed anchor string.

    Attributes:
        raw: Original anchor text.
        kind: Prefix word between ``@`` and ``:``.
        spec: Everything after the first ``:``.
    """

    raw: str
    kind: str
    spec: str

    @property
    def known(self) -> bool:
        """Whether the prefix is one of the supported anchor kinds."""
        return self.kind in ANCHOR_KINDS


def parse_anchor(anchor: str) -> Anchor | None:
    """Split an anchor string into kind and spec.

    Args:
        anchor: Anchor text such as ``@function:save``.

    Returns:
        Parsed anchor, or ``None`` when the text is not ``@<kind>:<spec>``.
    """
    match = _ANCHOR_RE.match(anchor)
    if match is None:
        return None
    return Anchor(raw=anchor, kind=match.group(1), spec=match.group(2))


def parse_line_spec(spec: str) -> tuple[int, int] | None:
    """Parse ``n`` or ``n-m`` into an inclusive 1-based line range.

    Returns:
        ``(start, end)`` or ``None`` for a malformed spec.
    """
    match = _LINE_SPEC_RE.match(spec.strip())
    if match is None:
        return None
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else start
    return start, end


def split_link_target(target: str) -> tuple[str | None, str]:
    """Split a link target into an optional file path and an anchor.

    ``config.py@pattern:dry_run`` becomes ``("config.py", "@pattern:dry_run")``
    while a bare ``@class:Storage`` becomes ``(None, "@class:Storage")``.
    """
    target = target.strip()
    if target.startswith("@"):
        return None, target
    match = _CROSS_FILE_RE.match(target)
    if match is None:
        return None, target
    return match.group(1), match.group(2)
