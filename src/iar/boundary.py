"""Boundary finder contract for resolved spans."""

from typing import Protocol

HEADER_OPENERS = "(["
HEADER_CLOSERS = ")]"


def leading_indent(line: str) -> int:
    """Return the number of leading whitespace characters of a line."""
    return len(line) - len(line.lstrip())


def header_end(lines: list[str], start: int) -> int:
    """Return the index of the last line of a declaration header.

    A header spans several lines while parentheses or brackets opened on the
    declaration line stay open. Headers that never close are treated as a
    single line.
    """
    depth = 0
    for index in range(start, len(lines)):
        line = lines[index]
        depth += sum(line.count(char) for char in HEADER_OPENERS)
        depth -= sum(line.count(char) for char in HEADER_CLOSERS)
        if depth <= 0:
            return index
    return start


class BoundaryFinder(Protocol):
    """Language-agnostic contract for locating the end of a declaration body."""

    def find_end(self, lines: list[str], start: int, indent: int) -> int:
        """Return the 0-based inclusive index of the last line of the body.

        Args:
            lines: File lines without line terminators.
            start: 0-based index of the declaration line.
            indent: Indentation width of the declaration line.
        """
