# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Delimiter-balanced body detection."""

import logging

from iar.boundary import BoundaryFinder, header_end, leading_indent
from iar.boundaries.indentation import IndentationBounded

logger = logging.getLogger(__name__)


class DelimiterBounded:
    """Find body ends by balancing block delimiters from the declaration line.

    Declarations whose header does not open a delimited block (for example a
    header ending in ``:``) are handed to the fallback finder.
    """

    def __init__(
        self,
        open_char: str = "{",
        close_char: str = "}",
        fallback: BoundaryFinder | None = None,
    ) -> None:
        """Initialize delimiter configuration.

        Args:
            open_char: Block opening delimiter.
            close_char: Block closing delimiter.
            fallback: Finder used for non-delimited bodies; indentation by default.

        Raises:
            ValueError: If delimiters are empty or identical.
        """
        if not open_char or not close_char or open_char == close_char:
            raise ValueError("open_char and close_char must be distinct, non-empty strings.")
        self._open = open_char
        self._close = close_char
        self._fallback = fallback or IndentationBounded()

    def find_end(self, lines: list[str], start: int, indent: int) -> int:
        """Return the line where the delimiter depth first returns to zero."""
        if not self.opens_block(lines=lines, start=start, indent=indent):
            return self._fallback.find_end(lines, start, indent)

        depth = 0
        opened = False
        for index in range(start, len(lines)):
            depth += self._balance(lines[index])
            if depth > 0:
                opened = True
            elif opened:
                return index
        logger.debug(
            f"Unbalanced delimiters; using fallback boundary (start_line={start + 1})"
        )
        return self._fallback.find_end(lines, start, indent)

    def opens_block(self, lines: list[str], start: int, indent: int) -> bool:
        """Tell whether the declaration header leaves a delimited block open.

        A block is open when the header leaves more opening than closing
        delimiters, or when a header not ending in ``:`` is directly followed by
        a line starting with the opening delimiter.
        """
        last = header_end(lines, start)
        if sum(self._balance(line) for line in lines[start : last + 1]) > 0:
            return True
        if lines[last].rstrip().endswith(":"):
            return False
        for line in lines[last + 1 :]:
            if not line.strip():
                continue
            return line.strip().startswith(self._open) and leading_indent(line) <= indent
        return False

    def _balance(self, line: str) -> int:
        return line.count(self._open) - line.count(self._close)
