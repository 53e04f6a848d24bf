# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Indentation-delimited body detection."""

from iar.boundary import header_end, leading_indent


class IndentationBounded:
    """Find body ends by scanning for the next line at or above the declaration level."""

    def find_end(self, lines: list[str], start: int, indent: int) -> int:
        """Return the last line before the next non-blank line indented ``<= indent``.

        Continuation lines of a multi-line header always belong to the span.
        Blank lines never end a body, and trailing blank lines are not part of it.
        """
        end = header_end(lines, start)
        for index in range(end + 1, len(lines)):
            line = lines[index]
            if not line.strip():
                continue
            if leading_indent(line) <= indent:
                break
            end = index
        return end
