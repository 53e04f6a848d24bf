# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Boundary finder implementations for the anchor resolver."""

from iar.boundaries.delimiter import DelimiterBounded
from iar.boundaries.indentation import IndentationBounded

__all__ = ["DelimiterBounded", "IndentationBounded"]
