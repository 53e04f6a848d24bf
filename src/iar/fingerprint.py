# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Span fingerprinting and drift comparison."""

import logging
import struct

from iar.model import ResolvedSpan

logger = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 8


def fingerprint(content: str) -> str:
    """Compute the stable fingerprint of a resolved span.

    The hash is a 32-bit rolling string hash over UTF-16 code units
    (``h = h * 31 + unit`` wrapped to a signed 32-bit integer), rendered as the
    hexadecimal absolute value truncated to eight characters. Intent documents
    written by existing tooling embed this exact value in ``<!-- hash: -->``
    comments.

    Args:
        content: Exact span text, including internal whitespace and newlines.

    Returns:
        Lowercase hexadecimal fingerprint.
    """
    encoded = content.encode("utf-16-le", errors="surrogatepass")
    units = struct.unpack(f"<{len(encoded) // 2}H", encoded)
    value = 0
    for unit in units:
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(abs(value), "x")[:FINGERPRINT_LENGTH]


def drift_status(resolved: ResolvedSpan | None, stored_hash: str | None) -> bool | None:
    """Compare a resolved span with the fingerprint captured at authoring time.

    Args:
        resolved: Freshly resolved span, or ``None`` when nothing was found.
        stored_hash: Stored fingerprint; ``None`` when none was captured.

    Returns:
        ``None`` without a stored hash or resolved span, else whether the
        fingerprints match.
    """
    if not stored_hash or resolved is None or not resolved.found:
        return None
    matches = resolved.fingerprint == stored_hash
    if not matches:
        logger.debug(
            f"Fingerprint drift detected (stored={stored_hash} "
            f"current={resolved.fingerprint} lines={resolved.start_line}-{resolved.end_line})"
        )
    return matches
