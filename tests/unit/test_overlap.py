# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
from iar.model import ChunkSpec, ResolvedChunk, ResolvedSpan
from iar.overlap import detect_overlaps, overlaps_for, spans_overlap


def _chunk(anchor: str, span: tuple[int, int] | None, file_path: str | None = "a.py") -> ResolvedChunk:
    resolved = None
    if span is not None:
        resolved = ResolvedSpan(
            found=True,
            start_line=span[0],
            end_line=span[1],
            content="",
            fingerprint="0",
        )
    return ResolvedChunk(
        chunk=ChunkSpec(anchor=anchor, title=anchor),
        resolved_file=file_path if resolved is not None else None,
        resolved=resolved,
        hash_match=None,
    )


def test_ovl_001_spans_overlap_is_inclusive_and_symmetric() -> None:
    assert spans_overlap(10, 20, 20, 25) is True
    assert spans_overlap(20, 25, 10, 20) is True
    assert spans_overlap(10, 20, 21, 30) is False
    assert spans_overlap(5, 5, 5, 5) is True


def test_ovl_002_intersecting_spans_reference_each_other() -> None:
    overlaps = detect_overlaps(
        [
            _chunk("@class:A", (10, 20)),
            _chunk("@function:b", (15, 25)),
            _chunk("@function:c", (30, 40)),
        ]
    )

    assert overlaps == {
        ("a.py", "@class:A"): ["@function:b"],
        ("a.py", "@function:b"): ["@class:A"],
    }


def test_ovl_003_lists_follow_discovery_order() -> None:
    overlaps = detect_overlaps(
        [
            _chunk("@line:1-10", (1, 10)),
            _chunk("@line:5-15", (5, 15)),
            _chunk("@line:8-12", (8, 12)),
        ]
    )

    assert overlaps[("a.py", "@line:1-10")] == ["@line:5-15", "@line:8-12"]
    assert overlaps[("a.py", "@line:5-15")] == ["@line:1-10", "@line:8-12"]
    assert overlaps[("a.py", "@line:8-12")] == ["@line:1-10", "@line:5-15"]


def test_ovl_004_spans_in_different_files_never_overlap() -> None:
    overlaps = detect_overlaps(
        [
            _chunk("@class:A", (1, 20), file_path="a.py"),
            _chunk("@class:B", (1, 20), file_path="b.py"),
        ]
    )

    assert overlaps == {}


def test_ovl_005_unresolved_chunks_are_ignored() -> None:
    overlaps = detect_overlaps(
        [
            _chunk("@class:A", (1, 20)),
            _chunk("@class:Missing", None),
        ]
    )

    assert overlaps == {}


def test_ovl_006_identical_anchors_do_not_reference_themselves() -> None:
    overlaps = detect_overlaps(
        [
            _chunk("@class:A", (1, 20)),
            _chunk("@class:A", (1, 20)),
            _chunk("@line:3", (3, 3)),
        ]
    )

    assert overlaps == {
        ("a.py", "@class:A"): ["@line:3"],
        ("a.py", "@line:3"): ["@class:A"],
    }


def test_ovl_007_same_anchor_in_two_files_keeps_separate_lists() -> None:
    one_first = _chunk("@line:1-3", (1, 3), file_path="a.py")
    one_second = _chunk("@line:2-4", (2, 4), file_path="a.py")
    two_first = _chunk("@line:1-3", (1, 3), file_path="b.py")

    overlaps = detect_overlaps([one_first, one_second, two_first])

    assert overlaps_for(overlaps, one_first) == ["@line:2-4"]
    assert overlaps_for(overlaps, one_second) == ["@line:1-3"]
    assert overlaps_for(overlaps, two_first) == []
    assert overlaps_for(overlaps, _chunk("@line:2-4", None)) == []
