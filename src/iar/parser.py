# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Intent document parsing with per-language projection."""

import logging
import re

from iar.frontmatter import (
    MalformedFrontmatterError,
    ParseError,
    build_frontmatter,
    parse_frontmatter_values,
    split_frontmatter,
)
from iar.model import ChunkLink, ChunkSpec, IntentDocument
from iar.multilingual import language_codes, match_tag, project_language, select_language

logger = logging.getLogger(__name__)

DEFAULT_LANG = "en"

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*$")
_TITLE_RE = re.compile(r"^#\s+(.+?)\s*$")
_TITLE_TRANSLATION_RE = re.compile(r"^#\s+([a-z]{2}):\s*(.+?)\s*$")
_CHUNK_HEADING_RE = re.compile(r"^###\s+(@\w+:[^|]+?)\s*\|\s*(.+?)\s*$")
_CHUNK_TITLE_TRANSLATION_RE = re.compile(r"^###\s+([a-z]{2}):\s*(.+?)\s*$")
_RULE_RE = re.compile(r"^---\s*$")
_HASH_RE = re.compile(r"<!--\s*hash:\s*(\w+)\s*-->")
_DECISION_RE = re.compile(r"^>\s*Decision:\s*(.+?)\s*$")
_LANG_DECISION_RE = re.compile(r"^>\s*([a-z]{2}):\s*(.+?)\s*$")
_LINK_RE = re.compile(r"^@link\s+([^|]+?)\s*\|\s*(.+?)\s*$")

__all__ = ["DEFAULT_LANG", "MalformedFrontmatterError", "ParseError", "parse_intent"]


def parse_intent(
    raw_text: str, lang: str = DEFAULT_LANG, default_lang: str = DEFAULT_LANG
) -> IntentDocument:
    """Parse an intent document and project it to one language.

    Args:
        raw_text: Full document text (frontmatter and markdown body).
        lang: Requested two-letter language code.
        default_lang: Language used when ``lang`` has no content for a section.

    Returns:
        Parsed intent document.

    Raises:
        MalformedFrontmatterError: If frontmatter delimiters or required keys
            are missing, or a frontmatter value is invalid.
    """
    text = raw_text.replace("\r\n", "\n")
    frontmatter_lines, body = split_frontmatter(text)
    frontmatter = build_frontmatter(parse_frontmatter_values(frontmatter_lines))

    lines = body.split("\n")
    languages = language_codes(lang, default_lang)
    title = _extract_title(lines, lang=lang, languages=languages)
    summary = project_language(_section_lines(lines, "Summary"), lang, default_lang)
    motivation = project_language(_section_lines(lines, "Motivation"), lang, default_lang)
    chunks = [
        _parse_chunk(
            heading, chunk_lines, lang=lang, default_lang=default_lang, languages=languages
        )
        for heading, chunk_lines in _chunk_sections(lines)
    ]
    logger.debug(
        f"Parsed intent document (id={frontmatter.id} lang={lang} chunks={len(chunks)})"
    )
    return IntentDocument(
        frontmatter=frontmatter,
        title=title,
        summary=summary,
        motivation=motivation or None,
        chunks=chunks,
        lang=lang,
        raw=raw_text,
    )


def _extract_title(lines: list[str], lang: str, languages: frozenset[str]) -> str:
    for index, line in enumerate(lines):
        match = _TITLE_RE.match(line)
        if match is None:
            continue
        title = match.group(1)
        for following in lines[index + 1 :]:
            translation = _TITLE_TRANSLATION_RE.match(following)
            if translation is None or translation.group(1) not in languages:
                break
            if translation.group(1) == lang:
                return translation.group(2)
        return title
    return ""


def _is_boundary(line: str) -> bool:
    """Tell whether a line ends a summary, motivation or chunk section."""
    if _RULE_RE.match(line) or _CHUNK_HEADING_RE.match(line):
        return True
    heading = _HEADING_RE.match(line)
    return heading is not None and len(heading.group(1)) <= 2


def _section_lines(lines: list[str], name: str) -> list[str]:
    header = re.compile(rf"^##\s+{re.escape(name)}\s*$")
    for index, line in enumerate(lines):
        if not header.match(line):
            continue
        section: list[str] = []
        for following in lines[index + 1 :]:
            if _is_boundary(following):
                break
            section.append(following)
        return section
    return []


def _chunk_sections(lines: list[str]) -> list[tuple[re.Match[str], list[str]]]:
    sections: list[tuple[re.Match[str], list[str]]] = []
    current: tuple[re.Match[str], list[str]] | None = None
    for line in lines:
        heading = _CHUNK_HEADING_RE.match(line)
        if heading is not None:
            current = (heading, [])
            sections.append(current)
            continue
        if current is None:
            continue
        if _is_boundary(line):
            current = None
            continue
        current[1].append(line)
    return sections


def _parse_chunk(
    heading: re.Match[str],
    lines: list[str],
    lang: str,
    default_lang: str,
    languages: frozenset[str],
) -> ChunkSpec:
    anchor = heading.group(1)
    title = heading.group(2)
    stored_hash: str | None = None
    decisions: list[tuple[str | None, str]] = []
    links: list[ChunkLink] = []
    description_lines: list[str] = []

    for line in lines:
        title_translation = _CHUNK_TITLE_TRANSLATION_RE.match(line)
        if title_translation is not None and title_translation.group(1) in languages:
            if title_translation.group(1) == lang:
                title = title_translation.group(2)
            continue

        hash_match = _HASH_RE.search(line)
        if hash_match is not None:
            stored_hash = hash_match.group(1)
            continue

        decision = _DECISION_RE.match(line)
        if decision is not None:
            tag = match_tag(decision.group(1), languages)
            decisions.append(tag if tag is not None else (None, decision.group(1)))
            continue
        lang_decision = _LANG_DECISION_RE.match(line)
        if lang_decision is not None and lang_decision.group(1) in languages:
            decisions.append((lang_decision.group(1), lang_decision.group(2)))
            continue

        link = _LINK_RE.match(line)
        if link is not None:
            links.append(ChunkLink(target=link.group(1), reason=link.group(2)))
            continue

        if line.startswith(("#", ">", "@")):
            continue
        description_lines.append(line)

    return ChunkSpec(
        anchor=anchor,
        title=title,
        description=project_language(description_lines, lang, default_lang),
        decisions=select_language(decisions, lang=lang, default_lang=default_lang),
        links=links,
        stored_hash=stored_hash,
    )
