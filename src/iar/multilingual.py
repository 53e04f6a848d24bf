"""Language projection helpers for multilingual intent text."""

import re
from collections.abc import Iterable
from typing import TypeVar

KNOWN_LANGUAGES: frozenset[str] = frozenset({"en", "fr", "es", "de"})
LANG_TAG_RE = re.compile(r"^([a-z]{2}):\s*(.*)$")

T = TypeVar("T")


def language_codes(*extra: str) -> frozenset[str]:
    """Return the codes accepted as language tags, plus any requested ones."""
    return KNOWN_LANGUAGES | frozenset(code for code in extra if code)


def match_tag(line: str, languages: Iterable[str]) -> tuple[str, str] | None:
    """Split ``xx: text`` into ``(xx, text)`` when ``xx`` is an accepted code.

    Prose such as ``id: values are UUIDs`` is not a tag.
    """
    match = LANG_TAG_RE.match(line)
    if match is None or match.group(1) not in languages:
        return None
    return match.group(1), match.group(2)


def tag_lines(
    lines: list[str], languages: Iterable[str] = KNOWN_LANGUAGES
) -> list[tuple[str | None, str]]:
    """Attach a language tag to every line of a free-text section.

    A ``xx:`` prefixed line opens a block for ``xx`` and following untagged
    lines continue it. A blank line whose next non-blank line is tagged closes
    the block. Lines outside any block are tagged ``None`` (language-neutral).
    """
    accepted = frozenset(languages)
    tagged: list[tuple[str | None, str]] = []
    current: str | None = None
    for index, line in enumerate(lines):
        tag = match_tag(line, accepted)
        if tag is not None:
            current = tag[0]
            tagged.append(tag)
            continue
        if not line.strip() and current is not None and _next_is_tagged(lines, index, accepted):
            current = None
            continue
        tagged.append((current, line))
    return tagged


def select_language(
    items: list[tuple[str | None, T]], lang: str, default_lang: str
) -> list[T]:
    """Select items for ``lang``, else ``default_lang``, else untagged items."""
    for candidate in (lang, default_lang):
        selected = [value for tag, value in items if tag == candidate]
        if selected:
            return selected
    return [value for tag, value in items if tag is None]


def project_language(text: str | list[str], lang: str, default_lang: str = "en") -> str:
    """Project a multilingual section down to one language.

    Args:
        text: Section text, or its lines.
        lang: Requested two-letter language code.
        default_lang: Language used when ``lang`` has no block.

    Returns:
        The selected text, trimmed. Sections without any language tag are
        returned verbatim.
    """
    lines = text.split("\n") if isinstance(text, str) else text
    tagged = tag_lines(lines, language_codes(lang, default_lang))
    selected = select_language(tagged, lang=lang, default_lang=default_lang)
    return "\n".join(selected).strip()


def _next_is_tagged(lines: list[str], index: int, languages: frozenset[str]) -> bool:
    for following in lines[index + 1 :]:
        if following.strip():
            return match_tag(following, languages) is not None
    return False
