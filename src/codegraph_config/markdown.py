"""Managed section detection and replacement for Markdown documents.

A managed section is either delimited by the sentinel comments written by
this library, or (for sections users pasted by hand) introduced by the
legacy heading and running to the next heading of the same or higher level.
Detection is a line scanner, not a Markdown parser.
"""

import logging
import re
from collections.abc import Iterator

from .exceptions import MalformedSectionError
from .models import SectionResult
from .template import LEGACY_HEADING
from .template import SECTION_END
from .template import SECTION_START
from .template import SECTION_TEMPLATE

logger = logging.getLogger(__name__)

# "# " or "## " but not "### "
_SECTION_BREAK = re.compile(r"#{1,2}(?!#)(\s|$)")
_FENCES = ("```", "~~~")


def locate_marked_section(content: str) -> tuple[int, int] | None:
    """Find the span of a sentinel-delimited section.

    The span starts at the last start marker preceding the first end marker
    that follows a start marker, so an orphaned start marker left earlier in
    the file is never part of the span.

    Args:
        content: Document text

    Returns:
        (start, end) offsets covering both markers, or None if there is no
        start marker

    Raises:
        MalformedSectionError: If a start marker has no end marker after it
    """
    start = content.find(SECTION_START)
    if start == -1:
        return None

    end = content.find(SECTION_END, start + len(SECTION_START))
    if end == -1:
        raise MalformedSectionError(f"{SECTION_START} at offset {start} has no matching {SECTION_END}")

    start = content.rfind(SECTION_START, 0, end)
    return start, end + len(SECTION_END)


def locate_legacy_section(content: str) -> tuple[int, int] | None:
    """Find the span of an unmarked section introduced by the legacy heading.

    The section ends at the start of the next level-1 or level-2 heading
    outside a fenced code block. Deeper headings belong to the section.

    Args:
        content: Document text

    Returns:
        (start, end) offsets, or None if the heading is absent
    """
    start = None
    fence = None

    for offset, line in _iter_lines(content):
        marker = line.lstrip()[:3]
        if marker in _FENCES:
            if fence is None:
                fence = marker
            elif marker == fence:
                fence = None
            continue
        if fence is not None:
            continue

        if start is None:
            if line.rstrip() == LEGACY_HEADING:
                start = offset
        elif _SECTION_BREAK.match(line):
            return start, offset

    if start is None:
        return None
    return start, len(content)


def has_section(content: str) -> bool:
    """Check whether a document already has a managed or legacy section."""
    return SECTION_START in content or locate_legacy_section(content) is not None


def reconcile_section(content: str | None) -> tuple[str, SectionResult]:
    """Compute document text containing exactly one current managed section.

    Args:
        content: Existing document text, or None if the file does not exist

    Returns:
        Tuple of (new document text, outcome)
    """
    if content is None:
        return SECTION_TEMPLATE + "\n", SectionResult(created=True, updated=False)

    orphan = None
    try:
        span = locate_marked_section(content)
    except MalformedSectionError as e:
        logger.warning(f"Ignoring malformed CodeGraph section ({e}); looking for the CodeGraph heading instead")
        span = None
        orphan = content.find(SECTION_START)

    if span is not None:
        start, end = span
        return content[:start] + SECTION_TEMPLATE + content[end:], SectionResult(created=False, updated=True)

    span = locate_legacy_section(content)
    if span is not None:
        start, end = span
        # An unterminated start marker directly above the heading belongs to the section
        if orphan is not None and orphan < start and not content[orphan + len(SECTION_START) : start].strip():
            start = orphan
        after = content[end:]
        # Keep a blank line between the section and the heading that follows
        replacement = SECTION_TEMPLATE + ("\n\n" if after else "\n")
        return content[:start] + replacement + after, SectionResult(created=False, updated=True)

    return _append(content), SectionResult(created=False, updated=False)


# ===== Private Helpers =====


def _append(content: str) -> str:
    existing = content.rstrip()
    if not existing:
        return SECTION_TEMPLATE + "\n"
    return existing + "\n\n" + SECTION_TEMPLATE + "\n"


def _iter_lines(content: str) -> Iterator[tuple[int, str]]:
    """Yield (offset, line) pairs with line terminators removed."""
    offset = 0
    while offset < len(content):
        newline = content.find("\n", offset)
        end = len(content) if newline == -1 else newline + 1
        yield offset, content[offset:end].rstrip("\r\n")
        offset = end
