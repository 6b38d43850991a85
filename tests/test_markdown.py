"""Tests for managed section reconciliation."""

import logging

import pytest
from codegraph_config import MalformedSectionError
from codegraph_config.markdown import has_section
from codegraph_config.markdown import locate_legacy_section
from codegraph_config.markdown import locate_marked_section
from codegraph_config.markdown import reconcile_section
from codegraph_config.template import SECTION_END
from codegraph_config.template import SECTION_START
from codegraph_config.template import SECTION_TEMPLATE

LEGACY_DOC = "\n".join(
    [
        "## Pre-existing Section",
        "",
        "Some content",
        "",
        "## CodeGraph",
        "",
        "### Subsection A",
        "",
        "Old codegraph content",
        "",
        "### Subsection B",
        "",
        "More old content",
        "",
        "## Important Section After",
        "",
        "This content must not be overwritten!",
        "",
    ]
)


class TestLocateMarkedSection:
    """Test locate_marked_section function."""

    def test_no_markers(self):
        assert locate_marked_section("# Notes\n") is None

    def test_span_covers_both_markers(self):
        content = f"before\n{SECTION_START}\nold\n{SECTION_END}\nafter\n"
        start, end = locate_marked_section(content)
        assert content[start:end] == f"{SECTION_START}\nold\n{SECTION_END}"

    def test_missing_end_marker_raises(self):
        with pytest.raises(MalformedSectionError):
            locate_marked_section(f"{SECTION_START}\nold\n")

    def test_end_before_start_raises(self):
        with pytest.raises(MalformedSectionError):
            locate_marked_section(f"{SECTION_END}\nold\n{SECTION_START}\n")

    def test_orphaned_start_marker_is_skipped(self):
        """Test an earlier unterminated start marker is not part of the span."""
        content = f"{SECTION_START}\nkeep me\n{SECTION_START}\nold\n{SECTION_END}\n"
        start, end = locate_marked_section(content)
        assert "keep me" in content[:start]
        assert content[start:end] == f"{SECTION_START}\nold\n{SECTION_END}"


class TestLocateLegacySection:
    """Test locate_legacy_section function."""

    def test_no_heading(self):
        assert locate_legacy_section("## Other\n\ntext\n") is None

    def test_deeper_heading_does_not_match(self):
        assert locate_legacy_section("### CodeGraph\n\ntext\n") is None

    def test_subsections_stay_inside(self):
        """Test ### headings don't end the section, the next ## does."""
        start, end = locate_legacy_section(LEGACY_DOC)
        section = LEGACY_DOC[start:end]
        assert section.startswith("## CodeGraph\n")
        assert "### Subsection B" in section
        assert LEGACY_DOC[end:].startswith("## Important Section After")

    def test_runs_to_end_of_file(self):
        content = "Intro\n\n## CodeGraph\n\nold\n### Sub\n"
        start, end = locate_legacy_section(content)
        assert content[start:] == "## CodeGraph\n\nold\n### Sub\n"
        assert end == len(content)

    def test_heading_at_start_of_file(self):
        content = "## CodeGraph\nold\n## Next\n"
        assert locate_legacy_section(content) == (0, len("## CodeGraph\nold\n"))

    def test_top_level_heading_ends_section(self):
        content = "## CodeGraph\nold\n# Appendix\n"
        start, end = locate_legacy_section(content)
        assert content[end:] == "# Appendix\n"

    def test_headings_in_code_fences_are_ignored(self):
        """Test shell comments inside fenced code are not headings."""
        content = "## CodeGraph\n\n```bash\n# install it\n## really\n```\n\n## Next\n"
        start, end = locate_legacy_section(content)
        assert content[end:] == "## Next\n"

    def test_heading_inside_code_fence_not_adopted(self):
        content = "```\n## CodeGraph\n```\n"
        assert locate_legacy_section(content) is None

    def test_crlf_line_endings(self):
        content = "Intro\r\n## CodeGraph\r\nold\r\n## Next\r\n"
        start, end = locate_legacy_section(content)
        assert content[start:end] == "## CodeGraph\r\nold\r\n"


class TestReconcileSection:
    """Test reconcile_section function."""

    def test_no_file_creates_section(self):
        content, result = reconcile_section(None)
        assert content == SECTION_TEMPLATE + "\n"
        assert result.created is True
        assert result.updated is False

    def test_marked_section_replaced_in_place(self):
        """Test text around a marked section survives byte-for-byte."""
        before = "## My Custom Section\n\nCustom content\n\n"
        after = "\n\n## Another Section\r\n\r\nMore content\n"
        original = before + f"{SECTION_START}\nstale instructions\n{SECTION_END}" + after

        content, result = reconcile_section(original)

        assert content == before + SECTION_TEMPLATE + after
        assert "stale instructions" not in content
        assert result.updated is True
        assert result.created is False

    def test_marked_section_is_idempotent(self):
        first, _ = reconcile_section("# Notes\n\nmine\n")
        second, result = reconcile_section(first)
        assert second == first
        assert result.updated is True

    def test_legacy_section_adopted(self):
        """Test a hand-written section becomes a marked section."""
        content, result = reconcile_section(LEGACY_DOC)

        assert result.updated is True
        assert result.created is False
        assert content.startswith("## Pre-existing Section\n\nSome content\n\n" + SECTION_START)
        assert content.endswith(SECTION_END + "\n\n## Important Section After\n\nThis content must not be overwritten!\n")
        assert "Old codegraph content" not in content
        assert content.count("## CodeGraph") == 1

    def test_legacy_section_at_end_of_file(self):
        content, result = reconcile_section("Intro\n\n## CodeGraph\n\nold stuff\n")
        assert content == "Intro\n\n" + SECTION_TEMPLATE + "\n"
        assert result.updated is True

    def test_adopted_legacy_section_is_stable(self):
        first, _ = reconcile_section(LEGACY_DOC)
        second, _ = reconcile_section(first)
        assert second == first

    def test_append_to_foreign_document(self):
        content, result = reconcile_section("# My notes\n\nStuff\n\n\n")
        assert content == "# My notes\n\nStuff\n\n" + SECTION_TEMPLATE + "\n"
        assert result.created is False
        assert result.updated is False

    def test_append_to_blank_document(self):
        content, result = reconcile_section("  \n\n")
        assert content == SECTION_TEMPLATE + "\n"
        assert result.created is False
        assert result.updated is False

    def test_malformed_section_appends_fresh_section(self, caplog):
        """Test an unterminated marker is logged and a new section appended."""
        original = f"# Notes\n\n{SECTION_START}\nhalf written\n"

        with caplog.at_level(logging.WARNING):
            content, result = reconcile_section(original)

        assert content == original.rstrip() + "\n\n" + SECTION_TEMPLATE + "\n"
        assert result.created is False
        assert result.updated is False
        assert "malformed" in caplog.text

    def test_malformed_section_without_heading_is_stable_next_run(self):
        """Test the appended section is the one replaced later."""
        first, _ = reconcile_section(f"# Notes\n\n{SECTION_START}\nhalf written\n")
        second, result = reconcile_section(first)
        assert second == first
        assert "half written" in second
        assert result.updated is True

    def test_truncated_section_adopted_by_heading(self, caplog):
        """Test a section cut off after its heading is replaced, not duplicated."""
        original = f"# Notes\n\n{SECTION_START}\n## CodeGraph\n\nold half-written body\n\n## Other\n\nkeep\n"

        with caplog.at_level(logging.WARNING):
            content, result = reconcile_section(original)

        assert content == "# Notes\n\n" + SECTION_TEMPLATE + "\n\n## Other\n\nkeep\n"
        assert content.count("## CodeGraph") == 1
        assert content.count(SECTION_START) == 1
        assert "old half-written body" not in content
        assert result.updated is True
        assert result.created is False
        assert "malformed" in caplog.text

    def test_truncated_section_is_stable_next_run(self):
        first, _ = reconcile_section(f"# Notes\n\n{SECTION_START}\n## CodeGraph\n\nold body\n")
        second, result = reconcile_section(first)
        assert second == first
        assert first.count("## CodeGraph") == 1
        assert result.updated is True

    def test_orphaned_marker_away_from_heading_is_kept(self):
        """Test a start marker separated from the heading by text is left alone."""
        original = f"{SECTION_START}\nuser text\n\n## CodeGraph\n\nold\n"
        content, result = reconcile_section(original)
        assert content == f"{SECTION_START}\nuser text\n\n" + SECTION_TEMPLATE + "\n"
        assert result.updated is True


class TestHasSection:
    """Test has_section function."""

    def test_marker(self):
        assert has_section(f"x\n{SECTION_START}\n") is True

    def test_legacy_heading(self):
        assert has_section(LEGACY_DOC) is True

    def test_absent(self):
        assert has_section("# Notes\n\n### CodeGraph tips\n") is False
