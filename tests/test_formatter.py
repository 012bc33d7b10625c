"""
Tests for the canonical formatter.
"""

import pytest

from backend.skilldoc.errors import HeaderSyntaxError, MissingDelimiterError
from backend.skilldoc.formatter import (
    diff_content,
    format_content,
    format_document,
    normalize_line_endings,
)
from backend.skilldoc.parser import parse_frontmatter


CANONICAL = "---\nname: my-skill\ndescription: A skill\n---\nBody text.\n"

SAMPLES = [
    CANONICAL,
    "---\ndescription: d\nlicense: MIT\nname: x\n---\n",
    "---\nzeta: 1\nname: x\nalpha: 2\ndescription: d\n---\nbody\n",
    (
        "---\n"
        "# Header comment\n"
        "\n"
        "description: d   \n"
        "\n"
        "# The skill name\n"
        "name: x\n"
        "# trailing\n"
        "---\n"
        "body\n\n\n\n\nend   \n\n"
    ),
    (
        "---\n"
        "metadata:\n"
        "  author: docs\n"
        "# inside\n"
        "  version: 2\n"
        "description: >\n"
        "  folded\n"
        "\n"
        "  text\n"
        "name: x\n"
        "---\n"
    ),
    "---\nzeta: &n pdf-tools\nname: *n\ndescription: d\n---\n",
    "---\n# only a comment\n\n---\n",
    "---\n---\nBody\n",
    "---\nname: x\ndescription: |\n  Text\n  ---\n  More\n---\nBody\n---\nrule\n",
    "---\ndescription: |+\n  keep\n\n\nname: x\n---\n",
    "---\nname: x\ndescription: |+\n  keep\n\n\nlicense: MIT\n---\n",
    "---\nmetadata:\n  notes: |\n    spaced  \ndescription: d\nname: x\n---\n",
]


class TestFormatContent:
    """Tests for canonical formatting."""

    def test_canonical_unchanged(self):
        """Test canonical input is returned as is."""
        assert format_content(CANONICAL) == CANONICAL

    def test_key_order(self):
        """Test known keys are sorted into canonical order."""
        text = "---\ndescription: d\nlicense: MIT\nname: x\n---\n"
        assert format_content(text) == "---\nname: x\ndescription: d\nlicense: MIT\n---\n"

    def test_optional_fields_order(self):
        """Test compatibility and allowed-tools come before license."""
        text = (
            "---\nlicense: MIT\nallowed-tools: Read\ncompatibility: git\n"
            "name: x\ndescription: d\n---\n"
        )
        assert format_content(text) == (
            "---\nname: x\ndescription: d\ncompatibility: git\n"
            "allowed-tools: Read\nlicense: MIT\n---\n"
        )

    def test_unknown_keys_keep_relative_order(self):
        """Test unknown keys follow known keys in original order."""
        text = "---\nzeta: 1\nname: x\nalpha: 2\ndescription: d\n---\n"
        assert format_content(text) == (
            "---\nname: x\ndescription: d\nzeta: 1\nalpha: 2\n---\n"
        )

    def test_nested_value_moves_with_key(self):
        """Test a multi-line value moves as one block."""
        text = "---\nmetadata:\n  author: docs\ndescription: d\nname: x\n---\n"
        assert format_content(text) == (
            "---\nname: x\ndescription: d\nmetadata:\n  author: docs\n---\n"
        )

    def test_comment_anchoring(self):
        """Test comments travel with their key; header and trailing comments stay put."""
        text = (
            "---\n"
            "# Header comment\n"
            "\n"
            "description: d\n"
            "\n"
            "# The skill name\n"
            "name: x\n"
            "# trailing\n"
            "---\n"
            "body\n"
        )
        assert format_content(text) == (
            "---\n"
            "# Header comment\n"
            "# The skill name\n"
            "name: x\n"
            "description: d\n"
            "# trailing\n"
            "---\n"
            "body\n"
        )

    def test_blank_lines_between_blocks_removed(self):
        """Test blank lines between header blocks are dropped."""
        text = "---\nname: x\n\n\ndescription: d\n---\n"
        assert format_content(text) == "---\nname: x\ndescription: d\n---\n"

    def test_blank_runs_in_comment_collapsed(self):
        """Test blank runs inside a comment block become one blank line."""
        text = "---\nname: x\n# one\n\n\n# two\ndescription: d\n---\n"
        assert format_content(text) == "---\nname: x\n# one\n\n# two\ndescription: d\n---\n"

    def test_trailing_whitespace_trimmed(self):
        """Test trailing whitespace is removed everywhere."""
        text = "---   \nname: x  \ndescription: d   \n---\t\nBody   \n"
        assert format_content(text) == "---\nname: x\ndescription: d\n---\nBody\n"

    def test_body_blank_runs(self):
        """Test body blank runs are capped at two and trailing blanks removed."""
        text = "---\nname: x\ndescription: d\n---\nLine one   \n\n\n\n\nLine two\n\n\n"
        assert format_content(text) == (
            "---\nname: x\ndescription: d\n---\nLine one\n\n\nLine two\n"
        )

    def test_body_gets_final_newline(self):
        """Test a non-empty body ends with exactly one newline."""
        text = "---\nname: x\ndescription: d\n---\nBody"
        assert format_content(text).endswith("---\nBody\n")

    def test_empty_body_stays_empty(self):
        """Test an empty or blank body is emitted as nothing."""
        assert format_content("---\nname: x\ndescription: d\n---\n\n\n") == (
            "---\nname: x\ndescription: d\n---\n"
        )
        assert format_content("---\nname: x\ndescription: d\n---") == (
            "---\nname: x\ndescription: d\n---\n"
        )

    def test_block_scalar_delimiter_kept(self):
        """Test --- inside a block scalar is untouched."""
        text = "---\nname: x\ndescription: |\n  Text\n  ---\n  More\n---\nBody\n"
        assert format_content(text) == text

    def test_keep_chomping_trailing_lines_kept(self):
        """Test trailing blank lines of a |+ block scalar are content and stay."""
        text = "---\nname: x\ndescription: |+\n  keep\n\n\nlicense: MIT\n---\n"
        assert format_content(text) == text
        assert parse_frontmatter(text).data["description"] == "keep\n\n\n"

    def test_keep_chomping_moves_with_key(self):
        """Test a |+ value keeps its trailing blank lines when reordered."""
        text = "---\ndescription: |+\n  keep\n\n\nname: x\n---\n"
        formatted = format_content(text)
        assert formatted == "---\nname: x\ndescription: |+\n  keep\n\n\n---\n"
        assert parse_frontmatter(formatted).data["description"] == "keep\n\n\n"

    def test_clip_chomping_trailing_lines_dropped(self):
        """Test trailing blank lines of a | block scalar are removed."""
        text = "---\ndescription: |\n  text\n\n\nname: x\n---\n"
        assert format_content(text) == "---\nname: x\ndescription: |\n  text\n---\n"

    def test_block_scalar_trailing_spaces_kept(self):
        """Test trailing spaces inside a literal block scalar are content."""
        text = "---\nname: x\ndescription: |\n  spaced  \n---\n"
        assert format_content(text) == text

    def test_byte_order_mark_line_left_alone(self):
        """Test a header that would load differently once cleaned is kept as is."""
        text = "---\n\r\n\ufeff,x#description{], }}…:\n---\nbody\n"
        once = format_content(text)
        assert once == "---\n\n\ufeff,x#description{], }}…:\n---\nbody\n"
        assert format_content(once) == once

    def test_bad_tagged_value_raises_parse_error(self):
        """Test values PyYAML cannot construct surface as a syntax error."""
        with pytest.raises(HeaderSyntaxError):
            format_content("---\nname: !!int\ndescription: d\n---\n")

    def test_reorder_fallback_for_aliases(self):
        """Test the original order is kept when reordering would break aliases."""
        text = "---\nzeta: &n pdf-tools\nname: *n\ndescription: d\n---\n"
        assert format_content(text) == text

    def test_custom_key_order(self):
        """Test a configured key order."""
        text = "---\nname: x\ndescription: d\n---\n"
        assert format_content(text, key_order=["description", "name"]) == (
            "---\ndescription: d\nname: x\n---\n"
        )

    def test_comment_only_header(self):
        """Test a header of comments only is cleaned."""
        assert format_content("---\n# only a comment\n\n---\n") == "---\n# only a comment\n---\n"

    def test_parse_error_propagates(self):
        """Test unparseable documents raise."""
        with pytest.raises(MissingDelimiterError):
            format_content("no header\n")


class TestFormatProperties:
    """Tests for formatter invariants over sample documents."""

    @pytest.mark.parametrize("text", SAMPLES)
    def test_idempotent(self, text):
        """Test formatting formatted output changes nothing."""
        once = format_content(text)
        assert format_content(once) == once

    @pytest.mark.parametrize("text", SAMPLES)
    def test_crlf_equivalent(self, text):
        """Test CRLF input formats like its LF equivalent."""
        crlf = text.replace("\n", "\r\n")
        assert format_content(crlf) == format_content(text)
        assert "\r" not in format_content(crlf)

    @pytest.mark.parametrize("text", SAMPLES)
    def test_parse_round_trip(self, text):
        """Test unmodified parse output renders byte-identically."""
        assert parse_frontmatter(text).render() == text
        crlf = text.replace("\n", "\r\n")
        assert parse_frontmatter(crlf).render() == crlf

    @pytest.mark.parametrize("text", SAMPLES)
    def test_data_preserved(self, text):
        """Test formatting never changes the header data."""
        before = parse_frontmatter(text).data
        after = parse_frontmatter(format_content(text)).data
        assert after == before


class TestFormatDocument:
    """Tests for FormatResult and diffs."""

    def test_unchanged(self):
        """Test canonical input reports no change and an empty diff."""
        result = format_document(CANONICAL)
        assert result.changed is False
        assert result.diff() == ""

    def test_changed_with_diff(self):
        """Test changed input produces a unified diff."""
        result = format_document("---\ndescription: d\nname: x\n---\n")
        assert result.changed is True
        diff = result.diff("skills/x/SKILL.md")
        assert diff.startswith("--- a/skills/x/SKILL.md\n+++ b/skills/x/SKILL.md\n")
        assert "@@" in diff
        assert "+name: x" in diff or "-description: d" in diff

    def test_line_ending_only_change(self):
        """Test a CRLF document is changed but has no line content diff."""
        result = format_document(CANONICAL.replace("\n", "\r\n"))
        assert result.changed is True
        assert result.content == CANONICAL
        assert result.diff() == ""

    def test_diff_content(self):
        """Test diffing two texts directly."""
        diff = diff_content("a\nb\n", "a\nc\n", "doc.md")
        assert "-b" in diff
        assert "+c" in diff

    def test_normalize_line_endings(self):
        """Test CRLF and CR become LF."""
        assert normalize_line_endings("a\r\nb\rc\n") == "a\nb\nc\n"
