"""
Tests for the skill document parser.
"""

import pytest

from backend.skilldoc.errors import (
    FieldTypeError,
    HeaderNotMappingError,
    HeaderSyntaxError,
    MissingDelimiterError,
    MissingFieldError,
    UnterminatedHeaderError,
)
from backend.skilldoc.models import MISSING, TYPED_FIELDS
from backend.skilldoc.parser import (
    parse_document,
    parse_frontmatter,
    project_properties,
    split_document,
)
from backend.skilldoc.profiles import STANDARD_PROFILE, ValidationProfile


VALID_DOC = (
    "---\n"
    "name: processing-pdfs\n"
    "description: Extracts text from PDF files. Use when working with PDFs.\n"
    "---\n"
    "# Processing PDFs\n"
)


class TestSplitDocument:
    """Tests for delimiter detection."""

    def test_split_valid_document(self):
        """Test header and body are separated at the delimiters."""
        parts = split_document(VALID_DOC)
        assert parts.opening == "---\n"
        assert parts.header.startswith("name: processing-pdfs\n")
        assert parts.closing == "---\n"
        assert parts.body == "# Processing PDFs\n"
        assert parts.render() == VALID_DOC

    def test_missing_opening_delimiter(self):
        """Test a document not starting with --- is rejected."""
        with pytest.raises(MissingDelimiterError) as exc_info:
            split_document("name: x\n---\nbody\n")
        assert exc_info.value.line == 1

    def test_empty_document(self):
        """Test empty text has no opening delimiter."""
        with pytest.raises(MissingDelimiterError):
            split_document("")

    def test_unterminated_header(self):
        """Test a header without closing delimiter is rejected."""
        with pytest.raises(UnterminatedHeaderError):
            split_document("---\nname: x\ndescription: y\n")

    def test_delimiters_allow_trailing_whitespace(self):
        """Test delimiter lines are compared after trimming trailing whitespace."""
        parts = split_document("---  \nname: x\n---\t\nbody\n")
        assert parts.header == "name: x\n"
        assert parts.body == "body\n"

    def test_indented_dashes_do_not_close(self):
        """Test an indented --- line inside a block scalar is content."""
        text = (
            "---\n"
            "name: x\n"
            "description: |\n"
            "  first\n"
            "  ---\n"
            "  last\n"
            "---\n"
            "body\n"
        )
        parts = split_document(text)
        assert parts.body == "body\n"
        assert "  ---\n" in parts.header

    def test_open_quoted_scalar_does_not_close(self):
        """Test a column-0 --- inside an unterminated quoted value is not the closing line."""
        text = (
            "---\n"
            "name: x\n"
            "description: \"starts\n"
            "---\n"
            "  ends\"\n"
            "---\n"
            "body\n"
        )
        parts = split_document(text)
        assert parts.header == "name: x\ndescription: \"starts\n---\n  ends\"\n"
        assert parts.body == "body\n"
        with pytest.raises(HeaderSyntaxError):
            parse_frontmatter(text)

    def test_body_rules_are_not_delimiters(self):
        """Test only the first closing line ends the header."""
        text = "---\nname: x\n---\nintro\n---\nmore\n"
        parts = split_document(text)
        assert parts.body == "intro\n---\nmore\n"

    def test_crlf_delimiters(self):
        """Test CRLF line endings are kept in the parts."""
        text = "---\r\nname: x\r\n---\r\nbody\r\n"
        parts = split_document(text)
        assert parts.opening == "---\r\n"
        assert parts.header == "name: x\r\n"
        assert parts.render() == text


class TestParseFrontmatter:
    """Tests for lenient header parsing."""

    def test_parse_valid(self):
        """Test the header loads into a mapping."""
        frontmatter = parse_frontmatter(VALID_DOC)
        assert frontmatter.data["name"] == "processing-pdfs"
        assert frontmatter.blocks.keys() == ["name", "description"]
        assert frontmatter.body == "# Processing PDFs\n"

    def test_render_is_byte_identical(self):
        """Test rendering an untouched parse reproduces the input."""
        text = (
            "---\r\n"
            "# Header comment\r\n"
            "name: x   \r\n"
            "\r\n"
            "# about description\r\n"
            "description: >\r\n"
            "  folded\r\n"
            "\r\n"
            "  text\r\n"
            "# trailing\r\n"
            "---\r\n"
            "body"
        )
        assert parse_frontmatter(text).render() == text

    def test_get_missing_key(self):
        """Test absent keys are reported as MISSING."""
        frontmatter = parse_frontmatter(VALID_DOC)
        assert frontmatter.get("license") is MISSING

    def test_empty_header_is_empty_mapping(self):
        """Test an empty header loads as an empty mapping."""
        frontmatter = parse_frontmatter("---\n---\nbody\n")
        assert frontmatter.data == {}
        assert len(frontmatter.blocks) == 0

    def test_invalid_yaml_reports_position(self):
        """Test YAML errors carry a document line and column."""
        text = "---\nname: x\n  bad: y\ndescription: z\n---\n"
        with pytest.raises(HeaderSyntaxError) as exc_info:
            parse_frontmatter(text)
        assert exc_info.value.line == 3
        assert exc_info.value.column is not None
        assert exc_info.value.kind == "header_syntax"

    @pytest.mark.parametrize("line", [
        "name: !!int",
        "name: !!float abc",
        "created: !!timestamp 2020-99-99",
    ])
    def test_bad_tagged_values_are_syntax_errors(self, line):
        """Test values PyYAML cannot construct are reported, not raised raw."""
        with pytest.raises(HeaderSyntaxError) as exc_info:
            parse_frontmatter(f"---\n{line}\ndescription: d\n---\n")
        assert exc_info.value.kind == "header_syntax"

    def test_sequence_root_rejected(self):
        """Test a list header is not a mapping."""
        with pytest.raises(HeaderNotMappingError) as exc_info:
            parse_frontmatter("---\n- a\n- b\n---\n")
        assert exc_info.value.found == "sequence"

    def test_scalar_root_rejected(self):
        """Test a scalar header is not a mapping."""
        with pytest.raises(HeaderNotMappingError):
            parse_frontmatter("---\njust text\n---\n")


class TestParseDocument:
    """Tests for full parsing with typed properties."""

    def test_parse_valid(self):
        """Test typed properties are projected."""
        document = parse_document(VALID_DOC)
        assert document.properties.name == "processing-pdfs"
        assert document.properties.description.startswith("Extracts text")
        assert document.properties.metadata is None
        assert document.body == "# Processing PDFs\n"

    def test_missing_name(self):
        """Test a missing name is a parse failure."""
        with pytest.raises(MissingFieldError) as exc_info:
            parse_document("---\ndescription: d\n---\n")
        assert exc_info.value.field == "name"

    def test_empty_header_missing_name(self):
        """Test an empty header fails on the first required field."""
        with pytest.raises(MissingFieldError) as exc_info:
            parse_document("---\n---\n")
        assert exc_info.value.field == "name"

    def test_missing_description(self):
        """Test a missing description is a parse failure."""
        with pytest.raises(MissingFieldError) as exc_info:
            parse_document("---\nname: x\n---\n")
        assert exc_info.value.field == "description"

    def test_non_string_name(self):
        """Test a numeric name is a type failure."""
        with pytest.raises(FieldTypeError) as exc_info:
            parse_document("---\nname: 42\ndescription: d\n---\n")
        assert exc_info.value.field == "name"
        assert exc_info.value.found == "number"

    def test_null_description(self):
        """Test a null description is a type failure."""
        with pytest.raises(FieldTypeError) as exc_info:
            parse_document("---\nname: x\ndescription:\n---\n")
        assert exc_info.value.found == "null"


class TestProjectProperties:
    """Tests for mapping header keys onto typed properties."""

    def test_optional_fields(self):
        """Test optional string fields are typed."""
        properties = project_properties({
            "name": "x",
            "description": "d",
            "license": "MIT",
            "compatibility": "Requires git",
            "allowed-tools": "Bash(git:*) Read",
        })
        assert properties.license == "MIT"
        assert properties.compatibility == "Requires git"
        assert properties.allowed_tools == "Bash(git:*) Read"

    def test_unknown_keys_go_to_metadata(self):
        """Test keys outside the profile are collected in metadata."""
        properties = project_properties({
            "name": "x",
            "description": "d",
            "author": "someone",
            "tags": ["a", "b"],
        })
        assert properties.metadata == {"author": "someone", "tags": ["a", "b"]}
        assert properties.extensions is None

    def test_metadata_mapping_seeds_metadata(self):
        """Test the header's own metadata mapping is kept, nested structure intact."""
        properties = project_properties({
            "name": "x",
            "description": "d",
            "metadata": {"version": "1.0", "owner": {"team": "docs"}},
            "author": "someone",
        })
        assert properties.metadata == {
            "version": "1.0",
            "owner": {"team": "docs"},
            "author": "someone",
        }

    def test_metadata_never_contains_typed_fields(self):
        """Test typed fields with bad values do not leak into metadata."""
        properties = project_properties({
            "name": "x",
            "description": "d",
            "license": 3,
        })
        assert properties.license is None
        assert properties.metadata is None

    def test_extended_profile_keys_go_to_extensions(self):
        """Test profile-known keys without a typed field become extensions."""
        profile = ValidationProfile.extended(["argument-hint"])
        properties = project_properties(
            {"name": "x", "description": "d", "argument-hint": "[file]", "other": 1},
            profile,
        )
        assert properties.extensions == {"argument-hint": "[file]"}
        assert properties.metadata == {"other": 1}

    def test_non_mapping_metadata_is_preserved(self):
        """Test a scalar metadata value is still kept."""
        properties = project_properties({"name": "x", "description": "d", "metadata": "v1"})
        assert properties.metadata == {"metadata": "v1"}

    def test_metadata_mapping_with_typed_names_stays_nested(self):
        """Test typed field names inside the metadata mapping do not surface as metadata keys."""
        properties = project_properties({
            "name": "x",
            "description": "d",
            "metadata": {"name": "other", "license": "x"},
            "author": "someone",
        })
        assert properties.metadata == {
            "metadata": {"name": "other", "license": "x"},
            "author": "someone",
        }
        assert not set(properties.metadata) & set(TYPED_FIELDS)


ROUND_TRIP_DOCUMENTS = [
    (VALID_DOC, STANDARD_PROFILE),
    (
        "---\n"
        "name: x\n"
        "description: d\n"
        "compatibility: Requires git\n"
        "allowed-tools: Bash(git:*) Read\n"
        "license: MIT\n"
        "---\n"
        "Body\n",
        STANDARD_PROFILE,
    ),
    ("---\nname: x\ndescription: d\nauthor: someone\ntags: [a, b]\n---\n", STANDARD_PROFILE),
    (
        "---\n"
        "name: x\n"
        "description: d\n"
        "metadata:\n"
        "  version: '1.0'\n"
        "  owner:\n"
        "    team: docs\n"
        "author: someone\n"
        "---\n",
        STANDARD_PROFILE,
    ),
    ("---\nname: x\ndescription: d\nmetadata:\n  name: other\n  license: x\n---\n", STANDARD_PROFILE),
    ("---\nname: x\ndescription: d\nmetadata: v1\n---\nBody\n", STANDARD_PROFILE),
    (
        "---\nname: x\ndescription: d\nargument-hint: '[file]'\nother: 1\n---\n",
        ValidationProfile.extended(["argument-hint"]),
    ),
]


class TestPropertiesRoundTrip:
    """Tests for re-parsing documents rendered from typed properties."""

    @pytest.mark.parametrize("text,profile", ROUND_TRIP_DOCUMENTS)
    def test_to_document_parses_back(self, text, profile):
        """Test properties survive rendering and parsing again."""
        document = parse_document(text, profile)
        rendered = document.properties.to_document(document.body)
        again = parse_document(rendered, profile)
        assert again.properties == document.properties
        assert again.body == document.body
