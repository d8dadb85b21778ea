"""Tests for front matter split/parse/render."""

import pytest

from novelpress.frontmatter import (
    compose_document,
    parse_front_matter,
    render_front_matter,
    split_front_matter,
)


class TestSplitFrontMatter:
    def test_no_header(self) -> None:
        block, body = split_front_matter("Just text.\n")
        assert block is None
        assert body == "Just text.\n"

    def test_header_and_body(self) -> None:
        block, body = split_front_matter("---\ntitle: A\n---\n\nBody\n")
        assert block == "title: A"
        assert body == "Body"

    def test_crlf_normalized(self) -> None:
        block, body = split_front_matter("---\r\ntitle: A\r\n---\r\nBody")
        assert block == "title: A"
        assert body == "Body"

    def test_empty_header(self) -> None:
        block, body = split_front_matter("---\n---\nBody")
        assert block == ""
        assert body == "Body"

    def test_delimiter_not_at_start_is_body(self) -> None:
        block, _ = split_front_matter("Intro\n---\ntitle: A\n---\n")
        assert block is None


class TestParseFrontMatter:
    def test_absent_is_empty(self) -> None:
        fields, body = parse_front_matter("Hello")
        assert fields == {}
        assert body == "Hello"

    def test_quotes_stripped(self) -> None:
        fields, _ = parse_front_matter("---\ntitle: \"Dawn\"\ncover: 'a.jpg'\norder: 12\n---\nx")
        assert fields == {"title": "Dawn", "cover": "a.jpg", "order": "12"}

    def test_value_with_colon(self) -> None:
        fields, _ = parse_front_matter('---\ncover_url: "https://x.test/a.jpg"\n---\n')
        assert fields["cover_url"] == "https://x.test/a.jpg"

    def test_malformed_yaml_raises(self) -> None:
        with pytest.raises(ValueError, match="Malformed front matter"):
            parse_front_matter('---\ntitle: "unterminated\n---\n')

    def test_non_mapping_raises(self) -> None:
        with pytest.raises(ValueError, match="must be a mapping"):
            parse_front_matter("---\n- a\n- b\n---\n")

    def test_comments_and_folded_values(self) -> None:
        text = '---\ntitle: "序章" # draft title\ncover: >\n  ch01-cover.jpg\n---\nBody\n'
        fields, body = parse_front_matter(text)
        assert fields == {"title": "序章", "cover": "ch01-cover.jpg"}
        assert body == "Body"

    def test_scalars_become_strings(self) -> None:
        fields, _ = parse_front_matter("---\ncover_media_id: 42\ncover:\n---\n")
        assert fields == {"cover_media_id": "42", "cover": ""}

    def test_escaped_quotes(self) -> None:
        fields, _ = parse_front_matter('---\ntitle: "He said \\"go\\""\n---\n')
        assert fields["title"] == 'He said "go"'


class TestRender:
    def test_ints_bare_strings_quoted(self) -> None:
        out = render_front_matter({"title": "Dawn", "order": 120})
        assert out == '---\ntitle: "Dawn"\norder: 120\n---'

    def test_escapes_quotes(self) -> None:
        out = render_front_matter({"title": 'A "B"'})
        assert 'title: "A \\"B\\""' in out

    def test_bool_is_quoted(self) -> None:
        assert 'flag: "True"' in render_front_matter({"flag": True})

    def test_compose_round_trips_fields(self) -> None:
        doc = compose_document({"title": 'Say "hi"', "order": 5}, "\n\nBody text\n\n")
        assert doc.endswith("\n\nBody text\n")
        fields, body = parse_front_matter(doc)
        assert fields == {"title": 'Say "hi"', "order": "5"}
        assert body == "Body text"
