"""Unit tests for balanced delimiter scanning."""

from shepimport.core.delimiters import extract_after, extract_balanced, find_matching, split_top_level


class TestFindMatching:
    """Tests for find_matching."""

    def test_nested_braces(self) -> None:
        text = "{ a { b } c }"
        assert find_matching(text, 0) == len(text) - 1

    def test_braces_inside_strings_are_ignored(self) -> None:
        text = '{ x = "}" }'
        assert find_matching(text, 0) == len(text) - 1

    def test_braces_inside_comments_are_ignored(self) -> None:
        text = "{ // }\n }"
        assert find_matching(text, 0) == len(text) - 1

    def test_unbalanced_returns_none(self) -> None:
        assert find_matching("{ {", 0) is None

    def test_wrong_start_returns_none(self) -> None:
        assert find_matching("abc", 0) is None


class TestExtract:
    """Tests for extract_balanced and extract_after."""

    def test_extract_balanced_body(self) -> None:
        span = extract_balanced("a(b(c)d)e", 1, "(")
        assert span is not None
        assert span.body == "b(c)d"
        assert span.end == 8

    def test_extract_after_nested_default(self) -> None:
        span = extract_after("x @default(fn(x: {y: 1})) y", "@default")
        assert span is not None
        assert span.body == "fn(x: {y: 1})"

    def test_extract_after_missing_marker(self) -> None:
        assert extract_after("x y", "@default") is None


class TestSplitTopLevel:
    """Tests for split_top_level."""

    def test_brackets_protect_separators(self) -> None:
        assert split_top_level("fields: [a, b], references: [id]") == [
            "fields: [a, b]",
            "references: [id]",
        ]

    def test_strings_protect_separators(self) -> None:
        assert split_top_level('"a,b", c') == ['"a,b"', "c"]
