"""Tests for title sanitization."""

import pytest

from titlesync.sanitize import sanitize


class TestSanitize:
    def test_plain_title_unchanged(self):
        assert sanitize("My Note") == "My Note"

    def test_strips_stock_symbols(self):
        assert sanitize("a\\b/c:d|e#f^g[h]i") == "abcdefghi"

    def test_trims_whitespace(self):
        assert sanitize("  spaced  ") == "spaced"

    def test_trims_after_removal(self):
        assert sanitize("# Heading") == "Heading"

    def test_user_symbols_are_literal(self):
        assert sanitize("a.b*c?", [".", "*"]) == "abc?"

    def test_user_multichar_symbol(self):
        assert sanitize("draft-TODO-final", ["TODO"]) == "draft--final"

    def test_empty_user_symbol_ignored(self):
        assert sanitize("abc", [""]) == "abc"

    def test_only_illegal_chars_gives_empty(self):
        assert sanitize("#[]:") == ""

    def test_cjk_kept(self):
        assert sanitize("笔记：一") == "笔记：一"

    @pytest.mark.parametrize(
        "text, symbols",
        [
            ("aabb", ["ab"]),
            ("[[x]]", []),
            ("  # a ", []),
            ("x y", ["x "]),
            ("ab ab ", ["b", "a"]),
        ],
    )
    def test_idempotent(self, text, symbols):
        once = sanitize(text, symbols)
        assert sanitize(once, symbols) == once
        for symbol in symbols:
            assert symbol not in once
        for char in "\\/:|#^[]":
            assert char not in once

    def test_nested_user_symbol_fully_removed(self):
        # Removing one "ab" exposes another
        assert sanitize("aabb", ["ab"]) == ""
