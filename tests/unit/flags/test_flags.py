"""Tests for per-directory flag string parsing."""

from __future__ import annotations

import unittest

from dirtree.flags import DirectoryFlags, parse_flags


class ParseFlagsTests(unittest.TestCase):
    def test_empty_and_missing_input_yield_defaults(self) -> None:
        self.assertEqual(parse_flags(""), DirectoryFlags())
        self.assertEqual(parse_flags(None), DirectoryFlags())
        self.assertEqual(parse_flags("   "), DirectoryFlags())

    def test_short_and_long_forms(self) -> None:
        expected = DirectoryFlags(max_depth=1, structure_only=True, files_only_at_level=2)
        self.assertEqual(parse_flags("-d 1 -s -f 2"), expected)
        self.assertEqual(
            parse_flags("--depth 1 --structure-only --files-only-at-level 2"),
            expected,
        )

    def test_order_of_non_conflicting_flags_does_not_matter(self) -> None:
        self.assertEqual(parse_flags("-s -d 2"), parse_flags("-d 2 -s"))
        self.assertEqual(parse_flags("-f 3 -d 0"), parse_flags("-d 0 -f 3"))

    def test_parsing_is_idempotent(self) -> None:
        self.assertEqual(parse_flags("-d 2 -s"), parse_flags("-d 2 -s"))

    def test_unknown_tokens_are_ignored(self) -> None:
        self.assertEqual(parse_flags("-x --bogus 7 -s"), DirectoryFlags(structure_only=True))

    def test_missing_value_at_end_leaves_field_unset(self) -> None:
        self.assertEqual(parse_flags("-s -d"), DirectoryFlags(structure_only=True))
        self.assertEqual(parse_flags("-f"), DirectoryFlags())

    def test_value_token_is_consumed_even_when_it_looks_like_a_flag(self) -> None:
        self.assertEqual(parse_flags("-d -s"), DirectoryFlags())

    def test_non_integer_value_leaves_field_unset(self) -> None:
        self.assertEqual(parse_flags("-d many -f 2"), DirectoryFlags(files_only_at_level=2))

    def test_repeated_flag_last_value_wins(self) -> None:
        self.assertEqual(parse_flags("-d 1 -d 4").max_depth, 4)

    def test_extra_whitespace_is_tolerated(self) -> None:
        self.assertEqual(parse_flags("  -d\t0   -s "), DirectoryFlags(max_depth=0, structure_only=True))


if __name__ == "__main__":
    unittest.main()
