"""Tests for the directory flag registry and flags-file loading."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from dirtree.registry import (
    FlagRegistry,
    FlagRegistryBuilder,
    load_flags_file,
    relative_key,
    split_flag_token,
)


class SplitFlagTokenTests(unittest.TestCase):
    def test_splits_at_first_colon_and_strips_leading_flag_whitespace(self) -> None:
        self.assertEqual(split_flag_token("pg_data:  -d 1 -s"), ("pg_data", "-d 1 -s"))
        self.assertEqual(split_flag_token("a:b:-s"), ("a", "b:-s"))
        self.assertEqual(split_flag_token("logs:"), ("logs", ""))


class RelativeKeyTests(unittest.TestCase):
    def test_root_itself_is_empty_key(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self.assertEqual(relative_key(root, root), "")
            self.assertEqual(relative_key(root / ".", root), "")

    def test_nested_and_dotted_paths_normalize(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "data" / "raw").mkdir(parents=True)
            self.assertEqual(relative_key(root / "data" / "raw", root), "data/raw")
            self.assertEqual(relative_key(root / "." / "data", root), "data")


class FlagRegistryTests(unittest.TestCase):
    def test_lookup_prefers_relative_path_over_basename(self) -> None:
        registry = FlagRegistry({"src/logs": "-d 1", "logs": "-s"})
        self.assertEqual(registry.lookup("src/logs", "logs"), "-d 1")
        self.assertEqual(registry.lookup("other/logs", "logs"), "-s")
        self.assertIsNone(registry.lookup("other/tmp", "tmp"))

    def test_empty_flag_string_counts_as_absent(self) -> None:
        registry = FlagRegistry({"logs": "", "": ""})
        self.assertIsNone(registry.lookup("", "logs"))

    def test_registry_is_read_only_snapshot(self) -> None:
        source = {"logs": "-s"}
        registry = FlagRegistry(source)
        source["logs"] = "-d 9"
        self.assertEqual(registry.lookup("x", "logs"), "-s")


class FlagRegistryBuilderTests(unittest.TestCase):
    def test_existing_directory_is_stored_under_relative_and_literal_keys(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "data").mkdir()
            builder = FlagRegistryBuilder(root)
            builder.register_token("./data:-d 1 -s")
            registry = builder.build()

            self.assertIn("data", registry)
            self.assertIn("./data", registry)
            self.assertEqual(registry.lookup("data", "data"), "-d 1 -s")

    def test_current_directory_collapses_to_empty_key(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            builder = FlagRegistryBuilder(root)
            builder.register_token(".:-d 0")
            registry = builder.build()

            self.assertEqual(registry.lookup("", root.name), "-d 0")
            self.assertIn(".", registry)

    def test_missing_directory_is_stored_verbatim(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            builder = FlagRegistryBuilder(Path(tmp))
            directory = builder.register_token("./later/logs:-f 2")
            registry = builder.build()

            self.assertEqual(directory, "./later/logs")
            self.assertEqual(dict(registry.items()), {"./later/logs": "-f 2"})

    def test_basename_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            builder = FlagRegistryBuilder(Path(tmp))
            builder.register_token("logs:-f 2")
            registry = builder.build()

            self.assertEqual(registry.lookup("deep/nested/logs", "logs"), "-f 2")

    def test_later_registration_overwrites(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            builder = FlagRegistryBuilder(Path(tmp))
            builder.register_token("logs:-s")
            builder.register_token("logs:-d 3")
            self.assertEqual(builder.build().lookup("logs", "logs"), "-d 3")


class LoadFlagsFileTests(unittest.TestCase):
    def test_skips_blank_comment_and_colonless_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            flags_path = root / "flags.txt"
            flags_path.write_text(
                "\n"
                "# comment\n"
                "   # indented comment\n"
                "  pg_data:-d 1 -s  \n"
                "no colon here\n"
                "logs: -f 2\n"
                "tmp:-d 0",
                encoding="utf-8",
            )
            builder = FlagRegistryBuilder(root)

            loaded = load_flags_file(flags_path, builder)
            registry = builder.build()

            self.assertEqual(loaded, 3)
            self.assertEqual(
                dict(registry.items()),
                {"pg_data": "-d 1 -s", "logs": "-f 2", "tmp": "-d 0"},
            )

    def test_non_utf8_file_raises_before_registering_anything(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            flags_path = root / "flags.txt"
            flags_path.write_bytes(b"logs:-s\ncaf\xe9:-s\n")
            builder = FlagRegistryBuilder(root)

            with self.assertRaises(UnicodeDecodeError):
                load_flags_file(flags_path, builder)
            self.assertEqual(len(builder.build()), 0)

    def test_missing_file_raises_os_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            with self.assertRaises(OSError):
                load_flags_file(root / "absent.txt", FlagRegistryBuilder(root))


if __name__ == "__main__":
    unittest.main()
