"""Tests for ignore pattern compilation and evaluation."""

from pathlib import Path

import pytest

from changeversion.ignore import (
    compile_rule,
    parse_ignore_lines,
    read_ignore_rules,
    should_ignore,
)


@pytest.mark.parametrize(
    ("pattern", "path", "expected"),
    [
        ("*.txt", "notes.txt", True),
        ("*.txt", "image.png", False),
        ("*.txt", "docs/notes.txt", True),
        ("/foo/bar.cs", "foo/bar.cs", True),
        ("/foo/bar.cs", "src/foo/bar.cs", False),
        ("lib/**", "lib/util/helper.cs", True),
        ("lib/**", "src/lib/util.cs", False),
        ("src/*.cs", "src/Program.cs", True),
        ("src/*.cs", "src/sub/Other.cs", False),
        ("**/build", "build/output.bin", True),
        ("**/build", "a/b/build/output.bin", True),
        ("file?.md", "file1.md", True),
        ("file?.md", "file10.md", False),
        ("node_modules", "web/node_modules/pkg/index.js", True),
        ("logs/", "logs/today.log", True),
        ("logs/", "logs", False),
        ("*.TXT", "readme.txt", True),
        ("a+b(1).txt", "a+b(1).txt", True),
    ],
)
def test_rule_matching(pattern: str, path: str, expected: bool) -> None:
    rule = compile_rule(pattern)

    assert rule.matches(path) is expected


def test_negated_rule_alone_does_not_ignore() -> None:
    rules = parse_ignore_lines(["!app.log"])

    assert should_ignore(rules, "app.log") is False


def test_last_matching_rule_wins() -> None:
    rules = parse_ignore_lines(["*.tmp", "!foo.tmp"])

    assert should_ignore(rules, "foo.tmp") is False
    assert should_ignore(rules, "bar.tmp") is True

    reordered = parse_ignore_lines(["!foo.tmp", "*.tmp"])
    assert should_ignore(reordered, "foo.tmp") is True


def test_compile_rule_records_flags() -> None:
    rule = compile_rule("!/build/")

    assert rule.is_negation is True
    assert rule.is_anchored is True
    assert rule.pattern == "!/build/"


def test_parse_ignore_lines_skips_comments_and_blanks() -> None:
    rules = parse_ignore_lines(["# comment", "", "   ", "*.log", "!important.log", "data/*.csv"])

    assert [rule.pattern for rule in rules] == ["*.log", "!important.log", "data/*.csv"]
    assert should_ignore(rules, "errors.log") is True
    assert should_ignore(rules, "important.log") is False
    assert should_ignore(rules, "data/report.csv") is True
    assert should_ignore(rules, "data/report.txt") is False


def test_backslash_paths_are_normalized() -> None:
    rules = parse_ignore_lines(["src/*.cs"])

    assert should_ignore(rules, "src\\Program.cs") is True


def test_read_ignore_rules_missing_file(tmp_path: Path) -> None:
    assert read_ignore_rules(tmp_path / ".cvignore") == []


def test_read_ignore_rules_from_file(tmp_path: Path) -> None:
    ignore_file = tmp_path / ".cvignore"
    ignore_file.write_text("*.bak\n# keep this one\n!keep.bak\n", encoding="utf-8")

    rules = read_ignore_rules(ignore_file)

    assert should_ignore(rules, "old.bak") is True
    assert should_ignore(rules, "keep.bak") is False
