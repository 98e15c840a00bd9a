"""Ignore-file handling for ChangeVersion."""

from .rules import (
    IgnoreRule,
    compile_rule,
    normalize_path,
    parse_ignore_lines,
    read_ignore_rules,
    should_ignore,
)

__all__ = [
    "IgnoreRule",
    "compile_rule",
    "normalize_path",
    "parse_ignore_lines",
    "read_ignore_rules",
    "should_ignore",
]
