"""Glob-based ignore rules with last-match-wins evaluation."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IgnoreRule:
    """A single compiled ignore pattern.

    Attributes:
        pattern: Pattern text as written in the ignore file.
        is_negation: Whether the rule re-includes matching paths (``!`` prefix).
        is_anchored: Whether the rule only matches from the repository root (``/`` prefix).
        regex: Compiled matcher applied to normalized relative paths.
    """

    pattern: str
    is_negation: bool
    is_anchored: bool
    regex: re.Pattern[str]

    def matches(self, path: str) -> bool:
        """Return True when the normalized ``path`` is matched by this rule."""
        return self.regex.match(normalize_path(path)) is not None


def normalize_path(path: str) -> str:
    """Return ``path`` with forward slashes and no leading slash."""
    return path.replace("\\", "/").lstrip("/")


def compile_rule(pattern: str) -> IgnoreRule:
    """Compile a glob pattern into an :class:`IgnoreRule`.

    ``*`` matches within one path segment, ``**`` matches across segments (a
    leading ``**/`` may match no segment and ``dir/**`` also matches ``dir``),
    and ``?`` matches one non-separator character. Patterns without an inner
    slash match at any depth; patterns with one match from the root. Matching
    is case-insensitive.

    Args:
        pattern: Raw pattern text, optionally prefixed with ``!`` and/or ``/``.

    Returns:
        IgnoreRule: The compiled rule.
    """

    text = pattern
    is_negation = text.startswith("!")
    if is_negation:
        text = text[1:]
    is_anchored = text.startswith("/")
    if is_anchored:
        text = text[1:]
    directory_only = text.endswith("/")
    if directory_only:
        text = text.rstrip("/")

    body = _translate(text)
    prefix = "" if is_anchored or "/" in text else "(?:.*/)?"

    if directory_only:
        suffix = "/.*"
    elif is_anchored:
        suffix = ""
    else:
        suffix = "(?:/.*)?"

    regex = re.compile(f"^{prefix}{body}{suffix}$", re.IGNORECASE | re.DOTALL)
    return IgnoreRule(pattern=pattern, is_negation=is_negation, is_anchored=is_anchored, regex=regex)


def _translate(glob: str) -> str:
    parts: list[str] = []
    index = 0
    length = len(glob)
    while index < length:
        char = glob[index]
        if glob.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif glob.startswith("/**", index) and index + 3 == length:
            parts.append("(?:/.*)?")
            index += 3
        elif glob.startswith("**", index):
            parts.append(".*")
            index += 2
        elif char == "*":
            parts.append("[^/]*")
            index += 1
        elif char == "?":
            parts.append("[^/]")
            index += 1
        else:
            parts.append(re.escape(char))
            index += 1
    return "".join(parts)


def should_ignore(rules: Iterable[IgnoreRule], path: str) -> bool:
    """Decide whether ``path`` is excluded from tracking.

    Every matching rule overwrites the running decision, so the last matching
    rule wins. A path no rule matches is not ignored.
    """

    normalized = normalize_path(path)
    ignored = False
    for rule in rules:
        if rule.regex.match(normalized) is not None:
            ignored = not rule.is_negation
    return ignored


def parse_ignore_lines(lines: Iterable[str]) -> list[IgnoreRule]:
    """Compile ignore-file lines, skipping blanks and ``#`` comments, preserving order."""
    rules: list[IgnoreRule] = []
    for line in lines:
        text = line.strip()
        if not text or text.startswith("#") or text == "!":
            continue
        rules.append(compile_rule(text))
    return rules


def read_ignore_rules(path: Path) -> list[IgnoreRule]:
    """Read ignore rules from ``path``; a missing file yields no rules."""
    if not path.is_file():
        return []
    rules = parse_ignore_lines(path.read_text(encoding="utf-8").splitlines())
    LOGGER.debug("Loaded %d ignore rule(s) from %s", len(rules), path)
    return rules


__all__ = [
    "IgnoreRule",
    "compile_rule",
    "normalize_path",
    "parse_ignore_lines",
    "read_ignore_rules",
    "should_ignore",
]
