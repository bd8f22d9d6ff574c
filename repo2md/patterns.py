"""
Ignore-rule parsing and compilation.

Turns gitignore-style lines and simple filename wildcards into immutable
``CompiledPattern`` objects. Each compiled pattern is built once and then
answers ``matches(path, is_directory)`` for normalized, forward-slash
relative paths.

Glob tokens are expanded in this order:

    /**/   zero or more intermediate directories
    **/    (leading) any number of leading directories, including none
    /**    (trailing) the directory and everything beneath it
    **     any run of characters, separators included
    *      any run of non-separator characters
    ?      exactly one non-separator character
    [...]  one non-separator character from a class
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, List, Optional, Tuple

from .errors import PatternCompileError

logger = logging.getLogger(__name__)

SEPARATOR = "/"

# Unmatchable on any input; used for rules that failed to compile.
_NEVER_MATCH = re.compile(r"(?!)")


# =============================================================================
# ENUMS AND DATA MODELS
# =============================================================================

class PatternKind(Enum):
    """Which grammar a pattern string is written in."""
    IGNORE_RULE = auto()      # One line of an ignore file
    SIMPLE_WILDCARD = auto()  # Filename wildcard from the command line / config


@dataclass(frozen=True)
class IgnoreRule:
    """One parsed line of an ignore file."""
    raw: str
    pattern: str
    negated: bool = False
    directory_only: bool = False
    anchored: bool = False

    @classmethod
    def parse(cls, line: str) -> IgnoreRule:
        """Parse a single ignore line.

        Raises ``PatternCompileError`` when the line carries no pattern at
        all (for example a bare ``!`` or ``/``).
        """
        raw = line.rstrip("\r\n")
        # Trailing spaces are dropped unless escaped with a backslash.
        text = re.sub(r"(?<!\\)\s+$", "", raw).lstrip()
        if not text:
            raise PatternCompileError(raw, "empty rule")

        negated = False
        if text.startswith("!"):
            negated = True
            text = text[1:]
        elif text.startswith(("\\!", "\\#")):
            text = text[1:]

        directory_only = text.endswith(SEPARATOR)
        if directory_only:
            text = text.rstrip(SEPARATOR)

        anchored = text.startswith(SEPARATOR)
        if anchored:
            text = text.lstrip(SEPARATOR)

        if not text:
            raise PatternCompileError(raw, "rule has no pattern")

        return cls(
            raw=raw,
            pattern=text,
            negated=negated,
            directory_only=directory_only,
            anchored=anchored,
        )


@dataclass(frozen=True)
class CompiledPattern:
    """Immutable matcher built from an ignore rule or a filename wildcard."""
    source: str
    kind: PatternKind
    negated: bool = False
    directory_only: bool = False
    entry_regex: re.Pattern = field(default=_NEVER_MATCH, repr=False, compare=False)
    ancestor_regex: Optional[re.Pattern] = field(default=None, repr=False, compare=False)

    @classmethod
    def never(cls, source: str, kind: PatternKind) -> CompiledPattern:
        """A pattern that matches nothing."""
        return cls(source=source, kind=kind)

    @property
    def never_matches(self) -> bool:
        return self.entry_regex is _NEVER_MATCH

    def matches(self, path: str, is_directory: bool = False) -> bool:
        """Check a normalized relative path against this pattern."""
        if self.never_matches:
            return False

        if self.kind is PatternKind.SIMPLE_WILDCARD:
            basename = path.rsplit(SEPARATOR, 1)[-1]
            return self.entry_regex.fullmatch(basename) is not None

        # Anything beneath a matched directory is matched as well.
        if self.ancestor_regex is not None and self.ancestor_regex.search(path):
            return True
        if self.directory_only and not is_directory:
            return False
        return self.entry_regex.search(path) is not None


# =============================================================================
# GLOB TRANSLATION
# =============================================================================

def _translate_class(pattern: str, start: int) -> Tuple[Optional[str], int]:
    """Translate a ``[...]`` class starting at ``start``.

    Returns ``(None, start)`` when the bracket is never closed, in which
    case the caller treats ``[`` as a literal character.
    """
    end = start + 1
    if end < len(pattern) and pattern[end] in "!^":
        end += 1
    if end < len(pattern) and pattern[end] == "]":
        end += 1
    while end < len(pattern) and pattern[end] != "]":
        end += 1
    if end >= len(pattern):
        return None, start

    body = pattern[start + 1:end]
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]
    body = re.sub(r"([\\\[\]^])", r"\\\1", body)

    if negate:
        return f"[^/{body}]", end + 1
    return f"(?!/)[{body}]", end + 1


def _translate_ignore_glob(pattern: str) -> str:
    out: List[str] = []
    i, n = 0, len(pattern)

    while i < n:
        if pattern.startswith("/**/", i):
            out.append("/(?:.*/)?")
            i += 4
        elif i == 0 and pattern.startswith("**/"):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("/**", i) and i + 3 == n:
            out.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        elif pattern[i] == "[":
            translated, i_next = _translate_class(pattern, i)
            if translated is None:
                out.append(re.escape("["))
                i += 1
            else:
                out.append(translated)
                i = i_next
        elif pattern[i] == "\\" and i + 1 < n:
            out.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            out.append(re.escape(pattern[i]))
            i += 1

    return "".join(out)


def _translate_wildcard(pattern: str) -> str:
    out: List[str] = []
    for char in pattern:
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        else:
            out.append(re.escape(char))
    return "".join(out)


# =============================================================================
# COMPILATION
# =============================================================================

def compile_rule(rule: IgnoreRule) -> CompiledPattern:
    """Compile a parsed ignore rule. Raises ``PatternCompileError``."""
    body = _translate_ignore_glob(rule.pattern)
    # Without a leading slash the rule may start at any directory boundary.
    prefix = "^" if rule.anchored else "(?:^|/)"

    try:
        entry = re.compile(f"{prefix}{body}\\Z")
        ancestor = re.compile(f"{prefix}{body}/")
    except re.error as e:
        raise PatternCompileError(rule.raw, str(e)) from e

    return CompiledPattern(
        source=rule.raw,
        kind=PatternKind.IGNORE_RULE,
        negated=rule.negated,
        directory_only=rule.directory_only,
        entry_regex=entry,
        ancestor_regex=ancestor,
    )


def compile_wildcard(pattern: str) -> CompiledPattern:
    """Compile a bare filename wildcard. Raises ``PatternCompileError``."""
    text = pattern.strip()
    if not text:
        raise PatternCompileError(pattern, "empty wildcard")
    if SEPARATOR in text:
        raise PatternCompileError(pattern, "filename wildcards cannot contain '/'")

    return CompiledPattern(
        source=pattern,
        kind=PatternKind.SIMPLE_WILDCARD,
        entry_regex=re.compile(_translate_wildcard(text)),
    )


def compile_pattern(
    pattern: str, kind: PatternKind = PatternKind.IGNORE_RULE
) -> CompiledPattern:
    """Compile ``pattern``; on failure log a warning and match nothing."""
    try:
        if kind is PatternKind.SIMPLE_WILDCARD:
            return compile_wildcard(pattern)
        return compile_rule(IgnoreRule.parse(pattern))
    except PatternCompileError as e:
        logger.warning(f"{e}; it will match nothing")
        return CompiledPattern.never(pattern, kind)


def parse_ignore_lines(lines: Iterable[str]) -> List[IgnoreRule]:
    """Parse ignore-file lines in declaration order.

    Blank lines and ``#`` comments are skipped silently; lines that carry no
    usable pattern are skipped with a warning.
    """
    rules: List[IgnoreRule] = []
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            rules.append(IgnoreRule.parse(line))
        except PatternCompileError as e:
            logger.warning(f"Skipping ignore line {number}: {e}")
    return rules
