"""
Path filtering: decides whether a relative path is excluded from the output.

A ``FilterRuleSet`` is built once per run and never mutated; ``PathFilter``
chains one rule per category over it:

    ignore patterns -> excluded directory names -> extensions -> filename globs

Ignore patterns are evaluated as a group with last-match-wins semantics, so a
later ``!pattern`` re-includes what an earlier line excluded. The other
categories are unconditional.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import FrozenSet, Iterable, List, Tuple, Union

from .errors import PatternCompileError
from .patterns import (
    SEPARATOR,
    CompiledPattern,
    IgnoreRule,
    PatternKind,
    compile_pattern,
    compile_rule,
    parse_ignore_lines,
)

logger = logging.getLogger(__name__)

PathInput = Union[str, PathLike]


def normalize_relative_path(path: PathInput) -> str:
    """Forward slashes, no leading separator, no ``.`` segments."""
    text = str(path).replace("\\", SEPARATOR)
    parts = [part for part in text.split(SEPARATOR) if part and part != "."]
    return SEPARATOR.join(parts)


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    if not ext:
        return ""
    return ext if ext.startswith(".") else f".{ext}"


def _compile_ignore_rules(
    rules: Iterable[Union[IgnoreRule, str]],
) -> Tuple[CompiledPattern, ...]:
    compiled: List[CompiledPattern] = []
    for rule in rules:
        if isinstance(rule, str):
            parsed = parse_ignore_lines([rule])
            if not parsed:
                continue
            rule = parsed[0]
        try:
            compiled.append(compile_rule(rule))
        except PatternCompileError as e:
            logger.warning(f"{e}; it will match nothing")
            compiled.append(CompiledPattern.never(rule.raw, PatternKind.IGNORE_RULE))
    return tuple(compiled)


def load_ignore_file(path: Path) -> List[IgnoreRule]:
    """Read an ignore file. A missing file contributes no rules."""
    if not path.is_file():
        return []
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return []
    rules = parse_ignore_lines(text.splitlines())
    logger.debug(f"Loaded {len(rules)} rules from {path}")
    return rules


# =============================================================================
# RULE SET
# =============================================================================

@dataclass(frozen=True)
class FilterRuleSet:
    """Read-only exclusion rules, grouped by category."""
    ignore_patterns: Tuple[CompiledPattern, ...] = ()
    excluded_dir_names: FrozenSet[str] = frozenset()
    excluded_extensions: FrozenSet[str] = frozenset()
    excluded_filename_globs: Tuple[CompiledPattern, ...] = ()

    @classmethod
    def build(
        cls,
        ignore_rules: Iterable[Union[IgnoreRule, str]] = (),
        excluded_dir_names: Iterable[str] = (),
        excluded_extensions: Iterable[str] = (),
        excluded_filename_globs: Iterable[str] = (),
    ) -> FilterRuleSet:
        """Normalize and compile raw configuration values."""
        dir_names = {
            normalize_relative_path(name.strip())
            for name in excluded_dir_names
        }
        extensions = {_normalize_extension(ext) for ext in excluded_extensions}
        globs = tuple(
            compile_pattern(glob, PatternKind.SIMPLE_WILDCARD)
            for glob in excluded_filename_globs
            if glob.strip()
        )
        return cls(
            ignore_patterns=_compile_ignore_rules(ignore_rules),
            excluded_dir_names=frozenset(name for name in dir_names if name),
            excluded_extensions=frozenset(ext for ext in extensions if ext),
            excluded_filename_globs=globs,
        )


# =============================================================================
# FILTER RULES (Strategy Pattern)
# =============================================================================

class FilterRule(ABC):
    """Abstract base for path filter rules."""

    @abstractmethod
    def check(self, path: str, is_directory: bool) -> Tuple[bool, str]:
        """Check if path passes this rule. Returns (passes, reason)."""


class IgnorePatternRule(FilterRule):
    """Ignore-file patterns; the last matching pattern decides."""

    def __init__(self, patterns: Tuple[CompiledPattern, ...]):
        self.patterns = patterns

    def check(self, path: str, is_directory: bool) -> Tuple[bool, str]:
        for pattern in reversed(self.patterns):
            if pattern.matches(path, is_directory):
                if pattern.negated:
                    return True, f"Re-included by: {pattern.source}"
                return False, f"Matched ignore rule: {pattern.source}"
        return True, ""


class ExcludedDirectoryRule(FilterRule):
    """Directories named in the exclusion set, at any depth."""

    def __init__(self, names: FrozenSet[str]):
        self.segment_names = frozenset(n for n in names if SEPARATOR not in n)
        self.nested_paths = tuple(sorted(n for n in names if SEPARATOR in n))

    def check(self, path: str, is_directory: bool) -> Tuple[bool, str]:
        if not is_directory:
            return True, ""
        for part in path.split(SEPARATOR):
            if part in self.segment_names:
                return False, f"In excluded dir: {part}"
        for nested in self.nested_paths:
            if path == nested or path.startswith(nested + SEPARATOR):
                return False, f"In excluded dir: {nested}"
        return True, ""


class ExcludedExtensionRule(FilterRule):
    """Files whose name ends with an excluded extension (case-insensitive)."""

    def __init__(self, extensions: FrozenSet[str]):
        self.extensions = extensions

    def check(self, path: str, is_directory: bool) -> Tuple[bool, str]:
        if is_directory or not self.extensions:
            return True, ""
        name = path.rsplit(SEPARATOR, 1)[-1].lower()
        for ext in self.extensions:
            if name.endswith(ext):
                return False, f"Excluded extension: {ext}"
        return True, ""


class FilenameGlobRule(FilterRule):
    """Files whose basename matches an excluded wildcard."""

    def __init__(self, globs: Tuple[CompiledPattern, ...]):
        self.globs = globs

    def check(self, path: str, is_directory: bool) -> Tuple[bool, str]:
        if is_directory:
            return True, ""
        for glob in self.globs:
            if glob.matches(path):
                return False, f"Matches exclude: {glob.source}"
        return True, ""


# =============================================================================
# PATH FILTER COMPOSITE
# =============================================================================

class PathFilter:
    """Composite filter applying every rule category to one path."""

    def __init__(self, rules: FilterRuleSet):
        self.rules = rules
        self.chain: List[FilterRule] = [
            IgnorePatternRule(rules.ignore_patterns),
            ExcludedDirectoryRule(rules.excluded_dir_names),
            ExcludedExtensionRule(rules.excluded_extensions),
            FilenameGlobRule(rules.excluded_filename_globs),
        ]

    def explain(self, relative_path: PathInput, is_directory: bool) -> Tuple[bool, str]:
        """Return ``(excluded, reason)`` for a path."""
        path = normalize_relative_path(relative_path)
        if not path:
            return False, "Project root"
        for rule in self.chain:
            passes, reason = rule.check(path, is_directory)
            if not passes:
                return True, reason
        return False, "Passed all filters"

    def should_exclude(self, relative_path: PathInput, is_directory: bool) -> bool:
        excluded, reason = self.explain(relative_path, is_directory)
        if excluded:
            logger.debug(f"Excluded {relative_path}: {reason}")
        return excluded
