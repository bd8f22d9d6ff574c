"""
repo2md - collect a project's text files into one Markdown document.

Architecture:
    CLI Args / YAML → RunConfig → FilterRuleSet → Traversal (PathFilter) →
    Content Reading → Comment Stripping → Markdown → Output
"""

from __future__ import annotations

from .dialects import CommentDialect, dialect_for_path
from .errors import ConfigError, PatternCompileError, Repo2MdError, ScanInconsistency
from .filters import FilterRuleSet, PathFilter, normalize_relative_path
from .patterns import CompiledPattern, IgnoreRule, PatternKind, compile_pattern
from .stripper import strip_comments, strip_file_text

__version__ = "1.0.0"


def get_version() -> str:
    """Get version from package metadata or fallback to hardcoded."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("repo-to-markdown")
    except PackageNotFoundError:
        return __version__


__all__ = [
    "CommentDialect",
    "CompiledPattern",
    "ConfigError",
    "FilterRuleSet",
    "IgnoreRule",
    "PathFilter",
    "PatternCompileError",
    "PatternKind",
    "Repo2MdError",
    "ScanInconsistency",
    "compile_pattern",
    "dialect_for_path",
    "get_version",
    "normalize_relative_path",
    "strip_comments",
    "strip_file_text",
]
