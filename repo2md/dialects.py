"""Comment dialects: how each language family delimits comments and literals."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from os import PathLike
from pathlib import PurePosixPath
from typing import Dict, FrozenSet, Optional, Tuple, Union


class CommentDialect(Enum):
    """Families of comment syntax understood by the stripper."""
    C_FAMILY = "c"          # // and /* */
    MARKUP = "markup"       # <!-- -->
    HASH = "hash"           # #
    SQL = "sql"             # -- and /* */
    BATCH = "batch"         # REM and ::
    HYBRID = "hybrid"       # <!-- --> plus C-family, for component files


class EscapeStyle(Enum):
    BACKSLASH = auto()  # \" inside "..."
    DOUBLED = auto()    # '' inside '...'
    NONE = auto()


class OpenerPosition(Enum):
    """Where a line-comment opener is allowed to start a comment."""
    ANYWHERE = auto()
    AFTER_WHITESPACE = auto()  # line start, whitespace, or a closing quote
    LINE_START = auto()        # only indentation before it


@dataclass(frozen=True)
class QuoteRule:
    delimiter: str
    escape: EscapeStyle = EscapeStyle.BACKSLASH
    multiline: bool = False


@dataclass(frozen=True)
class DialectSyntax:
    """Everything the scanner needs to know about one dialect."""
    dialect: CommentDialect
    quotes: Tuple[QuoteRule, ...] = ()
    block_comments: Tuple[Tuple[str, str], ...] = ()
    line_comments: Tuple[str, ...] = ()
    opener_position: OpenerPosition = OpenerPosition.ANYWHERE
    case_insensitive: bool = False
    directives: FrozenSet[str] = frozenset()
    keep_shebang: bool = False


# =============================================================================
# DIALECT TABLE
# =============================================================================

_C_QUOTES = (
    QuoteRule('"'),
    QuoteRule("'"),
    QuoteRule("`", multiline=True),
)

_C_DIRECTIVES = frozenset({
    "// @formatter:off", "// @formatter:on",
    "// clang-format off", "// clang-format on",
})

DIALECTS: Dict[CommentDialect, DialectSyntax] = {
    CommentDialect.C_FAMILY: DialectSyntax(
        dialect=CommentDialect.C_FAMILY,
        quotes=_C_QUOTES,
        block_comments=(("/*", "*/"),),
        line_comments=("//",),
        directives=_C_DIRECTIVES,
    ),
    CommentDialect.MARKUP: DialectSyntax(
        dialect=CommentDialect.MARKUP,
        block_comments=(("<!--", "-->"),),
    ),
    CommentDialect.HASH: DialectSyntax(
        dialect=CommentDialect.HASH,
        quotes=(
            QuoteRule('"""', multiline=True),
            QuoteRule("'''", multiline=True),
            QuoteRule('"'),
            QuoteRule("'"),
        ),
        line_comments=("#",),
        opener_position=OpenerPosition.AFTER_WHITESPACE,
        directives=frozenset({
            "# @formatter:off", "# @formatter:on",
            "# fmt: off", "# fmt: on",
        }),
        keep_shebang=True,
    ),
    CommentDialect.SQL: DialectSyntax(
        dialect=CommentDialect.SQL,
        quotes=(
            QuoteRule("'", EscapeStyle.DOUBLED, multiline=True),
            QuoteRule('"', EscapeStyle.DOUBLED, multiline=True),
        ),
        block_comments=(("/*", "*/"),),
        line_comments=("--",),
        directives=frozenset({"-- @formatter:off", "-- @formatter:on"}),
    ),
    CommentDialect.BATCH: DialectSyntax(
        dialect=CommentDialect.BATCH,
        quotes=(QuoteRule('"', EscapeStyle.NONE),),
        line_comments=("REM", "::"),
        opener_position=OpenerPosition.LINE_START,
        case_insensitive=True,
    ),
    CommentDialect.HYBRID: DialectSyntax(
        dialect=CommentDialect.HYBRID,
        quotes=_C_QUOTES,
        block_comments=(("<!--", "-->"), ("/*", "*/")),
        line_comments=("//",),
        directives=_C_DIRECTIVES,
    ),
}


# =============================================================================
# DISPATCH
# =============================================================================

EXTENSION_DIALECTS: Dict[str, CommentDialect] = {
    **dict.fromkeys(
        (".java", ".js", ".mjs", ".cjs", ".ts", ".jsx", ".tsx", ".dart",
         ".c", ".cpp", ".cc", ".h", ".hpp", ".cs", ".go", ".rs", ".scala",
         ".kt", ".kts", ".groovy", ".gradle", ".swift"),
        CommentDialect.C_FAMILY,
    ),
    **dict.fromkeys(
        (".xml", ".html", ".htm", ".md", ".xhtml", ".svg"),
        CommentDialect.MARKUP,
    ),
    **dict.fromkeys(
        (".py", ".rb", ".sh", ".bash", ".zsh", ".yaml", ".yml",
         ".properties", ".toml", ".r", ".pl"),
        CommentDialect.HASH,
    ),
    ".sql": CommentDialect.SQL,
    ".bat": CommentDialect.BATCH,
    ".cmd": CommentDialect.BATCH,
    ".vue": CommentDialect.HYBRID,
    ".svelte": CommentDialect.HYBRID,
}

FILENAME_DIALECTS: Dict[str, CommentDialect] = {
    "pom.xml": CommentDialect.MARKUP,
    "dockerfile": CommentDialect.HASH,
    "makefile": CommentDialect.HASH,
    ".gitignore": CommentDialect.HASH,
    ".dockerignore": CommentDialect.HASH,
    "jenkinsfile": CommentDialect.C_FAMILY,
}


def dialect_for_path(path: Union[str, PathLike]) -> Optional[CommentDialect]:
    """Map a file name to its comment dialect, or None when unknown."""
    name = PurePosixPath(str(path).replace("\\", "/")).name.lower()
    if name in FILENAME_DIALECTS:
        return FILENAME_DIALECTS[name]
    return EXTENSION_DIALECTS.get(PurePosixPath(name).suffix)


def syntax_for(dialect: CommentDialect) -> DialectSyntax:
    return DIALECTS[dialect]
