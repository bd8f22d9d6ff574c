"""
Literal-aware comment stripping.

The scanner walks the text once, left to right. At each position it tries,
in this order:

    1. a quoted literal        -> kept verbatim
    2. a block comment         -> dropped
    3. a line comment          -> dropped, unless it is a preserved directive
    4. a plain code character  -> kept

Cleanup afterwards only touches code spans, so literals and preserved
directives come out byte for byte as they went in.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache
from os import PathLike
from typing import List, Optional, Tuple, Union

from .dialects import (
    CommentDialect,
    DialectSyntax,
    EscapeStyle,
    OpenerPosition,
    QuoteRule,
    dialect_for_path,
    syntax_for,
)
from .errors import ScanInconsistency

logger = logging.getLogger(__name__)

_TRAILING_WS = re.compile(r"[ \t\f\v]+(?=\r?\n)")
_BLANK_RUN = re.compile(r"(\r?\n)(?:\r?\n){2,}")
_LEADING_BLANK = re.compile(r"\A(?:[ \t\f\v]*\r?\n)+")


class SpanKind(Enum):
    CODE = auto()
    LITERAL = auto()
    COMMENT = auto()
    DIRECTIVE = auto()  # Comment that is kept (formatter toggles, shebang)


@dataclass(frozen=True)
class Span:
    kind: SpanKind
    text: str


# =============================================================================
# TOKEN MATCHERS
# =============================================================================

def _line_end(text: str, pos: int) -> int:
    """Index of the line terminator at or after ``pos`` (or len(text))."""
    end = text.find("\n", pos)
    if end < 0:
        end = len(text)
    if end > pos and text[end - 1] == "\r":
        end -= 1
    return end


def _literal_end(text: str, pos: int, rule: QuoteRule) -> Optional[int]:
    delim = rule.delimiter
    i = pos + len(delim)
    n = len(text)

    while i < n:
        char = text[i]
        if rule.escape is EscapeStyle.BACKSLASH and char == "\\":
            i += 2
            continue
        if text.startswith(delim, i):
            if rule.escape is EscapeStyle.DOUBLED and text.startswith(delim, i + len(delim)):
                i += 2 * len(delim)
                continue
            return i + len(delim)
        if char == "\n" and not rule.multiline:
            return None
        i += 1

    # Unterminated: a multi-line literal runs to the end, a one-line
    # literal is no literal at all.
    return n if rule.multiline else None


def _match_literal(text: str, pos: int, syntax: DialectSyntax) -> Optional[int]:
    for rule in syntax.quotes:
        if text.startswith(rule.delimiter, pos):
            end = _literal_end(text, pos, rule)
            if end is not None:
                return end
    return None


def _match_block_comment(text: str, pos: int, syntax: DialectSyntax) -> Optional[int]:
    for opener, closer in syntax.block_comments:
        if text.startswith(opener, pos):
            close = text.find(closer, pos + len(opener))
            if close < 0:
                return len(text)
            return close + len(closer)
    return None


def _line_opener_at(text: str, pos: int, syntax: DialectSyntax) -> Optional[str]:
    for opener in syntax.line_comments:
        candidate = text[pos:pos + len(opener)]
        if syntax.case_insensitive:
            found = candidate.upper() == opener.upper()
        else:
            found = candidate == opener
        if not found:
            continue
        # Word openers like REM need a boundary after them.
        if opener[-1].isalpha():
            following = text[pos + len(opener):pos + len(opener) + 1]
            if following and not following.isspace():
                continue
        return candidate
    return None


@lru_cache(maxsize=None)
def _trigger_pattern(syntax: DialectSyntax) -> re.Pattern:
    """Characters that can start a literal or a comment in this dialect."""
    starts = {rule.delimiter[0] for rule in syntax.quotes}
    starts.update(opener[0] for opener, _ in syntax.block_comments)
    starts.update(opener[0] for opener in syntax.line_comments)
    if not starts:
        return re.compile(r"(?!)")
    chars = "".join(re.escape(c) for c in sorted(starts))
    return re.compile(f"[{chars}]", re.IGNORECASE if syntax.case_insensitive else 0)


def _opener_allowed(text: str, pos: int, syntax: DialectSyntax) -> bool:
    if syntax.opener_position is OpenerPosition.ANYWHERE:
        return True
    if syntax.opener_position is OpenerPosition.LINE_START:
        line_start = text.rfind("\n", 0, pos) + 1
        return not text[line_start:pos].strip()
    if pos == 0:
        return True
    previous = text[pos - 1]
    closing_quotes = {rule.delimiter[-1] for rule in syntax.quotes}
    return previous.isspace() or previous in closing_quotes


def _match_line_comment(
    text: str, pos: int, syntax: DialectSyntax
) -> Optional[Tuple[SpanKind, int]]:
    opener = _line_opener_at(text, pos, syntax)
    if opener is None or not _opener_allowed(text, pos, syntax):
        return None

    end = _line_end(text, pos)
    rest = text[pos + len(opener):end]

    # "scheme://" style data: opener glued to the previous token with
    # nothing after it on the line.
    if len(opener) == 2 and pos > 0 and not text[pos - 1].isspace() and not rest.strip():
        return None

    directive = text[pos:end].rstrip()
    if directive in syntax.directives:
        # Trailing blanks stay in the code span, where cleanup trims them.
        return SpanKind.DIRECTIVE, pos + len(directive)
    return SpanKind.COMMENT, end


# =============================================================================
# SCANNER
# =============================================================================

def scan(text: str, syntax: DialectSyntax) -> List[Span]:
    """Split ``text`` into classified spans covering it exactly."""
    spans: List[Span] = []
    pos = 0
    code_start = 0
    n = len(text)
    trigger = _trigger_pattern(syntax)

    if syntax.keep_shebang and text.startswith("#!"):
        pos = code_start = len(text[:_line_end(text, 0)].rstrip())
        spans.append(Span(SpanKind.DIRECTIVE, text[:pos]))

    while pos < n:
        kind: Optional[SpanKind] = None
        end = _match_literal(text, pos, syntax)
        if end is not None:
            kind = SpanKind.LITERAL
        else:
            end = _match_block_comment(text, pos, syntax)
            if end is not None:
                kind = SpanKind.COMMENT
            else:
                line_match = _match_line_comment(text, pos, syntax)
                if line_match is not None:
                    kind, end = line_match

        if kind is None or end is None:
            following = trigger.search(text, pos + 1)
            pos = following.start() if following else n
            continue
        if end <= pos:
            raise ScanInconsistency(pos, f"{kind.name.lower()} token did not advance")

        if code_start < pos:
            spans.append(Span(SpanKind.CODE, text[code_start:pos]))
        spans.append(Span(kind, text[pos:end]))
        pos = code_start = end

    if code_start < n:
        spans.append(Span(SpanKind.CODE, text[code_start:]))

    if sum(len(span.text) for span in spans) != n:
        raise ScanInconsistency(n, "spans do not cover the input")
    return spans


def _clean_code(chunk: str, first: bool, last: bool) -> str:
    chunk = _TRAILING_WS.sub("", chunk)
    chunk = _BLANK_RUN.sub(r"\1\1", chunk)
    if first:
        chunk = _LEADING_BLANK.sub("", chunk)
    if last:
        chunk = chunk.rstrip()
    return chunk


@lru_cache(maxsize=None)
def _opener_tokens(syntax: DialectSyntax) -> Tuple[str, ...]:
    tokens = [opener for opener, _ in syntax.block_comments]
    tokens.extend(syntax.line_comments)
    tokens.extend(rule.delimiter for rule in syntax.quotes)
    if syntax.case_insensitive:
        tokens = [token.upper() for token in tokens]
    return tuple(token for token in tokens if len(token) > 1)


def _joins_opener(left: str, right: str, syntax: DialectSyntax) -> bool:
    """True when ``left + right`` spells an opener across the seam."""
    if syntax.case_insensitive:
        left, right = left.upper(), right.upper()
    for token in _opener_tokens(syntax):
        for split in range(1, len(token)):
            if left.endswith(token[:split]) and right.startswith(token[split:]):
                return True
    return False


def _append(chunks: List[Tuple[bool, str]], protected: bool, text: str) -> None:
    if chunks and not protected and not chunks[-1][0]:
        chunks[-1] = (False, chunks[-1][1] + text)
    else:
        chunks.append((protected, text))


def render(spans: List[Span], syntax: DialectSyntax) -> str:
    """Drop comment spans and tidy the whitespace left behind."""
    # (protected, text); adjacent code merges across removed comments.
    chunks: List[Tuple[bool, str]] = []
    dropped = False
    for span in spans:
        if span.kind is SpanKind.COMMENT:
            dropped = True
            continue
        # `-/*x*/-` must not come out as `--`.
        if dropped and chunks and _joins_opener(chunks[-1][1], span.text, syntax):
            _append(chunks, False, " ")
        dropped = False
        _append(chunks, span.kind is not SpanKind.CODE, span.text)

    last = len(chunks) - 1
    return "".join(
        text if protected else _clean_code(text, i == 0, i == last)
        for i, (protected, text) in enumerate(chunks)
    )


# =============================================================================
# PUBLIC API
# =============================================================================

def strip_comments(
    text: str,
    dialect: Optional[CommentDialect],
    preserve_comments: bool = False,
) -> str:
    """Remove comments from ``text``.

    Returns ``text`` unchanged when comments are preserved, when the dialect
    is unknown, or when the scanner cannot produce a consistent result.
    """
    if preserve_comments or dialect is None:
        return text

    try:
        syntax = syntax_for(dialect)
        spans = scan(text, syntax)
    except ScanInconsistency as e:
        logger.warning(f"{e}; keeping original text")
        return text
    return render(spans, syntax)


def strip_file_text(
    text: str,
    path: Union[str, PathLike],
    preserve_comments: bool = False,
) -> str:
    """Strip comments using the dialect implied by ``path``."""
    return strip_comments(text, dialect_for_path(path), preserve_comments)
