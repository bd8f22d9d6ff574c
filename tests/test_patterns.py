import logging

import pytest

from repo2md.errors import PatternCompileError
from repo2md.patterns import (
    IgnoreRule,
    PatternKind,
    compile_pattern,
    parse_ignore_lines,
)


def _matches(pattern: str, path: str, is_directory: bool = False) -> bool:
    return compile_pattern(pattern).matches(path, is_directory)


def test_parse_rule_flags():
    rule = IgnoreRule.parse("!/build/")
    assert rule.negated
    assert rule.anchored
    assert rule.directory_only
    assert rule.pattern == "build"

    rule = IgnoreRule.parse("docs/api/*.md   ")
    assert rule.pattern == "docs/api/*.md"
    assert not rule.anchored
    assert not rule.negated


def test_parse_rule_without_pattern_raises():
    with pytest.raises(PatternCompileError):
        IgnoreRule.parse("!")
    with pytest.raises(PatternCompileError):
        IgnoreRule.parse("/")


def test_escaped_hash_and_bang_are_literal():
    assert IgnoreRule.parse("\\#notes").pattern == "#notes"
    rule = IgnoreRule.parse("\\!important")
    assert rule.pattern == "!important"
    assert not rule.negated
    assert _matches("\\#notes", "#notes")


def test_basename_pattern_matches_at_any_depth():
    assert _matches("*.log", "debug.log")
    assert _matches("*.log", "a/b/debug.log")
    assert not _matches("*.log", "debug.logx")


def test_trailing_newline_does_not_satisfy_end_of_path():
    assert not _matches("*.log", "debug.log\n")
    assert not _matches("/todo.txt", "todo.txt\n")


def test_leading_slash_anchors_to_root():
    assert _matches("/todo.txt", "todo.txt")
    assert not _matches("/todo.txt", "docs/todo.txt")


def test_internal_separator_matches_at_directory_boundaries():
    assert _matches("docs/*.md", "docs/a.md")
    assert _matches("docs/*.md", "sub/docs/a.md")
    assert not _matches("docs/*.md", "docs/x/a.md")
    assert not _matches("docs/*.md", "mydocs/a.md")


def test_double_star_forms():
    # Leading **/
    assert _matches("**/logs", "logs", True)
    assert _matches("**/logs", "a/b/logs", True)
    assert _matches("**/logs", "a/logs/x.txt")

    # Inner /**/
    assert _matches("a/**/b", "a/b")
    assert _matches("a/**/b", "a/x/y/b")
    assert not _matches("a/**/b", "ab")
    assert not _matches("a/**/b", "xa/b")

    # Trailing /**
    assert _matches("abc/**", "abc/x")
    assert _matches("abc/**", "abc/x/y")
    assert _matches("abc/**", "abc", True)

    # Bare **
    assert _matches("a**z", "a/b/z")


def test_single_star_and_question_mark_stop_at_separators():
    assert _matches("file?.txt", "file1.txt")
    assert not _matches("file?.txt", "file12.txt")
    assert not _matches("src*", "sr/c")
    assert _matches("src*", "srcfoo")


def test_directory_only_pattern_requires_a_directory():
    assert _matches("build/", "build", True)
    assert not _matches("build/", "build", False)
    assert _matches("build/", "src/build", True)
    assert not _matches("build/", "rebuild", True)


def test_directory_pattern_covers_everything_beneath():
    assert _matches("build/", "build/out.txt")
    assert _matches("build/", "build/deep/er/out.txt")
    assert _matches("node_modules", "node_modules/pkg/index.js")


def test_regex_metacharacters_are_literal():
    assert _matches("a+b(1).txt", "a+b(1).txt")
    assert not _matches("a+b(1).txt", "aab(1)xtxt")
    assert _matches("price$.csv", "price$.csv")


def test_bracket_classes():
    assert _matches("file[0-9].txt", "file3.txt")
    assert not _matches("file[0-9].txt", "filex.txt")
    assert _matches("[!a]*.md", "b.md")
    assert not _matches("[!a]*.md", "a.md")
    # Never closed: the bracket is an ordinary character.
    assert _matches("foo[.txt", "foo[.txt")


def test_malformed_pattern_matches_nothing_and_warns(caplog):
    with caplog.at_level(logging.WARNING):
        compiled = compile_pattern("[z-a].txt")

    assert compiled.never_matches
    assert not compiled.matches("z.txt")
    assert not compiled.matches("a.txt")
    assert "[z-a].txt" in caplog.text


def test_bare_negation_compiles_to_never_match(caplog):
    with caplog.at_level(logging.WARNING):
        compiled = compile_pattern("!")
    assert compiled.never_matches
    assert caplog.records


def test_negated_pattern_is_tagged_not_applied():
    compiled = compile_pattern("!keep.txt")
    assert compiled.negated
    assert compiled.matches("keep.txt")


def test_simple_wildcard_matches_whole_basename():
    compiled = compile_pattern("Test*.java", PatternKind.SIMPLE_WILDCARD)
    assert compiled.matches("src/TestFoo.java")
    assert compiled.matches("Test.java")
    assert not compiled.matches("MyTest.java")
    assert not compiled.matches("TestFoo.java.bak")

    assert compile_pattern("*.tm?", PatternKind.SIMPLE_WILDCARD).matches("a/b.tmp")


def test_simple_wildcard_has_no_negation():
    compiled = compile_pattern("!x", PatternKind.SIMPLE_WILDCARD)
    assert not compiled.negated
    assert compiled.matches("!x")
    assert not compiled.matches("x")


def test_simple_wildcard_with_separator_matches_nothing(caplog):
    with caplog.at_level(logging.WARNING):
        compiled = compile_pattern("src/*.java", PatternKind.SIMPLE_WILDCARD)
    assert compiled.never_matches
    assert "src/*.java" in caplog.text


def test_compilation_is_deterministic():
    paths = [
        ("src/a.py", False),
        ("src/pkg/b.py", False),
        ("src", True),
        ("lib/src/c.py", False),
        ("a.py", False),
    ]
    first = compile_pattern("src/**/*.py")
    second = compile_pattern("src/**/*.py")

    assert first == second
    assert [first.matches(p, d) for p, d in paths] == [second.matches(p, d) for p, d in paths]


def test_parse_ignore_lines_skips_comments_blanks_and_bad_lines(caplog):
    lines = ["# comment", "", "*.log", "   ", "!", "build/"]
    with caplog.at_level(logging.WARNING):
        rules = parse_ignore_lines(lines)

    assert [rule.raw for rule in rules] == ["*.log", "build/"]
    assert "line 5" in caplog.text
