import logging
from pathlib import Path

from repo2md.filters import (
    FilterRuleSet,
    PathFilter,
    load_ignore_file,
    normalize_relative_path,
)


def _filter(**kwargs) -> PathFilter:
    return PathFilter(FilterRuleSet.build(**kwargs))


def test_negation_reincludes_file_under_ignored_directory():
    path_filter = _filter(ignore_rules=["build/", "!build/keep.txt"])

    assert not path_filter.should_exclude("build/keep.txt", is_directory=False)
    assert path_filter.should_exclude("build/other.txt", is_directory=False)


def test_last_matching_rule_wins():
    assert _filter(ignore_rules=["!important.log", "*.log"]).should_exclude(
        "important.log", is_directory=False
    )
    assert not _filter(ignore_rules=["*.log", "!important.log"]).should_exclude(
        "important.log", is_directory=False
    )


def test_excluded_directory_name_matches_at_any_depth():
    path_filter = _filter(excluded_dir_names=["build"])

    assert path_filter.should_exclude("a/build/x", is_directory=True)
    assert path_filter.should_exclude("build", is_directory=True)
    assert not path_filter.should_exclude("a/builder", is_directory=True)
    # Directory names only apply to directories; the walker prunes them.
    assert not path_filter.should_exclude("a/build/x", is_directory=False)


def test_nested_excluded_directory_path():
    path_filter = _filter(excluded_dir_names=["gen/src"])

    assert path_filter.should_exclude("gen/src", is_directory=True)
    assert path_filter.should_exclude("gen/src/x", is_directory=True)
    assert not path_filter.should_exclude("gen", is_directory=True)


def test_negation_cannot_override_excluded_directory_name():
    path_filter = _filter(ignore_rules=["!build/"], excluded_dir_names=["build"])
    assert path_filter.should_exclude("build", is_directory=True)


def test_extension_exclusion_is_case_insensitive():
    path_filter = _filter(excluded_extensions=["LOG", ".Tmp"])

    assert path_filter.should_exclude("x/App.LOG", is_directory=False)
    assert path_filter.should_exclude("a.tmp", is_directory=False)
    assert not path_filter.should_exclude("a.txt", is_directory=False)
    assert not path_filter.should_exclude("x.log", is_directory=True)


def test_exclusions_apply_without_ignore_source():
    rules = FilterRuleSet.build(
        excluded_extensions=[".kt"],
        excluded_filename_globs=["Test*.java"],
    )
    path_filter = PathFilter(rules)

    assert rules.ignore_patterns == ()
    assert path_filter.should_exclude("src/TestA.java", is_directory=False)
    assert path_filter.should_exclude("src/A.kt", is_directory=False)
    assert not path_filter.should_exclude("src/A.java", is_directory=False)


def test_root_is_never_excluded():
    path_filter = _filter(ignore_rules=["*"], excluded_dir_names=["."])

    for root in ("", ".", "./"):
        assert not path_filter.should_exclude(root, is_directory=True)
    assert path_filter.explain("", is_directory=True) == (False, "Project root")


def test_paths_are_normalized_before_matching():
    path_filter = _filter(ignore_rules=["build/"])
    assert path_filter.should_exclude("\\build\\out.txt", is_directory=False)
    assert path_filter.should_exclude("./build/out.txt", is_directory=False)

    assert normalize_relative_path("./a//b/./c") == "a/b/c"
    assert normalize_relative_path("/a/b") == "a/b"
    assert normalize_relative_path(Path("a") / "b") == "a/b"


def test_explain_reports_the_deciding_rule():
    path_filter = _filter(ignore_rules=["*.log"], excluded_filename_globs=["*.bak"])

    assert path_filter.explain("a.log", is_directory=False) == (True, "Matched ignore rule: *.log")
    assert path_filter.explain("a.bak", is_directory=False) == (True, "Matches exclude: *.bak")
    assert path_filter.explain("a.py", is_directory=False) == (False, "Passed all filters")


def test_unusable_ignore_line_is_skipped(caplog):
    with caplog.at_level(logging.WARNING):
        path_filter = _filter(ignore_rules=["[z-a]", "*.tmp"])

    assert "[z-a]" in caplog.text
    assert path_filter.should_exclude("a.tmp", is_directory=False)
    assert not path_filter.should_exclude("z", is_directory=False)


def test_load_ignore_file(tmp_path):
    ignore_file = tmp_path / ".gitignore"
    ignore_file.write_text("# build output\nbuild/\n\n*.log\n!keep.log\n", encoding="utf-8")

    rules = load_ignore_file(ignore_file)

    assert [rule.raw for rule in rules] == ["build/", "*.log", "!keep.log"]
    assert load_ignore_file(tmp_path / "missing") == []
