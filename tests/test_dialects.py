import pytest

from repo2md.dialects import DIALECTS, CommentDialect, dialect_for_path, syntax_for
from repo2md.languages import is_likely_text_file, language_for_path


@pytest.mark.parametrize("path, dialect", [
    ("src/Main.java", CommentDialect.C_FAMILY),
    ("web/App.vue", CommentDialect.HYBRID),
    ("Dockerfile", CommentDialect.HASH),
    ("pom.xml", CommentDialect.MARKUP),
    ("db/schema.SQL", CommentDialect.SQL),
    ("run.BAT", CommentDialect.BATCH),
    ("a\\b\\c.py", CommentDialect.HASH),
    (".gitignore", CommentDialect.HASH),
    ("README", None),
    ("style.css", None),
])
def test_dialect_for_path(path, dialect):
    assert dialect_for_path(path) is dialect


def test_every_dialect_has_syntax():
    for dialect in CommentDialect:
        assert syntax_for(dialect) is DIALECTS[dialect]
        assert syntax_for(dialect).dialect is dialect


def test_text_file_detection():
    assert is_likely_text_file("src/Main.java")
    assert is_likely_text_file("Dockerfile")
    assert is_likely_text_file("docs/NOTES.MD")
    assert not is_likely_text_file("logo.png")
    assert not is_likely_text_file("app.jar")


def test_language_hints():
    assert language_for_path("src/Main.java") == "java"
    assert language_for_path("include/x.h") == "cpp"
    assert language_for_path("build.sh") == "shell"
    assert language_for_path("Makefile") == "makefile"
    assert language_for_path(".gitignore") == "gitignore"
    assert language_for_path("LICENSE") == "plaintext"
