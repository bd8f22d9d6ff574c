"""Which files count as text, and how their code fences are labelled."""

from __future__ import annotations

from os import PathLike
from pathlib import PurePosixPath
from typing import Dict, FrozenSet, Union

TEXT_FILE_EXTENSIONS: FrozenSet[str] = frozenset({
    # Docs
    ".txt", ".md", ".markdown",
    # JVM
    ".java", ".groovy", ".scala", ".kt", ".kts", ".gradle", ".properties",
    # Config / data
    ".xml", ".yaml", ".yml", ".json", ".toml",
    # Web / Dart
    ".dart", ".js", ".mjs", ".cjs", ".ts", ".jsx", ".tsx",
    ".html", ".htm", ".css", ".scss", ".less", ".vue", ".svelte",
    # Scripting
    ".py", ".rb", ".php", ".pl", ".r",
    # C family
    ".c", ".cpp", ".cc", ".h", ".hpp", ".cs", ".swift",
    ".go", ".rs",
    # Shell
    ".sh", ".bash", ".zsh", ".bat", ".cmd",
    ".sql",
    # Templates
    ".jte",
})

TEXT_FILE_NAMES: FrozenSet[str] = frozenset({
    "dockerfile", "jenkinsfile", "makefile", "pom",
    ".gitignore", ".gitattributes", ".dockerignore",
})

LANGUAGE_HINTS: Dict[str, str] = {
    ".java": "java", ".groovy": "groovy", ".gradle": "groovy",
    ".scala": "scala", ".kt": "kotlin", ".kts": "kotlin",
    ".properties": "properties",
    ".xml": "xml", ".yaml": "yaml", ".yml": "yaml", ".json": "json",
    ".toml": "toml",
    ".md": "markdown", ".markdown": "markdown", ".txt": "text",
    ".dart": "dart",
    ".js": "javascript", ".mjs": "javascript", ".cjs": "javascript",
    ".ts": "typescript", ".jsx": "jsx", ".tsx": "tsx",
    ".html": "html", ".htm": "html", ".css": "css", ".scss": "scss",
    ".less": "less", ".vue": "vue", ".svelte": "svelte",
    ".py": "python", ".rb": "ruby", ".php": "php", ".pl": "perl", ".r": "r",
    ".c": "c", ".cpp": "cpp", ".cc": "cpp", ".h": "cpp", ".hpp": "cpp",
    ".cs": "csharp", ".swift": "swift", ".go": "go", ".rs": "rust",
    ".sh": "shell", ".bash": "shell", ".zsh": "shell",
    ".bat": "batch", ".cmd": "batch",
    ".sql": "sql",
    ".jte": "html",
}

FILENAME_HINTS: Dict[str, str] = {
    "dockerfile": "dockerfile",
    "makefile": "makefile",
    "jenkinsfile": "groovy",
    "pom.xml": "xml",
    ".gitignore": "gitignore",
}


def _name(path: Union[str, PathLike]) -> str:
    return PurePosixPath(str(path).replace("\\", "/")).name.lower()


def is_likely_text_file(path: Union[str, PathLike]) -> bool:
    """Known text extension, or a well-known extensionless text file."""
    name = _name(path)
    return PurePosixPath(name).suffix in TEXT_FILE_EXTENSIONS or name in TEXT_FILE_NAMES


def language_for_path(path: Union[str, PathLike]) -> str:
    """Get language hint for the Markdown code fence."""
    name = _name(path)
    suffix = PurePosixPath(name).suffix
    if suffix in LANGUAGE_HINTS:
        return LANGUAGE_HINTS[suffix]
    return FILENAME_HINTS.get(name, "plaintext")
