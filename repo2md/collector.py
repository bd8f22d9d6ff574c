"""
Project traversal and Markdown assembly.

Walks the project depth first in name order, asks the ``PathFilter`` about
every entry, prunes excluded directories before listing them, and turns each
surviving text file into a ``CollectedFile`` with comments stripped unless
the file is configured to keep them.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Set

from .config import RunConfig
from .filters import FilterRuleSet, PathFilter, load_ignore_file, normalize_relative_path
from .languages import is_likely_text_file, language_for_path
from .patterns import IgnoreRule
from .stripper import strip_file_text

logger = logging.getLogger(__name__)


@dataclass
class CollectedFile:
    """A file ready to be written into the document."""
    relative_path: str
    language: str
    content: str
    comments_preserved: bool = False


@dataclass
class CollectStats:
    directories_visited: int = 0
    directories_pruned: int = 0
    files_seen: int = 0
    files_included: int = 0
    files_skipped: int = 0


# =============================================================================
# RULE SET CONSTRUCTION
# =============================================================================

def _relative_to_root(root: Path, path: Optional[Path]) -> Optional[str]:
    if path is None:
        return None
    try:
        return normalize_relative_path(path.resolve().relative_to(root))
    except ValueError:
        return None


def build_rule_set(config: RunConfig) -> FilterRuleSet:
    """Combine the project's ignore file with the run's own exclusions."""
    root = config.root_dir.resolve()
    rules: List[IgnoreRule] = []
    if config.use_ignore_file:
        rules.extend(load_ignore_file(root / config.ignore_file_name))

    # Declared last so no project rule can re-include them.
    own = [".git/"]
    for artifact in (config.output_file, config.config_file):
        relative = _relative_to_root(root, artifact)
        if relative:
            own.append("/" + re.sub(r"([*?\[\\])", r"\\\1", relative))

    return FilterRuleSet.build(
        ignore_rules=[*rules, *own],
        excluded_dir_names=config.skip_dirs,
        excluded_extensions=config.skip_extensions,
        excluded_filename_globs=config.skip_patterns,
    )


# =============================================================================
# WALKER
# =============================================================================

def walk_project(
    root: Path,
    path_filter: PathFilter,
    stats: Optional[CollectStats] = None,
) -> Iterator[Path]:
    """Yield files that pass the filter, depth first, sorted by name.

    Excluded directories are never listed. Symlinks are not followed.
    """
    stats = stats if stats is not None else CollectStats()
    root = root.resolve()

    def visit(directory: Path) -> Iterator[Path]:
        relative = normalize_relative_path(directory.relative_to(root))
        if path_filter.should_exclude(relative, is_directory=True):
            logger.info(f"Skipping directory: {relative}/")
            stats.directories_pruned += 1
            return

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            logger.warning(f"Cannot list {relative or '.'}, skipping it: {e}")
            return
        stats.directories_visited += 1

        for entry in entries:
            if entry.is_symlink():
                continue
            path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                yield from visit(path)
            elif entry.is_file(follow_symlinks=False):
                stats.files_seen += 1
                if path_filter.should_exclude(path.relative_to(root), is_directory=False):
                    stats.files_skipped += 1
                    continue
                yield path

    yield from visit(root)


# =============================================================================
# COLLECTOR
# =============================================================================

class ProjectCollector:
    """Gathers the project's files in traversal order."""

    def __init__(self, config: RunConfig, path_filter: PathFilter):
        self.config = config
        self.root = config.root_dir.resolve()
        self.filter = path_filter
        self.stats = CollectStats()

    def collect(self) -> List[CollectedFile]:
        files: List[CollectedFile] = []
        done: Set[str] = set()

        if self.config.project_type == "java-maven":
            self._collect_pom(files, done)

        for path in walk_project(self.root, self.filter, self.stats):
            relative = self._relative(path)
            if relative in done:
                continue
            self._add(path, relative, files, done)

        return files

    def _collect_pom(self, files: List[CollectedFile], done: Set[str]) -> None:
        pom = self.root / "pom.xml"
        if not pom.is_file():
            logger.warning("Project type is java-maven but there is no pom.xml in the root")
            return
        if self.filter.should_exclude("pom.xml", is_directory=False):
            logger.info("pom.xml is excluded by the skip rules")
            return
        self._add(pom, "pom.xml", files, done)
        # Processed either way; the walk must not visit it again.
        done.add("pom.xml")

    def _add(
        self,
        path: Path,
        relative: str,
        files: List[CollectedFile],
        done: Set[str],
    ) -> None:
        collected = self.read_file(path, relative)
        if collected is None:
            self.stats.files_skipped += 1
            return
        files.append(collected)
        done.add(relative)
        self.stats.files_included += 1

    def _relative(self, path: Path) -> str:
        return normalize_relative_path(path.relative_to(self.root))

    def read_file(self, path: Path, relative: str) -> Optional[CollectedFile]:
        """Read, decode and clean one file; None when it should be left out."""
        if not is_likely_text_file(relative):
            logger.debug(f"Not a known text file: {relative}")
            return None

        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning(f"Could not read {relative}: {e}")
            return None

        if b"\x00" in data:
            logger.info(f"Skipping likely binary file (contains NUL bytes): {relative}")
            return None

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning(f"Skipping {relative}, not valid UTF-8: {e}")
            return None

        preserve = self.config.preserves_comments(relative)
        content = strip_file_text(text, relative, preserve_comments=preserve)
        if not content.strip():
            logger.debug(f"Nothing left after cleaning: {relative}")
            return None

        if preserve:
            logger.info(f"Adding file (comments kept): {relative}")
        else:
            logger.info(f"Adding file: {relative}")

        return CollectedFile(
            relative_path=relative,
            language=language_for_path(relative),
            content=content,
            comments_preserved=preserve,
        )


# =============================================================================
# FORMATTER
# =============================================================================

class MarkdownFormatter:
    """Formats collected files as one Markdown document."""

    def format(self, files: List[CollectedFile]) -> str:
        return "\n".join(self.format_block(f) for f in files)

    @staticmethod
    def format_block(f: CollectedFile) -> str:
        content = f.content.rstrip().lstrip("\r\n")
        return "\n".join([
            f"**{f.relative_path}**",
            "",
            f"```{f.language}",
            content,
            "```",
            "",
        ])
