"""
Command-line entry points.

    repo2md         collect a project's text files into one Markdown document
    repo2md-strip   strip comments from source files in place
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pyperclip

from . import get_version
from .collector import MarkdownFormatter, ProjectCollector, build_rule_set, walk_project
from .config import ConfigBuilder, Defaults, OutputMode, RunConfig
from .dialects import EXTENSION_DIALECTS, dialect_for_path
from .errors import ConfigError
from .filters import FilterRuleSet, PathFilter
from .stripper import strip_comments


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def _split_option(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# =============================================================================
# OUTPUT WRITER
# =============================================================================

class OutputWriter:
    """Handles output to various destinations."""

    @staticmethod
    def write(content: str, summary: str, config: RunConfig) -> bool:
        """Write content to configured destination."""
        if config.output_mode == OutputMode.FILE:
            return OutputWriter._write_file(content, summary, config.output_file)
        elif config.output_mode == OutputMode.STDOUT:
            return OutputWriter._write_stdout(content)
        else:
            return OutputWriter._write_clipboard(content, summary)

    @staticmethod
    def _write_file(content: str, summary: str, path: Optional[Path]) -> bool:
        """Write to file."""
        if not path:
            return False
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            print(summary, file=sys.stderr)
            print(f"✅ Written to {path}", file=sys.stderr)
            return True
        except OSError as e:
            print(f"❌ Error writing file: {e}", file=sys.stderr)
            return False

    @staticmethod
    def _write_stdout(content: str) -> bool:
        """Write to stdout."""
        try:
            sys.stdout.write(content)
            return True
        except OSError as e:
            print(f"❌ Error writing to stdout: {e}", file=sys.stderr)
            return False

    @staticmethod
    def _write_clipboard(content: str, summary: str) -> bool:
        """Copy to clipboard, falling back to stdout."""
        try:
            pyperclip.copy(content)
        except pyperclip.PyperclipException as e:
            logging.warning(f"Clipboard unavailable ({e}), printing to stdout")
            return OutputWriter._write_stdout(content)
        print(summary, file=sys.stderr)
        print(f"✅ {len(content):,} chars copied to clipboard", file=sys.stderr)
        return True


# =============================================================================
# CLI PARSERS
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="repo2md",
        description="Collect a project's text files into one Markdown document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Settings are taken from the command line first, then from the YAML config
file ({Defaults.CONFIG_FILE} in the project root unless -c is given), then
from built-in defaults.

Examples:
  repo2md                              # Write ./{Defaults.OUTPUT_FILE}
  repo2md ./service -o context.md      # Scan another directory
  repo2md -e build,dist -x .log,.lock  # Skip directories and extensions
  repo2md -p "Test*.java,*.tmp"        # Skip file name patterns
  repo2md --keep-comments src/api      # Keep comments under src/api
        """,
    )

    parser.add_argument(
        "root_dir",
        nargs="?",
        type=Path,
        default=Path("."),
        help="Root project directory (default: current)",
    )

    conf = parser.add_argument_group("Configuration")
    conf.add_argument("-c", "--config", metavar="FILE", help="YAML config file")
    conf.add_argument("-t", "--type", metavar="TYPE", help="Project type (e.g. java-maven)")

    out = parser.add_argument_group("Output Options")
    out.add_argument(
        "-o", "--output", metavar="FILE",
        help=f"Output file, relative to the root (default: {Defaults.OUTPUT_FILE})",
    )
    dest = out.add_mutually_exclusive_group()
    dest.add_argument("--stdout", action="store_true", help="Print to stdout instead of a file")
    dest.add_argument("--clipboard", action="store_true", help="Copy to clipboard instead of a file")

    filt = parser.add_argument_group("Filtering")
    filt.add_argument(
        "-e", "--skip-dirs", metavar="DIRS",
        help='Comma-separated directory names to skip at any depth (e.g. "build,dist,.idea")',
    )
    filt.add_argument(
        "-x", "--skip-extensions", metavar="EXTS",
        help='Comma-separated extensions to skip (e.g. ".kt,.log")',
    )
    filt.add_argument(
        "-p", "--skip-patterns", metavar="PATTERNS",
        help='Comma-separated file name wildcards to skip (e.g. "Test*.java,*.tmp")',
    )
    filt.add_argument("--no-gitignore", action="store_true", help="Ignore .gitignore completely")

    comments = parser.add_argument_group("Comments")
    comments.add_argument(
        "-k", "--keep-comments-config", metavar="FILE",
        help="Text file listing paths (files or directories) whose comments are kept",
    )
    comments.add_argument(
        "--keep-comments", action="append", metavar="PATH",
        help="Keep comments for this file or directory (repeatable)",
    )

    meta = parser.add_argument_group("Information")
    meta.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    meta.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")

    return parser


def create_strip_parser() -> argparse.ArgumentParser:
    """Create argument parser for in-place comment removal."""
    parser = argparse.ArgumentParser(
        prog="repo2md-strip",
        description="Strip comments from source files in place. Back up your repository first.",
    )
    parser.add_argument("root_dir", type=Path, help="Directory to process recursively")
    parser.add_argument(
        "--ext", action="append", metavar="EXT",
        help="File extension to process (repeatable, default: .java)",
    )
    parser.add_argument(
        "-e", "--skip-dirs", default=".git", metavar="DIRS",
        help="Comma-separated directory names to skip (default: .git)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Report changes without writing")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    return parser


# =============================================================================
# MAIN
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = create_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = ConfigBuilder.from_args(args)
        logging.info(f"Scanning {config.root_dir}")

        collector = ProjectCollector(config, PathFilter(build_rule_set(config)))
        files = collector.collect()

        if not files:
            print("⚠️ No files matched the filters", file=sys.stderr)

        content = MarkdownFormatter().format(files)
        stats = collector.stats
        summary = (
            f"📁 {stats.files_included:,} of {stats.files_seen:,} files included, "
            f"{stats.files_skipped:,} skipped; "
            f"{stats.directories_visited:,} directories scanned, "
            f"{stats.directories_pruned:,} pruned"
        )

        success = OutputWriter.write(content, summary, config)
        return 0 if success else 1

    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n⚠️ Interrupted", file=sys.stderr)
        return 130
    except Exception as e:
        logging.exception("Critical error")
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


def strip_main(argv: Optional[List[str]] = None) -> int:
    """Strip comments in place from every matching file under a directory."""
    args = create_strip_parser().parse_args(argv)
    configure_logging(args.verbose)

    root: Path = args.root_dir
    if not root.is_dir():
        print(f"❌ Directory not found: {root}", file=sys.stderr)
        return 1

    extensions = {
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in (args.ext or [".java"])
    }
    for ext in sorted(extensions):
        if ext not in EXTENSION_DIALECTS:
            logging.warning(f"No comment dialect known for {ext}, files will be left unchanged")

    path_filter = PathFilter(FilterRuleSet.build(excluded_dir_names=_split_option(args.skip_dirs)))
    processed = modified = failed = 0

    try:
        for path in walk_project(root, path_filter):
            if path.suffix.lower() not in extensions:
                continue
            processed += 1
            try:
                original = path.read_bytes().decode("utf-8")
                cleaned = strip_comments(original, dialect_for_path(path))
                if original.endswith("\n") and cleaned and not cleaned.endswith("\n"):
                    cleaned += "\r\n" if original.endswith("\r\n") else "\n"
                if cleaned == original:
                    logging.info(f"Unchanged: {path}")
                    continue
                if not args.dry_run:
                    path.write_bytes(cleaned.encode("utf-8"))
                modified += 1
                logging.info(f"Comments removed: {path}")
            except (OSError, UnicodeDecodeError) as e:
                failed += 1
                logging.warning(f"Could not process {path}: {e}")
    except KeyboardInterrupt:
        print("\n⚠️ Interrupted", file=sys.stderr)
        return 130

    verb = "Would modify" if args.dry_run else "Modified"
    print(
        f"Processed {processed:,} files. {verb} {modified:,}. Failed {failed:,}.",
        file=sys.stderr,
    )
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
