"""
Run configuration.

Values are resolved with the precedence

    command line  >  YAML config file  >  defaults

and frozen into a ``RunConfig`` that the rest of the run only reads.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

import yaml

from .errors import ConfigError
from .filters import normalize_relative_path

logger = logging.getLogger(__name__)


class Defaults:
    """Default configuration values."""
    CONFIG_FILE = "repo_config.yml"
    OUTPUT_FILE = "project_content.md"
    IGNORE_FILE = ".gitignore"


KNOWN_PROJECT_TYPES: FrozenSet[str] = frozenset({"java-maven"})


class OutputMode(Enum):
    """Output destination modes."""
    FILE = auto()
    STDOUT = auto()
    CLIPBOARD = auto()


@dataclass(frozen=True)
class RunConfig:
    """Immutable run configuration."""
    root_dir: Path
    output_mode: OutputMode = OutputMode.FILE
    output_file: Optional[Path] = None
    project_type: Optional[str] = None
    use_ignore_file: bool = True
    ignore_file_name: str = Defaults.IGNORE_FILE
    config_file: Optional[Path] = None

    # Exclusion rules
    skip_dirs: FrozenSet[str] = frozenset()
    skip_extensions: FrozenSet[str] = frozenset()
    skip_patterns: Tuple[str, ...] = ()

    # Paths (files or directories) whose comments are kept
    keep_comments_paths: FrozenSet[str] = frozenset()

    def preserves_comments(self, relative_path: str) -> bool:
        """True when the path is, or lies beneath, a keep-comments path."""
        path = normalize_relative_path(relative_path)
        for keep in self.keep_comments_paths:
            if path == keep or path.startswith(f"{keep}/"):
                return True
        return False


# =============================================================================
# FILE LOADERS
# =============================================================================

def load_yaml_config(path: Path, explicit: bool = False) -> Dict[str, Any]:
    """Load a YAML mapping of settings.

    A missing default config file is normal and silent; a missing file the
    user named explicitly, or one that cannot be parsed, is a warning. Both
    yield an empty mapping.
    """
    if not path.is_file():
        if explicit:
            logger.warning(f"Config file {path} does not exist, ignoring it")
        return {}

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not read config file {path}: {e}")
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Config file {path} must contain a mapping, ignoring it")
        return {}

    logger.info(f"Loaded settings from {path}")
    return data


def load_keep_comments_file(path: Path) -> List[str]:
    """Read keep-comments paths, one per line, ``#`` starts a comment line."""
    if not path.is_file():
        logger.warning(f"Keep-comments file {path} does not exist")
        return []
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read keep-comments file {path}: {e}")
        return []
    return [
        line.strip() for line in lines
        if line.strip() and not line.strip().startswith("#")
    ]


def as_list(value: Any) -> List[str]:
    """Accept a YAML list or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        items: Iterable[Any] = value
    else:
        items = str(value).split(",")
    return [str(item).strip() for item in items if str(item).strip()]


# =============================================================================
# CONFIGURATION BUILDER
# =============================================================================

class ConfigBuilder:
    """Builds RunConfig from CLI arguments and the YAML config file."""

    @staticmethod
    def from_args(args: argparse.Namespace) -> RunConfig:
        """Create config from parsed arguments."""
        root = Path(args.root_dir).resolve()
        if not root.is_dir():
            raise ConfigError(f"Directory not found: {args.root_dir}")

        if args.config:
            config_file = Path(args.config).resolve()
            settings = load_yaml_config(config_file, explicit=True)
        else:
            config_file = root / Defaults.CONFIG_FILE
            settings = load_yaml_config(config_file)

        def pick(cli_value: Any, key: str, default: Any = None) -> Any:
            if cli_value is not None:
                return cli_value
            # An empty YAML key (`output:`) loads as None.
            value = settings.get(key)
            return default if value is None else value

        project_type = pick(args.type, "type")
        if project_type and project_type not in KNOWN_PROJECT_TYPES:
            logger.warning(f"Unknown project type: {project_type}")

        output_name = pick(args.output, "output", Defaults.OUTPUT_FILE)
        output_file = ConfigBuilder._resolve(root, str(output_name))

        keep_paths = set(as_list(settings.get("keep-comments-paths")))
        keep_paths.update(args.keep_comments or [])
        if args.keep_comments_config:
            keep_paths.update(load_keep_comments_file(Path(args.keep_comments_config)))
        elif settings.get("keep-comments-config"):
            keep_file = ConfigBuilder._resolve(root, str(settings["keep-comments-config"]))
            keep_paths.update(load_keep_comments_file(keep_file))

        if args.stdout:
            output_mode = OutputMode.STDOUT
        elif args.clipboard:
            output_mode = OutputMode.CLIPBOARD
        else:
            output_mode = OutputMode.FILE

        return RunConfig(
            root_dir=root,
            output_mode=output_mode,
            output_file=output_file,
            project_type=project_type,
            use_ignore_file=not args.no_gitignore,
            config_file=config_file if config_file.is_file() else None,
            skip_dirs=frozenset(as_list(pick(args.skip_dirs, "skip-dirs"))),
            skip_extensions=frozenset(as_list(pick(args.skip_extensions, "skip-extensions"))),
            skip_patterns=tuple(as_list(pick(args.skip_patterns, "skip-patterns"))),
            keep_comments_paths=frozenset(
                normalized for normalized in map(normalize_relative_path, keep_paths)
                if normalized
            ),
        )

    @staticmethod
    def _resolve(root: Path, value: str) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else root / path
