"""Exception types raised by repo2md."""

from __future__ import annotations


class Repo2MdError(Exception):
    """Base class for all repo2md errors."""


class PatternCompileError(Repo2MdError):
    """An ignore rule or wildcard could not be translated into a matcher."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Cannot compile pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class ScanInconsistency(Repo2MdError):
    """The comment scanner hit a state it cannot make progress from."""

    def __init__(self, position: int, reason: str):
        super().__init__(f"Scanner stalled at offset {position}: {reason}")
        self.position = position
        self.reason = reason


class ConfigError(Repo2MdError):
    """Configuration cannot be used to start a run."""
