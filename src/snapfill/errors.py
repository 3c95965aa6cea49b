"""
Package exceptions.

The generators never raise on bad market input; they degrade and record
a Degradation on the returned Series. These exceptions cover the
surrounding plumbing: unreadable config files and CLI misuse.
"""

from __future__ import annotations


class SnapfillError(Exception):
    """Base class for all snapfill errors."""


class ConfigError(SnapfillError):
    """A config file could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load config '{path}': {reason}")


class ReportError(SnapfillError):
    """A saved snapshot report could not be read or validated."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load report '{path}': {reason}")
