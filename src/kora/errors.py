"""Exception hierarchy for kora.

Plumbing (config, store, folders) raises ``KoraError`` subclasses; the CLI
turns them into a non-zero exit code. The matching core never raises for
user input.
"""

from __future__ import annotations


class KoraError(Exception):
    """Base class for all kora errors."""


class ConfigError(KoraError):
    """Invalid configuration value."""


class StoreError(KoraError):
    """The SQLite store could not be read or written."""


class FolderError(KoraError):
    """An item folder could not be created or removed."""


class SessionClosedError(KoraError):
    """A filter session was stepped after it terminated."""
