"""Exception types raised by the mapping layer."""

from __future__ import annotations


class ConfigurationError(Exception):
    """A model or property declaration cannot be resolved.

    Raised synchronously to the caller: it signals a programming mistake
    in the model declaration, not bad data in the store.
    """


class RemoteSyncError(Exception):
    """Raised by remote sync backends when pushing or fetching fails."""

    def __init__(self, message: str, *, response: str | None = None) -> None:
        super().__init__(message)
        self.response = response
