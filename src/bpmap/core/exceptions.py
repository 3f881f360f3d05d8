"""
Exception hierarchy for bpmap.

All errors raised by the core are local and recoverable: operations validate
before they mutate, so a raised error never leaves partial state behind.
"""


class BpmapError(Exception):
    """Base class for every error raised by bpmap."""


class ValidationError(BpmapError):
    """Invalid input: empty name, bad owner reference, malformed snapshot."""


class NotFoundError(BpmapError):
    """An operation targeted an entity that does not exist."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class StorageError(BpmapError):
    """The persistence collaborator could not read or write a snapshot."""


class ConfigError(BpmapError):
    """The configuration file is unreadable or invalid."""
