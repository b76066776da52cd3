"""
Storage exceptions.
"""


class StorageError(Exception):
    """Base class for storage failures."""


class NotFoundError(StorageError, LookupError):
    """A referenced record does not exist (or is outside the fleet)."""


class AccessDeniedError(StorageError):
    """The acting user lacks the membership or role required."""


class ConflictError(StorageError):
    """The write would violate a uniqueness rule."""
