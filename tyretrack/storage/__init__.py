"""
Fleet persistence: in-process repository and JSON snapshot variant.
"""

from tyretrack.storage.errors import (
    StorageError,
    NotFoundError,
    AccessDeniedError,
    ConflictError,
)
from tyretrack.storage.memory import FleetStorage, MEMBER_MANAGER_ROLES
from tyretrack.storage.snapshot import (
    JsonFileStorage,
    load_snapshot,
    dump_snapshot,
    resolve_snapshot_path,
)

__all__ = [
    "StorageError",
    "NotFoundError",
    "AccessDeniedError",
    "ConflictError",
    "FleetStorage",
    "MEMBER_MANAGER_ROLES",
    "JsonFileStorage",
    "load_snapshot",
    "dump_snapshot",
    "resolve_snapshot_path",
]
