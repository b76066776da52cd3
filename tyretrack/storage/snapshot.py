"""
JSON snapshot persistence for the fleet repository.

The whole store is written to a single JSON file after every mutation
and read back on start-up.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from tyretrack.models.outputs import (
    Alert,
    Fleet,
    FleetMember,
    StockItem,
    Tyre,
    User,
    Vehicle,
)
from tyretrack.storage.memory import FleetStorage

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_NAME = "tyretrack.json"

# snapshot key -> (storage attribute, record model)
TABLES = {
    "users": ("users", User),
    "fleets": ("fleets", Fleet),
    "members": ("members", FleetMember),
    "vehicles": ("vehicles", Vehicle),
    "tyres": ("tyres", Tyre),
    "stock_items": ("stock_items", StockItem),
    "alerts": ("alerts", Alert),
}


def get_project_root() -> Path:
    """Get the project root directory."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


def resolve_snapshot_path(path: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve where the snapshot lives.

    An explicit path wins; a directory gets the default file name;
    otherwise data/tyretrack.json under the project root.
    """
    if path is None:
        return get_project_root() / "data" / DEFAULT_SNAPSHOT_NAME
    path = Path(path)
    if path.is_dir():
        return path / DEFAULT_SNAPSHOT_NAME
    return path


def load_snapshot(storage: FleetStorage, path: Path) -> int:
    """
    Populate `storage` from a snapshot file.

    Returns:
        Number of records loaded

    Raises:
        FileNotFoundError: If the snapshot doesn't exist
        ValueError: If the file is not a valid snapshot
    """
    if not path.exists():
        raise FileNotFoundError(f"Snapshot not found at {path}")

    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid snapshot {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Invalid snapshot {path}: expected a JSON object")

    count = 0
    for key, (attr, model) in TABLES.items():
        table = getattr(storage, attr)
        for item in data.get(key, []):
            record = model.model_validate(item)
            table[record.id] = record
            count += 1
    return count


def dump_snapshot(storage: FleetStorage) -> dict:
    """Serialise every table of `storage` to plain JSON types."""
    return {
        key: [r.model_dump(mode="json") for r in getattr(storage, attr).values()]
        for key, (attr, _model) in TABLES.items()
    }


class JsonFileStorage(FleetStorage):
    """FleetStorage that keeps a JSON snapshot on disk."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__()
        self.path = resolve_snapshot_path(path)
        if self.path.exists():
            count = load_snapshot(self, self.path)
            logger.info("Loaded %d records from %s", count, self.path)
        else:
            logger.info("No snapshot at %s, starting empty", self.path)

    def _commit(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(dump_snapshot(self), f, indent=2)
        tmp_path.replace(self.path)
