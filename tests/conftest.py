"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone
from itertools import count
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from tyretrack.api.server import create_app
from tyretrack.config import Settings
from tyretrack.models.inputs import FleetCreate, TyrePosition, TyreStatus, UserCreate
from tyretrack.models.outputs import Tyre
from tyretrack.storage import FleetStorage


@pytest.fixture
def make_tyre():
    """Factory for Tyre records; ids are t1, t2, ... in creation order."""
    ids = count(1)

    def _make(
        position: Optional[str] = None,
        tread_depth: float = 8.0,
        status: TyreStatus = TyreStatus.IN_USE,
        **overrides,
    ) -> Tyre:
        n = next(ids)
        values = dict(
            id=f"t{n}",
            fleet_id="fleet-1",
            vehicle_id="vehicle-1",
            brand="Michelin",
            model="X Multi",
            size="315/80R22.5",
            serial_number=f"SN-{n:03d}",
            status=status,
            position=TyrePosition(position) if position is not None else None,
            tread_depth=tread_depth,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        values.update(overrides)
        return Tyre(**values)

    return _make


@pytest.fixture
def storage() -> FleetStorage:
    """Provide an empty in-memory repository."""
    return FleetStorage()


@pytest.fixture
def owner(storage):
    """A registered user."""
    return storage.create_user(
        UserCreate(email="owner@example.com", first_name="Olive", last_name="Owner")
    )


@pytest.fixture
def fleet(storage, owner):
    """A fleet owned by `owner`."""
    return storage.create_fleet(FleetCreate(name="Depot North"), owner_id=owner.id)


@pytest.fixture
def client(storage) -> TestClient:
    """Create a test client around the shared in-memory repository."""
    return TestClient(create_app(storage=storage, settings=Settings()))


@pytest.fixture
def auth(owner) -> dict:
    """Identity header for `owner`."""
    return {"X-User-Id": owner.id}
