"""
Tests for the fleet repository and its JSON snapshot variant.
"""

import json

import pytest
from pydantic import ValidationError

from tyretrack.analytics.alerts import scan_alerts
from tyretrack.models.inputs import (
    FleetCreate,
    FleetRole,
    StockItemCreate,
    TyreCreate,
    TyrePosition,
    TyreUpdate,
    UserCreate,
    VehicleCreate,
    VehicleUpdate,
)
from tyretrack.storage import (
    AccessDeniedError,
    ConflictError,
    FleetStorage,
    JsonFileStorage,
    NotFoundError,
    dump_snapshot,
    load_snapshot,
    resolve_snapshot_path,
)


def _vehicle(**overrides):
    values = dict(registration="KX21 TRK", make="Volvo", model="FH16", type="truck", axle_count=3)
    values.update(overrides)
    return VehicleCreate(**values)


def _tyre(serial="SN-1", **overrides):
    values = dict(brand="Michelin", model="X Multi", size="315/80R22.5", serial_number=serial)
    values.update(overrides)
    return TyreCreate(**values)


class TestUsersAndFleets:
    """Tests for users, fleets and membership."""

    def test_duplicate_email_rejected(self, storage, owner):
        """Test that emails are unique regardless of case."""
        with pytest.raises(ConflictError):
            storage.create_user(UserCreate(email="OWNER@example.com"))

    def test_get_user_by_email(self, storage, owner):
        """Test lookup by normalised email."""
        assert storage.get_user_by_email(" Owner@Example.com ") == owner

    def test_creator_becomes_owner(self, storage, owner, fleet):
        """Test that the fleet creator is enrolled as owner."""
        assert storage.get_member_role(fleet.id, owner.id) == FleetRole.OWNER
        assert storage.get_fleets_by_user(owner.id) == [fleet]

    def test_require_role(self, storage, owner, fleet):
        """Test role checks for members and outsiders."""
        other = storage.create_user(UserCreate(email="mech@example.com"))
        storage.add_fleet_member(fleet.id, other.id, FleetRole.MEMBER)

        assert storage.require_role(fleet.id, owner.id, (FleetRole.OWNER,)) == FleetRole.OWNER
        with pytest.raises(AccessDeniedError):
            storage.require_role(fleet.id, other.id, (FleetRole.OWNER, FleetRole.ADMIN))
        with pytest.raises(AccessDeniedError):
            storage.require_member(fleet.id, "nobody")

    def test_add_member_twice(self, storage, fleet):
        """Test that a user can only join a fleet once."""
        other = storage.create_user(UserCreate(email="mech@example.com"))
        storage.add_fleet_member(fleet.id, other.id, FleetRole.MEMBER)

        with pytest.raises(ConflictError):
            storage.add_fleet_member(fleet.id, other.id, FleetRole.ADMIN)

    def test_add_member_unknown_fleet(self, storage, owner):
        """Test adding a member to a missing fleet."""
        with pytest.raises(NotFoundError):
            storage.add_fleet_member("missing", owner.id, FleetRole.MEMBER)

    def test_owner_cannot_be_removed(self, storage, owner, fleet):
        """Test that the owner membership is protected."""
        owner_member = storage.get_fleet_members(fleet.id)[0]

        assert owner_member.user.email == owner.email
        with pytest.raises(AccessDeniedError):
            storage.remove_fleet_member(fleet.id, owner_member.id)

    def test_remove_member(self, storage, fleet):
        """Test removing a regular member."""
        other = storage.create_user(UserCreate(email="mech@example.com"))
        member = storage.add_fleet_member(fleet.id, other.id, FleetRole.MEMBER)

        storage.remove_fleet_member(fleet.id, member.id)

        assert not storage.is_fleet_member(fleet.id, other.id)
        with pytest.raises(NotFoundError):
            storage.remove_fleet_member(fleet.id, member.id)

    def test_delete_fleet_cascades(self, storage, owner, fleet):
        """Test that deleting a fleet removes everything it owns."""
        vehicle = storage.create_vehicle(fleet.id, _vehicle())
        storage.create_tyre(fleet.id, _tyre(vehicle_id=vehicle.id))
        storage.create_stock_item(fleet.id, StockItemCreate(brand="A", model="B", size="C"))

        storage.delete_fleet(fleet.id)

        assert storage.get_fleet(fleet.id) is None
        assert storage.vehicles == {}
        assert storage.tyres == {}
        assert storage.stock_items == {}
        assert storage.members == {}
        assert storage.get_fleets_by_user(owner.id) == []


class TestVehiclesAndTyres:
    """Tests for vehicle and tyre records."""

    def test_vehicle_crud(self, storage, fleet):
        """Test create, update and fleet scoping of vehicles."""
        vehicle = storage.create_vehicle(fleet.id, _vehicle())
        updated = storage.update_vehicle(fleet.id, vehicle.id, VehicleUpdate(axle_count=4))

        assert updated.axle_count == 4
        assert updated.registration == vehicle.registration
        assert storage.get_vehicles(fleet.id) == [updated]
        with pytest.raises(NotFoundError):
            storage.update_vehicle("other-fleet", vehicle.id, VehicleUpdate(axle_count=2))

    def test_vehicle_with_tyres(self, storage, fleet):
        """Test that only the vehicle's own tyres are returned, in creation order."""
        vehicle = storage.create_vehicle(fleet.id, _vehicle())
        first = storage.create_tyre(fleet.id, _tyre("A", vehicle_id=vehicle.id, position="rear_left"))
        storage.create_tyre(fleet.id, _tyre("loose"))
        second = storage.create_tyre(fleet.id, _tyre("B", vehicle_id=vehicle.id, position="rear_left"))

        detail = storage.get_vehicle_with_tyres(fleet.id, vehicle.id)

        assert detail.vehicle == vehicle
        assert [t.id for t in detail.tyres] == [first.id, second.id]

    def test_install_date_set_on_fitting(self, storage, fleet):
        """Test install_date follows vehicle assignment."""
        vehicle = storage.create_vehicle(fleet.id, _vehicle())
        stocked = storage.create_tyre(fleet.id, _tyre())
        assert stocked.install_date is None

        fitted = storage.update_tyre(
            fleet.id,
            stocked.id,
            TyreUpdate(vehicle_id=vehicle.id, position=TyrePosition.FRONT_LEFT),
        )
        assert fitted.install_date is not None
        assert fitted.position == TyrePosition.FRONT_LEFT

    def test_detaching_clears_position(self, storage, fleet):
        """Test that a tyre taken off its vehicle forgets its position."""
        vehicle = storage.create_vehicle(fleet.id, _vehicle())
        tyre = storage.create_tyre(fleet.id, _tyre(vehicle_id=vehicle.id, position="front_left"))

        detached = storage.update_tyre(fleet.id, tyre.id, TyreUpdate(vehicle_id=None))

        assert detached.vehicle_id is None
        assert detached.position is None

        refitted = storage.update_tyre(fleet.id, tyre.id, TyreUpdate(vehicle_id=vehicle.id))
        assert refitted.position is None

    def test_updates_reject_null_required_fields(self, storage, fleet):
        """Test that partial updates cannot null out required fields."""
        vehicle = storage.create_vehicle(fleet.id, _vehicle())
        tyre = storage.create_tyre(fleet.id, _tyre(pressure=110.0))

        with pytest.raises(ValidationError):
            VehicleUpdate(axle_count=None)
        with pytest.raises(ValidationError):
            TyreUpdate(tread_depth=None)

        cleared = storage.update_tyre(fleet.id, tyre.id, TyreUpdate(pressure=None))
        assert cleared.pressure is None
        assert storage.get_vehicle(vehicle.id).axle_count == 3

    def test_tyre_vehicle_must_be_in_fleet(self, storage, owner, fleet):
        """Test that tyres cannot reference another fleet's vehicle."""
        other_fleet = storage.create_fleet(FleetCreate(name="South"), owner_id=owner.id)
        foreign = storage.create_vehicle(other_fleet.id, _vehicle())

        with pytest.raises(ValueError):
            storage.create_tyre(fleet.id, _tyre(vehicle_id=foreign.id))
        with pytest.raises(ValueError):
            storage.create_tyres_batch(fleet.id, [_tyre("ok"), _tyre("bad", vehicle_id=foreign.id)])
        assert storage.get_tyres(fleet.id) == []

    def test_delete_vehicle_detaches_tyres(self, storage, fleet):
        """Test that tyres survive their vehicle, unfitted."""
        vehicle = storage.create_vehicle(fleet.id, _vehicle())
        tyre = storage.create_tyre(fleet.id, _tyre(vehicle_id=vehicle.id, position="front_left"))

        storage.delete_vehicle(fleet.id, vehicle.id)

        kept = storage.get_tyre(tyre.id)
        assert kept.vehicle_id is None
        assert kept.position is None
        assert storage.get_vehicle(vehicle.id) is None

    def test_batches(self, storage, fleet):
        """Test batch creation keeps input order."""
        vehicles = storage.create_vehicles_batch(
            fleet.id, [_vehicle(registration="A"), _vehicle(registration="B")]
        )
        tyres = storage.create_tyres_batch(fleet.id, [_tyre("1"), _tyre("2"), _tyre("3")])

        assert [v.registration for v in vehicles] == ["A", "B"]
        assert [t.serial_number for t in storage.get_tyres(fleet.id)] == ["1", "2", "3"]
        assert len(tyres) == 3

    def test_delete_tyre_wrong_fleet(self, storage, fleet):
        """Test tyre deletion is fleet scoped."""
        tyre = storage.create_tyre(fleet.id, _tyre())
        with pytest.raises(NotFoundError):
            storage.delete_tyre("other-fleet", tyre.id)
        storage.delete_tyre(fleet.id, tyre.id)
        assert storage.get_tyres(fleet.id) == []


class TestAlertsAndStats:
    """Tests for alerts and dashboard counters."""

    def test_alert_lifecycle(self, storage, fleet):
        """Test raising, listing and reading alerts."""
        storage.create_tyre(fleet.id, _tyre("W1", status="in_use", tread_depth=1.0))
        storage.create_tyre(fleet.id, _tyre("W2", status="in_use", tread_depth=2.5))

        drafts = scan_alerts(storage.get_tyres(fleet.id), [], storage.get_alerts(fleet.id))
        created = storage.create_alerts(fleet.id, drafts)

        assert len(created) == 2
        # Newest first
        assert [a.id for a in storage.get_alerts(fleet.id)] == [created[1].id, created[0].id]

        storage.mark_alert_read(fleet.id, created[0].id)
        assert storage.alerts[created[0].id].is_read
        storage.mark_all_alerts_read(fleet.id)
        assert all(a.is_read for a in storage.get_alerts(fleet.id))

        with pytest.raises(NotFoundError):
            storage.mark_alert_read(fleet.id, "missing")

    def test_stats(self, storage, owner, fleet):
        """Test counters across a user's fleets."""
        vehicle = storage.create_vehicle(fleet.id, _vehicle())
        storage.create_tyre(fleet.id, _tyre(vehicle_id=vehicle.id))
        storage.create_stock_item(fleet.id, StockItemCreate(brand="A", model="B", size="C"))

        stats = storage.get_stats(owner.id)

        assert stats.total_vehicles == 1
        assert stats.total_tyres == 1
        assert stats.stock_items == 1
        assert stats.active_alerts == 0
        assert storage.get_stats("stranger").total_vehicles == 0


class TestJsonFileStorage:
    """Tests for the JSON snapshot store."""

    def test_round_trip(self, tmp_path):
        """Test that a reopened store sees the same records."""
        path = tmp_path / "fleet.json"
        first = JsonFileStorage(path)
        user = first.create_user(UserCreate(email="a@example.com"))
        fleet = first.create_fleet(FleetCreate(name="F"), owner_id=user.id)
        vehicle = first.create_vehicle(fleet.id, _vehicle())
        first.create_tyre(fleet.id, _tyre(vehicle_id=vehicle.id, position="outer_left"))

        assert path.exists()
        second = JsonFileStorage(path)

        assert second.get_user(user.id) == user
        assert second.get_vehicle(vehicle.id) == vehicle
        assert second.get_tyres(fleet.id) == first.get_tyres(fleet.id)
        assert second.get_member_role(fleet.id, user.id) == FleetRole.OWNER

    def test_directory_gets_default_name(self, tmp_path):
        """Test that a directory path resolves to the default file."""
        assert resolve_snapshot_path(tmp_path) == tmp_path / "tyretrack.json"

    def test_missing_snapshot_starts_empty(self, tmp_path):
        """Test that a new path is not an error."""
        store = JsonFileStorage(tmp_path / "new.json")
        assert store.users == {}

    def test_load_invalid_snapshot(self, tmp_path):
        """Test that malformed files are rejected."""
        path = tmp_path / "bad.json"
        path.write_text("[1, 2")
        with pytest.raises(ValueError):
            load_snapshot(FleetStorage(), path)

        path.write_text("[]")
        with pytest.raises(ValueError):
            load_snapshot(FleetStorage(), path)

        with pytest.raises(FileNotFoundError):
            load_snapshot(FleetStorage(), tmp_path / "nope.json")

    def test_dump_snapshot_is_json(self, storage, fleet):
        """Test that a snapshot serialises cleanly."""
        data = dump_snapshot(storage)

        assert set(data) == {
            "users", "fleets", "members", "vehicles", "tyres", "stock_items", "alerts",
        }
        assert json.loads(json.dumps(data))["fleets"][0]["id"] == fleet.id
