"""
In-process fleet repository.

Holds users, fleets, memberships, vehicles, tyres, stock and alerts in
insertion-ordered dicts. Listing order is insertion order, which is the
order the slot matcher uses to break ties between tyres that share a
position key.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from tyretrack.analytics.alerts import AlertDraft
from tyretrack.models.inputs import (
    FleetCreate,
    FleetRole,
    StockItemCreate,
    TyreCreate,
    TyreUpdate,
    UserCreate,
    VehicleCreate,
    VehicleUpdate,
)
from tyretrack.models.outputs import (
    Alert,
    Fleet,
    FleetMember,
    FleetMemberWithUser,
    FleetStats,
    StockItem,
    Tyre,
    User,
    UserSummary,
    Vehicle,
    VehicleWithTyres,
)
from tyretrack.storage.errors import AccessDeniedError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)

MEMBER_MANAGER_ROLES = (FleetRole.OWNER, FleetRole.ADMIN)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class FleetStorage:
    """
    Repository for every persisted fleet entity.

    Subclasses can override `_commit` to persist after each mutation.
    """

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.fleets: dict[str, Fleet] = {}
        self.members: dict[str, FleetMember] = {}
        self.vehicles: dict[str, Vehicle] = {}
        self.tyres: dict[str, Tyre] = {}
        self.stock_items: dict[str, StockItem] = {}
        self.alerts: dict[str, Alert] = {}

    def _commit(self) -> None:
        """Hook called after every mutation."""

    # ==================== Users ====================

    def create_user(self, data: UserCreate) -> User:
        if self.get_user_by_email(data.email) is not None:
            raise ConflictError(f"A user with email {data.email} already exists")
        user = User(id=_new_id(), created_at=_now(), **data.model_dump())
        self.users[user.id] = user
        self._commit()
        logger.info("Created user %s", user.id)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        for user in self.users.values():
            if user.email.lower() == email:
                return user
        return None

    # ==================== Fleets ====================

    def get_fleets_by_user(self, user_id: str) -> list[Fleet]:
        fleet_ids = {m.fleet_id for m in self.members.values() if m.user_id == user_id}
        return [f for f in self.fleets.values() if f.id in fleet_ids]

    def get_fleet(self, fleet_id: str) -> Optional[Fleet]:
        return self.fleets.get(fleet_id)

    def create_fleet(self, data: FleetCreate, owner_id: str) -> Fleet:
        """Create a fleet and enrol its creator as owner."""
        fleet = Fleet(
            id=_new_id(),
            name=data.name,
            description=data.description or None,
            owner_id=owner_id,
            created_at=_now(),
        )
        self.fleets[fleet.id] = fleet
        owner = FleetMember(
            id=_new_id(),
            fleet_id=fleet.id,
            user_id=owner_id,
            role=FleetRole.OWNER,
            joined_at=_now(),
        )
        self.members[owner.id] = owner
        self._commit()
        logger.info("Created fleet %s for owner %s", fleet.id, owner_id)
        return fleet

    def delete_fleet(self, fleet_id: str) -> None:
        """Delete a fleet and everything it owns."""
        for table in (self.alerts, self.stock_items, self.tyres, self.vehicles, self.members):
            for record_id in [k for k, v in table.items() if v.fleet_id == fleet_id]:
                del table[record_id]
        self.fleets.pop(fleet_id, None)
        self._commit()
        logger.info("Deleted fleet %s", fleet_id)

    # ==================== Membership ====================

    def get_fleet_members(self, fleet_id: str) -> list[FleetMemberWithUser]:
        members = []
        for m in self.members.values():
            if m.fleet_id != fleet_id:
                continue
            user = self.users.get(m.user_id)
            summary = (
                UserSummary(
                    id=user.id,
                    email=user.email,
                    first_name=user.first_name,
                    last_name=user.last_name,
                )
                if user
                else UserSummary(id=m.user_id)
            )
            members.append(FleetMemberWithUser(**m.model_dump(), user=summary))
        return members

    def add_fleet_member(self, fleet_id: str, user_id: str, role: FleetRole) -> FleetMember:
        if self.get_fleet(fleet_id) is None:
            raise NotFoundError("Fleet not found")
        if self.is_fleet_member(fleet_id, user_id):
            raise ConflictError("User is already a member of this fleet")
        member = FleetMember(
            id=_new_id(),
            fleet_id=fleet_id,
            user_id=user_id,
            role=role,
            joined_at=_now(),
        )
        self.members[member.id] = member
        self._commit()
        logger.info("Added user %s to fleet %s as %s", user_id, fleet_id, role.value)
        return member

    def remove_fleet_member(self, fleet_id: str, member_id: str) -> None:
        member = self.members.get(member_id)
        if member is None or member.fleet_id != fleet_id:
            raise NotFoundError("Member not found")
        if member.role == FleetRole.OWNER:
            raise AccessDeniedError("The fleet owner cannot be removed")
        del self.members[member_id]
        self._commit()

    def get_member_role(self, fleet_id: str, user_id: str) -> Optional[FleetRole]:
        for m in self.members.values():
            if m.fleet_id == fleet_id and m.user_id == user_id:
                return m.role
        return None

    def is_fleet_member(self, fleet_id: str, user_id: str) -> bool:
        return self.get_member_role(fleet_id, user_id) is not None

    def require_member(self, fleet_id: str, user_id: str) -> FleetRole:
        """Role of the user in the fleet; raises if not a member."""
        role = self.get_member_role(fleet_id, user_id)
        if role is None:
            raise AccessDeniedError("Not authorized")
        return role

    def require_role(
        self,
        fleet_id: str,
        user_id: str,
        roles: Iterable[FleetRole],
    ) -> FleetRole:
        roles = tuple(roles)
        role = self.require_member(fleet_id, user_id)
        if role not in roles:
            raise AccessDeniedError(f"Requires role: {', '.join(r.value for r in roles)}")
        return role

    # ==================== Vehicles ====================

    def get_vehicles(self, fleet_id: str) -> list[Vehicle]:
        return [v for v in self.vehicles.values() if v.fleet_id == fleet_id]

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        return self.vehicles.get(vehicle_id)

    def _fleet_vehicle(self, fleet_id: str, vehicle_id: str) -> Vehicle:
        vehicle = self.vehicles.get(vehicle_id)
        if vehicle is None or vehicle.fleet_id != fleet_id:
            raise NotFoundError("Vehicle not found")
        return vehicle

    def get_vehicle_with_tyres(self, fleet_id: str, vehicle_id: str) -> VehicleWithTyres:
        vehicle = self._fleet_vehicle(fleet_id, vehicle_id)
        tyres = [t for t in self.tyres.values() if t.vehicle_id == vehicle_id]
        return VehicleWithTyres(vehicle=vehicle, tyres=tyres)

    def _insert_vehicle(self, fleet_id: str, data: VehicleCreate) -> Vehicle:
        vehicle = Vehicle(id=_new_id(), fleet_id=fleet_id, created_at=_now(), **data.model_dump())
        self.vehicles[vehicle.id] = vehicle
        return vehicle

    def create_vehicle(self, fleet_id: str, data: VehicleCreate) -> Vehicle:
        vehicle = self._insert_vehicle(fleet_id, data)
        self._commit()
        logger.info("Created vehicle %s (%s) in fleet %s", vehicle.id, vehicle.registration, fleet_id)
        return vehicle

    def create_vehicles_batch(self, fleet_id: str, items: list[VehicleCreate]) -> list[Vehicle]:
        created = [self._insert_vehicle(fleet_id, item) for item in items]
        self._commit()
        logger.info("Batch created %d vehicles in fleet %s", len(created), fleet_id)
        return created

    def update_vehicle(self, fleet_id: str, vehicle_id: str, data: VehicleUpdate) -> Vehicle:
        vehicle = self._fleet_vehicle(fleet_id, vehicle_id)
        changes = data.model_dump(exclude_unset=True)
        updated = Vehicle.model_validate({**vehicle.model_dump(), **changes})
        self.vehicles[vehicle_id] = updated
        self._commit()
        return updated

    def delete_vehicle(self, fleet_id: str, vehicle_id: str) -> None:
        """Delete a vehicle. Its tyres stay in the fleet, detached."""
        self._fleet_vehicle(fleet_id, vehicle_id)
        for tyre in list(self.tyres.values()):
            if tyre.vehicle_id == vehicle_id:
                self.tyres[tyre.id] = tyre.model_copy(update={"vehicle_id": None, "position": None})
        del self.vehicles[vehicle_id]
        self._commit()
        logger.info("Deleted vehicle %s from fleet %s", vehicle_id, fleet_id)

    # ==================== Tyres ====================

    def get_tyres(self, fleet_id: str) -> list[Tyre]:
        return [t for t in self.tyres.values() if t.fleet_id == fleet_id]

    def get_tyre(self, tyre_id: str) -> Optional[Tyre]:
        return self.tyres.get(tyre_id)

    def _fleet_tyre(self, fleet_id: str, tyre_id: str) -> Tyre:
        tyre = self.tyres.get(tyre_id)
        if tyre is None or tyre.fleet_id != fleet_id:
            raise NotFoundError("Tyre not found")
        return tyre

    def _check_vehicle_ref(self, fleet_id: str, vehicle_id: Optional[str]) -> None:
        if vehicle_id is None:
            return
        vehicle = self.vehicles.get(vehicle_id)
        if vehicle is None or vehicle.fleet_id != fleet_id:
            raise ValueError(f"Vehicle {vehicle_id} does not belong to this fleet")

    def _insert_tyre(self, fleet_id: str, data: TyreCreate) -> Tyre:
        self._check_vehicle_ref(fleet_id, data.vehicle_id)
        now = _now()
        tyre = Tyre(
            id=_new_id(),
            fleet_id=fleet_id,
            install_date=now if data.vehicle_id else None,
            purchase_date=now,
            created_at=now,
            **data.model_dump(),
        )
        self.tyres[tyre.id] = tyre
        return tyre

    def create_tyre(self, fleet_id: str, data: TyreCreate) -> Tyre:
        tyre = self._insert_tyre(fleet_id, data)
        self._commit()
        logger.info("Created tyre %s (%s) in fleet %s", tyre.id, tyre.serial_number, fleet_id)
        return tyre

    def create_tyres_batch(self, fleet_id: str, items: list[TyreCreate]) -> list[Tyre]:
        for item in items:
            self._check_vehicle_ref(fleet_id, item.vehicle_id)
        created = [self._insert_tyre(fleet_id, item) for item in items]
        self._commit()
        logger.info("Batch created %d tyres in fleet %s", len(created), fleet_id)
        return created

    def update_tyre(self, fleet_id: str, tyre_id: str, data: TyreUpdate) -> Tyre:
        tyre = self._fleet_tyre(fleet_id, tyre_id)
        changes = data.model_dump(exclude_unset=True)
        if "vehicle_id" in changes:
            self._check_vehicle_ref(fleet_id, changes["vehicle_id"])
            if changes["vehicle_id"] and changes["vehicle_id"] != tyre.vehicle_id:
                changes["install_date"] = _now()
            elif changes["vehicle_id"] is None:
                changes["position"] = None
        updated = Tyre.model_validate({**tyre.model_dump(), **changes})
        self.tyres[tyre_id] = updated
        self._commit()
        return updated

    def delete_tyre(self, fleet_id: str, tyre_id: str) -> None:
        self._fleet_tyre(fleet_id, tyre_id)
        del self.tyres[tyre_id]
        self._commit()

    # ==================== Stock ====================

    def get_stock_items(self, fleet_id: str) -> list[StockItem]:
        return [s for s in self.stock_items.values() if s.fleet_id == fleet_id]

    def create_stock_item(self, fleet_id: str, data: StockItemCreate) -> StockItem:
        item = StockItem(id=_new_id(), fleet_id=fleet_id, created_at=_now(), **data.model_dump())
        self.stock_items[item.id] = item
        self._commit()
        return item

    def delete_stock_item(self, fleet_id: str, stock_id: str) -> None:
        item = self.stock_items.get(stock_id)
        if item is None or item.fleet_id != fleet_id:
            raise NotFoundError("Stock item not found")
        del self.stock_items[stock_id]
        self._commit()

    # ==================== Alerts ====================

    def get_alerts(self, fleet_id: str) -> list[Alert]:
        """Fleet alerts, newest first."""
        alerts = [a for a in self.alerts.values() if a.fleet_id == fleet_id]
        return list(reversed(alerts))

    def _insert_alert(self, fleet_id: str, draft: AlertDraft) -> Alert:
        alert = Alert(
            id=_new_id(),
            fleet_id=fleet_id,
            vehicle_id=draft.vehicle_id,
            tyre_id=draft.tyre_id,
            stock_item_id=draft.stock_item_id,
            type=draft.type,
            severity=draft.severity,
            title=draft.title,
            message=draft.message,
            created_at=_now(),
        )
        self.alerts[alert.id] = alert
        return alert

    def create_alert(self, fleet_id: str, draft: AlertDraft) -> Alert:
        alert = self._insert_alert(fleet_id, draft)
        self._commit()
        return alert

    def create_alerts(self, fleet_id: str, drafts: list[AlertDraft]) -> list[Alert]:
        created = [self._insert_alert(fleet_id, d) for d in drafts]
        if created:
            self._commit()
            logger.info("Raised %d alerts in fleet %s", len(created), fleet_id)
        return created

    def mark_alert_read(self, fleet_id: str, alert_id: str) -> None:
        alert = self.alerts.get(alert_id)
        if alert is None or alert.fleet_id != fleet_id:
            raise NotFoundError("Alert not found")
        self.alerts[alert_id] = alert.model_copy(update={"is_read": True})
        self._commit()

    def mark_all_alerts_read(self, fleet_id: str) -> None:
        for alert in list(self.alerts.values()):
            if alert.fleet_id == fleet_id and not alert.is_read:
                self.alerts[alert.id] = alert.model_copy(update={"is_read": True})
        self._commit()

    # ==================== Stats ====================

    def get_stats(self, user_id: str) -> FleetStats:
        fleet_ids = {f.id for f in self.get_fleets_by_user(user_id)}
        if not fleet_ids:
            return FleetStats()
        return FleetStats(
            total_vehicles=sum(1 for v in self.vehicles.values() if v.fleet_id in fleet_ids),
            total_tyres=sum(1 for t in self.tyres.values() if t.fleet_id in fleet_ids),
            active_alerts=sum(
                1 for a in self.alerts.values() if a.fleet_id in fleet_ids and not a.is_read
            ),
            stock_items=sum(1 for s in self.stock_items.values() if s.fleet_id in fleet_ids),
        )
