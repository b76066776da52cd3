"""
Pydantic models for tyretrack requests, records and layouts.
"""

from tyretrack.models.inputs import (
    TyreStatus,
    TyrePosition,
    FleetRole,
    InvitableRole,
    UserCreate,
    FleetCreate,
    VehicleCreate,
    VehicleUpdate,
    TyreCreate,
    TyreUpdate,
    StockItemCreate,
    MemberAdd,
)
from tyretrack.models.outputs import (
    VehicleCategory,
    AlertType,
    AlertSeverity,
    TreadCondition,
    User,
    UserSummary,
    Fleet,
    FleetMember,
    FleetMemberWithUser,
    Vehicle,
    Tyre,
    StockItem,
    Alert,
    VehicleWithTyres,
    BatchItemError,
    BatchResult,
    FleetStats,
    PositionSlot,
    PositionOption,
    SlotAssignment,
    VehicleLayout,
    TreadBucket,
    FleetForecast,
)

__all__ = [
    "TyreStatus",
    "TyrePosition",
    "FleetRole",
    "InvitableRole",
    "UserCreate",
    "FleetCreate",
    "VehicleCreate",
    "VehicleUpdate",
    "TyreCreate",
    "TyreUpdate",
    "StockItemCreate",
    "MemberAdd",
    "VehicleCategory",
    "AlertType",
    "AlertSeverity",
    "TreadCondition",
    "User",
    "UserSummary",
    "Fleet",
    "FleetMember",
    "FleetMemberWithUser",
    "Vehicle",
    "Tyre",
    "StockItem",
    "Alert",
    "VehicleWithTyres",
    "BatchItemError",
    "BatchResult",
    "FleetStats",
    "PositionSlot",
    "PositionOption",
    "SlotAssignment",
    "VehicleLayout",
    "TreadBucket",
    "FleetForecast",
]
