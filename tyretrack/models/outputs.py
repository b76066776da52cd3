"""
Output models for stored records, vehicle layouts and analytics.

Records are what storage hands back to callers. Layout models describe
the generated wheel-position slots and the tyres matched into them.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from tyretrack.models.inputs import FleetRole, TyrePosition, TyreStatus


class VehicleCategory(str, Enum):
    """Layout family derived from vehicle type and axle count."""
    LIGHT = "light"
    SERVICE = "service"
    HEAVY = "heavy"
    DUMP = "dump"


class AlertType(str, Enum):
    """Kind of fleet alert."""
    LOW_TREAD = "low_tread"
    ROTATION_DUE = "rotation_due"
    REPLACEMENT_NEEDED = "replacement_needed"
    LOW_STOCK = "low_stock"
    INSPECTION_DUE = "inspection_due"
    PRESSURE_WARNING = "pressure_warning"
    MILEAGE_THRESHOLD = "mileage_threshold"


class AlertSeverity(str, Enum):
    """Alert severity."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class TreadCondition(str, Enum):
    """Coarse tread health band used for diagram colouring."""
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------

class User(BaseModel):
    """A user directory entry."""
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: datetime


class UserSummary(BaseModel):
    """User fields embedded in member listings."""
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class Fleet(BaseModel):
    """A tenant-owned collection of vehicles, tyres and stock."""
    id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    created_at: datetime


class FleetMember(BaseModel):
    """Membership of a user in a fleet."""
    id: str
    fleet_id: str
    user_id: str
    role: FleetRole = FleetRole.MEMBER
    joined_at: datetime


class FleetMemberWithUser(FleetMember):
    """Membership plus a summary of the member's user record."""
    user: UserSummary


class Vehicle(BaseModel):
    """A registered vehicle."""
    id: str
    fleet_id: str
    registration: str
    make: str
    model: str
    year: Optional[int] = None
    type: str
    current_mileage: int = 0
    axle_count: int = 2
    created_at: datetime


class Tyre(BaseModel):
    """A tracked tyre, fitted or in stock."""
    id: str
    fleet_id: str
    vehicle_id: Optional[str] = None
    brand: str
    model: str
    size: str
    serial_number: str
    status: TyreStatus = TyreStatus.IN_STOCK
    position: Optional[TyrePosition] = None
    tread_depth: float = 8.0
    pressure: Optional[float] = None
    mileage: int = 0
    install_date: Optional[datetime] = None
    purchase_date: Optional[datetime] = None
    cost: Optional[float] = None
    created_at: datetime


class StockItem(BaseModel):
    """An inventory line of unfitted tyres."""
    id: str
    fleet_id: str
    brand: str
    model: str
    size: str
    quantity: int = 0
    min_quantity: int = 2
    unit_cost: Optional[float] = None
    location: Optional[str] = None
    created_at: datetime

    @property
    def is_low(self) -> bool:
        """Whether quantity is at or below the reorder threshold."""
        return self.quantity <= self.min_quantity


class Alert(BaseModel):
    """A fleet notification."""
    id: str
    fleet_id: str
    vehicle_id: Optional[str] = None
    tyre_id: Optional[str] = None
    stock_item_id: Optional[str] = None
    type: AlertType
    severity: AlertSeverity = AlertSeverity.INFO
    title: str
    message: str
    is_read: bool = False
    created_at: datetime


class VehicleWithTyres(BaseModel):
    """A vehicle together with the tyres fitted to it."""
    vehicle: Vehicle
    tyres: list[Tyre] = Field(default_factory=list)


class BatchItemError(BaseModel):
    """Validation failure for one element of a batch request."""
    index: int = Field(..., ge=0, description="Position of the item in the request array")
    errors: list[str] = Field(default_factory=list, description="Validation messages")


class BatchResult(BaseModel):
    """Outcome of a batch create request."""
    created: list[dict] = Field(default_factory=list, description="Created records")
    skipped: int = Field(default=0, ge=0, description="Number of invalid items skipped")
    errors: list[BatchItemError] = Field(default_factory=list)


class FleetStats(BaseModel):
    """Dashboard counters across every fleet a user belongs to."""
    total_vehicles: int = 0
    total_tyres: int = 0
    active_alerts: int = 0
    stock_items: int = 0


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

class PositionSlot(BaseModel):
    """
    One mountable wheel location on a vehicle diagram.

    `position` is the logical key and is not unique: several slots on a
    multi-axle vehicle can share one key. `id` is unique per slot set.
    """
    id: str = Field(..., description="Slot identifier, unique within one vehicle")
    label: str = Field(..., description="Human-readable label")
    position: TyrePosition = Field(..., description="Logical position key")
    is_dual: bool = Field(default=False, description="Part of a dual-wheel pair")
    x: float = Field(default=0.0, description="Diagram x coordinate")
    y: float = Field(default=0.0, description="Diagram y coordinate")

    @property
    def is_spare(self) -> bool:
        return self.position == TyrePosition.SPARE


class PositionOption(BaseModel):
    """A selectable value/label pair for position dropdowns."""
    value: TyrePosition
    label: str


class SlotAssignment(BaseModel):
    """A slot and the tyre matched into it, if any."""
    slot: PositionSlot
    tyre: Optional[Tyre] = None
    tread_condition: Optional[TreadCondition] = Field(
        default=None,
        description="Tread band of the fitted tyre; None when the slot is empty",
    )

    @property
    def is_empty(self) -> bool:
        return self.tyre is None


class VehicleLayout(BaseModel):
    """Generated slots for a vehicle with its tyres matched in."""
    vehicle_type: str
    axle_count: int = Field(..., ge=1)
    category: VehicleCategory
    assignments: list[SlotAssignment] = Field(default_factory=list)
    unmatched_tyre_ids: list[str] = Field(
        default_factory=list,
        description="Tyres that could not be placed in any slot",
    )
    fitted_count: int = Field(default=0, ge=0, description="Tyres with a non-spare position")
    total_slots: int = Field(default=0, ge=0, description="Number of non-spare slots")

    @property
    def filled_slots(self) -> list[SlotAssignment]:
        return [a for a in self.assignments if a.tyre is not None]

    @property
    def empty_slots(self) -> list[SlotAssignment]:
        return [a for a in self.assignments if a.tyre is None]


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

class TreadBucket(BaseModel):
    """Number of tyres within a tread depth band."""
    range: str
    count: int = Field(default=0, ge=0)


class FleetForecast(BaseModel):
    """
    Tyre performance and cost projections for one fleet.

    Depth values are in mm, pressure in psi unless the field name says
    otherwise.
    """
    total_tyres: int = 0
    status_counts: dict[str, int] = Field(default_factory=dict)
    tread_distribution: list[TreadBucket] = Field(default_factory=list)
    avg_tread_depth_mm: float = 0.0
    avg_tread_depth_32nds: float = 0.0
    needing_replacement_soon: int = 0
    estimated_replacement_cost: float = 0.0
    total_tyre_cost: float = 0.0
    total_stock_value: float = 0.0
    low_stock_items: int = 0
    avg_pressure_psi: Optional[float] = None
    avg_pressure_kpa: Optional[float] = None
