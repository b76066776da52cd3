"""
Input models for fleet, vehicle, tyre and stock requests.

These models validate request bodies before anything reaches storage.
Bounds mirror the limits enforced by the fleet web client.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class TyreStatus(str, Enum):
    """Lifecycle status of a tyre."""
    IN_USE = "in_use"
    IN_STOCK = "in_stock"
    WORN = "worn"
    DAMAGED = "damaged"
    DISPOSED = "disposed"
    RETREADED = "retreaded"


class TyrePosition(str, Enum):
    """
    Logical mounting position of a tyre.

    This is a closed set. Every position key emitted by the slot generator
    must be a member, otherwise tyres fitted to that slot fail validation.
    """
    FRONT_LEFT = "front_left"
    FRONT_RIGHT = "front_right"
    REAR_LEFT = "rear_left"
    REAR_RIGHT = "rear_right"
    SPARE = "spare"
    INNER_LEFT = "inner_left"
    INNER_RIGHT = "inner_right"
    OUTER_LEFT = "outer_left"
    OUTER_RIGHT = "outer_right"


class FleetRole(str, Enum):
    """Role of a user within a fleet."""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class InvitableRole(str, Enum):
    """Roles that can be granted when adding a member."""
    ADMIN = "admin"
    MEMBER = "member"


class UserCreate(BaseModel):
    """A user directory entry. Credentials are handled elsewhere."""
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Unique email address")
    first_name: Optional[str] = Field(default=None, description="Given name")
    last_name: Optional[str] = Field(default=None, description="Family name")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class FleetCreate(BaseModel):
    """Request body for creating a fleet."""
    name: str = Field(..., min_length=1, description="Fleet display name")
    description: Optional[str] = Field(default=None, description="Free-text description")


class VehicleCreate(BaseModel):
    """
    Request body for registering a vehicle.

    The `type` string is intentionally open: unknown types are accepted and
    laid out as light vehicles.
    """
    registration: str = Field(..., min_length=1, description="Registration / plate number")
    make: str = Field(..., min_length=1, description="Manufacturer")
    model: str = Field(..., min_length=1, description="Model name")
    year: Optional[int] = Field(default=None, ge=1990, le=2030, description="Model year")
    type: str = Field(
        ...,
        min_length=1,
        description="Vehicle type, e.g. car, van, truck, bus, trailer, dump_truck",
    )
    current_mileage: int = Field(default=0, ge=0, description="Odometer reading in km")
    axle_count: int = Field(default=2, ge=1, le=10, description="Number of axles")

    model_config = {
        "json_schema_extra": {
            "example": {
                "registration": "KX21 TRK",
                "make": "Volvo",
                "model": "FH16",
                "year": 2021,
                "type": "truck",
                "current_mileage": 182000,
                "axle_count": 3,
            }
        }
    }


class VehicleUpdate(BaseModel):
    """Partial update of a vehicle. Omitted fields are left untouched."""
    registration: Optional[str] = Field(default=None, min_length=1)
    make: Optional[str] = Field(default=None, min_length=1)
    model: Optional[str] = Field(default=None, min_length=1)
    year: Optional[int] = Field(default=None, ge=1990, le=2030)
    type: Optional[str] = Field(default=None, min_length=1)
    current_mileage: Optional[int] = Field(default=None, ge=0)
    axle_count: Optional[int] = Field(default=None, ge=1, le=10)

    @field_validator(
        "registration", "make", "model", "type", "current_mileage", "axle_count", mode="before"
    )
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class TyreCreate(BaseModel):
    """Request body for adding a tyre to a fleet."""
    brand: str = Field(..., min_length=1, description="Tyre brand")
    model: str = Field(..., min_length=1, description="Tyre model / pattern")
    size: str = Field(..., min_length=1, description="Size designation, e.g. 315/80R22.5")
    serial_number: str = Field(..., min_length=1, description="Manufacturer serial / DOT code")
    status: TyreStatus = Field(default=TyreStatus.IN_STOCK, description="Lifecycle status")
    vehicle_id: Optional[str] = Field(default=None, description="Vehicle the tyre is fitted to")
    position: Optional[TyrePosition] = Field(default=None, description="Mounting position key")
    tread_depth: float = Field(default=8.0, ge=0, le=20, description="Remaining tread depth in mm")
    pressure: Optional[float] = Field(default=None, ge=0, le=200, description="Inflation pressure in psi")
    cost: Optional[float] = Field(default=None, ge=0, description="Purchase cost")
    mileage: int = Field(default=0, ge=0, description="Distance run in km")


class TyreUpdate(BaseModel):
    """Partial update of a tyre."""
    brand: Optional[str] = Field(default=None, min_length=1)
    model: Optional[str] = Field(default=None, min_length=1)
    size: Optional[str] = Field(default=None, min_length=1)
    serial_number: Optional[str] = Field(default=None, min_length=1)
    status: Optional[TyreStatus] = None
    vehicle_id: Optional[str] = None
    position: Optional[TyrePosition] = None
    tread_depth: Optional[float] = Field(default=None, ge=0, le=20)
    pressure: Optional[float] = Field(default=None, ge=0, le=200)
    cost: Optional[float] = Field(default=None, ge=0)
    mileage: Optional[int] = Field(default=None, ge=0)

    @field_validator(
        "brand", "model", "size", "serial_number", "status", "tread_depth", "mileage", mode="before"
    )
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class StockItemCreate(BaseModel):
    """Request body for a stock (inventory) line."""
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    quantity: int = Field(default=0, ge=0, description="Units on hand")
    min_quantity: int = Field(default=2, ge=0, description="Reorder threshold")
    unit_cost: Optional[float] = Field(default=None, ge=0, description="Cost per unit")
    location: Optional[str] = Field(default=None, description="Storage location")


class MemberAdd(BaseModel):
    """Request body for inviting an existing user into a fleet."""
    email: str = Field(..., pattern=EMAIL_PATTERN)
    role: InvitableRole = Field(default=InvitableRole.MEMBER)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v
