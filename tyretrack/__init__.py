"""
Tyretrack

Fleet tyre management: vehicles, tyres fitted per wheel position, stock
and alerts. The core generates a vehicle's wheel slots from its type and
axle count and matches its tyres into them.

Usage:
    python -m tyretrack make-example
    python -m tyretrack layout --input example_vehicle.json
    python -m tyretrack slots --type truck --axles 3
    python -m tyretrack serve --port 8000
"""

__version__ = "0.1.0"
__author__ = "Tyretrack"

from tyretrack.models.inputs import TyrePosition, TyreStatus, VehicleCreate, TyreCreate
from tyretrack.models.outputs import (
    PositionSlot,
    Tyre,
    Vehicle,
    VehicleCategory,
    VehicleLayout,
)
from tyretrack.layout import (
    vehicle_category,
    generate_slots,
    match_tyres_to_slots,
    build_layout,
)

__all__ = [
    "TyrePosition",
    "TyreStatus",
    "VehicleCreate",
    "TyreCreate",
    "PositionSlot",
    "Tyre",
    "Vehicle",
    "VehicleCategory",
    "VehicleLayout",
    "vehicle_category",
    "generate_slots",
    "match_tyres_to_slots",
    "build_layout",
]
