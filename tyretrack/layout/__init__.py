"""
Vehicle wheel layout: position-slot generation and tyre matching.
"""

from tyretrack.layout.positions import (
    POSITION_LABELS,
    KNOWN_VEHICLE_TYPES,
    vehicle_category,
    generate_slots,
    slots_for_vehicle,
    position_label,
    position_options_for_vehicle,
)
from tyretrack.layout.matcher import (
    match_tyres_to_slots,
    unmatched_tyres,
    build_layout,
    build_vehicle_layout,
    preview_layout,
)

__all__ = [
    "POSITION_LABELS",
    "KNOWN_VEHICLE_TYPES",
    "vehicle_category",
    "generate_slots",
    "slots_for_vehicle",
    "position_label",
    "position_options_for_vehicle",
    "match_tyres_to_slots",
    "unmatched_tyres",
    "build_layout",
    "build_vehicle_layout",
    "preview_layout",
]
