"""
Tyre-to-slot matching.

Places a vehicle's tyres into its generated wheel slots by position key.
Tyres sharing a key fill that key's slots in input order. Whatever is
left over is spread across empty non-spare slots, so a fitted tyre never
drops out of the diagram just because its position no longer fits the
vehicle's current configuration.
"""

from typing import Optional, Sequence

from tyretrack.analytics.forecasts import tread_condition
from tyretrack.layout.positions import generate_slots, vehicle_category
from tyretrack.models.inputs import TyrePosition
from tyretrack.models.outputs import (
    PositionSlot,
    SlotAssignment,
    Tyre,
    Vehicle,
    VehicleLayout,
)


def match_tyres_to_slots(
    slots: Sequence[PositionSlot],
    tyres: Sequence[Tyre],
) -> dict[str, Optional[Tyre]]:
    """
    Assign tyres to slots.

    Args:
        slots: Slots as produced by generate_slots
        tyres: The vehicle's tyres, in the order ties should be broken

    Returns:
        Mapping of slot id to Tyre or None, in slot order. Each tyre
        appears at most once.
    """
    result: dict[str, Optional[Tyre]] = {slot.id: None for slot in slots}
    used: set[str] = set()

    groups: dict[str, list[PositionSlot]] = {}
    for slot in slots:
        groups.setdefault(slot.position, []).append(slot)

    for position, group in groups.items():
        matching = [
            t for t in tyres
            if t.position is not None and t.position == position and t.id not in used
        ]
        for slot, tyre in zip(group, matching):
            result[slot.id] = tyre
            used.add(tyre.id)

    # Overflow pass: leftovers go to empty non-spare slots
    leftovers = [t for t in tyres if t.id not in used]
    empty = [
        s for s in slots
        if result[s.id] is None and s.position != TyrePosition.SPARE
    ]
    for slot, tyre in zip(empty, leftovers):
        result[slot.id] = tyre
        used.add(tyre.id)

    return result


def unmatched_tyres(
    tyres: Sequence[Tyre],
    assignment: dict[str, Optional[Tyre]],
) -> list[Tyre]:
    """Tyres from `tyres` that no slot in `assignment` received."""
    placed = {t.id for t in assignment.values() if t is not None}
    return [t for t in tyres if t.id not in placed]


def build_layout(
    vehicle_type: str,
    axle_count: int,
    tyres: Sequence[Tyre] = (),
) -> VehicleLayout:
    """
    Generate slots for a vehicle shape and match tyres into them.

    Args:
        vehicle_type: Free-form vehicle type string
        axle_count: Number of axles (>= 1)
        tyres: Tyres fitted to the vehicle, in creation order

    Returns:
        VehicleLayout with one assignment per slot
    """
    category = vehicle_category(vehicle_type, axle_count)
    slots = generate_slots(category, axle_count)
    assignment = match_tyres_to_slots(slots, tyres)

    assignments = []
    for slot in slots:
        tyre = assignment[slot.id]
        assignments.append(
            SlotAssignment(
                slot=slot,
                tyre=tyre,
                tread_condition=tread_condition(tyre.tread_depth) if tyre is not None else None,
            )
        )

    fitted = [
        t for t in tyres
        if t.position is not None and t.position != TyrePosition.SPARE
    ]
    return VehicleLayout(
        vehicle_type=vehicle_type,
        axle_count=axle_count,
        category=category,
        assignments=assignments,
        unmatched_tyre_ids=[t.id for t in unmatched_tyres(tyres, assignment)],
        fitted_count=len(fitted),
        total_slots=len([s for s in slots if not s.is_spare]),
    )


def build_vehicle_layout(vehicle: Vehicle, tyres: Sequence[Tyre]) -> VehicleLayout:
    """Layout for a stored vehicle and its tyres."""
    return build_layout(vehicle.type, vehicle.axle_count, tyres)


def preview_layout(vehicle_type: str, axle_count: int) -> VehicleLayout:
    """Empty layout for a hypothetical vehicle."""
    return build_layout(vehicle_type, axle_count)
