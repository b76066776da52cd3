"""
Helpers to turn slot schemas and layouts into a compact, human-readable
console summary.
"""

from __future__ import annotations

from typing import Any, Sequence, TextIO

from tyretrack.models.outputs import PositionSlot, Vehicle, VehicleLayout


def _fmt_float(value: Any, unit: str = "", missing: str = "n/a") -> str:
    """Safely format a float with optional unit suffix."""
    try:
        fval = float(value)
    except (TypeError, ValueError):
        return missing
    suffix = f" {unit}" if unit else ""
    return f"{fval:.1f}{suffix}"


def print_slot_table(
    vehicle_type: str,
    axle_count: int,
    slots: Sequence[PositionSlot],
    file: TextIO | None = None,
) -> None:
    """Print one row per slot: id, key, label, dual flag and coordinates."""
    print(f"Vehicle: {vehicle_type} | Axles: {axle_count} | Slots: {len(slots)}", file=file)
    print(f"  {'id':<6} {'position':<12} {'label':<28} {'dual':<5} {'x':>6} {'y':>6}", file=file)
    for slot in slots:
        print(
            f"  {slot.id:<6} {slot.position.value:<12} {slot.label:<28} "
            f"{'yes' if slot.is_dual else '':<5} {slot.x:>6.0f} {slot.y:>6.0f}",
            file=file,
        )


def print_layout_summary(
    vehicle: Vehicle,
    layout: VehicleLayout,
    file: TextIO | None = None,
) -> None:
    """
    Print a matched layout.

    Args:
        vehicle: The vehicle the layout belongs to.
        layout: Output of build_vehicle_layout.
        file: Stream to write to; stdout when None.
    """
    print(
        f"\n{vehicle.registration} ({vehicle.make} {vehicle.model}) | "
        f"{layout.vehicle_type}, {layout.axle_count} axles, {layout.category.value}",
        file=file,
    )
    print(
        f"Fitted: {layout.fitted_count}/{layout.total_slots} | "
        f"filled slots {len(layout.filled_slots)} | empty {len(layout.empty_slots)}",
        file=file,
    )

    for assignment in layout.assignments:
        slot = assignment.slot
        tyre = assignment.tyre
        if tyre is None:
            detail = "-- empty --"
        else:
            condition = assignment.tread_condition.value if assignment.tread_condition else "?"
            detail = (
                f"{tyre.serial_number} {tyre.brand} {tyre.model} | "
                f"tread {_fmt_float(tyre.tread_depth, 'mm')} ({condition})"
            )
            # Overflow placement: the tyre's key differs from the slot's
            if tyre.position != slot.position:
                detail += f" [recorded as {tyre.position.value if tyre.position else 'none'}]"
        print(f"  {slot.id:<6} {slot.label:<28} {detail}", file=file)

    if layout.unmatched_tyre_ids:
        print("Unplaced tyres:", file=file)
        for tyre_id in layout.unmatched_tyre_ids:
            print(f"  - {tyre_id}", file=file)
