"""
Wheel-position schema generation.

Maps a vehicle's type and axle count to the ordered list of wheel slots
used to lay out the vehicle diagram and to populate position dropdowns.

Position keys on heavy vehicles with more than two axles collapse: every
rear axle after the first reuses rear_left/rear_right. Tyres on those
axles can only be told apart by input order when matched back to slots.
"""

from typing import Optional

from tyretrack.models.inputs import TyrePosition
from tyretrack.models.outputs import PositionOption, PositionSlot, VehicleCategory


# Diagram geometry
BODY_WIDTH = 200
LEFT_X = 30
RIGHT_X = BODY_WIDTH + 50
DUAL_OFFSET = 22
STEER_Y = 80
AXLE_SPACING = 100
SPARE_X = BODY_WIDTH / 2 + 40

# Default labels for contexts without a per-vehicle slot list
POSITION_LABELS: dict[str, str] = {
    TyrePosition.FRONT_LEFT.value: "Front Left",
    TyrePosition.FRONT_RIGHT.value: "Front Right",
    TyrePosition.REAR_LEFT.value: "Rear Left",
    TyrePosition.REAR_RIGHT.value: "Rear Right",
    TyrePosition.SPARE.value: "Spare",
    TyrePosition.INNER_LEFT.value: "Inner Left",
    TyrePosition.INNER_RIGHT.value: "Inner Right",
    TyrePosition.OUTER_LEFT.value: "Outer Left",
    TyrePosition.OUTER_RIGHT.value: "Outer Right",
}

KNOWN_VEHICLE_TYPES = (
    "car",
    "light_vehicle",
    "van",
    "service_vehicle",
    "truck",
    "bus",
    "trailer",
    "dump_truck",
)

_DUAL_KEYS = (
    TyrePosition.OUTER_LEFT,
    TyrePosition.INNER_LEFT,
    TyrePosition.INNER_RIGHT,
    TyrePosition.OUTER_RIGHT,
)

_COLLAPSED_KEYS = (
    TyrePosition.REAR_LEFT,
    TyrePosition.REAR_LEFT,
    TyrePosition.REAR_RIGHT,
    TyrePosition.REAR_RIGHT,
)


def vehicle_category(vehicle_type: str, axle_count: int) -> VehicleCategory:
    """
    Derive the layout category of a vehicle.

    Unknown types fall through to LIGHT rather than raising.
    """
    if vehicle_type == "dump_truck":
        return VehicleCategory.DUMP
    if vehicle_type in ("truck", "bus"):
        return VehicleCategory.HEAVY
    if vehicle_type == "trailer":
        return VehicleCategory.HEAVY if axle_count >= 3 else VehicleCategory.SERVICE
    if vehicle_type in ("service_vehicle", "van"):
        return VehicleCategory.SERVICE
    return VehicleCategory.LIGHT


def position_label(position: Optional[str]) -> str:
    """Default label for a position key; empty string when unset."""
    if position is None:
        return ""
    key = position.value if isinstance(position, TyrePosition) else position
    return POSITION_LABELS.get(key, key)


def _slot(
    slot_id: str,
    label: str,
    position: TyrePosition,
    x: float,
    y: float,
    is_dual: bool = False,
) -> PositionSlot:
    return PositionSlot(id=slot_id, label=label, position=position, is_dual=is_dual, x=x, y=y)


def _dual_axle(
    axle_number: int,
    prefix: str,
    y: float,
    keys: tuple[TyrePosition, ...],
) -> list[PositionSlot]:
    """Four dual slots (left outer, left inner, right inner, right outer)."""
    lo, li, ri, ro = keys
    return [
        _slot(f"a{axle_number}lo", f"{prefix} Left Outer", lo, LEFT_X - DUAL_OFFSET, y, True),
        _slot(f"a{axle_number}li", f"{prefix} Left Inner", li, LEFT_X + DUAL_OFFSET, y, True),
        _slot(f"a{axle_number}ri", f"{prefix} Right Inner", ri, RIGHT_X - DUAL_OFFSET, y, True),
        _slot(f"a{axle_number}ro", f"{prefix} Right Outer", ro, RIGHT_X + DUAL_OFFSET, y, True),
    ]


def _front_pair(y: float) -> list[PositionSlot]:
    return [
        _slot("fl", "Front Left", TyrePosition.FRONT_LEFT, LEFT_X, y),
        _slot("fr", "Front Right", TyrePosition.FRONT_RIGHT, RIGHT_X, y),
    ]


def _spare(y: float) -> PositionSlot:
    return _slot("sp", "Spare", TyrePosition.SPARE, SPARE_X, y)


def _light_slots() -> list[PositionSlot]:
    front_y, rear_y = 80, 280
    return _front_pair(front_y) + [
        _slot("rl", "Rear Left", TyrePosition.REAR_LEFT, LEFT_X, rear_y),
        _slot("rr", "Rear Right", TyrePosition.REAR_RIGHT, RIGHT_X, rear_y),
        _spare(350),
    ]


def _service_slots() -> list[PositionSlot]:
    front_y, rear_y = 80, 280
    return _front_pair(front_y) + [
        _slot("rlo", "Rear Left Outer", TyrePosition.OUTER_LEFT, LEFT_X - DUAL_OFFSET, rear_y, True),
        _slot("rli", "Rear Left Inner", TyrePosition.INNER_LEFT, LEFT_X + DUAL_OFFSET, rear_y, True),
        _slot("rri", "Rear Right Inner", TyrePosition.INNER_RIGHT, RIGHT_X - DUAL_OFFSET, rear_y, True),
        _slot("rro", "Rear Right Outer", TyrePosition.OUTER_RIGHT, RIGHT_X + DUAL_OFFSET, rear_y, True),
        _spare(350),
    ]


def _heavy_slots(axle_count: int) -> list[PositionSlot]:
    slots = _front_pair(STEER_Y)
    for a in range(1, axle_count):
        prefix = f"Axle {a + 1}" if axle_count > 2 else "Rear"
        keys = _DUAL_KEYS if a == 1 else _COLLAPSED_KEYS
        slots.extend(_dual_axle(a + 1, prefix, STEER_Y + a * AXLE_SPACING, keys))
    slots.append(_spare(STEER_Y + axle_count * AXLE_SPACING))
    return slots


def _dump_slots(axle_count: int) -> list[PositionSlot]:
    slots = _front_pair(STEER_Y)
    tandem = axle_count >= 3
    if tandem:
        slots.append(_slot("a2fl", "Axle 2 Left", TyrePosition.REAR_LEFT, LEFT_X, STEER_Y + 80))
        slots.append(_slot("a2fr", "Axle 2 Right", TyrePosition.REAR_RIGHT, RIGHT_X, STEER_Y + 80))

    for a in range(2 if tandem else 1, axle_count):
        y = STEER_Y + a * AXLE_SPACING + (-20 if tandem else 0)
        slots.extend(_dual_axle(a + 1, f"Axle {a + 1}", y, _DUAL_KEYS))
    slots.append(_spare(STEER_Y + axle_count * AXLE_SPACING + 10))
    return slots


def generate_slots(category: VehicleCategory, axle_count: int) -> list[PositionSlot]:
    """
    Generate the ordered wheel slots for a vehicle category.

    Args:
        category: Layout category (see vehicle_category)
        axle_count: Number of axles, >= 1. Ignored for light and service.

    Returns:
        Fresh list of PositionSlot. Always ends with exactly one spare slot.
    """
    if category == VehicleCategory.SERVICE:
        return _service_slots()
    if category == VehicleCategory.HEAVY:
        return _heavy_slots(axle_count)
    if category == VehicleCategory.DUMP:
        return _dump_slots(axle_count)
    return _light_slots()


def slots_for_vehicle(vehicle_type: str, axle_count: int) -> list[PositionSlot]:
    """Shortcut: categorise a vehicle and generate its slots."""
    return generate_slots(vehicle_category(vehicle_type, axle_count), axle_count)


def position_options_for_vehicle(vehicle_type: str, axle_count: int) -> list[PositionOption]:
    """
    Build value/label options for a position dropdown.

    Heavy vehicles list outer/inner keys for every rear axle here; the
    collapsed rear_left/rear_right keys only appear in the diagram slots.
    """
    category = vehicle_category(vehicle_type, axle_count)
    if category == VehicleCategory.HEAVY:
        slots = _front_pair(STEER_Y)
        for a in range(1, axle_count):
            prefix = f"Axle {a + 1}" if axle_count > 2 else "Rear"
            slots.extend(_dual_axle(a + 1, prefix, 0, _DUAL_KEYS))
        slots.append(_spare(0))
    else:
        slots = generate_slots(category, axle_count)
    return [PositionOption(value=s.position, label=s.label) for s in slots]
