"""
Tests for wheel-position slot generation.

Covers category derivation, slot layouts per category, labels and the
position dropdown options.
"""

import pytest

from tyretrack.layout.positions import (
    KNOWN_VEHICLE_TYPES,
    POSITION_LABELS,
    generate_slots,
    position_label,
    position_options_for_vehicle,
    slots_for_vehicle,
    vehicle_category,
)
from tyretrack.models.inputs import TyrePosition
from tyretrack.models.outputs import VehicleCategory


class TestVehicleCategory:
    """Tests for vehicle_category."""

    @pytest.mark.parametrize("vehicle_type,axles,expected", [
        ("dump_truck", 2, VehicleCategory.DUMP),
        ("dump_truck", 5, VehicleCategory.DUMP),
        ("truck", 2, VehicleCategory.HEAVY),
        ("bus", 3, VehicleCategory.HEAVY),
        ("trailer", 2, VehicleCategory.SERVICE),
        ("trailer", 3, VehicleCategory.HEAVY),
        ("van", 2, VehicleCategory.SERVICE),
        ("service_vehicle", 2, VehicleCategory.SERVICE),
        ("car", 2, VehicleCategory.LIGHT),
        ("light_vehicle", 4, VehicleCategory.LIGHT),
    ])
    def test_known_types(self, vehicle_type, axles, expected):
        """Test category for every known vehicle type."""
        assert vehicle_category(vehicle_type, axles) == expected

    def test_unknown_type_falls_back_to_light(self):
        """Test that unrecognised types do not raise."""
        assert vehicle_category("hovercraft", 6) == VehicleCategory.LIGHT
        assert vehicle_category("", 1) == VehicleCategory.LIGHT

    def test_type_match_is_exact(self):
        """Test that type strings are not normalised."""
        assert vehicle_category("Truck", 3) == VehicleCategory.LIGHT


class TestGenerateSlots:
    """Tests for generate_slots."""

    @pytest.mark.parametrize("category", list(VehicleCategory))
    @pytest.mark.parametrize("axles", range(1, 11))
    def test_exactly_one_spare(self, category, axles):
        """Test that every layout is non-empty with a single spare slot."""
        slots = generate_slots(category, axles)

        assert len(slots) > 0
        assert len([s for s in slots if s.position == TyrePosition.SPARE]) == 1

    @pytest.mark.parametrize("category", list(VehicleCategory))
    @pytest.mark.parametrize("axles", range(1, 11))
    def test_slot_ids_unique(self, category, axles):
        """Test that slot ids are unique within one layout."""
        ids = [s.id for s in generate_slots(category, axles)]
        assert len(ids) == len(set(ids))

    @pytest.mark.parametrize("axles", range(1, 11))
    def test_light_is_five_slots(self, axles):
        """Test that the light layout ignores axle count."""
        slots = generate_slots(VehicleCategory.LIGHT, axles)

        assert [s.id for s in slots] == ["fl", "fr", "rl", "rr", "sp"]
        assert [s.position for s in slots] == [
            TyrePosition.FRONT_LEFT,
            TyrePosition.FRONT_RIGHT,
            TyrePosition.REAR_LEFT,
            TyrePosition.REAR_RIGHT,
            TyrePosition.SPARE,
        ]

    def test_service_has_dual_rear(self):
        """Test the service layout: front pair, dual rear group, spare."""
        slots = generate_slots(VehicleCategory.SERVICE, 2)

        assert len(slots) == 7
        assert [s.position for s in slots[2:6]] == [
            TyrePosition.OUTER_LEFT,
            TyrePosition.INNER_LEFT,
            TyrePosition.INNER_RIGHT,
            TyrePosition.OUTER_RIGHT,
        ]
        assert all(s.is_dual for s in slots[2:6])
        assert not slots[0].is_dual

    def test_heavy_two_axles_uses_rear_prefix(self):
        """Test that a single rear axle is labelled Rear, not Axle 2."""
        slots = generate_slots(VehicleCategory.HEAVY, 2)
        rear = slots[2:6]

        assert len(slots) == 7
        assert all(s.label.startswith("Rear ") for s in rear)
        assert not any("Axle 2" in s.label for s in slots)
        assert rear[0].label == "Rear Left Outer"

    def test_heavy_four_axles_collapses_keys(self):
        """Test that axles after the first rear axle reuse rear_left/rear_right."""
        slots = generate_slots(VehicleCategory.HEAVY, 4)

        assert len(slots) == 2 + (4 - 1) * 4 + 1
        axle2 = [s for s in slots if s.id.startswith("a2")]
        axle3 = [s for s in slots if s.id.startswith("a3")]
        axle4 = [s for s in slots if s.id.startswith("a4")]

        assert [s.position for s in axle2] == [
            TyrePosition.OUTER_LEFT,
            TyrePosition.INNER_LEFT,
            TyrePosition.INNER_RIGHT,
            TyrePosition.OUTER_RIGHT,
        ]
        collapsed = [
            TyrePosition.REAR_LEFT,
            TyrePosition.REAR_LEFT,
            TyrePosition.REAR_RIGHT,
            TyrePosition.REAR_RIGHT,
        ]
        assert [s.position for s in axle3] == collapsed
        assert [s.position for s in axle4] == collapsed
        assert axle3[0].label == "Axle 3 Left Outer"

    @pytest.mark.parametrize("category", [VehicleCategory.HEAVY, VehicleCategory.DUMP])
    def test_single_axle_is_front_pair_and_spare(self, category):
        """Test the degenerate one-axle layout."""
        slots = generate_slots(category, 1)
        assert [s.id for s in slots] == ["fl", "fr", "sp"]

    def test_dump_three_axles(self):
        """Test the dump layout with a single-wheel second axle."""
        slots = generate_slots(VehicleCategory.DUMP, 3)

        assert len(slots) == 9
        assert [s.id for s in slots[:4]] == ["fl", "fr", "a2fl", "a2fr"]
        assert [s.label for s in slots[2:4]] == ["Axle 2 Left", "Axle 2 Right"]
        assert [s.position for s in slots[2:4]] == [
            TyrePosition.REAR_LEFT,
            TyrePosition.REAR_RIGHT,
        ]
        assert not any(s.is_dual for s in slots[2:4])
        assert all(s.label.startswith("Axle 3") for s in slots[4:8])
        assert slots[-1].position == TyrePosition.SPARE

    def test_dump_two_axles(self):
        """Test that a two-axle dump truck has no single-wheel second axle."""
        slots = generate_slots(VehicleCategory.DUMP, 2)

        assert len(slots) == 7
        assert not any(s.id.startswith("a2f") for s in slots)
        assert all(s.label.startswith("Axle 2") for s in slots[2:6])

    def test_dual_slots_straddle_wheel_line(self):
        """Test diagram coordinates of a dual group."""
        slots = generate_slots(VehicleCategory.SERVICE, 2)
        fl, rlo, rli = slots[0], slots[2], slots[3]

        assert rlo.x < fl.x < rli.x
        assert rlo.y == rli.y

    def test_generated_keys_are_enum_members(self):
        """Test that every emitted position key is a TyrePosition."""
        for category in VehicleCategory:
            for axles in range(1, 11):
                for slot in generate_slots(category, axles):
                    assert isinstance(slot.position, TyrePosition)

    def test_fresh_list_each_call(self):
        """Test that callers can mutate the result safely."""
        first = generate_slots(VehicleCategory.LIGHT, 2)
        first.pop()
        assert len(generate_slots(VehicleCategory.LIGHT, 2)) == 5


class TestSlotsForVehicle:
    """Tests for slots_for_vehicle."""

    def test_truck_three_axles(self):
        """Test the three-axle truck layout end to end."""
        slots = slots_for_vehicle("truck", 3)
        assert len(slots) == 11

    def test_known_types_all_generate(self):
        """Test that every known type generates a layout."""
        for vehicle_type in KNOWN_VEHICLE_TYPES:
            assert slots_for_vehicle(vehicle_type, 2)


class TestLabels:
    """Tests for default position labels."""

    def test_every_position_has_label(self):
        """Test the label table covers the enum."""
        assert set(POSITION_LABELS) == {p.value for p in TyrePosition}

    def test_position_label(self):
        """Test label lookup for keys, enums and missing values."""
        assert position_label("rear_left") == "Rear Left"
        assert position_label(TyrePosition.INNER_RIGHT) == "Inner Right"
        assert position_label(None) == ""
        assert position_label("roof") == "roof"


class TestPositionOptions:
    """Tests for position_options_for_vehicle."""

    def test_light_options(self):
        """Test options mirror the light slots."""
        options = position_options_for_vehicle("car", 2)

        assert [o.value for o in options] == [
            TyrePosition.FRONT_LEFT,
            TyrePosition.FRONT_RIGHT,
            TyrePosition.REAR_LEFT,
            TyrePosition.REAR_RIGHT,
            TyrePosition.SPARE,
        ]
        assert options[0].label == "Front Left"

    def test_heavy_options_use_outer_inner_keys(self):
        """Test that heavy dropdowns never offer collapsed keys."""
        options = position_options_for_vehicle("truck", 3)
        values = {o.value for o in options}

        assert len(options) == 11
        assert TyrePosition.REAR_LEFT not in values
        assert TyrePosition.REAR_RIGHT not in values
        assert [o.label for o in options[6:10]] == [
            "Axle 3 Left Outer",
            "Axle 3 Left Inner",
            "Axle 3 Right Inner",
            "Axle 3 Right Outer",
        ]

    def test_dump_options_match_slots(self):
        """Test that non-heavy options follow the diagram slots."""
        options = position_options_for_vehicle("dump_truck", 3)
        slots = slots_for_vehicle("dump_truck", 3)

        assert [(o.value, o.label) for o in options] == [(s.position, s.label) for s in slots]
