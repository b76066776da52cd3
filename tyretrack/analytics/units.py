"""
Unit registry and helpers for tread depth and pressure conversions.

Uses pint so that conversions between metric and imperial tyre units
stay dimensionally checked.
"""

import pint

# Shared unit registry for the whole application
ureg = pint.UnitRegistry()

# Shorthand for creating quantities
Q_ = ureg.Quantity

# Tread depth reference for a new tyre
NEW_TREAD_DEPTH = Q_(8.0, "mm")


def mm_to_32nds(depth_mm: float) -> float:
    """Convert a tread depth in mm to 32nds of an inch."""
    return Q_(depth_mm, "mm").to("inch").magnitude * 32


def psi_to_kpa(pressure_psi: float) -> float:
    """Convert a pressure in psi to kPa."""
    return Q_(pressure_psi, "psi").to("kPa").magnitude


def kpa_to_psi(pressure_kpa: float) -> float:
    """Convert a pressure in kPa to psi."""
    return Q_(pressure_kpa, "kPa").to("psi").magnitude
