"""
Fleet tyre analytics.

Summarises tread wear, tyre status and costs for a fleet:
- Tread depth distribution and average
- Tyres due for replacement and the projected spend
- Stock value and low-stock lines
"""

from typing import Optional, Sequence

from tyretrack.analytics.units import NEW_TREAD_DEPTH, mm_to_32nds, psi_to_kpa
from tyretrack.models.inputs import TyreStatus
from tyretrack.models.outputs import (
    FleetForecast,
    StockItem,
    TreadBucket,
    TreadCondition,
    Tyre,
)


# In-use tyres at or below this depth (mm) are due for replacement
REPLACEMENT_SOON_MM = 3.0

# Flat projected cost of one replacement tyre
ESTIMATED_REPLACEMENT_COST = 350.0

# (label, lower bound exclusive, upper bound inclusive); None = unbounded
TREAD_BUCKETS: tuple[tuple[str, Optional[float], Optional[float]], ...] = (
    ("0-2mm", None, 2.0),
    ("2-4mm", 2.0, 4.0),
    ("4-6mm", 4.0, 6.0),
    ("6-8mm", 6.0, 8.0),
    ("8mm+", 8.0, None),
)


def tread_condition(depth_mm: float) -> TreadCondition:
    """
    Band a tread depth relative to a new 8 mm tread.

    Above 50% is good, above 25% is fair, anything else is poor.
    """
    pct = min(100.0, depth_mm / NEW_TREAD_DEPTH.magnitude * 100)
    if pct > 50:
        return TreadCondition.GOOD
    if pct > 25:
        return TreadCondition.FAIR
    return TreadCondition.POOR


def _in_bucket(depth: float, lower: Optional[float], upper: Optional[float]) -> bool:
    if lower is not None and depth <= lower:
        return False
    if upper is not None and depth > upper:
        return False
    return True


def tread_distribution(tyres: Sequence[Tyre]) -> list[TreadBucket]:
    """Count tyres per tread depth band."""
    return [
        TreadBucket(
            range=label,
            count=sum(1 for t in tyres if _in_bucket(t.tread_depth, lower, upper)),
        )
        for label, lower, upper in TREAD_BUCKETS
    ]


def needs_replacement_soon(tyre: Tyre) -> bool:
    """In-use tyre worn to the replacement threshold."""
    return tyre.status == TyreStatus.IN_USE and tyre.tread_depth <= REPLACEMENT_SOON_MM


def build_forecast(
    tyres: Sequence[Tyre],
    stock_items: Sequence[StockItem],
) -> FleetForecast:
    """
    Compute the fleet forecast.

    Args:
        tyres: Every tyre in the fleet
        stock_items: Every stock line in the fleet

    Returns:
        FleetForecast
    """
    status_counts: dict[str, int] = {}
    for tyre in tyres:
        status_counts[tyre.status.value] = status_counts.get(tyre.status.value, 0) + 1

    avg_tread = sum(t.tread_depth for t in tyres) / len(tyres) if tyres else 0.0
    replacement_soon = len([t for t in tyres if needs_replacement_soon(t)])

    pressures = [t.pressure for t in tyres if t.pressure is not None]
    avg_pressure = sum(pressures) / len(pressures) if pressures else None

    return FleetForecast(
        total_tyres=len(tyres),
        status_counts=status_counts,
        tread_distribution=tread_distribution(tyres),
        avg_tread_depth_mm=round(avg_tread, 2),
        avg_tread_depth_32nds=round(mm_to_32nds(avg_tread), 1),
        needing_replacement_soon=replacement_soon,
        estimated_replacement_cost=replacement_soon * ESTIMATED_REPLACEMENT_COST,
        total_tyre_cost=sum(t.cost or 0.0 for t in tyres),
        total_stock_value=sum(s.quantity * (s.unit_cost or 0.0) for s in stock_items),
        low_stock_items=len([s for s in stock_items if s.is_low]),
        avg_pressure_psi=round(avg_pressure, 1) if avg_pressure is not None else None,
        avg_pressure_kpa=round(psi_to_kpa(avg_pressure), 1) if avg_pressure is not None else None,
    )
