"""
Alert generation from tyre and stock state.

Scans a fleet for worn in-use tyres and stock lines at or below their
reorder threshold, and proposes alerts that are not already pending.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from tyretrack.analytics.forecasts import REPLACEMENT_SOON_MM
from tyretrack.models.inputs import TyreStatus
from tyretrack.models.outputs import (
    Alert,
    AlertSeverity,
    AlertType,
    StockItem,
    Tyre,
)


# Legal minimum tread depth (mm); in-use tyres at or below must be replaced
MINIMUM_LEGAL_TREAD_MM = 1.6


@dataclass(frozen=True)
class AlertDraft:
    """An alert to be stored; ids and timestamps are assigned by storage."""
    type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    vehicle_id: Optional[str] = None
    tyre_id: Optional[str] = None
    stock_item_id: Optional[str] = None

    def key(self) -> tuple:
        return (self.type, self.tyre_id, self.vehicle_id, self.stock_item_id, self.title)


def _alert_key(alert: Alert) -> tuple:
    return (alert.type, alert.tyre_id, alert.vehicle_id, alert.stock_item_id, alert.title)


def _tyre_alert(tyre: Tyre) -> Optional[AlertDraft]:
    if tyre.status != TyreStatus.IN_USE:
        return None
    name = f"{tyre.brand} {tyre.model} ({tyre.serial_number})"
    if tyre.tread_depth <= MINIMUM_LEGAL_TREAD_MM:
        return AlertDraft(
            type=AlertType.REPLACEMENT_NEEDED,
            severity=AlertSeverity.CRITICAL,
            title=f"Replace tyre {tyre.serial_number}",
            message=(
                f"{name} is at {tyre.tread_depth:.1f}mm, at or below the "
                f"{MINIMUM_LEGAL_TREAD_MM}mm legal minimum."
            ),
            vehicle_id=tyre.vehicle_id,
            tyre_id=tyre.id,
        )
    if tyre.tread_depth <= REPLACEMENT_SOON_MM:
        return AlertDraft(
            type=AlertType.LOW_TREAD,
            severity=AlertSeverity.WARNING,
            title=f"Low tread on tyre {tyre.serial_number}",
            message=f"{name} is down to {tyre.tread_depth:.1f}mm of tread.",
            vehicle_id=tyre.vehicle_id,
            tyre_id=tyre.id,
        )
    return None


def _stock_alert(item: StockItem) -> Optional[AlertDraft]:
    if not item.is_low:
        return None
    return AlertDraft(
        type=AlertType.LOW_STOCK,
        severity=AlertSeverity.CRITICAL if item.quantity == 0 else AlertSeverity.WARNING,
        title=f"Low stock: {item.brand} {item.model} {item.size}",
        message=(
            f"{item.quantity} on hand, minimum is {item.min_quantity}"
            + (f" ({item.location})" if item.location else "")
            + "."
        ),
        stock_item_id=item.id,
    )


def scan_alerts(
    tyres: Sequence[Tyre],
    stock_items: Sequence[StockItem],
    existing: Sequence[Alert] = (),
) -> list[AlertDraft]:
    """
    Propose alerts for the current fleet state.

    Args:
        tyres: Fleet tyres
        stock_items: Fleet stock lines
        existing: Alerts already stored; unread ones suppress duplicates

    Returns:
        New AlertDrafts, tyre alerts first, in input order
    """
    pending = {_alert_key(a) for a in existing if not a.is_read}
    drafts: list[AlertDraft] = []
    candidates = [_tyre_alert(t) for t in tyres] + [_stock_alert(s) for s in stock_items]
    for draft in candidates:
        if draft is None or draft.key() in pending:
            continue
        pending.add(draft.key())
        drafts.append(draft)
    return drafts
