"""
Fleet analytics: tread and cost forecasts, alert scanning, unit helpers.
"""

from tyretrack.analytics.units import ureg, Q_, mm_to_32nds, psi_to_kpa, kpa_to_psi
from tyretrack.analytics.forecasts import (
    REPLACEMENT_SOON_MM,
    ESTIMATED_REPLACEMENT_COST,
    tread_condition,
    tread_distribution,
    needs_replacement_soon,
    build_forecast,
)
from tyretrack.analytics.alerts import AlertDraft, MINIMUM_LEGAL_TREAD_MM, scan_alerts

__all__ = [
    "ureg",
    "Q_",
    "mm_to_32nds",
    "psi_to_kpa",
    "kpa_to_psi",
    "REPLACEMENT_SOON_MM",
    "ESTIMATED_REPLACEMENT_COST",
    "tread_condition",
    "tread_distribution",
    "needs_replacement_soon",
    "build_forecast",
    "AlertDraft",
    "MINIMUM_LEGAL_TREAD_MM",
    "scan_alerts",
]
