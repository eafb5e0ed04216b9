"""Display formatting shared by the PDF, CSV and JSON exports."""

from __future__ import annotations

import math
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Iterable, List, Optional

from .report_types import Category

CURRENCY_PREFIX = "KSh"

CURRENCY_KEYS = frozenset({
    "grossrevenue",
    "netrevenue",
    "profit",
    "totalexpenses",
    "totalrevenue",
    "vatcollected",
    "totalvalue",
    "amount",
    "totalamount",
    "netamount",
    "vatamount",
    "priceperunit",
})

COUNT_KEYS = frozenset({"transactions", "healthy", "attention", "sick", "eggscount"})

# Summary metrics listed first for each category; anything else follows alphabetically
SUMMARY_PRIORITY = MappingProxyType({
    Category.FINANCIAL: ("grossRevenue", "netRevenue", "profit", "totalExpenses", "totalRevenue", "vatCollected"),
    Category.SALES: ("grossRevenue", "netRevenue", "totalRevenue", "vatCollected", "transactions"),
    Category.RESOURCES: ("totalValue", "milkLiters", "eggsCount", "woolKg"),
    Category.HEALTH: ("healthy", "attention", "sick"),
})

METRIC_LABELS = MappingProxyType({
    "grossRevenue": "Gross Revenue",
    "netRevenue": "Net Revenue",
    "profit": "Profit",
    "totalExpenses": "Total Expenses",
    "totalRevenue": "Total Revenue",
    "vatCollected": "VAT Collected",
    "transactions": "Transactions",
    "milkLiters": "Milk (Liters)",
    "eggsCount": "Eggs Count",
    "woolKg": "Wool (Kg)",
    "totalValue": "Total Value",
    "healthy": "Healthy Animals",
    "attention": "Needs Attention",
    "sick": "Sick Animals",
})


def as_number(value: Any) -> Optional[float]:
    """Return ``value`` as a float if it is numeric, else None. Booleans are not numbers here."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    return None


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def trim_zero(value: float) -> str:
    """Integral values print without decimals, everything else with exactly two."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return f"{value:.2f}"


def format_currency(value: Any) -> str:
    number = as_number(value)
    if number is None:
        return plain_value(value)
    return f"{CURRENCY_PREFIX} {trim_zero(number)}"


def format_number(value: Any) -> str:
    number = as_number(value)
    if number is None:
        return plain_value(value)
    return trim_zero(number)


def format_count(value: Any) -> str:
    number = as_number(value)
    if number is None:
        return plain_value(value)
    return str(round_half_away(number))


def plain_value(value: Any) -> str:
    """Raw value as text, the way it appears in CSV cells."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value == int(value):
        return str(int(value))
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return str(int(value))
    return str(value)


def format_value(key: str, value: Any) -> str:
    """
    Format a summary or record value for display.

    Args:
        key: Metric or field name; decides the currency/count/number class
        value: Raw value from the aggregation

    Returns:
        Display string
    """
    normalized_key = (key or "").strip().lower()
    if normalized_key in CURRENCY_KEYS:
        return format_currency(value)
    if normalized_key in COUNT_KEYS:
        return format_count(value)
    # milkLiters, woolKg and unknown keys share the plain trim rule
    return format_number(value)


def metric_label(key: str) -> str:
    """Human label for a summary metric."""
    if not key:
        return "Metric"
    return METRIC_LABELS.get(key, key)


def ordered_summary_keys(category: Any, keys: Iterable[str]) -> List[str]:
    """Order summary keys by the category's priority list, then alphabetically."""
    remaining = sorted(keys)
    priority = SUMMARY_PRIORITY.get(Category.normalize(category), ())
    ordered = [key for key in priority if key in remaining]
    ordered.extend(key for key in remaining if key not in ordered)
    return ordered


def build_summary_lines(report) -> List[str]:
    """``"Label: value"`` lines for the summary metrics panel, in display order."""
    return [
        f"{metric_label(key)}: {format_value(key, report.summary[key])}"
        for key in ordered_summary_keys(report.category, report.summary.keys())
    ]
