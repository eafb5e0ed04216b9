"""Encoding and decoding of the stored report description field.

A report row keeps its date range and format inside the free-text
``description`` column. New rows use a pipe-delimited form::

    Generated financial report | range=Last 30 days | format=PDF

Older rows were written as prose::

    Generated financial report for Last 30 days (PDF)

Both forms decode to the same ``(DateRange, ReportFormat)`` pair, and
anything unrecognisable decodes to the defaults instead of failing.
"""

from __future__ import annotations

import re
from typing import Any, Tuple

from .report_types import Category, DateRange, ReportFormat

_RANGE_MARKER = "| range="
_RANGE_KEY = "range="
_FORMAT_KEY = "format="
_LEGACY_SEPARATOR = " for "

_FILENAME_DISALLOWED = re.compile(r"[^a-z0-9-]")


def encode_description(category: Any, date_range: Any, fmt: Any) -> str:
    """Build the canonical description stored alongside a generated report."""
    category = Category.normalize(category)
    date_range = DateRange.normalize(date_range)
    fmt = ReportFormat.normalize(fmt)
    return (
        f"Generated {category.value.lower()} report"
        f" | range={date_range.value} | format={fmt.value}"
    )


def decode_description(description: Any) -> Tuple[DateRange, ReportFormat]:
    """
    Extract the date range and format from a stored description.

    Args:
        description: Canonical or legacy description text (may be empty)

    Returns:
        Tuple of (DateRange, ReportFormat), defaults where nothing matched
    """
    date_range = DateRange.LAST_7_DAYS
    fmt = ReportFormat.JSON
    desc = str(description or "").strip()
    if not desc:
        return date_range, fmt

    if _RANGE_MARKER in desc.lower():
        for part in desc.split("|"):
            segment = part.strip()
            lowered = segment.lower()
            if lowered.startswith(_RANGE_KEY):
                date_range = DateRange.normalize(segment[len(_RANGE_KEY):])
            elif lowered.startswith(_FORMAT_KEY):
                fmt = ReportFormat.normalize(segment[len(_FORMAT_KEY):])
        return date_range, fmt

    open_paren = desc.rfind("(")
    if open_paren >= 0 and desc.endswith(")") and open_paren < len(desc) - 1:
        fmt = ReportFormat.normalize(desc[open_paren + 1:-1])

    marker = desc.lower().find(_LEGACY_SEPARATOR)
    if marker >= 0:
        rest = desc[marker + len(_LEGACY_SEPARATOR):].strip()
        suffix = rest.rfind(" (")
        if suffix > 0:
            rest = rest[:suffix].strip()
        date_range = DateRange.normalize(rest)

    return date_range, fmt


def describe_report(category: Any, description: Any) -> str:
    """Human-readable detail line shown in the report listing."""
    date_range, fmt = decode_description(description)
    category = Category.normalize(category)
    return f"Generated {category.value.lower()} report for {date_range.value} ({fmt.value})"


def report_filename(title: Any) -> str:
    """Slug used as the download file name (without extension)."""
    base = str(title or "").strip().lower().replace(" ", "-")
    base = _FILENAME_DISALLOWED.sub("", base)
    return base or "report"
