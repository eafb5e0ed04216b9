"""Closed vocabularies for report category, date range and export format."""

from __future__ import annotations

from enum import Enum
from typing import Any


class Category(str, Enum):
    """Report category; decides which aggregate queries run."""

    FINANCIAL = "Financial"
    HEALTH = "Health"
    RESOURCES = "Resources"
    SALES = "Sales"

    @classmethod
    def normalize(cls, value: Any) -> "Category":
        """Map free text onto a category, defaulting to Financial."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.FINANCIAL


class DateRange(str, Enum):
    """Symbolic report window, resolved to concrete dates at render time."""

    LAST_7_DAYS = "Last 7 days"
    LAST_30_DAYS = "Last 30 days"
    THIS_MONTH = "This month"

    @classmethod
    def normalize(cls, value: Any) -> "DateRange":
        """Map free text onto a date range, defaulting to the last 7 days."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.LAST_7_DAYS


class ReportFormat(str, Enum):
    """Download format."""

    PDF = "PDF"
    CSV = "CSV"
    JSON = "JSON"

    @classmethod
    def normalize(cls, value: Any) -> "ReportFormat":
        """Map free text onto a format, defaulting to JSON."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().upper()
        for member in cls:
            if member.value == text:
                return member
        return cls.JSON

    @property
    def extension(self) -> str:
        return self.value.lower()

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]


_MEDIA_TYPES = {
    ReportFormat.PDF: "application/pdf",
    ReportFormat.CSV: "text/csv; charset=utf-8",
    ReportFormat.JSON: "application/json",
}
