"""Tests for the report category, date range and format vocabularies."""

import pytest

from farmpro.report_types import Category, DateRange, ReportFormat


class TestCategory:
    """Tests for Category.normalize."""

    @pytest.mark.parametrize("raw,expected", [
        ("Financial", Category.FINANCIAL),
        ("health", Category.HEALTH),
        ("  RESOURCES ", Category.RESOURCES),
        ("Sales", Category.SALES),
    ])
    def test_known_values_case_insensitive(self, raw, expected):
        assert Category.normalize(raw) is expected

    @pytest.mark.parametrize("raw", ["", None, "Breeding", "fin"])
    def test_unknown_values_default_to_financial(self, raw):
        assert Category.normalize(raw) is Category.FINANCIAL

    def test_member_passes_through(self):
        assert Category.normalize(Category.SALES) is Category.SALES


class TestDateRange:
    """Tests for DateRange.normalize."""

    def test_known_values(self):
        assert DateRange.normalize("last 30 days") is DateRange.LAST_30_DAYS
        assert DateRange.normalize("This Month") is DateRange.THIS_MONTH

    @pytest.mark.parametrize("raw", ["", None, "Last 90 days", "yesterday"])
    def test_unknown_values_default_to_last_7_days(self, raw):
        assert DateRange.normalize(raw) is DateRange.LAST_7_DAYS


class TestReportFormat:
    """Tests for ReportFormat.normalize and its file metadata."""

    def test_known_values(self):
        assert ReportFormat.normalize("pdf") is ReportFormat.PDF
        assert ReportFormat.normalize(" Csv ") is ReportFormat.CSV

    @pytest.mark.parametrize("raw", ["", None, "xlsx", "PDFX"])
    def test_unknown_values_default_to_json(self, raw):
        assert ReportFormat.normalize(raw) is ReportFormat.JSON

    def test_media_types(self):
        assert ReportFormat.PDF.media_type == "application/pdf"
        assert ReportFormat.CSV.media_type == "text/csv; charset=utf-8"
        assert ReportFormat.JSON.media_type == "application/json"

    def test_extension_is_lowercase(self):
        assert ReportFormat.CSV.extension == "csv"
