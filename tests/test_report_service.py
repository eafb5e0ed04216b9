"""Tests for the report generation, listing and download pipeline."""

import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from farmpro.aggregator import AggregationError
from farmpro.report_content import ReportRecord
from farmpro.report_service import (
    ReportNotFoundError,
    build_report_content,
    default_title,
    render_report,
)
from farmpro.report_types import Category, DateRange, ReportFormat


class TestCreateReport:
    """Tests for ReportService.create_report."""

    def test_values_are_normalized(self, report_service, fixed_now):
        report = report_service.create_report("last 30 days", "sales", "pdf", "", now=fixed_now)
        assert report["title"] == "Sales Report (Last 30 days)"
        assert report["category"] == "Sales"
        assert report["format"] == "PDF"
        assert report["description"] == "Generated sales report | range=Last 30 days | format=PDF"

        stored = report_service.db_manager.get_report(report["id"])
        assert stored.last_generated == date(2026, 3, 15)

    def test_unknown_values_fall_back(self, report_service, fixed_now):
        report = report_service.create_report("Forever", "Breeding", "docx", None, now=fixed_now)
        assert report["title"] == default_title(Category.FINANCIAL, DateRange.LAST_7_DAYS)
        assert report["format"] == "JSON"

    def test_custom_title_is_trimmed(self, report_service, fixed_now):
        report = report_service.create_report(title="  Herd check  ", now=fixed_now)
        assert report["title"] == "Herd check"


class TestListReports:
    """Tests for ReportService.list_reports."""

    def test_newest_first_with_detail(self, report_service, seeded_db):
        seeded_db.create_report("Old", "Generated health report for This month (CSV)", "Health", date(2026, 3, 1))
        seeded_db.create_report(
            "New", "Generated sales report | range=Last 30 days | format=PDF", "Sales", date(2026, 3, 14)
        )
        listing = report_service.list_reports(page=1, page_size=10)
        items = listing["items"]
        assert listing["total"] == 2
        assert [item["title"] for item in items] == ["New", "Old"]
        assert items[0] == {
            "id": items[0]["id"],
            "title": "New",
            "detail": "Generated sales report for Last 30 days (PDF)",
            "category": "Sales",
            "dateRange": "Last 30 days",
            "format": "PDF",
            "generated": "14 March 2026",
        }
        assert items[1]["format"] == "CSV"

    def test_pagination_and_clamping(self, report_service, seeded_db):
        for day in range(1, 6):
            seeded_db.create_report(f"R{day}", "", "Financial", date(2026, 3, day))
        listing = report_service.list_reports(page=2, page_size=2)
        assert listing["total"] == 5
        assert [item["title"] for item in listing["items"]] == ["R3", "R2"]

        listing = report_service.list_reports(page=0, page_size=0)
        assert (listing["page"], listing["pageSize"]) == (1, 1)
        assert [item["title"] for item in listing["items"]] == ["R5"]

        listing = report_service.list_reports(page=1, page_size=500)
        assert listing["pageSize"] == 100
        assert len(listing["items"]) == 5


class TestBuildReportContent:
    """Tests for build_report_content."""

    def test_requested_format_overrides_stored(self, aggregator, fixed_now):
        record = ReportRecord(1, "Weekly", "Generated financial report | range=Last 7 days | format=PDF", "Financial")
        assert build_report_content(record, "csv", aggregator, fixed_now).format is ReportFormat.CSV

    @pytest.mark.parametrize("requested", [None, "", "   "])
    def test_blank_format_uses_stored(self, aggregator, fixed_now, requested):
        record = ReportRecord(1, "Weekly", "Generated financial report | range=Last 7 days | format=PDF", "Financial")
        assert build_report_content(record, requested, aggregator, fixed_now).format is ReportFormat.PDF

    def test_malformed_description_uses_defaults(self, aggregator, fixed_now):
        record = ReportRecord(1, "Odd", "something unexpected", "nonsense")
        report = build_report_content(record, None, aggregator, fixed_now)
        assert report.category is Category.FINANCIAL
        assert report.date_range is DateRange.LAST_7_DAYS
        assert report.format is ReportFormat.JSON

    def test_generated_on_falls_back_to_now(self, aggregator, fixed_now):
        record = ReportRecord(1, "Weekly", "Generated financial report | range=Last 7 days | format=CSV", "Financial")
        assert build_report_content(record, None, aggregator, fixed_now).generated_on == "2026-03-15"

    def test_window_passed_to_aggregator(self, fixed_now):
        aggregator = MagicMock()
        record = ReportRecord(3, "Monthly", "Generated sales report | range=This month | format=JSON", "Sales")
        build_report_content(record, None, aggregator, fixed_now, "Africa/Nairobi")
        aggregator.aggregate.assert_called_once_with(Category.SALES, date(2026, 3, 1), date(2026, 3, 15))


class TestDownload:
    """Tests for ReportService.download and the end-to-end financial scenario."""

    def test_financial_last_7_days_end_to_end(self, report_service, fixed_now):
        created = report_service.create_report("Last 7 days", "Financial", "CSV", "Weekly Finance", now=fixed_now)

        report = report_service.build_report(created["id"], now=fixed_now)
        assert report.summary["profit"] == report.summary["netRevenue"] - 30
        assert [r.date for r in report.records] == ["2026-03-15", "2026-03-14", "2026-03-13"]
        assert [r.type for r in report.records] == ["sale", "sale", "expense"]

        rendered = report_service.download(created["id"], now=fixed_now)
        assert rendered.media_type == "text/csv; charset=utf-8"
        assert rendered.filename == "weekly-finance.csv"
        lines = rendered.body.decode("utf-8").splitlines()
        assert lines[:5] == [
            f"report_id,{created['id']}",
            "title,Weekly Finance",
            "category,Financial",
            "date_range,Last 7 days",
            "generated_on,2026-03-15",
        ]

    def test_generated_on_is_the_stored_date(self, report_service, seeded_db, fixed_now):
        report_id = seeded_db.create_report(
            "March", "Generated financial report | range=This month | format=CSV", "Financial", date(2026, 3, 1)
        )
        assert report_service.build_report(report_id, now=fixed_now).generated_on == "2026-03-01"

        lines = report_service.download(report_id, now=fixed_now).body.decode("utf-8").splitlines()
        assert lines[4] == "generated_on,2026-03-01"

    def test_pdf_download(self, report_service, fixed_now):
        created = report_service.create_report("This month", "Resources", "PDF", "March Output", now=fixed_now)
        rendered = report_service.download(created["id"], now=fixed_now)
        assert rendered.media_type == "application/pdf"
        assert rendered.filename == "march-output.pdf"
        assert rendered.body.startswith(b"%PDF-1.4\n")
        assert rendered.body.endswith(b"%%EOF")

    def test_json_download_override(self, report_service, fixed_now):
        created = report_service.create_report("Last 7 days", "Health", "PDF", "Herd", now=fixed_now)
        rendered = report_service.download(created["id"], "json", now=fixed_now)
        data = json.loads(rendered.body)
        assert data["format"] == "JSON"
        assert data["summary"] == {"healthy": 2, "attention": 1, "sick": 1}
        assert len(data["records"]) == 2

    def test_unknown_report(self, report_service, fixed_now):
        with pytest.raises(ReportNotFoundError):
            report_service.download(999, now=fixed_now)

    def test_aggregation_failure_propagates(self, report_service, fixed_now):
        created = report_service.create_report(now=fixed_now)
        report_service.aggregator = MagicMock()
        report_service.aggregator.aggregate.side_effect = AggregationError("timed out")
        with pytest.raises(AggregationError):
            report_service.download(created["id"], now=fixed_now)


class TestRenderReport:
    """Tests for render_report."""

    def test_untitled_report_filename(self, make_report):
        rendered = render_report(make_report(title="", fmt=ReportFormat.JSON))
        assert rendered.filename == "report.json"
        assert rendered.media_type == "application/json"
