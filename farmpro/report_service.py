"""Report generation, listing and download pipeline."""

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .aggregator import ReportAggregator
from .database import DatabaseManager
from .date_ranges import current_time, format_iso_date, format_long_date, resolve_date_range
from .exporters import write_report
from .report_content import ReportContent, ReportRecord
from .report_metadata import decode_description, describe_report, encode_description, report_filename
from .report_types import Category, DateRange, ReportFormat

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class ReportNotFoundError(Exception):
    """No stored report has the requested ID."""


@dataclass
class RenderedReport:
    """A rendered download: body bytes plus the HTTP metadata to serve it with."""

    body: bytes
    media_type: str
    filename: str


def build_report_content(
    record: ReportRecord,
    requested_format: Any,
    aggregator: ReportAggregator,
    now: datetime,
    tz_name: Optional[str] = None,
) -> ReportContent:
    """
    Aggregate a stored report into exportable content.

    The stored description supplies the date range and the default format;
    a non-blank ``requested_format`` overrides the latter.

    Args:
        record: Stored report row
        requested_format: Format asked for by the caller, may be None or blank
        aggregator: Aggregator bound to the farm database
        now: Current instant in the server's timezone; also the generation
            date when the stored row has none
        tz_name: Timezone used to render ``generatedOn``

    Returns:
        ReportContent with summary and newest-first records

    Raises:
        AggregationError: if the underlying queries fail
    """
    date_range, stored_format = decode_description(record.description)
    fmt = stored_format
    if requested_format is not None and str(requested_format).strip():
        fmt = ReportFormat.normalize(requested_format)

    category = Category.normalize(record.category)
    start, end = resolve_date_range(date_range, now)
    result = aggregator.aggregate(category, start, end)
    generated = record.last_generated if record.last_generated is not None else now

    return ReportContent(
        id=record.id,
        title=record.title,
        category=category,
        date_range=date_range,
        format=fmt,
        generated_on=format_iso_date(generated, tz_name),
        summary=result.summary,
        records=result.records,
    )


def render_report(report: ReportContent) -> RenderedReport:
    """Render content in its format, with the matching media type and file name."""
    fmt = ReportFormat.normalize(report.format)
    buffer = io.BytesIO()
    write_report(buffer, report)
    return RenderedReport(
        body=buffer.getvalue(),
        media_type=fmt.media_type,
        filename=f"{report_filename(report.title)}.{fmt.extension}",
    )


def default_title(report_type: Category, date_range: DateRange) -> str:
    return f"{report_type.value} Report ({date_range.value})"


class ReportService:
    """Ties the report store, aggregator and exporters together for the API."""

    def __init__(
        self,
        db_manager: DatabaseManager,
        aggregator: Optional[ReportAggregator] = None,
        tz_name: Optional[str] = None,
    ):
        self.db_manager = db_manager
        self.aggregator = aggregator or ReportAggregator(db_manager)
        self.tz_name = tz_name

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else current_time(self.tz_name)

    def create_report(
        self,
        date_range: Any = None,
        report_type: Any = None,
        fmt: Any = None,
        title: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Store a new report request.

        Args:
            date_range: Requested range, normalised
            report_type: Requested category, normalised
            fmt: Requested format, normalised
            title: Optional title; blank titles get a generated one
            now: Override for the current instant

        Returns:
            Dict with id, title, description, category and format
        """
        category = Category.normalize(report_type)
        normalized_range = DateRange.normalize(date_range)
        normalized_format = ReportFormat.normalize(fmt)
        title = (title or "").strip() or default_title(category, normalized_range)
        description = encode_description(category, normalized_range, normalized_format)
        today = self._now(now).date()

        report_id = self.db_manager.create_report(title, description, category.value, today)
        logger.info(f"Created {category.value} report {report_id} ({normalized_range.value}, {normalized_format.value})")
        return {
            "id": report_id,
            "title": title,
            "description": description,
            "category": category.value,
            "format": normalized_format.value,
        }

    def list_reports(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        """
        One page of stored reports, newest first.

        ``page`` is clamped to at least 1 and ``page_size`` to 1..100.

        Returns:
            Dict with items, the clamped page and pageSize, and the total
            report count
        """
        page = max(1, page)
        page_size = min(max(1, page_size), MAX_PAGE_SIZE)
        records = self.db_manager.get_reports(limit=page_size, offset=(page - 1) * page_size)
        items = []
        for record in records:
            date_range, fmt = decode_description(record.description)
            items.append({
                "id": record.id,
                "title": record.title,
                "detail": describe_report(record.category, record.description),
                "category": Category.normalize(record.category).value,
                "dateRange": date_range.value,
                "format": fmt.value,
                "generated": format_long_date(record.last_generated),
            })
        return {"items": items, "page": page, "pageSize": page_size, "total": self.db_manager.count_reports()}

    def monthly_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return self.aggregator.monthly_stats(self._now(now).date())

    def build_report(self, report_id: int, requested_format: Any = None, now: Optional[datetime] = None) -> ReportContent:
        """
        Load a stored report and aggregate its content.

        Raises:
            ReportNotFoundError: if no report has ``report_id``
            AggregationError: if the underlying queries fail
        """
        record = self.db_manager.get_report(report_id)
        if record is None:
            raise ReportNotFoundError(f"Report {report_id} not found")
        return build_report_content(record, requested_format, self.aggregator, self._now(now), self.tz_name)

    def download(self, report_id: int, requested_format: Any = None, now: Optional[datetime] = None) -> RenderedReport:
        """Build and render a stored report for download."""
        report = self.build_report(report_id, requested_format, now)
        rendered = render_report(report)
        logger.info(
            f"Rendered report {report_id} as {report.format.value}: "
            f"{len(report.records)} records, {len(rendered.body)} bytes"
        )
        return rendered
