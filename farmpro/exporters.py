"""CSV and JSON renderings of a report, plus the format dispatch for downloads."""

import csv
import io
import json
import logging
from typing import BinaryIO

from .formatting import build_summary_lines, plain_value
from .highlights import build_highlights
from .pdf_report import PDFReportGenerator, RenderError, write_pdf
from .report_content import ReportContent
from .report_types import ReportFormat

logger = logging.getLogger(__name__)


def export_csv(report: ReportContent) -> bytes:
    """
    Render a report as CSV.

    Layout: a key/value block with the report metadata, a blank row, the
    sorted summary pairs under a ``summary_key,summary_value`` header, a
    blank row, then the records with the first record's keys (sorted) as
    the header. An empty report ends with the row ``records,none``.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")

    writer.writerow(["report_id", report.id])
    writer.writerow(["title", report.title])
    writer.writerow(["category", report.category.value])
    writer.writerow(["date_range", report.date_range.value])
    writer.writerow(["generated_on", report.generated_on])
    writer.writerow([])

    writer.writerow(["summary_key", "summary_value"])
    for key in sorted(report.summary):
        writer.writerow([key, plain_value(report.summary[key])])
    writer.writerow([])

    if not report.records:
        writer.writerow(["records", "none"])
    else:
        rows = [record.to_dict() for record in report.records]
        headers = sorted(rows[0])
        writer.writerow(headers)
        for row in rows:
            writer.writerow([plain_value(row.get(header)) for header in headers])

    return output.getvalue().encode("utf-8")


def export_json(report: ReportContent) -> bytes:
    """Render a report as a JSON document."""
    return json.dumps(report.to_dict(), default=str).encode("utf-8")


def export_pdf(report: ReportContent) -> bytes:
    return PDFReportGenerator().generate(report, build_summary_lines(report), build_highlights(report))


_EXPORTERS = {
    ReportFormat.PDF: export_pdf,
    ReportFormat.CSV: export_csv,
    ReportFormat.JSON: export_json,
}


def render(report: ReportContent) -> bytes:
    """Render a report in its own ``format``."""
    return _EXPORTERS[ReportFormat.normalize(report.format)](report)


def write_report(stream: BinaryIO, report: ReportContent) -> int:
    """
    Render ``report`` in its format and write it to ``stream``.

    Returns:
        Number of bytes written

    Raises:
        RenderError: if the stream rejects the write
    """
    fmt = ReportFormat.normalize(report.format)
    if fmt is ReportFormat.PDF:
        written = write_pdf(stream, report, build_summary_lines(report), build_highlights(report))
    else:
        body = render(report)
        try:
            stream.write(body)
        except OSError as e:
            raise RenderError(fmt.value, e) from e
        written = len(body)
    logger.info(f"Wrote {fmt.value} report {report.id} ({written} bytes)")
    return written
