"""PDF report generator for report downloads."""

import logging
import textwrap
from types import MappingProxyType
from typing import Any, BinaryIO, List, Tuple

from .highlights import HighlightTable, cell_char_budget, generic_widths, shorten_text
from .pdf_document import Color, PDFDocument
from .report_content import ReportContent
from .report_types import Category

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """Writing a rendered report to its output stream failed."""

    def __init__(self, fmt: str, reason: Any):
        self.format = fmt
        super().__init__(f"failed to write {fmt} report: {reason}")


def _scale(color: Color, factor: float) -> Color:
    return tuple(channel * factor for channel in color)


class PDFReportGenerator:
    """Composes a single branded page: banner, snapshot, summary cards and record table."""

    # Banner accent per category
    THEMES = MappingProxyType({
        Category.HEALTH: (0.66, 0.27, 0.24),
        Category.RESOURCES: (0.31, 0.40, 0.18),
        Category.SALES: (0.12, 0.34, 0.48),
        Category.FINANCIAL: (0.14, 0.45, 0.30),
    })

    COLORS = {
        "page_bg": (0.95, 0.94, 0.91),
        "lower_band": (0.91, 0.90, 0.86),
        "white": (1.0, 1.0, 1.0),
        "banner_subtitle": (0.92, 0.96, 0.94),
        "panel_bg": (0.98, 0.98, 0.97),
        "summary_bg": (0.99, 0.98, 0.96),
        "panel_border": (0.86, 0.84, 0.79),
        "heading": (0.18, 0.20, 0.18),
        "text_primary": (0.24, 0.26, 0.24),
        "text_muted": (0.30, 0.32, 0.30),
        "meta_text": (0.20, 0.22, 0.20),
        "card_bg": (0.97, 0.96, 0.93),
        "table_header_bg": (0.94, 0.94, 0.92),
        "row_even": (0.98, 0.97, 0.95),
        "row_odd": (0.96, 0.95, 0.92),
        "row_border": (0.88, 0.86, 0.82),
        "footer_text": (0.94, 0.96, 0.94),
    }

    # Panel geometry (x, y, width, height) in points, origin bottom-left
    SNAPSHOT_PANEL = (36, 610, 523, 132)
    SUMMARY_PANEL = (36, 466, 523, 128)
    HIGHLIGHTS_PANEL = (36, 48, 523, 402)

    META_WRAP = 78
    META_LINE_STEP = 14
    META_MIN_Y = 622

    CARD_WIDTH = 161
    CARD_HEIGHT = 30
    CARD_COLUMNS = (50, 216, 382)
    CARD_ROWS = (538, 500)
    CARD_LABEL_CHARS = 26
    CARD_VALUE_CHARS = 24

    TABLE_X = 50
    TABLE_HEADER_Y = 406
    ROW_START_Y = 390
    ROW_HEIGHT = 22
    ROW_MIN_Y = 70
    HEADER_CHARS = 22

    def generate(self, report: ReportContent, summary_lines: List[str], table: HighlightTable) -> bytes:
        """
        Render a report as PDF bytes.

        Args:
            report: Aggregated report content
            summary_lines: ``"Label: value"`` lines, in display order
            table: Highlight rows for the record panel

        Returns:
            Complete PDF file as bytes
        """
        doc = PDFDocument()
        accent = self._accent(report.category)

        self._build_background(doc)
        self._build_banner(doc, report, accent)
        self._build_snapshot(doc, report)
        self._build_summary_cards(doc, summary_lines, accent)
        self._build_highlights(doc, table, accent)
        self._build_footer(doc, report, accent)

        pdf_bytes = doc.to_bytes()
        logger.info(f"Rendered PDF for report {report.id}: {len(pdf_bytes)} bytes")
        return pdf_bytes

    def _accent(self, category) -> Color:
        return self.THEMES.get(Category.normalize(category), self.THEMES[Category.FINANCIAL])

    def _build_background(self, doc: PDFDocument):
        doc.fill_rect(0, 0, doc.width, doc.height, self.COLORS["page_bg"])
        doc.fill_rect(0, 0, doc.width, 220, self.COLORS["lower_band"])

    def _build_banner(self, doc: PDFDocument, report: ReportContent, accent: Color):
        doc.fill_rect(0, 758, doc.width, 84, accent)
        doc.fill_rect(0, 742, doc.width, 16, _scale(accent, 0.85))
        doc.text(48, 806, "FarmPro Report", 24, self.COLORS["white"], bold=True)
        doc.text(48, 786, "Operational export summary", 10, self.COLORS["banner_subtitle"])
        doc.text(435, 806, f"Report #{report.id}", 10, self.COLORS["white"])

    def _build_panel(self, doc: PDFDocument, rect: Tuple[int, int, int, int], fill: Color):
        x, y, width, height = rect
        doc.fill_rect(x, y, width, height, fill)
        doc.stroke_rect(x, y, width, height, self.COLORS["panel_border"], 1)

    def _build_snapshot(self, doc: PDFDocument, report: ReportContent):
        x, y, width, height = self.SNAPSHOT_PANEL
        self._build_panel(doc, self.SNAPSHOT_PANEL, self.COLORS["panel_bg"])
        doc.fill_rect(x, y, 6, height, self._accent(report.category))
        doc.text(50, 722, "Report Snapshot", 13, self.COLORS["heading"], bold=True)

        meta = [
            f"Title: {report.title}",
            f"Category: {report.category.value}",
            f"Date Range: {report.date_range.value}",
            f"Generated On: {report.generated_on}",
        ]
        line_y = 703
        for entry in meta:
            for line in wrap_text(entry, self.META_WRAP):
                # Lines that would spill below the panel are dropped
                if line_y < self.META_MIN_Y:
                    return
                doc.text(50, line_y, line, 10, self.COLORS["meta_text"])
                line_y -= self.META_LINE_STEP

    def _build_summary_cards(self, doc: PDFDocument, summary_lines: List[str], accent: Color):
        x, y, width, height = self.SUMMARY_PANEL
        self._build_panel(doc, self.SUMMARY_PANEL, self.COLORS["summary_bg"])
        doc.fill_rect(x, y + height - 8, width, 8, accent)
        doc.text(50, 574, "Summary Metrics", 13, self.COLORS["heading"], bold=True)

        if not summary_lines:
            doc.text(52, 526, "No summary metrics available.", 10, self.COLORS["text_muted"])
            return

        max_cards = len(self.CARD_COLUMNS) * len(self.CARD_ROWS)
        for index, line in enumerate(summary_lines[:max_cards]):
            card_x = self.CARD_COLUMNS[index % len(self.CARD_COLUMNS)]
            card_y = self.CARD_ROWS[index // len(self.CARD_COLUMNS)]
            label, _, value = line.partition(": ")
            doc.fill_rect(card_x, card_y, self.CARD_WIDTH, self.CARD_HEIGHT, self.COLORS["card_bg"])
            doc.stroke_rect(card_x, card_y, self.CARD_WIDTH, self.CARD_HEIGHT, self.COLORS["panel_border"], 0.8)
            doc.text(
                card_x + 8, card_y + 18,
                shorten_text(label.upper(), self.CARD_LABEL_CHARS),
                8, self.COLORS["text_muted"],
            )
            doc.text(
                card_x + 8, card_y + 7,
                shorten_text(value, self.CARD_VALUE_CHARS),
                10, _scale(accent, 0.9), bold=True,
            )

    def _build_highlights(self, doc: PDFDocument, table: HighlightTable, accent: Color):
        x, y, width, height = self.HIGHLIGHTS_PANEL
        self._build_panel(doc, self.HIGHLIGHTS_PANEL, self.COLORS["panel_bg"])
        doc.fill_rect(x, y + height - 8, width, 8, accent)
        doc.text(50, 430, "Record Highlights", 13, self.COLORS["heading"], bold=True)

        widths = list(table.widths)
        if len(widths) != len(table.headers):
            widths = generic_widths(len(table.headers))
        table_width = sum(widths)

        doc.fill_rect(self.TABLE_X, self.TABLE_HEADER_Y, table_width, 20, self.COLORS["table_header_bg"])
        for header, cell_x in zip(table.headers, self._column_offsets(widths)):
            doc.text(
                cell_x, self.TABLE_HEADER_Y + 6,
                shorten_text(header, self.HEADER_CHARS),
                8, self.COLORS["text_muted"], bold=True,
            )

        row_y = self.ROW_START_Y
        for index, row in enumerate(table.rows):
            if row_y < self.ROW_MIN_Y:
                break
            shade = self.COLORS["row_even"] if index % 2 == 0 else self.COLORS["row_odd"]
            doc.fill_rect(self.TABLE_X, row_y - 4, table_width, self.ROW_HEIGHT, shade)
            doc.stroke_rect(self.TABLE_X, row_y - 4, table_width, self.ROW_HEIGHT, self.COLORS["row_border"], 0.3)
            for cell, cell_x, cell_width in zip(row, self._column_offsets(widths), widths):
                doc.text(
                    cell_x, row_y + 5,
                    shorten_text(cell, cell_char_budget(cell_width)),
                    7, self.COLORS["text_primary"],
                )
            row_y -= self.ROW_HEIGHT

        if table.overflow_note:
            doc.text(58, 60, table.overflow_note, 8, self.COLORS["text_muted"])

    def _column_offsets(self, widths: List[int]) -> List[int]:
        offsets = []
        cell_x = self.TABLE_X + 8
        for width in widths:
            offsets.append(cell_x)
            cell_x += width
        return offsets

    def _build_footer(self, doc: PDFDocument, report: ReportContent, accent: Color):
        doc.fill_rect(0, 0, doc.width, 28, _scale(accent, 0.9))
        doc.text(48, 11, "Generated by FarmPro Analytics Engine", 9, self.COLORS["footer_text"])
        doc.text(430, 11, report.generated_on, 9, self.COLORS["footer_text"])


def wrap_text(text: str, width: int) -> List[str]:
    """Greedy word wrap; words longer than ``width`` are split. Always returns at least one line."""
    lines = textwrap.wrap(text, width=width, break_long_words=True, break_on_hyphens=False)
    return lines or [""]


def write_pdf(stream: BinaryIO, report: ReportContent, summary_lines: List[str], table: HighlightTable) -> int:
    """
    Render ``report`` and write the PDF to ``stream``.

    Returns:
        Number of bytes written

    Raises:
        RenderError: if the stream rejects the write
    """
    pdf_bytes = PDFReportGenerator().generate(report, summary_lines, table)
    try:
        stream.write(pdf_bytes)
    except OSError as e:
        raise RenderError("PDF", e) from e
    return len(pdf_bytes)
