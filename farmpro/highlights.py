"""Fixed-column "record highlights" table shown on the PDF report."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Optional, Tuple

from .report_types import Category

# Width of the record table inside the "Record Highlights" panel, in points
TABLE_WIDTH = 496
INDEX_COLUMN_WIDTH = 24
MAX_HIGHLIGHT_ROWS = 12
EMPTY_RECORDS_MESSAGE = "No records available in this range."


@dataclass(frozen=True)
class ColumnSchema:
    headers: Tuple[str, ...]
    widths: Tuple[int, ...]


GENERIC_SCHEMA = ColumnSchema(headers=("#", "Details"), widths=(INDEX_COLUMN_WIDTH, TABLE_WIDTH - INDEX_COLUMN_WIDTH))

COLUMN_SCHEMAS = MappingProxyType({
    Category.FINANCIAL: ColumnSchema(("#", "Date", "Type", "Item", "Amount"), (26, 82, 62, 230, 96)),
    Category.SALES: ColumnSchema(("#", "Date", "Product", "Qty", "Buyer", "Total"), (24, 70, 118, 72, 134, 78)),
    Category.RESOURCES: ColumnSchema(("#", "Date", "Milk (L)", "Eggs", "Wool (Kg)", "Value"), (24, 70, 100, 76, 100, 126)),
    Category.HEALTH: ColumnSchema(("#", "Date", "Tag", "Action", "Treatment", "Vet"), (24, 66, 64, 88, 142, 112)),
})


@dataclass
class HighlightTable:
    headers: List[str]
    widths: List[int]
    rows: List[List[str]] = field(default_factory=list)
    overflow_note: str = ""


def shorten_text(text: Any, max_chars: int) -> str:
    """Trim ``text`` to ``max_chars``, replacing the tail with ``...`` when it is cut."""
    value = str(text if text is not None else "").strip()
    if max_chars <= 3 or len(value) <= max_chars:
        return value
    return value[:max_chars - 3] + "..."


def cell_char_budget(width: int) -> int:
    """Approximate characters that fit a column: about 4pt per glyph after 10pt of padding."""
    return max(6, (width - 10) // 4)


def generic_widths(column_count: int) -> List[int]:
    """Index column plus the remaining table width split evenly."""
    if column_count <= 2:
        return list(GENERIC_SCHEMA.widths)
    each = (TABLE_WIDTH - INDEX_COLUMN_WIDTH) // (column_count - 1)
    return [INDEX_COLUMN_WIDTH] + [each] * (column_count - 1)


def column_schema(category: Optional[Category]) -> ColumnSchema:
    """Column headers and widths for a category; the generic layout otherwise."""
    return COLUMN_SCHEMAS.get(category, GENERIC_SCHEMA)


def _generic_details(record) -> str:
    data = record.to_dict() if hasattr(record, "to_dict") else dict(record)
    return " | ".join(f"{key}={data[key]}" for key in sorted(data))


def build_highlights(report) -> HighlightTable:
    """
    Project a report's records onto the category's fixed column layout.

    Only the first ``MAX_HIGHLIGHT_ROWS`` records are kept; the rest are
    counted in the overflow note. Every cell is truncated to its column.

    Args:
        report: ReportContent with newest-first records

    Returns:
        HighlightTable with headers, widths, rows and overflow note
    """
    if not report.records:
        return HighlightTable(
            headers=list(GENERIC_SCHEMA.headers),
            widths=list(GENERIC_SCHEMA.widths),
            rows=[["1", EMPTY_RECORDS_MESSAGE]],
        )

    category = report.category if isinstance(report.category, Category) else None
    schema = column_schema(category)
    widths = list(schema.widths)

    shown = report.records[:MAX_HIGHLIGHT_ROWS]
    rows = []
    for index, record in enumerate(shown, start=1):
        if schema is GENERIC_SCHEMA:
            cells = [_generic_details(record)]
        else:
            cells = record.display_columns()
        row = [str(index)] + [str(cell) for cell in cells]
        rows.append([
            shorten_text(cell, cell_char_budget(widths[i] if i < len(widths) else widths[-1]))
            for i, cell in enumerate(row)
        ])

    overflow_note = ""
    hidden = len(report.records) - len(shown)
    if hidden > 0:
        overflow_note = f"{hidden} additional records not shown."

    return HighlightTable(headers=list(schema.headers), widths=widths, rows=rows, overflow_note=overflow_note)
