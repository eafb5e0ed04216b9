"""Minimal single-page PDF writer.

Everything that knows PDF syntax lives here: content-stream operators,
string escaping, object numbering and the cross-reference table. Callers
draw through ``fill_rect``, ``stroke_rect``, ``text`` and ``line``; each call
is also kept in ``operations`` so layouts can be inspected without parsing
the output bytes.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import List, Optional, Tuple

Color = Tuple[float, float, float]

PAGE_WIDTH = 595
PAGE_HEIGHT = 842

# Resource name -> Type1 base font
FONTS = {
    "F1": "Helvetica",
    "F2": "Helvetica-Bold",
}
REGULAR_FONT = "F1"
BOLD_FONT = "F2"


@dataclass(frozen=True)
class DrawOp:
    """One recorded drawing call."""

    kind: str  # fill_rect, stroke_rect, text or line
    x: float
    y: float
    width: float = 0
    height: float = 0
    color: Color = (0.0, 0.0, 0.0)
    text: Optional[str] = None
    font: Optional[str] = None
    size: float = 0
    line_width: float = 0


def pdf_escape(text: str) -> str:
    """Escape a string for use inside a PDF literal ``( ... )``."""
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _num(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _rgb(color: Color) -> str:
    return " ".join(f"{channel:.2f}" for channel in color)


class PDFDocument:
    """A single A4 page assembled from drawing calls."""

    def __init__(self, width: int = PAGE_WIDTH, height: int = PAGE_HEIGHT):
        self.width = width
        self.height = height
        self.operations: List[DrawOp] = []
        self._stream = io.StringIO()

    # ─── Drawing API ─────────────────────────────────────────────────────

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color):
        self.operations.append(DrawOp("fill_rect", x, y, width, height, color=color))
        self._stream.write(f"{_rgb(color)} rg {_num(x)} {_num(y)} {_num(width)} {_num(height)} re f\n")

    def stroke_rect(self, x: float, y: float, width: float, height: float, color: Color, line_width: float = 1):
        self.operations.append(DrawOp("stroke_rect", x, y, width, height, color=color, line_width=line_width))
        self._stream.write(
            f"{_rgb(color)} RG {_num(line_width)} w {_num(x)} {_num(y)} {_num(width)} {_num(height)} re S\n"
        )

    def text(self, x: float, y: float, text: str, size: float, color: Color, bold: bool = False):
        font = BOLD_FONT if bold else REGULAR_FONT
        self.operations.append(DrawOp("text", x, y, color=color, text=text, font=font, size=size))
        self._stream.write(
            f"{_rgb(color)} rg BT /{font} {_num(size)} Tf {_num(x)} {_num(y)} Td ({pdf_escape(text)}) Tj ET\n"
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, color: Color, line_width: float = 1):
        self.operations.append(
            DrawOp("line", x1, y1, x2 - x1, y2 - y1, color=color, line_width=line_width)
        )
        self._stream.write(
            f"{_rgb(color)} RG {_num(line_width)} w {_num(x1)} {_num(y1)} m {_num(x2)} {_num(y2)} l S\n"
        )

    def texts(self) -> List[str]:
        """All text drawn so far, in drawing order."""
        return [op.text for op in self.operations if op.kind == "text"]

    # ─── Serialization ───────────────────────────────────────────────────

    def content_stream(self) -> bytes:
        """The page's drawing operators. Characters outside Latin-1 become ``?``."""
        return self._stream.getvalue().encode("latin-1", errors="replace")

    def _objects(self) -> List[bytes]:
        stream = self.content_stream()
        font_refs = " ".join(f"/{name} {5 + i} 0 R" for i, name in enumerate(FONTS))
        objects = [
            b"<< /Type /Catalog /Pages 2 0 R >>",
            b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {self.width} {self.height}] "
                f"/Contents 4 0 R /Resources << /Font << {font_refs} >> >> >>"
            ).encode("ascii"),
            f"<< /Length {len(stream)} >>\nstream\n".encode("ascii") + stream + b"endstream",
        ]
        for base_font in FONTS.values():
            objects.append(f"<< /Type /Font /Subtype /Type1 /BaseFont /{base_font} >>".encode("ascii"))
        return objects

    def to_bytes(self) -> bytes:
        """
        Serialize the page as a complete PDF file.

        Layout: header, six numbered objects (Catalog, Pages, Page, content
        stream, two fonts), the cross-reference table with byte offsets,
        and a trailer pointing at the Catalog. Ends with ``%%EOF`` and no
        trailing newline.
        """
        objects = self._objects()
        out = io.BytesIO()
        out.write(b"%PDF-1.4\n")

        offsets = []
        for number, body in enumerate(objects, start=1):
            offsets.append(out.tell())
            out.write(f"{number} 0 obj\n".encode("ascii"))
            out.write(body)
            out.write(b"\nendobj\n")

        xref_start = out.tell()
        out.write(f"xref\n0 {len(objects) + 1}\n".encode("ascii"))
        out.write(b"0000000000 65535 f \n")
        for offset in offsets:
            out.write(f"{offset:010d} 00000 n \n".encode("ascii"))
        out.write(f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n".encode("ascii"))
        out.write(f"startxref\n{xref_start}\n".encode("ascii"))
        out.write(b"%%EOF")
        return out.getvalue()
