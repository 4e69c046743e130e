"""PDF writer for report exports (reportlab platypus)."""

from __future__ import annotations

import logging
from datetime import datetime
from io import BytesIO
from typing import Any, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape, portrait
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .models import ReportRow
from .report_rows import REPORT_COLUMNS, row_values

LOGGER = logging.getLogger(__name__)

EMPTY_MESSAGE = "Tidak ada data"
ORIENTATIONS = ("landscape", "portrait")

# Relative widths of the nine report columns.
_COLUMN_WEIGHTS = (0.5, 1.3, 2.4, 1.3, 1.0, 1.0, 1.0, 1.3, 1.2)

_TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#D9E1F2")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("ALIGN", (0, 1), (0, -1), "RIGHT"),
        ("ALIGN", (4, 1), (4, -1), "RIGHT"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F5F5F5")]),
    ]
)


def _page_size(orientation: str) -> tuple[float, float]:
    if orientation not in ORIENTATIONS:
        raise ValueError(f"Unknown PDF orientation '{orientation}'")
    return landscape(A4) if orientation == "landscape" else portrait(A4)


def _footer(canvas: Any, doc: Any) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.drawRightString(
        doc.pagesize[0] - doc.rightMargin,
        doc.bottomMargin / 2,
        f"Halaman {doc.page}",
    )
    canvas.restoreState()


def _cell_text(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def build_pdf(
    rows: Sequence[ReportRow],
    title: str,
    organization: str,
    generated_at: datetime,
    period_label: str | None = None,
    orientation: str = "landscape",
) -> bytes:
    """Render ``rows`` as a paginated table and return the PDF bytes.

    The header row repeats on every page. An empty ``rows`` renders the title
    block, the header and an explicit "no data" line.
    """

    buffer = BytesIO()
    pagesize = _page_size(orientation)
    doc = SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        title=title,
        author=organization,
    )
    styles = getSampleStyleSheet()
    story: list[Any] = [
        Paragraph(escape(title), styles["Title"]),
        Paragraph(escape(organization), styles["Normal"]),
        Paragraph(
            escape(f"Dibuat: {generated_at.strftime('%d/%m/%Y %H:%M')}"),
            styles["Normal"],
        ),
    ]
    if period_label:
        story.append(Paragraph(escape(f"Periode: {period_label}"), styles["Normal"]))
    story.append(Spacer(1, 0.4 * cm))

    data = [REPORT_COLUMNS] + [
        [_cell_text(value) for value in row_values(row)] for row in rows
    ]
    total_weight = sum(_COLUMN_WEIGHTS)
    widths = [doc.width * w / total_weight for w in _COLUMN_WEIGHTS]
    table = Table(data, colWidths=widths, repeatRows=1)
    table.setStyle(_TABLE_STYLE)
    story.append(table)
    story.append(Spacer(1, 0.3 * cm))
    if rows:
        story.append(Paragraph(f"Total data: {len(rows)}", styles["Italic"]))
    else:
        story.append(Paragraph(EMPTY_MESSAGE, styles["Italic"]))

    doc.build(story, onFirstPage=_footer, onLaterPages=_footer)
    LOGGER.info("Rendered PDF report '%s' rows=%d", title, len(rows))
    return buffer.getvalue()


__all__ = ["EMPTY_MESSAGE", "ORIENTATIONS", "build_pdf"]
