"""Report export entry point: picks the renderer and names the artifact."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Sequence

from . import excel_writer, pdf_writer
from .config import REPORT_ORGANIZATION_LABEL, REPORT_PDF_ORIENTATION
from .models import ReportRow
from .periods import PERIOD_LABELS, normalize_period

LOGGER = logging.getLogger(__name__)

PDF = "pdf"
XLSX = "xlsx"
FORMATS = (PDF, XLSX)

_FORMAT_ALIASES = {
    "tabular-document": PDF,
    "spreadsheet": XLSX,
    "excel": XLSX,
}

MIME_TYPES = {
    PDF: "application/pdf",
    XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def normalize_format(fmt: str) -> str:
    key = str(fmt).strip().lower()
    key = _FORMAT_ALIASES.get(key, key)
    if key not in FORMATS:
        raise ValueError(f"Unknown export format '{fmt}' (expected pdf or xlsx)")
    return key


def report_filename(report_type: str, period: str | None, fmt: str) -> str:
    return f"laporan-{report_type}-{normalize_period(period)}.{normalize_format(fmt)}"


def export_report(
    rows: Sequence[ReportRow],
    title: str,
    generated_at: datetime | None = None,
    fmt: str = PDF,
    path: str | Path | None = None,
    period: str | None = None,
    organization: str | None = None,
) -> bytes:
    """Render ``rows`` and return the artifact bytes.

    When ``path`` is given the bytes are also written there. Zero rows is a
    valid request and yields an empty-bodied document.
    """

    fmt = normalize_format(fmt)
    generated_at = generated_at or datetime.now()
    organization = organization or REPORT_ORGANIZATION_LABEL
    period_label = PERIOD_LABELS[normalize_period(period)]
    if not rows:
        LOGGER.info("Exporting '%s' with no rows (empty report)", title)
    if fmt == PDF:
        payload = pdf_writer.build_pdf(
            rows,
            title,
            organization,
            generated_at,
            period_label=period_label,
            orientation=REPORT_PDF_ORIENTATION,
        )
    else:
        payload = excel_writer.report_bytes(
            rows, title, organization, generated_at, period_label=period_label
        )
    if path is not None:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(payload)
        LOGGER.info("Saved %s report to %s (%d bytes)", fmt, out, len(payload))
    return payload


__all__ = [
    "FORMATS",
    "MIME_TYPES",
    "normalize_format",
    "report_filename",
    "export_report",
]
