"""Report service.

Fetches runners / target achievements through injectable fetchers, builds the
report rows with the pure functions in `report_rows` and hands them to the
exporter. Fetch failures never abort a report: the collection falls back to
empty and the dataset is marked degraded so the caller can show a clear
"no data" state instead of partial rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar

from ..config import OUTPUT_DIR, REPORT_TITLES
from ..data_client import TrackerClient
from ..errors import DataFetchError
from ..exporter import export_report, report_filename
from ..models import ReportRow, Runner, TargetAchievement
from ..periods import normalize_period
from ..report_rows import (
    REPORT_14KM,
    REPORT_TYPES,
    build_runner_rows,
    build_target_rows,
)

T = TypeVar("T")


def _default_runner_fetcher() -> List[Runner]:
    return TrackerClient().fetch_runners()


def _default_target_fetcher() -> List[TargetAchievement]:
    return TrackerClient().fetch_targets()


@dataclass(slots=True)
class ReportServiceConfig:
    runner_fetcher: Callable[[], Sequence[Runner]] = _default_runner_fetcher
    target_fetcher: Callable[[], Sequence[TargetAchievement]] = (
        _default_target_fetcher
    )
    logger: logging.Logger | None = None


@dataclass
class ReportDataset:
    report_type: str
    title: str
    period: str
    rows: List[ReportRow] = field(default_factory=list)
    degraded: bool = False
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def filename(self, fmt: str) -> str:
        return report_filename(self.report_type, self.period, fmt)


class ReportService:
    def __init__(self, config: ReportServiceConfig | None = None):
        self.config = config or ReportServiceConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    def _fetch(self, label: str, fetcher: Callable[[], Sequence[T]]) -> tuple[List[T], bool]:
        try:
            return list(fetcher() or []), False
        except DataFetchError as exc:
            self._log.warning("Fetching %s failed; reporting no data: %s", label, exc)
        except Exception as exc:  # pragma: no cover - defensive logging
            self._log.error(
                "Fetching %s failed due to unexpected error: %s",
                label,
                exc,
                exc_info=True,
            )
        return [], True

    def fetch_runners(self) -> tuple[List[Runner], bool]:
        """Return ``(runners, degraded)``; a failed fetch yields no runners."""
        return self._fetch("runners", self.config.runner_fetcher)

    def fetch_targets(self) -> tuple[List[TargetAchievement], bool]:
        return self._fetch("target achievements", self.config.target_fetcher)

    def build(
        self,
        report_type: str,
        period: Optional[str] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
        today: Optional[date] = None,
        unit: Optional[str] = None,
    ) -> ReportDataset:
        """Fetch and filter the rows of one report.

        ``status`` is a validation state for the 14 KM report and an
        achievement status for the runner reports. ``unit`` applies to the
        runner reports only.
        """

        if report_type not in REPORT_TYPES:
            raise ValueError(
                f"Unknown report type '{report_type}' (expected one of {', '.join(REPORT_TYPES)})"
            )
        period = normalize_period(period)
        if report_type == REPORT_14KM:
            targets, degraded = self.fetch_targets()
            runners, runners_degraded = self.fetch_runners()
            rows = build_target_rows(
                targets,
                search=search,
                period=period,
                today=today,
                status=status,
                runners=None if runners_degraded else runners,
            )
        else:
            runners, degraded = self.fetch_runners()
            rows = build_runner_rows(
                runners,
                report_type,
                search=search,
                period=period,
                today=today,
                status=status,
                unit=unit,
            )
        dataset = ReportDataset(
            report_type=report_type,
            title=REPORT_TITLES[report_type],
            period=period,
            rows=rows,
            degraded=degraded,
        )
        self._log.info(
            "Prepared report=%s period=%s rows=%d degraded=%s",
            report_type,
            period,
            len(rows),
            degraded,
        )
        return dataset

    def export(
        self,
        dataset: ReportDataset,
        fmt: str,
        output_dir: str | Path = OUTPUT_DIR,
    ) -> Path:
        path = Path(output_dir) / dataset.filename(fmt)
        export_report(
            dataset.rows,
            dataset.title,
            generated_at=dataset.generated_at,
            fmt=fmt,
            path=path,
            period=dataset.period,
        )
        return path


__all__ = ["ReportService", "ReportServiceConfig", "ReportDataset"]
