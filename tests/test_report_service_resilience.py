"""Tests for ReportService behaviour when fetchers fail."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from target_tracker.errors import DataFetchError
from target_tracker.services import ReportService, ReportServiceConfig


def _failing():
    raise DataFetchError("connection refused")


def test_fetch_failure_yields_empty_degraded_report(caplog: pytest.LogCaptureFixture, today) -> None:
    service = ReportService(ReportServiceConfig(runner_fetcher=_failing, target_fetcher=_failing))
    with caplog.at_level(logging.WARNING, logger="ReportService"):
        dataset = service.build("14km", period="all", today=today)
    assert dataset.degraded
    assert dataset.is_empty
    assert "failed" in caplog.text.lower()


def test_unexpected_errors_are_contained(today) -> None:
    def boom():
        raise ValueError("bad json")

    service = ReportService(ReportServiceConfig(runner_fetcher=boom, target_fetcher=boom))
    dataset = service.build("target", today=today)
    assert dataset.degraded
    assert dataset.rows == []


def test_build_and_export(tmp_path: Path, store, today) -> None:
    service = ReportService(
        ReportServiceConfig(runner_fetcher=store.list_runners, target_fetcher=store.list_targets)
    )
    dataset = service.build("14km", period="this_week", today=today)
    assert not dataset.degraded
    assert dataset.title == "Laporan Khusus Target 14 KM"
    assert [r.no for r in dataset.rows] == [1, 2, 3]

    path = service.export(dataset, "xlsx", output_dir=tmp_path)
    assert path.name == "laporan-14km-this_week.xlsx"
    assert path.is_file()

    empty = service.build("active", search="nobody", today=today)
    pdf_path = service.export(empty, "pdf", output_dir=tmp_path)
    assert pdf_path.read_bytes().startswith(b"%PDF")


def test_unknown_report_type(store) -> None:
    service = ReportService(
        ReportServiceConfig(runner_fetcher=store.list_runners, target_fetcher=store.list_targets)
    )
    with pytest.raises(ValueError):
        service.build("weekly")


def test_target_report_survives_runner_fetch_failure(targets, today) -> None:
    service = ReportService(
        ReportServiceConfig(runner_fetcher=_failing, target_fetcher=lambda: targets)
    )
    dataset = service.build("14km", today=today)
    assert not dataset.degraded
    assert len(dataset.rows) == 4


def test_runner_report_filters(store, today) -> None:
    service = ReportService(
        ReportServiceConfig(runner_fetcher=store.list_runners, target_fetcher=store.list_targets)
    )
    dataset = service.build("target", status="not_started", today=today)
    assert [r.runner_id for r in dataset.rows] == ["R3"]
    with pytest.raises(ValueError):
        service.build("target", status="validated", today=today)
