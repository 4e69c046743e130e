"""Service layer package.

Exports high-level services consumed by orchestration / presentation layers.
"""

from .report_service import ReportDataset, ReportService, ReportServiceConfig

__all__ = ["ReportService", "ReportServiceConfig", "ReportDataset"]
