"""14 KM target tracker package."""

from .main import main
from .models import ReportRow, Runner, TargetAchievement
from .errors import DataFetchError, ExcelFormatError, NotFoundError

__all__ = [
    "main",
    "Runner",
    "TargetAchievement",
    "ReportRow",
    "NotFoundError",
    "DataFetchError",
    "ExcelFormatError",
]
