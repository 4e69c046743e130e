from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional

# Validation workflow states (moderator approval of a single session).
PENDING = "pending"
VALIDATED = "validated"
VALIDATION_STATES = (PENDING, VALIDATED)

# Distance-based achievement statuses (cumulative runner totals).
ACHIEVED = "achieved"
IN_PROGRESS = "in_progress"
NOT_STARTED = "not_started"
ACHIEVEMENT_STATUSES = (ACHIEVED, IN_PROGRESS, NOT_STARTED)


@dataclass
class Runner:
    id: str
    name: str
    rank: Optional[str] = None
    total_distance: float = 0.0
    total_sessions: int = 0
    created_at: Optional[datetime] = None
    unit: Optional[str] = None


@dataclass
class TargetAchievement:
    id: str
    runner_id: str
    name: str
    distance_km: float
    duration_sec: int
    achieved_date: Optional[date]
    validation_status: str = PENDING
    rank: Optional[str] = None
    unit: Optional[str] = None

    @property
    def is_validated(self) -> bool:
        return self.validation_status == VALIDATED

    def validated(self) -> "TargetAchievement":
        """Return a copy in the terminal ``validated`` state."""
        return replace(self, validation_status=VALIDATED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "runner_id": self.runner_id,
            "name": self.name,
            "rank": self.rank,
            "unit": self.unit,
            "distance_km": self.distance_km,
            "duration_sec": self.duration_sec,
            "achieved_date": self.achieved_date.isoformat()
            if self.achieved_date
            else None,
            "validation_status": self.validation_status,
        }


@dataclass(frozen=True)
class ReportRow:
    no: int
    runner_id: str
    name: str
    rank: str
    distance_km: float
    time_taken: str
    pace: str
    date: str
    status: str
    raw_date: Optional[date] = None


@dataclass
class RunnerDetail:
    """One runner with their qualifying sessions, newest first."""

    runner: Runner
    history: List[TargetAchievement] = field(default_factory=list)

    @property
    def latest(self) -> Optional[TargetAchievement]:
        return self.history[0] if self.history else None