"""Thread-safe in-memory store for runners and target achievements."""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional

from .config import TARGET_DISTANCE_KM
from .models import PENDING, Runner, TargetAchievement


class InMemoryStore:
    """Reference store used by the HTTP app and the tests.

    ``mark_validated`` is the single conditional update the validation
    workflow relies on: it flips ``pending`` to ``validated`` under a lock and
    leaves already validated records untouched.
    """

    def __init__(
        self,
        runners: Iterable[Runner] = (),
        targets: Iterable[TargetAchievement] = (),
    ) -> None:
        self._lock = threading.RLock()
        self._runners: Dict[str, Runner] = {}
        self._targets: Dict[str, TargetAchievement] = {}
        for runner in runners:
            self.add_runner(runner)
        for target in targets:
            self.add_target(target)

    def add_runner(self, runner: Runner) -> None:
        with self._lock:
            self._runners[runner.id] = runner

    def add_target(self, target: TargetAchievement) -> None:
        if target.distance_km < TARGET_DISTANCE_KM:
            raise ValueError(
                f"Target {target.id} distance {target.distance_km} km is below "
                f"{TARGET_DISTANCE_KM} km"
            )
        with self._lock:
            self._targets[target.id] = target

    def list_runners(self) -> List[Runner]:
        with self._lock:
            return list(self._runners.values())

    def list_targets(self) -> List[TargetAchievement]:
        with self._lock:
            return list(self._targets.values())

    def get_target(self, target_id: str) -> Optional[TargetAchievement]:
        with self._lock:
            return self._targets.get(target_id)

    def mark_validated(self, target_id: str) -> Optional[TargetAchievement]:
        with self._lock:
            current = self._targets.get(target_id)
            if current is None:
                return None
            if current.validation_status == PENDING:
                current = current.validated()
                self._targets[target_id] = current
            return current


__all__ = ["InMemoryStore"]
