"""Distance-based achievement status and display labels.

Achievement is derived from a runner's cumulative distance only. It is
independent from the validation workflow of a single session: a runner can be
``achieved`` while the session that got them there is still ``pending``.
"""

from __future__ import annotations

from .config import TARGET_DISTANCE_KM
from .models import ACHIEVED, IN_PROGRESS, NOT_STARTED, VALIDATED
from .utils import non_negative_float

STATUS_LABELS = {
    ACHIEVED: "Tercapai",
    IN_PROGRESS: "Dalam Proses",
    NOT_STARTED: "Belum Mulai",
}

VALIDATED_LABEL = "Tervalidasi"
PENDING_LABEL = "Pending"


def classify(distance_km: float | None, target_km: float = TARGET_DISTANCE_KM) -> str:
    distance = non_negative_float(distance_km)
    if distance >= target_km:
        return ACHIEVED
    if distance > 0:
        return IN_PROGRESS
    return NOT_STARTED


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, STATUS_LABELS[NOT_STARTED])


def validation_label(validation_status: str | None) -> str:
    return VALIDATED_LABEL if validation_status == VALIDATED else PENDING_LABEL


__all__ = [
    "STATUS_LABELS",
    "classify",
    "status_label",
    "validation_label",
]
