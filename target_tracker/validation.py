"""Validation workflow for target achievements.

A target achievement starts ``pending`` and can be moved to ``validated``
exactly once by a moderator. There is no way back. The store is responsible
for applying the change as a single conditional update (``set validated where
pending``); this module only adds lookup, idempotency and logging on top.

Stores are duck-typed and must provide::

    get_target(target_id) -> TargetAchievement | None
    mark_validated(target_id) -> TargetAchievement | None
"""

from __future__ import annotations

import logging

from .errors import NotFoundError
from .models import TargetAchievement

LOGGER = logging.getLogger(__name__)


def validate(store, target_id: str) -> TargetAchievement:
    """Move ``target_id`` to ``validated`` and return the stored record.

    Calling it again for an already validated record returns the record
    unchanged.

    Raises:
        NotFoundError: If no target achievement has that identifier.
    """

    target_id = str(target_id).strip()
    current = store.get_target(target_id)
    if current is None:
        LOGGER.warning("Validation requested for unknown target=%s", target_id)
        raise NotFoundError(target_id)
    if current.is_validated:
        LOGGER.debug("Target %s already validated; no-op", target_id)
        return current
    updated = store.mark_validated(target_id)
    if updated is None:
        # Deleted between lookup and update.
        raise NotFoundError(target_id)
    LOGGER.info(
        "Validated target=%s runner=%s distance=%.2fkm",
        updated.id,
        updated.runner_id,
        updated.distance_km,
    )
    return updated


__all__ = ["validate"]
