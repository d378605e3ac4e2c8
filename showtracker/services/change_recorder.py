# showtracker/services/change_recorder.py
from __future__ import annotations

"""Per-run accumulator of status transitions."""

from typing import List

from showtracker.schemas.enums import EntityType, WatchStatus
from showtracker.schemas.watch_status import StatusChange


class ChangeRecorder:
    """Collects `StatusChange`s for one propagation run; no-ops are dropped."""

    def __init__(self) -> None:
        self._changes: List[StatusChange] = []

    def record(
        self,
        entity_type: EntityType,
        entity_id: int,
        from_status: WatchStatus,
        to_status: WatchStatus,
        reason: str,
    ) -> bool:
        if from_status == to_status:
            return False
        self._changes.append(
            StatusChange(
                entity_type=entity_type,
                entity_id=entity_id,
                from_status=from_status,
                to_status=to_status,
                reason=reason,
            )
        )
        return True

    @property
    def changes(self) -> List[StatusChange]:
        return list(self._changes)

    def count(self, entity_type: EntityType) -> int:
        return sum(1 for c in self._changes if c.entity_type == entity_type)

    def __len__(self) -> int:
        return len(self._changes)


__all__ = ["ChangeRecorder"]
