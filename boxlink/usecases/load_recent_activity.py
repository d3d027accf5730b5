"""Use case for the cross-box activity feed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from boxlink.domain.entities import Activity
from boxlink.domain.ports import ListStorePort, UseCaseError
from boxlink.usecases.error_mapping import map_api_error

DEFAULT_ACTIVITY_LIMIT = 20


@dataclass
class LoadRecentActivity:
    store: ListStorePort

    def __call__(self, *, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[Activity]:
        if limit <= 0:
            raise UseCaseError("ACTIVITY_LIMIT_INVALID", "Activity limit must be positive.")
        try:
            return list(self.store.recent_activities(limit))[:limit]
        except UseCaseError:
            raise
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="ACTIVITY_LOAD_FAILED",
                default_message="Failed to load recent activity.",
            ) from exc


__all__ = ["DEFAULT_ACTIVITY_LIMIT", "LoadRecentActivity"]
