"""Use case for loading the pipeline listing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from boxlink.domain.entities import Pipeline
from boxlink.domain.ports import ListStorePort, UseCaseError
from boxlink.usecases.error_mapping import map_api_error


@dataclass
class LoadPipelines:
    """Fetch all pipelines ordered by title."""

    store: ListStorePort

    def __call__(self) -> List[Pipeline]:
        try:
            return list(self.store.list_pipelines())
        except UseCaseError:
            raise
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="PIPELINES_LOAD_FAILED",
                default_message="Failed to load pipelines. Please check your list store connection.",
            ) from exc


__all__ = ["LoadPipelines"]
