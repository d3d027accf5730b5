"""Domain-level error types shared by use cases and the panel controller."""

from __future__ import annotations

from typing import Iterable

from .ports import UseCaseError


class ValidationError(UseCaseError):
    """Required user input is missing; raised before any network call."""

    def __init__(self, message: str, *, fields: Iterable[str] = ()) -> None:
        field_list = [str(name) for name in fields]
        super().__init__("VALIDATION_FAILED", message, meta={"fields": field_list})
        self.fields = field_list


__all__ = ["ValidationError"]
