"""Helper for recording one adapter call as a workflow step."""

from __future__ import annotations

import logging
from typing import Any, Callable, Tuple

from boxlink.domain.workflow import WorkflowResult
from boxlink.usecases.error_mapping import map_api_error

log = logging.getLogger(__name__)


def run_step(
    result: WorkflowResult,
    name: str,
    action: Callable[[], Any],
    *,
    default_code: str,
    default_message: str,
) -> Tuple[bool, Any]:
    """Run ``action`` and record its outcome on ``result``.

    Returns ``(ok, value)``. Failures are mapped through ``map_api_error`` and
    logged; nothing is rolled back.
    """
    try:
        value = action()
    except Exception as exc:
        mapped = map_api_error(exc, default_code=default_code, default_message=default_message)
        log.warning("%s: step '%s' failed: %s", result.name, name, exc)
        result.record_failure(name, mapped.message, mapped.code)
        return False, None
    result.record_ok(name, value)
    return True, value


__all__ = ["run_step"]
