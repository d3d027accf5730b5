"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations


from typing import Optional

from boxlink.adapters.api_errors import (
    ApiClientError,
    ApiEnvelopeError,
    ApiError,
    ApiNotFoundError,
    ApiServerError,
    ApiTransportError,
    odata_error,
)
from boxlink.domain.ports import UseCaseError


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by a list-store adapter call.
        default_code: Code used when ``exc`` is not an adapter error.
        default_message: Message used when ``exc`` is not an adapter error.

    Returns:
        UseCaseError whose ``message`` is safe to show in a notice.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ApiTransportError):
        return UseCaseError(
            "TRANSPORT_FAILED", "List store unreachable. Check connection."
        )
    if isinstance(exc, ApiNotFoundError):
        return UseCaseError(
            "NOT_FOUND", _compose_error_message("Item not found", exc.hint)
        )
    if isinstance(exc, ApiEnvelopeError):
        return UseCaseError(
            "ENVELOPE_MALFORMED", "Unexpected response from the list store."
        )
    if isinstance(exc, ApiClientError):
        status = exc.status or 0
        hint = exc.hint or odata_error(exc.payload)[1]
        if status in (401, 403):
            return UseCaseError("AUTH_FAILED", "Not authorized for the list store.")
        label = f"Request failed (HTTP {status})" if status else "Request failed"
        return UseCaseError("REQUEST_FAILED", _compose_error_message(label, hint))
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", "List store error, try again.")
    if isinstance(exc, ApiError):
        return UseCaseError("REQUEST_FAILED", str(exc) or "Request failed.")

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_api_error"]
