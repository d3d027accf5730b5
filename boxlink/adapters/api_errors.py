"""Error hierarchy for list-store requests.

Every failure the REST adapter surfaces derives from :class:`ApiError`
("request failed"). Status failures carry the parsed error body; the list
store answers with ``{"error": {"code": ..., "message": {"value": ...}}}``
in verbose mode and ``{"odata.error": {...}}`` without metadata.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple


class ApiError(RuntimeError):
    """Base class for list-store request failures ("request failed")."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx from the list store."""


class ApiNotFoundError(ApiClientError):
    """Requested list row does not exist (HTTP 404)."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("status", 404)
        super().__init__(message, **kwargs)


class ApiServerError(ApiError):
    """HTTP 5xx from the list store."""


class ApiTransportError(ApiError):
    """Network level failure: timeout, refused connection, TLS error."""

    def __init__(self, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message, context=context)


class ApiEnvelopeError(ApiError):
    """Response body is not JSON or lacks the expected ``d`` envelope."""

    def __init__(
        self, message: str, *, payload: Any = None, context: Optional[str] = None
    ) -> None:
        super().__init__(message, payload=payload, context=context)


def parse_error_payload(resp: Any) -> Any:
    """Decode an error body without raising; falls back to a text snippet."""
    try:
        return resp.json()
    except ValueError:
        snippet = (getattr(resp, "text", "") or "").strip()
        return snippet[:400] or None


def odata_error(payload: Any) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(code, message)`` from a list-store error body."""
    if isinstance(payload, str):
        return None, payload.strip() or None
    if not isinstance(payload, dict):
        return None, None
    error = payload.get("error") or payload.get("odata.error")
    if not isinstance(error, dict):
        return None, _text(payload.get("message"))
    code = error.get("code")
    message = error.get("message")
    if isinstance(message, dict):
        message = message.get("value")
    return (str(code) if code not in (None, "") else None), _text(message)


def error_for_status(status: int, *, context: str, payload: Any) -> ApiError:
    """Build the error type matching an HTTP status."""
    code, hint = odata_error(payload)
    message = f"{context}: {hint} (HTTP {status})" if hint else f"{context}: HTTP {status}"
    fields = dict(status=status, code=code, hint=hint, payload=payload, context=context)
    if status == 404:
        return ApiNotFoundError(message, **fields)
    if 400 <= status < 500:
        return ApiClientError(message, **fields)
    if 500 <= status < 600:
        return ApiServerError(message, **fields)
    return ApiError(message, **fields)


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip()[:200] or None


__all__ = [
    "ApiClientError",
    "ApiEnvelopeError",
    "ApiError",
    "ApiNotFoundError",
    "ApiServerError",
    "ApiTransportError",
    "error_for_status",
    "odata_error",
    "parse_error_payload",
]
