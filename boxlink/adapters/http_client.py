"""Shared HTTP transport for the list-store adapter.

This module wraps ``requests.Session`` so the adapter shares one timeout
policy, one header scheme (OData verbose JSON plus an optional bearer token)
and one mapping of network failures to :class:`ApiTransportError`.

Dependencies:
    - ``requests`` for network I/O.
    - ``boxlink.adapters.api_errors.ApiTransportError`` for typed failures.

Call context:
    - Constructed by ``boxlink.adapters.list_store_rest.ListStoreRestAdapter``.
    - Requests are sent exactly once. Retrying is left to the user.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from requests import exceptions as req_exc

from boxlink.adapters.api_errors import ApiTransportError

ODATA_JSON = "application/json;odata=verbose"

log = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    """Transport configuration for list-store calls.

    Attributes:
        request_timeout_s: Timeout in seconds for each request.
        access_token: Optional bearer token placed in ``Authorization``.
    """
    request_timeout_s: int = 30
    access_token: Optional[str] = None


class ListStoreSession:
    """Single-shot requests wrapper with OData headers.

    The class is transport-only. Callers decide how to map non-2xx responses
    into adapter errors.
    """

    def __init__(self, cfg: HttpConfig, session: Optional[requests.Session] = None) -> None:
        """Create a session.

        Args:
            cfg: Timeout and credential settings.
            session: Optional pre-configured ``requests.Session`` (cookies,
                proxies, auth handlers) owned by the caller.
        """
        self.session = session or requests.Session()
        self.cfg = cfg

    def _headers(
        self,
        *,
        json_body: bool = False,
        extra: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        headers = {"Accept": ODATA_JSON}
        if self.cfg.access_token:
            headers["Authorization"] = f"Bearer {self.cfg.access_token}"
        if json_body:
            headers["Content-Type"] = ODATA_JSON
        if extra:
            headers.update(extra)
        return headers

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Send one GET request.

        Raises:
            ApiTransportError: On timeout or connectivity failure.
        """
        context = f"GET {url}"
        log.debug("%s params=%s", context, params)
        try:
            return self.session.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self.cfg.request_timeout_s,
            )
        except req_exc.RequestException as exc:
            raise ApiTransportError(f"Request failed contacting {url}: {exc}", context=context) from exc

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        """Send one POST request with an optional JSON body.

        Raises:
            ApiTransportError: On timeout or connectivity failure.

        Side Effects:
            Serializes ``json_body`` with ``json.dumps`` before sending.
        """
        context = f"POST {url}"
        data = None if json_body is None else json.dumps(json_body)
        log.debug("%s", context)
        try:
            return self.session.post(
                url,
                data=data,
                headers=self._headers(json_body=json_body is not None, extra=headers),
                timeout=self.cfg.request_timeout_s,
            )
        except req_exc.RequestException as exc:
            raise ApiTransportError(f"Request failed contacting {url}: {exc}", context=context) from exc


__all__ = ["HttpConfig", "ListStoreSession", "ODATA_JSON"]
