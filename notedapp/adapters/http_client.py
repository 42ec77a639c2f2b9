"""Shared HTTP transport for the backend actor.

Thin wrapper around ``requests.Session`` that attaches identity headers and
turns transport failures into ``ApiTimeoutError``/``ApiError``. Every call is
a single attempt: nothing here retries.

Call context:
    - Constructed by ``notedapp.adapters.backend_rest.BackendRestAdapter``.
    - Used only inside the adapter layer; use cases go through ports.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from notedapp.adapters.api_errors import ApiError, ApiTimeoutError
from notedapp.domain.entities import Identity


@dataclass
class HttpConfig:
    """Transport settings for backend calls.

    Attributes:
        request_timeout_s: Timeout in seconds per call; ``None`` waits
            indefinitely.
    """
    request_timeout_s: Optional[float] = None


class JsonSession:
    """requests wrapper bound to one identity."""

    def __init__(self, identity: Optional[Identity], cfg: HttpConfig) -> None:
        """Create a session for ``identity``.

        Args:
            identity: Identity whose principal and delegation are sent with
                every request, or ``None`` for anonymous calls.
            cfg: Shared transport settings.
        """
        self.session = requests.Session()
        self.identity = identity
        self.cfg = cfg

    def _headers(self, json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.identity is not None:
            headers["X-Principal"] = self.identity.principal.to_text()
            if self.identity.delegation:
                headers["Authorization"] = f"Bearer {self.identity.delegation}"
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send one JSON POST request.

        Raises:
            ApiTimeoutError: On timeout or connection failure.
            ApiError: On any other ``requests`` failure.
        """
        context = f"POST {url}"
        data = None if json_body is None else json.dumps(json_body)
        try:
            return self.session.post(
                url,
                data=data,
                headers=self._headers(json_body=json_body is not None),
                timeout=timeout if timeout is not None else self.cfg.request_timeout_s,
            )
        except (req_exc.Timeout, req_exc.ConnectionError) as exc:
            raise ApiTimeoutError(f"Timeout contacting {url}", context=context) from exc
        except req_exc.RequestException as exc:
            raise ApiError(str(exc), context=context) from exc


__all__ = ["HttpConfig", "JsonSession"]
