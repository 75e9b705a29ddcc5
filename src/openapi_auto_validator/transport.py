"""HTTP transport wrapper around requests.

Any HTTP status is a normal response here; only failures to reach the server
raise TransportError.
"""

import logging
from typing import Any

import requests
from pydantic import BaseModel

from openapi_auto_validator.errors import TransportError

logger = logging.getLogger(__name__)


class TransportResponse(BaseModel):
    status_code: int
    headers: dict[str, str] = {}
    body: Any = None

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class RequestsTransport:
    """Sends one request per call through a shared requests.Session."""

    def __init__(self, session: requests.Session | None = None):
        self.session = session or requests.Session()

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        body: Any = None,
        content_type: str | None = None,
        timeout: float = 5.0,
    ) -> TransportResponse:
        kwargs: dict[str, Any] = {
            "headers": headers or {},
            "params": params or None,
            "timeout": timeout,
            "allow_redirects": True,
        }
        if content_type == "application/json":
            kwargs["json"] = body
        elif content_type is not None:
            kwargs["data"] = body

        logger.debug("%s %s params=%s", method, url, params)
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timed out after {timeout:g}s", timed_out=True) from e
        except requests.exceptions.ConnectionError as e:
            if _is_refused(e):
                raise TransportError("Connection refused - is the server running?", refused=True) from e
            raise TransportError(str(e)) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e

        logger.debug("%s %s -> %s", method, url, resp.status_code)
        return TransportResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            body=_parse_body(resp),
        )


def _is_refused(error: BaseException) -> bool:
    seen = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if "connection refused" in str(current).lower():
            return True
        reason = getattr(current, "reason", None)
        if isinstance(reason, BaseException) and id(reason) not in seen:
            current = reason
        else:
            current = current.__cause__ or current.__context__
    return False


def _parse_body(resp: requests.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
