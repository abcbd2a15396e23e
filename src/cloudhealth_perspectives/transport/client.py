"""HTTP client for the perspective schema API."""

from __future__ import annotations

import logging
import re

import requests

from cloudhealth_perspectives.errors import TransportFailure, UnparseableResponse
from cloudhealth_perspectives.transport.config import ApiConfig

logger = logging.getLogger(__name__)

_CONFIRMATION_RE = re.compile(r"Perspective (\d+) created")
_ID_RE = re.compile(r"[0-9]+")


def parse_confirmation(text: str) -> str:
    """Extract the new perspective id from a creation confirmation.

    >>> parse_confirmation("Perspective 4821 created")
    '4821'

    Raises:
        UnparseableResponse: If the text is not a recognisable confirmation.
    """
    match = _CONFIRMATION_RE.search(text)
    if match is None:
        raise UnparseableResponse(
            "Created perspective but could not extract its id from the response",
            value=text,
        )
    return match.group(1)


def validate_perspective_id(perspective_id: str) -> str:
    """Perspective ids are decimal integers; reject anything else before a request."""
    if not isinstance(perspective_id, str) or not _ID_RE.fullmatch(perspective_id):
        raise ValueError(f"Perspective id must be a decimal integer, got {perspective_id!r}")
    return perspective_id


class PerspectiveClient:
    """Thin wrapper over the four perspective endpoints.

    Every non-2xx response raises :class:`TransportFailure` carrying the
    status code and body. Nothing is retried.
    """

    def __init__(self, config: ApiConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def create(self, body: bytes) -> str:
        """POST a new perspective and return the raw confirmation text."""
        response = self._request("POST", None, body)
        return response.text

    def fetch(self, perspective_id: str) -> bytes:
        """GET the current server document for a perspective."""
        response = self._request("GET", perspective_id)
        return response.content

    def replace(self, perspective_id: str, body: bytes) -> None:
        """PUT a full replacement document."""
        response = self._request("PUT", perspective_id, body)
        logger.debug("Response to PUT of perspective %s: %s", perspective_id, response.text)

    def remove(self, perspective_id: str) -> None:
        """DELETE a perspective."""
        self._request("DELETE", perspective_id)

    def _request(
        self,
        method: str,
        perspective_id: str | None,
        body: bytes | None = None,
    ) -> requests.Response:
        if perspective_id is not None:
            validate_perspective_id(perspective_id)
        url = self.config.perspective_url(perspective_id)
        headers = {"Content-Type": "application/json"} if body is not None else {}
        target = f"perspective {perspective_id}" if perspective_id else "perspective"

        try:
            response = self.session.request(
                method,
                url,
                params={"api_key": self.config.api_key},
                data=body,
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise TransportFailure(f"{method} {target} failed: {exc}") from exc

        logger.debug("%s %s -> %s", method, url, response.status_code)
        if not 200 <= response.status_code < 300:
            raise TransportFailure(
                f"{method} {target} failed",
                status_code=response.status_code,
                body=response.text,
            )
        return response
