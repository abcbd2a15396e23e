"""API connection configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_URL = "https://chapi.cloudhealthtech.com/v1/perspective_schemas"
DEFAULT_TIMEOUT = 30.0


@dataclass
class ApiConfig:
    """Where and how to reach the perspective API."""

    api_key: str
    url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> ApiConfig:
        """Create config from environment variables.

        Resolution:
        1. CHT_API_KEY (required)
        2. CHT_API_URL, default: the public CloudHealth endpoint
        3. CHT_TIMEOUT in seconds, default: 30

        Raises:
            ValueError: If CHT_API_KEY is unset or CHT_TIMEOUT is not a number.
        """
        api_key = os.environ.get("CHT_API_KEY")
        if not api_key:
            raise ValueError("CHT_API_KEY environment variable is not set")

        timeout_raw = os.environ.get("CHT_TIMEOUT")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
        except ValueError:
            raise ValueError(f"CHT_TIMEOUT must be a number of seconds, got {timeout_raw!r}")

        return cls(
            api_key=api_key,
            url=os.environ.get("CHT_API_URL") or DEFAULT_API_URL,
            timeout=timeout,
        )

    def perspective_url(self, perspective_id: str | None = None) -> str:
        base = self.url.rstrip("/")
        if perspective_id is None:
            return base
        return f"{base}/{perspective_id}"
