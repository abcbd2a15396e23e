"""HTTP transport for the perspective schema API."""

from cloudhealth_perspectives.transport.client import (
    PerspectiveClient,
    parse_confirmation,
    validate_perspective_id,
)
from cloudhealth_perspectives.transport.config import ApiConfig

__all__ = ["ApiConfig", "PerspectiveClient", "parse_confirmation", "validate_perspective_id"]
