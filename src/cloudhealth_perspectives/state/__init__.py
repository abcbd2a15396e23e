"""Local storage of the last-known server copy of each perspective."""

import os
from pathlib import Path

from cloudhealth_perspectives.state.store import StateStore, stored_document

DEFAULT_STATE_PATH = Path(".perspectives") / "state.db"


def state_path_from_env() -> Path:
    """PERSPECTIVES_STATE_PATH, or ``.perspectives/state.db`` in the working directory."""
    return Path(os.environ.get("PERSPECTIVES_STATE_PATH") or DEFAULT_STATE_PATH)


__all__ = ["DEFAULT_STATE_PATH", "StateStore", "state_path_from_env", "stored_document"]
