"""Create/read/update/delete orchestration around the codec.

The codec runs entirely before or after each request, never in between, so a
codec failure never leaves a partial change on the server. State is stored
only after the server confirmed an operation.
"""

from __future__ import annotations

import logging

from cloudhealth_perspectives.codec import decode, encode
from cloudhealth_perspectives.model.merge import merge_computed
from cloudhealth_perspectives.model.types import Perspective
from cloudhealth_perspectives.plan import Change, compute_plan
from cloudhealth_perspectives.state.store import StateStore
from cloudhealth_perspectives.transport.client import (
    PerspectiveClient,
    parse_confirmation,
    validate_perspective_id,
)

logger = logging.getLogger(__name__)


class PerspectiveService:
    """Applies perspective definitions to the server and tracks their state."""

    def __init__(self, client: PerspectiveClient, store: StateStore):
        self.client = client
        self.store = store

    def create(self, intent: Perspective) -> tuple[str, Perspective]:
        """Create a new perspective.

        Returns:
            The server-assigned id and the perspective as read back.
        """
        desired = merge_computed(intent, None)
        body = encode(desired)
        confirmation = self.client.create(body)
        perspective_id = parse_confirmation(confirmation)
        logger.info("Created perspective '%s' with id %s", desired.name, perspective_id)
        # Track the id before reading back so a failed read never orphans it.
        self.store.save(perspective_id, desired)
        return perspective_id, self._refresh(perspective_id, _reserved(desired))

    def read(self, perspective_id: str) -> Perspective:
        """Fetch the server copy, store it, and return it."""
        validate_perspective_id(perspective_id)
        stored = self.store.load(perspective_id)
        reserved = stored.reserved_ref_ids if stored else []
        return self._refresh(perspective_id, reserved)

    def import_(self, perspective_id: str) -> Perspective:
        """Start tracking a perspective that already exists on the server."""
        perspective = self.read(perspective_id)
        logger.info("Imported perspective '%s' (%s)", perspective.name, perspective_id)
        return perspective

    def update(self, perspective_id: str, intent: Perspective) -> Perspective:
        """Replace a perspective with the given definition.

        Server-computed fields come from the stored copy, which is fetched
        first if this id has never been read.
        """
        validate_perspective_id(perspective_id)
        stored = self.store.load(perspective_id)
        if stored is None:
            stored = self.read(perspective_id)
        desired = merge_computed(intent, stored)
        body = encode(desired)
        self.client.replace(perspective_id, body)
        logger.info("Updated perspective '%s' (%s)", desired.name, perspective_id)
        return self._refresh(perspective_id, _reserved(desired))

    def delete(self, perspective_id: str) -> None:
        validate_perspective_id(perspective_id)
        self.client.remove(perspective_id)
        self.store.delete(perspective_id)
        logger.info("Deleted perspective %s", perspective_id)

    def plan(self, intent: Perspective, perspective_id: str | None = None) -> list[Change]:
        """List the changes that applying ``intent`` would make.

        Uses only the stored copy; no request is issued.
        """
        stored = None
        if perspective_id is not None:
            validate_perspective_id(perspective_id)
            stored = self.store.load(perspective_id)
        return compute_plan(stored, merge_computed(intent, stored))

    def _refresh(self, perspective_id: str, reserved: list[str]) -> Perspective:
        perspective = decode(self.client.fetch(perspective_id))
        perspective.reserved_ref_ids = sorted(set(reserved) | perspective.all_ref_ids())
        self.store.save(perspective_id, perspective)
        return perspective


def _reserved(sent: Perspective) -> list[str]:
    """Ids reserved after a write, including those encode just allocated."""
    return sorted(set(sent.reserved_ref_ids) | sent.all_ref_ids())
