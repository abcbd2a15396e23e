"""Perspective lifecycle: create, read, update, delete, import, plan."""

from cloudhealth_perspectives.lifecycle.service import PerspectiveService

__all__ = ["PerspectiveService"]
