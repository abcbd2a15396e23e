"""Exception types raised while converting and transporting perspectives."""

from __future__ import annotations

from typing import Any


class PerspectiveError(Exception):
    """Base class for all perspective errors."""


class _LocatedError(PerspectiveError):
    """An error pinned to a location inside a document.

    ``path`` uses the wire field names, e.g. ``group[0].rule[1].asset``.
    """

    def __init__(self, message: str, path: str = "", value: Any = None):
        self.message = message
        self.path = path
        self.value = value
        super().__init__(str(self))

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        raw = f" (got {self.value!r})" if self.value is not None else ""
        return f"{self.message}{loc}{raw}"


class MalformedConfig(_LocatedError):
    """The configuration model violates a structural invariant before encode."""


class UnparseableResponse(_LocatedError):
    """A server payload cannot be decoded into the configuration model."""


class TransportFailure(PerspectiveError):
    """A request to the perspective API failed.

    ``status_code`` is None when no response was received at all.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        detail = f" (status {status_code})" if status_code is not None else ""
        text = f": {body}" if body else ""
        super().__init__(f"{message}{detail}{text}")


class DefinitionError(PerspectiveError):
    """A perspective definition file could not be loaded."""

    def __init__(self, message: str, issues: list | None = None):
        self.issues = list(issues or [])
        super().__init__(message)
