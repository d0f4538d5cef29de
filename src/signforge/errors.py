"""Exceptions raised by signforge.

Degenerate geometry (short paths, zero-length tangents, empty fields) is never
reported through these; generators return empty geometry instead.  Only
misuse of parameters or identifiers is raised to the caller.
"""


class SignforgeError(Exception):
    """Base class for all signforge errors."""


class SettingsError(SignforgeError, ValueError):
    """A settings record or job description could not be interpreted."""


class UnknownShapeError(SettingsError):
    """A shape identifier does not name a known :class:`ShapeKind`."""

    def __init__(self, identifier: str, known=()):
        self.identifier = identifier
        self.known = tuple(known)
        message = f"Unknown shape identifier: {identifier!r}"
        if self.known:
            message += f" (expected one of: {', '.join(self.known)})"
        super().__init__(message)


class GeometryError(SignforgeError, ValueError):
    """Requested dimensions cannot produce the asked-for geometry."""
