"""Error taxonomy for document ingestion and lookups."""

from __future__ import annotations


class PlacesError(Exception):
    """Base class for every recoverable failure raised by the core."""


class MalformedDocument(PlacesError):
    """Raised when the input bytes are not well-formed XML."""


class UnrecognizedFormat(PlacesError):
    """Raised when the XML is well-formed but has no kml > Document structure."""


class NotFound(PlacesError):
    """Raised when a folder or place identity does not resolve."""

    def __init__(self, kind: str, identity: int | None) -> None:
        self.kind = kind
        self.identity = identity
        super().__init__(f"{kind.capitalize()} not found: {identity}")
