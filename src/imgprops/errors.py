from abc import ABC


class PropertyError(ABC, Exception):
    """Base class for property item errors.

    Errors that inherit from PropertyError are scoped to a single property
    item or a single lookup table and carry a message safe to show next to
    the affected entry.
    """


class DecodeError(PropertyError):
    """Raised when a property item payload cannot be decoded for its type code."""

    def __init__(self, message: str = "Property item could not be decoded", tag_id: int | None = None) -> None:
        super().__init__(message)
        self.tag_id = tag_id


class FormatError(PropertyError):
    """Raised when a formatting rule cannot handle the decoded value."""

    def __init__(self, message: str = "Property value could not be formatted", tag_id: int | None = None) -> None:
        super().__init__(message)
        self.tag_id = tag_id


class RegistryError(PropertyError):
    """Raised when a tag or type lookup table is malformed."""


class SourceError(PropertyError):
    """Raised when property items cannot be read from an image file."""
