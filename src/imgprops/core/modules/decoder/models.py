"""Decoded property values as an explicit tagged union."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

# A single decoded component of a property item
Scalar = int | float | str


class TypeCode(IntEnum):
    """Property item type codes defined by the host metadata standard."""

    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    UNDEFINED = 7
    SLONG = 9
    SRATIONAL = 10


@dataclass(frozen=True)
class Empty:
    """No components were decoded."""


@dataclass(frozen=True)
class Single:
    """Exactly one decoded component."""

    value: Scalar


@dataclass(frozen=True)
class Multiple:
    """Two or more decoded components, in payload order."""

    values: tuple[Scalar, ...]


@dataclass(frozen=True)
class Opaque:
    """A host object that is not a metadata scalar (the file-object row, derived date/time values)."""

    value: object


DecodedValue = Empty | Single | Multiple | Opaque


def wrap(values: Sequence[Scalar]) -> DecodedValue:
    """Pick the union variant matching the number of components."""
    match len(values):
        case 0:
            return Empty()
        case 1:
            return Single(values[0])
        case _:
            return Multiple(tuple(values))


def components(value: DecodedValue) -> tuple[Scalar, ...]:
    """Flatten a decoded value back into its ordered components.

    Opaque values have no scalar components.
    """
    match value:
        case Single(value=scalar):
            return (scalar,)
        case Multiple(values=values):
            return values
        case Empty() | Opaque():
            return ()
