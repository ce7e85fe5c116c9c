"""Entries produced by the pipeline and the options that shape them."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from imgprops.core.modules.decoder.models import DecodedValue, Empty, Scalar
from imgprops.utils import hex_id

# Human-facing value of an entry
DisplayValue = Scalar | tuple[Scalar, ...] | datetime | timedelta | Path | None

FILE_OBJECT_ID = -1
FILE_OBJECT_NAME = "FileObject"
DERIVED_SUFFIX = "PS"


@dataclass(frozen=True)
class PropertyItem:
    """Raw metadata record handed over by the image-decoding collaborator."""

    id: int
    type_code: int
    length: int
    value: bytes


@dataclass(frozen=True)
class DecodedEntry:
    """One decoded, formatted tag (or a synthetic entry derived from one)."""

    id_dec: int
    tag_name: str
    type_code: int
    type_desc: str
    length: int
    raw_bytes: bytes | None = None
    decoded: DecodedValue = field(default_factory=Empty)
    display: DisplayValue = None
    fault: str | None = None  # Decode or format error message for a flagged entry
    derived: bool = False

    @property
    def id_hex(self) -> str:
        return hex_id(self.id_dec)

    @property
    def is_file_object(self) -> bool:
        return self.id_dec == FILE_OBJECT_ID


class PipelineOptions(BaseModel):
    """Caller-configurable options for one pipeline run."""

    tag_selectors: list[str | int] = Field(
        default_factory=list, description="Tag ids, 0x hex ids, names or wildcard patterns; empty selects all"
    )
    suppress_derived: bool = Field(False, description="Skip synthetic *PS entries and the file-object row")
    include_unknown: bool = Field(False, description="Emit tags missing from the tag table as Unknown_0x<HEX>_<DEC>")
    skip_faulty: bool = Field(False, description="Drop entries that fail to decode or format instead of flagging them")


class EntryView(BaseModel):
    """Entry representation for JSON output."""

    id_dec: int = Field(..., description="Tag id")
    id_hex: str = Field(..., description="Tag id as 0x-prefixed uppercase hex")
    tag_name: str = Field(..., description="Resolved tag name")
    type_code: int = Field(..., description="Property item type code")
    type_desc: str = Field(..., description="Type description from the type table")
    length: int = Field(..., description="Payload length in bytes")
    value: Any = Field(None, description="Display value")
    fault: str | None = Field(None, description="Decode or format error, when the entry is flagged")

    @classmethod
    def from_domain(cls, entry: DecodedEntry) -> "EntryView":
        """Create view model from domain model."""
        return cls(
            id_dec=entry.id_dec,
            id_hex=entry.id_hex,
            tag_name=entry.tag_name,
            type_code=entry.type_code,
            type_desc=entry.type_desc,
            length=entry.length,
            value=entry.display,
            fault=entry.fault,
        )


class FileProperties(BaseModel):
    """Display values of one file folded into a tag name -> value mapping."""

    file: Path | None = Field(None, description="File the properties were read from")
    properties: dict[str, Any] = Field(default_factory=dict, description="Tag name -> display value")
