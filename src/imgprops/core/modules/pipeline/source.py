"""Property items read from image files with Pillow.

The EXIF block is walked IFD by IFD (IFD0, Exif, GPS, then the thumbnail
IFD1) and each entry is handed over as a property item whose payload is
re-encoded little-endian, whatever the byte order of the file. IFD1 tags
are renumbered to their thumbnail ids (0x5020 - 0x503B).
"""

import io
import struct
from collections.abc import Iterator
from fractions import Fraction
from pathlib import Path
from typing import Any

import structlog
from PIL import Image, TiffImagePlugin, UnidentifiedImageError

from imgprops.core.modules.decoder.models import TypeCode
from imgprops.core.modules.pipeline.models import PropertyItem
from imgprops.errors import SourceError

logger = structlog.get_logger(__name__)

EXIF_HEADER = b"Exif\x00\x00"
EXIF_IFD_TAG = 0x8769
GPS_IFD_TAG = 0x8825

# IFD1 tag -> thumbnail property id
THUMBNAIL_IDS: dict[int, int] = {
    0x0100: 0x5020,  # ImageWidth
    0x0101: 0x5021,  # ImageHeight
    0x0102: 0x5022,  # BitsPerSample
    0x0103: 0x5023,  # Compression
    0x0106: 0x5024,  # PhotometricInterp
    0x010E: 0x5025,  # ImageDescription
    0x010F: 0x5026,  # EquipMake
    0x0110: 0x5027,  # EquipModel
    0x0111: 0x5028,  # StripOffsets
    0x0112: 0x5029,  # Orientation
    0x0115: 0x502A,  # SamplesPerPixel
    0x0116: 0x502B,  # RowsPerStrip
    0x0117: 0x502C,  # StripBytesCount
    0x011A: 0x502D,  # XResolution
    0x011B: 0x502E,  # YResolution
    0x011C: 0x502F,  # PlanarConfig
    0x0128: 0x5030,  # ResolutionUnit
    0x012D: 0x5031,  # TransferFunction
    0x0131: 0x5032,  # SoftwareUsed
    0x0132: 0x5033,  # DateTime
    0x013B: 0x5034,  # Artist
    0x013E: 0x5035,  # WhitePoint
    0x013F: 0x5036,  # PrimaryChromaticities
    0x0211: 0x5037,  # YCbCrCoefficients
    0x0212: 0x5038,  # YCbCrSubsampling
    0x0213: 0x5039,  # YCbCrPositioning
    0x0214: 0x503A,  # REFBlackWhite
    0x8298: 0x503B,  # Copyright
}

_INTEGER_FORMATS = {
    TypeCode.SHORT: "H",
    TypeCode.LONG: "I",
    TypeCode.SLONG: "i",
}


def _as_tuple(value: Any) -> tuple[Any, ...]:
    return value if isinstance(value, tuple) else (value,)


def _rational_parts(value: Any) -> tuple[int, int]:
    numerator = getattr(value, "numerator", None)
    denominator = getattr(value, "denominator", None)
    if isinstance(numerator, int) and isinstance(denominator, int):
        return numerator, denominator
    fraction = Fraction(value).limit_denominator(0xFFFFFFFF)
    return fraction.numerator, fraction.denominator


def encode_value(type_code: TypeCode, value: Any) -> bytes:
    """Re-encode a value decoded by Pillow as a little-endian payload."""
    match type_code:
        case TypeCode.BYTE | TypeCode.UNDEFINED:
            if isinstance(value, (bytes, bytearray)):
                return bytes(value)
            values = _as_tuple(value)
            if all(isinstance(v, (bytes, bytearray)) for v in values):
                return b"".join(values)
            return bytes(values)
        case TypeCode.ASCII:
            text = value.decode("latin-1") if isinstance(value, bytes) else str(value)
            return text.encode("latin-1", errors="replace") + b"\x00"
        case TypeCode.SHORT | TypeCode.LONG | TypeCode.SLONG:
            values = _as_tuple(value)
            return struct.pack(f"<{len(values)}{_INTEGER_FORMATS[type_code]}", *values)
        case TypeCode.RATIONAL | TypeCode.SRATIONAL:
            parts = [part for v in _as_tuple(value) for part in _rational_parts(v)]
            fmt = "I" if type_code == TypeCode.RATIONAL else "i"
            return struct.pack(f"<{len(parts)}{fmt}", *parts)


def _tiff_block(img: Image.Image, path: Path) -> bytes | None:
    """TIFF-structured bytes holding the metadata: the EXIF block, or the whole file for TIFF images."""
    exif = img.info.get("exif")
    if isinstance(exif, bytes) and exif:
        return exif[len(EXIF_HEADER) :] if exif.startswith(EXIF_HEADER) else exif
    if img.format == "TIFF":
        return path.read_bytes()
    return None


def _load_ifd(fp: io.BytesIO, head: bytes, offset: int) -> TiffImagePlugin.ImageFileDirectory_v2:
    ifd = TiffImagePlugin.ImageFileDirectory_v2(head)
    fp.seek(offset)
    ifd.load(fp)
    return ifd


def _ifd_items(ifd: TiffImagePlugin.ImageFileDirectory_v2, id_map: dict[int, int] | None = None) -> Iterator[PropertyItem]:
    for tag in sorted(ifd):
        try:
            type_code = TypeCode(ifd.tagtype[tag])
        except ValueError:
            logger.debug("Skipped property item with unsupported type", tag=tag, type_code=ifd.tagtype[tag])
            continue
        payload = encode_value(type_code, ifd[tag])
        tag_id = id_map.get(tag, tag) if id_map is not None else tag
        yield PropertyItem(id=tag_id, type_code=type_code, length=len(payload), value=payload)


def _walk(block: bytes) -> list[PropertyItem]:
    fp = io.BytesIO(block)
    head = block[:8]
    ifd0 = TiffImagePlugin.ImageFileDirectory_v2(head)
    fp.seek(ifd0.next)
    ifd0.load(fp)

    items = list(_ifd_items(ifd0))
    for pointer in (EXIF_IFD_TAG, GPS_IFD_TAG):
        offset = ifd0.get(pointer)
        if isinstance(offset, int) and offset:
            items.extend(_ifd_items(_load_ifd(fp, head, offset)))
    if ifd0.next:
        items.extend(_ifd_items(_load_ifd(fp, head, ifd0.next), THUMBNAIL_IDS))
    return items


def read_property_items(path: Path | str) -> list[PropertyItem]:
    """Read the property items of an image file.

    Args:
        path: Path to the image file

    Returns:
        Property items in IFD order. Returns an empty list if the file
        cannot be opened or carries no metadata.
    """
    path = Path(path)
    try:
        return load_property_items(path)
    except SourceError as e:
        logger.warning("Cannot read property items", path=str(path), error=str(e))
        return []


def load_property_items(path: Path) -> list[PropertyItem]:
    """Read the property items of an image file.

    Raises:
        SourceError: If the file cannot be opened or its metadata is corrupt
    """
    try:
        with Image.open(path) as img:
            block = _tiff_block(img, path)
            if block is None:
                return []
            return _walk(block)
    except (OSError, UnidentifiedImageError, SyntaxError, ValueError, struct.error) as e:
        raise SourceError(f"{type(e).__name__}: {e}") from e
