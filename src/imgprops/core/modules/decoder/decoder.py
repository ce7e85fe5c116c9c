"""Interpretation of property item payloads by type code.

All multi-byte types are little-endian; the property item source hands the
payload over in that byte order regardless of the byte order of the file.
Trailing bytes that do not fill a whole element are ignored.
"""

import struct

from imgprops.core.modules.decoder.models import DecodedValue, Scalar, Single, TypeCode, wrap
from imgprops.errors import DecodeError

# struct format and stride of the fixed-width integer types
_INTEGER_FORMATS: dict[TypeCode, tuple[str, int]] = {
    TypeCode.SHORT: ("<H", 2),
    TypeCode.LONG: ("<I", 4),
    TypeCode.SLONG: ("<i", 4),
}

# struct format of one (numerator, denominator) pair
_RATIONAL_FORMATS: dict[TypeCode, str] = {
    TypeCode.RATIONAL: "<II",
    TypeCode.SRATIONAL: "<ii",
}


def decode_text(data: bytes) -> str:
    """Decode bytes as 7-bit text; bytes outside the ASCII range become '?'."""
    return "".join(chr(b) if b < 0x80 else "?" for b in data)


def _whole(data: bytes, stride: int) -> bytes:
    return data[: len(data) - len(data) % stride]


def _decode_rationals(type_code: TypeCode, data: bytes, tag_id: int | None) -> list[Scalar]:
    values: list[Scalar] = []
    for index, (numerator, denominator) in enumerate(struct.iter_unpack(_RATIONAL_FORMATS[type_code], _whole(data, 8))):
        if denominator == 0:
            raise DecodeError(f"Zero denominator in rational component {index} ({numerator}/0)", tag_id=tag_id)
        values.append(numerator / denominator)
    return values


def decode_values(type_code: int, data: bytes, tag_id: int | None = None) -> list[Scalar]:
    """Decode a payload into its ordered list of components.

    Args:
        type_code: Property item type code
        data: Raw payload bytes
        tag_id: Tag id of the item, used only to annotate errors

    Returns:
        List of decoded components; text types yield a single string

    Raises:
        DecodeError: If the type code is not defined by the host standard or
            a rational component has a zero denominator
    """
    try:
        code = TypeCode(type_code)
    except ValueError:
        raise DecodeError(f"Unsupported type code: {type_code}", tag_id=tag_id) from None

    match code:
        case TypeCode.BYTE:
            return list(data)
        case TypeCode.ASCII:
            text = data[:-1] if data.endswith(b"\x00") else data
            return [decode_text(text)]
        case TypeCode.UNDEFINED:
            return [decode_text(data)]
        case TypeCode.SHORT | TypeCode.LONG | TypeCode.SLONG:
            fmt, stride = _INTEGER_FORMATS[code]
            return [value for (value,) in struct.iter_unpack(fmt, _whole(data, stride))]
        case TypeCode.RATIONAL | TypeCode.SRATIONAL:
            return _decode_rationals(code, data, tag_id)


def decode(type_code: int, data: bytes, tag_id: int | None = None) -> DecodedValue:
    """Decode a payload into the tagged union used by the formatter.

    Text types always produce a Single, even for an empty string.
    """
    values = decode_values(type_code, data, tag_id)
    if type_code in (TypeCode.ASCII, TypeCode.UNDEFINED):
        return Single(values[0])
    return wrap(values)
