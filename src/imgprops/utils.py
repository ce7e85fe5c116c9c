import re

DATETIME_RE = re.compile(r"^\d{4}:\d{2}:\d{2} \d{2}:\d{2}:\d{2}$")


def hex_id(tag_id: int) -> str:
    """Render a tag id as 0x-prefixed uppercase hex (32-bit two's complement for negatives)."""
    return f"0x{tag_id & 0xFFFFFFFF:X}"


def format_number(value: float) -> str:
    """Render a number without a trailing '.0' when it is integral."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return f"{value:.15g}"
    return str(value)


def is_exif_datetime(value: object) -> bool:
    return isinstance(value, str) and bool(DATETIME_RE.fullmatch(value))
