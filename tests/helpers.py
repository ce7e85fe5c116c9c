"""Property item builders for tests."""

import struct

from imgprops.core.modules.pipeline.models import PropertyItem


def ascii_item(tag_id: int, text: str) -> PropertyItem:
    payload = text.encode("ascii") + b"\x00"
    return PropertyItem(id=tag_id, type_code=2, length=len(payload), value=payload)


def short_item(tag_id: int, *values: int) -> PropertyItem:
    payload = struct.pack(f"<{len(values)}H", *values)
    return PropertyItem(id=tag_id, type_code=3, length=len(payload), value=payload)


def long_item(tag_id: int, *values: int) -> PropertyItem:
    payload = struct.pack(f"<{len(values)}I", *values)
    return PropertyItem(id=tag_id, type_code=4, length=len(payload), value=payload)


def rational_item(tag_id: int, *pairs: tuple[int, int]) -> PropertyItem:
    payload = b"".join(struct.pack("<II", n, d) for n, d in pairs)
    return PropertyItem(id=tag_id, type_code=5, length=len(payload), value=payload)


def undefined_item(tag_id: int, payload: bytes) -> PropertyItem:
    return PropertyItem(id=tag_id, type_code=7, length=len(payload), value=payload)
