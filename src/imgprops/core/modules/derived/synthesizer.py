"""Synthetic *PS entries computed from formatted tags."""

from dataclasses import replace
from datetime import datetime, timedelta

import structlog

from imgprops.core.modules.decoder.models import Opaque, components
from imgprops.core.modules.pipeline.models import DERIVED_SUFFIX, DecodedEntry
from imgprops.utils import is_exif_datetime

logger = structlog.get_logger(__name__)

WIDTH_TAGS = frozenset({"ImageWidth", "ExifPixXDim"})
HEIGHT_TAGS = frozenset({"ImageHeight", "ExifPixYDim"})
GPS_TIME_TAG = "GpsGpsTime"

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"


def derived_name(tag_name: str) -> str:
    return f"{tag_name}{DERIVED_SUFFIX}"


def _derive(entry: DecodedEntry, tag_name: str, value: datetime | timedelta | None = None) -> DecodedEntry:
    if value is None:
        return replace(entry, tag_name=tag_name, raw_bytes=None, derived=True)
    return replace(entry, tag_name=tag_name, raw_bytes=None, decoded=Opaque(value), display=value, derived=True)


def parse_exif_datetime(text: str) -> datetime | None:
    """Parse 'YYYY:MM:DD HH:MM:SS'; None for impossible calendar values such as all zeros."""
    try:
        return datetime.strptime(text, EXIF_DATETIME_FORMAT)
    except ValueError:
        return None


def gps_time_of_day(entry: DecodedEntry) -> timedelta | None:
    values = components(entry.decoded)
    if len(values) < 3 or any(isinstance(value, str) for value in values[:3]):
        return None
    hours, minutes, seconds = (float(value) for value in values[:3])
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def synthesize(entry: DecodedEntry) -> list[DecodedEntry]:
    """Derive the synthetic entries of one formatted entry.

    Width and height tags are aliased as ImageWidthPS / ImageHeightPS,
    date/time strings are parsed into datetime values and the GPS time of
    day into a timedelta, each named <tag name>PS.

    Args:
        entry: A formatted, non-faulty entry

    Returns:
        Zero to two synthetic entries, in emission order
    """
    if entry.fault is not None or entry.derived or entry.is_file_object:
        return []

    synthetic: list[DecodedEntry] = []
    if entry.tag_name in WIDTH_TAGS:
        synthetic.append(_derive(entry, derived_name("ImageWidth")))
    elif entry.tag_name in HEIGHT_TAGS:
        synthetic.append(_derive(entry, derived_name("ImageHeight")))

    if is_exif_datetime(entry.display):
        parsed = parse_exif_datetime(str(entry.display))
        if parsed is None:
            logger.debug("Skipped invalid date", tag=entry.tag_name, value=entry.display)
        else:
            synthetic.append(_derive(entry, derived_name(entry.tag_name), parsed))

    if entry.tag_name == GPS_TIME_TAG:
        time_of_day = gps_time_of_day(entry)
        if time_of_day is not None:
            synthetic.append(_derive(entry, derived_name(entry.tag_name), time_of_day))

    return synthetic
