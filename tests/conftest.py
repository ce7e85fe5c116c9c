"""Shared pytest fixtures."""

import pytest

from imgprops.core.modules.pipeline.pipeline import EntryPipeline
from imgprops.core.modules.registry.registry import TagRegistry, default_registry


@pytest.fixture
def registry():
    """Registry built from the packaged tables."""
    return default_registry()


@pytest.fixture
def small_registry():
    """Registry with a handful of tags for selection tests."""
    return TagRegistry(
        tags={
            0x0007: "GpsGpsTime",
            0x0100: "ImageWidth",
            0x0101: "ImageHeight",
            0x011A: "XResolution",
            0x0132: "DateTime",
            0x8827: "ExifISOSpeed",
            0x927C: "ExifMakerNote",
        },
        types={1: "BYTE", 2: "ASCII", 3: "SHORT", 4: "LONG", 5: "RATIONAL", 7: "UNDEFINED", 9: "SLONG", 10: "SRATIONAL"},
    )


@pytest.fixture
def pipeline(registry):
    return EntryPipeline(registry)
