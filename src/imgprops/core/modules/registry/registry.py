"""Read-only tag and type lookups shared by the formatter, selector and pipeline."""

from collections.abc import Mapping
from functools import cache
from pathlib import Path
from types import MappingProxyType

from imgprops.core.modules.registry.loader import (
    DEFAULT_TAG_TABLE,
    DEFAULT_TYPE_TABLE,
    load_tag_table,
    load_type_table,
)

UNKNOWN_TYPE = "UNKNOWN"


class TagRegistry:
    """Immutable tag-id -> name and type-code -> description lookups."""

    def __init__(self, tags: Mapping[int, str], types: Mapping[int, str]) -> None:
        self._tags = MappingProxyType(dict(tags))
        self._types = MappingProxyType(dict(types))

    @classmethod
    def from_files(cls, tag_table: Path | str | None = None, type_table: Path | str | None = None) -> "TagRegistry":
        """Load a registry from CSV tables, defaulting to the packaged ones."""
        tags = load_tag_table(Path(tag_table) if tag_table else DEFAULT_TAG_TABLE)
        types = load_type_table(Path(type_table) if type_table else DEFAULT_TYPE_TABLE)
        return cls(tags, types)

    def tag_name(self, tag_id: int) -> str | None:
        """Canonical name of a tag id, or None when the id is not in the table."""
        return self._tags.get(tag_id)

    def type_description(self, type_code: int) -> str:
        return self._types.get(type_code, UNKNOWN_TYPE)

    def __len__(self) -> int:
        return len(self._tags)


@cache
def default_registry() -> TagRegistry:
    """Registry built from the packaged tables, loaded once per process."""
    return TagRegistry.from_files()
