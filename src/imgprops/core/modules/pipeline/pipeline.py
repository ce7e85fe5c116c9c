"""Orchestration of decoding, formatting, derivation and selection for one file."""

from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path

import structlog

from imgprops.core.modules.decoder.decoder import decode
from imgprops.core.modules.decoder.models import Empty, Opaque, TypeCode
from imgprops.core.modules.derived.synthesizer import synthesize
from imgprops.core.modules.formatter.formatter import Formatter
from imgprops.core.modules.pipeline.models import (
    FILE_OBJECT_ID,
    FILE_OBJECT_NAME,
    DecodedEntry,
    FileProperties,
    PipelineOptions,
    PropertyItem,
)
from imgprops.core.modules.pipeline.source import read_property_items
from imgprops.core.modules.registry.registry import TagRegistry
from imgprops.core.modules.selector.selector import TagSelector
from imgprops.errors import DecodeError, FormatError
from imgprops.utils import hex_id

logger = structlog.get_logger(__name__)


def unknown_tag_name(tag_id: int) -> str:
    return f"Unknown_{hex_id(tag_id)}_{tag_id}"


def file_object_entry(path: Path) -> DecodedEntry:
    """Pseudo entry standing for the file itself."""
    try:
        size = path.stat().st_size
    except OSError:
        size = 0
    return DecodedEntry(
        id_dec=FILE_OBJECT_ID,
        tag_name=FILE_OBJECT_NAME,
        type_code=TypeCode.ASCII,
        type_desc="UNDEFINED",
        length=size,
        decoded=Opaque(path),
        display=path,
    )


def to_properties(entries: Iterable[DecodedEntry]) -> FileProperties:
    """Fold entries into a tag name -> display value mapping attached to the file-object row.

    Later entries with the same name replace earlier ones.
    """
    result = FileProperties()
    for entry in entries:
        if entry.is_file_object:
            result.file = entry.display if isinstance(entry.display, Path) else None
            continue
        result.properties[entry.tag_name] = entry.display
    return result


class EntryPipeline:
    """Turns the property items of one file into the ordered list of output entries."""

    def __init__(self, registry: TagRegistry, formatter: Formatter | None = None) -> None:
        self.registry = registry
        self.formatter = formatter or Formatter()

    def read(self, path: Path | str, options: PipelineOptions | None = None) -> list[DecodedEntry]:
        """Read an image file and run the pipeline over its property items.

        An unreadable file yields no tag entries; the file-object row is still
        emitted when selected.
        """
        path = Path(path)
        entries = self.run(read_property_items(path), options, file=path)
        logger.info("Processed file", path=str(path), entries=len(entries))
        return entries

    def run(
        self, items: Iterable[PropertyItem], options: PipelineOptions | None = None, file: Path | None = None
    ) -> list[DecodedEntry]:
        """Decode, format, derive and select entries.

        Args:
            items: Property items in file order
            options: Selection and derivation options (defaults select everything)
            file: File the items came from; adds the file-object row when given

        Returns:
            Entries in output order: the file-object row first, then each tag
            followed by its derived entries
        """
        options = options or PipelineOptions()
        selector = TagSelector(options.tag_selectors, options.include_unknown, options.suppress_derived)

        entries: list[DecodedEntry] = []
        if file is not None and selector.accepts_file_object():
            entries.append(file_object_entry(file))
        for item in items:
            entries.extend(self.process_item(item, selector, options))
        return entries

    def process_item(self, item: PropertyItem, selector: TagSelector, options: PipelineOptions) -> list[DecodedEntry]:
        """Entries produced by one property item: none, the tag itself, or the tag and its derived entries."""
        name = self.registry.tag_name(item.id)
        known = name is not None
        tag_name = name if name is not None else unknown_tag_name(item.id)
        if not selector.accepts_tag(item.id, tag_name, known):
            return []

        entry = DecodedEntry(
            id_dec=item.id,
            tag_name=tag_name,
            type_code=item.type_code,
            type_desc=self.registry.type_description(item.type_code),
            length=item.length,
            raw_bytes=item.value,
        )
        try:
            entry = replace(entry, decoded=decode(item.type_code, item.value, tag_id=item.id))
            entry = self.formatter.apply(entry)
        except (DecodeError, FormatError) as e:
            logger.warning("Faulty property item", tag=tag_name, id=entry.id_hex, error=str(e))
            if options.skip_faulty:
                return []
            return [replace(entry, decoded=Empty(), display=None, fault=str(e))]

        logger.debug("Decoded property item", tag=tag_name, id=entry.id_hex, type=entry.type_desc)
        result = [entry]
        if not options.suppress_derived:
            result.extend(derived for derived in synthesize(entry) if selector.accepts(derived))
        return result
