"""Loading of the tag and type tables from their CSV representation."""

import csv
from collections.abc import Iterable
from pathlib import Path

import structlog
from pydantic import ValidationError

from imgprops.core.modules.registry.models import TagRow, TypeRow
from imgprops.errors import RegistryError

logger = structlog.get_logger(__name__)

DATA_PATH = Path(__file__).parent / "data"
DEFAULT_TAG_TABLE = DATA_PATH / "tags.csv"
DEFAULT_TYPE_TABLE = DATA_PATH / "types.csv"


def _read_rows(path: Path) -> list[dict[str, str]]:
    try:
        with path.open(newline="", encoding="utf-8") as f:
            return list(csv.DictReader(f))
    except OSError as e:
        raise RegistryError(f"Cannot read lookup table '{path}': {e}") from e


def build_tag_table(rows: Iterable[TagRow]) -> dict[int, str]:
    """Index tag rows by id, rejecting duplicate ids.

    Raises:
        RegistryError: If two rows share an id
    """
    table: dict[int, str] = {}
    for row in rows:
        if row.id in table:
            raise RegistryError(f"Duplicate tag id {row.id} ('{table[row.id]}' and '{row.name}')")
        table[row.id] = row.name
    return table


def build_type_table(rows: Iterable[TypeRow]) -> dict[int, str]:
    """Index type rows by numeric value, rejecting duplicates.

    Raises:
        RegistryError: If two rows share a value
    """
    table: dict[int, str] = {}
    for row in rows:
        if row.value in table:
            raise RegistryError(f"Duplicate type code {row.value} ('{table[row.value]}' and '{row.description}')")
        table[row.value] = row.description
    return table


def load_tag_table(path: Path = DEFAULT_TAG_TABLE) -> dict[int, str]:
    """Load the tag-id -> name table from a CSV file with an 'id,name' header.

    Raises:
        RegistryError: If the file is unreadable, a row is malformed or an id repeats
    """
    try:
        rows = [TagRow.model_validate(raw) for raw in _read_rows(path)]
    except ValidationError as e:
        raise RegistryError(f"Malformed tag table '{path}': {e}") from e
    table = build_tag_table(rows)
    logger.debug("Loaded tag table", path=str(path), count=len(table))
    return table


def load_type_table(path: Path = DEFAULT_TYPE_TABLE) -> dict[int, str]:
    """Load the type-code -> description table from a CSV file with a 'value,description' header.

    Raises:
        RegistryError: If the file is unreadable, a row is malformed or a value repeats
    """
    try:
        rows = [TypeRow.model_validate(raw) for raw in _read_rows(path)]
    except ValidationError as e:
        raise RegistryError(f"Malformed type table '{path}': {e}") from e
    table = build_type_table(rows)
    logger.debug("Loaded type table", path=str(path), count=len(table))
    return table
