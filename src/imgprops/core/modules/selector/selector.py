"""Selection of the entries that survive to output."""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase

from imgprops.core.modules.pipeline.models import DERIVED_SUFFIX, FILE_OBJECT_ID, FILE_OBJECT_NAME, DecodedEntry

_DECIMAL_RE = re.compile(r"^[+-]?\d+$")
_HEX_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")

# Longest first so 'PS*' is not stripped as 'PS'
_DERIVED_SUFFIXES = (f"{DERIVED_SUFFIX}*", f"{DERIVED_SUFFIX}?", DERIVED_SUFFIX)


def parse_number(text: str) -> int | None:
    """Parse a decimal or 0x-prefixed hex tag id; None when the text is a name or pattern."""
    text = text.strip()
    if _DECIMAL_RE.match(text):
        return int(text)
    if _HEX_RE.match(text):
        return int(text, 16)
    return None


def strip_derived_suffix(pattern: str) -> str:
    for suffix in _DERIVED_SUFFIXES:
        if pattern.endswith(suffix):
            return pattern[: -len(suffix)]
    return pattern


@dataclass(frozen=True)
class Selector:
    """One caller-supplied selector, pre-parsed."""

    text: str
    number: int | None
    source_pattern: str  # Pattern with the derived suffix stripped

    @classmethod
    def parse(cls, raw: str | int) -> "Selector":
        if isinstance(raw, int):
            return cls(text=str(raw), number=raw, source_pattern=str(raw))
        return cls(text=raw, number=parse_number(raw), source_pattern=strip_derived_suffix(raw))

    def matches_source(self, tag_id: int, tag_name: str) -> bool:
        if self.number is not None and self.number == tag_id:
            return True
        return fnmatchcase(tag_name, self.source_pattern)

    def matches_derived(self, tag_id: int, tag_name: str) -> bool:
        if self.number is not None and self.number == tag_id:
            return True
        return fnmatchcase(tag_name, self.text)

    def names_file_object(self) -> bool:
        return self.number == FILE_OBJECT_ID or self.text == FILE_OBJECT_NAME


class TagSelector:
    """Decides which decoded, synthetic and file-object entries are emitted.

    Selectors are tried in the order supplied; the first match wins.
    """

    def __init__(
        self, selectors: Sequence[str | int] = (), include_unknown: bool = False, suppress_derived: bool = False
    ) -> None:
        self.selectors = [Selector.parse(raw) for raw in selectors]
        self.include_unknown = include_unknown
        self.suppress_derived = suppress_derived

    @property
    def selects_all(self) -> bool:
        return not self.selectors

    def match_source(self, tag_id: int, tag_name: str) -> Selector | None:
        return next((s for s in self.selectors if s.matches_source(tag_id, tag_name)), None)

    def match_derived(self, tag_id: int, tag_name: str) -> Selector | None:
        return next((s for s in self.selectors if s.matches_derived(tag_id, tag_name)), None)

    def accepts_tag(self, tag_id: int, tag_name: str, known: bool = True) -> bool:
        """Whether a decoded tag passes; unknown tags need include_unknown."""
        if not known and not self.include_unknown:
            return False
        return self.selects_all or self.match_source(tag_id, tag_name) is not None

    def accepts_derived(self, tag_id: int, tag_name: str) -> bool:
        if self.suppress_derived:
            return False
        return self.selects_all or self.match_derived(tag_id, tag_name) is not None

    def accepts_file_object(self) -> bool:
        if self.selects_all:
            return not self.suppress_derived
        return any(s.names_file_object() for s in self.selectors)

    def accepts(self, entry: DecodedEntry, known: bool = True) -> bool:
        if entry.is_file_object:
            return self.accepts_file_object()
        if entry.derived:
            return self.accepts_derived(entry.id_dec, entry.tag_name)
        return self.accepts_tag(entry.id_dec, entry.tag_name, known)
