"""Semantic formatting of decoded property values."""

from collections.abc import Mapping
from dataclasses import replace

from imgprops.core.modules.decoder.models import DecodedValue, Empty, Single
from imgprops.core.modules.formatter.rules import RULES, SUPPRESSED_TAGS, Rule, RuleInput, generic
from imgprops.core.modules.pipeline.models import DecodedEntry, DisplayValue
from imgprops.errors import FormatError


def trim(value: DisplayValue) -> DisplayValue:
    if isinstance(value, str):
        return value.strip()
    return value


def _trim_decoded(decoded: DecodedValue) -> DecodedValue:
    match decoded:
        case Single(value=str() as text):
            return Single(text.strip())
        case _:
            return decoded


class Formatter:
    """Renders display values through a per-tag rule table with a generic fallback."""

    def __init__(self, rules: Mapping[int, Rule] = RULES, suppressed: frozenset[int] = SUPPRESSED_TAGS) -> None:
        self._rules = dict(rules)
        self._suppressed = suppressed

    def rule_for(self, tag_id: int) -> Rule:
        return self._rules.get(tag_id, generic)

    def is_suppressed(self, tag_id: int) -> bool:
        return tag_id in self._suppressed

    def format(self, tag_id: int, tag_name: str, decoded: DecodedValue, raw: bytes | None = None) -> DisplayValue:
        """Render the display value of one tag.

        Args:
            tag_id: Numeric tag id
            tag_name: Resolved tag name, used in error messages
            decoded: Decoded value of the tag
            raw: Raw payload, needed by rules that look at individual bytes

        Returns:
            Display value with surrounding whitespace trimmed from strings

        Raises:
            FormatError: If the rule cannot handle the decoded value
        """
        if self.is_suppressed(tag_id):
            return None
        rule = self.rule_for(tag_id)
        try:
            display = rule(RuleInput(tag_id=tag_id, tag_name=tag_name, decoded=decoded, raw=raw))
        except FormatError:
            raise
        except (ArithmeticError, IndexError, TypeError, ValueError) as e:
            raise FormatError(f"Cannot format {tag_name}: {e}", tag_id=tag_id) from e
        return trim(display)

    def apply(self, entry: DecodedEntry) -> DecodedEntry:
        """Return the entry with its display value filled in and text values trimmed.

        Raises:
            FormatError: If the rule cannot handle the decoded value
        """
        if self.is_suppressed(entry.id_dec):
            return replace(entry, decoded=Empty(), display=None)
        display = self.format(entry.id_dec, entry.tag_name, entry.decoded, entry.raw_bytes)
        return replace(entry, decoded=_trim_decoded(entry.decoded), display=display)
