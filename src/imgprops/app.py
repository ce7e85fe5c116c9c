from collections.abc import Sequence
from pathlib import Path

from imgprops.config import Config
from imgprops.core.core import Core
from imgprops.core.modules.pipeline.models import DecodedEntry, EntryView, FileProperties, PipelineOptions
from imgprops.core.modules.pipeline.pipeline import to_properties
from imgprops.core.modules.registry.registry import TagRegistry


class App:
    """Facade over Core used by the command line; fills option defaults from config."""

    def __init__(self, config: Config, registry: TagRegistry | None = None) -> None:
        self._core = Core(config, registry)

    @property
    def registry(self) -> TagRegistry:
        return self._core.registry

    def options(
        self,
        tag_selectors: Sequence[str | int] = (),
        suppress_derived: bool | None = None,
        include_unknown: bool | None = None,
        skip_faulty: bool | None = None,
    ) -> PipelineOptions:
        """Build pipeline options; arguments left as None fall back to config."""
        config = self._core.config
        return PipelineOptions(
            tag_selectors=list(tag_selectors),
            suppress_derived=config.suppress_derived if suppress_derived is None else suppress_derived,
            include_unknown=config.include_unknown if include_unknown is None else include_unknown,
            skip_faulty=config.skip_faulty if skip_faulty is None else skip_faulty,
        )

    def read_entries(self, path: Path | str, options: PipelineOptions | None = None) -> list[DecodedEntry]:
        """Decoded entries of one image file."""
        return self._core.pipeline.read(path, options or self.options())

    def read_views(self, path: Path | str, options: PipelineOptions | None = None) -> list[EntryView]:
        return [EntryView.from_domain(entry) for entry in self.read_entries(path, options)]

    def read_properties(self, path: Path | str, options: PipelineOptions | None = None) -> FileProperties:
        """Display values of one image file keyed by tag name."""
        return to_properties(self.read_entries(path, options))
