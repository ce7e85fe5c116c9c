from imgprops.config import Config
from imgprops.core.modules.formatter.formatter import Formatter
from imgprops.core.modules.pipeline.pipeline import EntryPipeline
from imgprops.core.modules.registry.registry import TagRegistry, default_registry


class Core:
    """Container providing config, the lookup tables and the entry pipeline."""

    config: Config
    registry: TagRegistry
    pipeline: EntryPipeline

    def __init__(self, config: Config, registry: TagRegistry | None = None) -> None:
        """Initialize core with config; the packaged tables are used unless config overrides them."""
        self.config = config
        if registry is None:
            if config.tag_table or config.type_table:
                registry = TagRegistry.from_files(config.tag_table, config.type_table)
            else:
                registry = default_registry()
        self.registry = registry
        self.pipeline = EntryPipeline(registry, Formatter())
