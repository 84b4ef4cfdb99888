"""ConvertCachePlugin, the object plugin authors hand to the host compiler.

Usage:
    plugin = ConvertCachePlugin([
        {
            "test": r"\\.css$",
            "convert": gzip.compress,
            "filename": lambda name: f"{name}.css.gz",
        },
    ])
    plugin.apply(compiler)
"""

import logging
from collections.abc import Mapping, Sequence

from convertcache.adapters import HookAdapter, select_adapter
from convertcache.cache import CacheStore
from convertcache.config import NAMESPACE, Settings
from convertcache.host import Compilation, Compiler, Source
from convertcache.pipeline import ConfigSet, TransformOrchestrator, format_size
from convertcache.pipeline.configset import RawConfig

logger = logging.getLogger(__name__)


class ConvertCachePlugin:
    """Caches expensive asset transforms across builds.

    Args:
        configs: One transform config or a sequence of them. Invalid configs
            are logged and skipped.
        settings: Resolved settings (default: loaded from the environment)
        store: Cache backend (default: a new CacheStore)
    """

    def __init__(
        self,
        configs: RawConfig | Sequence[RawConfig],
        settings: Settings | None = None,
        store: CacheStore | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.configs = ConfigSet.normalize(
            configs, default_cache_dir=self.settings.cache_dir
        )
        self.orchestrator = TransformOrchestrator(
            self.configs,
            store=store,
            max_concurrency=self.settings.max_concurrency,
        )
        self.adapter: HookAdapter | None = None

    def apply(self, compiler: Compiler) -> None:
        """Register with the host compiler."""
        self.adapter = select_adapter(compiler.version)
        logger.debug(
            "Host version %s, using %s",
            compiler.version, type(self.adapter).__name__,
        )
        self.adapter.register(compiler, self.process_compilation)

    async def process_compilation(
        self,
        compilation: Compilation,
        assets: Mapping[str, Source],
    ) -> float | None:
        """Run one pass and report its total delta.

        Failures are appended to ``compilation.errors`` instead of raised so
        the host reports them alongside its own.

        Returns:
            Total kilobyte delta, or None when the pass failed
        """
        try:
            total = await self.orchestrator.process(assets, target=compilation.assets)
        except Exception as e:
            logger.error("%s failed: %s", NAMESPACE, e)
            compilation.errors.append(e)
            return None

        logger.info("%s %s", NAMESPACE, format_size(total))
        return total
