"""Transform orchestration: assets to cache or transform to new assets.

One pass evaluates every (asset, config) pair concurrently:
  1. Skip pairs whose config does not match the asset name (delta 0)
  2. Compute the output name
  3. Look up the content-addressed cache (input bytes → cached output)
  4. On a miss, run the transform and persist its output best-effort
  5. Register the output as a new asset
  6. Return the kilobyte size delta for the pass total

Cache failures never fail a pass. A failing transform propagates.

Usage:
    orchestrator = TransformOrchestrator(configs)
    total = await orchestrator.process(compilation.assets)
"""

import asyncio
import inspect
import logging
from collections.abc import Mapping, MutableMapping
from contextlib import AbstractAsyncContextManager, nullcontext

from convertcache.cache import CacheStatus, CacheStore
from convertcache.config import NAMESPACE
from convertcache.host import BufferAsset, Source
from convertcache.pipeline.configset import ConfigSet, TransformConfig
from convertcache.pipeline.report import compute_delta, format_size

logger = logging.getLogger(__name__)


class TransformOrchestrator:
    """Runs transform configs over a snapshot of assets.

    Args:
        configs: Enabled transform configs
        store: Cache backend (default: a new CacheStore)
        max_concurrency: Upper bound on in-flight pairs. None dispatches
            every pair at once.
    """

    def __init__(
        self,
        configs: ConfigSet,
        store: CacheStore | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self.configs = configs
        self.store = store or CacheStore()
        self.max_concurrency = max_concurrency

    async def process(
        self,
        assets: Mapping[str, Source],
        target: MutableMapping[str, Source] | None = None,
    ) -> float:
        """Run one pass over the current assets.

        Args:
            assets: Current assets by name. Snapshotted on entry; assets
                registered during the pass are not themselves processed.
            target: Collection new assets are written into
                (default: ``assets``)

        Returns:
            Sum of every pair's kilobyte delta

        Raises:
            Exception: Whatever a transform raised, or an unexpected cache
                write failure. Every other pair still runs to completion
                first; when several fail, the first in dispatch order is
                raised. The pass produces no total.
        """
        if target is None:
            if not isinstance(assets, MutableMapping):
                raise TypeError("target is required when assets is read-only")
            target = assets

        snapshot = list(assets.items())
        existing = {name for name, _ in snapshot}
        produced: dict[str, str] = {}

        limiter: AbstractAsyncContextManager = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency
            else nullcontext()
        )

        async def _run(name: str, asset: Source, config: TransformConfig) -> float:
            async with limiter:
                return await self._process_pair(
                    name, asset, config, target, existing, produced
                )

        tasks = [
            _run(name, asset, config)
            for name, asset in snapshot
            for config in self.configs
        ]
        # All pairs settle before a failure is raised.
        results = await asyncio.gather(*tasks, return_exceptions=True)
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for extra in failures[1:]:
                logger.error(
                    "%s: another pair failed in the same pass: %r", NAMESPACE, extra
                )
            raise failures[0]
        return sum(results, 0.0)

    async def _process_pair(
        self,
        name: str,
        asset: Source,
        config: TransformConfig,
        target: MutableMapping[str, Source],
        existing: set[str],
        produced: dict[str, str],
    ) -> float:
        if not config.matches(name):
            return 0.0

        output_name = config.output_name(name)
        source = asset.source()
        if isinstance(source, str):
            source = source.encode("utf-8")

        converted, from_cache = await self._convert(source, config)

        if output_name in produced:
            logger.warning(
                "%s: %s -> %s overwrites the output of %s produced in this pass",
                NAMESPACE, name, output_name, produced[output_name],
            )
        elif output_name in existing:
            logger.warning(
                "%s: %s -> %s overwrites an existing asset",
                NAMESPACE, name, output_name,
            )
        target[output_name] = BufferAsset(converted)
        produced[output_name] = name

        delta = compute_delta(source, converted)
        if config.verbose:
            logger.info(
                "%s%s -> %s: %s",
                "(cache) " if from_cache else "",
                name, output_name, format_size(delta, signed=True),
            )
        return delta

    async def _convert(
        self, source: bytes, config: TransformConfig
    ) -> tuple[bytes, bool]:
        """Return (converted bytes, served from cache)."""
        path = None
        if config.cache:
            path = self.store.address_for(source, config.cache_dir)
            cached = await self.store.get(path)
            if cached.hit:
                return cached.data, True
            if cached.status is CacheStatus.DENIED:
                logger.warning(
                    "%s could not read cache file: %s due to a permission issue.",
                    NAMESPACE, path,
                )

        converted = config.convert(source)
        if inspect.isawaitable(converted):
            converted = await converted
        if not isinstance(converted, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"convert must return bytes, got {type(converted).__name__}"
            )
        converted = bytes(converted)

        if path is not None:
            written = await self.store.put(path, converted)
            if written.status is CacheStatus.SKIPPED:
                if written.reason == "read-only":
                    logger.warning(
                        "%s could not write cache to file: %s because it "
                        "resides in a readonly filesystem.",
                        NAMESPACE, path,
                    )
                else:
                    logger.warning(
                        "%s could not write cache to file: %s due to a "
                        "permission issue.",
                        NAMESPACE, path,
                    )

        return converted, False
