"""Example 1: Compress a build output directory

Runs a gzip transform over every .js/.css file of a directory, the way the
plugin does inside a build pass, and writes the compressed siblings next to
the originals. Run it twice: the second run is served from the cache.

Usage:
    python examples/01_compress_dist.py path/to/dist
"""

import asyncio
import gzip
import logging
import sys
from pathlib import Path

from convertcache import BufferAsset, ConfigSet, Settings, TransformOrchestrator
from convertcache.pipeline import format_size


def gzip_config() -> dict:
    return {
        "test": r"\.(js|css)$",
        "convert": lambda data: gzip.compress(data, compresslevel=9, mtime=0),
        # Keep the original extension: app.js -> app.js.gz
        "override_extension": False,
        "filename": lambda name: f"{name}.gz",
    }


async def compress_dir(root: Path) -> float:
    settings = Settings()
    configs = ConfigSet.normalize(gzip_config(), default_cache_dir=settings.cache_dir)
    orchestrator = TransformOrchestrator(configs, max_concurrency=settings.max_concurrency)

    assets = {
        str(path.relative_to(root)): BufferAsset(path.read_bytes())
        for path in root.rglob("*")
        if path.is_file()
    }
    produced: dict = {}
    total = await orchestrator.process(assets, target=produced)

    for name, asset in produced.items():
        (root / name).write_bytes(asset.source())
    return total


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if len(sys.argv) != 2:
        print(__doc__)
        return 1

    total = asyncio.run(compress_dir(Path(sys.argv[1])))
    print(f"Saved {format_size(total)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
