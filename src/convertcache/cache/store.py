"""Content-addressed on-disk store for transformed buffers.

Each entry is a single file named after the SHA-1 of the *input* bytes:

    {cache_dir}/{sha1(input).hexdigest()}

Identical input bytes therefore share one entry no matter which asset or
config produced them. Entries never expire.

The store holds no state and never logs. Reads and writes return typed
outcomes so the caller decides what to report; only unexpected write
failures raise. Writes go to a sibling temp file that is renamed into place,
so an interrupted write never leaves a truncated entry. All I/O runs
through asyncio.to_thread.
"""

import asyncio
import errno
import hashlib
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class CacheStatus(Enum):
    """Outcome of a cache read or write."""

    HIT = "hit"
    MISS = "miss"
    DENIED = "denied"  # read refused by permissions, treated as a miss
    STORED = "stored"
    SKIPPED = "skipped"  # write abandoned for an environmental reason


@dataclass(frozen=True)
class CacheRead:
    """Result of CacheStore.get."""

    status: CacheStatus
    path: Path
    data: bytes | None = None
    error: OSError | None = None

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT


@dataclass(frozen=True)
class CacheWrite:
    """Result of CacheStore.put."""

    status: CacheStatus
    path: Path
    reason: str | None = None
    error: OSError | None = None

    @property
    def stored(self) -> bool:
        return self.status is CacheStatus.STORED


def _skip_reason(exc: OSError) -> str | None:
    """Classify a write failure as recoverable, or None if it is fatal."""
    if isinstance(exc, (FileNotFoundError, PermissionError)):
        return "permission"
    if exc.errno in (errno.EACCES, errno.EPERM, errno.ENOENT):
        return "permission"
    if exc.errno == errno.EROFS:
        return "read-only"
    return None


class CacheStore:
    """Async content-addressed cache for transform outputs.

    Usage:
        store = CacheStore()
        path = store.address_for(source_bytes, cache_dir)
        result = await store.get(path)
        if not result.hit:
            await store.put(path, converted)
    """

    @staticmethod
    def address_for(data: bytes, cache_dir: str | Path) -> Path:
        """Compute the cache path for a buffer.

        Args:
            data: Input bytes (before transformation)
            cache_dir: Cache root directory

        Returns:
            Absolute path ``cache_dir / sha1(data)``
        """
        digest = hashlib.sha1(data).hexdigest()
        return Path(cache_dir).resolve() / digest

    async def get(self, path: Path) -> CacheRead:
        """Read a cache entry.

        A permission failure yields DENIED, any other OS error (not-found
        included) yields MISS. An empty file is still a hit.
        """
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except PermissionError as e:
            return CacheRead(CacheStatus.DENIED, path, error=e)
        except OSError:
            return CacheRead(CacheStatus.MISS, path)
        return CacheRead(CacheStatus.HIT, path, data=data)

    async def put(self, path: Path, data: bytes) -> CacheWrite:
        """Persist a cache entry, creating parent directories as needed.

        Args:
            path: Entry path from address_for
            data: Transformed bytes

        Returns:
            STORED on success, SKIPPED when the location is missing, not
            permitted or on a read-only filesystem

        Raises:
            OSError: Any other filesystem failure
        """

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Readers see either no entry or a complete one.
            tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
            try:
                tmp.write_bytes(data)
                tmp.replace(path)
            finally:
                tmp.unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            reason = _skip_reason(e)
            if reason is None:
                raise
            return CacheWrite(CacheStatus.SKIPPED, path, reason=reason, error=e)
        return CacheWrite(CacheStatus.STORED, path)
