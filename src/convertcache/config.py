"""Configuration management for convert-cache.

Resolves the process-wide defaults (cache location, concurrency bound) once
using Pydantic. Environment variables use the ``CONVERT_CACHE_`` prefix.

Usage:
    from convertcache.config import Settings

    settings = Settings()
    print(settings.cache_dir)
"""

import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NAMESPACE = "convert-cache"


def resolve_default_cache_dir(
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """Pick the default cache directory.

    Fallback chain: ``$XDG_CACHE_HOME/convert-cache``, then
    ``~/.cache/convert-cache``, then ``<tempdir>/convert-cache``.

    Args:
        environ: Environment mapping (default: ``os.environ``)
        home: Home directory override (default: probed via ``Path.home()``)

    Returns:
        Directory under which cache entries are stored
    """
    env = os.environ if environ is None else environ

    xdg_cache = env.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache) / NAMESPACE

    if home is None:
        try:
            home = Path.home()
        except (RuntimeError, KeyError):
            home = None

    if home is not None:
        return home / ".cache" / NAMESPACE

    return Path(tempfile.gettempdir()) / NAMESPACE


class Settings(BaseSettings):
    """convert-cache configuration from environment variables.

    Immutable once loaded. The plugin builds one instance at construction and
    threads it through; nothing reads settings from module state.

    Attributes:
        cache_dir: Default directory for cache entries, used by every transform
            config that does not set its own
        max_concurrency: Upper bound on in-flight (asset, config) pairs per
            pass. None leaves every pair dispatched at once.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONVERT_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
        frozen=True,
    )

    cache_dir: Path = Field(
        default_factory=resolve_default_cache_dir,
        description="Default cache directory",
    )
    max_concurrency: int | None = Field(
        default=None,
        ge=1,
        description="Max concurrent (asset, config) pairs per pass",
    )

    @field_validator("cache_dir")
    @classmethod
    def expand_cache_dir(cls, v: Path) -> Path:
        """Expand a leading ``~`` in the cache directory."""
        return v.expanduser()
