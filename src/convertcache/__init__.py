"""convert-cache: content-addressed caching for expensive build asset transforms.

Wraps a buffer-to-buffer transform (compression, format conversion, ...) in a
build plugin. Outputs are cached on disk by the SHA-1 of their input so
unchanged assets are never converted twice, even across builds.
"""

from convertcache.cache import CacheStore
from convertcache.config import Settings
from convertcache.host import BufferAsset
from convertcache.pipeline import ConfigSet, TransformConfig, TransformOrchestrator
from convertcache.plugin import ConvertCachePlugin

__version__ = "0.1.0"

__all__ = [
    "BufferAsset",
    "CacheStore",
    "ConfigSet",
    "ConvertCachePlugin",
    "Settings",
    "TransformConfig",
    "TransformOrchestrator",
]
