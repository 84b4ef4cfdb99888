"""Transform pipeline: Configs → Cache / Transform → New assets → Report.

Components:
- ConfigSet: Validates and normalizes transform configs
- TransformOrchestrator: Runs every (asset, config) pair of a pass
- report: Size delta arithmetic and formatting
"""

from convertcache.pipeline.configset import ConfigSet, TransformConfig
from convertcache.pipeline.orchestrator import TransformOrchestrator
from convertcache.pipeline.report import compute_delta, format_size

__all__ = [
    "ConfigSet",
    "TransformConfig",
    "TransformOrchestrator",
    "compute_delta",
    "format_size",
]
