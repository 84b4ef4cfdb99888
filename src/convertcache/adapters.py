"""Hook adapters for the supported host compiler generations.

Hosts on major version 4 expose a single ``emit`` hook. Later hosts run
asset processing in a dedicated ``process_assets`` stage that is reached
through ``this_compilation``. The adapter is picked once per compiler by
select_adapter.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from convertcache.config import NAMESPACE
from convertcache.host import (
    PROCESS_ASSETS_STAGE_ADDITIONAL,
    Compilation,
    Compiler,
    Source,
    StageOptions,
)

PassTask = Callable[[Compilation, Mapping[str, Source]], Awaitable[Any]]


class HookAdapter(ABC):
    """Registers a per-pass task the host awaits before advancing."""

    @abstractmethod
    def register(self, compiler: Compiler, task: PassTask) -> None:
        """Tap the host hooks so that ``task`` runs once per pass."""


class EmitHookAdapter(HookAdapter):
    """Single emit-stage hook (host major version 4)."""

    def register(self, compiler: Compiler, task: PassTask) -> None:
        def _on_emit(compilation: Compilation) -> Awaitable[Any]:
            return task(compilation, compilation.assets)

        compiler.hooks.emit.tap_promise(NAMESPACE, _on_emit)


class ProcessAssetsHookAdapter(HookAdapter):
    """Compilation start followed by the additional-assets processing stage."""

    def register(self, compiler: Compiler, task: PassTask) -> None:
        options = StageOptions(
            name=NAMESPACE,
            stage=PROCESS_ASSETS_STAGE_ADDITIONAL,
            additional_assets=True,
        )

        def _on_compilation(compilation: Compilation) -> None:
            def _on_process_assets(assets: Mapping[str, Source]) -> Awaitable[Any]:
                return task(compilation, assets)

            compilation.hooks.process_assets.tap_promise(options, _on_process_assets)

        compiler.hooks.this_compilation.tap(NAMESPACE, _on_compilation)


def select_adapter(version: str) -> HookAdapter:
    """Pick the hook adapter for a host version string."""
    if version.startswith("4."):
        return EmitHookAdapter()
    return ProcessAssetsHookAdapter()
