"""Host build pipeline interface.

convert-cache does not drive a build itself. It plugs into a host compiler
that owns the asset collection and the hook lifecycle. This module describes
the subset of that host the plugin relies on, as structural protocols, plus
the concrete asset type the plugin registers.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass, field
from typing import Any, Protocol

# Stage for adding assets derived from existing ones
PROCESS_ASSETS_STAGE_ADDITIONAL = -2000


class Source(Protocol):
    """An asset as exposed by the host."""

    def source(self) -> bytes: ...

    def size(self) -> int: ...


@dataclass(frozen=True)
class BufferAsset:
    """Immutable in-memory asset produced by a transform."""

    data: bytes = field(repr=False)

    def source(self) -> bytes:
        return self.data

    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StageOptions:
    """Tap options for a staged asset-processing hook."""

    name: str
    stage: int = PROCESS_ASSETS_STAGE_ADDITIONAL
    additional_assets: bool = False


class SyncHook(Protocol):
    def tap(self, name: str, fn: Callable[..., Any]) -> None: ...


class AsyncHook(Protocol):
    def tap_promise(
        self,
        options: str | StageOptions,
        fn: Callable[..., Awaitable[Any]],
    ) -> None: ...


class CompilationHooks(Protocol):
    process_assets: AsyncHook


class Compilation(Protocol):
    """A single build pass."""

    assets: MutableMapping[str, Source]
    errors: list[BaseException]
    hooks: CompilationHooks


class CompilerHooks(Protocol):
    emit: AsyncHook
    this_compilation: SyncHook


class Compiler(Protocol):
    """The host build tool."""

    version: str
    hooks: CompilerHooks
