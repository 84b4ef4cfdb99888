"""Tests for ConvertCachePlugin and the host hook adapters.

Uses a minimal in-memory host that mimics both compiler generations:
version 4 runs the emit hook, later versions run process_assets.
"""

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from convertcache import BufferAsset, ConvertCachePlugin, Settings
from convertcache.adapters import (
    EmitHookAdapter,
    ProcessAssetsHookAdapter,
    select_adapter,
)
from convertcache.config import NAMESPACE
from convertcache.host import PROCESS_ASSETS_STAGE_ADDITIONAL, StageOptions


# --- Fake host ---


class FakeAsyncHook:
    def __init__(self) -> None:
        self.taps: list = []

    def tap_promise(self, options, fn) -> None:
        self.taps.append((options, fn))

    async def run(self, *args) -> list:
        return [await fn(*args) for _, fn in self.taps]


class FakeSyncHook:
    def __init__(self) -> None:
        self.taps: list = []

    def tap(self, name, fn) -> None:
        self.taps.append((name, fn))

    def call(self, *args) -> None:
        for _, fn in self.taps:
            fn(*args)


class FakeCompilation:
    def __init__(self, assets: dict) -> None:
        self.assets = dict(assets)
        self.errors: list = []
        self.hooks = SimpleNamespace(process_assets=FakeAsyncHook())


class FakeCompiler:
    def __init__(self, version: str) -> None:
        self.version = version
        self.hooks = SimpleNamespace(emit=FakeAsyncHook(), this_compilation=FakeSyncHook())

    async def run(self, assets: dict) -> FakeCompilation:
        compilation = FakeCompilation(assets)
        self.hooks.this_compilation.call(compilation)
        await compilation.hooks.process_assets.run(compilation.assets)
        await self.hooks.emit.run(compilation)
        return compilation


# --- Fixtures ---


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(cache_dir=tmp_path / "cache")


@pytest.fixture
def css_config() -> dict:
    return {
        "test": r"\.css$",
        "convert": lambda data: data[: len(data) // 4],
        "filename": lambda name: f"{name}.min",
    }


# --- Tests ---


class TestSelectAdapter:
    """Test host version probing."""

    @pytest.mark.parametrize("version", ["4.0.0", "4.46.0"])
    def test_v4_uses_emit(self, version: str) -> None:
        assert isinstance(select_adapter(version), EmitHookAdapter)

    @pytest.mark.parametrize("version", ["5.0.0", "5.90.1", "6.0.0-beta"])
    def test_later_versions_use_process_assets(self, version: str) -> None:
        assert isinstance(select_adapter(version), ProcessAssetsHookAdapter)

    def test_emit_adapter_taps_emit_only(self, settings: Settings, css_config: dict) -> None:
        """The v4 adapter registers a single emit hook under the plugin name."""
        compiler = FakeCompiler("4.46.0")
        ConvertCachePlugin(css_config, settings=settings).apply(compiler)

        assert [name for name, _ in compiler.hooks.emit.taps] == [NAMESPACE]
        assert compiler.hooks.this_compilation.taps == []

    def test_process_assets_adapter_stage(self, settings: Settings, css_config: dict) -> None:
        """Newer hosts get an additional-assets stage tap per compilation."""
        compiler = FakeCompiler("5.90.1")
        ConvertCachePlugin(css_config, settings=settings).apply(compiler)
        compilation = FakeCompilation({})
        compiler.hooks.this_compilation.call(compilation)

        assert compiler.hooks.emit.taps == []
        (options, _), = compilation.hooks.process_assets.taps
        assert options == StageOptions(
            name=NAMESPACE,
            stage=PROCESS_ASSETS_STAGE_ADDITIONAL,
            additional_assets=True,
        )


class TestPluginPass:
    """Test full passes through the fake host."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("version", ["4.46.0", "5.90.1"])
    async def test_emits_converted_assets(
        self, version: str, settings: Settings, css_config: dict, caplog
    ) -> None:
        """Both host generations end up with the converted asset."""
        compiler = FakeCompiler(version)
        ConvertCachePlugin(css_config, settings=settings).apply(compiler)

        with caplog.at_level(logging.INFO):
            compilation = await compiler.run({"a.css": BufferAsset(b"x" * 4000)})

        assert compilation.errors == []
        assert compilation.assets["a.min"].size() == 1000
        assert f"{NAMESPACE} 3 kB" in caplog.text

    @pytest.mark.asyncio
    async def test_returns_total(self, settings: Settings, css_config: dict) -> None:
        """process_compilation returns the summed delta."""
        plugin = ConvertCachePlugin(css_config, settings=settings)
        compilation = FakeCompilation({"a.css": BufferAsset(b"x" * 4000)})

        total = await plugin.process_compilation(compilation, compilation.assets)

        assert total == 3.0

    @pytest.mark.asyncio
    async def test_transform_failure_goes_to_errors(
        self, settings: Settings, caplog
    ) -> None:
        """A failing transform is appended to the pass errors, not raised."""

        def boom(data: bytes) -> bytes:
            raise RuntimeError("encoder crashed")

        plugin = ConvertCachePlugin(
            {"test": r"\.css$", "convert": boom, "filename": lambda n: n},
            settings=settings,
        )
        compilation = FakeCompilation({"a.css": BufferAsset(b"x")})

        with caplog.at_level(logging.INFO):
            total = await plugin.process_compilation(compilation, compilation.assets)

        assert total is None
        assert len(compilation.errors) == 1
        assert isinstance(compilation.errors[0], RuntimeError)
        assert f"{NAMESPACE} failed: encoder crashed" in caplog.text

    @pytest.mark.asyncio
    async def test_second_build_hits_cache(self, settings: Settings, mocker) -> None:
        """A later build with unchanged input does not re-run the transform."""
        convert = mocker.Mock(side_effect=lambda data: data[:1])
        plugin = ConvertCachePlugin(
            {"test": r"\.css$", "convert": convert, "filename": lambda n: f"{n}.min"},
            settings=settings,
        )
        compiler = FakeCompiler("5.90.1")
        plugin.apply(compiler)

        first = await compiler.run({"a.css": BufferAsset(b"abcdef")})
        second = await compiler.run({"a.css": BufferAsset(b"abcdef")})

        assert convert.call_count == 1
        assert first.assets["a.min"].source() == second.assets["a.min"].source() == b"a"

    def test_default_cache_dir_from_settings(self, settings: Settings, css_config: dict) -> None:
        """Configs without cache_dir inherit the settings cache directory."""
        plugin = ConvertCachePlugin(css_config, settings=settings)
        assert plugin.configs[0].cache_dir == settings.cache_dir

    def test_max_concurrency_from_settings(self, tmp_path: Path, css_config: dict) -> None:
        """The concurrency bound is threaded from settings to the orchestrator."""
        plugin = ConvertCachePlugin(
            css_config, settings=Settings(cache_dir=tmp_path, max_concurrency=3)
        )
        assert plugin.orchestrator.max_concurrency == 3

    def test_invalid_configs_skipped(self, settings: Settings, css_config: dict, caplog) -> None:
        """Invalid configs are dropped at construction, valid ones kept."""
        with caplog.at_level(logging.WARNING):
            plugin = ConvertCachePlugin(
                [{"test": r"\.css$", "convert": bytes}, css_config],
                settings=settings,
            )

        assert len(plugin.configs) == 1
        assert "missing filename" in caplog.text
