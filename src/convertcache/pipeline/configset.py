"""Transform configuration models and validation.

A transform config says which assets to convert (``test``), how to convert
them (``convert``) and what to call the result (``filename``). Raw configs
come from plugin users as plain mappings, in snake_case or camelCase.
"""

import logging
import re
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from convertcache.config import NAMESPACE

logger = logging.getLogger(__name__)

REQUIRED_OPTIONS = ("test", "convert", "filename")


def _pattern_predicate(pattern: re.Pattern[str]) -> Callable[[str], bool]:
    def _test(name: str) -> bool:
        return pattern.search(name) is not None

    return _test


class TransformConfig(BaseModel):
    """One asset transform.

    Attributes:
        test: Predicate on the asset name. A regex (string or compiled) is
            accepted and matched with ``search``.
        convert: Transform from input bytes to output bytes. May be a plain
            function or return an awaitable.
        filename: Maps the candidate name to the final output name. Its
            return value is used verbatim.
        override_extension: Strip the final ``.``-segment before ``filename``
        verbose: Log one line per converted asset
        cache: Look up and persist outputs in the content-addressed cache
        cache_dir: Cache root. Filled from Settings when omitted.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    test: Callable[[str], bool]
    convert: Callable[[bytes], Any]
    filename: Callable[[str], str]
    override_extension: bool = True
    verbose: bool = True
    cache: bool = True
    cache_dir: Path | None = None

    @field_validator("test", mode="before")
    @classmethod
    def compile_pattern(cls, v: Any) -> Any:
        """Turn regex patterns into name predicates."""
        if isinstance(v, str):
            v = re.compile(v)
        if isinstance(v, re.Pattern):
            return _pattern_predicate(v)
        return v

    @field_validator("cache_dir")
    @classmethod
    def expand_cache_dir(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None

    def matches(self, name: str) -> bool:
        return bool(self.test(name))

    def output_name(self, name: str) -> str:
        """Compute the name of the converted asset.

        ``a.b.css`` becomes ``a.b`` before ``filename`` is applied when
        override_extension is set. A name without a dot becomes empty.
        """
        candidate = name.rpartition(".")[0] if self.override_extension else name
        return self.filename(candidate)


RawConfig = Mapping[str, Any] | TransformConfig


def _validate(index: int, raw: Any) -> TransformConfig | None:
    """Validate one raw config, or warn and return None."""
    if isinstance(raw, TransformConfig):
        return raw

    try:
        return TransformConfig.model_validate(raw)
    except ValidationError as e:
        missing = [
            str(err["loc"][0])
            for err in e.errors()
            if err["type"] == "missing" and err["loc"]
        ]
        if missing:
            logger.warning(
                "%s config(s) must contain the required options: %s. "
                "Config #%d is missing %s and will be skipped.",
                NAMESPACE, " ".join(REQUIRED_OPTIONS), index, ", ".join(missing),
            )
        else:
            logger.warning(
                "%s config #%d is invalid and will be skipped: %s",
                NAMESPACE, index, e,
            )
        return None


@dataclass(frozen=True)
class ConfigSet:
    """Ordered, immutable collection of enabled transform configs."""

    configs: tuple[TransformConfig, ...] = ()

    def __post_init__(self) -> None:
        for index, config in enumerate(self.configs):
            if config.cache and config.cache_dir is None:
                raise ValueError(
                    f"config #{index} enables the cache but has no cache_dir; "
                    "build the set with ConfigSet.normalize or set cache_dir"
                )

    @classmethod
    def normalize(
        cls,
        raw: RawConfig | Sequence[RawConfig],
        default_cache_dir: str | Path,
    ) -> "ConfigSet":
        """Validate raw configs and fill defaults.

        Invalid entries are logged and dropped; the rest keep their order.

        Args:
            raw: A single config or a sequence of configs
            default_cache_dir: Cache root for configs that omit ``cache_dir``

        Returns:
            ConfigSet holding every valid config
        """
        entries = [raw] if isinstance(raw, (Mapping, TransformConfig)) else list(raw)
        default_dir = Path(default_cache_dir)

        configs: list[TransformConfig] = []
        for index, entry in enumerate(entries):
            config = _validate(index, entry)
            if config is None:
                continue
            if config.cache_dir is None:
                config = config.model_copy(update={"cache_dir": default_dir})
            configs.append(config)

        if len(configs) < len(entries):
            logger.debug(
                "%d of %d transform configs enabled", len(configs), len(entries)
            )
        return cls(tuple(configs))

    def __iter__(self) -> Iterator[TransformConfig]:
        return iter(self.configs)

    def __len__(self) -> int:
        return len(self.configs)

    def __getitem__(self, index: int) -> TransformConfig:
        return self.configs[index]
