"""Dependency registry: maps a dependency key to the packages it installs.

The registry is an immutable value.  It is built explicitly (from a mapping,
a JSON file, or the bundled ``registry.json``) and handed to the pipeline, so
tests can substitute their own fixture registry.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Bucket(str, Enum):
    """Install categories a dependency may contribute packages to."""

    NPM = "npm"
    NPM_DEV = "npmDev"
    BOWER = "bower"


class DependencySpec(BaseModel):
    """Packages required by one dependency key, partitioned by bucket."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    regular: tuple[str, ...] = Field(default=(), alias="npm")
    dev: tuple[str, ...] = Field(default=(), alias="npmDev")
    ui_package_manager: tuple[str, ...] = Field(default=(), alias="bower")

    def packages(self, bucket: Bucket | str) -> tuple[str, ...]:
        """Return the ordered specifiers this dependency lists for *bucket*."""
        bucket = Bucket(bucket)
        if bucket is Bucket.NPM:
            return self.regular
        if bucket is Bucket.NPM_DEV:
            return self.dev
        return self.ui_package_manager


class DependencyRegistry(Mapping[str, DependencySpec]):
    """Read-only lookup table of ``DependencySpec`` by key."""

    def __init__(self, specs: Iterable[DependencySpec] = ()) -> None:
        table: dict[str, DependencySpec] = {}
        for spec in specs:
            if spec.key in table:
                raise ValueError(f"Duplicate dependency key in registry: {spec.key}")
            table[spec.key] = spec
        self._specs = table

    def lookup(self, key: str) -> DependencySpec | None:
        """Return the spec registered for *key*, or ``None`` when unknown."""
        return self._specs.get(key)

    # -- Mapping protocol --------------------------------------------------

    def __getitem__(self, key: str) -> DependencySpec:
        return self._specs[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"DependencyRegistry({sorted(self._specs)!r})"

    # -- Construction ------------------------------------------------------

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]]) -> "DependencyRegistry":
        """Build a registry from ``{key: {"npm": [...], "npmDev": [...], "bower": [...]}}``."""
        return cls(
            DependencySpec.model_validate({"key": key, **dict(buckets)})
            for key, buckets in raw.items()
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "DependencyRegistry":
        """Load a registry from a JSON file in the ``from_mapping`` layout."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"Registry file must contain a JSON object: {path}")
        return cls.from_mapping(raw)


def default_registry() -> DependencyRegistry:
    """Load the registry bundled with the package."""
    raw = resources.files("kraken_scaffold").joinpath("registry.json").read_text(encoding="utf-8")
    return DependencyRegistry.from_mapping(json.loads(raw))
