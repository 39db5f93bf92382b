"""Selection set and resolver.

``SelectionSet`` records which dependency keys a run has accepted, in the
order they were accepted, and writes each choice into the run's
``AppConfig``.  ``resolve`` turns the selection into the space-joined
specifier string handed to an installer.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from .config import AppConfig
from .errors import DependencyConfigError
from .registry import Bucket, DependencyRegistry


class SelectionSet:
    """Ordered, duplicate-free set of accepted dependency keys."""

    def __init__(self, registry: DependencyRegistry, app_config: AppConfig | None = None) -> None:
        self.registry = registry
        self.app_config = app_config if app_config is not None else AppConfig()
        self._keys: list[str] = []

    # -- Mutation ----------------------------------------------------------

    def accept(self, slot: str, key: Any) -> None:
        """Record *key* as the answer for *slot*.

        A falsy key means the feature was declined: the slot is set to that
        value and nothing is selected.  An unknown key raises
        ``DependencyConfigError`` before anything is mutated.
        """
        if not key:
            self.app_config[slot] = key
            return

        if self.registry.lookup(key) is None:
            raise DependencyConfigError(slot, str(key))

        self.app_config[slot] = key
        if key not in self._keys:
            self._keys.append(key)

    # -- Queries -----------------------------------------------------------

    @property
    def keys(self) -> list[str]:
        """A copy of the accepted keys in acceptance order."""
        return list(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def resolve(self, bucket: Bucket | str) -> str | None:
        """Return the install string for *bucket*, or ``None`` if there is nothing to install."""
        return resolve(self.registry, self._keys, bucket)


def resolve(registry: DependencyRegistry, keys: list[str], bucket: Bucket | str) -> str | None:
    """Join the specifiers every key in *keys* lists for *bucket*.

    Each key contributes one space-joined group, in selection order.  A
    specifier already emitted by an earlier group is not repeated.  Returns
    ``None`` when no key contributes anything.
    """
    bucket = Bucket(bucket)
    seen_keys: set[str] = set()
    emitted: set[str] = set()
    groups: list[str] = []

    for key in keys:
        if key in seen_keys:
            continue
        seen_keys.add(key)

        spec = registry.lookup(key)
        if spec is None:
            continue

        group: list[str] = []
        for pkg in spec.packages(bucket):
            if pkg and pkg not in emitted:
                emitted.add(pkg)
                group.append(pkg)
        if group:
            groups.append(" ".join(group))

    return " ".join(groups) if groups else None
