"""Overlay scaffolder.

Copies the ``common`` overlay and then one overlay per selected dependency
key into the application root.  Overlays are applied in selection order and
later files overwrite earlier ones.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .errors import ScaffoldFilesystemError
from .templates import TemplateRenderer
from .utils import print_debug

COMMON_OVERLAY = "common"
DEPENDENCY_OVERLAY_DIR = "dependencies"


def dependency_overlay(key: str) -> str:
    """Return the overlay name holding the files contributed by *key*."""
    return f"{DEPENDENCY_OVERLAY_DIR}/{key}"


def enter_root(destination_root: str | Path) -> Path:
    """Create *destination_root* if needed and make it the working directory."""
    root = Path(destination_root).resolve()
    try:
        root.mkdir(parents=True, exist_ok=True)
        os.chdir(root)
    except OSError as exc:
        raise ScaffoldFilesystemError(root, f"Unable to create application root ({exc.strerror})") from exc
    return root


class Scaffolder:
    """Lays down the file tree of a new application."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    async def scaffold(
        self,
        destination_root: str | Path,
        selection: Iterable[str],
        render_context: dict[str, Any],
    ) -> list[Path]:
        """Copy the common overlay and each selected key's overlay into *destination_root*.

        Keys without an overlay directory contribute no files.

        Returns:
            Every written path, in write order.  A path overwritten by a later
            overlay appears once per write.
        """
        root = await asyncio.to_thread(enter_root, destination_root)

        written = await self.renderer.render_tree(COMMON_OVERLAY, root, render_context)
        print_debug(f"copied {len(written)} common file(s)")

        for key in selection:
            overlay = dependency_overlay(key)
            if not self.renderer.has_overlay(overlay):
                print_debug(f"no overlay for dependency {key}")
                continue
            files = await self.renderer.render_tree(overlay, root, render_context)
            print_debug(f"copied {len(files)} file(s) for dependency {key}")
            written.extend(files)

        return written
