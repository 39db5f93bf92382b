"""Jinja2 rendering of overlay trees.

Provides the TemplateRenderer class which walks an overlay directory under
``kraken_scaffold/templates/`` and writes every file into a destination
project, rendering text files with the run's ``AppConfig`` as context.
Binary files are copied verbatim.  Variables missing from the context render
as empty strings, so an unresolved token never aborts a copy.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

from jinja2 import ChainableUndefined, Environment, TemplateError

from .errors import ScaffoldFilesystemError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Overlay files named ``_foo`` are written as ``.foo`` so dotfiles survive packaging.
_DOTFILE_PREFIX = "_"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders overlay trees for project scaffolding.

    Every overlay is a plain directory below ``template_dir``; its layout is
    reproduced under the destination root.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            autoescape=False,
            undefined=ChainableUndefined,
            keep_trailing_newline=True,
        )
        self.env.filters["slugify"] = _slugify_filter

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    def has_overlay(self, overlay: str) -> bool:
        """Return ``True`` if *overlay* exists under the template directory."""
        return (self.template_dir / overlay).is_dir()

    # -- Tree rendering (async) --------------------------------------------

    async def render_tree(
        self,
        overlay: str,
        output_dir: str | Path,
        context: dict[str, Any],
    ) -> list[Path]:
        """Copy every file under *overlay* into *output_dir*, rendering text files.

        The directory structure is preserved: ``common/config/config.json``
        rendered into ``/tmp/myapp`` lands at ``/tmp/myapp/config/config.json``.
        Existing files are overwritten.

        Returns:
            List of written file paths, in sorted source order.
        """
        source_root = self.template_dir / overlay
        if not source_root.is_dir():
            return []

        written: list[Path] = []
        out_base = Path(output_dir)

        for source in sorted(p for p in source_root.rglob("*") if p.is_file()):
            rel = source.relative_to(source_root)
            target = out_base.joinpath(*(_output_name(part) for part in rel.parts))
            raw = source.read_bytes()
            try:
                text = raw.decode("utf-8")
            except UnicodeDecodeError:
                payload: bytes = raw
            else:
                try:
                    payload = self.render_string(text, context).encode("utf-8")
                except TemplateError as exc:
                    raise ScaffoldFilesystemError(source, f"Unable to render template ({exc})") from exc

            await asyncio.to_thread(_write_file, target, payload)
            written.append(target)

        return written


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _slugify_filter(value: str) -> str:
    """Convert a string to an npm-safe package name."""
    slug = re.sub(r"[^a-z0-9]+", "-", str(value).lower().strip())
    return slug.strip("-")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _output_name(part: str) -> str:
    if part.startswith(_DOTFILE_PREFIX) and len(part) > 1:
        return "." + part[1:]
    return part


def _write_file(path: Path, content: bytes) -> None:
    """Synchronous helper: create parent dirs and write content."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    except OSError as exc:
        raise ScaffoldFilesystemError(path, f"Unable to write file ({exc.strerror})") from exc
