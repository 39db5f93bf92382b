"""Controller sub-generator.

Lays down a named controller plus, when a template engine is chosen, the
engine-specific view for it.  The pipeline invokes it once for the ``index``
controller right after the application root is created.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from .templates import TemplateRenderer

CONTROLLER_OVERLAY = "controller/common"


class SubGenerator(Protocol):
    async def invoke(
        self,
        name: str,
        template_module: str | None,
        destination: Path,
        context: dict[str, Any],
    ) -> list[Path]: ...


class ControllerGenerator:
    """Renders ``templates/controller/common`` and ``templates/controller/<engine>``."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    async def invoke(
        self,
        name: str,
        template_module: str | None,
        destination: Path,
        context: dict[str, Any],
    ) -> list[Path]:
        controller_context = {**context, "controllerName": name, "templateModule": template_module}
        written = await self.renderer.render_tree(
            CONTROLLER_OVERLAY, destination, controller_context
        )
        if template_module:
            written.extend(
                await self.renderer.render_tree(
                    f"controller/{template_module}", destination, controller_context
                )
            )
        return written
