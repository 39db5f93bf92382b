"""kraken-scaffold configuration.

Two Pydantic v2 models live here:

* ``GeneratorOptions`` -- the non-interactive inputs of a run (CLI flags or
  ``KRAKEN_*`` environment variables), validated at construction time.
* ``AppConfig`` -- the evolving per-run configuration that the prompt phase
  fills in and the scaffolder uses as its template context.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .errors import OptionsError


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def app_name_problem(name: str) -> str | None:
    """Return why *name* cannot be used as the application directory, or ``None``."""
    if "/" in name or "\\" in name:
        return "must be a directory name, not a path"
    if name.strip() in {".", ".."}:
        return "must not refer to the current or parent directory"
    return None


class GeneratorOptions(BaseModel):
    """Non-interactive inputs for one generator run."""

    app_name: str | None = Field(default=None, description="Name of the application directory")
    destination: Path = Field(
        default_factory=Path.cwd,
        description="Parent directory the application directory is created in",
    )

    # Logical choice flags -- each one pre-answers the matching prompt.
    template_module: str | None = Field(default=None)
    css_module: str | None = Field(default=None)
    js_module: str | None = Field(default=None)
    ui_package_manager: str | None = Field(default=None)

    skip_install: bool = Field(default=False, description="Skip the final manifest install")
    skip_install_bower: bool = Field(default=False)
    skip_install_npm: bool = Field(default=False)

    prompt: bool = Field(default=True, description="Ask interactive questions")
    debug: bool = Field(default=False)
    install_timeout: int = Field(
        default=600, ge=10, description="Per-installer timeout in seconds"
    )
    registry_path: Path | None = Field(
        default=None, description="JSON file overriding the bundled dependency registry"
    )

    @field_validator("app_name")
    @classmethod
    def _app_name_is_a_single_segment(cls, value: str | None) -> str | None:
        if value is not None:
            problem = app_name_problem(value)
            if problem:
                raise ValueError(f"app_name {problem}")
        return value

    @classmethod
    def from_env(cls, **overrides: Any) -> "GeneratorOptions":
        """Build options from environment variables, then apply *overrides*.

        Recognised variables (all optional):
            KRAKEN_DESTINATION, KRAKEN_TEMPLATE_MODULE, KRAKEN_CSS_MODULE,
            KRAKEN_JS_MODULE, KRAKEN_UI_PACKAGE_MANAGER, KRAKEN_SKIP_INSTALL,
            KRAKEN_INSTALL_TIMEOUT, and ``DEBUG`` containing ``kraken``.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("KRAKEN_DESTINATION"):
            kwargs["destination"] = Path(os.environ["KRAKEN_DESTINATION"])
        for env_name, field in (
            ("KRAKEN_TEMPLATE_MODULE", "template_module"),
            ("KRAKEN_CSS_MODULE", "css_module"),
            ("KRAKEN_JS_MODULE", "js_module"),
            ("KRAKEN_UI_PACKAGE_MANAGER", "ui_package_manager"),
        ):
            if os.environ.get(env_name):
                kwargs[field] = os.environ[env_name]
        if _env_flag("KRAKEN_SKIP_INSTALL"):
            kwargs["skip_install"] = True
        if os.environ.get("KRAKEN_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["KRAKEN_INSTALL_TIMEOUT"])
        if "kraken" in os.environ.get("DEBUG", ""):
            kwargs["debug"] = True

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)


class AppConfig(BaseModel):
    """Evolving configuration for a single run.

    ``slots`` holds one entry per logical choice (``templateModule``,
    ``cssModule``, ...) plus any free-form prompt answers.  Slots are addressed
    with item access so callers can use the same names the prompts use.
    """

    app_name: str = Field(default="")
    app_root: Path | None = Field(default=None)
    slots: dict[str, Any] = Field(default_factory=dict)

    def __getitem__(self, slot: str) -> Any:
        return self.slots[slot]

    def __setitem__(self, slot: str, value: Any) -> None:
        self.slots[slot] = value

    def __contains__(self, slot: object) -> bool:
        return slot in self.slots

    def get(self, slot: str, default: Any = None) -> Any:
        return self.slots.get(slot, default)

    def as_context(self) -> dict[str, Any]:
        """Return the template render context for this run."""
        context: dict[str, Any] = dict(self.slots)
        context["appName"] = self.app_name
        context["appRoot"] = str(self.app_root) if self.app_root else ""
        return context


_CHOICE_OPTIONS = ("template_module", "css_module", "js_module", "ui_package_manager")


def validate_options(options: GeneratorOptions) -> None:
    """Reject choice flags that were given but carry no usable value.

    Raises:
        OptionsError: naming the first offending option.
    """
    for field in _CHOICE_OPTIONS:
        value = getattr(options, field)
        if value is not None and not value.strip():
            raise OptionsError(field.replace("_", "-"), "expected a non-empty value")
