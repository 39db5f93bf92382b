"""kraken-scaffold pipeline orchestrator.

Runs the generator phases strictly in order, each one awaited to completion
before the next starts:

1. defaults     -- accept the choices given on the command line
2. prompt       -- ask the remaining questions and accept the answers
3. root         -- create the application directory and the index controller
4. files        -- copy the common and per-dependency overlays
5. bower        -- install the resolved bower packages
6. npm          -- install the resolved npm dependencies
7. npm dev      -- install the resolved npm devDependencies
8. done         -- install declared manifests, then notify listeners

Usage::

    python -m kraken_scaffold myapp --template-module dust --css-module less
"""

from __future__ import annotations

import argparse
import asyncio
import inspect
import sys
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.markup import escape

from . import __version__
from .config import AppConfig, GeneratorOptions, app_name_problem, validate_options
from .errors import (
    DependencyConfigError,
    GeneratorError,
    InstallError,
    OptionsError,
    ScaffoldFilesystemError,
)
from .installers import BowerInstaller, Installer, NpmInstaller, Persist
from .prompts import DEPENDENCY_PREFIX, Prompter, RichPrompter, StaticPrompter, build_questions
from .registry import Bucket, DependencyRegistry, default_registry
from .scaffolder import Scaffolder, enter_root
from .selection import SelectionSet
from .subgenerators import ControllerGenerator, SubGenerator
from .utils import (
    console,
    format_duration,
    print_banner,
    print_debug,
    print_error,
    print_phase_header,
    print_success,
    print_summary_table,
    print_warning,
    set_debug,
)

COMPLETE_EVENT = "kraken:installDependencies"


class PipelineState(str, Enum):
    INIT = "init"
    DEFAULTS_CONFIGURED = "defaults-configured"
    PROMPTED = "prompted"
    ROOT_CREATED = "root-created"
    FILES_SCAFFOLDED = "files-scaffolded"
    BOWER_INSTALLED = "bower-installed"
    NPM_INSTALLED = "npm-installed"
    NPM_DEV_INSTALLED = "npm-dev-installed"
    DONE = "done"

    # Terminal failure states
    CONFIG_ERROR = "config-error"
    INSTALL_ERROR = "install-error"
    FILESYSTEM_ERROR = "filesystem-error"


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives one generator run from option defaults to installed packages.

    Attributes:
        options: Non-interactive inputs of the run.
        registry: Dependency registry every accepted key is checked against.
        app_config: Evolving run configuration, also the template context.
        selection: Accepted dependency keys in acceptance order.
        state: Current ``PipelineState``; ``history`` lists every state entered.
        installed: ``{bucket: packages}`` for every installer actually invoked.
    """

    _PHASES: list[tuple[PipelineState, str, str]] = [
        (PipelineState.DEFAULTS_CONFIGURED, "configure_defaults", "Defaults"),
        (PipelineState.PROMPTED, "ask_for", "Prompt"),
        (PipelineState.ROOT_CREATED, "create_root", "Application root"),
        (PipelineState.FILES_SCAFFOLDED, "scaffold_files", "Files"),
        (PipelineState.BOWER_INSTALLED, "install_bower", "bower install"),
        (PipelineState.NPM_INSTALLED, "install_npm", "npm install"),
        (PipelineState.NPM_DEV_INSTALLED, "install_npm_dev", "npm install (dev)"),
        (PipelineState.DONE, "finish", "Done"),
    ]

    def __init__(
        self,
        options: GeneratorOptions,
        registry: DependencyRegistry | None = None,
        *,
        prompter: Prompter | None = None,
        npm: Installer | None = None,
        bower: Installer | None = None,
        scaffolder: Scaffolder | None = None,
        sub_generator: SubGenerator | None = None,
    ) -> None:
        self.options = options
        if registry is None:
            registry = (
                DependencyRegistry.from_file(options.registry_path)
                if options.registry_path
                else default_registry()
            )
        self.registry = registry
        self.app_config = AppConfig(app_name=options.app_name or "")
        self.selection = SelectionSet(registry, self.app_config)

        self.prompter = prompter or (RichPrompter() if options.prompt else StaticPrompter())
        self.npm = npm or NpmInstaller(timeout=options.install_timeout)
        self.bower = bower or BowerInstaller(timeout=options.install_timeout)
        self.scaffolder = scaffolder or Scaffolder()
        self.sub_generator = sub_generator or ControllerGenerator(self.scaffolder.renderer)

        self.state = PipelineState.INIT
        self.history: list[PipelineState] = [PipelineState.INIT]
        self.error: GeneratorError | None = None
        self.installed: dict[str, str] = {}
        self.written: list[Path] = []
        self._listeners: list[Callable[[str, Pipeline], Any]] = []

    def on_complete(self, callback: Callable[[str, "Pipeline"], Any]) -> None:
        """Register *callback* to be called with ``(event, pipeline)`` once the run is done."""
        self._listeners.append(callback)

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    async def run(self) -> PipelineState:
        """Execute every phase in order.

        Returns:
            ``PipelineState.DONE`` on success.

        Raises:
            GeneratorError: after recording the matching terminal state.
        """
        started = time.monotonic()
        set_debug(self.options.debug)
        print_banner("kraken-scaffold", __version__)

        for step, (target, method_name, label) in enumerate(self._PHASES, start=1):
            print_phase_header(step, label)
            try:
                await getattr(self, method_name)()
            except (DependencyConfigError, OptionsError) as exc:
                self._fail(PipelineState.CONFIG_ERROR, exc)
                raise
            except InstallError as exc:
                print_debug(f"Error during {exc.installer} installation {exc.code or exc}")
                self._fail(PipelineState.INSTALL_ERROR, exc)
                raise
            except ScaffoldFilesystemError as exc:
                self._fail(PipelineState.FILESYSTEM_ERROR, exc)
                raise
            except OSError as exc:
                wrapped = ScaffoldFilesystemError(
                    exc.filename or Path.cwd(), f"Filesystem error ({exc.strerror})"
                )
                self._fail(PipelineState.FILESYSTEM_ERROR, wrapped)
                raise wrapped from exc
            self._advance(target)

        await self._notify()
        self._print_final_summary(time.monotonic() - started)
        return self.state

    def _advance(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)
        print_debug(f"entered state {state.value}")

    def _fail(self, state: PipelineState, exc: GeneratorError) -> None:
        self.error = exc
        self._advance(state)

    async def _notify(self) -> None:
        for callback in self._listeners:
            result = callback(COMPLETE_EVENT, self)
            if inspect.isawaitable(result):
                await result

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def configure_defaults(self) -> None:
        """Accept the choices supplied without prompting."""
        validate_options(self.options)
        accept = self.selection.accept
        accept("templateModule", self.options.template_module)
        accept("bower", self.options.ui_package_manager)
        accept("cssModule", self.options.css_module)
        accept("jsModule", self.options.js_module)
        accept("taskModule", "grunt")
        accept("i18n", "i18n")

    async def ask_for(self) -> None:
        """Ask the open questions and feed every answer through ``accept``."""
        questions = build_questions(self.options, self.app_config)
        answers = await self.prompter.ask(questions)

        for name, value in answers.items():
            if name.startswith(DEPENDENCY_PREFIX):
                self.selection.accept(name[len(DEPENDENCY_PREFIX):], value)
            elif name == "appName":
                if value:
                    self.app_config.app_name = str(value).strip()
            else:
                self.app_config[name] = value

    async def create_root(self) -> None:
        """Create the application directory and lay down the index controller."""
        app_name = self.app_config.app_name
        if not app_name:
            raise OptionsError("app-name", "an application name is required")
        problem = app_name_problem(app_name)
        if problem:
            raise OptionsError("app-name", problem)

        app_root = await asyncio.to_thread(enter_root, Path(self.options.destination) / app_name)
        self.app_config.app_root = app_root
        console.print(f"  Creating [bold]{escape(str(app_root))}[/bold]")

        self.written.extend(
            await self.sub_generator.invoke(
                "index",
                self.app_config.get("templateModule"),
                app_root,
                self.app_config.as_context(),
            )
        )

    async def scaffold_files(self) -> None:
        """Copy the common overlay and every selected dependency's overlay."""
        if self.app_config.app_root is None:
            raise ScaffoldFilesystemError(
                Path(self.options.destination), "application root has not been created"
            )
        written = await self.scaffolder.scaffold(
            self.app_config.app_root,
            self.selection.keys,
            self.app_config.as_context(),
        )
        self.written.extend(written)
        console.print(f"  Wrote {len(written)} file(s) for {escape(', '.join(self.selection.keys))}")

    async def install_bower(self) -> None:
        await self._install(
            Bucket.BOWER, self.bower, Persist.NONE, skip=self.options.skip_install_bower
        )

    async def install_npm(self) -> None:
        await self._install(
            Bucket.NPM, self.npm, Persist.SAVE, skip=self.options.skip_install_npm
        )

    async def install_npm_dev(self) -> None:
        await self._install(
            Bucket.NPM_DEV, self.npm, Persist.SAVE_DEV, skip=self.options.skip_install_npm
        )

    async def finish(self) -> None:
        """Install whatever the generated manifests declare, unless told not to."""
        if self.options.skip_install:
            print_warning("  Skipping manifest install (--skip-install)")
            return
        if "bower" in self.selection and not self.options.skip_install_bower:
            await self.bower.install_declared()
        if not self.options.skip_install_npm:
            await self.npm.install_declared()

    async def _install(
        self,
        bucket: Bucket,
        installer: Installer,
        persist: Persist,
        *,
        skip: bool,
    ) -> bool:
        """Resolve *bucket* and hand the result to *installer*.

        Returns:
            ``True`` if the installer was invoked.
        """
        if skip:
            print_warning(f"  Skipping {bucket.value} packages (skip flag set)")
            return False

        packages = self.selection.resolve(bucket)
        if packages is None:
            console.print(f"  Nothing to install for {bucket.value}")
            return False

        console.print(f"  Installing {bucket.value} packages: [cyan]{escape(packages)}[/cyan]")
        await installer.install(packages, persist)
        self.installed[bucket.value] = packages
        return True

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def _print_final_summary(self, elapsed: float) -> None:
        print_summary_table(
            {
                "Application": self.app_config.app_name,
                "Location": str(self.app_config.app_root or ""),
                "Dependencies": ", ".join(self.selection.keys) or "(none)",
                "Files written": str(len(self.written)),
                "Installed": ", ".join(sorted(self.installed)) or "(nothing)",
            },
            title="kraken-scaffold",
        )
        print_success(f"Application ready in {format_duration(elapsed)}")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kraken-scaffold",
        description="Scaffold a new kraken application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  kraken-scaffold myapp\n"
            "  kraken-scaffold myapp --template-module dust --css-module less\n"
            "  kraken-scaffold myapp --no-prompt --skip-install\n"
        ),
    )
    parser.add_argument("app_name", nargs="?", default=None, help="Application name")
    parser.add_argument("--destination", "-d", type=Path, default=None,
                        help="Parent directory for the application (default: cwd)")
    parser.add_argument("--template-module", default=None, help="Template engine (e.g. dust)")
    parser.add_argument("--css-module", default=None, help="CSS preprocessor (less, sass, stylus)")
    parser.add_argument("--js-module", default=None, help="JS module library (requirejs, browserify)")
    parser.add_argument("--ui-package-manager", default=None, help="UI package manager (bower)")
    parser.add_argument("--skip-install", action="store_true", default=None,
                        help="Do not install the generated manifests")
    parser.add_argument("--skip-install-bower", action="store_true", default=None,
                        help="Do not run bower")
    parser.add_argument("--skip-install-npm", action="store_true", default=None,
                        help="Do not run npm")
    parser.add_argument("--no-prompt", dest="prompt", action="store_false", default=None,
                        help="Answer every question with its default")
    parser.add_argument("--registry", dest="registry_path", type=Path, default=None,
                        help="JSON dependency registry to use instead of the bundled one")
    parser.add_argument("--debug", action="store_true", default=None, help="Print diagnostics")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``kraken-scaffold`` and ``python -m kraken_scaffold``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = GeneratorOptions.from_env(**vars(args))
        pipeline = Pipeline(options)
        asyncio.run(pipeline.run())
    except ValidationError as exc:
        print_error(f"Invalid options: {exc.errors()[0]['msg']}")
        parser.print_help()
        sys.exit(1)
    except (GeneratorError, ValueError, OSError) as exc:
        print_error(str(exc))
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
