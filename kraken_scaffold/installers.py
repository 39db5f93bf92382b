"""npm and bower installers.

Each installer shells out to its package manager with ``run_command`` and
raises ``InstallError`` when the process exits non-zero.
"""

from __future__ import annotations

import shutil
from enum import Enum
from pathlib import Path
from typing import Protocol

from .errors import InstallError
from .utils import print_debug, run_command


class Persist(str, Enum):
    """How installed packages are recorded in the project manifest."""

    NONE = "none"
    SAVE = "save"
    SAVE_DEV = "save-dev"


class Installer(Protocol):
    name: str

    async def install(self, packages: str, persist: Persist) -> None: ...

    async def install_declared(self) -> None: ...


class CommandInstaller:
    """Base class for installers driven by a package-manager executable."""

    name = ""
    executable = ""

    def __init__(self, cwd: str | Path | None = None, timeout: int = 600) -> None:
        self.cwd = Path(cwd) if cwd else None
        self.timeout = timeout

    def command(self, packages: list[str], persist: Persist) -> list[str]:
        cmd = [self._resolve_executable(), "install", *packages]
        if persist is Persist.SAVE:
            cmd.append("--save")
        elif persist is Persist.SAVE_DEV:
            cmd.append("--save-dev")
        return cmd

    async def install(self, packages: str, persist: Persist) -> None:
        """Install the space-separated *packages*."""
        await self._run(self.command(packages.split(), persist))

    async def install_declared(self) -> None:
        """Install everything the project manifest already declares."""
        await self._run(self.command([], Persist.NONE))

    async def _run(self, cmd: list[str]) -> None:
        print_debug(f"running {' '.join(cmd)}")
        try:
            returncode, _, stderr = await run_command(
                cmd, cwd=self.cwd or Path.cwd(), timeout=self.timeout
            )
        except OSError as exc:
            raise InstallError(self.name, str(exc), code=exc.errno) from exc
        if returncode != 0:
            raise InstallError(
                self.name,
                stderr.splitlines()[-1] if stderr else f"{cmd[0]} exited with {returncode}",
                code=returncode,
                stderr=stderr,
            )

    def _resolve_executable(self) -> str:
        return shutil.which(self.executable) or self.executable


class NpmInstaller(CommandInstaller):
    name = "npm"
    executable = "npm"


class BowerInstaller(CommandInstaller):
    """bower takes the same ``--save`` / ``--save-dev`` flags as npm."""

    name = "bower"
    executable = "bower"

    def _resolve_executable(self) -> str:
        # Prefer a project-local bower installed through npm.
        local = Path(self.cwd or Path.cwd()) / "node_modules" / ".bin" / "bower"
        if local.exists():
            return str(local)
        return super()._resolve_executable()
