"""Exception hierarchy for the kraken-scaffold generator.

Every failure the pipeline can report derives from ``GeneratorError`` so the
CLI has a single type to catch.  Sub-classes carry the structured details
(slot, key, bucket, exit code) that the console output and the tests inspect.
"""

from __future__ import annotations

from pathlib import Path


class GeneratorError(Exception):
    """Base class for every error raised by the generator pipeline."""


class OptionsError(GeneratorError):
    """Raised when a CLI / environment option has an unusable value."""

    def __init__(self, option: str, message: str) -> None:
        self.option = option
        super().__init__(f"Invalid option --{option}: {message}")


class DependencyConfigError(GeneratorError):
    """Raised when an accepted answer names a key the registry does not know."""

    def __init__(self, slot: str, key: str) -> None:
        self.slot = slot
        self.key = key
        super().__init__(f"Unable to resolve dependency: {slot}:{key}")


class InstallError(GeneratorError):
    """Raised when a package installer exits unsuccessfully.

    Attributes:
        installer: Name of the package manager that failed (``npm``, ``bower``).
        code: Machine-readable failure code, usually the process exit status.
        stderr: Captured standard error of the installer, if any.
    """

    def __init__(
        self,
        installer: str,
        message: str,
        code: int | str | None = None,
        stderr: str = "",
    ) -> None:
        self.installer = installer
        self.code = code
        self.stderr = stderr
        suffix = f" (code {code})" if code is not None else ""
        super().__init__(f"Error during {installer} dependency installation{suffix}: {message}")


class ScaffoldFilesystemError(GeneratorError):
    """Raised when a directory cannot be created or an overlay file copied."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")
