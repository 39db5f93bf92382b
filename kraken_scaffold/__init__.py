"""kraken-scaffold -- generates new kraken application skeletons.

Quick usage::

    from kraken_scaffold import GeneratorOptions, Pipeline

    options = GeneratorOptions(app_name="myapp", template_module="dust", prompt=False)
    await Pipeline(options).run()
"""

__version__ = "1.0.0"

from kraken_scaffold.config import AppConfig, GeneratorOptions
from kraken_scaffold.errors import (
    DependencyConfigError,
    GeneratorError,
    InstallError,
    OptionsError,
    ScaffoldFilesystemError,
)
from kraken_scaffold.pipeline import Pipeline, PipelineState
from kraken_scaffold.registry import Bucket, DependencyRegistry, DependencySpec, default_registry
from kraken_scaffold.selection import SelectionSet, resolve

__all__ = [
    "AppConfig",
    "Bucket",
    "DependencyConfigError",
    "DependencyRegistry",
    "DependencySpec",
    "GeneratorError",
    "GeneratorOptions",
    "InstallError",
    "OptionsError",
    "Pipeline",
    "PipelineState",
    "ScaffoldFilesystemError",
    "SelectionSet",
    "default_registry",
    "resolve",
]
