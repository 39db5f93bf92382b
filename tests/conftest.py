"""Shared pytest fixtures for the kraken-scaffold test suite.

Provides reusable fixtures for:
- A small fixture dependency registry
- Overlay template trees written into a temporary directory
- Recording stand-ins for the npm / bower installers
- Generator options pointing at a temporary destination
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from kraken_scaffold.config import GeneratorOptions
from kraken_scaffold.registry import DependencyRegistry
from kraken_scaffold.utils import set_debug


FIXTURE_REGISTRY: dict[str, dict[str, list[str]]] = {
    "dust": {"npm": ["adaro"], "npmDev": ["grunt-dustjs"]},
    "less": {"npm": ["construx-less"], "npmDev": ["grunt-contrib-less"]},
    "requirejs": {"npmDev": ["grunt-contrib-requirejs"], "bower": ["requirejs"]},
    "bower": {"npmDev": ["bower"]},
    "grunt": {"npm": ["grunt-cli", "grunt"]},
    "i18n": {"npm": ["makara"]},
    "jquery": {"bower": ["jquery"]},
    "empty": {},
}


# ---------------------------------------------------------------------------
# Process state
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _restore_cwd_and_debug(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """The generator changes directory; keep every test inside its tmp dir."""
    monkeypatch.chdir(tmp_path)
    yield
    set_debug(False)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@pytest.fixture
def registry() -> DependencyRegistry:
    """Fixture registry independent of the bundled registry.json."""
    return DependencyRegistry.from_mapping(FIXTURE_REGISTRY)


# ---------------------------------------------------------------------------
# Overlay templates
# ---------------------------------------------------------------------------

def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Write ``{relative_path: content}`` under *root* and return *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A minimal overlay tree: common files plus overlays for a few keys."""
    return write_tree(
        tmp_path / "templates",
        {
            "common/package.json": '{"name": "{{ appName }}"}\n',
            "common/README.md": "# {{ appName }}\n{{ missing.token }}\n",
            "common/_gitignore": "node_modules\n",
            "dependencies/dust/public/templates/layouts/master.dust": "{+body /}\n",
            "dependencies/less/public/css/app.less": "@c: red;\n",
            "dependencies/grunt/Gruntfile.js": "// grunt for {{ appName }}\n",
            "controller/common/controllers/index.js": "// {{ controllerName }}\n",
            "controller/dust/public/templates/index.dust": "Hello, {name}!\n",
        },
    )


# ---------------------------------------------------------------------------
# Installers & options
# ---------------------------------------------------------------------------

def make_installer(name: str) -> AsyncMock:
    """Installer stand-in recording every ``install`` call."""
    installer = AsyncMock()
    installer.name = name
    installer.install = AsyncMock(return_value=None)
    installer.install_declared = AsyncMock(return_value=None)
    return installer


@pytest.fixture
def npm_installer() -> AsyncMock:
    return make_installer("npm")


@pytest.fixture
def bower_installer() -> AsyncMock:
    return make_installer("bower")


@pytest.fixture
def make_options(tmp_path: Path):
    """Factory for ``GeneratorOptions`` rooted at ``tmp_path / "out"``."""

    def _make(**overrides: Any) -> GeneratorOptions:
        values: dict[str, Any] = {
            "app_name": "myapp",
            "destination": tmp_path / "out",
            "prompt": False,
        }
        values.update(overrides)
        return GeneratorOptions(**values)

    return _make


@pytest.fixture
def write_files():
    """Expose ``write_tree`` to tests that build their own overlay trees."""
    return write_tree
