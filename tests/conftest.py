"""Shared fixtures for cyspec tests."""
import json

import pytest

from cyspec.analyzers.models import Analysis, StructureEntry


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Point HOME and cwd at a temp directory for every test.

    Tests never read a real ~/.config/cyspec or .cyspec.toml, and the
    config singleton is rebuilt per test.
    """
    base = tmp_path_factory.mktemp("isolated")
    home = base / "home"
    workdir = base / "work"
    home.mkdir()
    workdir.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(workdir)
    for var in (
        "CYSPEC_TEMP_DIR", "CYSPEC_OUTPUT_DIR", "CYSPEC_INSTALL_DEPS", "CYSPEC_INSTALL_TIMEOUT",
        "CYSPEC_DEMO_REPO", "CYSPEC_TEMPLATES_DIR", "CYSPEC_HOST", "CYSPEC_PORT", "PORT", "CYSPEC_DEBUG",
    ):
        monkeypatch.delenv(var, raising=False)

    from cyspec.core import config_service
    config_service.reset_config_service()
    yield workdir
    config_service.reset_config_service()


def _write_package_json(root, **sections):
    data = {"name": sections.pop("name", "sample-app"), "version": "1.0.0"}
    data.update(sections)
    (root / "package.json").write_text(json.dumps(data))


@pytest.fixture
def write_manifest():
    """Write a package.json into a directory: write_manifest(root, dependencies={...})."""
    return _write_package_json


@pytest.fixture
def react_project(tmp_path):
    """A small React project with a forms directory and two entry points."""
    root = tmp_path / "react-app"
    (root / "src" / "forms").mkdir(parents=True)
    (root / "public").mkdir()
    (root / "node_modules" / "cypress").mkdir(parents=True)
    (root / ".git").mkdir()
    _write_package_json(
        root,
        dependencies={"react": "^18.0.0", "react-dom": "^18.0.0", "axios": "^1.6.0"},
        devDependencies={"cypress": "^13.0.0", "jest": "^29.0.0"},
        scripts={"start": "react-scripts start", "build": "react-scripts build", "format": "prettier --write ."},
    )
    (root / "src" / "index.js").write_text("import React from 'react'\n")
    (root / "src" / "App.test.js").write_text("test('renders', () => {})\n")
    (root / "src" / "forms" / "Login.tsx").write_text("export const Login = () => null\n")
    (root / "public" / "index.html").write_text("<html></html>\n")
    (root / "cypress.config.js").write_text("module.exports = {}\n")
    (root / "vite.config.js").write_text("export default {}\n")
    return root


@pytest.fixture
def make_analysis():
    """Factory for Analysis records with a synthetic structure."""

    def _make(framework="traditional", paths=(), entry_points=(), dependencies=None, project_type="Test App"):
        return Analysis(
            project_type=project_type,
            framework=framework,
            dependencies=dict(dependencies or {}),
            project_structure=[StructureEntry(kind="file", path=p, depth=p.count("/")) for p in paths],
            entry_points=list(entry_points),
        )

    return _make
