"""Tests for the pipeline controller."""

import os
import shutil
import time
from pathlib import Path

import pytest

from cyspec.core import CloneResult
from cyspec.core.config_service import PipelineConfig
from cyspec.core.pipeline import CypressAgent, create_agent, list_generated_files
from cyspec.core.repository_service import RepositoryService
from cyspec.core.spec_generator import SpecGenerator
from cyspec.errors import AcquisitionError


class FakeRepositories(RepositoryService):
    """Clones by copying a local project into the temp root."""

    def __init__(self, temp_dir, source=None, error=None):
        super().__init__(temp_dir)
        self.source = source
        self.error = error
        self.cloned = []

    def clone(self, github_url, install=True):
        if self.error:
            raise self.error
        target = self.temp_dir / "user-repo-1"
        shutil.copytree(self.source, target)
        self.cloned.append((github_url, install))
        return CloneResult(repo_path=str(target), repo_name=target.name)


class FailingGenerator(SpecGenerator):
    def save_specs_to_disk(self, specs, output_dir):
        return False


@pytest.fixture
def config(tmp_path):
    return PipelineConfig(temp_dir=tmp_path / "temp-repos", output_dir=tmp_path / "generated-specs")


class TestProcessLocal:
    def test_react_project(self, config, react_project):
        agent = CypressAgent(config)
        result = agent.process_local(react_project)

        assert result.success is True
        assert result.analysis.framework == "react"
        assert result.cypress_check.has_cypress_config is True
        assert result.strategy.recommended_specs == 4
        assert len(result.generated_specs) == 4
        assert result.spec_summary.total_specs == 4
        assert result.specs_saved is True
        assert result.output_path == str(config.output_dir)
        assert result.temp_path is None
        assert sorted(p.name for p in config.output_dir.glob("*.cy.js")) == [
            f"generated-spec-{i}.cy.js" for i in range(1, 5)
        ]

    def test_project_without_manifest(self, config, tmp_path):
        project = tmp_path / "plain"
        project.mkdir()
        (project / "index.html").write_text("<html></html>")
        result = CypressAgent(config).process_local(project)

        assert result.success is True
        assert result.analysis.has_package_json is False
        assert result.analysis.framework == "traditional"
        assert result.strategy.name == "Traditional Web App Strategy"
        assert result.spec_summary.total_specs == 3

    def test_not_a_directory(self, config, tmp_path):
        result = CypressAgent(config).process_local(tmp_path / "missing")
        assert result.success is False
        assert "Not a project directory" in result.error
        assert set(result.to_dict()) == {"success", "error", "repository", "timestamp"}

    def test_local_project_is_not_removed(self, config, react_project):
        agent = CypressAgent(config)
        agent.process_local(react_project)
        assert react_project.is_dir()

    def test_save_failure(self, config, react_project):
        agent = CypressAgent(config, generator=FailingGenerator())
        result = agent.process_local(react_project)
        assert result.success is False
        assert "Could not save specs" in result.error

    def test_list_shaped_dependencies(self, config, write_manifest, tmp_path):
        project = tmp_path / "odd"
        project.mkdir()
        write_manifest(project, name="odd", dependencies=["react"])
        result = CypressAgent(config).process_local(project)
        assert result.success is True
        assert result.analysis.framework == "traditional"
        assert result.cypress_check.has_cypress_dependency is False


class TestProcessRepository:
    def test_success_keeps_clone(self, config, react_project):
        repos = FakeRepositories(config.temp_dir, source=react_project)
        agent = CypressAgent(config, repositories=repos)
        result = agent.process_repository("https://github.com/user/repo")

        assert result.success is True
        assert result.repository == "https://github.com/user/repo"
        assert result.temp_path == str(config.temp_dir / "user-repo-1")
        assert Path(result.temp_path).is_dir()
        assert repos.cloned == [("https://github.com/user/repo", True)]

    def test_install_flag_follows_config(self, tmp_path, react_project):
        config = PipelineConfig(
            temp_dir=tmp_path / "t", output_dir=tmp_path / "o", install_dependencies=False
        )
        repos = FakeRepositories(config.temp_dir, source=react_project)
        CypressAgent(config, repositories=repos).process_repository("https://github.com/user/repo")
        assert repos.cloned[0][1] is False

    def test_clone_failure(self, config):
        repos = FakeRepositories(config.temp_dir, error=AcquisitionError("Clone failed: boom", repository="x"))
        result = CypressAgent(config, repositories=repos).process_repository("https://github.com/user/repo")
        assert result.success is False
        assert result.error == "Clone failed: boom"
        assert result.to_dict()["repository"] == "https://github.com/user/repo"

    def test_failure_after_clone_removes_it(self, config, react_project):
        repos = FakeRepositories(config.temp_dir, source=react_project)
        agent = CypressAgent(config, repositories=repos, generator=FailingGenerator())
        result = agent.process_repository("https://github.com/user/repo")
        assert result.success is False
        assert not (config.temp_dir / "user-repo-1").exists()

    def test_cleanup(self, config, react_project):
        repos = FakeRepositories(config.temp_dir, source=react_project)
        agent = CypressAgent(config, repositories=repos)
        result = agent.process_repository("https://github.com/user/repo")
        assert agent.cleanup(result.temp_path) is True
        assert not Path(result.temp_path).exists()
        assert agent.cleanup(None) is False

    def test_cleanup_stale_clones(self, config):
        stale = config.temp_dir / "user-repo-1"
        fresh = config.temp_dir / "user-repo-2"
        stale.mkdir(parents=True)
        fresh.mkdir()
        then = time.time() - 2 * 3600
        os.utime(stale, (then, then))

        assert CypressAgent(config).cleanup_stale_clones() == ["user-repo-1"]
        assert not stale.exists()
        assert fresh.exists()

    def test_process_for_n8n(self, config, react_project):
        repos = FakeRepositories(config.temp_dir, source=react_project)
        payload = CypressAgent(config, repositories=repos).process_for_n8n("https://github.com/user/repo")
        assert payload["success"] is True
        assert payload["data"]["project"]["name"] == "sample-app"
        assert payload["data"]["project"]["hasCypress"] is True
        assert payload["data"]["specs"]["total"] == 4
        assert payload["summary"] == "Generated 4 Cypress specs for React Application"

    def test_process_for_n8n_failure(self, config):
        repos = FakeRepositories(config.temp_dir, error=AcquisitionError("nope"))
        payload = CypressAgent(config, repositories=repos).process_for_n8n("https://github.com/user/repo")
        assert payload == {"success": False, "error": "nope", "timestamp": payload["timestamp"]}


class TestResultEnvelope:
    def test_success_keys(self, config, react_project):
        data = CypressAgent(config).process_local(react_project).to_dict()
        assert data["success"] is True
        assert data["specsSaved"] is True
        assert data["analysis"]["framework"] == "react"
        assert data["specSummary"]["estimatedExecutionTime"] == 120
        assert data["generatedSpecs"][0]["name"] == "generated-spec-1.cy.js"


class TestGeneratedFiles:
    def test_lists_specs(self, config):
        config.output_dir.mkdir(parents=True)
        (config.output_dir / "generated-spec-1.cy.js").write_text("a\nb\nc")
        (config.output_dir / "notes.md").write_text("ignored")
        files = list_generated_files(config.output_dir)
        assert [f.name for f in files] == ["generated-spec-1.cy.js"]
        assert files[0].lines == 3
        assert files[0].size == 5

    def test_missing_directory(self, tmp_path):
        assert list_generated_files(tmp_path / "absent") == []

    def test_agent_creates_output_dir(self, config):
        agent = CypressAgent(config)
        assert config.output_dir.is_dir()
        assert agent.list_generated_files() == []

    def test_status(self, config):
        status = CypressAgent(config).get_status()
        assert status.status == "active"
        assert status.output_dir == str(config.output_dir)


class TestCreateAgent:
    def test_uses_config(self, isolated_config, monkeypatch):
        monkeypatch.setenv("CYSPEC_OUTPUT_DIR", "specs-out")
        agent = create_agent()
        assert agent.output_dir == (isolated_config / "specs-out").resolve()
        assert agent.output_dir.is_dir()
