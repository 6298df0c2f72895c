"""Service layer for cyspec.

All services return typed dataclasses. Services never import from cyspec.ui,
cyspec.cli, or typer. Consumer layers (CLI, webhook) handle presentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from cyspec.analyzers.models import Analysis, utc_now_iso


@dataclass(frozen=True)
class Strategy:
    """Testing plan derived from one Analysis."""

    name: str
    framework: str
    project_type: str
    recommended_specs: int
    focus_areas: list[str]
    test_patterns: list[str]
    selector_strategy: list[str]
    priority: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "framework": self.framework,
            "projectType": self.project_type,
            "recommendedSpecs": self.recommended_specs,
            "focusAreas": list(self.focus_areas),
            "testPatterns": list(self.test_patterns),
            "selectorStrategy": list(self.selector_strategy),
            "priority": list(self.priority),
        }


@dataclass(frozen=True)
class GeneratedSpec:
    """One generated Cypress spec file."""

    name: str
    path: str
    type: str
    template: str
    content: str

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type, "path": self.path, "content": self.content}


@dataclass(frozen=True)
class SpecSummary:
    """Aggregate view of one generation run."""

    total_specs: int
    spec_types: dict[str, int]
    estimated_execution_time: int  # seconds
    focus_areas: list[str]

    def to_dict(self) -> dict:
        return {
            "totalSpecs": self.total_specs,
            "specTypes": dict(self.spec_types),
            "estimatedExecutionTime": self.estimated_execution_time,
            "focusAreas": list(self.focus_areas),
        }


@dataclass
class CypressCheck:
    """Whether a project already has Cypress wired up."""

    has_package_json: bool = False
    has_cypress_dependency: bool = False
    has_cypress_config: bool = False
    cypress_config_path: Optional[str] = None
    scripts: dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "hasPackageJson": self.has_package_json,
            "hasCypressDependency": self.has_cypress_dependency,
            "hasCypressConfig": self.has_cypress_config,
            "cypressConfigPath": self.cypress_config_path,
            "scripts": dict(self.scripts),
            "error": self.error,
        }


@dataclass
class InstallResult:
    """Outcome of installing a cloned project's dependencies."""

    success: bool
    package_manager: Optional[str] = None
    error: Optional[str] = None


@dataclass
class CloneResult:
    """A repository materialized under the temp root."""

    repo_path: str
    repo_name: str
    dependencies_installed: bool = False
    install_error: Optional[str] = None
    cloned_at: str = field(default_factory=utc_now_iso)


@dataclass
class RepoInfo:
    """Git metadata of a cloned repository."""

    remotes: list[dict] = field(default_factory=list)
    current_branch: str = ""
    branches: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class GeneratedFileInfo:
    """A spec file found in the output directory."""

    name: str
    path: str
    size: int
    created: str
    lines: int

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": self.path,
            "size": self.size,
            "created": self.created,
            "lines": self.lines,
        }


@dataclass
class PipelineResult:
    """Envelope returned by one pipeline run.

    A failed run carries only ``success``, ``error``, ``repository`` and
    ``timestamp``.
    """

    success: bool
    repository: str
    analysis: Optional[Analysis] = None
    cypress_check: Optional[CypressCheck] = None
    strategy: Optional[Strategy] = None
    generated_specs: list[GeneratedSpec] = field(default_factory=list)
    spec_summary: Optional[SpecSummary] = None
    specs_saved: bool = False
    output_path: Optional[str] = None
    temp_path: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = field(default_factory=utc_now_iso)

    @classmethod
    def failure(cls, repository: str, error: str) -> "PipelineResult":
        return cls(success=False, repository=repository, error=error)

    def to_dict(self) -> dict:
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "repository": self.repository,
                "timestamp": self.timestamp,
            }
        return {
            "success": True,
            "repository": self.repository,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "cypressCheck": self.cypress_check.to_dict() if self.cypress_check else None,
            "strategy": self.strategy.to_dict() if self.strategy else None,
            "generatedSpecs": [s.to_dict() for s in self.generated_specs],
            "specSummary": self.spec_summary.to_dict() if self.spec_summary else None,
            "specsSaved": self.specs_saved,
            "outputPath": self.output_path,
            "tempPath": self.temp_path,
            "timestamp": self.timestamp,
        }


@dataclass
class AgentStatus:
    """Runtime status of a pipeline controller."""

    status: str
    output_dir: str
    temp_dir: str
    timestamp: str = field(default_factory=utc_now_iso)
