"""Pipeline controller: acquisition -> analysis -> strategy -> generation.

Analysis is fail-soft, the controller is fail-fast: any stage that raises
(clone failure, save failure, ...) ends the run with a failure envelope and
the temporary clone is removed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from cyspec.analyzers.project_analyzer import ProjectAnalyzer
from cyspec.core import AgentStatus, GeneratedFileInfo, PipelineResult
from cyspec.core.config_service import PipelineConfig
from cyspec.core.repository_service import RepositoryService
from cyspec.core.spec_generator import SpecGenerator
from cyspec.core.strategy_service import StrategyService
from cyspec.core.template_service import TemplateService
from cyspec.errors import InvalidRepositoryError, SaveError

logger = logging.getLogger("cyspec.core.pipeline")

SPEC_GLOB = "*.cy.js"

# Clones older than this are removed when a long-running mode starts
STALE_CLONE_HOURS = 1


def list_generated_files(output_dir: Path) -> list[GeneratedFileInfo]:
    """Describe the spec files currently in ``output_dir``."""
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        return []

    files: list[GeneratedFileInfo] = []
    for path in sorted(output_dir.glob(SPEC_GLOB)):
        try:
            stat = path.stat()
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            continue
        files.append(
            GeneratedFileInfo(
                name=path.name,
                path=str(path),
                size=stat.st_size,
                created=datetime.fromtimestamp(stat.st_ctime, tz=timezone.utc).isoformat(),
                lines=len(content.split("\n")),
            )
        )
    return files


class CypressAgent:
    """Runs repositories through the analysis and generation pipeline."""

    def __init__(
        self,
        config: PipelineConfig,
        repositories: Optional[RepositoryService] = None,
        analyzer: Optional[ProjectAnalyzer] = None,
        strategies: Optional[StrategyService] = None,
        generator: Optional[SpecGenerator] = None,
    ):
        self.config = config
        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        self.repositories = repositories or RepositoryService(
            config.temp_dir, install_timeout=config.install_timeout
        )
        self.analyzer = analyzer or ProjectAnalyzer()
        self.strategies = strategies or StrategyService()
        self.generator = generator or SpecGenerator(TemplateService(config.templates_dir))

    @property
    def output_dir(self) -> Path:
        return self.config.output_dir

    @property
    def temp_dir(self) -> Path:
        return self.config.temp_dir

    def process_repository(self, github_url: str) -> PipelineResult:
        """Clone ``github_url`` and run the full pipeline on it."""
        temp_path: Optional[str] = None
        logger.info("Processing repository %s", github_url)
        try:
            clone = self.repositories.clone(github_url, install=self.config.install_dependencies)
            temp_path = clone.repo_path
            result = self._run(Path(clone.repo_path), github_url)
            result.temp_path = temp_path
            return result
        except Exception as e:
            logger.error("Error processing %s: %s", github_url, e)
            if temp_path:
                self.cleanup(temp_path)
            return PipelineResult.failure(github_url, str(e))

    def process_local(self, project_path: Path) -> PipelineResult:
        """Run the pipeline on an existing directory. Nothing is cleaned up."""
        identifier = str(project_path)
        try:
            project_path = Path(project_path).resolve()
            if not project_path.is_dir():
                raise InvalidRepositoryError(identifier)
            return self._run(project_path, identifier)
        except Exception as e:
            logger.error("Error processing %s: %s", identifier, e)
            return PipelineResult.failure(identifier, str(e))

    def _run(self, repo_path: Path, identifier: str) -> PipelineResult:
        analysis = self.analyzer.deep_analysis(repo_path)
        cypress_check = self.repositories.check_cypress_setup(repo_path)
        strategy = self.strategies.generate_strategy(analysis)
        specs = self.generator.generate_test_specs(analysis, strategy)

        if not self.generator.save_specs_to_disk(specs, self.output_dir):
            raise SaveError(f"Could not save specs to {self.output_dir}", output_dir=str(self.output_dir))

        summary = self.generator.generate_spec_summary(specs, strategy)
        return PipelineResult(
            success=True,
            repository=identifier,
            analysis=analysis,
            cypress_check=cypress_check,
            strategy=strategy,
            generated_specs=specs,
            spec_summary=summary,
            specs_saved=True,
            output_path=str(self.output_dir),
        )

    def process_for_n8n(self, github_url: str) -> dict:
        """Run the pipeline and shape the result for workflow tools."""
        result = self.process_repository(github_url)
        if not result.success:
            return {"success": False, "error": result.error, "timestamp": result.timestamp}

        analysis = result.analysis
        summary = result.spec_summary
        package_name = analysis.package_info.name if analysis.package_info else None
        return {
            "success": True,
            "data": {
                "project": {
                    "name": package_name or "Unknown",
                    "type": analysis.project_type,
                    "framework": analysis.framework,
                    "hasCypress": result.cypress_check.has_cypress_dependency,
                },
                "specs": {
                    "total": summary.total_specs,
                    "types": summary.spec_types,
                    "estimatedTime": summary.estimated_execution_time,
                    "outputPath": result.output_path,
                },
                "strategy": result.strategy.name,
                "generatedFiles": [
                    {"name": s.name, "type": s.type, "path": s.path} for s in result.generated_specs
                ],
            },
            "summary": f"Generated {summary.total_specs} Cypress specs for {analysis.project_type}",
            "timestamp": result.timestamp,
        }

    def cleanup(self, temp_path: Optional[str]) -> bool:
        return self.repositories.cleanup(temp_path)

    def cleanup_stale_clones(self, max_age_hours: float = STALE_CLONE_HOURS) -> list[str]:
        """Remove clones left behind by earlier runs."""
        removed = self.repositories.cleanup_old_repos(max_age_hours)
        if removed:
            logger.info("Removed %d stale clones from %s", len(removed), self.temp_dir)
        return removed

    def list_generated_files(self) -> list[GeneratedFileInfo]:
        return list_generated_files(self.output_dir)

    def get_status(self) -> AgentStatus:
        return AgentStatus(status="active", output_dir=str(self.output_dir), temp_dir=str(self.temp_dir))


def create_agent() -> CypressAgent:
    """Build an agent from the resolved configuration."""
    from cyspec.core.config_service import get_config_service

    return CypressAgent(get_config_service().pipeline_config())
