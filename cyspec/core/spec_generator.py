"""Test spec generator: Analysis + Strategy -> GeneratedSpec files."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Optional

from cyspec.analyzers.models import Analysis, utc_now_iso
from cyspec.core import GeneratedSpec, SpecSummary, Strategy
from cyspec.core.template_service import TemplateService

logger = logging.getLogger("cyspec.core.generator")

SECONDS_PER_SPEC = 30
SPEC_DIR = "cypress/e2e"

# Text in the templates that gets swapped for a framework-specific label
LANDMARK = "Welcome"
FRAMEWORK_LANDMARKS: dict[str, str] = {
    "react": "React App",
    "vue": "Vue App",
    "angular": "Angular App",
}


def spec_filename(index: int) -> str:
    """File name of the spec at zero-based ``index``."""
    return f"generated-spec-{index + 1}.cy.js"


def select_spec_type(strategy: Strategy, index: int) -> str:
    """Round-robin over the strategy's test patterns."""
    patterns = strategy.test_patterns
    return patterns[index % len(patterns)]


def provenance_header(spec_type: str, analysis: Analysis, generated_at: str) -> str:
    return (
        "// Spec generated automatically by cyspec\n"
        f"// Type: {spec_type}\n"
        f"// Framework: {analysis.framework}\n"
        f"// Project: {analysis.project_type}\n"
        f"// Date: {generated_at}\n"
        "\n"
    )


def customize_template(template: str, analysis: Analysis, spec_type: str) -> str:
    """Apply the framework landmark and prepend the provenance header."""
    landmark = FRAMEWORK_LANDMARKS.get(analysis.framework)
    body = template.replace(LANDMARK, landmark, 1) if landmark else template
    return provenance_header(spec_type, analysis, utc_now_iso()) + body


class SpecGenerator:
    """Generates, summarizes and saves Cypress spec skeletons."""

    def __init__(self, templates: Optional[TemplateService] = None):
        self._templates = templates or TemplateService()

    def generate_test_specs(self, analysis: Analysis, strategy: Strategy) -> list[GeneratedSpec]:
        """Generate ``strategy.recommended_specs`` specs in index order."""
        specs: list[GeneratedSpec] = []
        for index in range(strategy.recommended_specs):
            spec_type = select_spec_type(strategy, index)
            template_name, template = self._templates.template_for_pattern(spec_type)
            name = spec_filename(index)
            specs.append(
                GeneratedSpec(
                    name=name,
                    path=f"{SPEC_DIR}/{name}",
                    type=spec_type,
                    template=template_name,
                    content=customize_template(template, analysis, spec_type),
                )
            )
        logger.info("Generated %d specs", len(specs))
        return specs

    def save_specs_to_disk(self, specs: list[GeneratedSpec], output_dir: Path) -> bool:
        """Write each spec to ``output_dir/<name>``.

        Returns False on the first write failure. Specs already written stay
        on disk.
        """
        output_dir = Path(output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            for spec in specs:
                (output_dir / spec.name).write_text(spec.content, encoding="utf-8")
                logger.debug("Wrote %s", spec.name)
        except OSError as e:
            logger.error("Failed to save specs to %s: %s", output_dir, e)
            return False

        logger.info("Saved %d specs to %s", len(specs), output_dir)
        return True

    def generate_spec_summary(self, specs: list[GeneratedSpec], strategy: Strategy) -> SpecSummary:
        return SpecSummary(
            total_specs=len(specs),
            spec_types=dict(Counter(spec.type for spec in specs)),
            estimated_execution_time=len(specs) * SECONDS_PER_SPEC,
            focus_areas=list(strategy.focus_areas),
        )
