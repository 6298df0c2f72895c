"""Test strategy engine: turns an Analysis into a Strategy.

Pure functions of the Analysis. The only side effect is logging.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from cyspec.analyzers.models import Analysis
from cyspec.core import Strategy

logger = logging.getLogger("cyspec.core.strategy")

# Spec count: max(SPEC_FLOOR, floor(SPEC_FLOOR + structure factor + entry bonus))
SPEC_FLOOR = 3
STRUCTURE_DIVISOR = 50
STRUCTURE_CAP = 3
ENTRY_POINT_WEIGHT = 0.5

DEFAULT_FOCUS_AREAS: tuple[str, ...] = ("smoke-testing", "critical-flows")

# Dependencies that signal the app talks to an HTTP API
HTTP_CLIENT_PACKAGES: tuple[str, ...] = ("axios", "fetch")

FALLBACK_PROFILE = "traditional"
UNDETECTED_FRAMEWORK = "none"


@dataclass(frozen=True)
class StrategyProfile:
    name: str
    priority: tuple[str, ...]
    selectors: tuple[str, ...]
    patterns: tuple[str, ...]


PROFILES: dict[str, StrategyProfile] = {
    "react": StrategyProfile(
        name="React Testing Strategy",
        priority=("component-testing", "state-management", "router-testing", "form-testing"),
        selectors=("data-testid", "role", "aria-label", "className"),
        patterns=("component-rendering", "user-interactions", "state-changes", "api-calls"),
    ),
    "vue": StrategyProfile(
        name="Vue Testing Strategy",
        priority=("component-testing", "vuex-store", "router-testing", "form-validation"),
        selectors=("data-test", "v-test", "aria-label", "class"),
        patterns=("component-mounting", "event-handling", "computed-properties", "vuex-actions"),
    ),
    "angular": StrategyProfile(
        name="Angular Testing Strategy",
        priority=("component-testing", "service-testing", "router-testing", "form-testing"),
        selectors=("data-cy", "data-test", "aria-label"),
        patterns=("component-creation", "dependency-injection", "router-navigation", "http-calls"),
    ),
    "traditional": StrategyProfile(
        name="Traditional Web App Strategy",
        priority=("navigation-testing", "form-testing", "content-validation", "user-flows"),
        selectors=("id", "class", "name", "data-*"),
        patterns=("page-navigation", "form-submission", "content-verification", "user-journey"),
    ),
}

# Per-framework Cypress runner settings
CYPRESS_SETTINGS: dict[str, dict] = {
    "react": {"viewportWidth": 1200, "viewportHeight": 800, "defaultCommandTimeout": 10000},
    "vue": {"viewportWidth": 1200, "viewportHeight": 800, "defaultCommandTimeout": 10000},
    "angular": {"viewportWidth": 1200, "viewportHeight": 800, "defaultCommandTimeout": 15000},
    "traditional": {"viewportWidth": 1280, "viewportHeight": 720, "defaultCommandTimeout": 8000},
}


def resolve_profile(framework: str) -> StrategyProfile:
    return PROFILES.get(framework, PROFILES[FALLBACK_PROFILE])


def calculate_recommended_specs(analysis: Analysis) -> int:
    structure_factor = min(len(analysis.project_structure) / STRUCTURE_DIVISOR, STRUCTURE_CAP)
    entry_point_bonus = len(analysis.entry_points) * ENTRY_POINT_WEIGHT
    return max(SPEC_FLOOR, math.floor(SPEC_FLOOR + structure_factor + entry_point_bonus))


def _has_path_containing(analysis: Analysis, needle: str) -> bool:
    return any(needle in entry.path for entry in analysis.project_structure)


def determine_focus_areas(analysis: Analysis) -> list[str]:
    focus_areas: list[str] = []
    if _has_path_containing(analysis, "form"):
        focus_areas.append("form-testing")
    if _has_path_containing(analysis, "auth"):
        focus_areas.append("authentication")
    if len(analysis.entry_points) > 1:
        focus_areas.append("navigation-testing")
    if _has_path_containing(analysis, "api"):
        focus_areas.append("api-testing")

    if not focus_areas:
        focus_areas.extend(DEFAULT_FOCUS_AREAS)
    return focus_areas


def select_test_patterns(analysis: Analysis, base_patterns: tuple[str, ...]) -> list[str]:
    patterns = list(base_patterns)
    if any(analysis.dependencies.get(pkg) for pkg in HTTP_CLIENT_PACKAGES):
        patterns.append("api-testing")
    if len(analysis.entry_points) > 1:
        patterns.append("multi-page-testing")
    if _has_path_containing(analysis, "form"):
        patterns.append("form-validation")
    return patterns


class StrategyService:
    """Derives testing strategies and Cypress settings from analyses."""

    def generate_strategy(self, analysis: Analysis) -> Strategy:
        """Build the Strategy for ``analysis``.

        Frameworks without a dedicated profile (nextjs, nuxtjs, svelte, or
        anything unexpected) use the traditional profile.
        """
        logger.info("Generating testing strategy for %s", analysis.framework)
        framework = FALLBACK_PROFILE if analysis.framework == UNDETECTED_FRAMEWORK else analysis.framework
        profile = resolve_profile(framework)

        strategy = Strategy(
            name=profile.name,
            framework=framework,
            project_type=analysis.project_type,
            recommended_specs=calculate_recommended_specs(analysis),
            focus_areas=determine_focus_areas(analysis),
            test_patterns=select_test_patterns(analysis, profile.patterns),
            selector_strategy=list(profile.selectors),
            priority=list(profile.priority),
        )
        logger.info(
            "Strategy %s: %d specs, patterns=%s",
            strategy.name,
            strategy.recommended_specs,
            strategy.test_patterns,
        )
        return strategy

    def generate_cypress_config(self, analysis: Analysis) -> dict:
        """Cypress settings suited to the detected framework."""
        settings = CYPRESS_SETTINGS.get(analysis.framework, CYPRESS_SETTINGS[FALLBACK_PROFILE])
        return {
            "e2e": {},
            **settings,
            "reporter": "mochawesome",
            "reporterOptions": {
                "reportDir": "cypress/reports",
                "overwrite": False,
                "html": False,
                "json": True,
            },
        }
