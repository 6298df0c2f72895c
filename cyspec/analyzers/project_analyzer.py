"""Project analyzer orchestrator.

Reads the manifest, inspects installed dependencies, scans the tree, detects
the front-end framework and project type, and discovers entry points,
existing tests and build tooling. Every step guards its own I/O: analysis
never raises, it returns whatever it managed to collect.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .manifest import read_manifest
from .models import (
    UNKNOWN_PROJECT_TYPE,
    Analysis,
    BuildScript,
    BuildTool,
    ExecutableScript,
    TestFileInfo,
)
from .structure_scanner import DEPENDENCY_CACHE_DIR, EXCLUDED_DIRS, MAX_FILE_DEPTH, scan_structure

logger = logging.getLogger(__name__)

CYPRESS_PACKAGE = "cypress"
UNDETECTED_FRAMEWORK = "none"
FALLBACK_FRAMEWORK = "traditional"

# Framework detection: ordered (framework, indicator packages). The first
# framework with any indicator in the combined dependency map wins.
FRAMEWORK_INDICATORS: list[tuple[str, list[str]]] = [
    ("react", ["react", "react-dom", "next", "gatsby"]),
    ("vue", ["vue", "nuxt", "vuex", "vue-router"]),
    ("angular", ["@angular/core", "@angular/common", "rxjs"]),
    ("nextjs", ["next", "react"]),
    ("nuxtjs", ["nuxt", "vue"]),
    ("svelte", ["svelte", "svelte-kit"]),
    ("traditional", ["jquery", "bootstrap", "popper.js"]),
]

# Testing library package -> display label
TESTING_LIBRARIES: dict[str, str] = {
    "cypress": "Cypress",
    "jest": "Jest",
    "mocha": "Mocha",
    "jasmine": "Jasmine",
    "vitest": "Vitest",
    "@testing-library/react": "Testing Library React",
    "@testing-library/vue": "Testing Library Vue",
    "@testing-library/angular": "Testing Library Angular",
    "enzyme": "Enzyme",
    "puppeteer": "Puppeteer",
    "playwright": "Playwright",
}

# A script is considered runnable when its command mentions one of these
EXECUTABLE_KEYWORDS: tuple[str, ...] = (
    "start",
    "dev",
    "serve",
    "build",
    "test",
    "cypress",
    "lint",
    "typecheck",
    "storybook",
    "compile",
    "deploy",
)

ENTRY_CANDIDATES: list[str] = [
    "index.html",
    "src/index.js",
    "src/main.js",
    "src/index.ts",
    "public/index.html",
    "app/index.html",
    "src/App.js",
    "src/App.tsx",
    "index.php",
    "app.php",
    "main.js",
    "app.js",
    "App.jsx",
    "App.tsx",
    "src/main.ts",
    "src/main.tsx",
]

TEST_PATTERNS: list[str] = [
    "**/*.test.js",
    "**/*.spec.js",
    "**/*.test.ts",
    "**/*.spec.ts",
    "cypress/e2e/**/*.js",
    "cypress/e2e/**/*.ts",
    "tests/**/*.js",
    "test/**/*.js",
    "e2e/**/*.js",
    "**/__tests__/**/*.js",
    "**/__tests__/**/*.ts",
]

# Config file -> build tool name
BUILD_CONFIGS: dict[str, str] = {
    "webpack.config.js": "Webpack",
    "vite.config.js": "Vite",
    "vite.config.ts": "Vite",
    "rollup.config.js": "Rollup",
    "parcel.config.js": "Parcel",
    "angular.json": "Angular CLI",
    "vue.config.js": "Vue CLI",
    "next.config.js": "Next.js",
    "nuxt.config.js": "Nuxt.js",
    "svelte.config.js": "Svelte",
}

BUILD_COMMAND_KEYWORDS: tuple[str, ...] = ("webpack", "vite", "rollup")


class ProjectAnalyzer:
    """Builds an Analysis for a materialized project directory."""

    def deep_analysis(self, repo_path: Path) -> Analysis:
        """Run every analysis step against ``repo_path``.

        Args:
            repo_path: Root directory of the checked-out project.

        Returns:
            The Analysis. On an unexpected failure, the partially filled
            record collected so far.
        """
        repo_path = Path(repo_path)
        logger.info("Analyzing project structure: %s", repo_path)
        analysis = Analysis()

        try:
            self.analyze_package_json(repo_path, analysis)
            self.analyze_installed_dependencies(repo_path, analysis)
            analysis.project_structure = scan_structure(repo_path)
            self.detect_framework_and_type(analysis)
            self.find_entry_points(repo_path, analysis)
            self.find_existing_tests(repo_path, analysis)
            self.analyze_build_tools(repo_path, analysis)
            logger.info("Analysis complete: %s", analysis.project_type)
        except Exception as e:
            logger.error("Analysis of %s stopped early: %s", repo_path, e)

        _normalize_framework(analysis)
        return analysis

    def quick_analysis(self, repo_path: Path) -> Analysis:
        """Manifest, shallow structure, framework and entry points only."""
        repo_path = Path(repo_path)
        analysis = Analysis()
        try:
            self.analyze_package_json(repo_path, analysis)
            analysis.project_structure = scan_structure(repo_path, start_depth=MAX_FILE_DEPTH)
            self.detect_framework_and_type(analysis)
            self.find_entry_points(repo_path, analysis)
        except Exception as e:
            logger.error("Quick analysis of %s stopped early: %s", repo_path, e)
        _normalize_framework(analysis)
        return analysis

    # ── Manifest ────────────────────────────────────────────────────

    def analyze_package_json(self, repo_path: Path, analysis: Analysis) -> None:
        manifest = read_manifest(repo_path)
        if not manifest.found:
            return
        analysis.has_package_json = True
        analysis.dependencies = manifest.dependencies
        analysis.dev_dependencies = manifest.dev_dependencies
        analysis.scripts = manifest.scripts
        analysis.package_info = manifest.package

    # ── Installed dependencies ──────────────────────────────────────

    def analyze_installed_dependencies(self, repo_path: Path, analysis: Analysis) -> None:
        try:
            cache = repo_path / DEPENDENCY_CACHE_DIR
            if not cache.is_dir():
                analysis.dependencies_installed = False
                return

            analysis.dependencies_installed = True
            analysis.cypress_installed = (cache / CYPRESS_PACKAGE).exists()

            if analysis.scripts:
                analysis.executable_scripts = self.analyze_executable_scripts(analysis.scripts)

            analysis.testing_frameworks = self.detect_testing_frameworks(analysis.all_dependencies)
        except OSError as e:
            analysis.dependencies_installed = False
            logger.warning("Could not inspect installed dependencies: %s", e)

    def analyze_executable_scripts(self, scripts: dict[str, str]) -> dict[str, ExecutableScript]:
        return {
            name: ExecutableScript(
                command=command,
                can_execute=can_execute_script(command),
                script_type=get_script_type(name, command),
            )
            for name, command in scripts.items()
        }

    def detect_testing_frameworks(self, all_deps: dict[str, str]) -> list[str]:
        return [label for lib, label in TESTING_LIBRARIES.items() if all_deps.get(lib)]

    # ── Framework and project type ──────────────────────────────────

    def detect_framework_and_type(self, analysis: Analysis) -> None:
        all_deps = analysis.all_dependencies
        analysis.framework = detect_framework(all_deps)
        analysis.project_type = determine_project_type(
            analysis.framework, all_deps, analysis.structure_paths
        )

    # ── Entry points ────────────────────────────────────────────────

    def find_entry_points(self, repo_path: Path, analysis: Analysis) -> None:
        for candidate in ENTRY_CANDIDATES:
            try:
                if (repo_path / candidate).exists():
                    analysis.entry_points.append(candidate)
            except OSError:
                continue

    # ── Existing tests ──────────────────────────────────────────────

    def find_existing_tests(self, repo_path: Path, analysis: Analysis) -> None:
        for pattern in TEST_PATTERNS:
            for rel in find_matching_files(repo_path, pattern):
                analysis.test_files.append(
                    TestFileInfo(
                        path=rel,
                        test_type=get_test_type(rel),
                        framework=get_test_framework(rel),
                    )
                )

    # ── Build tooling ───────────────────────────────────────────────

    def analyze_build_tools(self, repo_path: Path, analysis: Analysis) -> None:
        analysis.build_tools = []
        for config_file, tool_name in BUILD_CONFIGS.items():
            try:
                if (repo_path / config_file).exists():
                    analysis.build_tools.append(BuildTool(name=tool_name, config_file=config_file))
            except OSError:
                continue

        analysis.build_scripts = [
            BuildScript(name=name, command=command)
            for name, command in analysis.scripts.items()
            if "build" in name or any(k in command for k in BUILD_COMMAND_KEYWORDS)
        ]


# ── Table-driven classifiers ───────────────────────────────────────


def _normalize_framework(analysis: Analysis) -> None:
    # "none" means detection never ran
    if analysis.framework == UNDETECTED_FRAMEWORK:
        analysis.framework = FALLBACK_FRAMEWORK


def detect_framework(all_deps: dict[str, str]) -> str:
    """First framework in FRAMEWORK_INDICATORS with a declared indicator."""
    for framework, indicators in FRAMEWORK_INDICATORS:
        if any(all_deps.get(indicator) for indicator in indicators):
            return framework
    return FALLBACK_FRAMEWORK


def _any_path_contains(paths: list[str], *needles: str) -> bool:
    return any(needle in p for p in paths for needle in needles)


def determine_project_type(framework: str, all_deps: dict[str, str], paths: list[str]) -> str:
    """Classify the project from its framework plus structural signals."""
    if framework == "react":
        if all_deps.get("next"):
            return "Next.js Application"
        if all_deps.get("gatsby"):
            return "Gatsby Application"
        if _any_path_contains(paths, "pages/", "app/"):
            return "React SPA"
        return "React Application"

    if framework == "vue":
        if all_deps.get("nuxt"):
            return "Nuxt.js Application"
        if _any_path_contains(paths, "pages/", "views/"):
            return "Vue SPA"
        return "Vue Application"

    if framework == "angular":
        return "Angular Application"
    if framework == "nextjs":
        return "Next.js SSR Application"
    if framework == "nuxtjs":
        return "Nuxt.js SSR Application"

    if framework == "svelte":
        if all_deps.get("svelte-kit"):
            return "SvelteKit Application"
        return "Svelte Application"

    if _any_path_contains(paths, "index.html"):
        return "Traditional Web Application"
    if _any_path_contains(paths, ".php"):
        return "PHP Application"
    return UNKNOWN_PROJECT_TYPE


def can_execute_script(command: str) -> bool:
    lowered = command.lower()
    return any(keyword in lowered for keyword in EXECUTABLE_KEYWORDS)


def get_script_type(name: str, command: str) -> str:
    """Classify a script; the first matching rule wins."""
    for keyword in ("test", "build", "start", "dev", "cypress"):
        if keyword in name or keyword in command:
            return keyword
    if "lint" in name:
        return "lint"
    return "other"


def get_test_type(path: str) -> str:
    if "cypress" in path:
        return "e2e"
    if ".test." in path or ".spec." in path:
        return "unit"
    if "e2e" in path:
        return "e2e"
    if "__tests__" in path:
        return "unit"
    return "unknown"


def get_test_framework(path: str) -> str:
    for needle, label in (("cypress", "Cypress"), ("jest", "Jest"), ("mocha", "Mocha"), ("vitest", "Vitest")):
        if needle in path:
            return label
    return "Unknown"


def pattern_fragment(pattern: str) -> tuple[str, bool]:
    """Reduce a glob-like pattern to the literal fragment used for matching.

    Returns ``(fragment, match_path)``. Patterns containing ``**`` match the
    fragment against the whole relative path, after dropping the first
    ``**/`` and the first ``*``. Other patterns match against the bare file
    name after dropping the first ``*``. This is literal containment, not
    glob semantics: ``cypress/e2e/**/*.js`` reduces to ``cypress/e2e/.js``
    and so only matches paths that literally contain that string.
    """
    if "**" in pattern:
        return pattern.replace("**/", "", 1).replace("*", "", 1), True
    return pattern.replace("*", "", 1), False


def find_matching_files(root: Path, pattern: str) -> list[str]:
    """Recursively collect relative file paths matching ``pattern``.

    Dependency caches and VCS metadata are skipped. Unreadable directories
    are ignored.
    """
    fragment, match_path = pattern_fragment(pattern)
    results: list[str] = []

    def search(directory: Path) -> None:
        try:
            children = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError:
            return
        for child in children:
            if child.name in EXCLUDED_DIRS:
                continue
            try:
                if child.is_dir():
                    search(child)
                elif child.is_file():
                    rel = child.relative_to(root).as_posix()
                    target = rel if match_path else child.name
                    if fragment in target:
                        results.append(rel)
            except OSError:
                continue

    search(root)
    return results
