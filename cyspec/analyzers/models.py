"""Data models for project analysis results."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional

# Closed set of framework keys produced by detection. "none" only exists
# before detection runs and is normalized to "traditional".
FRAMEWORKS: tuple[str, ...] = (
    "react",
    "vue",
    "angular",
    "nextjs",
    "nuxtjs",
    "svelte",
    "traditional",
    "none",
)

UNKNOWN_PROJECT_TYPE = "Unknown Project Type"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class StructureEntry:
    """A file or directory recorded by the structural scan."""
    kind: str  # "file" | "directory"
    path: str  # relative to the project root, POSIX separators
    depth: int
    important: bool = False
    extension: Optional[str] = None  # files only
    size: Optional[int] = None  # files only

    @property
    def is_dir(self) -> bool:
        return self.kind == "directory"


@dataclass
class PackageInfo:
    """Identity fields copied from package.json."""
    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    main: Optional[str] = None
    author: Optional[object] = None  # string or {name, email} object


@dataclass
class Manifest:
    """Normalized package manifest."""
    found: bool = False
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)
    package: Optional[PackageInfo] = None

    @property
    def all_dependencies(self) -> dict[str, str]:
        merged = dict(self.dependencies)
        merged.update(self.dev_dependencies)
        return merged


@dataclass
class ExecutableScript:
    """Classification of one manifest script."""
    command: str
    can_execute: bool
    script_type: str  # test | build | start | dev | cypress | lint | other


@dataclass
class TestFileInfo:
    """A pre-existing test file found in the project."""
    path: str
    test_type: str  # e2e | unit | unknown
    framework: str


@dataclass
class BuildTool:
    """A build tool detected from its config file."""
    name: str
    config_file: str


@dataclass
class BuildScript:
    """A manifest script that looks build-related."""
    name: str
    command: str


@dataclass
class Analysis:
    """Complete analysis of a front-end project."""
    project_type: str = "unknown"
    framework: str = "none"
    has_package_json: bool = False
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)
    package_info: Optional[PackageInfo] = None
    dependencies_installed: bool = False
    cypress_installed: bool = False
    testing_frameworks: list[str] = field(default_factory=list)
    project_structure: list[StructureEntry] = field(default_factory=list)
    entry_points: list[str] = field(default_factory=list)
    test_files: list[TestFileInfo] = field(default_factory=list)
    build_tools: list[BuildTool] = field(default_factory=list)
    build_scripts: list[BuildScript] = field(default_factory=list)
    executable_scripts: dict[str, ExecutableScript] = field(default_factory=dict)
    analysis_date: str = field(default_factory=utc_now_iso)

    @property
    def all_dependencies(self) -> dict[str, str]:
        merged = dict(self.dependencies)
        merged.update(self.dev_dependencies)
        return merged

    @property
    def structure_paths(self) -> list[str]:
        return [entry.path for entry in self.project_structure]

    def to_dict(self) -> dict:
        """JSON-friendly view with the camelCase keys used by the webhook."""
        return {
            "projectType": self.project_type,
            "framework": self.framework,
            "hasPackageJson": self.has_package_json,
            "dependencies": self.dependencies,
            "devDependencies": self.dev_dependencies,
            "scripts": self.scripts,
            "packageJson": asdict(self.package_info) if self.package_info else None,
            "dependenciesInstalled": self.dependencies_installed,
            "cypressInstalled": self.cypress_installed,
            "testingFrameworks": self.testing_frameworks,
            "projectStructure": [
                {
                    "type": e.kind,
                    "path": e.path,
                    "depth": e.depth,
                    "important": e.important,
                    **({"extension": e.extension, "size": e.size} if e.kind == "file" else {}),
                }
                for e in self.project_structure
            ],
            "entryPoints": list(self.entry_points),
            "testFiles": [
                {"path": t.path, "type": t.test_type, "framework": t.framework}
                for t in self.test_files
            ],
            "buildTools": [{"name": b.name, "configFile": b.config_file} for b in self.build_tools],
            "buildScripts": [{"name": b.name, "command": b.command} for b in self.build_scripts],
            "executableScripts": {
                name: {"command": s.command, "canExecute": s.can_execute, "type": s.script_type}
                for name, s in self.executable_scripts.items()
            },
            "analysisDate": self.analysis_date,
        }
