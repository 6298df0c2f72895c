"""Repository acquisition: clone, install dependencies, inspect Cypress setup."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import time
from pathlib import Path
from typing import Optional

from cyspec.analyzers.manifest import MANIFEST_NAME, read_manifest
from cyspec.core import CloneResult, CypressCheck, InstallResult, RepoInfo
from cyspec.errors import AcquisitionError, DependencyInstallError

logger = logging.getLogger("cyspec.core.repository")

REPO_URL_PATTERNS = [
    re.compile(r"github\.com[/:]([^/]+/[^/]+?)(?:\.git)?$"),
    re.compile(r"git@github\.com:([^/]+/[^/]+?)(?:\.git)?$"),
]

CYPRESS_CONFIG_FILES = ["cypress.config.js", "cypress.config.ts", "cypress.json"]

# Lock file -> package manager, checked in order; npm otherwise
LOCK_FILES: list[tuple[str, str]] = [
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
]

CLONE_TIMEOUT = 600


def _now_ms() -> int:
    return int(time.time() * 1000)


def _run(args: list[str], cwd: Optional[Path] = None, timeout: Optional[int] = None) -> str:
    """Run a command and return stdout; raises CalledProcessError on failure."""
    proc = subprocess.run(
        args,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=True,
    )
    return proc.stdout


def _process_error(e: Exception) -> str:
    if isinstance(e, subprocess.CalledProcessError):
        return (e.stderr or e.stdout or str(e)).strip()
    return str(e)


class RepositoryService:
    """Materializes remote repositories under a temp root."""

    def __init__(self, temp_dir: Path, install_timeout: int = 120):
        self.temp_dir = Path(temp_dir)
        self.install_timeout = install_timeout
        self.temp_dir.mkdir(parents=True, exist_ok=True)

    def extract_repo_name(self, github_url: str) -> str:
        """Directory name for a clone: ``owner-repo-<ms>``."""
        for pattern in REPO_URL_PATTERNS:
            match = pattern.search(github_url)
            if match:
                return f"{match.group(1).replace('/', '-', 1)}-{_now_ms()}"
        return f"unknown-repo-{_now_ms()}"

    def clone(self, github_url: str, install: bool = True) -> CloneResult:
        """Clone ``github_url`` into the temp root.

        With ``install`` the full history is cloned and dependencies are
        installed; an install failure is recorded on the result, not raised.
        Without it a shallow clone is made for analysis only.

        Raises:
            AcquisitionError: If git cannot clone the repository.
        """
        repo_name = self.extract_repo_name(github_url)
        repo_path = self.temp_dir / repo_name

        if repo_path.exists():
            logger.info("Removing existing directory %s", repo_name)
            shutil.rmtree(repo_path, ignore_errors=True)

        args = ["git", "clone"]
        if not install:
            args += ["--depth", "1"]
        args += [github_url, str(repo_path)]

        logger.info("Cloning %s", github_url)
        try:
            _run(args, timeout=CLONE_TIMEOUT)
        except (OSError, subprocess.SubprocessError) as e:
            shutil.rmtree(repo_path, ignore_errors=True)
            raise AcquisitionError(f"Clone failed: {_process_error(e)}", repository=github_url)
        logger.info("Cloned %s", repo_name)

        result = CloneResult(repo_path=str(repo_path), repo_name=repo_name)
        if install:
            installed = self.install_dependencies(repo_path)
            result.dependencies_installed = installed.success
            result.install_error = installed.error
            if not installed.success:
                logger.warning("Dependency install failed, continuing with basic analysis: %s", installed.error)
        return result

    def detect_package_manager(self, repo_path: Path) -> str:
        for lock_file, manager in LOCK_FILES:
            if (Path(repo_path) / lock_file).exists():
                return manager
        return "npm"

    def install_dependencies(self, repo_path: Path) -> InstallResult:
        """Run ``<package manager> install`` in ``repo_path``."""
        repo_path = Path(repo_path)
        if not (repo_path / "package.json").exists():
            return InstallResult(success=False, error="No package.json found")

        manager = self.detect_package_manager(repo_path)
        try:
            self._run_install(manager, repo_path)
        except DependencyInstallError as e:
            return InstallResult(success=False, package_manager=manager, error=str(e))
        return InstallResult(success=True, package_manager=manager)

    def _run_install(self, manager: str, repo_path: Path) -> None:
        logger.info("Installing dependencies with %s", manager)
        try:
            _run([manager, "install"], cwd=repo_path, timeout=self.install_timeout)
        except (OSError, subprocess.SubprocessError) as e:
            raise DependencyInstallError(
                f"{manager} install failed: {_process_error(e)}",
                package_manager=manager,
                repo_path=str(repo_path),
            )

    def check_cypress_setup(self, repo_path: Path) -> CypressCheck:
        """Report whether the project declares and configures Cypress."""
        repo_path = Path(repo_path)
        check = CypressCheck()

        package_json = repo_path / MANIFEST_NAME
        if package_json.exists():
            check.has_package_json = True
            manifest = read_manifest(repo_path)
            if manifest.found:
                check.has_cypress_dependency = bool(manifest.all_dependencies.get("cypress"))
                check.scripts = dict(manifest.scripts)
            else:
                check.error = f"Could not parse {MANIFEST_NAME}"

        for config_file in CYPRESS_CONFIG_FILES:
            if (repo_path / config_file).exists():
                check.has_cypress_config = True
                check.cypress_config_path = config_file
                break

        return check

    def get_repo_info(self, repo_path: Path) -> RepoInfo:
        """Remotes and branches of a cloned repository."""
        try:
            remotes_out = _run(["git", "remote", "-v"], cwd=Path(repo_path))
            current = _run(["git", "branch", "--show-current"], cwd=Path(repo_path)).strip()
            branches_out = _run(["git", "branch", "--format=%(refname:short)"], cwd=Path(repo_path))
        except (OSError, subprocess.SubprocessError) as e:
            return RepoInfo(error=_process_error(e))

        remotes: dict[str, str] = {}
        for line in remotes_out.splitlines():
            parts = line.split()
            if len(parts) >= 3 and parts[2] == "(fetch)":
                remotes[parts[0]] = parts[1]
        return RepoInfo(
            remotes=[{"name": name, "url": url} for name, url in remotes.items()],
            current_branch=current,
            branches=[b.strip() for b in branches_out.splitlines() if b.strip()],
        )

    def is_temp_path(self, path: Path) -> bool:
        return Path(path).resolve().is_relative_to(self.temp_dir.resolve())

    def cleanup(self, path: Optional[str]) -> bool:
        """Remove a clone, refusing anything outside the temp root."""
        if not path or not self.is_temp_path(Path(path)):
            return False
        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.warning("Error cleaning up %s: %s", path, e)
            return False
        logger.info("Cleaned up %s", Path(path).name)
        return True

    def cleanup_old_repos(self, max_age_hours: float = 24) -> list[str]:
        """Remove temp entries older than ``max_age_hours``. Returns removed names."""
        removed: list[str] = []
        if not self.temp_dir.exists():
            return removed

        cutoff = time.time() - max_age_hours * 3600
        for item in sorted(self.temp_dir.iterdir()):
            try:
                if item.stat().st_mtime < cutoff:
                    if item.is_dir():
                        shutil.rmtree(item)
                    else:
                        item.unlink()
                    removed.append(item.name)
                    logger.info("Removed stale temp entry %s", item.name)
            except OSError as e:
                logger.warning("Error removing %s: %s", item, e)
        return removed
