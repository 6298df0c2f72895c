"""Custom exception hierarchy for cyspec.

All cyspec-specific exceptions derive from CyspecError. Each exception
carries an optional ``context`` dict with structured metadata
(repository URL, output directory, package manager, etc.) that the CLI
error handler and the webhook can render.

Exception hierarchy::

    CyspecError
    ├── AcquisitionError
    │   └── InvalidRepositoryError
    ├── DependencyInstallError
    ├── SaveError
    └── ConfigError
"""
from __future__ import annotations

from typing import Optional


class CyspecError(Exception):
    """Base class for all cyspec exceptions.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured metadata.
    """

    exit_code: int = 1

    def __init__(self, message: str, context: Optional[dict] = None):
        self.context = context or {}
        super().__init__(message)


# ── Acquisition ────────────────────────────────────────────────────

class AcquisitionError(CyspecError):
    """Raised when a repository cannot be cloned or materialized."""

    def __init__(self, message: str, repository: str = ""):
        super().__init__(message, context={"repository": repository})


class InvalidRepositoryError(AcquisitionError):
    """Raised when the pipeline input is not a usable project directory."""

    def __init__(self, repository: str):
        super().__init__(f"Not a project directory: {repository}", repository=repository)


class DependencyInstallError(CyspecError):
    """Raised when installing a cloned project's dependencies fails."""

    def __init__(self, message: str, package_manager: str = "", repo_path: str = ""):
        super().__init__(
            message,
            context={"package_manager": package_manager, "repo_path": repo_path},
        )


# ── Output ─────────────────────────────────────────────────────────

class SaveError(CyspecError):
    """Raised when generated specs cannot be written to the output directory."""

    def __init__(self, message: str, output_dir: str = ""):
        super().__init__(message, context={"output_dir": output_dir})


class ConfigError(CyspecError):
    """Raised when configuration is invalid or missing."""
    pass
