"""Layered configuration service for cyspec.

Priority (highest to lowest):
1. Environment variables (CYSPEC_*, PORT)
2. Project config (.cyspec.toml in current directory)
3. Global config (~/.config/cyspec/config.toml)
4. Built-in defaults
"""
from __future__ import annotations

import copy
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomli_w

from cyspec.errors import ConfigError

logger = logging.getLogger("cyspec.config")

DEMO_REPOSITORY = "https://github.com/cypress-io/cypress-example-kitchensink"

# Default configuration values
DEFAULTS: dict[str, Any] = {
    "paths": {
        "temp_dir": "temp-repos",
        "output_dir": "generated-specs",
    },
    "acquisition": {
        "install_dependencies": True,
        "install_timeout": 120,
        "demo_repository": DEMO_REPOSITORY,
    },
    "generator": {
        "templates_dir": "",
    },
    "server": {
        "host": "0.0.0.0",
        "port": 3000,
    },
}

# Mapping of env vars to config paths. Later entries win.
ENV_VAR_MAP = {
    "CYSPEC_TEMP_DIR": "paths.temp_dir",
    "CYSPEC_OUTPUT_DIR": "paths.output_dir",
    "CYSPEC_INSTALL_DEPS": "acquisition.install_dependencies",
    "CYSPEC_INSTALL_TIMEOUT": "acquisition.install_timeout",
    "CYSPEC_DEMO_REPO": "acquisition.demo_repository",
    "CYSPEC_TEMPLATES_DIR": "generator.templates_dir",
    "CYSPEC_HOST": "server.host",
    "PORT": "server.port",
    "CYSPEC_PORT": "server.port",
}


def _global_config_dir() -> Path:
    """Return the global config directory: ~/.config/cyspec/."""
    return Path.home() / ".config" / "cyspec"


def _global_config_path() -> Path:
    return _global_config_dir() / "config.toml"


def _project_config_path() -> Path:
    """Return the project config file path (.cyspec.toml in cwd)."""
    return Path.cwd() / ".cyspec.toml"


def _read_toml(path: Path) -> dict:
    """Read a TOML file, returning empty dict if missing or unreadable."""
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}


def _write_toml(data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base (override wins)."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _get_nested(data: dict, dotted_key: str, default: Any = None) -> Any:
    """Get a value from a nested dict using dotted key notation."""
    current = data
    for key in dotted_key.split("."):
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def _set_nested(data: dict, dotted_key: str, value: Any) -> None:
    """Set a value in a nested dict using dotted key notation."""
    keys = dotted_key.split(".")
    current = data
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def parse_value(raw: str) -> Any:
    """Convert a string from the environment or CLI to bool/int/str."""
    if raw.lower() in ("true", "1", "yes"):
        return True
    if raw.lower() in ("false", "0", "no"):
        return False
    try:
        return int(raw)
    except ValueError:
        return raw


def coerce_value(dotted_key: str, raw: str) -> Any:
    """Parse ``raw`` for keys whose default is a bool or an int; other keys stay strings."""
    default = _get_nested(DEFAULTS, dotted_key)
    if isinstance(default, bool):
        return parse_value(raw)
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            return raw
    return raw


@dataclass(frozen=True)
class PipelineConfig:
    """Paths and limits one pipeline controller runs with."""

    temp_dir: Path
    output_dir: Path
    install_dependencies: bool = True
    install_timeout: int = 120
    templates_dir: Optional[Path] = None


@dataclass
class ResolvedConfig:
    """Fully resolved configuration after merging all layers."""
    data: dict = field(default_factory=dict)
    global_config_path: Optional[Path] = None
    project_config_path: Optional[Path] = None

    def get(self, dotted_key: str, default: Any = None) -> Any:
        return _get_nested(self.data, dotted_key, default)


class ConfigService:
    """Layered configuration service.

    Resolves config from multiple sources with clear precedence:
    1. Environment variables (CYSPEC_*, PORT)
    2. Project config (.cyspec.toml)
    3. Global config (~/.config/cyspec/config.toml)
    4. Built-in defaults
    """

    def __init__(self):
        self._resolved: Optional[ResolvedConfig] = None

    def resolve(self, force: bool = False) -> ResolvedConfig:
        """Resolve the full config from all layers."""
        if self._resolved is not None and not force:
            return self._resolved

        merged = copy.deepcopy(DEFAULTS)

        global_path = _global_config_path()
        global_data = _read_toml(global_path)
        if global_data:
            merged = _deep_merge(merged, global_data)
            logger.debug("Loaded global config from %s", global_path)

        project_path = _project_config_path()
        project_data = _read_toml(project_path)
        if project_data:
            merged = _deep_merge(merged, project_data)
            logger.debug("Loaded project config from %s", project_path)

        for env_var, config_path in ENV_VAR_MAP.items():
            env_value = os.environ.get(env_var)
            if env_value is not None:
                _set_nested(merged, config_path, coerce_value(config_path, env_value))

        self._resolved = ResolvedConfig(
            data=merged,
            global_config_path=global_path if global_path.is_file() else None,
            project_config_path=project_path if project_path.is_file() else None,
        )
        return self._resolved

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Get a resolved config value."""
        return self.resolve().get(dotted_key, default)

    def _get_int(self, dotted_key: str) -> int:
        value = self.get(dotted_key)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{dotted_key} must be an integer, got {value!r}")

    def get_temp_dir(self) -> Path:
        return Path(str(self.get("paths.temp_dir"))).expanduser().resolve()

    def get_output_dir(self) -> Path:
        return Path(str(self.get("paths.output_dir"))).expanduser().resolve()

    def get_templates_dir(self) -> Optional[Path]:
        configured = self.get("generator.templates_dir", "")
        return Path(str(configured)).expanduser() if configured else None

    def get_server_address(self) -> tuple[str, int]:
        return str(self.get("server.host")), self._get_int("server.port")

    def get_demo_repository(self) -> str:
        return str(self.get("acquisition.demo_repository", DEMO_REPOSITORY))

    def pipeline_config(self) -> PipelineConfig:
        """Snapshot the settings a pipeline controller needs."""
        return PipelineConfig(
            temp_dir=self.get_temp_dir(),
            output_dir=self.get_output_dir(),
            install_dependencies=bool(self.get("acquisition.install_dependencies", True)),
            install_timeout=self._get_int("acquisition.install_timeout"),
            templates_dir=self.get_templates_dir(),
        )

    def set_global(self, dotted_key: str, value: Any) -> None:
        """Set a value in the global config file."""
        path = _global_config_path()
        data = _read_toml(path)
        _set_nested(data, dotted_key, value)
        _write_toml(data, path)
        self._resolved = None
        logger.info("Set %s = %s in %s", dotted_key, value, path)

    def init_project_config(self) -> Path:
        """Create a .cyspec.toml in the current directory with defaults."""
        path = _project_config_path()
        if path.exists():
            raise ConfigError(f"Project config already exists: {path}", context={"file": str(path)})

        data = {
            "paths": copy.deepcopy(DEFAULTS["paths"]),
            "acquisition": {"install_dependencies": True},
        }
        _write_toml(data, path)
        logger.info("Created project config: %s", path)
        return path

    def show(self) -> dict:
        """Return the resolved config and where it came from."""
        resolved = self.resolve(force=True)
        return {
            "resolved": resolved.data,
            "sources": {
                "global_config": str(resolved.global_config_path) if resolved.global_config_path else None,
                "project_config": str(resolved.project_config_path) if resolved.project_config_path else None,
            },
        }

    def config_paths(self) -> dict[str, str]:
        """Return config file and working directory locations with existence status."""
        global_path = _global_config_path()
        project_path = _project_config_path()
        temp_dir = self.get_temp_dir()
        output_dir = self.get_output_dir()
        return {
            "global_config": f"{global_path} ({'exists' if global_path.is_file() else 'not found'})",
            "project_config": f"{project_path} ({'exists' if project_path.is_file() else 'not found'})",
            "temp_dir": f"{temp_dir} ({'exists' if temp_dir.exists() else 'not found'})",
            "output_dir": f"{output_dir} ({'exists' if output_dir.exists() else 'not found'})",
        }


# Module-level singleton
_config_service: Optional[ConfigService] = None


def get_config_service() -> ConfigService:
    """Get or create the global ConfigService instance."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService()
    return _config_service


def reset_config_service() -> None:
    """Reset the global config service (useful for testing)."""
    global _config_service
    _config_service = None
