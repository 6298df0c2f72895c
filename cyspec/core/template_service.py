"""Spec template catalog: built-in templates plus optional user overrides."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml

from cyspec.errors import ConfigError

logger = logging.getLogger("cyspec.core.template")

BUILTIN_TEMPLATES_PATH = Path(__file__).parent.parent / "templates" / "spec_templates.yaml"

DEFAULT_TEMPLATE = "basic"
TEMPLATE_SUFFIX = ".cy.js"

# Pattern tag -> template name. Unlisted patterns use DEFAULT_TEMPLATE.
PATTERN_TEMPLATES: dict[str, str] = {
    "component-testing": "basic",
    "navigation-testing": "navigation",
    "form-testing": "forms",
    "api-testing": "api",
    "user-interactions": "basic",
    "state-changes": "basic",
}


def template_for_pattern(pattern: str) -> str:
    return PATTERN_TEMPLATES.get(pattern, DEFAULT_TEMPLATE)


def load_builtin_templates(path: Path = BUILTIN_TEMPLATES_PATH) -> dict[str, str]:
    """Load the packaged template catalog."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot load spec templates from {path}: {e}", context={"file": str(path)})

    if not isinstance(data, dict) or DEFAULT_TEMPLATE not in data:
        raise ConfigError(
            f"Spec template catalog {path} must define a '{DEFAULT_TEMPLATE}' template",
            context={"file": str(path)},
        )
    return {str(name): str(body) for name, body in data.items()}


class TemplateService:
    """Looks up spec template bodies by name.

    Files named ``<template>.cy.js`` in ``custom_dir`` replace the built-in
    template of the same name.
    """

    def __init__(self, custom_dir: Optional[Path] = None):
        self._templates = load_builtin_templates()
        if custom_dir:
            self._load_overrides(Path(custom_dir))

    def _load_overrides(self, custom_dir: Path) -> None:
        if not custom_dir.is_dir():
            logger.warning("Templates directory %s does not exist, using built-ins", custom_dir)
            return
        for path in sorted(custom_dir.glob(f"*{TEMPLATE_SUFFIX}")):
            name = path.name[: -len(TEMPLATE_SUFFIX)]
            try:
                self._templates[name] = path.read_text(encoding="utf-8")
                logger.info("Template '%s' overridden by %s", name, path)
            except OSError as e:
                logger.warning("Failed to load template %s: %s", path, e)

    def list_templates(self) -> list[str]:
        return sorted(self._templates)

    def get_template(self, name: str) -> str:
        """Body of template ``name``, or the default template if unknown."""
        return self._templates.get(name, self._templates[DEFAULT_TEMPLATE])

    def template_for_pattern(self, pattern: str) -> tuple[str, str]:
        """Return ``(template name, body)`` for a test pattern tag."""
        name = template_for_pattern(pattern)
        if name not in self._templates:
            name = DEFAULT_TEMPLATE
        return name, self._templates[name]
