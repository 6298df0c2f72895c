"""Reads and normalizes a project's package.json."""
from __future__ import annotations

import json
import logging
from pathlib import Path

from .models import Manifest, PackageInfo

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"


def _string_map(value: object) -> dict[str, str]:
    """Coerce a manifest section into a name -> string mapping."""
    if not isinstance(value, dict):
        return {}
    return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in value.items()}


def read_manifest(root: Path) -> Manifest:
    """Load package.json from ``root``.

    A missing file yields an empty, not-found manifest. A file that exists but
    cannot be read or parsed yields an empty manifest as well; the failure is
    logged and never raised.
    """
    path = root / MANIFEST_NAME
    if not path.is_file():
        return Manifest()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return Manifest()

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top-level value is not an object", path)
        return Manifest()

    return Manifest(
        found=True,
        dependencies=_string_map(data.get("dependencies")),
        dev_dependencies=_string_map(data.get("devDependencies")),
        scripts=_string_map(data.get("scripts")),
        package=PackageInfo(
            name=data.get("name"),
            version=data.get("version"),
            description=data.get("description"),
            main=data.get("main"),
            author=data.get("author"),
        ),
    )
