"""Keyforge - API key lifecycle service.

``__version__`` is read from the project table of the pyproject.toml shipped
alongside the package, falling back to "unknown" when it is not present
(e.g. an installed wheel without the source tree).
"""

from __future__ import annotations

import tomllib
from pathlib import Path


def _get_version() -> str:
    """Get version from pyproject.toml (single source of truth)."""
    try:
        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return data.get("project", {}).get("version", "unknown")
    except Exception:
        return "unknown"


__version__ = _get_version()
