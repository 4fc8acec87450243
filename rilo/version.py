from __future__ import annotations

import importlib.metadata

FALLBACK_VERSION = "0.0.1"


def get_version() -> str:
    """Installed distribution version, or the source tree's version."""
    try:
        return importlib.metadata.version("rilo")
    except importlib.metadata.PackageNotFoundError:
        return FALLBACK_VERSION
