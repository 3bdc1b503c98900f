from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "PackAdvice"
APP_VERSION = "0.4.0"

PACK_META_FILE = "pack.mcmeta"
ASSETS_DIR = "assets"

# Guard for parent chains; vanilla chains are never deeper than a handful
MAX_PARENT_DEPTH_DEFAULT = 64
READ_WORKERS_DEFAULT = 8

DEFAULT_PROFILE = "Default"


def profile_dir() -> Path:
    override = os.environ.get("PACKADVICE_PROFILE_DIR", "").strip()
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / ".packadvice" / "profiles"
