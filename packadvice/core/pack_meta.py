from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from packadvice.config import PACK_META_FILE
from packadvice.core.errors import MetadataError
from packadvice.core.versions import UNKNOWN_VERSION, minecraft_version


@dataclass(frozen=True)
class PackMeta:
    pack_format: int
    description: Optional[str] = None

    def minecraft_version(self) -> str:
        return minecraft_version(self.pack_format)

    # engine-neutral alias used by the exporters
    engine_version = minecraft_version

    def is_known_format(self) -> bool:
        return self.minecraft_version() != UNKNOWN_VERSION


def _description_text(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    # Text component: {"text": "..."} or a list of components
    if isinstance(raw, dict) and isinstance(raw.get("text"), str):
        return raw["text"]
    return json.dumps(raw, separators=(",", ":"), ensure_ascii=False)


def parse_pack_meta(text: str, source: str = PACK_META_FILE) -> PackMeta:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MetadataError(f"{source} is not valid JSON ({e})", source) from e

    if not isinstance(data, dict):
        raise MetadataError(f"{source}: top level must be an object", source)

    pack = data.get("pack")
    if not isinstance(pack, dict):
        raise MetadataError(f"{source}: missing 'pack' section", source)

    fmt = pack.get("pack_format")
    # bool is an int subclass; true/false are not formats
    if isinstance(fmt, bool) or not isinstance(fmt, int):
        raise MetadataError(f"{source}: 'pack.pack_format' must be an integer", source)

    return PackMeta(pack_format=fmt, description=_description_text(pack.get("description")))


def load_pack_meta(pack_root: str) -> PackMeta:
    path = Path(pack_root) / PACK_META_FILE
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise MetadataError(f"{PACK_META_FILE} not found in pack root", str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise MetadataError(f"Cannot read {PACK_META_FILE} ({e})", str(path)) from e
    return parse_pack_meta(text, source=str(path))
