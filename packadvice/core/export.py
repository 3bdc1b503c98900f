from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from packadvice.config import APP_NAME, APP_VERSION
from packadvice.core.adviser import PackResult
from packadvice.models import PackAdviserStatus


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def build_result_dict(
    result: PackResult,
    profile: str = "",
    statuses: Optional[Iterable[PackAdviserStatus]] = None,
    include_timestamp: bool = True,
) -> Dict[str, Any]:
    """
    Machine-readable analysis result. Lists keep checker order (sorted
    asset paths), so two runs on the same pack differ only in timestamp.
    """
    meta = result.pack.pack_meta
    statuses = result.statuses if statuses is None else statuses

    out: Dict[str, Any] = {
        "tool": APP_NAME,
        "version": APP_VERSION,
        "profile": profile,
        "pack_root": result.pack.root,
        "pack_meta": {
            "pack_format": meta.pack_format,
            "description": meta.description,
            "minecraft_version": meta.minecraft_version(),
        },
        "counts": result.counts(),
        "unreferenced_textures": [str(p) for p in result.unreferenced_textures],
        "unreferenced_models": [str(p) for p in result.unreferenced_models],
        "missing_texture_models": [str(p) for p in result.missing_texture_models],
        "load_issues": [
            {"kind": i.kind, "path": i.path, "message": i.message}
            for i in result.pack.issues
        ],
        "statuses": [
            {
                "severity": s.severity,
                "code": s.code,
                "path": s.path,
                "message": s.message,
            }
            for s in statuses
        ],
    }
    if include_timestamp:
        out["timestamp_utc"] = _utc_now_iso()
    return out


def write_result_json(result_dict: Dict[str, Any], json_path: str) -> str:
    path = Path(json_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(result_dict, f, indent=2, ensure_ascii=False)

    return str(path)
