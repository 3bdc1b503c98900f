from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from packadvice.config import (
    MAX_PARENT_DEPTH_DEFAULT,
    READ_WORKERS_DEFAULT,
    profile_dir,
)

ENTRY_POINT_KINDS = ("blockstates", "items", "legacy_items")

# Texture folders the game reads directly instead of through block/item models
NON_MODEL_TEXTURE_PREFIXES = (
    "colormap/",
    "effect/",
    "entity/",
    "environment/",
    "font/",
    "gui/",
    "map/",
    "misc/",
    "mob_effect/",
    "models/armor/",
    "painting/",
    "particle/",
    "trims/",
)


@dataclass(frozen=True)
class AuditProfile:
    name: str
    # relpath prefixes (without namespace) kept out of the texture catalog
    ignored_texture_prefixes: Tuple[str, ...] = NON_MODEL_TEXTURE_PREFIXES
    entry_points: Tuple[str, ...] = ENTRY_POINT_KINDS
    max_parent_depth: int = MAX_PARENT_DEPTH_DEFAULT
    read_workers: int = READ_WORKERS_DEFAULT
    extra: Dict[str, Any] = field(default_factory=dict)

    def ignores_texture(self, relpath: str) -> bool:
        rel = relpath.lower()
        return any(rel.startswith(p) for p in self.ignored_texture_prefixes)


def default_profiles() -> Dict[str, AuditProfile]:
    return {
        "Default": AuditProfile(name="Default"),
        "Strict": AuditProfile(name="Strict", ignored_texture_prefixes=()),
        "Legacy": AuditProfile(
            name="Legacy",
            entry_points=("blockstates", "legacy_items"),
        ),
    }


def profile_path(profile_name: str, base_dir: Optional[Path] = None) -> Path:
    safe = "".join(c for c in profile_name if c.isalnum() or c in ("_", "-", " "))
    return (base_dir or profile_dir()) / f"{safe}.json"


def to_json_dict(profile: AuditProfile) -> Dict[str, Any]:
    d = asdict(profile)
    d["ignored_texture_prefixes"] = sorted(profile.ignored_texture_prefixes)
    d["entry_points"] = list(profile.entry_points)
    return d


def from_json_dict(d: Dict[str, Any]) -> AuditProfile:
    prefixes = [
        str(x).strip().replace("\\", "/").lstrip("/")
        for x in (d.get("ignored_texture_prefixes") or [])
        if str(x).strip()
    ]

    kinds: List[str] = []
    for x in d.get("entry_points", ENTRY_POINT_KINDS) or []:
        k = str(x).strip().lower()
        if k not in ENTRY_POINT_KINDS:
            raise ValueError(f"Unknown entry point kind: {x!r}")
        if k not in kinds:
            kinds.append(k)

    depth = int(d.get("max_parent_depth", MAX_PARENT_DEPTH_DEFAULT))
    workers = int(d.get("read_workers", READ_WORKERS_DEFAULT))
    if depth < 1:
        raise ValueError("max_parent_depth must be >= 1")
    if workers < 1:
        raise ValueError("read_workers must be >= 1")

    return AuditProfile(
        name=str(d.get("name") or "Custom"),
        ignored_texture_prefixes=tuple(prefixes),
        entry_points=tuple(kinds),
        max_parent_depth=depth,
        read_workers=workers,
        extra=dict(d.get("extra") or {}),
    )


def ensure_default_profiles_on_disk(base_dir: Optional[Path] = None) -> None:
    pdir = base_dir or profile_dir()
    pdir.mkdir(parents=True, exist_ok=True)

    for name, prof in default_profiles().items():
        path = profile_path(name, pdir)
        if not path.exists():
            path.write_text(json.dumps(to_json_dict(prof), indent=2), encoding="utf-8")


def load_profile_file(path: str) -> AuditProfile:
    d = json.loads(Path(path).read_text(encoding="utf-8"))
    return from_json_dict(d)


def load_profile(name: str, base_dir: Optional[Path] = None) -> AuditProfile:
    """
    Profile from disk, falling back to the built-in profile of that name.
    """
    path = profile_path(name, base_dir)
    if path.exists():
        return load_profile_file(str(path))
    builtin = default_profiles()
    if name in builtin:
        return builtin[name]
    raise FileNotFoundError(f"No profile named {name!r} ({path})")


def save_profile(profile: AuditProfile, base_dir: Optional[Path] = None) -> Path:
    pdir = base_dir or profile_dir()
    pdir.mkdir(parents=True, exist_ok=True)
    path = profile_path(profile.name, pdir)
    path.write_text(json.dumps(to_json_dict(profile), indent=2), encoding="utf-8")
    return path


def list_profile_names(base_dir: Optional[Path] = None) -> List[str]:
    """Built-in profile names first, then saved profiles in name order."""
    names = list(default_profiles().keys())
    pdir = base_dir or profile_dir()
    if pdir.is_dir():
        for p in sorted(pdir.glob("*.json"), key=lambda p: p.stem.lower()):
            if p.stem not in names:
                names.append(p.stem)
    return names
