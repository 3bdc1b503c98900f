from __future__ import annotations

import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from packadvice.config import ASSETS_DIR
from packadvice.core.errors import PathNotFoundError
from packadvice.core.profiles import AuditProfile
from packadvice.core.scanner import list_namespaces, scan_folder
from packadvice.models import (
    MISSING_TEXTURE,
    AssetPath,
    LoadIssue,
    ModelDocument,
    TextureAsset,
    is_missing_texture,
    normalize_asset_path,
)

logger = logging.getLogger(__name__)

MODEL_PARSE_ERROR = "ModelParseError"


def _texture_value(key: str, raw: Any) -> str:
    # 1.21.5+ allows {"sprite": "...", "force_translucent": true}
    if isinstance(raw, dict):
        raw = raw.get("sprite")
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"texture '{key}' must be a string or a {{\"sprite\": ...}} object")

    value = raw.strip()
    if is_missing_texture(value):
        return MISSING_TEXTURE
    if value.startswith("#"):
        return "#" + value[1:].strip()
    return normalize_asset_path(value)


def parse_model_document(path: AssetPath, data: Any, source: str = "") -> ModelDocument:
    """
    Convert a decoded model JSON value into a ModelDocument.
    Raises ValueError on any unexpected shape.
    """
    if not isinstance(data, dict):
        raise ValueError("top level must be an object")

    parent: Optional[AssetPath] = None
    raw_parent = data.get("parent")
    if raw_parent is not None:
        if not isinstance(raw_parent, str) or not raw_parent.strip():
            raise ValueError("'parent' must be a non-empty string")
        parent = AssetPath.parse(raw_parent)

    raw_textures = data.get("textures")
    if raw_textures is None:
        raw_textures = {}
    if not isinstance(raw_textures, dict):
        raise ValueError("'textures' must be an object")
    own: Dict[str, str] = {}
    for key, raw in raw_textures.items():
        own[str(key)] = _texture_value(str(key), raw)

    overrides: List[AssetPath] = []
    raw_overrides = data.get("overrides")
    if raw_overrides is not None:
        if not isinstance(raw_overrides, list):
            raise ValueError("'overrides' must be a list")
        for entry in raw_overrides:
            if not isinstance(entry, dict) or not isinstance(entry.get("model"), str):
                raise ValueError("each override needs a 'model' string")
            overrides.append(AssetPath.parse(entry["model"]))

    return ModelDocument(
        path=path,
        parent=parent,
        own_textures=own,
        overrides=tuple(overrides),
        source=source,
    )


def _load_model_file(job: Tuple[AssetPath, str]) -> Union[ModelDocument, LoadIssue]:
    path, source = job
    try:
        with open(source, "r", encoding="utf-8-sig") as f:
            data = json.load(f)
        return parse_model_document(path, data, source)
    except (OSError, ValueError, RecursionError) as e:
        # JSONDecodeError and UnicodeDecodeError are ValueErrors; deep nesting raises RecursionError
        return LoadIssue(kind=MODEL_PARSE_ERROR, path=str(path), message=f"Model failed to load: {e}")


@dataclass(frozen=True)
class AssetCatalog:
    root: str
    namespaces: Tuple[str, ...] = ()
    textures: Dict[AssetPath, TextureAsset] = field(default_factory=dict)
    models: Dict[AssetPath, ModelDocument] = field(default_factory=dict)
    issues: Tuple[LoadIssue, ...] = ()

    @classmethod
    def load(cls, pack_root: str, profile: AuditProfile) -> "AssetCatalog":
        root_path = Path(pack_root)
        if not root_path.is_dir() or not os.access(root_path, os.R_OK | os.X_OK):
            raise PathNotFoundError(f"Pack root is not a readable directory: {pack_root}", pack_root)

        assets_root = root_path / ASSETS_DIR
        namespaces = list_namespaces(str(assets_root))

        textures: Dict[AssetPath, TextureAsset] = {}
        jobs: List[Tuple[AssetPath, str]] = []
        skipped = 0

        for ns in namespaces:
            for f in scan_folder(str(assets_root / ns / "textures"), extensions={"png"}):
                if profile.ignores_texture(f.relpath):
                    skipped += 1
                    continue
                tp = AssetPath.from_parts(ns, f.relpath)
                textures.setdefault(tp, TextureAsset(path=tp, exists_on_disk=True))

            for f in scan_folder(str(assets_root / ns / "models"), extensions={"json"}):
                jobs.append((AssetPath.from_parts(ns, f.relpath), f.path))

        logger.debug(
            "Cataloged %d texture(s) (%d ignored by profile), reading %d model file(s) with %d worker(s)",
            len(textures), skipped, len(jobs), profile.read_workers,
        )

        with ThreadPoolExecutor(max_workers=max(1, profile.read_workers)) as pool:
            loaded = list(pool.map(_load_model_file, jobs))

        models: Dict[AssetPath, ModelDocument] = {}
        issues: List[LoadIssue] = []
        for item in loaded:
            if isinstance(item, LoadIssue):
                logger.warning("%s: %s", item.path, item.message)
                issues.append(item)
            elif item.path in models:
                # Case-only duplicates collapse to one asset path
                logger.debug("Duplicate model path %s (%s ignored)", item.path, item.source)
            else:
                models[item.path] = item

        return cls(
            root=str(root_path),
            namespaces=tuple(namespaces),
            textures=dict(sorted(textures.items())),
            models=dict(sorted(models.items())),
            issues=tuple(sorted(issues, key=lambda i: i.path)),
        )
