from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Set


@dataclass(frozen=True)
class ScanFile:
    path: str           # full path
    relpath: str        # relative to scan root, "/" separated
    ext: str            # normalized (lower, no dot) or ""


def _normalize_ext(p: Path) -> str:
    # suffix includes dot; normalize to lower without dot. "" means no extension
    return p.suffix.lower().lstrip(".")


def scan_folder(
    root: str,
    extensions: Optional[Set[str]] = None,
    ignore_hidden: bool = True,
    follow_symlinks: bool = False,
) -> List[ScanFile]:
    """
    Recursively list files under root, optionally filtered by extension.
    A missing root yields an empty list (packs may omit any asset folder).
    Output is sorted by relpath.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        return []

    files: List[ScanFile] = []

    for dirpath, dirnames, filenames in os.walk(root_path, followlinks=follow_symlinks):
        if ignore_hidden:
            # Filter dirnames in-place so os.walk doesn't descend
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]

        for fn in filenames:
            if ignore_hidden and fn.startswith("."):
                continue

            full = Path(dirpath) / fn
            ext = _normalize_ext(full)
            if extensions is not None and ext not in extensions:
                continue

            rel = str(full.relative_to(root_path)).replace("\\", "/")
            files.append(ScanFile(path=str(full), relpath=rel, ext=ext))

    files.sort(key=lambda f: f.relpath)
    return files


def list_namespaces(assets_root: str) -> List[str]:
    root_path = Path(assets_root)
    if not root_path.is_dir():
        return []
    return sorted(
        p.name for p in root_path.iterdir()
        if p.is_dir() and not p.name.startswith(".")
    )
