from __future__ import annotations

import json
from pathlib import Path


def _write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def main():
    root = Path("demo_pack/DemoPack")
    assets = root / "assets" / "demo"

    _write_json(root / "pack.mcmeta", {"pack": {"pack_format": 34, "description": "PackAdvice demo"}})

    # Block with a parent chain: crate -> crate_base
    _write_json(assets / "blockstates" / "crate.json", {"variants": {"": {"model": "demo:block/crate"}}})
    _write_json(assets / "models" / "block" / "crate_base.json", {
        "parent": "minecraft:block/cube_all",
        "textures": {"all": "demo:block/crate_side", "particle": "#all"},
    })
    _write_json(assets / "models" / "block" / "crate.json", {
        "parent": "demo:block/crate_base",
        "textures": {"top": "demo:block/crate_top"},
    })

    # Never referenced by a blockstate or item
    _write_json(assets / "models" / "block" / "old_crate.json", {
        "parent": "minecraft:block/cube_all",
        "textures": {"all": "demo:block/old_crate"},
    })

    # Redirection to an undefined key resolves to #missing
    _write_json(assets / "blockstates" / "lamp.json", {"multipart": [{"apply": {"model": "demo:block/lamp"}}]})
    _write_json(assets / "models" / "block" / "lamp.json", {
        "parent": "minecraft:block/cube_column",
        "textures": {"side": "demo:block/lamp_side", "end": "#top"},
    })

    # Legacy item model (pack_format 34 predates item definitions)
    _write_json(assets / "models" / "item" / "crate.json", {"parent": "demo:block/crate"})

    # Broken document
    (assets / "models" / "block" / "broken.json").write_text("{ not json", encoding="utf-8")

    for tex in ("crate_side", "crate_top", "old_crate", "lamp_side", "unused_stone"):
        p = assets / "textures" / "block" / f"{tex}.png"
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"\x89PNG\r\n\x1a\n")

    print(f"Created demo pack at: {root.resolve()}")


if __name__ == "__main__":
    main()
