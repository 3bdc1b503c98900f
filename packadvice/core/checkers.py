from __future__ import annotations

from typing import TYPE_CHECKING, List

from packadvice.models import MISSING_TEXTURE, AssetPath

if TYPE_CHECKING:
    from packadvice.core.pack import Pack


class UnreferencedTextureChecker:
    """Catalog textures that no effective model resolves to."""

    def __init__(self, pack: "Pack"):
        used = set()
        for model in pack.graph.effective.values():
            for value in model.resolved_textures.values():
                if value != MISSING_TEXTURE and not value.startswith("#"):
                    used.add(value)
        self.textures: List[AssetPath] = sorted(
            p for p in pack.graph.textures if p.value not in used
        )


class UnreferencedModelChecker:
    """Catalog models not reachable from any entry point."""

    def __init__(self, pack: "Pack"):
        graph = pack.graph
        # Excluded (cyclic) models already carry their own load issue
        self.models: List[AssetPath] = sorted(
            p for p in graph.models
            if p not in graph.reachable and p not in graph.excluded
        )


class MissingTextureChecker:
    """Models whose resolved textures still contain the missing placeholder."""

    def __init__(self, pack: "Pack"):
        self.models: List[AssetPath] = sorted(
            p for p, model in pack.graph.effective.items() if model.has_missing_texture()
        )
