from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from packadvice.core.catalog import AssetCatalog
from packadvice.core.entry_points import (
    EntryPointContext,
    EntryPoints,
    discover_entry_points,
    providers_for,
)
from packadvice.core.graph import PackGraph, build_graph
from packadvice.core.pack_meta import PackMeta, load_pack_meta
from packadvice.core.profiles import AuditProfile, default_profiles
from packadvice.models import LoadIssue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pack:
    root: str
    pack_meta: PackMeta
    catalog: AssetCatalog
    entry_points: EntryPoints
    graph: PackGraph

    @property
    def issues(self) -> Tuple[LoadIssue, ...]:
        # catalog parse errors, entry point errors, then graph errors
        return self.catalog.issues + self.entry_points.issues + self.graph.issues

    @classmethod
    def load(
        cls,
        root: str,
        profile: Optional[AuditProfile] = None,
        on_phase: Optional[Callable[[str], None]] = None,
    ) -> "Pack":
        """
        Load metadata, catalog and graph. on_phase is called with
        "metadata", "catalog" and "graph" before each step.
        """
        profile = profile or default_profiles()["Default"]

        def _phase(name: str) -> None:
            if on_phase:
                on_phase(name)

        _phase("metadata")
        pack_meta = load_pack_meta(root)

        _phase("catalog")
        catalog = AssetCatalog.load(root, profile)

        _phase("graph")
        context = EntryPointContext(pack_root=root, pack_meta=pack_meta, catalog=catalog)
        entry_points = discover_entry_points(context, providers_for(profile.entry_points))
        graph = build_graph(catalog, entry_points.seeds, profile.max_parent_depth)

        logger.info(
            "Loaded pack %s: %d texture(s), %d model(s), %d entry point(s)",
            root, len(catalog.textures), len(catalog.models), len(entry_points.seeds),
        )
        return cls(
            root=root,
            pack_meta=pack_meta,
            catalog=catalog,
            entry_points=entry_points,
            graph=graph,
        )
