"""Reference graph: effective texture maps and model reachability.

Models point at their parents by AssetPath key, never by object, so the
catalog stays the single owner of every ModelDocument. A parent that is
not in the catalog (vanilla or builtin/* models) ends the chain.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Sequence, Tuple

from packadvice.core.catalog import AssetCatalog
from packadvice.core.errors import GraphError
from packadvice.models import (
    MISSING_TEXTURE,
    AssetPath,
    EffectiveModel,
    LoadIssue,
    ModelDocument,
    TextureAsset,
)

logger = logging.getLogger(__name__)

CYCLIC_INHERITANCE = "CyclicInheritance"


class CyclicInheritanceError(GraphError):
    def __init__(self, message: str, chain: Sequence[AssetPath], cycle: Sequence[AssetPath] = ()):
        super().__init__(message, str(chain[0]) if chain else "")
        self.chain = tuple(chain)
        self.cycle = tuple(cycle)  # empty when the depth bound was hit


@dataclass(frozen=True)
class PackGraph:
    textures: Dict[AssetPath, TextureAsset] = field(default_factory=dict)
    models: Dict[AssetPath, ModelDocument] = field(default_factory=dict)
    effective: Dict[AssetPath, EffectiveModel] = field(default_factory=dict)
    reachable: FrozenSet[AssetPath] = frozenset()
    excluded: FrozenSet[AssetPath] = frozenset()  # cyclic / too deep
    issues: Tuple[LoadIssue, ...] = ()


def ancestor_chain(
    path: AssetPath,
    models: Mapping[AssetPath, ModelDocument],
    max_depth: int,
) -> List[AssetPath]:
    """
    [path, parent, grandparent, ...] restricted to cataloged models.
    Raises CyclicInheritanceError on a repeated key, or on more than
    max_depth parent links in a chain that does not repeat.
    """
    chain = [path]
    index = {path: 0}
    current = models[path].parent

    while current is not None and current in models:
        if current in index:
            cycle = chain[index[current]:]
            raise CyclicInheritanceError(
                f"Cyclic parent chain: {_format_cycle(cycle)}",
                chain + [current],
                cycle,
            )
        index[current] = len(chain)
        chain.append(current)
        current = models[current].parent

    if len(chain) - 1 > max_depth:
        raise CyclicInheritanceError(
            f"Parent chain deeper than {max_depth} models",
            chain[: max_depth + 1],
        )
    return chain


def _format_cycle(cycle: Sequence[AssetPath]) -> str:
    # Rotate so the smallest path leads; output is stable across entry points
    start = cycle.index(min(cycle))
    ring = list(cycle[start:]) + list(cycle[:start])
    return " -> ".join(str(p) for p in ring + [ring[0]])


def resolve_redirection(value: str, merged: Mapping[str, str]) -> str:
    """
    Follow "#key" values through the merged map. An absent key or a
    redirection loop yields MISSING_TEXTURE.
    """
    seen = set()
    while value.startswith("#") and value != MISSING_TEXTURE:
        key = value[1:]
        if key in seen or key not in merged:
            return MISSING_TEXTURE
        seen.add(key)
        value = merged[key]
    return value


def merge_textures(
    chain: Sequence[AssetPath],
    models: Mapping[AssetPath, ModelDocument],
) -> Dict[str, str]:
    merged: Dict[str, str] = {}
    # Oldest ancestor first, so closer descendants overwrite
    for p in reversed(chain):
        merged.update(models[p].own_textures)
    return {key: resolve_redirection(value, merged) for key, value in merged.items()}


def compute_reachable(
    seeds: Iterable[AssetPath],
    models: Mapping[AssetPath, ModelDocument],
) -> FrozenSet[AssetPath]:
    reachable = set()
    queue = deque(sorted(s for s in set(seeds) if s in models))
    reachable.update(queue)

    while queue:
        doc = models[queue.popleft()]
        edges = list(doc.overrides)
        if doc.parent is not None:
            edges.append(doc.parent)
        for nxt in edges:
            if nxt in models and nxt not in reachable:
                reachable.add(nxt)
                queue.append(nxt)

    return frozenset(reachable)


def build_graph(
    catalog: AssetCatalog,
    seeds: Iterable[AssetPath],
    max_depth: int,
) -> PackGraph:
    models = catalog.models
    effective: Dict[AssetPath, EffectiveModel] = {}
    excluded = set()
    issues: List[LoadIssue] = []

    # cycle members -> (issue message, models whose chain runs into it)
    cycles: Dict[FrozenSet[AssetPath], Tuple[str, List[AssetPath]]] = {}

    for path in models:
        try:
            chain = ancestor_chain(path, models, max_depth)
        except CyclicInheritanceError as e:
            excluded.add(path)
            if e.cycle:
                key = frozenset(e.cycle)
                cycles.setdefault(key, (str(e), []))[1].append(path)
            else:
                logger.warning("%s: %s", path, e)
                issues.append(LoadIssue(kind=CYCLIC_INHERITANCE, path=str(path), message=str(e)))
            continue

        effective[path] = EffectiveModel(path=path, resolved_textures=merge_textures(chain, models))

    for members, (message, affected) in cycles.items():
        dependents = len([p for p in affected if p not in members])
        if dependents:
            message += f" (+{dependents} model(s) inheriting from it)"
        subject = str(min(members))
        logger.warning("%s: %s", subject, message)
        issues.append(LoadIssue(kind=CYCLIC_INHERITANCE, path=subject, message=message))

    reachable = compute_reachable(seeds, models)
    logger.debug(
        "Graph built: %d effective model(s), %d excluded, %d reachable",
        len(effective), len(excluded), len(reachable),
    )

    return PackGraph(
        textures=catalog.textures,
        models=models,
        effective=effective,
        reachable=reachable,
        excluded=frozenset(excluded),
        issues=tuple(sorted(issues, key=lambda i: i.path)),
    )
