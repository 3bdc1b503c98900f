"""Entry-point discovery.

An entry point is a pack declaration that names a model the game loads on
its own: block state definitions, item model definitions and, for packs
older than item definitions, the item models themselves. Each convention is
a provider; the reachability pass only consumes the seeds they return.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Type

from packadvice.config import ASSETS_DIR
from packadvice.core.catalog import AssetCatalog
from packadvice.core.pack_meta import PackMeta
from packadvice.core.scanner import scan_folder
from packadvice.core.versions import ITEM_DEFINITIONS_FORMAT
from packadvice.models import AssetPath, LoadIssue

logger = logging.getLogger(__name__)

ENTRY_POINT_PARSE_ERROR = "EntryPointParseError"


@dataclass(frozen=True)
class EntryPointContext:
    pack_root: str
    pack_meta: PackMeta
    catalog: AssetCatalog


@dataclass(frozen=True)
class EntryPoints:
    seeds: Tuple[AssetPath, ...]
    issues: Tuple[LoadIssue, ...] = ()


def _variant_models(value: Any) -> Iterable[str]:
    # A variant / multipart "apply" is one model object or a weighted list
    options = value if isinstance(value, list) else [value]
    for option in options:
        if isinstance(option, dict) and isinstance(option.get("model"), str):
            yield option["model"]


def blockstate_model_refs(data: Any) -> List[str]:
    if not isinstance(data, dict):
        raise ValueError("top level must be an object")
    refs: List[str] = []

    variants = data.get("variants")
    if variants is not None:
        if not isinstance(variants, dict):
            raise ValueError("'variants' must be an object")
        for value in variants.values():
            refs.extend(_variant_models(value))

    multipart = data.get("multipart")
    if multipart is not None:
        if not isinstance(multipart, list):
            raise ValueError("'multipart' must be a list")
        for part in multipart:
            if isinstance(part, dict) and "apply" in part:
                refs.extend(_variant_models(part["apply"]))

    return refs


def _short_type(node: Dict[str, Any]) -> str:
    t = node.get("type")
    return t.split(":", 1)[-1] if isinstance(t, str) else ""


def item_model_refs(data: Any) -> List[str]:
    """
    Collect model references from an item model definition: every
    "model" node's model and every "special" node's base, at any depth
    (composite, condition, select, range_dispatch and fallback nodes nest).
    """
    if not isinstance(data, dict):
        raise ValueError("top level must be an object")
    refs: List[str] = []

    def walk(node: Any) -> None:
        if isinstance(node, dict):
            kind = _short_type(node)
            if kind == "model" and isinstance(node.get("model"), str):
                refs.append(node["model"])
            elif kind == "special" and isinstance(node.get("base"), str):
                refs.append(node["base"])
            for v in node.values():
                if isinstance(v, (dict, list)):
                    walk(v)
        elif isinstance(node, list):
            for v in node:
                walk(v)

    walk(data.get("model"))
    return refs


class EntryPointProvider:
    name: str = ""

    def discover(self, context: EntryPointContext) -> EntryPoints:
        raise NotImplementedError


class _DefinitionFileProvider(EntryPointProvider):
    folder: str = ""

    def extract(self, data: Any) -> List[str]:
        raise NotImplementedError

    def discover(self, context: EntryPointContext) -> EntryPoints:
        assets_root = Path(context.pack_root) / ASSETS_DIR
        seeds: List[AssetPath] = []
        issues: List[LoadIssue] = []

        for ns in context.catalog.namespaces:
            for f in scan_folder(str(assets_root / ns / self.folder), extensions={"json"}):
                try:
                    with open(f.path, "r", encoding="utf-8-sig") as fh:
                        refs = self.extract(json.load(fh))
                except (OSError, ValueError, RecursionError) as e:
                    subject = f"{ns}:{self.folder}/{f.relpath}"
                    logger.warning("%s: %s", subject, e)
                    issues.append(
                        LoadIssue(
                            kind=ENTRY_POINT_PARSE_ERROR,
                            path=subject,
                            message=f"Definition failed to load: {e}",
                        )
                    )
                    continue
                seeds.extend(AssetPath.parse(r) for r in refs)

        return EntryPoints(seeds=tuple(seeds), issues=tuple(issues))


class BlockstateEntryPoints(_DefinitionFileProvider):
    name = "blockstates"
    folder = "blockstates"

    def extract(self, data: Any) -> List[str]:
        return blockstate_model_refs(data)


class ItemDefinitionEntryPoints(_DefinitionFileProvider):
    name = "items"
    folder = "items"

    def extract(self, data: Any) -> List[str]:
        return item_model_refs(data)


class LegacyItemModelEntryPoints(EntryPointProvider):
    """Before item definitions, every models/item/* file backed an item id."""

    name = "legacy_items"

    def discover(self, context: EntryPointContext) -> EntryPoints:
        if context.pack_meta.pack_format >= ITEM_DEFINITIONS_FORMAT:
            return EntryPoints(seeds=())
        seeds = [p for p in context.catalog.models if p.relpath.startswith("item/")]
        return EntryPoints(seeds=tuple(seeds))


PROVIDERS: Dict[str, Type[EntryPointProvider]] = {
    BlockstateEntryPoints.name: BlockstateEntryPoints,
    ItemDefinitionEntryPoints.name: ItemDefinitionEntryPoints,
    LegacyItemModelEntryPoints.name: LegacyItemModelEntryPoints,
}


def providers_for(kinds: Iterable[str]) -> List[EntryPointProvider]:
    out: List[EntryPointProvider] = []
    for kind in kinds:
        if kind not in PROVIDERS:
            raise ValueError(f"Unknown entry point kind: {kind!r}")
        out.append(PROVIDERS[kind]())
    return out


def discover_entry_points(
    context: EntryPointContext,
    providers: Iterable[EntryPointProvider],
) -> EntryPoints:
    seeds: List[AssetPath] = []
    issues: List[LoadIssue] = []
    for provider in providers:
        found = provider.discover(context)
        logger.debug("Entry points from %s: %d", provider.name, len(found.seeds))
        seeds.extend(found.seeds)
        issues.extend(found.issues)
    return EntryPoints(seeds=tuple(sorted(set(seeds))), issues=tuple(issues))
