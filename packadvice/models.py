from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

DEFAULT_NAMESPACE = "minecraft"

# Reserved texture values the game renders as the magenta/black placeholder
MISSING_TEXTURE = "#missing"
_MISSING_ALIASES = {"#missing", "missingno", "minecraft:missingno"}

_KNOWN_EXTS = (".png", ".json", ".mcmeta")

NOTICE = "NOTICE"
WARNING = "WARNING"
ERROR = "ERROR"
SEVERITIES = (ERROR, WARNING, NOTICE)


def normalize_asset_path(raw: str) -> str:
    """
    Canonical "namespace:relative/path" form (no extension, lower case).
    """
    s = raw.strip().replace("\\", "/")
    if ":" in s:
        namespace, rel = s.split(":", 1)
    else:
        namespace, rel = DEFAULT_NAMESPACE, s
    namespace = namespace.strip() or DEFAULT_NAMESPACE
    rel = rel.lstrip("/")
    for ext in _KNOWN_EXTS:
        if rel.lower().endswith(ext):
            rel = rel[: -len(ext)]
            break
    return f"{namespace}:{rel}".lower()


def is_missing_texture(value: str) -> bool:
    return value.strip().lower() in _MISSING_ALIASES


@dataclass(frozen=True, order=True)
class AssetPath:
    value: str  # normalized "namespace:relative/path"

    @classmethod
    def parse(cls, raw: str) -> "AssetPath":
        return cls(normalize_asset_path(raw))

    @classmethod
    def from_parts(cls, namespace: str, relpath: str) -> "AssetPath":
        return cls.parse(f"{namespace}:{relpath}")

    @property
    def namespace(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def relpath(self) -> str:
        return self.value.split(":", 1)[1]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TextureAsset:
    path: AssetPath
    exists_on_disk: bool


@dataclass(frozen=True)
class ModelDocument:
    path: AssetPath
    parent: Optional[AssetPath]
    # texture key -> normalized literal, "#key" redirection or MISSING_TEXTURE
    own_textures: Mapping[str, str] = field(default_factory=dict)
    overrides: Tuple[AssetPath, ...] = ()  # legacy overrides[].model
    source: str = ""  # file the document was read from


@dataclass(frozen=True)
class EffectiveModel:
    path: AssetPath
    resolved_textures: Mapping[str, str]

    def has_missing_texture(self) -> bool:
        return any(v == MISSING_TEXTURE for v in self.resolved_textures.values())


@dataclass(frozen=True)
class LoadIssue:
    kind: str   # ModelParseError | CyclicInheritance | EntryPointParseError
    path: str   # asset path or file the issue belongs to
    message: str


@dataclass(frozen=True)
class PackAdviserStatus:
    path: str
    severity: str  # NOTICE | WARNING | ERROR
    message: str
    code: str = ""  # stable short identifier (e.g. UNUSED_TEXTURE)
