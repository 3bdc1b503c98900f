from __future__ import annotations

import logging
import queue
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from packadvice.core.checkers import (
    MissingTextureChecker,
    UnreferencedModelChecker,
    UnreferencedTextureChecker,
)
from packadvice.core.errors import (
    AnalysisCancelledError,
    PackAdviserError,
    PathNotFoundError,
)
from packadvice.core.pack import Pack
from packadvice.core.profiles import AuditProfile, default_profiles
from packadvice.models import (
    ERROR,
    NOTICE,
    WARNING,
    AssetPath,
    PackAdviserStatus,
)

logger = logging.getLogger(__name__)

StatusCallback = Callable[[PackAdviserStatus], None]


class AnalysisState(Enum):
    IDLE = auto()
    VALIDATING_PATH = auto()
    LOADING_METADATA = auto()
    LOADING_CATALOG = auto()
    BUILDING_GRAPH = auto()
    CHECKING_TEXTURES = auto()
    CHECKING_MODELS = auto()
    CHECKING_MISSING = auto()
    DONE = auto()
    FAILED = auto()


_LOAD_PHASES = {
    "metadata": AnalysisState.LOADING_METADATA,
    "catalog": AnalysisState.LOADING_CATALOG,
    "graph": AnalysisState.BUILDING_GRAPH,
}


@dataclass(frozen=True)
class PackOptions:
    path: str  # pack directory
    profile: AuditProfile = field(default_factory=lambda: default_profiles()["Default"])


@dataclass(frozen=True)
class PackResult:
    pack: Pack
    unreferenced_texture_checker: UnreferencedTextureChecker
    unreferenced_model_checker: UnreferencedModelChecker
    missing_texture_checker: MissingTextureChecker
    statuses: Tuple[PackAdviserStatus, ...] = ()

    @property
    def unreferenced_textures(self) -> List[AssetPath]:
        return self.unreferenced_texture_checker.textures

    @property
    def unreferenced_models(self) -> List[AssetPath]:
        return self.unreferenced_model_checker.models

    @property
    def missing_texture_models(self) -> List[AssetPath]:
        return self.missing_texture_checker.models

    def counts(self) -> dict:
        return {
            "unreferenced_textures": len(self.unreferenced_textures),
            "unreferenced_models": len(self.unreferenced_models),
            "missing_texture_models": len(self.missing_texture_models),
            "load_issues": len(self.pack.issues),
        }


class QueueStatusSink:
    """
    Status callback that hands records to a queue consumer without blocking.
    A full queue drops the record.
    """

    def __init__(self, q: "queue.Queue[PackAdviserStatus]"):
        self.queue = q
        self.dropped = 0

    def __call__(self, status: PackAdviserStatus) -> None:
        try:
            self.queue.put_nowait(status)
        except queue.Full:
            self.dropped += 1
            logger.debug("Status queue full; dropped status for %s", status.path)


class PackAdviser:
    def __init__(self, on_state: Optional[Callable[[AnalysisState], None]] = None):
        self.state = AnalysisState.IDLE
        self.on_state = on_state

    def _enter(self, state: AnalysisState, is_cancelled: Optional[Callable[[], bool]]) -> None:
        if is_cancelled and is_cancelled():
            raise AnalysisCancelledError(f"Analysis cancelled before {state.name.lower()}")
        logger.debug("state %s -> %s", self.state.name, state.name)
        self.state = state
        if self.on_state:
            self.on_state(state)

    def run(
        self,
        options: PackOptions,
        status_cb: Optional[StatusCallback] = None,
        is_cancelled: Optional[Callable[[], bool]] = None,
    ) -> PackResult:
        """
        Analyze one pack. Fatal failures raise PackAdviserError (its phase
        names the failing step); everything else is streamed to status_cb
        and collected on the result.
        """
        statuses: List[PackAdviserStatus] = []

        def emit(path: str, severity: str, message: str, code: str) -> None:
            status = PackAdviserStatus(path=path, severity=severity, message=message, code=code)
            statuses.append(status)
            if status_cb is None:
                return
            try:
                status_cb(status)
            except Exception as e:
                # Consumer went away; the analysis itself is unaffected
                logger.warning("Status consumer failed (%s); continuing", e)

        self.state = AnalysisState.IDLE
        root = options.path

        try:
            self._enter(AnalysisState.VALIDATING_PATH, is_cancelled)
            if not Path(root).is_dir():
                raise PathNotFoundError(f"Pack directory not found: {root}", root)

            pack = Pack.load(
                root,
                options.profile,
                on_phase=lambda name: self._enter(_LOAD_PHASES[name], is_cancelled),
            )

            meta = pack.pack_meta
            emit(
                root,
                NOTICE,
                f"pack_format: {meta.pack_format} ({meta.minecraft_version()})",
                "PACK_FORMAT",
            )
            if not meta.is_known_format():
                emit(
                    root,
                    WARNING,
                    f"Unknown pack_format {meta.pack_format}; analysis continues without a version",
                    "PACK_FORMAT_UNKNOWN",
                )

            for issue in pack.issues:
                emit(issue.path, ERROR, f"{issue.kind}: {issue.message}", issue.kind)

            self._enter(AnalysisState.CHECKING_TEXTURES, is_cancelled)
            unreferenced_texture_checker = UnreferencedTextureChecker(pack)
            for texture in unreferenced_texture_checker.textures:
                emit(str(texture), WARNING, "Unused texture in model", "UNUSED_TEXTURE")

            self._enter(AnalysisState.CHECKING_MODELS, is_cancelled)
            unreferenced_model_checker = UnreferencedModelChecker(pack)
            for model in unreferenced_model_checker.models:
                emit(str(model), WARNING, "Unreferenced model", "UNREFERENCED_MODEL")

            self._enter(AnalysisState.CHECKING_MISSING, is_cancelled)
            missing_texture_checker = MissingTextureChecker(pack)
            for model in missing_texture_checker.models:
                emit(str(model), WARNING, "Textures contain #missing", "MISSING_TEXTURE")

        except PackAdviserError as e:
            logger.error("Analysis failed during %s: %s", e.phase, e)
            self.state = AnalysisState.FAILED
            if self.on_state:
                self.on_state(self.state)
            raise

        self._enter(AnalysisState.DONE, None)
        logger.info(
            "Analysis done: %d unused texture(s), %d unreferenced model(s), %d model(s) with #missing",
            len(unreferenced_texture_checker.textures),
            len(unreferenced_model_checker.models),
            len(missing_texture_checker.models),
        )

        return PackResult(
            pack=pack,
            unreferenced_texture_checker=unreferenced_texture_checker,
            unreferenced_model_checker=unreferenced_model_checker,
            missing_texture_checker=missing_texture_checker,
            statuses=tuple(statuses),
        )
