import logging
import os

from PySide6.QtCore import Qt, QObject, QThread, Signal
from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QFileDialog,
    QComboBox,
    QListWidget,
    QListWidgetItem,
    QPlainTextEdit,
    QSplitter,
    QMessageBox,
    QProgressBar,
    QCheckBox,
    QSpinBox,
)

from packadvice.config import APP_NAME, APP_VERSION, DEFAULT_PROFILE
from packadvice.core.adviser import AnalysisState, PackAdviser, PackOptions
from packadvice.core.errors import PackAdviserError
from packadvice.core.export import build_result_dict, write_result_json
from packadvice.core.profiles import (
    ENTRY_POINT_KINDS,
    AuditProfile,
    default_profiles,
    ensure_default_profiles_on_disk,
    list_profile_names,
    load_profile,
    save_profile,
)
from packadvice.core.reporting import build_report_html, write_report_html

logger = logging.getLogger(__name__)

# States in run order; used for the progress bar
_PROGRESS_STATES = [
    AnalysisState.VALIDATING_PATH,
    AnalysisState.LOADING_METADATA,
    AnalysisState.LOADING_CATALOG,
    AnalysisState.BUILDING_GRAPH,
    AnalysisState.CHECKING_TEXTURES,
    AnalysisState.CHECKING_MODELS,
    AnalysisState.CHECKING_MISSING,
    AnalysisState.DONE,
]


class AnalysisWorker(QObject):
    state_changed = Signal(int, int, str)  # current, total, state name
    status = Signal(object)                # PackAdviserStatus
    finished = Signal(object)              # PackResult
    failed = Signal(str, str)              # phase, message

    def __init__(self, options):
        super().__init__()
        self.options = options
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def run(self):
        def _is_cancelled():
            return self._cancelled

        def _on_state(state):
            if state in _PROGRESS_STATES:
                idx = _PROGRESS_STATES.index(state) + 1
                self.state_changed.emit(idx, len(_PROGRESS_STATES), state.name)

        adviser = PackAdviser(on_state=_on_state)
        try:
            # Signals are queued to the UI thread, so emit never blocks here
            result = adviser.run(self.options, status_cb=self.status.emit, is_cancelled=_is_cancelled)
        except PackAdviserError as e:
            self.failed.emit(e.phase, str(e))
            return
        self.finished.emit(result)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} (v{APP_VERSION})")
        self.setMinimumSize(1020, 680)

        # State
        self._last_result = None
        self._analysis_thread = None
        self._analysis_worker = None

        # --- Root widget
        root = QWidget()
        self.setCentralWidget(root)

        main_layout = QVBoxLayout(root)
        main_layout.setContentsMargins(12, 12, 12, 12)
        main_layout.setSpacing(10)

        # -------------------------
        # Top: Pack / Report rows
        # -------------------------
        self.pack_edit = QLineEdit()
        self.pack_edit.setPlaceholderText("Select resource pack folder (contains pack.mcmeta)...")

        btn_pack = QPushButton("Browse...")
        btn_pack.clicked.connect(self.pick_pack_folder)

        pack_row = QHBoxLayout()
        pack_row.addWidget(QLabel("Pack:"))
        pack_row.addWidget(self.pack_edit, 1)
        pack_row.addWidget(btn_pack)

        self.output_edit = QLineEdit()
        self.output_edit.setPlaceholderText("Select folder for exported reports...")

        btn_output = QPushButton("Browse...")
        btn_output.clicked.connect(self.pick_output_folder)

        output_row = QHBoxLayout()
        output_row.addWidget(QLabel("Reports:"))
        output_row.addWidget(self.output_edit, 1)
        output_row.addWidget(btn_output)

        main_layout.addLayout(pack_row)
        main_layout.addLayout(output_row)

        # -------------------------
        # Mid: Profile + buttons
        # -------------------------
        mid_row = QHBoxLayout()

        self.profile_combo = QComboBox()
        # Editable so a new name can be typed before Save Profile
        self.profile_combo.setEditable(True)

        mid_row.addWidget(QLabel("Profile:"))
        mid_row.addWidget(self.profile_combo)

        mid_row.addStretch(1)

        self.btn_analyze = QPushButton("Analyze")
        self.btn_analyze.clicked.connect(self.on_analyze_clicked)

        self.btn_cancel = QPushButton("Cancel")
        self.btn_cancel.setEnabled(False)
        self.btn_cancel.clicked.connect(self.on_cancel_clicked)

        self.btn_export = QPushButton("Export Report")
        self.btn_export.setEnabled(False)  # enabled after a finished analysis
        self.btn_export.clicked.connect(self.on_export_clicked)

        mid_row.addWidget(self.btn_analyze)
        mid_row.addWidget(self.btn_cancel)
        mid_row.addWidget(self.btn_export)

        main_layout.addLayout(mid_row)

        # -------------------------
        # Profile Editor
        # -------------------------
        self.profile_ignored_edit = QLineEdit()
        self.profile_ignored_edit.setPlaceholderText(
            "Ignored texture folders (comma-separated) e.g. font/, gui/, entity/"
        )

        self.entry_point_checks = {}
        for kind in ENTRY_POINT_KINDS:
            self.entry_point_checks[kind] = QCheckBox(f"Entry points: {kind}")

        self.depth_spin = QSpinBox()
        self.depth_spin.setRange(1, 1024)

        self.btn_profile_reload = QPushButton("Reload Profile")
        self.btn_profile_reload.clicked.connect(self.on_reload_profile_clicked)

        self.btn_profile_save = QPushButton("Save Profile")
        self.btn_profile_save.clicked.connect(self.on_save_profile_clicked)

        prof_row = QHBoxLayout()
        for cb in self.entry_point_checks.values():
            prof_row.addWidget(cb)
        prof_row.addWidget(QLabel("Max parent depth:"))
        prof_row.addWidget(self.depth_spin)
        prof_row.addStretch(1)
        prof_row.addWidget(self.btn_profile_reload)
        prof_row.addWidget(self.btn_profile_save)

        main_layout.addWidget(QLabel("Profile Editor"))
        main_layout.addWidget(self.profile_ignored_edit)
        main_layout.addLayout(prof_row)

        # -------------------------
        # Progress
        # -------------------------
        prog_row = QHBoxLayout()

        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setValue(0)

        prog_row.addWidget(QLabel("Progress:"))
        prog_row.addWidget(self.progress, 1)

        main_layout.addLayout(prog_row)

        # -------------------------
        # Bottom: Results + Logs
        # -------------------------
        splitter = QSplitter(Qt.Horizontal)

        results_panel = QWidget()
        results_layout = QVBoxLayout(results_panel)
        results_layout.setContentsMargins(0, 0, 0, 0)

        results_layout.addWidget(QLabel("Results"))
        self.results_list = QListWidget()
        results_layout.addWidget(self.results_list, 1)

        logs_panel = QWidget()
        logs_layout = QVBoxLayout(logs_panel)
        logs_layout.setContentsMargins(0, 0, 0, 0)

        logs_layout.addWidget(QLabel("Log"))
        self.log_box = QPlainTextEdit()
        self.log_box.setReadOnly(True)
        self.log_box.setPlaceholderText("Logs will appear here...")
        logs_layout.addWidget(self.log_box, 1)

        splitter.addWidget(results_panel)
        splitter.addWidget(logs_panel)
        splitter.setSizes([600, 420])

        main_layout.addWidget(splitter, 1)

        self.log("Ready. Choose a pack folder, then Analyze.")

        # Stable IDs for UI tests
        self.pack_edit.setObjectName("pack_edit")
        self.output_edit.setObjectName("output_edit")
        self.profile_combo.setObjectName("profile_combo")
        self.btn_analyze.setObjectName("btn_analyze")
        self.btn_cancel.setObjectName("btn_cancel")
        self.btn_export.setObjectName("btn_export")
        self.results_list.setObjectName("results_list")
        self.log_box.setObjectName("log_box")
        self.progress.setObjectName("progress")
        self.profile_ignored_edit.setObjectName("profile_ignored_edit")
        self.depth_spin.setObjectName("depth_spin")
        self.btn_profile_reload.setObjectName("btn_profile_reload")
        self.btn_profile_save.setObjectName("btn_profile_save")

        # Ensure default profiles exist on disk and load current selection into editor
        ensure_default_profiles_on_disk()
        self._active_profile = default_profiles()[DEFAULT_PROFILE]
        self.refresh_profile_names(DEFAULT_PROFILE)
        self.profile_combo.currentTextChanged.connect(self.on_profile_changed)
        self.on_profile_changed(self.profile_combo.currentText())

    # -------------------------
    # UI Helpers
    # -------------------------
    def log(self, msg: str):
        self.log_box.appendPlainText(msg)

    def add_result(self, level: str, message: str):
        text = f"[{level}] {message}"
        item = QListWidgetItem(text)

        lvl = level.upper().strip()
        if lvl == "ERROR":
            item.setForeground(Qt.red)
        elif lvl == "WARNING":
            item.setForeground(Qt.darkYellow)
        else:
            item.setForeground(Qt.darkGreen)

        self.results_list.addItem(item)

    def is_busy(self) -> bool:
        return self._analysis_worker is not None

    def pick_pack_folder(self):
        folder = QFileDialog.getExistingDirectory(self, "Select Resource Pack Folder")
        if folder:
            self.pack_edit.setText(os.path.normpath(folder))
            self.log(f"Pack folder set: {folder}")

    def pick_output_folder(self):
        folder = QFileDialog.getExistingDirectory(self, "Select Report Folder")
        if folder:
            self.output_edit.setText(os.path.normpath(folder))
            self.log(f"Report folder set: {folder}")

    def _set_running(self, running: bool):
        self.btn_analyze.setEnabled(not running)
        self.btn_cancel.setEnabled(running)
        self.btn_export.setEnabled(not running and self._last_result is not None)

    # -------------------------
    # Analyze
    # -------------------------
    def on_analyze_clicked(self):
        pack_path = self.pack_edit.text().strip()
        if not pack_path or not os.path.isdir(pack_path):
            QMessageBox.warning(self, "Missing Pack", "Please choose a valid resource pack folder.")
            return

        self.results_list.clear()
        self._last_result = None
        self.progress.setValue(0)

        self._active_profile = self._read_profile_from_editor()
        profile = self._active_profile
        self.log("---- ANALYSIS START ----")
        self.log(f"Profile: {profile.name}")
        self.log(f"Pack:    {pack_path}")

        self._set_running(True)

        self._analysis_thread = QThread()
        self._analysis_worker = AnalysisWorker(PackOptions(path=pack_path, profile=profile))
        self._analysis_worker.moveToThread(self._analysis_thread)

        self._analysis_thread.started.connect(self._analysis_worker.run)
        self._analysis_worker.state_changed.connect(self._on_state_changed)
        self._analysis_worker.status.connect(self._on_status)
        self._analysis_worker.finished.connect(self._on_finished)
        self._analysis_worker.failed.connect(self._on_failed)

        for sig in (self._analysis_worker.finished, self._analysis_worker.failed):
            sig.connect(self._analysis_thread.quit)
            sig.connect(self._analysis_worker.deleteLater)
        self._analysis_thread.finished.connect(self._analysis_thread.deleteLater)

        self._analysis_thread.start()

    def _on_state_changed(self, current: int, total: int, name: str):
        self.progress.setValue(int((current / max(total, 1)) * 100))
        self.log(f"{current}/{total}  {name.lower()}")

    def _on_status(self, status):
        self.add_result(status.severity, f"{status.message}: {status.path}")

    def _on_finished(self, result):
        self._last_result = result
        self._analysis_worker = None
        self._set_running(False)

        c = result.counts()
        self.add_result(
            "NOTICE",
            f"Done: unused textures={c['unreferenced_textures']}, "
            f"unreferenced models={c['unreferenced_models']}, "
            f"#missing models={c['missing_texture_models']}, "
            f"load issues={c['load_issues']}",
        )
        self.progress.setValue(100)
        self.log("---- ANALYSIS DONE ----")

    def _on_failed(self, phase: str, message: str):
        self._analysis_worker = None
        self._set_running(False)
        self.add_result("ERROR", f"Analysis failed ({phase}): {message}")
        self.log(f"ERROR: {message}")
        self.log("---- ANALYSIS FAILED ----")

    def on_cancel_clicked(self):
        if self._analysis_worker:
            self._analysis_worker.cancel()
            self.log("Cancel requested...")
            self.add_result("WARNING", "Cancel requested...")

    # -------------------------
    # Export
    # -------------------------
    def on_export_clicked(self):
        if self._last_result is None:
            QMessageBox.information(self, "Nothing to Export", "Run Analyze first.")
            return

        output_path = self.output_edit.text().strip()
        if not output_path:
            QMessageBox.warning(self, "Missing Report Folder", "Please choose a folder for the report.")
            return

        profile_name = self.profile_combo.currentText()
        result = self._last_result

        try:
            written_json = write_result_json(
                build_result_dict(result, profile=profile_name),
                os.path.join(output_path, "packadvice.json"),
            )
            written_report = write_report_html(
                build_report_html(result, profile=profile_name),
                os.path.join(output_path, "packadvice.html"),
            )
        except OSError as e:
            logger.error("Export failed: %s", e)
            self.add_result("ERROR", f"EXPORT_FAILED: {e}")
            QMessageBox.critical(self, "Export Failed", f"Export failed:\n{e}")
            return

        self.add_result("NOTICE", f"Result written: {written_json}")
        self.add_result("NOTICE", f"Report written: {written_report}")
        self.log(f"Exported: {written_json}, {written_report}")

    # -------------------------
    # Profiles
    # -------------------------
    def refresh_profile_names(self, select: str):
        self.profile_combo.blockSignals(True)
        self.profile_combo.clear()
        self.profile_combo.addItems(list_profile_names())
        self.profile_combo.setCurrentText(select)
        self.profile_combo.blockSignals(False)

    def on_profile_changed(self, name: str):
        name = name.strip()
        if not name:
            return
        try:
            prof = load_profile(name)
        except FileNotFoundError:
            # A name still being typed; keep the editor as it is
            return
        except (OSError, ValueError) as e:
            self.log(f"Profile '{name}' could not be loaded ({e}); using built-in default.")
            prof = default_profiles()[DEFAULT_PROFILE]

        self._active_profile = prof
        self._apply_profile_to_editor(prof)
        self.log(f"Profile loaded: {prof.name}")

    def _apply_profile_to_editor(self, prof: AuditProfile):
        self.profile_ignored_edit.setText(", ".join(prof.ignored_texture_prefixes))
        for kind, cb in self.entry_point_checks.items():
            cb.setChecked(kind in prof.entry_points)
        self.depth_spin.setValue(prof.max_parent_depth)

    def _read_profile_from_editor(self) -> AuditProfile:
        name = self.profile_combo.currentText().strip() or "Custom"

        ignored = []
        for x in self.profile_ignored_edit.text().split(","):
            x = x.strip().replace("\\", "/").lstrip("/")
            if x and x not in ignored:
                ignored.append(x)

        return AuditProfile(
            name=name,
            ignored_texture_prefixes=tuple(ignored),
            entry_points=tuple(k for k, cb in self.entry_point_checks.items() if cb.isChecked()),
            max_parent_depth=self.depth_spin.value(),
            read_workers=self._active_profile.read_workers,
            extra=dict(self._active_profile.extra),
        )

    def on_reload_profile_clicked(self):
        self.on_profile_changed(self.profile_combo.currentText())

    def on_save_profile_clicked(self):
        prof = self._read_profile_from_editor()
        try:
            path = save_profile(prof)
        except OSError as e:
            QMessageBox.critical(self, "Save Failed", str(e))
            return
        self._active_profile = prof
        self.refresh_profile_names(path.stem)
        self.add_result("NOTICE", f"Profile saved: {path}")
        self.log(f"Profile saved: {path}")
