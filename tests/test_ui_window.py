import os
import unittest
import tempfile
from pathlib import Path
from unittest import mock

from PySide6.QtWidgets import QApplication
from PySide6.QtTest import QTest
from PySide6.QtCore import Qt

from packadvice.core.profiles import load_profile
from packadvice.ui.main_window import MainWindow

from pack_builder import build_pack


class TestMainWindowUI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        # Ensure one QApplication exists
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self._profiles = tempfile.TemporaryDirectory()
        self._env = mock.patch.dict(os.environ, {"PACKADVICE_PROFILE_DIR": self._profiles.name})
        self._env.start()
        self.window = MainWindow()
        self.window.show()
        QTest.qWaitForWindowExposed(self.window)

    def tearDown(self):
        self.window.close()
        self._env.stop()
        self._profiles.cleanup()

    def _wait_idle(self, timeout_ms=5000):
        waited = 0
        while self.window.is_busy() and waited < timeout_ms:
            QTest.qWait(20)
            waited += 20
        self.assertFalse(self.window.is_busy(), "analysis did not finish in time")

    def test_analyze_updates_results_list(self):
        with tempfile.TemporaryDirectory() as pack_dir:
            build_pack(
                pack_dir,
                models={"block/a": {"textures": {"all": "#missing"}}},
                textures=["block/unused"],
            )

            pack_edit = self.window.findChild(type(self.window.pack_edit), "pack_edit")
            pack_edit.setText(str(Path(pack_dir)))

            btn_analyze = self.window.findChild(type(self.window.btn_analyze), "btn_analyze")
            QTest.mouseClick(btn_analyze, Qt.LeftButton)
            self._wait_idle()

            results = self.window.findChild(type(self.window.results_list), "results_list")
            texts = [results.item(i).text() for i in range(results.count())]
            self.assertTrue(any("Unused texture in model: test:block/unused" in t for t in texts))
            self.assertTrue(any("Textures contain #missing: test:block/a" in t for t in texts))

            log_box = self.window.findChild(type(self.window.log_box), "log_box")
            self.assertIn("ANALYSIS DONE", log_box.toPlainText())
            self.assertEqual(self.window.progress.value(), 100)
            self.assertTrue(self.window.btn_export.isEnabled())

    def test_export_writes_files(self):
        with tempfile.TemporaryDirectory() as pack_dir, tempfile.TemporaryDirectory() as out_dir:
            build_pack(pack_dir)
            self.window.pack_edit.setText(pack_dir)
            self.window.output_edit.setText(out_dir)

            QTest.mouseClick(self.window.btn_analyze, Qt.LeftButton)
            self._wait_idle()
            QTest.mouseClick(self.window.btn_export, Qt.LeftButton)

            self.assertTrue((Path(out_dir) / "packadvice.json").exists())
            self.assertTrue((Path(out_dir) / "packadvice.html").exists())

    def test_failed_analysis_reports_error(self):
        with tempfile.TemporaryDirectory() as pack_dir:
            # No pack.mcmeta: metadata phase fails
            self.window.pack_edit.setText(pack_dir)
            QTest.mouseClick(self.window.btn_analyze, Qt.LeftButton)
            self._wait_idle()

            texts = [self.window.results_list.item(i).text() for i in range(self.window.results_list.count())]
            self.assertTrue(any("Analysis failed (metadata)" in t for t in texts))
            self.assertFalse(self.window.btn_export.isEnabled())

    def test_default_profiles_written_at_startup(self):
        profiles = Path(self._profiles.name)
        for name in ("Default", "Strict", "Legacy"):
            self.assertTrue((profiles / f"{name}.json").exists())
        self.assertEqual(self.window.profile_combo.currentText(), "Default")
        self.assertIn("font/", self.window.profile_ignored_edit.text())

    def test_saved_profile_is_listed_and_reloaded(self):
        self.window.profile_combo.setCurrentText("Mine")
        self.window.profile_ignored_edit.setText("gui/, font/")
        self.window.entry_point_checks["items"].setChecked(False)
        self.window.depth_spin.setValue(12)
        QTest.mouseClick(self.window.btn_profile_save, Qt.LeftButton)

        saved = load_profile("Mine")
        self.assertEqual(saved.ignored_texture_prefixes, ("font/", "gui/"))
        self.assertEqual(saved.entry_points, ("blockstates", "legacy_items"))
        self.assertEqual(saved.max_parent_depth, 12)

        names = [self.window.profile_combo.itemText(i) for i in range(self.window.profile_combo.count())]
        self.assertEqual(names, ["Default", "Strict", "Legacy", "Mine"])

        # A fresh window picks the saved profile up from disk
        other = MainWindow()
        try:
            other.profile_combo.setCurrentText("Mine")
            self.assertEqual(other.depth_spin.value(), 12)
            self.assertFalse(other.entry_point_checks["items"].isChecked())
        finally:
            other.close()

    def test_reload_discards_unsaved_edits(self):
        self.window.profile_combo.setCurrentText("Strict")
        self.window.profile_ignored_edit.setText("gui/")
        QTest.mouseClick(self.window.btn_profile_reload, Qt.LeftButton)
        self.assertEqual(self.window.profile_ignored_edit.text(), "")


if __name__ == "__main__":
    unittest.main()
