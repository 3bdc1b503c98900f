import json
import tempfile
import unittest
from pathlib import Path

from packadvice.core.errors import MetadataError
from packadvice.core.pack_meta import load_pack_meta, parse_pack_meta
from packadvice.core.versions import UNKNOWN_VERSION


class TestPackMeta(unittest.TestCase):
    def test_known_format(self):
        meta = parse_pack_meta(json.dumps({"pack": {"pack_format": 15, "description": "hi"}}))
        self.assertEqual(meta.pack_format, 15)
        self.assertEqual(meta.description, "hi")
        self.assertEqual(meta.minecraft_version(), "1.20 - 1.20.1")
        self.assertEqual(meta.engine_version(), "1.20 - 1.20.1")
        self.assertTrue(meta.is_known_format())

    def test_unknown_format_is_not_an_error(self):
        meta = parse_pack_meta(json.dumps({"pack": {"pack_format": 9999}}))
        self.assertEqual(meta.minecraft_version(), UNKNOWN_VERSION)
        self.assertFalse(meta.is_known_format())
        self.assertIsNone(meta.description)

    def test_text_component_description(self):
        meta = parse_pack_meta(json.dumps({"pack": {"pack_format": 8, "description": {"text": "Fancy"}}}))
        self.assertEqual(meta.description, "Fancy")

    def test_extra_fields_ignored(self):
        meta = parse_pack_meta(json.dumps({"pack": {"pack_format": 6, "x": 1}, "language": {}}))
        self.assertEqual(meta.pack_format, 6)

    def test_malformed_documents(self):
        bad = [
            "{ nope",
            "[]",
            json.dumps({}),
            json.dumps({"pack": {"description": "no format"}}),
            json.dumps({"pack": {"pack_format": "15"}}),
            json.dumps({"pack": {"pack_format": True}}),
        ]
        for text in bad:
            with self.subTest(text=text):
                with self.assertRaises(MetadataError) as ctx:
                    parse_pack_meta(text)
                self.assertEqual(ctx.exception.phase, "metadata")

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(MetadataError):
                load_pack_meta(td)

    def test_load_from_disk_with_bom(self):
        with tempfile.TemporaryDirectory() as td:
            (Path(td) / "pack.mcmeta").write_text(
                '\ufeff{"pack": {"pack_format": 34}}', encoding="utf-8"
            )
            self.assertEqual(load_pack_meta(td).pack_format, 34)


if __name__ == "__main__":
    unittest.main()
