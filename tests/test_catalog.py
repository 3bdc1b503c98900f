import tempfile
import unittest
from pathlib import Path

from packadvice.core.catalog import MODEL_PARSE_ERROR, AssetCatalog, parse_model_document
from packadvice.core.errors import CatalogError, PathNotFoundError
from packadvice.core.profiles import AuditProfile, default_profiles
from packadvice.models import MISSING_TEXTURE, AssetPath

from pack_builder import build_pack


class TestAssetPath(unittest.TestCase):
    def test_normalization(self):
        self.assertEqual(AssetPath.parse("block/stone").value, "minecraft:block/stone")
        self.assertEqual(AssetPath.parse("Demo:Block\\Crate.png").value, "demo:block/crate")
        self.assertEqual(AssetPath.parse("demo:/item/x.json").value, "demo:item/x")
        self.assertEqual(AssetPath.parse("minecraft:block/stone"), AssetPath.parse("block/stone"))

    def test_ordering_is_lexicographic(self):
        paths = [AssetPath.parse("b:x"), AssetPath.parse("a:z"), AssetPath.parse("a:y")]
        self.assertEqual([str(p) for p in sorted(paths)], ["a:y", "a:z", "b:x"])


class TestParseModelDocument(unittest.TestCase):
    def test_textures_parent_and_overrides(self):
        doc = parse_model_document(
            AssetPath.parse("test:item/wand"),
            {
                "parent": "item/generated",
                "textures": {
                    "layer0": "test:item/wand",
                    "layer1": {"sprite": "test:item/wand_glow"},
                    "particle": "#layer0",
                    "broken": "#missing",
                },
                "overrides": [{"predicate": {"custom_model_data": 1}, "model": "test:item/wand_lit"}],
            },
        )
        self.assertEqual(doc.parent, AssetPath.parse("minecraft:item/generated"))
        self.assertEqual(doc.own_textures["layer0"], "test:item/wand")
        self.assertEqual(doc.own_textures["layer1"], "test:item/wand_glow")
        self.assertEqual(doc.own_textures["particle"], "#layer0")
        self.assertEqual(doc.own_textures["broken"], MISSING_TEXTURE)
        self.assertEqual(doc.overrides, (AssetPath.parse("test:item/wand_lit"),))

    def test_unexpected_shapes_raise(self):
        bad = [
            [],
            {"parent": 3},
            {"textures": []},
            {"textures": {"all": 5}},
            {"textures": {"all": {"force_translucent": True}}},
            {"overrides": {}},
            {"overrides": [{"predicate": {}}]},
        ]
        for data in bad:
            with self.subTest(data=data):
                with self.assertRaises(ValueError):
                    parse_model_document(AssetPath.parse("test:block/x"), data)


class TestAssetCatalog(unittest.TestCase):
    def test_missing_root(self):
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(PathNotFoundError) as ctx:
                AssetCatalog.load(str(Path(td) / "nope"), default_profiles()["Default"])
            self.assertIsInstance(ctx.exception, CatalogError)
            self.assertEqual(ctx.exception.phase, "path")

    def test_scan_textures_and_models(self):
        with tempfile.TemporaryDirectory() as td:
            build_pack(
                td,
                models={
                    "block/a": {"textures": {"all": "test:block/a"}},
                    "block/sub/b": {"parent": "test:block/a"},
                },
                textures=["block/a", "block/unused", "font/glyphs"],
            )
            catalog = AssetCatalog.load(td, default_profiles()["Default"])

            self.assertEqual(catalog.namespaces, ("test",))
            self.assertEqual(
                [str(p) for p in catalog.textures],
                ["test:block/a", "test:block/unused"],  # font/ ignored by Default
            )
            self.assertEqual([str(p) for p in catalog.models], ["test:block/a", "test:block/sub/b"])
            self.assertTrue(all(t.exists_on_disk for t in catalog.textures.values()))
            self.assertEqual(catalog.issues, ())

    def test_strict_profile_keeps_all_textures(self):
        with tempfile.TemporaryDirectory() as td:
            build_pack(td, textures=["font/glyphs", "gui/icons"])
            catalog = AssetCatalog.load(td, default_profiles()["Strict"])
            self.assertEqual(len(catalog.textures), 2)

    def test_malformed_model_is_recorded_not_fatal(self):
        with tempfile.TemporaryDirectory() as td:
            build_pack(
                td,
                models={
                    "block/good": {"textures": {"all": "test:block/good"}},
                    "block/bad_json": "{ not json",
                    "block/bad_shape": {"textures": ["nope"]},
                },
            )
            catalog = AssetCatalog.load(td, AuditProfile(name="t", read_workers=2))

            self.assertEqual([str(p) for p in catalog.models], ["test:block/good"])
            self.assertEqual(
                [i.path for i in catalog.issues],
                ["test:block/bad_json", "test:block/bad_shape"],
            )
            self.assertTrue(all(i.kind == MODEL_PARSE_ERROR for i in catalog.issues))
            self.assertTrue(all(i.message.startswith("Model failed to load:") for i in catalog.issues))

    def test_deeply_nested_model_is_recorded_not_fatal(self):
        with tempfile.TemporaryDirectory() as td:
            build_pack(
                td,
                models={
                    "block/ok": {"textures": {"all": "test:block/ok"}},
                    "block/deep": "[" * 200000 + "]" * 200000,
                },
            )
            catalog = AssetCatalog.load(td, AuditProfile(name="t", read_workers=2))

            self.assertEqual([str(p) for p in catalog.models], ["test:block/ok"])
            self.assertEqual([(i.kind, i.path) for i in catalog.issues], [(MODEL_PARSE_ERROR, "test:block/deep")])

    def test_worker_count_does_not_change_result(self):
        with tempfile.TemporaryDirectory() as td:
            build_pack(td, models={f"block/m{i:02d}": {"textures": {"all": f"test:block/t{i}"}} for i in range(30)})
            one = AssetCatalog.load(td, AuditProfile(name="t", read_workers=1))
            many = AssetCatalog.load(td, AuditProfile(name="t", read_workers=8))
            self.assertEqual(list(one.models), list(many.models))
            self.assertEqual(list(one.models.values()), list(many.models.values()))

    def test_pack_without_assets(self):
        with tempfile.TemporaryDirectory() as td:
            build_pack(td)
            catalog = AssetCatalog.load(td, default_profiles()["Default"])
            self.assertEqual(catalog.textures, {})
            self.assertEqual(catalog.models, {})


if __name__ == "__main__":
    unittest.main()
