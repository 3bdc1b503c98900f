import unittest

from packadvice.core.catalog import AssetCatalog, parse_model_document
from packadvice.core.graph import (
    CYCLIC_INHERITANCE,
    CyclicInheritanceError,
    ancestor_chain,
    build_graph,
    compute_reachable,
    resolve_redirection,
)
from packadvice.models import MISSING_TEXTURE, AssetPath


def P(s):
    return AssetPath.parse(s)


def make_catalog(docs):
    models = {P(k): parse_model_document(P(k), v) for k, v in docs.items()}
    return AssetCatalog(root="mem", namespaces=("test",), models=dict(sorted(models.items())))


class TestInheritance(unittest.TestCase):
    def test_child_inherits_parent_binding(self):
        catalog = make_catalog({
            "test:a": {"textures": {"particle": "test:x"}},
            "test:b": {"parent": "test:a", "textures": {}},
        })
        graph = build_graph(catalog, [], max_depth=64)
        self.assertEqual(graph.effective[P("test:b")].resolved_textures["particle"], "test:x")

    def test_child_override_wins_and_parent_unaffected(self):
        catalog = make_catalog({
            "test:a": {"textures": {"particle": "test:x"}},
            "test:b": {"parent": "test:a", "textures": {"particle": "test:y"}},
        })
        graph = build_graph(catalog, [], max_depth=64)
        self.assertEqual(graph.effective[P("test:b")].resolved_textures["particle"], "test:y")
        self.assertEqual(graph.effective[P("test:a")].resolved_textures["particle"], "test:x")

    def test_external_parent_ends_chain(self):
        catalog = make_catalog({"test:a": {"parent": "minecraft:block/cube_all", "textures": {"all": "test:x"}}})
        self.assertEqual(ancestor_chain(P("test:a"), catalog.models, 64), [P("test:a")])

    def test_redirect_resolved_after_merge(self):
        # The parent redirects to a key only the child defines
        catalog = make_catalog({
            "test:base": {"textures": {"particle": "#all"}},
            "test:leaf": {"parent": "test:base", "textures": {"all": "test:stone"}},
        })
        graph = build_graph(catalog, [], max_depth=64)
        self.assertEqual(graph.effective[P("test:leaf")].resolved_textures["particle"], "test:stone")
        self.assertEqual(graph.effective[P("test:base")].resolved_textures["particle"], MISSING_TEXTURE)

    def test_child_fixes_inherited_missing(self):
        catalog = make_catalog({
            "test:base": {"textures": {"side": "#missing"}},
            "test:fixed": {"parent": "test:base", "textures": {"side": "test:ok"}},
            "test:broken": {"parent": "test:base"},
        })
        graph = build_graph(catalog, [], max_depth=64)
        self.assertFalse(graph.effective[P("test:fixed")].has_missing_texture())
        self.assertTrue(graph.effective[P("test:broken")].has_missing_texture())


class TestRedirection(unittest.TestCase):
    def test_resolves_transitively(self):
        merged = {"all": "test:x", "side": "#all", "top": "#side"}
        self.assertEqual(resolve_redirection("#top", merged), "test:x")

    def test_absent_key_is_missing(self):
        self.assertEqual(resolve_redirection("#all", {"top": "#all"}), MISSING_TEXTURE)

    def test_loop_is_missing(self):
        self.assertEqual(resolve_redirection("#a", {"a": "#b", "b": "#a"}), MISSING_TEXTURE)

    def test_document_level(self):
        catalog = make_catalog({
            "test:ok": {"textures": {"all": "test:x", "top": "#all"}},
            "test:bad": {"textures": {"top": "#all"}},
        })
        graph = build_graph(catalog, [], max_depth=64)
        self.assertEqual(graph.effective[P("test:ok")].resolved_textures["top"], "test:x")
        self.assertEqual(graph.effective[P("test:bad")].resolved_textures["top"], MISSING_TEXTURE)


class TestCycles(unittest.TestCase):
    def test_two_model_cycle_reported_once(self):
        catalog = make_catalog({
            "test:a": {"parent": "test:b"},
            "test:b": {"parent": "test:a"},
            "test:c": {"textures": {"all": "test:x"}},
        })
        graph = build_graph(catalog, [P("test:a")], max_depth=64)

        self.assertNotIn(P("test:a"), graph.effective)
        self.assertNotIn(P("test:b"), graph.effective)
        self.assertIn(P("test:c"), graph.effective)
        self.assertEqual(graph.excluded, frozenset({P("test:a"), P("test:b")}))

        cyclic = [i for i in graph.issues if i.kind == CYCLIC_INHERITANCE]
        self.assertEqual(len(cyclic), 1)
        self.assertEqual(cyclic[0].path, "test:a")
        self.assertIn("test:a -> test:b -> test:a", cyclic[0].message)

    def test_model_inheriting_from_cycle_is_excluded(self):
        catalog = make_catalog({
            "test:a": {"parent": "test:b"},
            "test:b": {"parent": "test:a"},
            "test:child": {"parent": "test:a"},
        })
        graph = build_graph(catalog, [], max_depth=64)
        self.assertIn(P("test:child"), graph.excluded)
        cyclic = [i for i in graph.issues if i.kind == CYCLIC_INHERITANCE]
        self.assertEqual(len(cyclic), 1)
        self.assertIn("+1 model(s)", cyclic[0].message)

    def test_self_parent(self):
        catalog = make_catalog({"test:a": {"parent": "test:a"}})
        with self.assertRaises(CyclicInheritanceError) as ctx:
            ancestor_chain(P("test:a"), catalog.models, 64)
        self.assertEqual(ctx.exception.cycle, (P("test:a"),))

    def test_depth_bound(self):
        docs = {"test:m0": {"textures": {"all": "test:x"}}}
        for i in range(1, 6):
            docs[f"test:m{i}"] = {"parent": f"test:m{i - 1}"}
        catalog = make_catalog(docs)

        graph = build_graph(catalog, [], max_depth=3)
        # m4 and m5 need more than 3 parent links
        self.assertEqual(graph.excluded, frozenset({P("test:m4"), P("test:m5")}))
        self.assertEqual(
            sorted(i.path for i in graph.issues if i.kind == CYCLIC_INHERITANCE),
            ["test:m4", "test:m5"],
        )
        self.assertEqual(graph.effective[P("test:m3")].resolved_textures["all"], "test:x")

    def test_long_cycle_reported_as_cycle_not_depth(self):
        docs = {f"test:r{i}": {"parent": f"test:r{(i + 1) % 6}"} for i in range(6)}
        catalog = make_catalog(docs)

        graph = build_graph(catalog, [], max_depth=3)
        self.assertEqual(len(graph.excluded), 6)
        self.assertEqual(len(graph.issues), 1)
        self.assertEqual(graph.issues[0].path, "test:r0")
        self.assertIn("Cyclic parent chain: test:r0 -> test:r1", graph.issues[0].message)


class TestReachability(unittest.TestCase):
    def test_parent_and_override_edges(self):
        catalog = make_catalog({
            "test:base": {},
            "test:block": {"parent": "test:base"},
            "test:item": {"parent": "minecraft:item/generated", "overrides": [{"model": "test:item_alt"}]},
            "test:item_alt": {},
            "test:orphan": {"parent": "test:base"},
        })
        reachable = compute_reachable([P("test:block"), P("test:item"), P("minecraft:block/stone")], catalog.models)
        self.assertEqual(
            reachable,
            frozenset({P("test:base"), P("test:block"), P("test:item"), P("test:item_alt")}),
        )


if __name__ == "__main__":
    unittest.main()
