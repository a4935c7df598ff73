"""Tests for the find/hide session controller."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from GraphFind.core.settings import DisplayOptions, MemoryParamStore, QueryPreset, UrlParamStore
from GraphFind.graph import load_graph
from GraphFind.services import GraphFindSession

FIXTURE = REPO_ROOT / "test" / "data" / "bookinfo_graph.json"


class TestParamStoreSync(unittest.TestCase):
    def test_store_value_wins_over_initial_value(self) -> None:
        params = MemoryParamStore({"graphFind": "rank > 2"})
        session = GraphFindSession(params=params, find_value="cb")
        self.assertEqual(session.value("find"), "rank > 2")
        self.assertEqual(session.input("find"), "rank > 2")

    def test_initial_value_is_written_to_store(self) -> None:
        params = MemoryParamStore()
        session = GraphFindSession(params=params, hide_value="healthy")
        self.assertEqual(session.value("hide"), "healthy")
        self.assertEqual(params.values, {"graphHide": "healthy"})

    def test_confirmed_changes_are_written_and_cleared(self) -> None:
        params = MemoryParamStore()
        session = GraphFindSession(params=params)
        session.set_value("find", "cb")
        self.assertEqual(params.get("graphFind"), "cb")
        session.set_value("find", "")
        self.assertIsNone(params.get("graphFind"))

    def test_url_store(self) -> None:
        params = UrlParamStore("http://localhost:20001/console/graph?duration=60&graphHide=healthy")
        session = GraphFindSession(params=params)
        self.assertEqual(session.value("hide"), "healthy")

        session.set_value("hide", "")
        self.assertEqual(params.url, "http://localhost:20001/console/graph?duration=60")
        session.set_value("find", "app = x")
        self.assertEqual(params.url, "http://localhost:20001/console/graph?duration=60&graphFind=app+%3D+x")


class TestInput(unittest.TestCase):
    def setUp(self) -> None:
        self.params = MemoryParamStore()
        self.session = GraphFindSession(params=self.params)
        self.graph = load_graph(FIXTURE)
        self.session.attach_graph(self.graph)

    def test_typing_does_not_confirm(self) -> None:
        self.session.update_input("find", "c")
        self.session.update_input("find", "cb")
        self.assertEqual(self.session.input("find"), "cb")
        self.assertEqual(self.session.value("find"), "")
        self.assertIsNone(self.session.last_find)

        self.session.submit("find")
        self.assertEqual(self.session.value("find"), "cb")
        self.assertEqual(self.params.get("graphFind"), "cb")
        self.assertEqual(self.session.last_find.ids(), ["reviews-v1"])

    def test_paste_confirms(self) -> None:
        self.session.update_input("find", "app = ratings")
        self.assertEqual(self.session.value("find"), "app = ratings")
        self.assertEqual(self.session.last_find.ids(), ["ratings"])

    def test_empty_input_clears(self) -> None:
        self.session.update_input("find", "app = ratings")
        self.session.update_input("find", "")
        self.assertEqual(self.session.value("find"), "")
        self.assertTrue(self.session.last_find.is_empty())
        self.assertEqual(self.graph.elements(".find").ids(), [])

    def test_tab_completion(self) -> None:
        for text in ("h", "ht", "htt"):
            self.session.update_input("find", text)
        self.assertEqual(self.session.complete("find"), "http")
        self.assertEqual(self.session.complete("find"), "httpin")
        self.assertEqual(self.session.input("find"), "httpin")
        self.assertEqual(self.session.value("find"), "")

    def test_completion_without_candidates(self) -> None:
        self.session.update_input("find", "z")
        self.assertIsNone(self.session.complete("find"))
        self.assertEqual(self.session.input("find"), "z")

    def test_error_keeps_last_valid_selector(self) -> None:
        self.session.set_value("find", "app = ratings")
        with self.assertLogs("GraphFind", level="WARNING") as logs:
            self.session.set_value("find", "bogus = 1")
        self.assertIn("Find: Invalid operand [bogus]", logs.output[0])
        self.assertEqual(self.session.error("find"), "Find: Invalid operand [bogus]")
        self.assertIsNone(self.session.error("hide"))
        self.assertEqual(self.session.last_find.ids(), ["ratings"])

        # editing clears the message
        self.session.update_input("find", "bogus = 12")
        self.assertIsNone(self.session.error("find"))

    def test_option_requests_are_applied(self) -> None:
        self.assertFalse(self.session.options.show_rank)
        self.session.set_value("find", "rank <= 2")
        self.assertTrue(self.session.options.show_rank)
        self.assertEqual(set(self.session.last_find.ids()), {"productpage", "reviews-v1"})

        self.session.set_value("hide", "rt > 1000")
        self.assertEqual(self.session.options.edge_labels, ["responseTime", "rtP95"])


class TestGraphLifecycle(unittest.TestCase):
    def test_new_snapshot_reapplies_queries(self) -> None:
        session = GraphFindSession(find_value="app = ratings", hide_value="cb")
        old = load_graph(FIXTURE)
        session.attach_graph(old)
        self.assertFalse(old.get("reviews-v1").visible)

        new = load_graph(FIXTURE)
        session.attach_graph(new)
        # the old snapshot is left alone
        self.assertFalse(old.get("reviews-v1").visible)
        self.assertFalse(new.get("reviews-v1").visible)
        self.assertIn("find", new.get("ratings").classes)
        self.assertIs(session.hide_evaluator.handle.graph, new)

    def test_same_snapshot_refresh(self) -> None:
        session = GraphFindSession(hide_value="cb")
        graph = load_graph(FIXTURE)
        session.attach_graph(graph)
        session.attach_graph(graph)
        hidden = {element.id for element in graph.elements() if not element.visible}
        self.assertEqual(hidden, {"reviews-v1", "e-pp-r1"})
        self.assertFalse(session.last_hide.layout_requested)

    def test_hide_change_requests_layout(self) -> None:
        session = GraphFindSession(options=DisplayOptions(layout="cose"))
        graph = load_graph(FIXTURE)
        session.attach_graph(graph)
        session.set_value("hide", "cb")
        self.assertTrue(session.last_hide.layout_requested)
        self.assertEqual(graph.layout_requests, ["cose"])

    def test_compress_toggle(self) -> None:
        session = GraphFindSession(hide_value="app = ratings")
        graph = load_graph(FIXTURE)
        session.attach_graph(graph)
        self.assertEqual(set(session.last_hide.hidden), {"ratings", "e-r2-ra"})

        session.set_compress_on_hide(True)
        self.assertTrue(session.options.compress_on_hide)
        self.assertEqual(set(session.last_hide.removed), {"ratings", "e-r2-ra"})
        self.assertTrue(session.last_hide.layout_requested)
        self.assertTrue(graph.get("ratings").removed)

    def test_compress_refresh_with_identical_snapshot_skips_layout(self) -> None:
        session = GraphFindSession(options=DisplayOptions(compress_on_hide=True), hide_value="app = ratings")
        session.attach_graph(load_graph(FIXTURE))
        refreshed = load_graph(FIXTURE)
        session.attach_graph(refreshed)
        self.assertEqual(set(session.last_hide.removed), {"ratings", "e-r2-ra"})
        self.assertFalse(session.last_hide.layout_requested)
        self.assertEqual(refreshed.layout_requests, [])

    def test_find_marker_does_not_survive_compress_round_trip(self) -> None:
        session = GraphFindSession()
        graph = load_graph(FIXTURE)
        session.attach_graph(graph)
        session.set_value("find", "app = ratings")
        session.set_compress_on_hide(True)
        session.set_value("hide", "app = ratings")
        self.assertTrue(graph.get("ratings").removed)

        session.set_value("find", "cb")
        session.set_value("hide", "")
        self.assertFalse(graph.get("ratings").removed)
        self.assertEqual(graph.elements(".find").ids(), ["reviews-v1"])

    def test_detach(self) -> None:
        session = GraphFindSession(hide_value="cb")
        graph = load_graph(FIXTURE)
        session.attach_graph(graph)
        session.detach_graph()
        self.assertIsNone(session.graph)
        self.assertIsNone(session.hide_evaluator.handle)

        session.set_value("hide", "healthy")
        self.assertEqual(session.value("hide"), "healthy")
        self.assertIsNone(session.last_hide)


class TestPresets(unittest.TestCase):
    def test_select_preset(self) -> None:
        presets = (QueryPreset("Hide: healthy nodes", "healthy"), QueryPreset("Hide: unknown", "name = unknown"))
        session = GraphFindSession(hide_presets=presets)
        self.assertEqual(session.presets("hide"), presets)
        self.assertEqual(session.presets("find"), ())

        preset = session.select_preset("hide", 1)
        self.assertEqual(preset.expression, "name = unknown")
        self.assertEqual(session.value("hide"), "name = unknown")
        self.assertEqual(session.input("hide"), "name = unknown")
        with self.assertRaises(IndexError):
            session.select_preset("hide", 5)


if __name__ == "__main__":
    unittest.main()
