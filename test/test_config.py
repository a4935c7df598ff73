"""Tests for layered config parsing and validation."""

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from GraphFind.config import load_config, load_config_with_defaults, parse_config_dict
from GraphFind.services import create_session

DEFAULT_CONFIG = REPO_ROOT / "config" / "default.yml"


def _base_raw_config() -> dict:
    return {
        "log": {"level": "INFO", "to_file": False, "dir": "log"},
        "display": {
            "show_rank": False,
            "show_security": True,
            "show_idle_nodes": False,
            "edge_labels": ["responseTime", "rtP95"],
            "compress_on_hide": False,
            "layout": "dagre",
        },
        "find": {
            "value": "cb",
            "options": [{"description": "Find: unhealthy nodes", "expression": "! healthy"}],
        },
        "hide": {"value": "", "options": []},
    }


class TestConfigLayering(unittest.TestCase):
    def test_parse_success_nested_access(self) -> None:
        cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertTrue(cfg.display.show_security)
        self.assertEqual(cfg.display.edge_labels, ("responseTime", "rtP95"))
        self.assertEqual(cfg.find.value, "cb")
        self.assertEqual(cfg.find.options[0].expression, "! healthy")
        self.assertEqual(cfg.hide.options, ())

    def test_optional_sections(self) -> None:
        cfg = parse_config_dict({"log": {"level": "debug", "to_file": False, "dir": "log"}})
        self.assertEqual(cfg.runtime.level, "DEBUG")
        self.assertEqual(cfg.display.layout, "dagre")
        self.assertFalse(cfg.display.compress_on_hide)
        self.assertEqual(cfg.find.value, "")

    def test_missing_log_section(self) -> None:
        raw = _base_raw_config()
        del raw["log"]
        with self.assertRaises(ValueError) as ctx:
            parse_config_dict(raw)
        self.assertIn("log", str(ctx.exception))

    def test_unknown_edge_label_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["display"]["edge_labels"] = ["responseTime", "bogus"]
        with self.assertRaises(ValueError) as ctx:
            parse_config_dict(raw)
        self.assertIn("display.edge_labels[1]", str(ctx.exception))

    def test_bad_types(self) -> None:
        raw = _base_raw_config()
        raw["display"]["show_rank"] = "yes"
        with self.assertRaises(TypeError) as ctx:
            parse_config_dict(raw)
        self.assertIn("display.show_rank", str(ctx.exception))

        raw = _base_raw_config()
        raw["hide"]["options"] = "healthy"
        with self.assertRaises(TypeError):
            parse_config_dict(raw)

    def test_empty_layout(self) -> None:
        raw = _base_raw_config()
        raw["display"]["layout"] = " "
        with self.assertRaises(ValueError):
            parse_config_dict(raw)

    def test_preset_missing_expression(self) -> None:
        raw = _base_raw_config()
        raw["find"]["options"] = [{"description": "no expression"}]
        with self.assertRaises(ValueError) as ctx:
            parse_config_dict(raw)
        self.assertIn("find.options[0].expression", str(ctx.exception))

    def test_log_level_env_override(self) -> None:
        with patch.dict(os.environ, {"GRAPHFIND_LOG_LEVEL": "warning"}):
            cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.runtime.level, "WARNING")

        with patch.dict(os.environ, {"GRAPHFIND_LOG_LEVEL": "loud"}):
            with self.assertRaises(ValueError):
                parse_config_dict(_base_raw_config())

    def test_graph_path(self) -> None:
        raw = _base_raw_config()
        raw["graph"] = {"path": "snapshots/bookinfo.json"}
        with patch.dict(os.environ, {"GRAPHFIND_GRAPH": ""}):
            self.assertEqual(parse_config_dict(raw).runtime.graph_path, "snapshots/bookinfo.json")
            self.assertEqual(parse_config_dict(_base_raw_config()).runtime.graph_path, "")

        with patch.dict(os.environ, {"GRAPHFIND_GRAPH": "live.json"}):
            self.assertEqual(parse_config_dict(raw).runtime.graph_path, "live.json")

        raw["graph"] = {"path": "bookinfo.yml"}
        with patch.dict(os.environ, {"GRAPHFIND_GRAPH": ""}):
            with self.assertRaises(ValueError) as ctx:
                parse_config_dict(raw)
        self.assertIn("graph.path", str(ctx.exception))

    def test_create_session_from_config(self) -> None:
        session = create_session(parse_config_dict(_base_raw_config()))
        self.assertEqual(session.value("find"), "cb")
        self.assertTrue(session.options.show_security)
        self.assertEqual(session.options.edge_labels, ["responseTime", "rtP95"])
        self.assertEqual(session.presets("find")[0].description, "Find: unhealthy nodes")


class TestConfigOverride(unittest.TestCase):
    def test_default_file(self) -> None:
        cfg = load_config(DEFAULT_CONFIG)
        self.assertEqual(len(cfg.find.options), 4)
        self.assertEqual(cfg.hide.options[0].expression, "healthy")
        self.assertEqual(cfg.display.layout, "dagre")

    def test_override_merges_with_defaults(self) -> None:
        override_yaml = """
log:
  level: DEBUG

display:
  compress_on_hide: true

hide:
  value: "healthy"
"""
        with tempfile.TemporaryDirectory() as tmp:
            override = Path(tmp) / "override.yml"
            override.write_text(override_yaml, encoding="utf-8")
            cfg = load_config_with_defaults(override, default_path=DEFAULT_CONFIG)

        self.assertEqual(cfg.runtime.level, "DEBUG")
        self.assertTrue(cfg.display.compress_on_hide)
        self.assertEqual(cfg.display.layout, "dagre")
        self.assertEqual(cfg.hide.value, "healthy")
        self.assertEqual(len(cfg.hide.options), 3)

    def test_root_must_be_mapping(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            override = Path(tmp) / "override.yml"
            override.write_text("- a\n- b\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config_with_defaults(override, default_path=DEFAULT_CONFIG)


if __name__ == "__main__":
    unittest.main()
