"""Tests for find/hide expression compilation."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from GraphFind.compiler import OPERANDS, QueryCompiler, UNARY_FLAGS, compile_query
from GraphFind.compiler.expression import RANK_REQUEST, RESPONSE_TIME_REQUEST, SECURITY_REQUEST
from GraphFind.core.query import DisplayFlags


def _selector(value: str, flags: DisplayFlags = DisplayFlags()) -> str:
    result = compile_query(value, flags)
    if result.error is not None:
        raise AssertionError(f"unexpected error: {result.error.message}")
    assert result.selector is not None
    return result.selector.text


class TestEmptyQuery(unittest.TestCase):
    def test_empty_and_none_are_no_ops(self) -> None:
        for value in ("", None, "   "):
            result = compile_query(value)
            self.assertIsNone(result.selector)
            self.assertIsNone(result.error)
            self.assertEqual(tuple(result.requests), ())
            self.assertTrue(result.ok)


class TestOperands(unittest.TestCase):
    def test_string_operands(self) -> None:
        self.assertEqual(_selector("app = reviews"), 'node[app = "reviews"]')
        self.assertEqual(_selector("ns = bookinfo"), 'node[namespace = "bookinfo"]')
        self.assertEqual(_selector("version != v1"), 'node[version != "v1"]')
        self.assertEqual(_selector("protocol = http"), 'edge[protocol = "http"]')

    def test_quoted_value_and_escaping(self) -> None:
        self.assertEqual(_selector('app = "reviews"'), 'node[app = "reviews"]')
        self.assertEqual(_selector('app = a"b'), 'node[app = "a\\"b"]')

    def test_word_operators(self) -> None:
        self.assertEqual(_selector("app contains rev"), 'node[app *= "rev"]')
        self.assertEqual(_selector("app !startswith rev"), 'node[app !^= "rev"]')

    def test_operand_is_case_insensitive(self) -> None:
        self.assertEqual(_selector("APP = reviews"), 'node[app = "reviews"]')

    def test_numeric_operands(self) -> None:
        self.assertEqual(_selector("httpin > 5"), "node[httpIn > 5]")
        self.assertEqual(_selector("%httperr >= 10.5"), "edge[httpPercentErr >= 10.5]")
        self.assertEqual(_selector("grpcerr > 1"), "edge[grpcErr > 1]")

    def test_numeric_equality_with_non_numeric_value_is_presence(self) -> None:
        self.assertEqual(_selector("httpin = 5"), "node[httpIn = 5]")
        self.assertEqual(_selector("httpin != 5"), "node[httpIn != 5]")
        self.assertEqual(_selector("httpin = abc"), "node[!httpIn]")
        self.assertEqual(_selector("httpin != abc"), "node[?httpIn]")

    def test_numeric_ordering_requires_number(self) -> None:
        result = compile_query("httpin > abc")
        self.assertIsNotNone(result.error)
        self.assertEqual(result.error.message, "Invalid value [abc]. Expected a numeric value (use '.' for decimals)")
        self.assertIsNone(result.selector)

    def test_numeric_rejects_string_operators(self) -> None:
        result = compile_query("httpin *= 5")
        self.assertEqual(result.error.message, "Invalid operator [*=] for numeric condition")

    def test_node_type(self) -> None:
        self.assertEqual(_selector("node = svc"), 'node[nodeType = "service"]')
        self.assertEqual(_selector("node = op"), 'node[nodeType = "aggregate"]')
        result = compile_query("node = pod")
        self.assertEqual(
            result.error.message,
            "Invalid node type [pod]. Expected app | operation | service | unknown | workload",
        )

    def test_unary_flags(self) -> None:
        self.assertEqual(_selector("cb"), "node[?hasCB]")
        self.assertEqual(_selector("!cb"), "node[^hasCB]")
        self.assertEqual(_selector("not dead"), "node[^isDead]")
        self.assertEqual(_selector("has virtualservice"), "node[?hasVS]")
        self.assertEqual(_selector("traffic"), "edge[?hasTraffic]")

    def test_sidecar_checks_missing_sidecar_marker(self) -> None:
        self.assertEqual(_selector("sc"), "node[^hasMissingSC]")
        self.assertEqual(_selector("! sc"), "node[?hasMissingSC]")

    def test_negated_healthy_expands_to_alternatives(self) -> None:
        result = compile_query("! healthy")
        self.assertEqual(len(result.selector.clauses), 1)
        self.assertEqual(
            result.selector.text,
            'node[healthStatus = "Failure"],node[healthStatus = "Degraded"]',
        )

    def test_unknown_operands(self) -> None:
        self.assertEqual(compile_query("bogus = 1").error.message, "Invalid operand [bogus]")
        self.assertEqual(compile_query("bogus").error.message, "Invalid Node or Edge operand [bogus]")

    def test_missing_operator_is_syntax_error(self) -> None:
        result = compile_query("app reviews")
        self.assertEqual(result.error.message, "No valid operator found in expression")
        self.assertEqual(result.error.kind, "syntax")
        self.assertEqual(compile_query("bogus = 1").error.kind, "semantic")

    def test_target_is_stable_across_operators(self) -> None:
        for operand, descriptor in OPERANDS.items():
            if descriptor.kind in ("string", "name"):
                ops = ("=", "!=", "*=")
                value = "x"
            elif descriptor.kind == "node_type":
                ops = ("=", "!=")
                value = "app"
            else:
                ops = ("=", "!=", ">", "<=")
                value = "5"
            for op in ops:
                result = compile_query(f"{operand} {op} {value}")
                self.assertIsNone(result.error, f"{operand} {op}")
                self.assertEqual(set(result.selector.targets), {descriptor.target}, f"{operand} {op}")
        for flag, unary in UNARY_FLAGS.items():
            for text in (flag, f"!{flag}"):
                result = compile_query(text)
                self.assertEqual(set(result.selector.targets), {unary.target}, text)


class TestRank(unittest.TestCase):
    def test_rank_requests_option_once(self) -> None:
        result = compile_query("rank > 50")
        self.assertEqual(result.selector.text, "node[rank > 50]")
        self.assertEqual(tuple(result.requests), (RANK_REQUEST,))

        result = compile_query("rank > 50 OR rank < 10")
        self.assertEqual(tuple(result.requests), (RANK_REQUEST,))

    def test_rank_already_shown(self) -> None:
        result = compile_query("rank > 50", DisplayFlags(show_rank=True))
        self.assertEqual(tuple(result.requests), ())

    def test_rank_range(self) -> None:
        for value in ("0", "101", "abc"):
            result = compile_query(f"rank <= {value}")
            self.assertEqual(
                result.error.message, f"Invalid rank range [{value}]. Expected a number between 1..100"
            )
            # the request is returned even though compilation failed
            self.assertEqual(tuple(result.requests), (RANK_REQUEST,))


class TestOptionRequests(unittest.TestCase):
    def test_security_and_edge_labels(self) -> None:
        result = compile_query("mtls OR rt > 100")
        self.assertEqual(tuple(result.requests), (SECURITY_REQUEST, RESPONSE_TIME_REQUEST))
        self.assertEqual(result.selector.text, "edge[isMTLS > 0],edge[responseTime > 100]")

    def test_active_edge_label_mode_is_not_requested(self) -> None:
        flags = DisplayFlags(edge_labels=("responseTime",))
        self.assertEqual(tuple(compile_query("rt > 100", flags).requests), ())

    def test_idle(self) -> None:
        result = compile_query("idle")
        self.assertEqual(result.requests[0].option, "show_idle_nodes")
        self.assertEqual(tuple(compile_query("idle", DisplayFlags(show_idle_nodes=True)).requests), ())


class TestClauses(unittest.TestCase):
    def test_and_concatenates_predicates(self) -> None:
        self.assertEqual(_selector("app = reviews AND cb"), 'node[app = "reviews"][?hasCB]')
        self.assertEqual(_selector("http > 1 and rt < 200"), "edge[http > 1][responseTime < 200]")

    def test_or_produces_clauses(self) -> None:
        result = compile_query("dead OR healthy")
        self.assertEqual(result.selector.targets, ("node", "node"))
        self.assertEqual(result.selector.text, 'node[?isDead],node[healthStatus = "Healthy"]')

    def test_or_may_mix_targets(self) -> None:
        result = compile_query("cb OR http > 5")
        self.assertEqual(result.selector.targets, ("node", "edge"))

    def test_and_cannot_mix_targets(self) -> None:
        for value in ("app = foo AND httptraffic > 5", "app = foo AND %httptraffic > 5"):
            result = compile_query(value)
            self.assertEqual(result.error.message, "Invalid expression. Can not AND node and edge criteria.", value)

    def test_httptraffic_alias(self) -> None:
        self.assertEqual(_selector("httptraffic > 5"), "edge[httpPercentReq > 5]")

    def test_name_cannot_be_anded(self) -> None:
        for value in ("cb AND name = foo", "name = foo AND cb"):
            result = compile_query(value)
            self.assertEqual(result.error.message, "Can not use 'AND' with 'name' operand", value)

    def test_name_expands_over_name_attributes(self) -> None:
        self.assertEqual(
            _selector("name = foo"),
            'node[aggregateValue = "foo"],node[app = "foo"],node[service = "foo"],node[workload = "foo"]',
        )
        self.assertEqual(
            _selector("name != foo"),
            'node[aggregateValue != "foo"][app != "foo"][service != "foo"][workload != "foo"]',
        )

    def test_negated_alternatives_distribute_over_and(self) -> None:
        self.assertEqual(
            _selector("! healthy AND cb"),
            'node[healthStatus = "Failure"][?hasCB],node[healthStatus = "Degraded"][?hasCB]',
        )


class TestQueryCompiler(unittest.TestCase):
    def test_error_per_channel(self) -> None:
        compiler = QueryCompiler()
        compiler.compile("bogus", DisplayFlags(), channel="find")
        compiler.compile("cb", DisplayFlags(), channel="hide")
        self.assertEqual(compiler.error("find"), "Find: Invalid Node or Edge operand [bogus]")
        self.assertIsNone(compiler.error("hide"))

        compiler.compile("bogus", DisplayFlags(), channel="hide")
        self.assertEqual(compiler.error("hide"), "Hide: Invalid Node or Edge operand [bogus]")

    def test_success_clears_error(self) -> None:
        compiler = QueryCompiler()
        compiler.compile("bogus", DisplayFlags(), channel="find")
        compiler.compile("", DisplayFlags(), channel="find")
        self.assertIsNone(compiler.error("find"))

        compiler.compile("bogus", DisplayFlags(), channel="find")
        compiler.clear_error("find")
        self.assertIsNone(compiler.error("find"))


if __name__ == "__main__":
    unittest.main()
