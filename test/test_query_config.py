"""Tests for parsing YAML query definitions into expression trees."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SolrQuery.config import parse_node
from SolrQuery.config.query import parse_named_query
from SolrQuery.core import DisMaxQuery, Operator, TermQuery, render


class TestParseNode(unittest.TestCase):
    def test_term_leaf(self) -> None:
        node = parse_node(
            {"TERM": {"text": "solr", "field": "title", "boost": 3, "operator": "AND", "params": {"sow": "false"}}},
            "q",
        )
        self.assertIsInstance(node, TermQuery)
        self.assertEqual(node.default_field, "title")
        self.assertIs(node.default_operator, Operator.AND)
        self.assertEqual(
            render(node).query_string,
            "_query_:\"{!lucene q.op='AND' df='title' sow='false' v=$q0}\"^3",
        )

    def test_dismax_leaf(self) -> None:
        node = parse_node(
            {"DISMAX": {"text": "solr", "qf": {"all": 100, "title": 200}, "mm": "75%", "ps": 2}},
            "q",
        )
        self.assertIsInstance(node, DisMaxQuery)
        self.assertEqual(
            render(node).query_string,
            "_query_:\"{!dismax qf='all^100 title^200' mm='75%' ps='2' v=$q0}\"",
        )

    def test_and_folds_left_with_boost(self) -> None:
        node = parse_node(
            {
                "AND": [
                    {"TERM": {"text": "a1"}},
                    {"TERM": {"text": "b1"}},
                    {"TERM": {"text": "c1"}},
                ],
                "boost": 2,
            },
            "q",
        )
        self.assertEqual(
            render(node).query_string,
            '((_query_:"{!lucene v=$q0}" AND _query_:"{!lucene v=$q1}") AND _query_:"{!lucene v=$q2}")^2',
        )

    def test_unary_and_binary_not(self) -> None:
        unary = parse_node({"NOT": [{"TERM": {"text": "solr", "field": "title"}}]}, "q")
        self.assertEqual(render(unary).query_string, "(NOT _query_:\"{!lucene df='title' v=$q0}\")")
        binary = parse_node({"NOT": [{"TERM": {"text": "solr"}}, {"TERM": {"text": "apache"}}]}, "q")
        self.assertEqual(
            render(binary).query_string,
            '(_query_:"{!lucene v=$q0}" NOT _query_:"{!lucene v=$q1}")',
        )

    def test_node_needs_exactly_one_kind(self) -> None:
        with self.assertRaises(ValueError):
            parse_node({}, "q")
        with self.assertRaises(ValueError):
            parse_node({"TERM": {"text": "a"}, "DISMAX": {"text": "b"}}, "q")

    def test_boolean_arity_checked(self) -> None:
        with self.assertRaisesRegex(ValueError, "at least two"):
            parse_node({"OR": [{"TERM": {"text": "a"}}]}, "q")
        with self.assertRaisesRegex(ValueError, "one or two"):
            parse_node({"NOT": [{"TERM": {"text": "a"}}] * 3}, "q")

    def test_unknown_leaf_keys_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, r"q\.TERM has unknown keys"):
            parse_node({"TERM": {"text": "a", "qf": {"x": 1}}}, "q")

    def test_leaf_boost_not_allowed_as_sibling(self) -> None:
        with self.assertRaises(ValueError):
            parse_node({"TERM": {"text": "a"}, "boost": 2}, "q")

    def test_contract_errors_carry_key_path(self) -> None:
        with self.assertRaisesRegex(ValueError, r"q\.AND\[1\]\.TERM: default_operator"):
            parse_node({"AND": [{"TERM": {"text": "a"}}, {"TERM": {"text": "b", "operator": "NOT"}}]}, "q")

    def test_type_errors_carry_key_path(self) -> None:
        with self.assertRaisesRegex(TypeError, r"q\.TERM\.boost"):
            parse_node({"TERM": {"text": "a", "boost": "high"}}, "q")
        with self.assertRaisesRegex(TypeError, r"q\.OR must be a list"):
            parse_node({"OR": {"TERM": {"text": "a"}}}, "q")

    def test_missing_text(self) -> None:
        with self.assertRaisesRegex(ValueError, r"q\.DISMAX\.text"):
            parse_node({"DISMAX": {"qf": {"title": 1}}}, "q")


class TestNamedQuery(unittest.TestCase):
    def test_name_and_query_required(self) -> None:
        with self.assertRaisesRegex(ValueError, r"queries\[0\]\.name"):
            parse_named_query({"query": {"TERM": {"text": "a"}}}, "queries[0]")
        with self.assertRaisesRegex(ValueError, r"queries\[0\]\.query"):
            parse_named_query({"name": "x"}, "queries[0]")

    def test_unknown_keys_rejected(self) -> None:
        with self.assertRaises(ValueError):
            parse_named_query({"name": "x", "query": {"TERM": {"text": "a"}}, "rows": 3}, "queries[0]")


if __name__ == "__main__":
    unittest.main()
