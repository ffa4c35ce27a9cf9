"""Tests for search-text collection and placeholder assignment."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SolrQuery.core import DisMaxQuery, TermQuery, assign_placeholders, collect_search_texts


class TestTermRegistry(unittest.TestCase):
    def test_single_leaf(self) -> None:
        self.assertEqual(assign_placeholders(TermQuery("solr")), {"solr": "q0"})

    def test_collection_is_pre_order_left_first(self) -> None:
        a, b, c, d = (TermQuery(t) for t in ("a1", "b1", "c1", "d1"))
        tree = a.and_(b).or_(c.and_not(d))
        self.assertEqual(collect_search_texts(tree), ["a1", "b1", "c1", "d1"])

    def test_unary_not_child_is_counted(self) -> None:
        tree = TermQuery("solr").and_(TermQuery("apache").not_())
        self.assertEqual(collect_search_texts(tree), ["solr", "apache"])

    def test_duplicates_kept_when_collecting(self) -> None:
        tree = TermQuery("solr", "title").or_(DisMaxQuery("solr", {"body": 1}))
        self.assertEqual(collect_search_texts(tree), ["solr", "solr"])

    def test_dedup_preserves_first_occurrence_order(self) -> None:
        tree = TermQuery("b1").and_(TermQuery("a1")).or_(TermQuery("b1", "title").and_(TermQuery("c1")))
        self.assertEqual(assign_placeholders(tree), {"b1": "q0", "a1": "q1", "c1": "q2"})

    def test_assignment_is_deterministic(self) -> None:
        tree = TermQuery("x1").or_(TermQuery("y1")).and_(TermQuery("x1"))
        self.assertEqual(assign_placeholders(tree), assign_placeholders(tree))
        self.assertEqual(list(assign_placeholders(tree).values()), ["q0", "q1"])

    def test_placeholders_not_stored_on_nodes(self) -> None:
        leaf = TermQuery("solr")
        assign_placeholders(TermQuery("other").and_(leaf))
        self.assertEqual(assign_placeholders(leaf), {"solr": "q0"})


if __name__ == "__main__":
    unittest.main()
