"""Query construction core.

Build an expression tree from `TermQuery` / `DisMaxQuery` leaves and the
`and_` / `or_` / `not_` / `and_not` combinators, then `render` it::

    >>> q = TermQuery("solr", "name", 3).and_(TermQuery("apache"))
    >>> render(q).parameters
    {'q': '(_query_:"{!lucene df=\\'name\\' v=$q0}"^3 AND _query_:"{!lucene v=$q1}")', 'q0': 'solr', 'q1': 'apache'}
"""

from __future__ import annotations

from SolrQuery.core.errors import InvalidArgumentError, MalformedTreeError, SolrQueryError
from SolrQuery.core.nodes import (
    BooleanNode,
    DisMaxParams,
    DisMaxQuery,
    ExpressionNode,
    LeafQuery,
    Operator,
    QueryType,
    TermQuery,
)
from SolrQuery.core.render import RenderedQuery, build_local_params, render, render_query_string
from SolrQuery.core.terms import assign_placeholders, collect_search_texts

__all__ = [
    "BooleanNode",
    "DisMaxParams",
    "DisMaxQuery",
    "ExpressionNode",
    "InvalidArgumentError",
    "LeafQuery",
    "MalformedTreeError",
    "Operator",
    "QueryType",
    "RenderedQuery",
    "SolrQueryError",
    "TermQuery",
    "assign_placeholders",
    "build_local_params",
    "collect_search_texts",
    "render",
    "render_query_string",
]
