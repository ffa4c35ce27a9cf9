"""Render expression trees into Solr request parameters.

Rendering grammar:

- leaf:       ``_query_:"{!<type>[ key='value' ...] v=$<placeholder>}"[^boost]``
- AND / OR:   ``(<left> <OP> <right>)[^boost]``
- unary NOT:  ``(NOT <right>)[^boost]``
- binary NOT: ``(<left> NOT <right>)[^boost]``

The result is a flat ``{"q": ..., "q0": ..., "q1": ...}`` mapping; encoding
and sending it is left to the transport layer.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Mapping

from SolrQuery.core.errors import MalformedTreeError
from SolrQuery.core.nodes import (
    DisMaxQuery,
    ExpressionNode,
    LeafQuery,
    Number,
    QueryType,
    TermQuery,
    check_node,
    format_number,
)
from SolrQuery.core.terms import assign_placeholders
from SolrQuery.utils.log import log


@dataclass(frozen=True, slots=True)
class RenderedQuery:
    """Output of `render`.

    Attributes:
        query_string: The ``q`` value, holding placeholders instead of text.
        parameters: ``q`` plus one entry per placeholder, ready for transport.
    """

    query_string: str
    parameters: Mapping[str, str]


def render(node: ExpressionNode) -> RenderedQuery:
    """Render `node` into its query string and request parameters.

    Args:
        node: Root of the expression tree.

    Returns:
        The rendered query.

    Raises:
        MalformedTreeError: If the tree contains a node that cannot be rendered.
    """
    placeholders = assign_placeholders(node)
    query_string = render_query_string(node, placeholders)

    parameters: dict[str, str] = {"q": query_string}
    for text, placeholder in placeholders.items():
        parameters[placeholder] = text

    log.debug("Rendered query with %d term(s): q=%s", len(placeholders), query_string)
    return RenderedQuery(query_string=query_string, parameters=parameters)


def render_query_string(node: ExpressionNode, placeholders: Mapping[str, str]) -> str:
    """Recursively render `node`, replacing search texts by placeholders."""
    check_node(node)
    if isinstance(node, LeafQuery):
        body = _render_leaf(node, placeholders)
    elif node.left is None:
        body = f"({node.operator.value} {render_query_string(node.right, placeholders)})"
    else:
        left = render_query_string(node.left, placeholders)
        right = render_query_string(node.right, placeholders)
        body = f"({left} {node.operator.value} {right})"
    return body + _boost_suffix(node.boost)


def build_local_params(leaf: LeafQuery) -> dict[str, str]:
    """Compute the local params of `leaf` for one render.

    A fresh mapping is returned each time; the leaf itself is not modified.
    """
    builder = _LOCAL_PARAM_BUILDERS.get(leaf.query_type)
    if builder is None:
        raise MalformedTreeError(f"No renderer for query type: {leaf.query_type!r}")
    params = builder(leaf)
    for key, value in leaf.local_params.items():
        params.setdefault(key, value)
    return params


def _render_leaf(leaf: LeafQuery, placeholders: Mapping[str, str]) -> str:
    placeholder = placeholders.get(leaf.search_text)
    if placeholder is None:
        raise MalformedTreeError(f"No placeholder assigned to the search text of {leaf!r}")
    args = "".join(f" {key}='{value}'" for key, value in build_local_params(leaf).items())
    return f'_query_:"{{!{leaf.query_type.value}{args} v=${placeholder}}}"'


def _boost_suffix(boost: Number | None) -> str:
    return "" if boost is None else f"^{format_number(boost)}"


def _weights(weights: Mapping[str, Number]) -> str:
    return " ".join(f"{field}^{format_number(weight)}" for field, weight in weights.items())


def _lucene_params(leaf: TermQuery) -> dict[str, str]:
    params: dict[str, str] = {}
    if leaf.default_operator is not None:
        params["q.op"] = leaf.default_operator.value
    if leaf.default_field is not None:
        params["df"] = leaf.default_field
    return params


def _dismax_params(leaf: DisMaxQuery) -> dict[str, str]:
    params: dict[str, str] = {}
    if leaf.field_weights:
        params["qf"] = _weights(leaf.field_weights)
    if leaf.phrase_field_weights:
        params["pf"] = _weights(leaf.phrase_field_weights)
    params.update(leaf.params.items())
    return params


_LOCAL_PARAM_BUILDERS: dict[QueryType, Callable[..., dict[str, str]]] = {
    QueryType.LUCENE: _lucene_params,
    QueryType.DISMAX: _dismax_params,
}
