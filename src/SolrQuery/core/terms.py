"""Placeholder assignment for the search texts of an expression tree.

Raw search text never goes into the rendered ``q`` string. Every distinct text
gets a placeholder (``q0``, ``q1``, ...) that is sent as its own request
parameter and dereferenced by Solr through ``v=$qN``.

Numbering follows a pre-order walk (left operand before right), after
dropping repeated texts, so the same tree always yields the same mapping.
Leaves that share a text share its placeholder, which lets one value feed
several differently-parameterized leaves, e.g.::

    q=(_query_:"{!lucene df='author1' v=$q0}" OR _query_:"{!lucene df='author2' v=$q0}")&q0=smith
"""

from __future__ import annotations

from SolrQuery.core.nodes import ExpressionNode, LeafQuery, check_node

PLACEHOLDER_PREFIX = "q"


def collect_search_texts(node: ExpressionNode) -> list[str]:
    """Return the search text of every leaf under `node`, duplicates included.

    Raises:
        MalformedTreeError: If a node in the tree cannot be rendered.
    """
    check_node(node)
    if isinstance(node, LeafQuery):
        return [node.search_text]
    texts: list[str] = []
    if node.left is not None:
        texts.extend(collect_search_texts(node.left))
    texts.extend(collect_search_texts(node.right))
    return texts


def assign_placeholders(node: ExpressionNode) -> dict[str, str]:
    """Map each distinct search text under `node` to its placeholder.

    Returns:
        Mapping of search text to placeholder, in placeholder order.
    """
    placeholders: dict[str, str] = {}
    for text in collect_search_texts(node):
        if text not in placeholders:
            placeholders[text] = f"{PLACEHOLDER_PREFIX}{len(placeholders)}"
    return placeholders
