"""Query definitions in YAML and their parsing into expression trees.

Each entry of ``queries`` has a ``name`` and a ``query`` node. A node is a
mapping with exactly one of these keys:

- ``TERM``: ``{text, field?, operator?, boost?, params?}`` -> `TermQuery`
- ``DISMAX``: ``{text, qf?, pf?, boost?, mm?, tie?, ps?, qs?, bf?, bq?, params?}``
  -> `DisMaxQuery`
- ``AND`` / ``OR``: list of two or more nodes, folded left
  (``[a, b, c]`` -> ``((a AND b) AND c)``)
- ``NOT``: one node (``(NOT a)``) or two nodes (``(a NOT b)``)

Boolean nodes may carry a sibling ``boost`` key.

Example::

    queries:
      - name: solr-by-name
        query:
          AND:
            - TERM: {text: solr, field: name, boost: 3}
            - TERM: {text: apache}
          boost: 10
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from SolrQuery.config.common import (
    expect_list,
    expect_mapping,
    expect_number,
    expect_str,
    expect_str_or_str_list,
    get_required_value,
)
from SolrQuery.core.errors import InvalidArgumentError
from SolrQuery.core.nodes import DisMaxParams, DisMaxQuery, ExpressionNode, Operator, TermQuery

_LEAF_KEYS = ("TERM", "DISMAX")
_BOOLEAN_KEYS = tuple(op.value for op in Operator)
_TERM_FIELDS = {"text", "field", "operator", "boost", "params"}
_DISMAX_FIELDS = {"text", "qf", "pf", "boost", "mm", "tie", "ps", "qs", "bf", "bq", "params"}


@dataclass(frozen=True, slots=True)
class NamedQuery:
    """A configured query: display name plus expression tree."""

    name: str
    node: ExpressionNode


def load_queries(raw: Mapping[str, Any]) -> tuple[NamedQuery, ...]:
    """Load the ``queries`` list.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing or nodes are invalid.
    """
    items = expect_list(raw.get("queries", []), "queries")
    return tuple(parse_named_query(item, f"queries[{idx}]") for idx, item in enumerate(items))


def check_queries(queries: tuple[NamedQuery, ...]) -> None:
    """Validate cross-query constraints.

    Raises:
        ValueError: If query names are duplicated.
    """
    seen: set[str] = set()
    for query in queries:
        if query.name in seen:
            raise ValueError(f"queries has duplicate name: {query.name}")
        seen.add(query.name)


def parse_named_query(value: Any, config_key: str) -> NamedQuery:
    """Parse one ``{name, query}`` entry."""
    section = expect_mapping(value, config_key)
    unknown = set(section) - {"name", "query"}
    if unknown:
        raise ValueError(f"{config_key} has unknown keys: {sorted(unknown)}")
    name = expect_str(get_required_value(section, "name", f"{config_key}.name"), f"{config_key}.name").strip()
    if not name:
        raise ValueError(f"{config_key}.name must not be empty")
    node = parse_node(get_required_value(section, "query", f"{config_key}.query"), f"{config_key}.query")
    return NamedQuery(name=name, node=node)


def parse_node(value: Any, config_key: str) -> ExpressionNode:
    """Parse a query node mapping into an expression tree.

    Raises:
        TypeError: If node types are invalid.
        ValueError: If the node shape or any value is invalid.
    """
    section = expect_mapping(value, config_key)
    kinds = [key for key in section if key in _LEAF_KEYS or key in _BOOLEAN_KEYS]
    if len(kinds) != 1:
        raise ValueError(
            f"{config_key} must have exactly one of {list(_LEAF_KEYS + _BOOLEAN_KEYS)}, got {sorted(map(str, section))}"
        )
    kind = kinds[0]
    allowed_extra = {"boost"} if kind in _BOOLEAN_KEYS else set()
    unknown = set(section) - {kind} - allowed_extra
    if unknown:
        raise ValueError(f"{config_key} has unknown keys: {sorted(map(str, unknown))}")

    key = f"{config_key}.{kind}"
    try:
        if kind == "TERM":
            return _parse_term(section[kind], key)
        if kind == "DISMAX":
            return _parse_dismax(section[kind], key)
        node = _parse_boolean(Operator(kind), section[kind], key)
        if "boost" in section:
            node.boost = expect_number(section["boost"], f"{config_key}.boost")
        return node
    except InvalidArgumentError as e:
        raise ValueError(f"{key}: {e}") from e


def _parse_boolean(operator: Operator, value: Any, config_key: str) -> ExpressionNode:
    items = expect_list(value, config_key)
    children = [parse_node(item, f"{config_key}[{idx}]") for idx, item in enumerate(items)]

    if operator is Operator.NOT:
        if len(children) == 1:
            return children[0].not_()
        if len(children) == 2:
            return children[0].and_not(children[1])
        raise ValueError(f"{config_key} must list one or two nodes")

    if len(children) < 2:
        raise ValueError(f"{config_key} must list at least two nodes")
    node = children[0]
    for child in children[1:]:
        node = node.and_(child) if operator is Operator.AND else node.or_(child)
    return node


def _parse_term(value: Any, config_key: str) -> TermQuery:
    section = _leaf_section(value, config_key, _TERM_FIELDS)
    return TermQuery(
        expect_str_or_str_list(get_required_value(section, "text", f"{config_key}.text"), f"{config_key}.text"),
        _optional_str(section, "field", config_key),
        _optional_number(section, "boost", config_key),
        default_operator=_optional_str(section, "operator", config_key),
        local_params=_params(section, config_key),
    )


def _parse_dismax(value: Any, config_key: str) -> DisMaxQuery:
    section = _leaf_section(value, config_key, _DISMAX_FIELDS)
    params = DisMaxParams(
        mm=section.get("mm"),
        tie=_optional_number(section, "tie", config_key),
        ps=section.get("ps"),
        qs=section.get("qs"),
        bf=_optional_str(section, "bf", config_key),
        bq=_optional_str(section, "bq", config_key),
    )
    return DisMaxQuery(
        expect_str_or_str_list(get_required_value(section, "text", f"{config_key}.text"), f"{config_key}.text"),
        _weights(section, "qf", config_key),
        _weights(section, "pf", config_key),
        _optional_number(section, "boost", config_key),
        params=params,
        local_params=_params(section, config_key),
    )


def _leaf_section(value: Any, config_key: str, allowed: set[str]) -> Mapping[str, Any]:
    section = expect_mapping(value, config_key)
    unknown = {str(k) for k in section} - allowed
    if unknown:
        raise ValueError(f"{config_key} has unknown keys: {sorted(unknown)}")
    return section


def _optional_str(section: Mapping[str, Any], field: str, config_key: str) -> str | None:
    value = section.get(field)
    return None if value is None else expect_str(value, f"{config_key}.{field}")


def _optional_number(section: Mapping[str, Any], field: str, config_key: str) -> int | float | None:
    value = section.get(field)
    return None if value is None else expect_number(value, f"{config_key}.{field}")


def _weights(section: Mapping[str, Any], field: str, config_key: str) -> dict[str, int | float]:
    mapping = expect_mapping(section.get(field) or {}, f"{config_key}.{field}")
    return {
        expect_str(name, f"{config_key}.{field} field"): expect_number(weight, f"{config_key}.{field}.{name}")
        for name, weight in mapping.items()
    }


def _params(section: Mapping[str, Any], config_key: str) -> dict[str, Any]:
    return dict(expect_mapping(section.get("params") or {}, f"{config_key}.params"))
