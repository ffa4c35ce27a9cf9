"""Expression tree for Solr queries.

A tree is built from two kinds of node:

- `BooleanNode` joins one or two child nodes with AND / OR / NOT.
- `LeafQuery` carries raw search text plus the local parameters of one query
  parser. `TermQuery` targets the ``lucene`` parser and `DisMaxQuery` the
  ``dismax`` parser; the parser is named by the leaf's `QueryType` tag.

Nodes are created by constructors and combined with `and_`, `or_`, `not_`
and `and_not`. Combining never touches the operands, so a node can be shared
by several trees at once.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from SolrQuery.core.errors import InvalidArgumentError, MalformedTreeError

if TYPE_CHECKING:
    from SolrQuery.core.render import RenderedQuery

Number = int | float | Decimal

# Characters that end or escape a quoted local-param value.
_QUOTES = ("'", '"', "\\")


class Operator(str, Enum):
    """Boolean operators understood by the standard query parser."""

    AND = "AND"
    OR = "OR"
    NOT = "NOT"


class QueryType(str, Enum):
    """Query parser a leaf is rendered for (the ``{!type ...}`` prefix)."""

    LUCENE = "lucene"
    DISMAX = "dismax"


def format_number(value: Number) -> str:
    """Format a boost or weight the way Solr expects it.

    Integral values lose their fractional part (``3.0`` -> ``3``) and the
    result is always positional: the query parser has no exponent syntax, so
    ``1e-05`` is written ``0.00001``.
    """
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        value = Decimal(repr(value))
    return format(value.normalize(), "f")


def _check_positive_number(value: Any, name: str) -> Number:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidArgumentError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidArgumentError(f"{name} must be a positive finite number, got {value!r}")
    return value


def _check_token(value: Any, name: str) -> str:
    """Validate a field name or parameter key used verbatim in the query string."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} must be a non-empty string, got {value!r}")
    if any(ch.isspace() for ch in value) or any(ch in value for ch in (*_QUOTES, "^", "=", "{", "}")):
        raise InvalidArgumentError(f"{name} contains characters not allowed in local params: {value!r}")
    return value


def _check_param_value(value: Any, name: str) -> str:
    """Validate a local-param value and return its rendered form."""
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be a string or number, got {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return format_number(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} must be a non-empty string, got {value!r}")
    if any(quote in value for quote in _QUOTES):
        raise InvalidArgumentError(f"{name} must not contain quote or backslash characters: {value!r}")
    return value


def _check_operand(value: Any, operator: Operator) -> ExpressionNode:
    if value is None:
        raise InvalidArgumentError(f"{operator.value} requires an operand")
    if not isinstance(value, ExpressionNode):
        raise InvalidArgumentError(
            f"{operator.value} operand must be an ExpressionNode, got {type(value).__name__}"
        )
    return value


class ExpressionNode:
    """Common behaviour of every node: boost and the boolean combinators."""

    def __init__(self, boost: Number | None = None) -> None:
        self.boost = boost

    @property
    def boost(self) -> Number | None:
        """Relevance multiplier applied to this node, rendered as ``^boost``."""
        return self._boost

    @boost.setter
    def boost(self, value: Number | None) -> None:
        self._boost = None if value is None else _check_positive_number(value, "boost")

    def and_(self, other: ExpressionNode) -> BooleanNode:
        """Return ``(self AND other)``."""
        return BooleanNode(Operator.AND, _check_operand(other, Operator.AND), left=self)

    def or_(self, other: ExpressionNode) -> BooleanNode:
        """Return ``(self OR other)``."""
        return BooleanNode(Operator.OR, _check_operand(other, Operator.OR), left=self)

    def not_(self, other: ExpressionNode | None = None) -> BooleanNode:
        """Return ``(NOT self)``, or ``(self NOT other)`` when `other` is given."""
        if other is None:
            return BooleanNode(Operator.NOT, self)
        return self.and_not(other)

    def and_not(self, other: ExpressionNode) -> BooleanNode:
        """Return ``(self NOT other)``: match self, excluding other."""
        return BooleanNode(Operator.NOT, _check_operand(other, Operator.NOT), left=self)

    def render(self) -> RenderedQuery:
        """Render this node into Solr request parameters."""
        from SolrQuery.core.render import render

        return render(self)


class BooleanNode(ExpressionNode):
    """Internal node joining child expressions with an operator.

    AND / OR always have both operands. NOT is either unary (``(NOT right)``)
    or binary (``(left NOT right)``).
    """

    def __init__(
        self,
        operator: Operator | str,
        right: ExpressionNode,
        *,
        left: ExpressionNode | None = None,
        boost: Number | None = None,
    ) -> None:
        super().__init__(boost)
        try:
            op = Operator(operator)
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown boolean operator: {operator!r}") from e
        self._right = _check_operand(right, op)
        if left is None:
            if op is not Operator.NOT:
                raise InvalidArgumentError(f"{op.value} requires a left operand")
            self._left = None
        else:
            self._left = _check_operand(left, op)
        self._operator = op

    @property
    def operator(self) -> Operator:
        return self._operator

    @property
    def left(self) -> ExpressionNode | None:
        return self._left

    @property
    def right(self) -> ExpressionNode:
        return self._right

    @property
    def is_unary(self) -> bool:
        return self._left is None

    def __repr__(self) -> str:
        return (
            f"BooleanNode({self._operator.value}, left={self._left!r}, "
            f"right={self._right!r}, boost={self.boost!r})"
        )


def _normalize_search_text(value: Any) -> str:
    if isinstance(value, str):
        text = value
    elif isinstance(value, Sequence) and all(isinstance(item, str) for item in value):
        text = " ".join(value)
    else:
        raise InvalidArgumentError(f"search_text must be a string or list of strings, got {value!r}")
    if not text.strip():
        raise InvalidArgumentError("search_text must not be empty")
    return text


class LeafQuery(ExpressionNode):
    """A query against one parser, with no boolean sub-structure.

    The raw search text is never written into the rendered ``q`` string; the
    renderer refers to it through a ``$qN`` placeholder instead.

    Extra local params (``set_local_param``) are rendered after the params the
    variant computes itself. Keys the variant computes are reserved.

    Only the concrete variants can be instantiated.
    """

    query_type: QueryType
    reserved_params: frozenset[str] = frozenset()

    def __init__(
        self,
        search_text: str | Sequence[str],
        *,
        boost: Number | None = None,
        local_params: Mapping[str, Any] | None = None,
    ) -> None:
        if type(self) is LeafQuery:
            raise TypeError("LeafQuery is abstract; use TermQuery or DisMaxQuery")
        super().__init__(boost)
        self.search_text = search_text
        self._local_params: dict[str, str] = {}
        for key, value in (local_params or {}).items():
            self.set_local_param(key, value)

    @property
    def search_text(self) -> str:
        return self._search_text

    @search_text.setter
    def search_text(self, value: str | Sequence[str]) -> None:
        self._search_text = _normalize_search_text(value)

    @property
    def local_params(self) -> Mapping[str, str]:
        """Read-only view of the caller-supplied local params."""
        return MappingProxyType(self._local_params)

    def set_local_param(self, key: str, value: Any) -> None:
        """Attach an extra ``key='value'`` local param to this leaf.

        Raises:
            InvalidArgumentError: If the key is reserved or either side holds
                characters that would break the local-params block.
        """
        key = _check_token(key, "local param key")
        if key in ("v", "type") or key in self.reserved_params:
            raise InvalidArgumentError(
                f"local param {key!r} is managed by {type(self).__name__} and cannot be set directly"
            )
        self._local_params[key] = _check_param_value(value, f"local param {key!r}")

    def remove_local_param(self, key: str) -> None:
        self._local_params.pop(key, None)


class TermQuery(LeafQuery):
    """Free-text query for the ``lucene`` parser.

    Args:
        search_text: Raw query text (a list of strings is joined with spaces).
        default_field: Field searched when the text names none (``df``).
        boost: Optional relevance multiplier.
        default_operator: Operator between bare terms (``q.op``), AND or OR.
        local_params: Extra local params rendered after ``q.op``/``df``.
    """

    query_type = QueryType.LUCENE
    reserved_params = frozenset({"df", "q.op"})

    def __init__(
        self,
        search_text: str | Sequence[str],
        default_field: str | None = None,
        boost: Number | None = None,
        *,
        default_operator: Operator | str | None = None,
        local_params: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(search_text, boost=boost, local_params=local_params)
        self.default_field = default_field
        self.default_operator = default_operator

    @property
    def default_field(self) -> str | None:
        return self._default_field

    @default_field.setter
    def default_field(self, value: str | None) -> None:
        self._default_field = None if value is None else _check_token(value, "default_field")

    @property
    def default_operator(self) -> Operator | None:
        return self._default_operator

    @default_operator.setter
    def default_operator(self, value: Operator | str | None) -> None:
        if value is None:
            self._default_operator = None
            return
        if value not in (Operator.AND, Operator.OR):
            raise InvalidArgumentError(f"default_operator must be 'AND' or 'OR', got {value!r}")
        self._default_operator = Operator(value)

    def __repr__(self) -> str:
        return (
            f"TermQuery({self.search_text!r}, default_field={self.default_field!r}, "
            f"boost={self.boost!r}, default_operator={self.default_operator!r})"
        )


@dataclass(frozen=True, slots=True)
class DisMaxParams:
    """Tuning knobs of the ``dismax`` parser.

    Attributes:
        mm: Minimum-should-match, e.g. ``"75%"`` or ``2``.
        tie: Tie-breaker between field scores, in ``[0, 1]``.
        ps: Phrase slop applied to ``pf`` fields.
        qs: Query slop for phrases in the search text.
        bf: Boost function.
        bq: Boost query.
    """

    mm: str | int | None = None
    tie: float | None = None
    ps: int | None = None
    qs: int | None = None
    bf: str | None = None
    bq: str | None = None

    def __post_init__(self) -> None:
        if self.mm is not None:
            _check_param_value(self.mm, "mm")
            if isinstance(self.mm, (float, Decimal)):
                raise InvalidArgumentError(f"mm must be a string or integer, got {self.mm!r}")
        if self.tie is not None:
            if isinstance(self.tie, bool) or not isinstance(self.tie, (int, float, Decimal)):
                raise InvalidArgumentError(f"tie must be a number, got {self.tie!r}")
            if not 0 <= self.tie <= 1:
                raise InvalidArgumentError(f"tie must be between 0 and 1, got {self.tie!r}")
        for name in ("ps", "qs"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidArgumentError(f"{name} must be a non-negative integer, got {value!r}")
        for name in ("bf", "bq"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise InvalidArgumentError(f"{name} must be a string, got {value!r}")
            if value is not None:
                _check_param_value(value, name)

    def items(self) -> list[tuple[str, str]]:
        """Return the knobs that are set, in declaration order, rendered as strings."""
        out: list[tuple[str, str]] = []
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                out.append((f.name, _check_param_value(value, f.name)))
        return out


def _check_weights(value: Mapping[str, Any] | None, name: str) -> dict[str, Number]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidArgumentError(f"{name} must be a mapping of field to weight, got {value!r}")
    return {
        _check_token(field, f"{name} field"): _check_positive_number(weight, f"{name}[{field!r}]")
        for field, weight in value.items()
    }


class DisMaxQuery(LeafQuery):
    """Weighted multi-field query for the ``dismax`` parser.

    Args:
        search_text: Raw query text.
        field_weights: Field to weight mapping rendered as ``qf``.
        phrase_field_weights: Field to weight mapping rendered as ``pf``.
        boost: Optional relevance multiplier.
        params: Additional dismax knobs (``mm``, ``tie``, ...).
        local_params: Extra local params rendered after the dismax ones.
    """

    query_type = QueryType.DISMAX
    reserved_params = frozenset({"qf", "pf", *(f.name for f in fields(DisMaxParams))})

    def __init__(
        self,
        search_text: str | Sequence[str],
        field_weights: Mapping[str, Number] | None = None,
        phrase_field_weights: Mapping[str, Number] | None = None,
        boost: Number | None = None,
        *,
        params: DisMaxParams | None = None,
        local_params: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(search_text, boost=boost, local_params=local_params)
        self.field_weights = field_weights
        self.phrase_field_weights = phrase_field_weights
        self.params = params

    @property
    def field_weights(self) -> Mapping[str, Number]:
        return MappingProxyType(self._field_weights)

    @field_weights.setter
    def field_weights(self, value: Mapping[str, Number] | None) -> None:
        self._field_weights = _check_weights(value, "field_weights")

    @property
    def phrase_field_weights(self) -> Mapping[str, Number]:
        return MappingProxyType(self._phrase_field_weights)

    @phrase_field_weights.setter
    def phrase_field_weights(self, value: Mapping[str, Number] | None) -> None:
        self._phrase_field_weights = _check_weights(value, "phrase_field_weights")

    def set_field_weight(self, field: str, weight: Number) -> None:
        self._field_weights.update(_check_weights({field: weight}, "field_weights"))

    def set_phrase_field_weight(self, field: str, weight: Number) -> None:
        self._phrase_field_weights.update(_check_weights({field: weight}, "phrase_field_weights"))

    @property
    def params(self) -> DisMaxParams:
        return self._params

    @params.setter
    def params(self, value: DisMaxParams | None) -> None:
        if value is None:
            value = DisMaxParams()
        if not isinstance(value, DisMaxParams):
            raise InvalidArgumentError(f"params must be DisMaxParams, got {type(value).__name__}")
        self._params = value

    def __repr__(self) -> str:
        return (
            f"DisMaxQuery({self.search_text!r}, field_weights={dict(self._field_weights)!r}, "
            f"phrase_field_weights={dict(self._phrase_field_weights)!r}, boost={self.boost!r}, "
            f"params={self._params!r})"
        )


def check_node(node: object) -> None:
    """Verify that `node` has a shape the renderer can serialize.

    Raises:
        MalformedTreeError: If the node is neither a well-formed `BooleanNode`
            nor a `LeafQuery`.
    """
    if isinstance(node, BooleanNode):
        operator = getattr(node, "_operator", None)
        if not isinstance(operator, Operator):
            raise MalformedTreeError(f"Boolean node has no valid operator: {operator!r}")
        right = getattr(node, "_right", None)
        left = getattr(node, "_left", None)
        if right is None:
            raise MalformedTreeError(f"{operator.value} node has no right operand")
        if left is None and operator is not Operator.NOT:
            raise MalformedTreeError(f"{operator.value} node has no left operand")
        for child in (left, right):
            if child is not None and not isinstance(child, ExpressionNode):
                raise MalformedTreeError(f"{operator.value} node has a non-node operand: {child!r}")
    elif isinstance(node, LeafQuery):
        if getattr(node, "operator", None) is not None:
            raise MalformedTreeError(f"Leaf query carries an operator: {node!r}")
        if not isinstance(getattr(node, "query_type", None), QueryType):
            raise MalformedTreeError(f"Leaf query has no query type: {type(node).__name__}")
    else:
        raise MalformedTreeError(f"Not an expression node: {type(node).__name__}")
