"""Exception types raised by query construction and rendering."""

from __future__ import annotations


class SolrQueryError(Exception):
    """Base class for all SolrQuery errors."""


class InvalidArgumentError(SolrQueryError, ValueError):
    """A call violated a construction contract.

    Raised synchronously at the offending call, e.g. setting a default
    operator other than AND/OR or combining a node with a missing operand.
    """


class MalformedTreeError(SolrQueryError):
    """The renderer met a node whose shape cannot be serialized.

    Only reachable when a tree was assembled around the public constructors.
    """
