"""URL encoding of rendered query parameters."""

from __future__ import annotations

from typing import Mapping
from urllib.parse import quote, urlencode


def encode_parameters(parameters: Mapping[str, str]) -> str:
    """Encode a parameter mapping as ``key=value`` pairs joined by ``&``.

    Each value is percent-encoded on its own; spaces become ``%20``.

    Args:
        parameters: Output of ``render(...).parameters`` plus any extra params.

    Returns:
        Encoded query string without a leading ``?``.
    """
    return urlencode(list(parameters.items()), quote_via=quote, safe="")


def build_request_url(
    base_url: str,
    collection: str,
    handler: str,
    parameters: Mapping[str, str],
) -> str:
    """Build a full request URL such as ``http://host:8983/solr/books/select?q=...``."""
    return f"{endpoint_url(base_url, collection, handler)}?{encode_parameters(parameters)}"


def endpoint_url(base_url: str, collection: str, handler: str) -> str:
    """Join base URL, collection and request handler into one endpoint URL."""
    parts = [base_url.rstrip("/"), collection.strip("/"), handler.strip("/")]
    return "/".join(part for part in parts if part)
