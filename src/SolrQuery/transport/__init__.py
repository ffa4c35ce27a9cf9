"""Transport collaborators for rendered queries.

The query core produces a plain parameter mapping; this package encodes it
into a URL and sends it to Solr.
"""

from __future__ import annotations

from SolrQuery.transport.client import SolrClient
from SolrQuery.transport.url import build_request_url, encode_parameters, endpoint_url

__all__ = [
    "SolrClient",
    "build_request_url",
    "encode_parameters",
    "endpoint_url",
]
