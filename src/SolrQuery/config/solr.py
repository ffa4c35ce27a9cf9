"""Solr connection configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from SolrQuery.config.common import (
    expect_int,
    expect_number,
    expect_str,
    get_required_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class SolrConfig:
    """Store validated Solr endpoint settings.

    Attributes:
        base_url: Solr base URL, e.g. ``http://localhost:8983/solr``.
        collection: Collection (or core) to query.
        handler: Request handler path, usually ``select``.
        timeout: Request timeout in seconds.
        max_attempts: Attempts per request, including the first one.
        rows: Default number of documents per search.
        auth_token_env: Name of the environment variable holding a bearer token.
        auth_token: Token value read from `auth_token_env` (empty when unset).
    """

    base_url: str
    collection: str
    handler: str
    timeout: float
    max_attempts: int
    rows: int
    auth_token_env: str
    auth_token: str


def load_solr(raw: Mapping[str, Any]) -> SolrConfig:
    """Load the ``solr`` section.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    section = get_section(raw, "solr", required=True)
    auth_token_env = expect_str(section.get("auth_token_env", ""), "solr.auth_token_env").strip()
    return SolrConfig(
        base_url=expect_str(get_required_value(section, "base_url", "solr.base_url"), "solr.base_url").strip(),
        collection=expect_str(
            get_required_value(section, "collection", "solr.collection"),
            "solr.collection",
        ).strip(),
        handler=expect_str(section.get("handler", "select"), "solr.handler").strip(),
        timeout=float(expect_number(section.get("timeout", 30), "solr.timeout")),
        max_attempts=expect_int(section.get("max_attempts", 4), "solr.max_attempts"),
        rows=expect_int(section.get("rows", 10), "solr.rows"),
        auth_token_env=auth_token_env,
        auth_token=_load_token_from_env(auth_token_env),
    )


def check_solr(config: SolrConfig) -> None:
    """Validate Solr domain constraints.

    Raises:
        ValueError: If values violate Solr constraints.
    """
    if not config.base_url.startswith(("http://", "https://")):
        raise ValueError("solr.base_url must start with http:// or https://")
    if not config.collection:
        raise ValueError("solr.collection must not be empty")
    if not config.handler:
        raise ValueError("solr.handler must not be empty")
    if config.timeout <= 0:
        raise ValueError("solr.timeout must be positive")
    if config.max_attempts <= 0:
        raise ValueError("solr.max_attempts must be positive")
    if config.rows < 0:
        raise ValueError("solr.rows must be zero or positive")


def _load_token_from_env(name: str) -> str:
    """Load the auth token from an environment variable."""
    if not name:
        return ""
    return os.getenv(name, "").strip()
