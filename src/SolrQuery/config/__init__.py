"""Public configuration API for SolrQuery."""

from __future__ import annotations

from SolrQuery.config.app import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    load_config,
    load_config_with_defaults,
    merge_config_dicts,
    parse_config_dict,
    parse_yaml,
)
from SolrQuery.config.query import NamedQuery, parse_node
from SolrQuery.config.runtime import RuntimeConfig
from SolrQuery.config.solr import SolrConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AppConfig",
    "NamedQuery",
    "RuntimeConfig",
    "SolrConfig",
    "load_config",
    "load_config_with_defaults",
    "merge_config_dicts",
    "parse_config_dict",
    "parse_node",
    "parse_yaml",
]
