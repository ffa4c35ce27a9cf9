"""Application config orchestration and YAML loading entrypoints."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from SolrQuery.config.query import NamedQuery, check_queries, load_queries
from SolrQuery.config.runtime import RuntimeConfig, check_runtime, load_runtime
from SolrQuery.config.solr import SolrConfig, check_solr, load_solr

DEFAULT_CONFIG_PATH = Path("config/default.yml")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application root configuration."""

    runtime: RuntimeConfig
    solr: SolrConfig
    queries: tuple[NamedQuery, ...]

    def find_query(self, name: str) -> NamedQuery:
        """Return the configured query called `name`.

        Raises:
            KeyError: If no query has that name.
        """
        for query in self.queries:
            if query.name == name:
                return query
        raise KeyError(name)


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Parse normalized mapping into AppConfig."""
    runtime = load_runtime(raw)
    solr = load_solr(raw)
    queries = load_queries(raw)

    check_runtime(runtime)
    check_solr(solr)
    check_queries(queries)

    return AppConfig(runtime=runtime, solr=solr, queries=queries)


def load_config(path: Path) -> AppConfig:
    """Load YAML config file without default merge."""
    return load_config_with_defaults(path, default_path=path)


def load_config_with_defaults(config_path: Path, default_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load config by merging an override file over the defaults."""
    base = parse_yaml(default_path.read_text(encoding="utf-8"))
    if config_path == default_path:
        return parse_config_dict(base)
    override = parse_yaml(config_path.read_text(encoding="utf-8"))
    return parse_config_dict(merge_config_dicts(base, override))


def parse_yaml(text: str) -> dict[str, Any]:
    """Parse raw YAML text into a mapping."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Config root must be a mapping/object")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two config mappings; lists (e.g. ``queries``) are replaced, not appended."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
