"""Command runner for coordinating CLI execution.

Manages logging configuration, query selection, client lifecycle and error
handling for command execution.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence

import click

from SolrQuery.config import AppConfig, NamedQuery
from SolrQuery.core.render import render
from SolrQuery.transport.client import SolrClient
from SolrQuery.transport.url import build_request_url
from SolrQuery.utils.log import configure_logging, log


class CommandRunner:
    """Orchestrates command execution with proper resource management."""

    def __init__(
        self,
        config: AppConfig,
        *,
        client_factory: Callable[[AppConfig], SolrClient] | None = None,
    ) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
            client_factory: Builds the Solr client; replaced in tests.
        """
        self.config = config
        self._client_factory = client_factory or (lambda cfg: SolrClient.from_config(cfg.solr))

    def run_render(self, *, action: str, names: Sequence[str] = (), as_url: bool = False) -> None:
        """Print rendered parameters (or request URLs) of the selected queries.

        Raises:
            click.Abort: When rendering fails.
        """
        self._configure_logging(action)
        try:
            for query in self.select_queries(names):
                rendered = render(query.node)
                log.debug("Rendered query %s: %s", query.name, rendered.query_string)
                if as_url:
                    solr = self.config.solr
                    click.echo(build_request_url(solr.base_url, solr.collection, solr.handler, rendered.parameters))
                else:
                    click.echo(json.dumps({"name": query.name, "params": dict(rendered.parameters)}, ensure_ascii=False))
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Render failed: %s", e)
            raise click.Abort from e

    def run_search(self, *, action: str, names: Sequence[str] = (), rows: int | None = None) -> None:
        """Run the selected queries against Solr and print each JSON response.

        Raises:
            click.Abort: When a query or request fails.
        """
        self._configure_logging(action)
        rows = self.config.solr.rows if rows is None else rows
        try:
            queries = self.select_queries(names)
            with self._client_factory(self.config) as client:
                for idx, query in enumerate(queries, start=1):
                    log.info("=== Query %d/%d: %s ===", idx, len(queries), query.name)
                    body = client.select(query.node, rows=rows)
                    click.echo(json.dumps({"name": query.name, "response": body}, ensure_ascii=False))
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Search failed: %s", e)
            raise click.Abort from e

    def select_queries(self, names: Sequence[str]) -> list[NamedQuery]:
        """Return the queries named in `names`, or every configured query when empty.

        Raises:
            ValueError: If a name is unknown or nothing is configured.
        """
        if not names:
            if not self.config.queries:
                raise ValueError("No queries configured")
            return list(self.config.queries)
        selected: list[NamedQuery] = []
        for name in names:
            try:
                selected.append(self.config.find_query(name))
            except KeyError:
                raise ValueError(f"Unknown query name: {name}") from None
        return selected

    def _configure_logging(self, action: str) -> None:
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
