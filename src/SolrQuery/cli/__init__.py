"""CLI package for SolrQuery: render configured queries or run them against Solr."""

from __future__ import annotations

__all__ = ["CommandRunner", "cli", "main"]

from SolrQuery.cli.runner import CommandRunner
from SolrQuery.cli.ui import cli


def main() -> None:
    """Run the SolrQuery CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
