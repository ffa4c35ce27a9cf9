"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to their respective runners.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from SolrQuery.cli.runner import CommandRunner
from SolrQuery.config import DEFAULT_CONFIG_PATH, load_config_with_defaults


@click.group(help="SolrQuery: render and run Solr queries defined in YAML.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to YAML config file.",
)
@click.option(
    "--defaults",
    "default_path",
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
    default=None,
    help="Optional defaults file the config is deep-merged over.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path, default_path: Path | None) -> None:
    """CLI entry group.

    Loads environment variables from .env before reading the config, so the
    Solr auth token can live there.
    """
    load_dotenv()

    try:
        cfg = load_config_with_defaults(config_path, default_path=default_path or config_path)
    except (TypeError, ValueError) as e:
        raise click.BadParameter(str(e), param_hint="--config") from e
    ctx.obj = CommandRunner(cfg)


@cli.command("render")
@click.option("--name", "names", multiple=True, help="Only render the named query (repeatable).")
@click.option("--url", "as_url", is_flag=True, help="Print encoded request URLs instead of JSON.")
@click.pass_context
def render_cmd(ctx: click.Context, names: tuple[str, ...], as_url: bool) -> None:
    """Print the request parameters of configured queries."""
    runner: CommandRunner = ctx.obj
    runner.run_render(action=ctx.command.name, names=names, as_url=as_url)


@cli.command("search")
@click.option("--name", "names", multiple=True, help="Only run the named query (repeatable).")
@click.option("--rows", type=click.IntRange(min=0), default=None, help="Override solr.rows.")
@click.pass_context
def search_cmd(ctx: click.Context, names: tuple[str, ...], rows: int | None) -> None:
    """Run configured queries against Solr and print the JSON responses."""
    runner: CommandRunner = ctx.obj
    runner.run_search(action=ctx.command.name, names=names, rows=rows)
