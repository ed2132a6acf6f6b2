"""pagegraph: command line entry point.

Usage:
    pagegraph mcp                          # MCP server on stdio
    pagegraph serve --port 8000            # HTTP API
    pagegraph split export.json out/       # Cut an export into parts
    pagegraph tag-report out/*.json -t 既読  # Pages carrying a tag
"""

import asyncio
import json
from pathlib import Path

import click

from pagegraph._logging import configure_logging
from pagegraph.config import settings
from pagegraph.core.errors import PageGraphError
from pagegraph.core.exports import DEFAULT_PARTS, split_export, tag_report
from pagegraph.core.loader import load_configured_projects
from pagegraph.core.registry import ProjectRegistry
from pagegraph.core.sources import ScrapboxClient


async def _load_registry(config_path: Path) -> ProjectRegistry:
    registry = ProjectRegistry()
    async with ScrapboxClient(settings) as client:
        await load_configured_projects(registry, config_path, client)
    return registry


@click.group()
@click.option("--log-level", default=None, help="Override PAGEGRAPH_LOG_LEVEL")
def cli(log_level: str | None):
    """Index and query Scrapbox page exports."""
    configure_logging(log_level or settings.log_level)


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Sources config file (defaults to PAGEGRAPH_CONFIG_PATH)",
)
def mcp(config_path: Path | None):
    """Run the MCP server over stdio."""
    from pagegraph.server import create_server

    try:
        registry = asyncio.run(_load_registry(config_path or settings.config_path))
    except PageGraphError as e:
        raise click.ClickException(str(e)) from e
    create_server(registry, settings).run()


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host: str, port: int):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("pagegraph.main:app", host=host, port=port, log_level=settings.log_level.lower())


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option("--parts", "-n", default=DEFAULT_PARTS, show_default=True, type=click.IntRange(min=1))
@click.option("--stem", default=None, help="Part file name prefix (default: input file stem)")
def split(input_path: Path, output_dir: Path, parts: int, stem: str | None):
    """Split an export file into ordered parts."""
    try:
        written = split_export(input_path, output_dir, parts=parts, stem=stem)
    except PageGraphError as e:
        raise click.ClickException(str(e)) from e
    for path in written:
        click.echo(str(path))
    click.echo(f"Wrote {len(written)} parts", err=True)


@cli.command("tag-report")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--tag", "-t", required=True, help="Tag to look for, with or without '#'")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tag_report_command(paths: tuple[Path, ...], tag: str, as_json: bool):
    """Report pages carrying a tag, newest update first."""
    try:
        entries = tag_report(list(paths), tag)
    except PageGraphError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False, indent=2))
        return

    click.echo(f"Pages tagged #{tag.removeprefix('#')}: {len(entries)}")
    for entry in entries:
        click.echo("")
        click.echo(f"{entry.title}  (updated {entry.updated}, created {entry.created})")
        if entry.tags:
            click.echo(f"  tags: {' '.join(entry.tags)}")
        click.echo(f"  lines: {entry.content_lines}  file: {entry.file}")
        for line in entry.first_lines:
            click.echo(f"    {line}")
