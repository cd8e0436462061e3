"""
Command-line interface for the repository catalog fetcher.

Provides commands for fetching repositories, normalizing URLs,
validating source lists and managing the local cache.
"""

import json
import sys
from pathlib import Path

import click

from repo_catalog.core.config import Config
from repo_catalog.core.exceptions import (
    CatalogError,
    MalformedReferenceError,
    RepositoryAccessError,
    StructureValidationError,
)
from repo_catalog.utils.logging_config import setup_logging


@click.group()
@click.version_option(version="1.0.0")
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Path to log file"
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON configuration file"
)
@click.pass_context
def cli(ctx, verbose, log_file, config_path):
    """
    Repository Catalog Fetcher

    Fetch package manager repositories into a local cache and
    validate configured repository sources.
    """
    ctx.ensure_object(dict)

    if config_path:
        config = Config.load_from_file(config_path)
    else:
        config = Config.load_from_env()

    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose or config.verbose

    log_level = "DEBUG" if ctx.obj["verbose"] else "INFO"
    setup_logging(level=log_level, log_file=Path(log_file) if log_file else None)


@cli.command()
@click.argument("url")
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Discard the cached copy and clone again"
)
@click.option(
    "--name", "-n",
    help="Source name used when the repository metadata has none"
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    help="Override the cache directory"
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the result as JSON"
)
@click.pass_context
def fetch(ctx, url, force, name, cache_dir, as_json):
    """
    Fetch a repository and list its catalog items.

    URL can be a clone URL, an SSH URL or a GitHub tree/blob URL.

    Examples:

        rcat fetch https://github.com/user/packages

        rcat fetch https://github.com/user/repo/tree/main/catalog --force
    """
    config = ctx.obj["config"]
    if cache_dir:
        config.fetch.cache_dir = cache_dir

    from repo_catalog.engine import RepositoryFetcher

    try:
        result = RepositoryFetcher(config).fetch_repository(url, force, name)
    except MalformedReferenceError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    except RepositoryAccessError as e:
        click.echo(f"Error: could not reach or clone the repository: {e}", err=True)
        _print_cause(ctx, e)
        sys.exit(1)
    except StructureValidationError as e:
        click.echo(f"Error: repository layout is invalid: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo("=" * 60)
    click.echo(f"Repository: {result.metadata.name} ({result.metadata.version})")
    click.echo(f"Clone URL:  {result.valid_url}")
    if result.subdir:
        click.echo(f"Subdir:     {result.subdir}")
    click.echo(f"Base dir:   {result.base_dir}")
    click.echo("=" * 60)
    for item in result.items:
        click.echo(f"  [{item.type}] {item.name}: {item.description}")
    click.echo(f"\n{len(result.items)} items")


@cli.command()
@click.argument("url")
@click.pass_context
def normalize(ctx, url):
    """Show the clone URL and subdirectory for a repository URL."""
    from repo_catalog.utils.git_url import normalize_repository_url, repository_name

    config = ctx.obj["config"]
    try:
        reference = normalize_repository_url(url, config.fetch.local_overrides)
    except MalformedReferenceError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    click.echo(f"Clone URL:      {reference.clone_url}")
    click.echo(f"Subdirectory:   {reference.requested_subdir!r}")
    click.echo(f"Cache entry:    {repository_name(reference.clone_url)}")
    click.echo(f"Local override: {'yes' if reference.uses_local_override else 'no'}")


@cli.command("validate-sources")
@click.argument("sources_file", type=click.Path(exists=True, dir_okay=False), required=False)
@click.pass_context
def validate_sources_command(ctx, sources_file):
    """
    Validate a list of repository sources.

    SOURCES_FILE is a JSON list of {"url", "name", "enabled"} objects or
    an object with a "sources" key. Without it, the sources from the
    configuration are validated.
    """
    from repo_catalog.utils.validation import SourceRecord, validate_sources

    config = ctx.obj["config"]
    if sources_file:
        with open(sources_file, "r") as f:
            data = json.load(f)
        entries = data.get("sources", []) if isinstance(data, dict) else data
    else:
        entries = config.sources

    sources = [SourceRecord.from_dict(entry) for entry in entries]
    errors = validate_sources(sources, config.validation.max_name_length)

    if not errors:
        click.echo(f"{len(sources)} sources are valid")
        return

    for error in errors:
        click.echo(f"  {error.field}: {error.message}", err=True)
    click.echo(f"{len(errors)} validation errors", err=True)
    sys.exit(1)


@cli.command()
@click.option(
    "--output", "-o",
    type=click.Path(),
    default="config.json",
    help="Output path for configuration file"
)
def init(output):
    """
    Initialize configuration file.

    Creates a default configuration file that can be customized.
    """
    Config.save_to_file(output)
    click.echo(f"Configuration saved to: {output}")


@cli.command("cache-list")
@click.pass_context
def cache_list(ctx):
    """List cached repositories."""
    from repo_catalog.ingestion.cache import RepositoryCacheManager

    cache_root = Path(ctx.obj["config"].fetch.cache_dir)
    entries = RepositoryCacheManager.list_entries(cache_root)

    click.echo(f"Cache directory: {cache_root}")
    click.echo("-" * 40)
    for entry in entries:
        click.echo(f"  {entry.name}")
    click.echo(f"{len(entries)} cached repositories")


@cli.command("clear-cache")
@click.argument("url")
@click.option(
    "--yes", "-y",
    is_flag=True,
    help="Skip confirmation prompt"
)
@click.pass_context
def clear_cache(ctx, url, yes):
    """Remove the cached copy of a repository."""
    from repo_catalog.ingestion.cache import RepositoryCacheManager
    from repo_catalog.utils.git_url import normalize_repository_url

    config = ctx.obj["config"]
    try:
        reference = normalize_repository_url(url)
    except MalformedReferenceError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    if not yes:
        if not click.confirm(f"Remove cached copy of {reference.clone_url}?"):
            click.echo("Cancelled")
            return

    manager = RepositoryCacheManager(config.fetch)
    try:
        removed = manager.remove(reference.clone_url, Path(config.fetch.cache_dir))
    except CatalogError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("Removed" if removed else "Not cached")


def _print_cause(ctx, error: Exception) -> None:
    if ctx.obj.get("verbose") and error.__cause__ is not None:
        click.echo(f"Caused by: {error.__cause__}", err=True)


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
