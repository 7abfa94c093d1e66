"""navsync command line interface.

\b
    navsync build            generate and cache every configured language
    navsync show en          print the navigation tree of one language
    navsync status en        report whether a language needs regeneration
    navsync languages        list configured languages
    navsync clear-cache      drop cached snapshots
"""

import asyncio
import json
import sys
import time
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from navsync.cache import NavigationCache
from navsync.context import NavContext
from navsync.errors import NavsyncError
from navsync.logging import configure_logging
from navsync.pipeline import route_map_to_dict
from navsync.settings import load_settings
from navsync.types import NavigationItem, RouteMap

console = Console()


def _print_error(error: NavsyncError) -> None:
    console.print(f"[red]✗[/red] {error}")
    for hint in error.recovery_hints:
        console.print(f"  [dim]→ {hint}[/dim]")


def _load_cache(ctx: click.Context) -> NavigationCache:
    """Build the cache for the command's project, exiting on bad configuration."""
    obj = ctx.ensure_object(dict)
    cache = obj.get("cache")
    if cache is not None:
        return cache
    try:
        settings = load_settings(obj.get("config_path"), cwd=obj.get("project_dir"))
        if obj.get("dev"):
            settings.dev_mode = True
        if settings.debug and not obj.get("debug"):
            configure_logging(debug=True)
        cache = NavigationCache(NavContext.initialize(settings))
    except NavsyncError as e:
        _print_error(e)
        sys.exit(1)
    obj["cache"] = cache
    return cache


@click.group()
@click.option(
    "--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
    help="Settings file (default: navsync.yaml)",
)
@click.option(
    "--project", "project_dir", type=click.Path(file_okay=False, path_type=Path),
    help="Project directory (default: current directory)",
)
@click.option("--dev", is_flag=True, help="Include draft documents")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    project_dir: Path | None,
    dev: bool,
    debug: bool,
) -> None:
    """Generate documentation navigation with durable sidebar overrides."""
    configure_logging(debug=debug)
    ctx.ensure_object(dict)
    ctx.obj.update(config_path=config_path, project_dir=project_dir, dev=dev, debug=debug)


@cli.command()
@click.argument("languages", nargs=-1)
@click.option("--json", "json_output", is_flag=True, help="JSON output")
@click.pass_context
def build(ctx: click.Context, languages: tuple[str, ...], json_output: bool) -> None:
    """Generate navigation, synchronize overrides and refresh the cache."""
    cache = _load_cache(ctx)
    start = time.perf_counter()
    try:
        results = asyncio.run(cache.prebuild(list(languages) or None))
    except NavsyncError as e:
        if json_output:
            print(json.dumps({"status": "error", "error": e.to_dict()}))
        else:
            _print_error(e)
        sys.exit(1)
    elapsed = time.perf_counter() - start

    if json_output:
        print(json.dumps({
            "status": "built",
            "build_time_ms": int(elapsed * 1000),
            "languages": {lang: route_map_to_dict(rm) for lang, rm in results.items()},
        }, ensure_ascii=False))
        return

    table = Table(title="Navigation", show_header=True)
    table.add_column("Language", style="cyan")
    table.add_column("Views", justify="right")
    table.add_column("Items", justify="right")
    for lang, route_map in results.items():
        table.add_row(lang, str(len(route_map)), f"{_count_items(route_map):,}")
    console.print(table)
    console.print(f"[green]✓[/green] Built navigation in {elapsed:.2f}s")


@cli.command()
@click.argument("language")
@click.option("--route", help="Only show one view, e.g. /en/guide/")
@click.option("--json", "json_output", is_flag=True, help="JSON output")
@click.pass_context
def show(ctx: click.Context, language: str, route: str | None, json_output: bool) -> None:
    """Print the navigation tree of LANGUAGE."""
    cache = _load_cache(ctx)
    try:
        route_map = asyncio.run(cache.get(language))
    except NavsyncError as e:
        _print_error(e)
        sys.exit(1)

    if route is not None:
        if route not in route_map:
            console.print(f"[red]✗[/red] No view '{route}'. Views: {', '.join(route_map) or '(none)'}")
            sys.exit(1)
        route_map = {route: route_map[route]}

    if json_output:
        print(json.dumps(route_map_to_dict(route_map), indent=2, ensure_ascii=False))
        return

    for view, items in route_map.items():
        tree = Tree(f"[bold]{view}[/bold]")
        _add_branches(tree, items)
        console.print(tree)


@cli.command()
@click.argument("language")
@click.pass_context
def status(ctx: click.Context, language: str) -> None:
    """Report whether LANGUAGE changed since its cached snapshot."""
    cache = _load_cache(ctx)
    try:
        cache.context.require_language(language)
    except NavsyncError as e:
        _print_error(e)
        sys.exit(1)

    if cache.needs_regeneration(language):
        console.print(f"[yellow]⚠[/yellow] {language}: content or overrides changed, run 'navsync build'")
    else:
        console.print(f"[green]✓[/green] {language}: navigation up to date")


@cli.command()
@click.pass_context
def languages(ctx: click.Context) -> None:
    """List configured languages."""
    cache = _load_cache(ctx)
    table = Table(show_header=True)
    table.add_column("Language", style="cyan")
    table.add_column("Content directory")
    table.add_column("Snapshot")
    for lang in cache.configured_languages():
        root = cache.context.language_root(lang)
        snapshot = cache.snapshot_path(lang)
        table.add_row(
            lang,
            str(root) if root.is_dir() else f"[red]{root} (missing)[/red]",
            "yes" if snapshot.exists() else "[dim]no[/dim]",
        )
    console.print(table)


@cli.command("clear-cache")
@click.argument("language", required=False)
@click.pass_context
def clear_cache(ctx: click.Context, language: str | None) -> None:
    """Drop cached navigation for LANGUAGE, or for every language."""
    cache = _load_cache(ctx)
    if language is not None:
        try:
            cache.context.require_language(language)
        except NavsyncError as e:
            _print_error(e)
            sys.exit(1)
    cache.invalidate(language)
    console.print(f"[green]✓[/green] Cleared navigation cache for {language or 'all languages'}")


def _count_items(route_map: RouteMap) -> int:
    def count(items: list[NavigationItem]) -> int:
        return sum(1 + count(item.items or []) for item in items)

    return sum(count(items) for items in route_map.values())


def _add_branches(tree: Tree, items: list[NavigationItem]) -> None:
    for item in items:
        label = f"[cyan]{item.text}[/cyan]"
        if item.link:
            label += f" [dim]{item.link}[/dim]"
        if item.collapsed:
            label += " [dim](collapsed)[/dim]"
        branch = tree.add(label)
        if item.items:
            _add_branches(branch, item.items)


def main() -> None:
    cli(obj={})
