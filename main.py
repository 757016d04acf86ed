#!/usr/bin/env python3
"""
Hatena Blog MCP
===============

Command line entry point.

Usage:
    python main.py --help                  # Show all commands
    python main.py check-config            # Validate configuration
    python main.py serve                   # Start the MCP HTTP server
    python main.py search rust --limit 5   # Search the configured blog
    python main.py recent                  # List recent posts
    python main.py get https://...         # Show one post
"""

import sys
import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from hatena_mcp.config.settings import get_settings
from hatena_mcp.delivery.post_formatter import format_post_detail
from hatena_mcp.server.app import run_server
from hatena_mcp.services.blog_client import HatenaBlogClient
from hatena_mcp.utils.exceptions import HatenaMCPError, get_user_friendly_message
from hatena_mcp.utils.logging import configure_application_logging

console = Console()


def _build_client(settings) -> HatenaBlogClient:
    return HatenaBlogClient(
        settings.blog.blog_id,
        cache_duration=settings.blog.cache_duration,
        request_timeout=settings.limits.request_timeout,
    )


def _print_posts(title: str, posts) -> None:
    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Published")
    table.add_column("URL", style="green")
    table.add_column("Categories")

    for i, post in enumerate(posts, 1):
        table.add_row(str(i), post.title, post.published, post.link, ", ".join(post.categories))

    console.print(table)


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """Hatena Blog MCP - search and browse a Hatena blog feed."""
    ctx.ensure_object(dict)

    try:
        settings = get_settings()
    except HatenaMCPError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)

    ctx.obj['settings'] = settings
    configure_application_logging(
        log_level="DEBUG" if debug else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size=settings.logging.max_file_size_mb * 1024 * 1024,
        backup_count=settings.logging.backup_count,
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.pass_context
def check_config(ctx):
    """Show the effective configuration."""
    settings = ctx.obj['settings']

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Blog id", settings.blog.blog_id)
    table.add_row("Feed URL", settings.feed_url)
    table.add_row("Cache duration", f"{settings.blog.cache_duration}s")
    table.add_row("Request timeout", f"{settings.limits.request_timeout}s")
    table.add_row("Server", f"{settings.server.host}:{settings.server.port}{settings.server.path}")
    table.add_row("Log level", settings.get_effective_log_level())

    console.print(table)
    console.print("[bold green]✅ Configuration is valid[/bold green]")


@cli.command()
@click.option('--host', default=None, help='Interface to bind (overrides settings)')
@click.option('--port', default=None, type=int, help='Port to bind (overrides settings)')
@click.pass_context
def serve(ctx, host, port):
    """Start the MCP HTTP server."""
    settings = ctx.obj['settings']
    if host:
        settings.server.host = host
    if port:
        settings.server.port = port

    console.print(
        f"[bold blue]🚀 Serving {settings.feed_url} on "
        f"http://{settings.server.host}:{settings.server.port}{settings.server.path}[/bold blue]"
    )
    run_server(settings)


@cli.command()
@click.argument('keyword')
@click.option('--limit', default=10, show_default=True, help='Maximum number of results')
@click.pass_context
def search(ctx, keyword, limit):
    """Search posts by KEYWORD."""
    client = _build_client(ctx.obj['settings'])

    try:
        posts = asyncio.run(client.search(keyword, limit))
    except HatenaMCPError as e:
        console.print(f"[bold red]❌ Search failed: {get_user_friendly_message(e)}[/bold red]")
        sys.exit(1)

    _print_posts(f'{len(posts)} posts matching "{keyword}"', posts)


@cli.command()
@click.option('--limit', default=10, show_default=True, help='Maximum number of results')
@click.pass_context
def recent(ctx, limit):
    """List the most recent posts."""
    client = _build_client(ctx.obj['settings'])

    try:
        posts = asyncio.run(client.list_recent(limit))
    except HatenaMCPError as e:
        console.print(f"[bold red]❌ Failed to get recent posts: {get_user_friendly_message(e)}[/bold red]")
        sys.exit(1)

    _print_posts(f"Recent {len(posts)} posts", posts)


@cli.command()
@click.argument('url')
@click.pass_context
def get(ctx, url):
    """Show the post published at URL."""
    client = _build_client(ctx.obj['settings'])

    try:
        post = asyncio.run(client.get_by_url(url))
    except HatenaMCPError as e:
        console.print(f"[bold red]❌ Failed to get post: {get_user_friendly_message(e)}[/bold red]")
        sys.exit(1)

    console.print(format_post_detail(post), markup=False)


if __name__ == '__main__':
    cli()
