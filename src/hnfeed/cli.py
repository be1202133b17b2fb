"""CLI interface for hnfeed."""

import asyncio
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from hnfeed.api import STORY_LISTS, HNClient
from hnfeed.app import FEED_TITLES, Controller, run_interactive
from hnfeed.config import (
    CONFIG_DIR,
    OPEN_ENV_VAR,
    get_open_command,
    load_config,
    save_config,
)
from hnfeed.fetcher import load_item, load_search, load_stories, load_user
from hnfeed.log import setup_logging
from hnfeed.plain import (
    item_json,
    print_item,
    print_json,
    print_stories,
    print_user,
    user_json,
)


console = Console()
err_console = Console(stderr=True)


def output_options(f):
    """--plain, --json and --debug, shared by every browsing command."""
    f = click.option("--debug", is_flag=True, help="Log debug output (to ~/.hnfeed/hnfeed.log when interactive)")(f)
    f = click.option("--json-output", "--json", "json_output", is_flag=True, help="Output as JSON (implies --plain)")(f)
    f = click.option("--plain", "-p", is_flag=True, help="Print to stdout instead of the interactive browser")(f)
    return f


count_option = click.option(
    "--count", "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Number of stories to fetch (default from config)",
)


def is_plain(plain: bool, json_output: bool) -> bool:
    """Fall back to plain output whenever stdout is not a terminal."""
    return plain or json_output or not sys.stdout.isatty()


def make_client(cfg: dict) -> HNClient:
    return HNClient(timeout=float(cfg["request_timeout"]))


def fail(error) -> None:
    err_console.print(f"[red]Error:[/red] {escape(str(error))}")
    sys.exit(1)


def fetch_with_progress(description: str, cfg: dict, job):
    """Run one load to completion behind a spinner on stderr."""
    async def run():
        async with make_client(cfg) as client:
            return await job(client)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        return asyncio.run(run())


def browse(cfg: dict, setup) -> int:
    """Open the interactive browser; ``setup`` picks the first screen."""
    async def run():
        async with make_client(cfg) as client:
            controller = Controller(client, cfg)
            setup(controller)
            return await run_interactive(controller, console)

    return asyncio.run(run())


@click.group(invoke_without_command=True)
@click.version_option(package_name="hnfeed")
@click.pass_context
def main(ctx):
    """hnfeed - Browse Hacker News from your terminal.

    Runs the top stories feed when no command is given.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(main.commands["top"])


def run_feed(feed: str, count: int | None, plain: bool, json_output: bool, debug: bool) -> None:
    cfg = load_config()
    plain = is_plain(plain, json_output)
    setup_logging(debug=debug, interactive=not plain)
    if count is None:
        count = int(cfg["default_count"])

    if not plain:
        sys.exit(browse(cfg, lambda controller: controller.show_feed(feed, count)))

    event = fetch_with_progress(
        f"Fetching {FEED_TITLES[feed]}...",
        cfg,
        lambda client: load_stories(client, STORY_LISTS[feed], count, int(cfg["concurrency"])),
    )
    if event.error is not None:
        fail(event.error)

    if json_output:
        print_json([item.to_json() for item in event.items])
    else:
        print_stories(event.items)


def add_feed_command(feed: str) -> None:
    @main.command(name=feed, help=f"Browse {FEED_TITLES[feed]}.")
    @count_option
    @output_options
    def command(count: int | None, plain: bool, json_output: bool, debug: bool):
        run_feed(feed, count, plain, json_output, debug)


for _feed in STORY_LISTS:
    add_feed_command(_feed)


@main.command()
@click.argument("item_id", type=int)
@output_options
def item(item_id: int, plain: bool, json_output: bool, debug: bool):
    """Show a story and its comments."""
    cfg = load_config()
    plain = is_plain(plain, json_output)
    setup_logging(debug=debug, interactive=not plain)

    if not plain:
        sys.exit(browse(cfg, lambda controller: controller.show_item(item_id)))

    event = fetch_with_progress(
        f"Fetching item {item_id}...",
        cfg,
        lambda client: load_item(
            client, item_id, int(cfg["concurrency"]), int(cfg["comment_limit"]),
        ),
    )
    # Replies that failed to load are logged by load_item and left out here
    if event.story is None:
        fail(event.error)

    if json_output:
        print_json(item_json(event.story, event.comments))
    else:
        print_item(event.story, event.comments)


@main.command()
@click.argument("username")
@output_options
def user(username: str, plain: bool, json_output: bool, debug: bool):
    """Show a user's profile and recent stories."""
    cfg = load_config()
    plain = is_plain(plain, json_output)
    setup_logging(debug=debug, interactive=not plain)

    if not plain:
        sys.exit(browse(cfg, lambda controller: controller.show_user(username)))

    event = fetch_with_progress(
        f"Fetching user {username}...",
        cfg,
        lambda client: load_user(client, username, int(cfg["submission_limit"])),
    )
    if event.error is not None:
        fail(event.error)
    if event.user is None:
        fail(f"User {username} not found")

    if json_output:
        print_json(user_json(event.user, event.items))
    else:
        print_user(event.user, event.items)


@main.command()
@click.argument("query", nargs=-1, required=True)
@count_option
@output_options
def search(query: tuple[str, ...], count: int | None, plain: bool, json_output: bool, debug: bool):
    """Search stories by keyword."""
    cfg = load_config()
    plain = is_plain(plain, json_output)
    setup_logging(debug=debug, interactive=not plain)
    text = " ".join(query)
    if count is None:
        count = int(cfg["default_count"])

    event = fetch_with_progress(
        f"Searching for {text!r}...",
        cfg,
        lambda client: load_search(client, text, count),
    )
    if event.error is not None:
        fail(event.error)

    if not plain:
        sys.exit(browse(cfg, lambda controller: controller.show_search(text, event.items, count)))

    if json_output:
        print_json([item.to_json() for item in event.items])
    else:
        print_stories(event.items)


@main.command()
@click.option("--show", is_flag=True, help="Show current configuration")
@click.option("--count", type=click.IntRange(min=1), help="Set default story count")
@click.option("--concurrency", type=click.IntRange(min=1), help="Set max concurrent requests")
@click.option("--open-command", help="Set shell command for opening URLs ({} is the URL)")
def config(show: bool, count: int | None, concurrency: int | None, open_command: str | None):
    """Configure hnfeed settings."""
    if show:
        cfg = load_config()
        table = Table(title="hnfeed Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")

        opener = get_open_command(cfg)
        table.add_row("Default Story Count", str(cfg["default_count"]))
        table.add_row("Concurrency", str(cfg["concurrency"]))
        table.add_row("Comment Limit", str(cfg["comment_limit"]))
        table.add_row("Submission Limit", str(cfg["submission_limit"]))
        table.add_row("Request Timeout", f"{cfg['request_timeout']}s")
        table.add_row("Open Command", escape(opener) if opener else "[dim]system browser[/dim]")
        table.add_row("Config Directory", str(CONFIG_DIR))

        console.print(table)
        return

    updates = {}
    if count is not None:
        updates["default_count"] = count
    if concurrency is not None:
        updates["concurrency"] = concurrency
    if open_command is not None:
        updates["open_command"] = open_command

    if not updates:
        # No options provided, show help
        ctx = click.get_current_context()
        click.echo(ctx.get_help())
        return

    cfg = load_config()
    cfg.update(updates)
    save_config(cfg)
    for key, value in updates.items():
        console.print(f"[green]✓ {key} set to {escape(repr(value))}[/green]")

    if open_command is not None and get_open_command(cfg) != open_command:
        console.print(f"[yellow]Note:[/yellow] {OPEN_ENV_VAR} is set and takes precedence")


if __name__ == "__main__":
    main()
