"""Interactive browser: routes events between views and runs the terminal loop."""

import asyncio
import logging
import sys
from enum import Enum
from typing import Awaitable, Callable

from rich.console import Console
from rich.live import Live
from rich.text import Text

from hnfeed.api import STORY_LISTS, HNClient
from hnfeed.browser import open_external
from hnfeed.config import DEFAULT_CONFIG, get_open_command
from hnfeed.events import (
    Back,
    Command,
    Event,
    ItemLoaded,
    Key,
    OpenItem,
    OpenURL,
    OpenUser,
    Reload,
    Resize,
    StoriesLoaded,
    UserLoaded,
)
from hnfeed.fetcher import adopt_items, load_item, load_search, load_stories, load_user
from hnfeed.keys import KeyboardListener, decode_keys
from hnfeed.models import Item
from hnfeed.styles import DEFAULT_STYLE, Style
from hnfeed.views import DEFAULT_HEIGHT, DEFAULT_WIDTH, CommentsView, ListView, UserView

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.05  # Seconds between key/size/task checks
QUIT_KEYS = {"q", "ctrl+c"}

FEED_TITLES = {
    "top": "Top Stories",
    "new": "New Stories",
    "best": "Best Stories",
    "ask": "Ask HN",
    "show": "Show HN",
    "jobs": "Jobs",
}

Loader = Callable[[], Awaitable[Event]]


class ViewKind(Enum):
    LIST = "list"
    COMMENTS = "comments"
    USER = "user"


class Controller:
    """Owns the three views and decides which one is on screen.

    Loads run as asyncio tasks. Each one is tagged with a per-view token when
    it starts; a result whose token has since been superseded (the user went
    back, reloaded or opened something else) is dropped on arrival.
    """

    def __init__(
        self,
        client: HNClient,
        config: dict | None = None,
        style: Style = DEFAULT_STYLE,
        opener: Callable[[str, str | None], None] = open_external,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ):
        self.client = client
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        self.style = style
        self.opener = opener
        self.open_command = get_open_command(self.config)

        self.list_view = ListView(style=style, width=width, height=height)
        self.comments_view = CommentsView(style=style, width=width, height=height)
        self.user_view = UserView(style=style, width=width, height=height)

        self.view = ViewKind.LIST
        self.quit = False

        self._tokens = {kind: 0 for kind in ViewKind}
        self._loaders: dict[ViewKind, Loader | None] = {kind: None for kind in ViewKind}
        self._pending: list[tuple[ViewKind, int, asyncio.Task]] = []

    @property
    def cap(self) -> int:
        return int(self.config["concurrency"])

    def view_for(self, kind: ViewKind) -> ListView | CommentsView | UserView:
        if kind is ViewKind.LIST:
            return self.list_view
        elif kind is ViewKind.COMMENTS:
            return self.comments_view
        elif kind is ViewKind.USER:
            return self.user_view
        raise ValueError(f"Unknown view: {kind}")

    @property
    def active(self) -> ListView | CommentsView | UserView:
        return self.view_for(self.view)

    @property
    def title(self) -> str:
        """Short description of what's on screen, for the terminal title."""
        if self.view is ViewKind.LIST:
            return self.list_view.title
        elif self.view is ViewKind.COMMENTS:
            story = self.comments_view.story
            return story.title if story is not None else "Comments"
        elif self.view is ViewKind.USER:
            user = self.user_view.user
            return user.id if user is not None else "User"
        return ""

    # Entry points

    def show_list(self, title: str, loader: Loader, reload_loader: Loader | None = None) -> None:
        """Put a fresh list on screen and start loading it."""
        self.list_view.title = title
        self.list_view = self.list_view.reset()
        self.view = ViewKind.LIST
        self._start(ViewKind.LIST, loader)
        # Later reloads may use a different source than the first load
        self._loaders[ViewKind.LIST] = reload_loader or loader

    def show_feed(self, feed: str, count: int | None = None) -> None:
        """Show one of the named feeds: top, new, best, ask, show or jobs."""
        list_name = STORY_LISTS[feed]
        if count is None:
            count = int(self.config["default_count"])
        self.show_list(
            FEED_TITLES.get(feed, feed),
            lambda: load_stories(self.client, list_name, count, self.cap),
        )

    def show_search(self, query: str, items: list[Item], limit: int) -> None:
        """Show already-fetched search hits; reloading searches again."""
        self.show_list(
            f"Search: {query}",
            lambda: adopt_items(items),
            lambda: load_search(self.client, query, limit),
        )

    def show_item(self, item_id: int) -> None:
        self.execute(OpenItem(item_id))

    def show_user(self, username: str) -> None:
        self.execute(OpenUser(username))

    # Event routing

    def dispatch(self, event: Event) -> None:
        """Deliver one input event to the right view(s) and act on the result."""
        if isinstance(event, Resize):
            for kind in ViewKind:
                self.view_for(kind).update(event)
            return

        if isinstance(event, Key) and event.name in QUIT_KEYS:
            self.quit = True
            return

        if isinstance(event, StoriesLoaded):
            target = ViewKind.LIST
        elif isinstance(event, ItemLoaded):
            target = ViewKind.COMMENTS
        elif isinstance(event, UserLoaded):
            target = ViewKind.USER
        else:
            target = self.view

        command = self.view_for(target).update(event)
        if command is not None:
            self.execute(command)

    def execute(self, command: Command) -> None:
        """Carry out a command emitted by a view."""
        if isinstance(command, OpenItem):
            self.comments_view = self.comments_view.reset()
            self.view = ViewKind.COMMENTS
            self._start(ViewKind.COMMENTS, lambda: load_item(
                self.client,
                command.item_id,
                self.cap,
                int(self.config["comment_limit"]),
            ))

        elif isinstance(command, OpenUser):
            self.user_view = self.user_view.reset()
            self.view = ViewKind.USER
            self._start(ViewKind.USER, lambda: load_user(
                self.client,
                command.username,
                int(self.config["submission_limit"]),
            ))

        elif isinstance(command, Back):
            if self.view is ViewKind.LIST or self._loaders[ViewKind.LIST] is None:
                self.quit = True
                return
            self.view = ViewKind.LIST
            self._invalidate(ViewKind.COMMENTS)
            self._invalidate(ViewKind.USER)

        elif isinstance(command, Reload):
            loader = self._loaders[self.view]
            if loader is None:
                return
            if self.view is ViewKind.LIST:
                self.list_view = self.list_view.reset()
            elif self.view is ViewKind.COMMENTS:
                self.comments_view = self.comments_view.reset()
            elif self.view is ViewKind.USER:
                self.user_view = self.user_view.reset()
            self._start(self.view, loader)

        elif isinstance(command, OpenURL):
            self.opener(command.url, self.open_command)

    # Load bookkeeping

    def _start(self, kind: ViewKind, loader: Loader) -> None:
        self._tokens[kind] += 1
        self._loaders[kind] = loader
        task = asyncio.create_task(loader())
        self._pending.append((kind, self._tokens[kind], task))

    def _invalidate(self, kind: ViewKind) -> None:
        self._tokens[kind] += 1

    @property
    def pending(self) -> int:
        return len(self._pending)

    def collect(self) -> None:
        """Deliver finished loads, dropping any that have been superseded."""
        still_running = []
        finished = []
        for entry in self._pending:
            (finished if entry[2].done() else still_running).append(entry)
        self._pending = still_running

        for kind, token, task in finished:
            if token != self._tokens[kind]:
                logger.debug("Dropping stale %s load (token %d, current %d)", kind.value, token, self._tokens[kind])
                continue
            self.dispatch(task.result())

    async def settle(self) -> None:
        """Wait for every in-flight load and deliver the results."""
        while self._pending:
            await asyncio.gather(*(task for _, _, task in self._pending))
            self.collect()

    async def shutdown(self) -> None:
        """Cancel whatever is still loading."""
        tasks = [task for _, _, task in self._pending]
        self._pending = []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def render(self) -> Text:
        return self.active.render()


def set_terminal_title(status: str = "") -> None:
    """Set the terminal window title."""
    if status:
        title = f"hnfeed - {status}"
    else:
        title = "hnfeed"
    sys.stdout.write(f"\033]0;{title}\007")
    sys.stdout.flush()


async def run_interactive(controller: Controller, console: Console | None = None) -> int:
    """Run the full-screen browser until the user quits. Returns the exit status."""
    if console is None:
        console = Console()

    width, height = console.size
    controller.dispatch(Resize(width, height))

    keyboard = KeyboardListener()
    keyboard.start()
    title = None

    try:
        with Live(controller.render(), console=console, refresh_per_second=20, screen=True) as live:
            while not controller.quit:
                size = console.size
                if (size.width, size.height) != (width, height):
                    width, height = size.width, size.height
                    controller.dispatch(Resize(width, height))

                controller.collect()

                for name in decode_keys(keyboard.drain_keys()):
                    controller.dispatch(Key(name))
                    if controller.quit:
                        break

                if controller.title != title:
                    title = controller.title
                    set_terminal_title(title)

                live.update(controller.render())
                await asyncio.sleep(POLL_INTERVAL)
    finally:
        keyboard.stop()
        await controller.shutdown()
        set_terminal_title()

    return 0
