"""The three interactive screens: story list, comment thread, user profile.

Each view owns its data and viewport. ``update`` takes one event and returns
an optional command for the controller; ``render`` lays out only the rows
that are currently visible.
"""

from abc import ABC, abstractmethod
from enum import Enum

from rich.text import Text

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
from hnfeed.models import FlatComment, Item, User, flatten_comments
from hnfeed.styles import DEFAULT_STYLE, Style
from hnfeed.textflow import strip_markup, truncate, wrap_paragraphs, wrap_text


DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

BACK_KEYS = {"esc", "backspace", "left", "h"}


class Status(Enum):
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"
    NOT_FOUND = "not_found"


def header_bar(title: str, width: int, style: Style) -> Text:
    """Full-width title bar."""
    text = "  " + truncate(title, width - 2)
    return Text(text.ljust(width), style=style.header)


def status_line(message: str, style: str) -> Text:
    return Text(f"  {message}", style=style)


def join_lines(lines: list[Text]) -> Text:
    """Stack rows without letting rich re-wrap them."""
    return Text("\n", no_wrap=True, overflow="crop").join(lines)


class ListView:
    """Scrollable list of stories, two rows per story, with a cursor."""

    def __init__(
        self,
        title: str = "",
        style: Style = DEFAULT_STYLE,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ):
        self.title = title
        self.style = style
        self.items: list[Item] = []
        self.cursor = 0
        self.offset = 0
        self.width = width
        self.height = max(0, height - style.list_chrome)
        self.loading = True
        self.error: Exception | None = None

    @property
    def status(self) -> Status:
        if self.loading:
            return Status.LOADING
        if self.error is not None:
            return Status.ERRORED
        return Status.READY

    @property
    def visible_count(self) -> int:
        """Stories that fit in the viewport."""
        return max(1, self.height // 2)

    @property
    def selected(self) -> Item | None:
        if not self.items:
            return None
        return self.items[self.cursor]

    def update(self, event: Event) -> Command | None:
        if isinstance(event, StoriesLoaded):
            self.loading = False
            self.cursor = 0
            self.offset = 0
            if event.error is not None:
                # A failed batch replaces whatever did arrive
                self.error = event.error
                self.items = []
            else:
                self.error = None
                self.items = list(event.items)

        elif isinstance(event, Resize):
            self.height = max(0, event.height - self.style.list_chrome)
            self.width = event.width
            self._keep_cursor_visible()

        elif isinstance(event, Key):
            return self._on_key(event.name)

        return None

    def _on_key(self, key: str) -> Command | None:
        if key in ("up", "k"):
            if self.cursor > 0:
                self.cursor -= 1
                if self.cursor < self.offset:
                    self.offset = self.cursor
        elif key in ("down", "j"):
            if self.cursor < len(self.items) - 1:
                self.cursor += 1
                if self.cursor >= self.offset + self.visible_count:
                    self.offset = self.cursor - self.visible_count + 1
        elif key in ("g", "home"):
            self.cursor = 0
            self.offset = 0
        elif key in ("G", "end"):
            if self.items:
                self.cursor = len(self.items) - 1
                self.offset = max(0, self.cursor - self.visible_count + 1)
        elif key == "r":
            return Reload()

        item = self.selected
        if item is None:
            return None

        if key == "enter":
            return OpenItem(item.id)
        elif key == "o":
            return OpenURL(item.link)
        elif key == "c":
            return OpenURL(item.permalink)
        elif key == "u" and item.author:
            return OpenUser(item.author)
        return None

    def _keep_cursor_visible(self) -> None:
        visible = self.visible_count
        if self.cursor >= self.offset + visible:
            self.offset = self.cursor - visible + 1
        self.offset = max(0, min(self.offset, len(self.items) - visible, self.cursor))

    def reset(self) -> "ListView":
        """A fresh loading list with the same title and dimensions."""
        view = ListView(self.title, self.style, self.width)
        view.height = self.height
        return view

    def render_story(self, index: int, item: Item) -> list[Text]:
        """The two rows for one story."""
        s = self.style
        selected = index == self.cursor

        score = f"▲ {item.score}"
        title_width = self.width - 2 - 5 - len(score) - 2
        line1 = Text()
        line1.append("▶ " if selected else "  ", style=s.cursor)
        line1.append(f"{index + 1}.".rjust(4) + " ", style=s.index)
        line1.append(truncate(item.title, title_width), style=s.selected_title if selected else s.title)
        line1.append("  ")
        line1.append(score, style=s.score)

        line2 = Text("    ")
        if item.hostname:
            line2.append(item.hostname, style=s.url)
            line2.append(" · ", style=s.meta)
        meta = f"{item.descendants} comments"
        if item.author:
            meta += f" · by {item.author}"
        meta += f" · {item.age}"
        line2.append(meta, style=s.meta)

        for line in (line1, line2):
            line.truncate(self.width, overflow="ellipsis")
        return [line1, line2]

    def render(self) -> Text:
        s = self.style
        lines = [header_bar(self.title, self.width, s), Text()]

        if self.loading:
            lines.append(status_line("Loading…", s.status))
            return join_lines(lines)
        if self.error is not None:
            lines.append(status_line(f"Error: {self.error}", s.error))
            lines.append(Text())
            lines.append(Text("  r: retry · q: quit", style=s.help))
            return join_lines(lines)
        if not self.items:
            lines.append(status_line("No stories found.", s.status))
            return join_lines(lines)

        end = min(self.offset + self.visible_count, len(self.items))
        for i in range(self.offset, end):
            lines.extend(self.render_story(i, self.items[i]))

        lines.append(Text())
        lines.append(Text(
            "  ↑/↓ navigate · enter: comments · o: open url · c: open hn · u: user · r: refresh · q: quit",
            style=s.help,
        ))
        return join_lines(lines)


class ScrollView(ABC):
    """Shared viewport handling for the pre-wrapped, line-scrolling views."""

    chrome_attr = "comments_chrome"

    def __init__(self, style: Style = DEFAULT_STYLE, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT):
        self.style = style
        self.lines: list[Text] = []
        self.offset = 0
        self.width = width
        self.height = max(0, height - getattr(style, self.chrome_attr))
        self.loading = True
        self.error: Exception | None = None

    @property
    def max_offset(self) -> int:
        return max(0, len(self.lines) - self.height)

    @property
    def percent(self) -> int:
        """How far through the content the viewport is, 100 if it all fits."""
        if len(self.lines) <= self.height:
            return 100
        return min(100, self.offset * 100 // (len(self.lines) - self.height))

    def scroll_to(self, offset: int) -> None:
        self.offset = max(0, min(offset, self.max_offset))

    def resize(self, event: Resize) -> None:
        self.height = max(0, event.height - getattr(self.style, self.chrome_attr))
        self.width = event.width
        self.build_lines()
        self.scroll_to(self.offset)

    def scroll_key(self, key: str) -> bool:
        """Apply a scrolling key. Returns False if the key isn't a scroll key."""
        if key in ("up", "k"):
            self.scroll_to(self.offset - 1)
        elif key in ("down", "j"):
            self.scroll_to(self.offset + 1)
        elif key in ("pgdown", "space"):
            self.scroll_to(self.offset + max(1, self.height))
        elif key == "pgup":
            self.scroll_to(self.offset - max(1, self.height))
        elif key in ("g", "home"):
            self.scroll_to(0)
        elif key in ("G", "end"):
            self.scroll_to(self.max_offset)
        else:
            return False
        return True

    def visible_lines(self) -> list[Text]:
        return self.lines[self.offset:self.offset + self.height]

    @abstractmethod
    def build_lines(self) -> None:
        """Rebuild ``self.lines`` from the view's data at the current width."""


class CommentsView(ScrollView):
    """A story with its first-level comments, scrolled line by line."""

    chrome_attr = "comments_chrome"

    def __init__(self, style: Style = DEFAULT_STYLE, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT):
        super().__init__(style, width, height)
        self.story: Item | None = None
        self.flat: list[FlatComment] = []

    @property
    def status(self) -> Status:
        if self.loading:
            return Status.LOADING
        if self.error is not None:
            return Status.ERRORED
        return Status.READY

    def reset(self) -> "CommentsView":
        """A fresh loading view that keeps the last known dimensions."""
        view = CommentsView(self.style, self.width)
        view.height = self.height
        return view

    def update(self, event: Event) -> Command | None:
        if isinstance(event, ItemLoaded):
            self.loading = False
            self.error = event.error
            if event.error is not None:
                self.story = None
                self.flat = []
            else:
                self.story = event.story
                self.flat = flatten_comments(event.comments)
            self.offset = 0
            self.build_lines()

        elif isinstance(event, Resize):
            self.resize(event)

        elif isinstance(event, Key):
            return self._on_key(event.name)

        return None

    def _on_key(self, key: str) -> Command | None:
        if self.scroll_key(key):
            return None
        if key in BACK_KEYS:
            return Back()
        if key == "r":
            return Reload()

        story = self.story
        if story is None:
            return None
        if key == "o" and story.url:
            return OpenURL(story.url)
        elif key == "c":
            return OpenURL(story.permalink)
        elif key == "u" and story.author:
            return OpenUser(story.author)
        return None

    def build_lines(self) -> None:
        """Pre-render all scrollable content at the current width."""
        s = self.style
        lines: list[Text] = []

        if self.story is not None:
            story = self.story
            meta = Text("  ")
            if story.url:
                meta.append(story.url, style=s.url)
                meta.append("  ")
            meta.append(f"▲ {story.score}", style=s.score)
            meta.append(f"  {story.descendants} comments  by ", style=s.meta)
            meta.append(story.author, style=s.comment_author)
            meta.append(f"  {story.age}", style=s.meta)
            lines.append(meta)

            if story.text:
                lines.append(Text())
                for line in wrap_text(strip_markup(story.text), self.width - 2, "  "):
                    lines.append(Text(line, style=s.comment_text))
            lines.append(Text())

        for node in self.flat:
            if not node.is_visible:
                continue
            lines.extend(self.comment_lines(node))

        self.lines = lines

    def comment_lines(self, node: FlatComment) -> list[Text]:
        """Header row, wrapped body rows and a blank separator for one comment."""
        s = self.style
        item = node.item
        indent = "  " * node.depth
        # Bar plus padding, as it appears on screen
        prefix_width = len(indent) + len("│   ")

        header = Text(indent)
        header.append("│ ", style=s.indent)
        header.append(item.author, style=s.comment_author)
        header.append(f"  {item.age}", style=s.comment_time)
        rows = [header]

        for line in wrap_paragraphs(strip_markup(item.text), self.width - prefix_width):
            row = Text(indent)
            row.append("│ ", style=s.indent)
            row.append("  ")
            row.append(line, style=s.comment_text)
            rows.append(row)

        rows.append(Text())
        return rows

    def render(self) -> Text:
        s = self.style
        title = self.story.title if self.story is not None else "Loading…"
        lines = [header_bar(title, self.width, s)]

        if self.loading:
            lines.append(Text())
            lines.append(status_line("Loading comments…", s.status))
            return join_lines(lines)
        if self.error is not None:
            lines.append(Text())
            lines.append(status_line(f"Error: {self.error}", s.error))
            lines.append(Text())
            lines.append(Text("  r: retry · ←/esc: back · q: quit", style=s.help))
            return join_lines(lines)

        lines.extend(self.visible_lines())
        lines.append(Text(
            "  ↑/↓ scroll · o: open url · c: open hn · u: author · r: refresh · ←/esc: back · q: quit"
            f"  [{self.percent}%]",
            style=s.help,
        ))
        return join_lines(lines)


class UserView(ScrollView):
    """A user's profile followed by their recent stories."""

    chrome_attr = "user_chrome"

    def __init__(self, style: Style = DEFAULT_STYLE, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT):
        super().__init__(style, width, height)
        self.user: User | None = None
        self.items: list[Item] = []

    @property
    def status(self) -> Status:
        if self.loading:
            return Status.LOADING
        if self.error is not None:
            return Status.ERRORED
        if self.user is None:
            return Status.NOT_FOUND
        return Status.READY

    def reset(self) -> "UserView":
        view = UserView(self.style, self.width)
        view.height = self.height
        return view

    def update(self, event: Event) -> Command | None:
        if isinstance(event, UserLoaded):
            self.loading = False
            self.error = event.error
            if event.error is not None:
                self.user = None
                self.items = []
            else:
                self.user = event.user
                self.items = list(event.items)
            self.offset = 0
            self.build_lines()

        elif isinstance(event, Resize):
            self.resize(event)

        elif isinstance(event, Key):
            if self.scroll_key(event.name):
                return None
            if event.name in BACK_KEYS:
                return Back()
            if event.name == "r":
                return Reload()
            if event.name == "o" and self.user is not None:
                return OpenURL(self.user.profile_url)

        return None

    def build_lines(self) -> None:
        s = self.style
        lines: list[Text] = []
        user = self.user
        if user is None:
            self.lines = lines
            return

        profile = Text("  ")
        profile.append(user.id, style=s.user_name)
        profile.append("  ·  ", style=s.separator)
        profile.append("karma: ", style=s.meta)
        profile.append(str(user.karma), style=s.user_karma)
        profile.append(f"  joined: {user.joined}", style=s.meta)
        lines.append(profile)
        lines.append(Text())

        if user.about:
            for line in wrap_text(strip_markup(user.about), self.width - 2, "  "):
                lines.append(Text(line, style=s.comment_text))
            lines.append(Text())

        if self.items:
            lines.append(Text("  Recent submissions:", style=s.title))
            lines.append(Text())

        for i, item in enumerate(self.items):
            title = Text("  ")
            title.append(f"{i + 1}.", style=s.index)
            title.append(" ")
            title.append(truncate(item.title, self.width - 8), style=s.title)
            lines.append(title)

            meta = Text("     ")
            meta.append(f"▲ {item.score} · {item.descendants} comments · {item.age}", style=s.meta)
            if item.hostname:
                meta.append("  ·  ", style=s.separator)
                meta.append(item.hostname, style=s.url)
            lines.append(meta)
            lines.append(Text())

        self.lines = lines

    def render(self) -> Text:
        s = self.style
        title = f"User: {self.user.id}" if self.user is not None else "User Profile"
        lines = [header_bar(title, self.width, s), Text()]

        if self.loading:
            lines.append(status_line("Loading…", s.status))
            return join_lines(lines)
        if self.error is not None:
            lines.append(status_line(f"Error: {self.error}", s.error))
            return join_lines(lines)
        if self.user is None:
            lines.append(status_line("User not found.", s.status))
            return join_lines(lines)

        lines.extend(self.visible_lines())
        lines.append(Text())
        lines.append(Text("  ↑/↓ scroll · o: open in browser · r: refresh · ←/esc: back · q: quit", style=s.help))
        return join_lines(lines)
