"""Data models for hnfeed."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from hnfeed.textflow import hostname, relative_age


HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
HN_USER_URL = "https://news.ycombinator.com/user?id={id}"


class ItemKind(str, Enum):
    """Item types served by the HN API."""
    STORY = "story"
    COMMENT = "comment"
    JOB = "job"
    POLL = "poll"
    POLLOPT = "pollopt"


@dataclass(frozen=True)
class Item:
    """Any HN item: story, comment, job, poll or poll option.

    A missing ID comes back from the API as ``null``; it decodes to an item
    with every field at its default, which ``is_absent`` reports.
    """

    id: int = 0
    kind: str = ""
    author: str = ""
    time: int = 0
    text: str = ""
    url: str = ""
    score: int = 0
    title: str = ""
    kids: tuple[int, ...] = ()
    descendants: int = 0
    deleted: bool = False
    dead: bool = False
    parent: int = 0
    parts: tuple[int, ...] = ()
    poll: int = 0

    @classmethod
    def from_json(cls, data: dict | None) -> "Item":
        """Build an Item from an API payload, tolerating missing keys."""
        if not data:
            return cls()
        return cls(
            id=int(data.get("id") or 0),
            kind=data.get("type") or "",
            author=data.get("by") or "",
            time=int(data.get("time") or 0),
            text=data.get("text") or "",
            url=data.get("url") or "",
            score=int(data.get("score") or 0),
            title=data.get("title") or "",
            kids=tuple(data.get("kids") or ()),
            descendants=int(data.get("descendants") or 0),
            deleted=bool(data.get("deleted", False)),
            dead=bool(data.get("dead", False)),
            parent=int(data.get("parent") or 0),
            parts=tuple(data.get("parts") or ()),
            poll=int(data.get("poll") or 0),
        )

    def to_json(self) -> dict:
        """Serialize back to the API's field names."""
        return {
            "id": self.id,
            "type": self.kind,
            "by": self.author,
            "time": self.time,
            "text": self.text,
            "url": self.url,
            "score": self.score,
            "title": self.title,
            "kids": list(self.kids),
            "descendants": self.descendants,
            "deleted": self.deleted,
            "dead": self.dead,
            "parent": self.parent,
            "parts": list(self.parts),
            "poll": self.poll,
        }

    @property
    def is_absent(self) -> bool:
        """True for the empty record the API returns for unknown IDs."""
        return not self.kind and not self.author

    @property
    def is_visible(self) -> bool:
        """True if the item should take up space on screen."""
        return not (self.is_absent or self.deleted or self.dead)

    @property
    def is_story(self) -> bool:
        return self.kind == ItemKind.STORY.value

    @property
    def age(self) -> str:
        """Return human-readable time difference."""
        return relative_age(self.time)

    @property
    def hostname(self) -> str:
        return hostname(self.url)

    @property
    def permalink(self) -> str:
        return HN_ITEM_URL.format(id=self.id)

    @property
    def link(self) -> str:
        """The story URL, or its discussion page for text posts."""
        return self.url or self.permalink


@dataclass(frozen=True)
class User:
    """An HN user profile."""

    id: str = ""
    created: int = 0
    karma: int = 0
    about: str = ""
    submitted: tuple[int, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, data: dict | None) -> "User":
        if not data:
            return cls()
        return cls(
            id=data.get("id") or "",
            created=int(data.get("created") or 0),
            karma=int(data.get("karma") or 0),
            about=data.get("about") or "",
            submitted=tuple(data.get("submitted") or ()),
        )

    @property
    def is_absent(self) -> bool:
        return not self.id

    @property
    def joined(self) -> str:
        """Month and year the account was created, e.g. ``Jan 2006``."""
        return datetime.fromtimestamp(self.created).strftime("%b %Y")

    @property
    def profile_url(self) -> str:
        return HN_USER_URL.format(id=self.id)


@dataclass
class FlatComment:
    """A fetched comment paired with its display depth."""

    item: Item | None
    depth: int = 0
    hidden: bool = False  # Reserved for collapsing threads

    @property
    def is_visible(self) -> bool:
        return self.item is not None and self.item.is_visible and not self.hidden


def flatten_comments(comments: list[Item | None], depth: int = 0) -> list[FlatComment]:
    """Pair each comment with its depth, in input order.

    Slots whose fetch failed stay in the sequence as ``None`` so that sibling
    positions never shift. Replies below the first level are not fetched, so
    there is nothing to recurse into.
    """
    return [FlatComment(item=c, depth=depth) for c in comments]
