"""Messages exchanged between the control loop and the views.

Events flow into views (key presses, resizes, load completions). Commands
flow out of views and are carried out by the controller.
"""

from dataclasses import dataclass, field

from hnfeed.models import Item, User


# Events

@dataclass(frozen=True)
class Key:
    """A decoded key press, e.g. ``"up"``, ``"enter"``, ``"j"``."""
    name: str


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class StoriesLoaded:
    """A story list finished loading."""
    items: list[Item] = field(default_factory=list)
    error: Exception | None = None


@dataclass(frozen=True)
class ItemLoaded:
    """A story and its first-level comments finished loading.

    ``comments`` has one slot per requested child; failed fetches are None.
    """
    story: Item | None = None
    comments: list[Item | None] = field(default_factory=list)
    error: Exception | None = None


@dataclass(frozen=True)
class UserLoaded:
    """A profile finished loading. ``user`` is None when the name is unknown."""
    user: User | None = None
    items: list[Item] = field(default_factory=list)
    error: Exception | None = None


Event = Key | Resize | StoriesLoaded | ItemLoaded | UserLoaded


# Commands

@dataclass(frozen=True)
class OpenItem:
    item_id: int


@dataclass(frozen=True)
class OpenUser:
    username: str


@dataclass(frozen=True)
class OpenURL:
    url: str


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class Reload:
    pass


Command = OpenItem | OpenUser | OpenURL | Back | Reload
