"""Palette and fixed layout constants for the interactive views."""

from dataclasses import dataclass


ORANGE = "#FF6600"
SUBTLE_GRAY = "#6C7D8C"
DIM_GRAY = "#3D4B56"
WHITE = "#FFFAF0"
GREEN = "#72C472"
YELLOW = "#E8C547"


@dataclass(frozen=True)
class Style:
    """Rich style strings plus the number of fixed (non-scrolling) rows per view."""

    header: str = f"bold #000000 on {ORANGE}"
    title: str = f"bold {WHITE}"
    selected_title: str = f"bold {ORANGE}"
    cursor: str = ORANGE
    meta: str = SUBTLE_GRAY
    score: str = f"bold {ORANGE}"
    index: str = DIM_GRAY
    url: str = f"italic {GREEN}"
    comment_author: str = f"bold {ORANGE}"
    comment_time: str = SUBTLE_GRAY
    comment_text: str = WHITE
    indent: str = DIM_GRAY
    status: str = f"italic {SUBTLE_GRAY}"
    error: str = "bold red"
    help: str = DIM_GRAY
    user_name: str = f"bold underline {ORANGE}"
    user_karma: str = f"bold {YELLOW}"
    separator: str = DIM_GRAY

    # Header + blank line above, blank line + help bar below.
    list_chrome: int = 4
    # One header row and one footer row.
    comments_chrome: int = 2
    user_chrome: int = 4


DEFAULT_STYLE = Style()
