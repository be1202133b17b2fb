"""Text layout helpers: markup stripping, word wrapping, relative ages."""

import time
from urllib.parse import urlparse

from bs4 import BeautifulSoup


def strip_markup(markup: str) -> str:
    """Convert HN's HTML fragments into plain text suitable for the terminal.

    Paragraph tags become blank lines, ``<br>`` becomes a newline, every other
    tag is dropped and entities are decoded.
    """
    if not markup:
        return ""

    soup = BeautifulSoup(markup, "html.parser")

    for br in soup.find_all("br"):
        br.replace_with("\n")

    # HN separates paragraphs with bare <p> tags, so they arrive nested
    for p in soup.find_all("p"):
        p.insert_before("\n\n")
        p.unwrap()

    return soup.get_text().strip()


def wrap_to_lines(text: str, width: int) -> list[str]:
    """Greedy word wrap. Words longer than ``width`` are left unbroken."""
    if width <= 0:
        return [text]

    words = text.split()
    if not words:
        return []

    lines = []
    current_line = ""

    for word in words:
        if not current_line:
            current_line = word
        elif len(current_line) + 1 + len(word) <= width:
            current_line += " " + word
        else:
            lines.append(current_line)
            current_line = word

    if current_line:
        lines.append(current_line)

    return lines


def wrap_paragraphs(text: str, width: int) -> list[str]:
    """Wrap each paragraph separately, keeping one blank line between them."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        wrapped = wrap_to_lines(paragraph, width)
        if wrapped:
            lines.extend(wrapped)
        elif lines and lines[-1] != "":
            lines.append("")

    while lines and lines[-1] == "":
        lines.pop()

    return lines


def wrap_text(text: str, width: int, indent: str = "  ") -> list[str]:
    """Wrap text so every line, including ``indent``, fits in ``width``."""
    return [indent + line if line else "" for line in wrap_paragraphs(text, width - len(indent))]


def _pluralize(n: int, unit: str) -> str:
    if n == 1:
        return f"1 {unit}"
    return f"{n} {unit}s"


def relative_age(timestamp: int, now: float | None = None) -> str:
    """Return human-readable age for a unix timestamp."""
    if now is None:
        now = time.time()
    diff = int(now - timestamp)

    if diff < 60:
        return "just now"
    elif diff < 3600:
        return _pluralize(diff // 60, "minute") + " ago"
    elif diff < 86400:
        return _pluralize(diff // 3600, "hour") + " ago"
    else:
        return _pluralize(diff // 86400, "day") + " ago"


def hostname(url: str) -> str:
    """Host part of a URL without a leading ``www.``."""
    if not url:
        return ""
    host = urlparse(url).netloc
    if host.startswith("www."):
        host = host[4:]
    return host


def truncate(text: str, max_len: int) -> str:
    """Truncate text with ellipsis."""
    text = text.replace("\n", " ").strip()
    if max_len <= 0:
        return ""
    if len(text) <= max_len:
        return text
    return text[:max_len - 1] + "…"
