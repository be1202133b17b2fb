"""Open URLs in a browser or a user-supplied command."""

import logging
import shlex
import subprocess
import webbrowser

from hnfeed.config import get_open_command

logger = logging.getLogger(__name__)

# Openers still running; polled so finished ones do not linger as zombies
_children: list[subprocess.Popen] = []


def build_open_command(template: str, url: str) -> str:
    """Expand a shell template: ``{}`` is replaced by the URL, else it is appended.

    Examples::

        HNFEED_OPEN="xdg-open"
        HNFEED_OPEN="echo {} | xclip -selection clipboard"
        HNFEED_OPEN="echo {} | pbcopy"
    """
    quoted = shlex.quote(url)
    if "{}" in template:
        return template.replace("{}", quoted)
    return f"{template} {quoted}"


def open_external(url: str, template: str | None = None) -> None:
    """Open ``url`` without waiting. Failures are logged, never raised."""
    if not url:
        return

    if template is None:
        template = get_open_command()

    try:
        if template:
            reap_children()
            _children.append(subprocess.Popen(
                ["sh", "-c", build_open_command(template, url)],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                # Keep ctrl+c and terminal hangups away from the opener
                start_new_session=True,
            ))
        else:
            webbrowser.open(url)
    except (OSError, webbrowser.Error) as e:
        logger.warning("Could not open %s: %s", url, e)


def reap_children() -> None:
    """Collect exit statuses of openers that have finished."""
    _children[:] = [proc for proc in _children if proc.poll() is None]
