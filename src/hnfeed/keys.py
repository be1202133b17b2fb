"""Raw terminal input: a background key reader and escape-sequence decoding."""

import codecs
import os
import select
import sys
import termios
import tty
from queue import Empty, Queue
from threading import Thread


# Longest sequences first so prefixes don't shadow them
ESCAPE_SEQUENCES = (
    ("\x1b[5~", "pgup"),
    ("\x1b[6~", "pgdown"),
    ("\x1b[A", "up"),
    ("\x1b[B", "down"),
    ("\x1b[C", "right"),
    ("\x1b[D", "left"),
    ("\x1b[H", "home"),
    ("\x1b[F", "end"),
    ("\x1bOA", "up"),
    ("\x1bOB", "down"),
    ("\x1bOC", "right"),
    ("\x1bOD", "left"),
)

SPECIAL_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x03": "ctrl+c",
    "\t": "tab",
    " ": "space",
}

# How long a lone ESC waits for the rest of a sequence
ESCAPE_TIMEOUT = 0.05


def decode_keys(chars: list[str]) -> list[str]:
    """Turn raw characters into key names like ``up``, ``enter``, ``q``."""
    data = "".join(chars)
    keys = []
    i = 0

    while i < len(data):
        if data[i] == "\x1b":
            for seq, name in ESCAPE_SEQUENCES:
                if data.startswith(seq, i):
                    keys.append(name)
                    i += len(seq)
                    break
            else:
                keys.append("esc")
                i += 1
            continue

        ch = data[i]
        keys.append(SPECIAL_KEYS.get(ch, ch))
        i += 1

    return keys


def partial_escape_length(data: str) -> int:
    """Length of an unfinished escape sequence at the end of ``data``, or 0.

    ``"j\\x1b["`` gives 2: the reader should hold those two characters back
    until the rest of the sequence (or a timeout) arrives.
    """
    start = data.rfind("\x1b", max(0, len(data) - 3))
    if start == -1:
        return 0
    tail = data[start:]
    for seq, _ in ESCAPE_SEQUENCES:
        if len(tail) < len(seq) and seq.startswith(tail):
            return len(tail)
    return 0


class KeyboardListener:
    """Non-blocking keyboard listener for terminal using select()."""

    def __init__(self):
        self.queue: Queue[str] = Queue()
        self._running = False
        self._thread: Thread | None = None
        self._old_settings = None
        self._fd: int | None = None

    def start(self):
        """Start listening for keypresses."""
        if self._running:
            return

        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=0.5)

        self._running = True
        try:
            fd = sys.stdin.fileno()
            self._old_settings = termios.tcgetattr(fd)
            self._fd = fd
            tty.setcbreak(fd)
            # Deliver Ctrl+C as a key instead of SIGINT
            attrs = termios.tcgetattr(fd)
            attrs[3] &= ~termios.ISIG
            termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
        except (termios.error, ValueError, OSError):
            pass  # Not a TTY

        self._thread = Thread(target=self._listen, daemon=True)
        self._thread.start()

    def stop(self):
        """Stop listening and restore terminal."""
        self._running = False
        if self._old_settings:
            try:
                termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_settings)
            except termios.error:
                pass  # Terminal already gone
            self._old_settings = None

    def _listen(self):
        """Background thread that reads keypresses using select for non-blocking.

        Reads go straight to the file descriptor: the text wrapper around
        stdin would buffer the tail of an escape sequence where select()
        cannot see it.
        """
        try:
            fd = sys.stdin.fileno()
        except (OSError, ValueError):
            return

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""
        while self._running:
            try:
                # Use select with timeout so we can check _running periodically
                readable, _, _ = select.select([fd], [], [], ESCAPE_TIMEOUT)
                if not self._running:
                    break
                if not readable:
                    # Nothing followed the ESC in time, so it was a real ESC
                    self._put(pending)
                    pending = ""
                    continue

                data = os.read(fd, 32)
                if not data:
                    break  # EOF
                text = pending + decoder.decode(data)
                cut = len(text) - partial_escape_length(text)
                self._put(text[:cut])
                pending = text[cut:]
            except (OSError, ValueError):
                break  # stdin closed underneath us
        self._put(pending)

    def _put(self, text: str):
        for ch in text:
            self.queue.put(ch)

    def drain_keys(self) -> list[str]:
        """Get all queued keypresses, non-blocking."""
        keys = []
        while True:
            try:
                keys.append(self.queue.get_nowait())
            except Empty:
                break
        return keys
