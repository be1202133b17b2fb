"""Tests for raw key decoding."""

import os
import pty
import sys
import time

from hnfeed.keys import KeyboardListener, decode_keys, partial_escape_length


class TestDecodeKeys:
    """Tests for turning terminal bytes into key names."""

    def test_plain_characters(self):
        assert decode_keys(["j", "k", "G"]) == ["j", "k", "G"]

    def test_arrow_sequences(self):
        chars = list("\x1b[A\x1b[B\x1b[C\x1b[D")
        assert decode_keys(chars) == ["up", "down", "right", "left"]

    def test_application_mode_arrows(self):
        assert decode_keys(list("\x1bOA\x1bOB")) == ["up", "down"]

    def test_paging_keys(self):
        assert decode_keys(list("\x1b[5~\x1b[6~")) == ["pgup", "pgdown"]

    def test_home_end(self):
        assert decode_keys(list("\x1b[H\x1b[F")) == ["home", "end"]

    def test_lone_escape(self):
        assert decode_keys(["\x1b"]) == ["esc"]

    def test_escape_followed_by_letter(self):
        """An unrecognised sequence is an escape followed by ordinary keys."""
        assert decode_keys(list("\x1bq")) == ["esc", "q"]

    def test_special_keys(self):
        assert decode_keys(["\r", "\n", "\x7f", "\x03", " ", "\t"]) == [
            "enter", "enter", "backspace", "ctrl+c", "space", "tab",
        ]

    def test_mixed_burst(self):
        assert decode_keys(list("j\x1b[Bk\r")) == ["j", "down", "k", "enter"]

    def test_empty(self):
        assert decode_keys([]) == []


class TestKeyboardListener:
    """Tests for draining the key queue."""

    def test_drain_returns_queued_in_order(self):
        listener = KeyboardListener()
        for ch in "abc":
            listener.queue.put(ch)
        assert listener.drain_keys() == ["a", "b", "c"]
        assert listener.drain_keys() == []

    def test_stop_without_start(self):
        KeyboardListener().stop()


class TestPartialEscape:
    """Tests for spotting an escape sequence cut off at the end of a read."""

    def test_complete_sequence(self):
        assert partial_escape_length("\x1b[A") == 0

    def test_plain_text(self):
        assert partial_escape_length("jk") == 0
        assert partial_escape_length("") == 0

    def test_lone_escape_held(self):
        assert partial_escape_length("j\x1b") == 1

    def test_csi_prefix_held(self):
        assert partial_escape_length("j\x1b[") == 2
        assert partial_escape_length("\x1bO") == 2

    def test_paging_prefix_held(self):
        assert partial_escape_length("\x1b[6") == 3

    def test_unknown_continuation_not_held(self):
        assert partial_escape_length("\x1bq") == 0
        assert partial_escape_length("\x1b[Z") == 0


class TestListenerOnTerminal:
    """Tests that run the reader thread against a pseudo-terminal."""

    def setup_method(self):
        self.master, slave = pty.openpty()
        self.stdin = os.fdopen(slave, "r")
        self.listener = KeyboardListener()

    def teardown_method(self):
        self.listener.stop()
        if self.listener._thread is not None:
            self.listener._thread.join(timeout=1)
        self.stdin.close()
        os.close(self.master)

    def read_keys(self, count, timeout=2.0):
        """Collect decoded keys until ``count`` have arrived or time runs out."""
        chars = []
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            chars.extend(self.listener.drain_keys())
            if len(decode_keys(chars)) >= count:
                break
            time.sleep(0.02)
        return decode_keys(chars)

    def test_arrow_key_arrives_whole(self, monkeypatch):
        monkeypatch.setattr(sys, "stdin", self.stdin)
        self.listener.start()
        os.write(self.master, b"\x1b[A")
        keys = self.read_keys(1)
        time.sleep(0.2)
        keys += decode_keys(self.listener.drain_keys())
        assert keys == ["up"]

    def test_burst_of_keys(self, monkeypatch):
        monkeypatch.setattr(sys, "stdin", self.stdin)
        self.listener.start()
        os.write(self.master, b"j\x1b[6~k")
        assert self.read_keys(3) == ["j", "pgdown", "k"]

    def test_lone_escape_delivered_after_timeout(self, monkeypatch):
        monkeypatch.setattr(sys, "stdin", self.stdin)
        self.listener.start()
        os.write(self.master, b"\x1b")
        assert self.read_keys(1) == ["esc"]

    def test_multibyte_character(self, monkeypatch):
        monkeypatch.setattr(sys, "stdin", self.stdin)
        self.listener.start()
        os.write(self.master, "é".encode())
        assert self.read_keys(1) == ["é"]
