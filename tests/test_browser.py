"""Tests for opening URLs."""

import subprocess
import webbrowser
from unittest.mock import MagicMock, patch

from hnfeed import browser
from hnfeed.browser import build_open_command, open_external


class TestBuildOpenCommand:
    """Tests for shell template expansion."""

    def test_placeholder_replaced(self):
        cmd = build_open_command("echo {} | pbcopy", "https://example.com/a")
        assert cmd == "echo https://example.com/a | pbcopy"

    def test_url_appended_without_placeholder(self):
        assert build_open_command("xdg-open", "https://example.com") == "xdg-open https://example.com"

    def test_url_quoted(self):
        """Query strings must not be interpreted by the shell."""
        cmd = build_open_command("open", "https://example.com/?a=1&b=2")
        assert cmd == "open 'https://example.com/?a=1&b=2'"

    def test_every_placeholder_replaced(self):
        assert build_open_command("echo {} {}", "x") == "echo x x"


class TestOpenExternal:
    """Tests for launching the opener."""

    def test_template_runs_through_sh(self):
        with patch("hnfeed.browser.subprocess.Popen") as popen:
            open_external("https://example.com", "firefox {}")

        args, kwargs = popen.call_args
        assert args[0] == ["sh", "-c", "firefox https://example.com"]
        assert kwargs["stdout"] == subprocess.DEVNULL
        assert kwargs["start_new_session"] is True

    def test_falls_back_to_webbrowser(self):
        with patch("hnfeed.browser.webbrowser.open") as wb_open:
            open_external("https://example.com", "")
        wb_open.assert_called_once_with("https://example.com")

    def test_empty_url_ignored(self):
        with patch("hnfeed.browser.webbrowser.open") as wb_open:
            open_external("", "")
        wb_open.assert_not_called()

    def test_failure_logged_not_raised(self):
        with patch("hnfeed.browser.webbrowser.open", side_effect=webbrowser.Error("no browser")), \
                patch("hnfeed.browser.logger") as logger:
            open_external("https://example.com", "")
        logger.warning.assert_called_once()

    def test_missing_shell_logged(self):
        with patch("hnfeed.browser.subprocess.Popen", side_effect=OSError("not found")):
            open_external("https://example.com", "nope {}")

    def test_finished_openers_reaped(self):
        """Each launch polls earlier openers and forgets the ones that exited."""
        done = MagicMock()
        done.poll.return_value = 0
        running = MagicMock()
        running.poll.return_value = None
        launched = MagicMock()

        with patch.object(browser, "_children", [done, running]), \
                patch("hnfeed.browser.subprocess.Popen", return_value=launched):
            open_external("https://example.com", "firefox {}")
            children = list(browser._children)

        assert children == [running, launched]
        done.poll.assert_called_once()
