# ABOUTME: Tests for error message redaction
from dcsetup.errors import ConfigWriteError
from dcsetup.utils.sanitize import redact_paths, sanitize_error


class TestRedactPaths:
    """Tests for redact_paths function."""

    def test_unix_path(self):
        message = "[Errno 13] Permission denied: '/home/alice/.config/Claude/claude_desktop_config.json'"
        assert redact_paths(message) == "[Errno 13] Permission denied: '[PATH]'"

    def test_windows_drive_path(self):
        message = r"cannot write C:\Users\alice\AppData\Roaming\Claude\config.json now"
        assert redact_paths(message) == "cannot write [PATH] now"

    def test_multiple_paths(self):
        assert redact_paths("/a/b -> /c/d") == "[PATH] -> [PATH]"

    def test_message_without_paths(self):
        assert redact_paths("Command exited with code 1") == "Command exited with code 1"


class TestSanitizeError:
    """Tests for sanitize_error function."""

    def test_exception_includes_type_name(self):
        error = ConfigWriteError("Failed to write config /tmp/x/c.json: disk full")
        assert sanitize_error(error) == "ConfigWriteError: Failed to write config [PATH]: disk full"

    def test_string(self):
        assert sanitize_error("bad /etc/passwd") == "bad [PATH]"

    def test_none(self):
        assert sanitize_error(None) == "Unknown error"
