# ABOUTME: Redaction of local filesystem paths from error messages
# ABOUTME: Applied before any error text reaches the console or the diagnostic log
import re

PATH_PLACEHOLDER = "[PATH]"

# ABOUTME: Drive paths first so "C:\x" becomes "[PATH]" rather than "C:[PATH]"
WINDOWS_PATH_PATTERN = re.compile(r"[A-Za-z]:\\[\w.\-/\\]+")
PATH_PATTERN = re.compile(r"(?:/|\\)[\w.\-/\\]+")


def redact_paths(message: str) -> str:
    """Replace path fragments with [PATH].

    Examples:
        >>> redact_paths("Permission denied: '/home/me/.config/Claude'")
        "Permission denied: '[PATH]'"
        >>> redact_paths(r"cannot open C:\\Users\\me\\x.json")
        'cannot open [PATH]'
    """
    message = WINDOWS_PATH_PATTERN.sub(PATH_PLACEHOLDER, message)
    return PATH_PATTERN.sub(PATH_PLACEHOLDER, message)


def sanitize_error(error: BaseException | str | None) -> str:
    """Return 'ErrorName: message' with paths redacted.

    ABOUTME: Strings are redacted as-is, None becomes 'Unknown error'
    ABOUTME: Never includes a traceback
    """
    if isinstance(error, BaseException):
        message = f"{type(error).__name__}: {error}"
    elif isinstance(error, str):
        message = error
    else:
        message = "Unknown error"
    return redact_paths(message)
