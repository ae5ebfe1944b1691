# Configuration constants and the tool's own config file
import logging
from pathlib import Path
from typing import Any

from dcsetup.errors import ConfigDirError
from dcsetup.host_config import persist, read_json_file
from dcsetup.models import OSFamily

logger = logging.getLogger(__name__)

# ABOUTME: Name of the server entry written into the host config
SERVER_NAME = "desktop-commander"

# ABOUTME: Entry names used by older releases, removed on every run
LEGACY_SERVER_NAMES: tuple[str, ...] = ("desktopCommander",)

# ABOUTME: Package launched through npx when setup itself ran through npx
NPM_PACKAGE = "@wonderwhy-er/desktop-commander@latest"

DEBUG_PORT = 9229

# ABOUTME: Environment variables injected into the server entry in debug mode
DEBUG_ENV: dict[str, str] = {
    "NODE_OPTIONS": "--trace-warnings --trace-exit",
    "DEBUG": "*",
}

# ABOUTME: Timing of the restart coordinator (seconds)
SETTLE_DELAY_SECONDS = 3.0
COMMAND_TIMEOUT_SECONDS = 10.0

# ABOUTME: Pause before exiting non-zero so console output can be read
FAILURE_EXIT_DELAY_SECONDS = 1.0

DOWNLOAD_URL = "https://claude.ai/download"

# ABOUTME: Tool directory under the user's home, holds log, tool config and backups
TOOL_DIR_NAME = ".claude-server-commander"

DEFAULT_BLOCKED_COMMANDS: list[str] = [
    "format", "mount", "umount", "mkfs", "fdisk", "dd", "sudo", "su",
    "passwd", "adduser", "useradd", "usermod", "groupadd",
]


def get_tool_dir(home: Path | None = None) -> Path:
    """Return ~/.claude-server-commander (not created)."""
    return (home if home is not None else Path.home()) / TOOL_DIR_NAME


def get_log_path(home: Path | None = None) -> Path:
    return get_tool_dir(home) / "setup.log"


def get_tool_config_path(home: Path | None = None) -> Path:
    return get_tool_dir(home) / "config.json"


def get_backup_dir(home: Path | None = None) -> Path:
    return get_tool_dir(home) / "backups"


def default_tool_config(platform: OSFamily) -> dict[str, Any]:
    """Build the default tool config for a platform.

    ABOUTME: Returns a fresh dict each call so callers can mutate it
    """
    return {
        "blockedCommands": list(DEFAULT_BLOCKED_COMMANDS),
        "defaultShell": "powershell.exe" if platform == "windows" else "bash",
        "allowedDirectories": [],
    }


def configure_filesystem_access(
    platform: OSFamily,
    home: Path | None = None,
) -> dict[str, Any]:
    """Write the tool config, restricting file access to the home directory.

    ABOUTME: Existing values win over defaults, except allowedDirectories
    ABOUTME: A malformed existing file raises ConfigReadError and is left alone

    Args:
        platform: Detected OS family, picks the default shell
        home: Home directory (defaults to Path.home())

    Returns:
        The config that was written

    Raises:
        ConfigReadError: If the existing tool config can't be parsed
        ConfigDirError: If the tool directory can't be created
        ConfigWriteError: If the tool config can't be written
    """
    home = home if home is not None else Path.home()
    tool_dir = get_tool_dir(home)
    config_path = get_tool_config_path(home)

    try:
        tool_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigDirError(f"Failed to create tool directory {tool_dir}: {e}") from e

    config = default_tool_config(platform)
    if config_path.exists():
        config.update(read_json_file(config_path))
        logger.debug("Loaded existing tool configuration")

    config["allowedDirectories"] = [str(home)]
    logger.info(f"Access restricted to home directory: {home}")

    persist(config_path, config)
    logger.info(f"Configuration saved to: {config_path}")
    return config
