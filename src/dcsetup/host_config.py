# Host application (Claude Desktop) config store
import copy
import json
import logging
import os
import shutil
import sys
import tempfile
import time
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from dcsetup.errors import ConfigDirError, ConfigReadError, ConfigWriteError
from dcsetup.models import HostConfig, OSFamily, ServerLaunchSpec

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "claude_desktop_config.json"

# ABOUTME: Shell invocation written into a freshly created host config
DEFAULT_SERVER_CONFIG: dict[str, dict[str, Any]] = {
    "windows": {"command": "cmd.exe", "args": ["/c"]},
    "posix": {"command": "/bin/sh", "args": ["-c"]},
}

# ABOUTME: os.replace can fail while another process has the file open on Windows
REPLACE_RETRIES_WINDOWS = 3
REPLACE_RETRY_DELAY = 0.1


def get_host_config_path(
    platform: OSFamily,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """Return the platform-specific Claude Desktop config path.

    ABOUTME: Windows reads %APPDATA%, other platforms use a fixed path under home
    ABOUTME: The file may not exist yet
    """
    environ = os.environ if environ is None else environ
    home = home if home is not None else Path.home()

    if platform == "windows":
        appdata = environ.get("APPDATA")
        base = Path(appdata) if appdata else home / "AppData" / "Roaming"
        return base / "Claude" / CONFIG_FILENAME
    if platform == "macos":
        return home / "Library" / "Application Support" / "Claude" / CONFIG_FILENAME
    if platform == "linux":
        return home / ".config" / "Claude" / CONFIG_FILENAME
    return home / f".{CONFIG_FILENAME}"


def default_host_config(platform: OSFamily) -> HostConfig:
    key = "windows" if platform == "windows" else "posix"
    return {"serverConfig": copy.deepcopy(DEFAULT_SERVER_CONFIG[key])}


def read_json_file(path: Path) -> dict[str, Any]:
    """Read a JSON object from disk.

    ABOUTME: Raises ConfigReadError for unreadable files, invalid JSON or non-objects
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigReadError(f"Invalid JSON in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadError(f"Failed to read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigReadError(f"Config in {path} must be a JSON object")
    return data


def load_or_default(path: Path, platform: OSFamily) -> tuple[HostConfig, bool]:
    """Load the host config, or build the default one if the file is absent.

    ABOUTME: Never writes; the caller persists once after merging
    ABOUTME: Second element is True when the config was default-constructed

    Args:
        path: Host config file path
        platform: Detected OS family, picks the default shell invocation

    Returns:
        Tuple of (config, created)

    Raises:
        ConfigReadError: If the file exists but isn't a valid config object
    """
    if not path.exists():
        logger.info(f"Claude config file not found at: {path}")
        logger.info("Creating default config file...")
        return default_host_config(platform), True

    config = read_json_file(path)
    servers = config.get("mcpServers")
    if servers is not None and not isinstance(servers, dict):
        raise ConfigReadError(f"'mcpServers' in {path} must be a JSON object")

    logger.info("Existing config file found and read successfully")
    return config, False


def ensure_directory(path: Path) -> Path:
    """Create the parent directory of a config file if missing.

    Raises:
        ConfigDirError: If the directory can't be created
    """
    config_dir = path.parent
    if config_dir.is_dir():
        return config_dir

    logger.info(f"Creating config directory: {config_dir}")
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigDirError(f"Failed to create config directory: {e}") from e
    return config_dir


def _replace(source: str, target: Path) -> None:
    retries = REPLACE_RETRIES_WINDOWS if sys.platform == "win32" else 1
    for attempt in range(retries):
        try:
            os.replace(source, target)
            return
        except OSError:
            if attempt < retries - 1:
                time.sleep(REPLACE_RETRY_DELAY)
            else:
                raise


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def persist(path: Path, config: Mapping[str, Any]) -> None:
    """Write a config file in one all-or-nothing step.

    ABOUTME: Writes a sibling temp file, fsyncs it, then os.replace()s the target
    ABOUTME: On any failure the temp file is removed and the target is unchanged
    ABOUTME: Uses 2-space indentation and a trailing newline

    Raises:
        ConfigWriteError: If serialization or any filesystem step fails
    """
    try:
        content = json.dumps(config, indent=2, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as e:
        raise ConfigWriteError(f"Failed to serialize config: {e}") from e

    # ABOUTME: Symlinked configs are written through to the file they point at
    target = Path(os.path.realpath(path))
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if target.exists():
            shutil.copymode(target, tmp_name)
        else:
            os.chmod(tmp_name, _default_file_mode())
        _replace(tmp_name, target)
        tmp_name = None
    except OSError as e:
        raise ConfigWriteError(f"Failed to write config {path}: {e}") from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug(f"Could not remove temp file {tmp_name}")


def merge(
    config: Mapping[str, Any],
    server_name: str,
    spec: ServerLaunchSpec,
    legacy_names: Iterable[str] = ("desktopCommander",),
) -> HostConfig:
    """Return a copy of config with the server entry replaced.

    ABOUTME: Legacy entries are removed, server_name is replaced wholesale
    ABOUTME: All other keys and other mcpServers entries are kept as they are
    ABOUTME: Doesn't mutate the input

    Examples:
        >>> merged = merge({"other": 1, "mcpServers": {"desktopCommander": {}}},
        ...                "desktop-commander", ServerLaunchSpec("npx", ["pkg"]))
        >>> sorted(merged["mcpServers"])
        ['desktop-commander']
        >>> merged["other"]
        1
    """
    result: HostConfig = copy.deepcopy(dict(config))
    servers = dict(result.get("mcpServers") or {})

    for legacy in legacy_names:
        if legacy != server_name and legacy in servers:
            del servers[legacy]
            logger.info(f"Removed old {legacy} configuration")

    servers[server_name] = spec.to_dict()
    result["mcpServers"] = servers
    return result
