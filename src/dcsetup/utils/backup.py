# ABOUTME: Backups of the host config taken before setup rewrites it.
# ABOUTME: Timestamped copies under the tool directory, newest 5 kept per config name.
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

from dcsetup.utils.sanitize import sanitize_error

logger = logging.getLogger(__name__)

MAX_BACKUPS_PER_CONFIG = 5

# ABOUTME: Matches {stem}_{YYYYMMDD}_{HHMMSS}_{microseconds}[-{n}]{suffix},
# ABOUTME: e.g. claude_desktop_config_20260108_143022_000512.json
BACKUP_PATTERN = re.compile(r"^(.+)_(\d{8}_\d{6}_\d{6}(?:-\d+)?)(\.[^.]+)?$")


def create_backup(source_path: Path, backup_dir: Path) -> Path:
    """Copy a config file into backup_dir with a timestamped name.

    ABOUTME: Uses shutil.copy2() to keep file metadata
    ABOUTME: Creates backup_dir if it doesn't exist, then prunes old backups

    Args:
        source_path: Config file to back up
        backup_dir: Directory receiving the copy

    Returns:
        Path to the backup file

    Raises:
        FileNotFoundError: If source_path doesn't exist
        OSError: If the copy fails
    """
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    backup_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = backup_dir / f"{source_path.stem}_{timestamp}{source_path.suffix}"
    # Same clock tick as an earlier backup: add -1, -2, ... instead of overwriting
    counter = 1
    while backup_path.exists():
        backup_path = backup_dir / f"{source_path.stem}_{timestamp}-{counter}{source_path.suffix}"
        counter += 1

    shutil.copy2(source_path, backup_path)
    logger.debug(f"Backed up {source_path} to {backup_path}")

    cleanup_old_backups(backup_dir)
    return backup_path


def cleanup_old_backups(
    backup_dir: Path,
    max_backups: int = MAX_BACKUPS_PER_CONFIG,
) -> list[Path]:
    """Delete all but the newest max_backups backups of each config.

    ABOUTME: Groups files by the stem in front of the timestamp
    ABOUTME: Logs a warning when a file can't be removed, never raises

    Returns:
        Paths that were deleted
    """
    deleted: list[Path] = []
    if not backup_dir.exists():
        return deleted

    grouped: dict[str, list[tuple[str, Path]]] = {}
    for file_path in backup_dir.iterdir():
        if not file_path.is_file():
            continue
        match = BACKUP_PATTERN.match(file_path.name)
        if not match:
            continue
        grouped.setdefault(match.group(1), []).append((match.group(2), file_path))

    for backups in grouped.values():
        backups.sort(key=lambda item: item[0], reverse=True)
        for _, file_path in backups[max_backups:]:
            try:
                file_path.unlink()
                deleted.append(file_path)
                logger.debug(f"Deleted old backup: {file_path}")
            except OSError as e:
                logger.warning(f"Failed to delete old backup: {sanitize_error(e)}")

    return deleted
