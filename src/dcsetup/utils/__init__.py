# ABOUTME: Utility modules for dcsetup
# ABOUTME: Exports backup, logging setup and error redaction helpers

from dcsetup.utils.backup import cleanup_old_backups, create_backup
from dcsetup.utils.logfile import DiagnosticFormatter, configure_logging
from dcsetup.utils.sanitize import redact_paths, sanitize_error

__all__ = [
    "create_backup",
    "cleanup_old_backups",
    "configure_logging",
    "DiagnosticFormatter",
    "redact_paths",
    "sanitize_error",
]
