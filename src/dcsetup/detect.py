# ABOUTME: Platform, shell and execution-context detection
# ABOUTME: Pure functions of environment, argv and module path; nothing here raises
import os
import sys
from collections.abc import Mapping, Sequence

from dcsetup.models import ExecutionContext, OSFamily, RunMethod

# ABOUTME: Checked in order, first substring match wins
UNIX_SHELLS = ("bash", "zsh", "fish", "ksh", "csh", "dash")

CI_VARIABLES = ("CI", "GITHUB_ACTIONS", "TRAVIS", "CIRCLECI")

DEBUG_FLAG = "--debug"


def detect_platform(sys_platform: str | None = None) -> OSFamily:
    sys_platform = sys.platform if sys_platform is None else sys_platform
    if sys_platform == "win32":
        return "windows"
    if sys_platform == "darwin":
        return "macos"
    if sys_platform.startswith("linux"):
        return "linux"
    return "other"


def _detect_windows_shell(environ: Mapping[str, str]) -> str:
    if environ.get("TERM_PROGRAM") == "vscode":
        return "vscode-terminal"
    if environ.get("WT_SESSION"):
        return "windows-terminal"
    if "bash" in environ.get("SHELL", ""):
        return "git-bash"
    if "xterm" in environ.get("TERM", ""):
        return "xterm-on-windows"
    if "powershell" in environ.get("ComSpec", "").lower():
        return "powershell"
    if environ.get("PROMPT"):
        return "cmd"

    if environ.get("WSL_DISTRO_NAME") or environ.get("WSLENV"):
        return f"wsl-{environ.get('WSL_DISTRO_NAME') or 'unknown'}"

    return "windows-unknown"


def detect_shell(platform: OSFamily, environ: Mapping[str, str]) -> str:
    """Return a best-effort shell identifier.

    ABOUTME: SHELL path first, then TERM_PROGRAM, else 'unknown-shell'
    ABOUTME: Windows has its own marker chain ending in 'windows-unknown'

    Examples:
        >>> detect_shell("linux", {"SHELL": "/usr/bin/zsh"})
        'zsh'
        >>> detect_shell("macos", {"TERM_PROGRAM": "iTerm.app"})
        'iterm.app'
        >>> detect_shell("linux", {})
        'unknown-shell'
    """
    if platform == "windows":
        return _detect_windows_shell(environ)

    shell_path = environ.get("SHELL", "").lower()
    if shell_path:
        for name in UNIX_SHELLS:
            if name in shell_path:
                return name
        return f"other-unix-{shell_path.rstrip('/').split('/')[-1]}"

    term_program = environ.get("TERM_PROGRAM")
    if term_program:
        return term_program.lower()

    return "unknown-shell"


def detect_run_method(
    environ: Mapping[str, str],
    argv: Sequence[str],
    module_path: str,
) -> RunMethod:
    """Classify how this invocation was started.

    ABOUTME: Priority: npx, then global install, then npm script, else direct
    """
    normalized_path = module_path.replace("\\", "/")
    if (
        environ.get("npm_lifecycle_event") == "npx"
        or "npx" in environ.get("npm_execpath", "")
        or "npx" in environ.get("_", "")
        or "node_modules" in normalized_path
    ):
        return "npx"

    entry_point = argv[0].replace("\\", "/") if argv else ""
    if environ.get("npm_config_global") == "true" or "node_modules/.bin" in entry_point:
        return "global"

    if environ.get("npm_lifecycle_script"):
        return "npm_script"

    return "direct"


def is_ci(environ: Mapping[str, str]) -> bool:
    return any(environ.get(name) for name in CI_VARIABLES)


def detect(
    environ: Mapping[str, str] | None = None,
    argv: Sequence[str] | None = None,
    sys_platform: str | None = None,
    module_path: str | None = None,
) -> ExecutionContext:
    """Build the ExecutionContext for this run.

    ABOUTME: All inputs default to the current process
    ABOUTME: Missing signals degrade to 'unknown' labels instead of errors

    Args:
        environ: Environment variables (defaults to os.environ)
        argv: Command line (defaults to sys.argv)
        sys_platform: Platform string as in sys.platform
        module_path: Location of the running program, used for npx detection

    Returns:
        Immutable ExecutionContext
    """
    environ = os.environ if environ is None else environ
    argv = sys.argv if argv is None else argv
    module_path = __file__ if module_path is None else module_path

    platform = detect_platform(sys_platform)
    return ExecutionContext(
        platform=platform,
        shell=detect_shell(platform, environ),
        run_method=detect_run_method(environ, argv, module_path),
        is_ci=is_ci(environ),
        debug_mode=DEBUG_FLAG in argv[1:],
    )
