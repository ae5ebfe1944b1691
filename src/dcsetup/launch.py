# ABOUTME: Builds the desktop-commander launch entry for the host config
# ABOUTME: Branches on debug mode and on whether setup itself ran through npx
import logging
import os
import shutil
from collections.abc import Mapping
from pathlib import Path, PureWindowsPath

from dcsetup.config import DEBUG_ENV, DEBUG_PORT, NPM_PACKAGE
from dcsetup.models import ExecutionContext, ServerLaunchSpec

logger = logging.getLogger(__name__)

# ABOUTME: Overrides where the local server build (dist/index.js) is looked up
INSTALL_ROOT_ENV = "DESKTOP_COMMANDER_ROOT"


def get_install_root(environ: Mapping[str, str] | None = None) -> Path:
    """Return the directory the local server build lives in.

    ABOUTME: DESKTOP_COMMANDER_ROOT wins, else the project root above src/dcsetup
    """
    environ = os.environ if environ is None else environ
    override = environ.get(INSTALL_ROOT_ENV)
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parents[2]


def local_entry_point(install_root: Path) -> str:
    return str(install_root / "dist" / "index.js")


def _npx_path(context: ExecutionContext, environ: Mapping[str, str]) -> str:
    if context.platform == "windows":
        return str(PureWindowsPath(environ.get("APPDATA", ""), "npm", "npx.cmd"))
    return shutil.which("npx", path=environ.get("PATH")) or "npx"


def build_server_spec(
    context: ExecutionContext,
    install_root: Path,
    environ: Mapping[str, str] | None = None,
) -> ServerLaunchSpec:
    """Build the launch entry for this run.

    ABOUTME: Debug mode starts node with --inspect-brk on DEBUG_PORT and extra env
    ABOUTME: npx run method points at the published package, anything else at
    ABOUTME: dist/index.js under install_root

    Args:
        context: Detected execution context
        install_root: Directory holding the local server build
        environ: Environment used to resolve npx (defaults to os.environ)

    Returns:
        ServerLaunchSpec to merge into the host config
    """
    environ = os.environ if environ is None else environ
    is_windows = context.platform == "windows"
    use_npx = context.run_method == "npx"
    logger.info(f"Running in {'npx' if use_npx else 'local'} mode")

    if context.debug_mode:
        if use_npx:
            logger.info(
                "Setting up debug configuration with npx. "
                "The process will pause on start until a debugger connects."
            )
            target = [_npx_path(context, environ), NPM_PACKAGE]
        else:
            logger.info(
                "Setting up debug configuration with local path. "
                "The process will pause on start until a debugger connects."
            )
            target = [local_entry_point(install_root)]

        return ServerLaunchSpec(
            command="node.exe" if is_windows else "node",
            args=[f"--inspect-brk={DEBUG_PORT}", *target],
            env=dict(DEBUG_ENV),
        )

    if use_npx:
        return ServerLaunchSpec(
            command="npx.cmd" if is_windows else "npx",
            args=[NPM_PACKAGE],
        )

    return ServerLaunchSpec(command="node", args=[local_entry_point(install_root)])
