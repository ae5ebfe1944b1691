# ABOUTME: Error taxonomy for the setup run
# ABOUTME: Config errors are fatal to the run, restart errors are absorbed by restart.py


class SetupError(Exception):
    """Base class for errors raised by dcsetup."""


class ConfigReadError(SetupError):
    """An existing config file could not be read or is not a valid JSON object."""


class ConfigDirError(SetupError):
    """The config directory could not be created."""


class ConfigWriteError(SetupError):
    """The config file could not be written."""


class RestartSubStepError(SetupError):
    """A kill or relaunch command failed, exited non-zero or timed out."""
