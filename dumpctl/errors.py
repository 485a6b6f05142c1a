class DumpctlError(Exception):
    """Base class for errors raised by dumpctl."""


class ConfigError(DumpctlError):
    """Configuration file missing, unreadable, or invalid."""


class StartupError(DumpctlError):
    """The scheduler could not prepare its output directory."""


class SweepError(DumpctlError):
    """The retention sweep could not list the output directory."""
