class MergeGridError(Exception):
    """Base class for errors raised by the merge grid engine."""


class ConfigurationError(MergeGridError, ValueError):
    """Grid dimensions, value range, hit box scale or history depth are invalid."""


class NoTargetElementError(MergeGridError):
    """A rendering operation ran but the engine has no rendering gateway."""


class ReentrantInputError(MergeGridError):
    """An engine operation was started from inside another operation on the same task."""
