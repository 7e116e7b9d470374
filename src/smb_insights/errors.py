"""Error types raised by the analytics core and the input layer.

Every error a user can trigger derives from ``InsightsError`` so the CLI
can report it with a single ``except`` clause.
"""


class InsightsError(Exception):
    """Base class for all expected, user-facing failures."""


class InputNotFoundError(InsightsError):
    """The input CSV file does not exist."""

    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"Input not found: {path}")


class InsufficientDataError(InsightsError):
    """Too few observations remain to fit or score a series.

    Attributes:
        available: Number of observations (or rows) present.
        required: Number of observations (or rows) needed.
    """

    def __init__(self, message: str, available: int, required: int) -> None:
        self.available = available
        self.required = required
        super().__init__(message)


class MalformedRowError(InsightsError):
    """A CSV row could not be parsed. Loaders skip these rows."""


class DecompositionError(InsightsError):
    """The trajectory decomposition failed or produced no usable recurrence."""


class MissingRequiredArgumentError(InsightsError):
    """A required command-line argument was not supplied."""


class ConfigurationError(InsightsError):
    """A setting supplied on the command line is out of range."""


class OutputWriteError(InsightsError):
    """A report file could not be written."""

    def __init__(self, path, reason) -> None:
        self.path = path
        super().__init__(f"Could not write {path}: {reason}")
