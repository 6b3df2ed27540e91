"""
Errors raised while collecting pinout status.
"""


class PinoutError(Exception):
    """Base class for all pinout collection errors."""


class BinaryNotFoundError(PinoutError):
    """The external tool could not be resolved on PATH."""

    def __init__(self, binary: str):
        super().__init__(f"{binary}: executable file not found in $PATH")
        self.binary = binary


class CommandTimeoutError(PinoutError):
    """The external tool did not finish before the timeout."""

    def __init__(self, command: list, timeout: float):
        super().__init__(f"command timed out after {timeout}s: {' '.join(command)}")
        self.command = command
        self.timeout = timeout


class CommandError(PinoutError):
    """Starting or waiting for the external tool failed."""


class PinoutParseError(PinoutError):
    """A matching output line carried malformed numeric text."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"Failed to parse line {line!r}: {reason}")
        self.line = line
