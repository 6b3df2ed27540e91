"""
Pinout collectors and the pieces they are built from.
"""
from typing import Dict, Optional

from .accumulator import Accumulator, MetricPoint
from .base import BaseCollector
from .exceptions import (
    BinaryNotFoundError,
    CommandError,
    CommandTimeoutError,
    PinoutError,
    PinoutParseError,
)
from .parser import NO_BANK, PinStatus, parse_output
from .raspberry_pi import HostCommand, RaspberryPiPinoutCollector
from .runner import run_command


def build_collector(config: Dict, host_command: Optional[HostCommand] = None) -> BaseCollector:
    """
    Construct the pinout collector for a configuration.

    Args:
        config: Configuration dictionary
        host_command: Command runner, defaults to run_command

    Returns:
        Initialized collector instance
    """
    return RaspberryPiPinoutCollector(config, host_command=host_command)


__all__ = [
    "Accumulator",
    "BaseCollector",
    "BinaryNotFoundError",
    "CommandError",
    "CommandTimeoutError",
    "MetricPoint",
    "NO_BANK",
    "PinStatus",
    "PinoutError",
    "PinoutParseError",
    "RaspberryPiPinoutCollector",
    "build_collector",
    "parse_output",
    "run_command",
]
