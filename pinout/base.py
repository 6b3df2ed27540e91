"""
Base collector abstract class for pinout metrics collection.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional
import logging

from .accumulator import Accumulator, MetricPoint

# emit(measurement, fields, tags)
Emit = Callable[[str, Dict[str, Any], Dict[str, str]], None]


class BaseCollector(ABC):
    """
    Abstract base class for all collectors.
    Each collector must implement gather() and metric_names().
    """

    def __init__(self, config: dict):
        """
        Initialize collector with configuration.

        Args:
            config: Configuration dictionary from config loader
        """
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self.last_error: Optional[Exception] = None

    @abstractmethod
    def gather(self, emit: Emit) -> None:
        """
        Run one collection cycle and emit one point per observation.

        Args:
            emit: Callback receiving (measurement, fields, tags)

        Raises:
            PinoutError: If the cycle fails; nothing is emitted in that case
        """
        pass

    @classmethod
    @abstractmethod
    def metric_names(cls) -> List[str]:
        """
        Return list of measurement names this collector emits.
        """
        pass

    def safe_gather(self) -> List[MetricPoint]:
        """
        Wrapper that catches exceptions and returns no points on failure.
        This ensures the exporter continues running even if collection fails.

        Returns:
            Points emitted during the cycle, or empty list if it failed
        """
        acc = Accumulator()
        try:
            self.gather(acc.add_fields)
        except Exception as e:
            self.logger.error(f"Failed to collect metrics: {e}")
            self.last_error = e
            return []

        self.last_error = None
        return acc.points
