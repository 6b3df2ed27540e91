"""
In-memory accumulator for emitted metric points.
"""
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional


class MetricPoint(NamedTuple):
    measurement: str
    fields: Dict[str, Any]
    tags: Dict[str, str]
    timestamp: datetime


class Accumulator:
    """
    Collects the points emitted during one collection cycle.
    `add_fields` is the emit callback handed to collectors.
    """

    def __init__(self):
        self.points: List[MetricPoint] = []

    def add_fields(self, measurement: str, fields: Dict[str, Any],
                   tags: Optional[Dict[str, str]] = None) -> None:
        self.points.append(MetricPoint(
            measurement,
            dict(fields),
            dict(tags or {}),
            datetime.now()
        ))

    def first(self, measurement: str, **tags) -> Optional[MetricPoint]:
        """Return the first point of `measurement` carrying all given tags."""
        for point in self.points:
            if point.measurement != measurement:
                continue
            if all(point.tags.get(k) == v for k, v in tags.items()):
                return point
        return None

    def __len__(self) -> int:
        return len(self.points)
