from __future__ import annotations

from ...core.enums import AttendanceAggregation
from .base import AttendanceAggregator
from .mean import MeanAttendanceAggregator
from .pooled import PooledAttendanceAggregator


def aggregator_for(mode: AttendanceAggregation | str) -> AttendanceAggregator:
    """Factory: settings value -> aggregation strategy."""
    mode = AttendanceAggregation(mode)
    if mode == AttendanceAggregation.MEAN:
        return MeanAttendanceAggregator()
    return PooledAttendanceAggregator()
