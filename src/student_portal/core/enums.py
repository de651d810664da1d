from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for route gating."""

    ADMIN = "admin"
    STUDENT = "student"


class SessionState(str, Enum):
    """Lifecycle of the per-client session."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    LOADING = "LOADING"
    AUTHENTICATED = "AUTHENTICATED"


class AttendanceAggregation(str, Enum):
    """How per-subject attendance counters are folded into one figure."""

    POOLED = "pooled"
    MEAN = "mean"


class SubjectKind(str, Enum):
    ATTENDANCE = "attendance"
    MARKS = "marks"


class ClassType(str, Enum):
    LECTURE = "Lecture"
    LAB = "Lab"
    TUTORIAL = "Tutorial"
