"""Status enum for maintenance urgency levels."""

from enum import Enum


class Status(Enum):
    """Maintenance status categories. Lower value = more urgent."""

    URGENT = 1  # Inside the urgency threshold (recommended interval reached)
    UPCOMING = 2  # Inside the alert threshold
    OK = 3
