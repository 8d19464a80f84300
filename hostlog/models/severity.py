"""
Syslog severity buckets.

A syslog priority is facility * 8 + severity; the low three bits carry the
severity level (0 = emergency ... 7 = debug).
"""

from enum import Enum
from typing import Tuple


class SeverityBucket(str, Enum):
    """Coarse severity classes used for visibility scoring."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def weight(self) -> float:
        return _BUCKET_WEIGHTS[self]


_BUCKET_WEIGHTS = {
    SeverityBucket.ERROR: 10.0,
    SeverityBucket.WARNING: 5.0,
    SeverityBucket.INFO: 1.0,
}


def severity_level(priority: int) -> int:
    """Return the syslog severity level (0-7) encoded in a priority."""
    return priority & 7


def severity_bucket(priority: int) -> SeverityBucket:
    """
    Map a priority onto its scoring bucket.
    
    0-2 (emergency, alert, critical) are errors, 3-4 (error, warning)
    are warnings, 5-7 (notice, informational, debug) are info.
    """
    level = severity_level(priority)
    if level <= 2:
        return SeverityBucket.ERROR
    if level <= 4:
        return SeverityBucket.WARNING
    return SeverityBucket.INFO


def severity_label(priority: int) -> Tuple[str, str]:
    """
    Return a display label and CSS class for a priority.
    
    Display labels split the info bucket into Info (5) and Debug (6-7).
    """
    level = severity_level(priority)
    if level <= 2:
        return "Error", "severity-error"
    if level <= 4:
        return "Warning", "severity-warning"
    if level == 5:
        return "Info", "severity-info"
    return "Debug", "severity-debug"
