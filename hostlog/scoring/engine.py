"""
Visibility scoring engine - ranks hosts by recent log activity.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from hostlog.config import Settings
from hostlog.database.repositories import LogRepository
from hostlog.exceptions import HostlogError
from hostlog.models.host_score import HostScore
from hostlog.models.severity import SeverityBucket, severity_bucket
from hostlog.timeutil import ensure_utc, utcnow


logger = logging.getLogger(__name__)


def weighted_severity(priorities: Iterable[int]) -> float:
    """
    Average bucket weight of a set of priorities.

    Errors weigh 10, warnings 5, info 1. An empty set averages to 0.
    """
    counts = {bucket: 0 for bucket in SeverityBucket}
    for priority in priorities:
        counts[severity_bucket(priority)] += 1

    total = sum(counts.values())
    if total == 0:
        return 0.0

    return sum(bucket.weight * count for bucket, count in counts.items()) / total


class VisibilityScoringEngine:
    """
    Computes per-host visibility scores from the log store.

    score = max(min_score, time_decay + volume + severity), where
    - time_decay = alpha * e^(-lambda * T), T = hours since the host's latest entry
    - volume = beta * min(entries in the volume window, volume_cap)
    - severity = gamma * weighted severity over the severity window

    The three components are additive and independently weighted. Scores
    are derived on demand and never stored.
    """

    def __init__(
        self,
        logs: LogRepository,
        alpha: float = 10.0,
        decay_rate: float = 0.2,
        beta: float = 0.5,
        gamma: float = 5.0,
        min_score: float = 0.1,
        volume_cap: int = 100,
        volume_window: timedelta = timedelta(hours=1),
        severity_window: timedelta = timedelta(hours=24),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.logs = logs
        self.alpha = alpha
        self.decay_rate = decay_rate
        self.beta = beta
        self.gamma = gamma
        self.min_score = min_score
        self.volume_cap = volume_cap
        self.volume_window = volume_window
        self.severity_window = severity_window
        self.clock = clock or utcnow

    @classmethod
    def from_settings(cls, logs: LogRepository, settings: Settings) -> "VisibilityScoringEngine":
        return cls(
            logs,
            alpha=settings.score_alpha,
            decay_rate=settings.score_lambda,
            beta=settings.score_beta,
            gamma=settings.score_gamma,
            min_score=settings.score_min,
            volume_cap=settings.volume_cap,
            volume_window=timedelta(hours=settings.volume_window_hours),
            severity_window=timedelta(hours=settings.severity_window_hours),
        )

    async def time_decay_component(self, host_identity: str, now: datetime) -> float:
        """
        alpha * e^(-lambda * T), T in hours since the most recent entry.

        A latest entry stamped in the future (sender clock ahead) counts as
        T = 0, so the component never exceeds alpha.

        Raises:
            EntryNotFoundError: If the host has no entries
        """
        latest = await self.logs.most_recent_entry(host_identity)
        hours_since = max((now - latest.timestamp).total_seconds() / 3600, 0.0)
        return self.alpha * math.exp(-self.decay_rate * hours_since)

    async def volume_component(self, host_identity: str, now: datetime) -> float:
        """beta * entries in the volume window, capped so bursts cannot dominate."""
        count = await self.logs.count_since(host_identity, now - self.volume_window)
        return self.beta * min(count, self.volume_cap)

    async def severity_component(self, host_identity: str, now: datetime) -> float:
        """gamma * weighted average severity over the severity window."""
        entries = await self.logs.entries_since(host_identity, now - self.severity_window)
        return self.gamma * weighted_severity(e.priority for e in entries)

    async def score(self, host_identity: str) -> float:
        """
        Visibility score for one host.

        Raises:
            EntryNotFoundError: If the host has no entries
            StorageError: If the log store cannot be read
        """
        now = ensure_utc(self.clock())

        time_decay = await self.time_decay_component(host_identity, now)
        volume = await self.volume_component(host_identity, now)
        severity = await self.severity_component(host_identity, now)

        return max(self.min_score, time_decay + volume + severity)

    async def score_all(self) -> Dict[str, float]:
        """
        Score every known host.

        Hosts that fail to score are logged and left out; one failure never
        aborts the batch. The empty host identity is skipped.

        Raises:
            StorageError: If the host list itself cannot be read
        """
        scores: Dict[str, float] = {}

        for host_identity in await self.logs.distinct_host_identities():
            if not host_identity:
                continue

            try:
                scores[host_identity] = await self.score(host_identity)
            except HostlogError as e:
                logger.warning(f"Error calculating score for host {host_identity}: {e}")
                continue
            except Exception as e:
                logger.error(f"Unexpected error scoring host {host_identity}: {e}", exc_info=True)
                continue

        return scores


def top_host_scores(scores: Dict[str, float], n: int) -> List[HostScore]:
    """The n highest scores, best first; ties broken by host identity."""
    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [
        HostScore(host_identity=host, score=score)
        for host, score in ranked[:max(n, 0)]
    ]
