"""
Tests for the visibility scoring engine.
"""

import math
from datetime import timedelta

import pytest

from hostlog.config import Settings
from hostlog.exceptions import EntryNotFoundError, StorageError
from hostlog.models.severity import SeverityBucket, severity_bucket, severity_label
from hostlog.scoring.engine import VisibilityScoringEngine, top_host_scores, weighted_severity

from conftest import (
    ERROR_PRIORITY,
    INFO_PRIORITY,
    WARNING_PRIORITY,
    add_entries,
    minutes_ago,
)


@pytest.fixture
def engine(log_repo, now):
    """Engine with default weights and a frozen clock."""
    return VisibilityScoringEngine(log_repo, clock=lambda: now)


class TestSeverity:
    """Tests for severity buckets and weighting."""

    def test_buckets_use_low_three_bits(self):
        assert severity_bucket(0) == SeverityBucket.ERROR
        assert severity_bucket(8 * 4 + 2) == SeverityBucket.ERROR
        assert severity_bucket(8 * 23 + 3) == SeverityBucket.WARNING
        assert severity_bucket(4) == SeverityBucket.WARNING
        assert severity_bucket(5) == SeverityBucket.INFO
        assert severity_bucket(191) == SeverityBucket.INFO

    def test_display_labels(self):
        assert severity_label(1)[0] == "Error"
        assert severity_label(3)[0] == "Warning"
        assert severity_label(13)[0] == "Info"
        assert severity_label(15) == ("Debug", "severity-debug")

    def test_weighted_severity(self):
        assert weighted_severity([]) == 0.0
        assert weighted_severity([ERROR_PRIORITY] * 4) == 10.0
        assert weighted_severity([INFO_PRIORITY] * 4) == 1.0
        assert weighted_severity([ERROR_PRIORITY, WARNING_PRIORITY, INFO_PRIORITY]) == pytest.approx(16 / 3)


class TestComponents:
    """Tests for the individual score components."""

    @pytest.mark.asyncio
    async def test_time_decay(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 120))

        decay = await engine.time_decay_component("10.0.0.1", now)
        assert decay == pytest.approx(10.0 * math.exp(-0.2 * 2))

    @pytest.mark.asyncio
    async def test_time_decay_uses_latest_created_entry(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 0))
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 300))

        decay = await engine.time_decay_component("10.0.0.1", now)
        assert decay == pytest.approx(10.0 * math.exp(-0.2 * 5))

    @pytest.mark.asyncio
    async def test_time_decay_without_entries(self, engine):
        with pytest.raises(EntryNotFoundError):
            await engine.time_decay_component("10.0.0.1", engine.clock())

    @pytest.mark.asyncio
    async def test_time_decay_future_timestamp(self, engine, log_repo, now):
        """A sender clock far ahead counts as just now instead of overflowing."""
        await add_entries(log_repo, "10.0.0.1", [now + timedelta(days=160)])

        assert await engine.time_decay_component("10.0.0.1", now) == pytest.approx(10.0)

    @pytest.mark.asyncio
    async def test_volume_counts_last_hour(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 1, 20, 40))
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 61, 90))

        assert await engine.volume_component("10.0.0.1", now) == pytest.approx(0.5 * 3)

    @pytest.mark.asyncio
    async def test_volume_is_capped(self, engine, log_repo, now):
        """150 entries in the last hour score as 100."""
        timestamps = [now - timedelta(seconds=i) for i in range(150)]
        await add_entries(log_repo, "10.0.0.1", timestamps)

        assert await engine.volume_component("10.0.0.1", now) == pytest.approx(0.5 * 100)

    @pytest.mark.asyncio
    async def test_severity_all_error(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 5, 300, 600), ERROR_PRIORITY)

        assert await engine.severity_component("10.0.0.1", now) == pytest.approx(50.0)

    @pytest.mark.asyncio
    async def test_severity_all_info(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 5, 300, 600), INFO_PRIORITY)

        assert await engine.severity_component("10.0.0.1", now) == pytest.approx(5.0)

    @pytest.mark.asyncio
    async def test_severity_mixed_lies_between(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 5), ERROR_PRIORITY)
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 6), WARNING_PRIORITY)
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 7), INFO_PRIORITY)

        severity = await engine.severity_component("10.0.0.1", now)
        assert 5.0 < severity < 50.0
        assert severity == pytest.approx(5.0 * 16 / 3)

    @pytest.mark.asyncio
    async def test_severity_ignores_old_entries(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 60 * 25), ERROR_PRIORITY)

        assert await engine.severity_component("10.0.0.1", now) == 0.0


class TestVisibilityScore:
    """Tests for score() and score_all()."""

    @pytest.mark.asyncio
    async def test_score_is_sum_of_components(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 30), ERROR_PRIORITY)

        expected = 10.0 * math.exp(-0.2 * 0.5) + 0.5 * 1 + 5.0 * 10
        assert await engine.score("10.0.0.1") == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_minimum_score(self, engine, log_repo, now):
        """A long-silent host bottoms out at the minimum score."""
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 60 * 200))

        assert await engine.score("10.0.0.1") == pytest.approx(0.1)

    @pytest.mark.asyncio
    async def test_more_recent_host_scores_higher(self, engine, log_repo, now):
        """Same volume and severity, the more recent host wins."""
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 120), WARNING_PRIORITY)
        await add_entries(log_repo, "10.0.0.2", minutes_ago(now, 300), WARNING_PRIORITY)

        assert await engine.score("10.0.0.1") > await engine.score("10.0.0.2")

    @pytest.mark.asyncio
    async def test_score_without_entries(self, engine):
        with pytest.raises(EntryNotFoundError):
            await engine.score("10.0.0.1")

    @pytest.mark.asyncio
    async def test_score_all(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 1, 2, 3), ERROR_PRIORITY)
        await add_entries(log_repo, "10.0.0.2", minutes_ago(now, 600), INFO_PRIORITY)

        scores = await engine.score_all()

        assert set(scores) == {"10.0.0.1", "10.0.0.2"}
        assert scores["10.0.0.1"] > scores["10.0.0.2"]
        assert all(score >= 0.1 for score in scores.values())

    @pytest.mark.asyncio
    async def test_score_all_skips_empty_host(self, engine, log_repo, now):
        await add_entries(log_repo, "", minutes_ago(now, 1))
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 1))

        assert set(await engine.score_all()) == {"10.0.0.1"}

    @pytest.mark.asyncio
    async def test_score_all_empty_store(self, engine):
        assert await engine.score_all() == {}

    @pytest.mark.asyncio
    async def test_score_all_omits_failing_hosts(self, log_repo, now):
        """One host failing to score does not abort the others."""
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 1))
        await add_entries(log_repo, "10.0.0.2", minutes_ago(now, 1))

        class FlakyLogs:
            def __getattr__(self, name):
                return getattr(log_repo, name)

            async def distinct_host_identities(self):
                return ["10.0.0.1", "10.0.0.2", "10.0.0.3"]

            async def count_since(self, host_identity, since):
                if host_identity == "10.0.0.2":
                    raise StorageError("read failed")
                return await log_repo.count_since(host_identity, since)

        engine = VisibilityScoringEngine(FlakyLogs(), clock=lambda: now)
        scores = await engine.score_all()

        # 10.0.0.2 fails to read, 10.0.0.3 has no entries
        assert set(scores) == {"10.0.0.1"}

    @pytest.mark.asyncio
    async def test_score_all_with_future_clock_host(self, engine, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 1))
        await add_entries(log_repo, "10.0.0.2", [now + timedelta(days=160)])

        scores = await engine.score_all()

        assert set(scores) == {"10.0.0.1", "10.0.0.2"}
        assert all(math.isfinite(score) for score in scores.values())

    @pytest.mark.asyncio
    async def test_score_all_contains_unexpected_errors(self, log_repo, now):
        await add_entries(log_repo, "10.0.0.1", minutes_ago(now, 1))
        await add_entries(log_repo, "10.0.0.2", minutes_ago(now, 1))

        class BrokenLogs:
            def __getattr__(self, name):
                return getattr(log_repo, name)

            async def entries_since(self, host_identity, since):
                if host_identity == "10.0.0.2":
                    raise ValueError("corrupt row")
                return await log_repo.entries_since(host_identity, since)

        engine = VisibilityScoringEngine(BrokenLogs(), clock=lambda: now)

        assert set(await engine.score_all()) == {"10.0.0.1"}

    @pytest.mark.asyncio
    async def test_from_settings(self, log_repo, now):
        settings = Settings(score_alpha=20.0, score_min=1.0, volume_cap=10)
        engine = VisibilityScoringEngine.from_settings(log_repo, settings)

        assert engine.alpha == 20.0
        assert engine.min_score == 1.0
        assert engine.volume_cap == 10
        assert engine.volume_window == timedelta(hours=1)
        assert engine.severity_window == timedelta(hours=24)


class TestTopHostScores:
    """Tests for top_host_scores."""

    def test_orders_best_first(self):
        scores = {"10.0.0.1": 5.0, "10.0.0.2": 60.0, "10.0.0.3": 12.5, "10.0.0.4": 0.1}

        top = top_host_scores(scores, 3)

        assert [h.host_identity for h in top] == ["10.0.0.2", "10.0.0.3", "10.0.0.1"]
        assert top[0].score == 60.0

    def test_ties_broken_by_host(self):
        top = top_host_scores({"10.0.0.2": 1.0, "10.0.0.1": 1.0}, 5)
        assert [h.host_identity for h in top] == ["10.0.0.1", "10.0.0.2"]

    def test_empty(self):
        assert top_host_scores({}, 3) == []
