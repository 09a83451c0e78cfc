"""Wearable summaries for the dashboards.

Routes depend on a ``MetricsProvider`` instead of a shared instance, so the
source can be swapped per deployment (``settings.metrics_source``) and
replaced with fixtures in tests.
"""
import logging
import random
from typing import Iterable, Protocol

from app.core.constants import (
    HOURLY_READINGS,
    HR_CEILING_BPM,
    HR_FLOOR_BPM,
    MOCK_DEVICE_TYPE,
)
from app.core.time_utils import utcnow
from app.schemas.wearable import WearableMetrics

logger = logging.getLogger(__name__)


class MetricsProvider(Protocol):
    def fetch_metrics(self, user_id: str) -> WearableMetrics:
        ...


def empty_metrics() -> WearableMetrics:
    """Zeroed summary used when a user's data can't be fetched."""
    return WearableMetrics(
        steps=0,
        heart_rate=[],
        calories_burned=0,
        sleep_hours=0,
        distance=0,
        device_type="Unknown",
        last_updated=utcnow(),
    )


class ProfileMetricsProvider:
    """Summary built from the profile the webhook keeps up to date."""

    def __init__(self, store):
        self.store = store

    def fetch_metrics(self, user_id: str) -> WearableMetrics:
        profile = self.store.get(user_id)
        if profile is None:
            return empty_metrics()
        hr = profile.get("heart_rate")
        return WearableMetrics(
            steps=profile.get("steps") or 0,
            heart_rate=[int(hr)] if hr is not None else [],
            calories_burned=profile.get("calories"),
            sleep_hours=profile.get("sleep_hours"),
            distance=None,
            device_type=None,
            last_updated=profile.get("last_updated") or profile.get("updated_at") or utcnow(),
        )


class RandomMetricsProvider:
    """Mock device data with plausible ranges. Pass a seeded Random for repeatable output."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def heart_rate_series(self) -> list[int]:
        # 24 hourly readings around a 60-80 bpm base
        base = self.rng.randint(60, 79)
        readings = []
        for _ in range(HOURLY_READINGS):
            variation = self.rng.randint(-10, 9)
            readings.append(max(HR_FLOOR_BPM, min(HR_CEILING_BPM, base + variation)))
        return readings

    def fetch_metrics(self, user_id: str) -> WearableMetrics:
        return WearableMetrics(
            steps=self.rng.randint(5000, 19999),
            heart_rate=self.heart_rate_series(),
            calories_burned=self.rng.randint(200, 999),
            sleep_hours=self.rng.uniform(6, 10),
            distance=self.rng.uniform(2, 12),
            device_type=MOCK_DEVICE_TYPE,
            last_updated=utcnow(),
        )


def fetch_metrics_for_users(
    provider: MetricsProvider, user_ids: Iterable[str]
) -> dict[str, WearableMetrics]:
    """Fetch each user independently; one failure doesn't sink the batch."""
    results = {}
    for user_id in user_ids:
        try:
            results[user_id] = provider.fetch_metrics(user_id)
        except Exception:
            logger.exception("Error fetching metrics for user %s", user_id)
            results[user_id] = WearableMetrics(steps=0, heart_rate=[], last_updated=utcnow())
    return results
