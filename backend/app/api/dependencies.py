import random

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db import get_db
from app.services.metrics import MetricsProvider, ProfileMetricsProvider, RandomMetricsProvider
from app.services.profile_store import ProfileStore


def get_profile_store(db: Session = Depends(get_db)) -> ProfileStore:
    return ProfileStore(db)


def get_metrics_provider(
    store: ProfileStore = Depends(get_profile_store),
) -> MetricsProvider:
    if settings.metrics_source == "random":
        return RandomMetricsProvider(random.Random())
    return ProfileMetricsProvider(store)
