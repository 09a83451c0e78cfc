from sqlalchemy import Column, Integer, String, DateTime, Float, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from app.core.constants import METRIC_FIELDS, LINK_FIELDS, EVENT_FIELDS, UNPARSED_PREFIX
from app.db import Base


class WearableProfile(Base):
    __tablename__ = "wearables"

    # One row per user, keyed by the app's user id
    user_id = Column(String, primary_key=True, index=True)

    # Full event-type string of the last processed webhook event
    last_event = Column(String, nullable=True)
    last_updated = Column(DateTime(timezone=True), nullable=True)

    # Latest value of each metric; untouched by events of other categories
    steps = Column(Integer, nullable=True)
    heart_rate = Column(Float, nullable=True)
    sleep_hours = Column(Float, nullable=True)
    blood_pressure_systolic = Column(Float, nullable=True)
    blood_pressure_diastolic = Column(Float, nullable=True)
    glucose = Column(Float, nullable=True)
    body_temperature = Column(Float, nullable=True)
    calories = Column(Float, nullable=True)
    stress_level = Column(Float, nullable=True)
    workout_duration = Column(Float, nullable=True)
    basal_body_temperature = Column(Float, nullable=True)
    body_mass_index = Column(Float, nullable=True)

    # Raw payloads of categories we don't map: {category: payload}
    unparsed = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    # Device link state
    vital_user_id = Column(String, nullable=True, index=True)
    link_url = Column(String, nullable=True)
    status = Column(String(20), nullable=True)   # link_generated, connected
    access_token = Column(String, nullable=True)
    connected_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def to_dict(self) -> dict:
        """Flat view of the row; unparsed payloads become unparsed_<category> keys."""
        out = {"user_id": self.user_id}
        for name in EVENT_FIELDS + METRIC_FIELDS + LINK_FIELDS:
            out[name] = getattr(self, name)
        for category, payload in (self.unparsed or {}).items():
            out[f"{UNPARSED_PREFIX}{category}"] = payload
        return out
