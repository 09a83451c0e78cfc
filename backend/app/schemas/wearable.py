from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.constants import UNPARSED_PREFIX


class WearableEvent(BaseModel):
    """Webhook event as delivered by Vital, after required-field checks."""

    event_type: str
    user_id: str
    data: dict[str, Any]

    model_config = ConfigDict(extra="ignore")


class WearableProfileRead(BaseModel):
    """
    Public view of a stored profile.

    Only declared fields and unparsed_<category> payloads pass through;
    link secrets (access_token, link_url) never leave the store.
    """

    user_id: str
    last_event: Optional[str] = None
    last_updated: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    steps: Optional[int] = None
    heart_rate: Optional[float] = None
    sleep_hours: Optional[float] = None
    blood_pressure_systolic: Optional[float] = None
    blood_pressure_diastolic: Optional[float] = None
    glucose: Optional[float] = None
    body_temperature: Optional[float] = None
    calories: Optional[float] = None
    stress_level: Optional[float] = None
    workout_duration: Optional[float] = None
    basal_body_temperature: Optional[float] = None
    body_mass_index: Optional[float] = None

    vital_user_id: Optional[str] = None
    status: Optional[str] = None
    connected_at: Optional[datetime] = None

    # Extras are allowed, but _public_keys has already dropped all but unparsed_*
    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _public_keys(cls, data):
        if isinstance(data, dict):
            return {
                k: v for k, v in data.items()
                if k in cls.model_fields or k.startswith(UNPARSED_PREFIX)
            }
        return data


class WearableMetrics(BaseModel):
    """Summary shown on the client and partner dashboards."""

    steps: int = 0
    heart_rate: list[int] = Field(default_factory=list)
    calories_burned: Optional[float] = None
    sleep_hours: Optional[float] = None
    distance: Optional[float] = None
    device_type: Optional[str] = None
    last_updated: datetime


class WearableMetricsResponse(BaseModel):
    success: bool = True
    data: WearableMetrics
    timestamp: datetime
