"""Turn Vital webhook events into profile field updates.

Each event category maps to a pure extractor ``payload -> fields``. The
extractors never look at the stored profile: a field they leave out keeps
its stored value once the store merges the update.
"""
import logging
import math
from datetime import datetime
from typing import Any, Callable

from pydantic import ValidationError

from app.core.constants import (
    INTEGER_FIELDS,
    SINGLE_VALUE_CATEGORIES,
    UNKNOWN_CATEGORY,
    UNPARSED_PREFIX,
)
from app.core.errors import EventValidationError
from app.core.time_utils import round_half_up, seconds_to_hours, utcnow
from app.schemas.wearable import WearableEvent

logger = logging.getLogger(__name__)

Extractor = Callable[[dict], dict]

REQUIRED_FIELDS = ("event_type", "user_id", "data")


def validate_event(body: Any) -> WearableEvent:
    """Reject events without event_type, user_id or data before dispatch."""
    if not isinstance(body, dict):
        raise EventValidationError("Missing required fields")
    missing = [k for k in REQUIRED_FIELDS if body.get(k) in (None, "")]
    if missing:
        logger.warning("Rejected webhook event, missing %s", ", ".join(missing))
        raise EventValidationError("Missing required fields")
    try:
        return WearableEvent.model_validate(body)
    except ValidationError as e:
        logger.warning("Rejected webhook event: %s", e.errors())
        raise EventValidationError("Missing required fields") from e


def event_category(event_type: str) -> str:
    """'daily.data.steps.created' -> 'steps'. Falls back to 'unknown'."""
    parts = event_type.split(".")
    if len(parts) > 2 and parts[2]:
        return parts[2]
    return UNKNOWN_CATEGORY


def _first_sample(payload: dict) -> dict | None:
    samples = payload.get("data")
    if isinstance(samples, list) and samples and isinstance(samples[0], dict):
        return samples[0]
    return None


def _is_number(v) -> bool:
    # NaN/Infinity parse from JSON but can't be stored or rendered back
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def single_value(field: str) -> Extractor:
    """Extractor copying a numeric data[0].value into `field`."""

    def extract(payload: dict) -> dict:
        first = _first_sample(payload)
        if first is None or not _is_number(first.get("value")):
            return {}
        value = first["value"]
        if field in INTEGER_FIELDS:
            value = int(round_half_up(value))
        return {field: value}

    extract.__name__ = f"extract_{field}"
    return extract


def extract_sleep(payload: dict) -> dict:
    fields = {}
    total = payload.get("total")
    if _is_number(total):
        fields["sleep_hours"] = seconds_to_hours(total)
    if _is_number(payload.get("hr_average")):
        fields["heart_rate"] = payload["hr_average"]
    return fields


def extract_blood_pressure(payload: dict) -> dict:
    # Null readings are left out so the stored value survives the merge
    first = _first_sample(payload)
    if first is None:
        return {}
    fields = {}
    if _is_number(first.get("systolic")):
        fields["blood_pressure_systolic"] = first["systolic"]
    if _is_number(first.get("diastolic")):
        fields["blood_pressure_diastolic"] = first["diastolic"]
    return fields


EXTRACTORS: dict[str, Extractor] = {
    category: single_value(field)
    for category, field in SINGLE_VALUE_CATEGORIES.items()
}
EXTRACTORS["sleep"] = extract_sleep
EXTRACTORS["blood_pressure"] = extract_blood_pressure


def extract_fields(category: str, payload: dict) -> dict:
    """Dispatch on category; unmapped categories keep the raw payload."""
    extractor = EXTRACTORS.get(category)
    if extractor is None:
        logger.info("No extractor for category %r, storing raw payload", category)
        return {f"{UNPARSED_PREFIX}{category}": payload}
    return extractor(payload)


def normalize_event(event: WearableEvent, now: datetime | None = None) -> dict:
    """
    Build the partial profile record for one event.

    Always carries user_id, last_event and both timestamps, plus the
    fields extracted for the event's category.
    """
    now = now or utcnow()
    update = {
        "user_id": event.user_id,
        "last_event": event.event_type,
        "last_updated": now,
        "updated_at": now,
    }
    update.update(extract_fields(event_category(event.event_type), event.data))
    return update
