"""Shared application constants.

Centralizes the wearable metric names and the webhook category table so
the normalizer, the store and the API agree on one set of field names.
"""

# Metric columns on the wearables profile, each independently optional
METRIC_FIELDS = (
    "steps",
    "heart_rate",
    "sleep_hours",
    "blood_pressure_systolic",
    "blood_pressure_diastolic",
    "glucose",
    "body_temperature",
    "calories",
    "stress_level",
    "workout_duration",
    "basal_body_temperature",
    "body_mass_index",
)

# Device-link state written by the Vital linking routes
LINK_FIELDS = (
    "vital_user_id",
    "link_url",
    "status",
    "access_token",
    "connected_at",
    "created_at",
)

# Bookkeeping written on every processed event
EVENT_FIELDS = ("last_event", "last_updated", "updated_at")

# Raw payloads of unmapped categories are stored under this key prefix
UNPARSED_PREFIX = "unparsed_"

UNKNOWN_CATEGORY = "unknown"

# Single-value webhook categories -> profile field holding data[0].value
SINGLE_VALUE_CATEGORIES = {
    "steps": "steps",
    "heart_rate_alert": "heart_rate",
    "glucose": "glucose",
    "stress_level": "stress_level",
    "workout_duration": "workout_duration",
    "body_temperature": "body_temperature",
    "basal_body_temperature": "basal_body_temperature",
    "body_mass_index": "body_mass_index",
    "calories": "calories",
    "calories_active": "calories",
}

# Link status values
STATUS_LINK_GENERATED = "link_generated"
STATUS_CONNECTED = "connected"

# Mock metrics ranges
MOCK_DEVICE_TYPE = "Apple Watch Series 7"
HOURLY_READINGS = 24
HR_FLOOR_BPM = 40
HR_CEILING_BPM = 120

# Profile fields stored as whole numbers; fractional readings are rounded
INTEGER_FIELDS = frozenset({"steps"})
