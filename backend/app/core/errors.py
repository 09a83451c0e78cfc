"""Exceptions raised by the services and translated to JSON by the API."""


class WellnessError(Exception):
    """Base class for errors the API turns into an ``{"error": ...}`` body."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EventValidationError(WellnessError):
    """A webhook event is missing event_type, user_id or data."""

    status_code = 400


class StorageError(WellnessError):
    """Persisting a profile update failed. The event is dropped."""

    status_code = 500


class VitalError(WellnessError):
    status_code = 500


class VitalConfigError(VitalError):
    """The Vital API key is not configured."""


class VitalAPIError(VitalError):
    """Vital answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None, detail=None):
        super().__init__(message)
        self.upstream_status = status_code
        self.detail = detail
