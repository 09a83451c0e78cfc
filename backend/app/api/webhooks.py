import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.dependencies import get_profile_store
from app.core.errors import EventValidationError, StorageError
from app.services.event_normalizer import event_category, normalize_event, validate_event
from app.services.profile_store import ProfileStore

router = APIRouter(prefix="/vital", tags=["webhooks"])
logger = logging.getLogger(__name__)


async def read_json_body(request: Request) -> Any:
    """Parsed JSON body, or None when it is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        logger.warning("Webhook body is not valid JSON")
        return None


@router.post("/webhook")
def receive_wearable_event(
    body: Any = Depends(read_json_body),
    store: ProfileStore = Depends(get_profile_store),
):
    """
    Vital pushes one event per call:
      {"event_type": "daily.data.steps.created", "user_id": "...", "data": {...}}
    The event's category decides which profile fields change.
    """
    try:
        event = validate_event(body)
    except EventValidationError as e:
        return JSONResponse(status_code=400, content={"error": e.message})

    category = event_category(event.event_type)
    update = normalize_event(event)

    try:
        store.upsert(event.user_id, update)
    except StorageError:
        # Already logged by the store; the event is dropped
        return JSONResponse(status_code=500, content={"error": "Failed to store data"})

    logger.info("Stored %s data for user %s", category, event.user_id)
    return {"message": f"Stored {category} for {event.user_id}"}
