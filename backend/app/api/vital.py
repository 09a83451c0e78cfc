import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from app.api.dependencies import get_profile_store
from app.core.constants import STATUS_CONNECTED, STATUS_LINK_GENERATED
from app.core.errors import StorageError, VitalAPIError
from app.core.time_utils import utcnow
from app.services.profile_store import ProfileStore
from app.services.vital_client import VitalClient, get_vital_client

router = APIRouter(prefix="/vital", tags=["vital"])
logger = logging.getLogger(__name__)

# Checked in order when the launch body carries no userId
USER_ID_COOKIES = ("patient_session", "userId", "user_id", "uid", "session")
USER_ID_HEADERS = ("x-user-id", "user-id")


def _field(body: Any, key: str):
    return body.get(key) if isinstance(body, dict) else None


def _launch_user_id(body: Any, request: Request) -> str | None:
    user_id = _field(body, "userId")
    if user_id:
        return user_id
    for name in USER_ID_COOKIES:
        if request.cookies.get(name):
            return request.cookies[name]
    for name in USER_ID_HEADERS:
        if request.headers.get(name):
            return request.headers[name]
    return None


@router.get("/providers")
def list_providers(vital: VitalClient = Depends(get_vital_client)):
    return vital.list_providers()


@router.get("/users")
def list_vital_users(vital: VitalClient = Depends(get_vital_client)):
    return vital.list_users()


@router.post("/link-token")
def create_provider_link(
    body: Any = Body(None),
    vital: VitalClient = Depends(get_vital_client),
):
    """Resolve the Vital user, mint a link token, return the provider's OAuth URL."""
    provider = _field(body, "provider")
    user_id = _field(body, "userId")
    if not provider or not user_id:
        return JSONResponse(status_code=400, content={"error": "Missing provider or userId"})

    logger.info("Creating %s link for user %s", provider, user_id)
    vital_user_id = vital.resolve_user(user_id)
    token = vital.create_link_token(vital_user_id)
    if not token.get("link_token"):
        raise VitalAPIError("Token generation failed", detail=token)
    return {"oauthUrl": vital.create_oauth_url(provider, token["link_token"])}


@router.post("/launch")
def launch_link_widget(
    request: Request,
    body: Any = Body(None),
    vital: VitalClient = Depends(get_vital_client),
    store: ProfileStore = Depends(get_profile_store),
):
    """Hosted link widget URL for the calling user; remembers the pending link."""
    user_id = _launch_user_id(body, request)
    if not user_id:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Missing user ID. Please ensure you're authenticated or provide userId in request body.",
            },
        )

    vital_user_id = vital.resolve_user(user_id)
    token = vital.create_link_token(vital_user_id)
    link_url = token.get("link_web_url")
    if not link_url:
        raise VitalAPIError("Link URL not provided in response", detail=token)

    try:
        store.upsert(
            user_id,
            {
                "vital_user_id": vital_user_id,
                "link_url": link_url,
                "status": STATUS_LINK_GENERATED,
            },
        )
    except StorageError:
        # The link still works; the state is written again on exchange
        logger.warning("Could not save link state for %s", user_id)

    return {"linkUrl": link_url, "vitalUserId": vital_user_id, "success": True}


@router.post("/exchange")
def exchange_public_token(
    body: Any = Body(None),
    vital: VitalClient = Depends(get_vital_client),
    store: ProfileStore = Depends(get_profile_store),
):
    public_token = _field(body, "public_token")
    user_id = _field(body, "user_id")
    if not public_token or not user_id:
        return JSONResponse(status_code=400, content={"error": "Missing public_token or user_id"})

    data = vital.exchange_token(public_token)
    try:
        store.upsert(
            user_id,
            {
                "status": STATUS_CONNECTED,
                "access_token": data.get("access_token"),
                "connected_at": utcnow(),
                "vital_user_id": data.get("user_id"),
            },
        )
    except StorageError:
        return JSONResponse(status_code=500, content={"error": "Failed to save connection data"})

    return {"success": True, "vital_user_id": data.get("user_id")}


@router.get("/status/{user_id}")
def connection_status(user_id: str, store: ProfileStore = Depends(get_profile_store)):
    profile = store.get(user_id) or {}
    connected = profile.get("status") == STATUS_CONNECTED or bool(profile.get("vital_user_id"))
    return {"connected": connected}
