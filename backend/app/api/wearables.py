from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.api.dependencies import get_metrics_provider, get_profile_store
from app.core.time_utils import utcnow
from app.schemas.wearable import WearableMetricsResponse, WearableProfileRead
from app.services.metrics import MetricsProvider
from app.services.profile_store import ProfileStore

router = APIRouter(prefix="/wearables", tags=["wearables"])


@router.post("/", response_model=WearableMetricsResponse)
def get_wearable_summary(
    body: Any = Body(None),
    provider: MetricsProvider = Depends(get_metrics_provider),
):
    """Dashboard summary for one user: POST /wearables {"userId": "..."}"""
    user_id = body.get("userId") if isinstance(body, dict) else None
    if not user_id:
        return JSONResponse(status_code=400, content={"error": "userId is required"})
    if not isinstance(user_id, str):
        return JSONResponse(status_code=400, content={"error": "userId must be a string"})

    data = provider.fetch_metrics(user_id)
    return WearableMetricsResponse(success=True, data=data, timestamp=utcnow())

@router.get("/{user_id}", response_model=WearableProfileRead)
def get_wearable_profile(user_id: str, store: ProfileStore = Depends(get_profile_store)):
    profile = store.get(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="No wearable data for user")
    return profile
