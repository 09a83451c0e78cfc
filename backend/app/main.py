import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api.webhooks import router as webhooks_router
from app.api.vital import router as vital_router
from app.api.wearables import router as wearables_router
from app.api.users import router as users_router, partners_router
from app.core.config import settings
from app.core.errors import VitalAPIError, WellnessError
from app.db import Base, engine
from app.models.user import User  # noqa: F401  (import ensures table is registered)
from app.models.wearable_profile import WearableProfile  # noqa: F401


logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Wellness API")

# Allow CORS for local frontend
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create DB tables (users, wearables) on startup
Base.metadata.create_all(bind=engine)


@app.exception_handler(WellnessError)
def wellness_error_handler(request: Request, exc: WellnessError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    content = {"error": exc.message}
    if isinstance(exc, VitalAPIError) and exc.detail is not None:
        content["detail"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content)


app.include_router(webhooks_router)
app.include_router(vital_router)
app.include_router(wearables_router)
app.include_router(users_router)
app.include_router(partners_router)


@app.get("/")
def root():
    return {"message": "Wellness backend is running"}
