from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.dependencies import get_metrics_provider, get_profile_store
from app.db import get_db
from app.models.user import User
from app.schemas.user import ClientDetail, PartnerRead, UserCreate, UserRead, UserRole
from app.schemas.wearable import WearableMetrics
from app.services.metrics import MetricsProvider, fetch_metrics_for_users
from app.services.profile_store import ProfileStore


router = APIRouter(prefix="/users", tags=["users"])
partners_router = APIRouter(prefix="/partners", tags=["partners"])


def _get_partner(db: Session, partner_id: str) -> User:
    partner = db.query(User).filter(User.id == partner_id).first()
    if not partner or not partner.is_partner:
        raise HTTPException(status_code=404, detail="Partner not found")
    return partner


@router.post("/", response_model=UserRead)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=409, detail="Email already registered")
    if payload.id and db.get(User, payload.id):
        raise HTTPException(status_code=409, detail="User already exists")

    is_partner = payload.role == UserRole.partner
    partner_id = payload.connected_partner_id or None
    if partner_id:
        if is_partner:
            raise HTTPException(status_code=422, detail="Partners can't connect to a partner")
        partner = db.get(User, partner_id)
        if not partner or not partner.is_partner:
            raise HTTPException(status_code=422, detail="connected_partner_id is not a partner")

    user = User(
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        is_partner=is_partner,
        connected_partner_id=partner_id,
    )
    if payload.id:
        user.id = payload.id
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.get("/partners", response_model=list[PartnerRead])
def list_partners(db: Session = Depends(get_db)):
    return (
        db.query(User)
        .filter(User.is_partner.is_(True))
        .order_by(User.last_name, User.first_name)
        .all()
    )


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@partners_router.get("/{partner_id}/clients", response_model=list[UserRead])
def list_connected_clients(partner_id: str, db: Session = Depends(get_db)):
    _get_partner(db, partner_id)
    return (
        db.query(User)
        .filter(User.connected_partner_id == partner_id)
        .order_by(User.created_at)
        .all()
    )


@partners_router.get("/{partner_id}/metrics", response_model=dict[str, WearableMetrics])
def get_clients_metrics(
    partner_id: str,
    db: Session = Depends(get_db),
    provider: MetricsProvider = Depends(get_metrics_provider),
):
    """Dashboard summaries for every client connected to the partner, keyed by client id."""
    _get_partner(db, partner_id)
    client_ids = [
        row.id
        for row in db.query(User.id).filter(User.connected_partner_id == partner_id).all()
    ]
    return fetch_metrics_for_users(provider, client_ids)


@partners_router.get("/{partner_id}/clients/{client_id}", response_model=ClientDetail)
def get_client_detail(
    partner_id: str,
    client_id: str,
    db: Session = Depends(get_db),
    store: ProfileStore = Depends(get_profile_store),
):
    _get_partner(db, partner_id)
    client = db.get(User, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    if client.connected_partner_id != partner_id:
        raise HTTPException(status_code=403, detail="You are not authorized to view this client")
    return ClientDetail(client=UserRead.model_validate(client), profile=store.get(client_id))
