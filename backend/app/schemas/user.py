from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.schemas.wearable import WearableProfileRead


class UserRole(str, Enum):
    client = "client"
    partner = "partner"


class UserCreate(BaseModel):
    """Profile record written at signup. Credentials live with the auth provider."""

    id: Optional[str] = None  # auth provider's user id, generated when absent
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.client
    connected_partner_id: Optional[str] = None


class UserRead(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    is_partner: bool
    connected_partner_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PartnerRead(BaseModel):
    """Entry in the partner directory offered at signup."""

    id: str
    first_name: str
    last_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class ClientDetail(BaseModel):
    client: UserRead
    profile: Optional[WearableProfileRead] = None
