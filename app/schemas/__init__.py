from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Generic, List, Optional, TypeVar
from uuid import UUID
from datetime import datetime
from app.db.models.user import RoleEnum

T = TypeVar("T")


class CamelModel(BaseModel):
    """Serializes as camelCase and accepts either camelCase or snake_case input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(CamelModel, Generic[T]):
    """Uniform response envelope."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: str = "attendee"


class LoginRequest(CamelModel):
    """Schema for user login request."""
    email: EmailStr
    password: str = Field(min_length=1)


class UserOut(CamelModel):
    id: UUID
    email: str
    name: str
    role: RoleEnum
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResult(CamelModel):
    user: UserOut
    token: str


class EventCreate(CamelModel):
    # Presence is checked by EventService so every gap gets the same message
    title: Optional[str] = None
    description: Optional[str] = ""
    date: Optional[str] = None
    time: Optional[str] = None


class EventUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None


class EventOut(CamelModel):
    id: UUID
    title: str
    description: str
    date: str
    time: str
    organizer_id: UUID
    organizer_name: Optional[str] = None
    organizer_email: Optional[str] = None
    participants: List[UUID] = []
    participant_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RegistrationReceipt(CamelModel):
    event_id: UUID
    event_title: str
    registered_at: datetime


class EventRegistrant(CamelModel):
    registration_id: UUID
    user_id: UUID
    user_name: str
    user_email: str
    registered_at: datetime


class UserRegistration(CamelModel):
    registration_id: UUID
    event_id: UUID
    event_title: str
    event_date: Optional[str] = None
    event_time: Optional[str] = None
    event_description: Optional[str] = None
    registered_at: datetime
