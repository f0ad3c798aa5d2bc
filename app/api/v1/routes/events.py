from fastapi import APIRouter, Depends, Query, status
from app.schemas import ApiResponse, EventCreate, EventOut, EventRegistrant, EventUpdate, RegistrationReceipt
from app.db.session import get_session
from app.db.models.user import RoleEnum
from app.services.event_service import EventService
from app.auth import get_current_user, role_required
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

router = APIRouter(prefix="/events", tags=["events"])

organizer_required = role_required(RoleEnum.organizer)


def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)


@router.get("", response_model=ApiResponse[List[EventOut]], response_model_exclude_none=True)
async def list_events(
    organizer_id: Optional[str] = Query(None, alias="organizerId", description="Filter by organizer user ID"),
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    """List events, newest first."""
    events = await event_service.list_events(organizer_id=organizer_id)
    return ApiResponse(data=events)


@router.get("/{event_id}", response_model=ApiResponse[EventOut], response_model_exclude_none=True)
async def get_event_detail(
    event_id: str,
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    ev = await event_service.get_event(event_id)
    return ApiResponse(data=ev)


@router.post(
    "",
    response_model=ApiResponse[EventOut],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_event_endpoint(
    payload: EventCreate,
    user=Depends(organizer_required),
    event_service: EventService = Depends(get_event_service)
):
    ev = await event_service.create_event(payload.title, payload.description, payload.date, payload.time, user.id)
    return ApiResponse(message="Event created successfully", data=ev)


@router.put("/{event_id}", response_model=ApiResponse[EventOut], response_model_exclude_none=True)
async def update_event_endpoint(
    event_id: str,
    payload: EventUpdate,
    user=Depends(organizer_required),
    event_service: EventService = Depends(get_event_service)
):
    """Update an event. Only fields present in the body are changed."""
    changes = payload.model_dump(exclude_unset=True)
    ev = await event_service.update_event(event_id, changes, user.id)
    return ApiResponse(message="Event updated successfully", data=ev)


@router.delete("/{event_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
async def delete_event_endpoint(
    event_id: str,
    user=Depends(organizer_required),
    event_service: EventService = Depends(get_event_service)
):
    await event_service.delete_event(event_id, user.id)
    return ApiResponse(message="Event deleted successfully")


@router.post(
    "/{event_id}/register",
    response_model=ApiResponse[RegistrationReceipt],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def register_for_event_endpoint(
    event_id: str,
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    receipt = await event_service.register_for_event(event_id, user.id)
    return ApiResponse(message="Successfully registered for event. Confirmation email sent.", data=receipt)


@router.get(
    "/{event_id}/registrations",
    response_model=ApiResponse[List[EventRegistrant]],
    response_model_exclude_none=True,
)
async def get_event_registrations(
    event_id: str,
    user=Depends(organizer_required),
    event_service: EventService = Depends(get_event_service)
):
    registrations = await event_service.get_event_registrations(event_id, user.id)
    return ApiResponse(data=registrations)
