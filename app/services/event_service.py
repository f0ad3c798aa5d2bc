import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.event import Event
from app.db.repositories import (
    events as event_store,
    registrations as registration_store,
    users as user_store,
)
from app.core.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from app.core.logging import logger
from app.notifications.email import send_registration_email
from app.schemas import EventOut, EventRegistrant, RegistrationReceipt

Notifier = Callable[[str, Dict[str, Any]], Awaitable[Any]]

REQUIRED_FIELDS_MESSAGE = "Title, date, and time are required"

# Strong references to in-flight notification tasks
_background_tasks: Set[asyncio.Task] = set()


def to_event_out(ev: Event, include_organizer_email: bool = False) -> EventOut:
    organizer = ev.organizer
    participants = ev.participants or []
    return EventOut(
        id=ev.id,
        title=ev.title,
        description=ev.description or "",
        date=ev.date,
        time=ev.time,
        organizer_id=ev.organizer_id,
        organizer_name=organizer.name if organizer else "Unknown",
        organizer_email=(organizer.email if organizer else "Unknown") if include_organizer_email else None,
        participants=participants,
        participant_count=len(participants),
        created_at=ev.created_at,
        updated_at=ev.updated_at,
    )


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class EventService:
    """
    Event lifecycle and the registration workflow.

    Mutations of an event are gated on the requester being its organizer.
    Registration uniqueness rests on the registration store's database
    constraint. Participants are the users with a registration row, so a
    committed registration is all it takes to join an event.
    """

    def __init__(self, session: AsyncSession, notifier: Optional[Notifier] = None):
        self.session = session
        self.notifier = notifier or send_registration_email

    async def list_events(self, organizer_id=None) -> List[EventOut]:
        events = await event_store.list_events(self.session, organizer_id=organizer_id)
        return [to_event_out(ev) for ev in events]

    async def get_event(self, event_id) -> EventOut:
        ev = await self._load(event_id)
        return to_event_out(ev, include_organizer_email=True)

    async def create_event(self, title: Optional[str], description: Optional[str], date: Optional[str],
                           time: Optional[str], organizer_id) -> EventOut:
        if _is_blank(title) or _is_blank(date) or _is_blank(time):
            raise InvalidInputError(REQUIRED_FIELDS_MESSAGE)

        ev = await event_store.create_event(
            self.session, title=title.strip(), description=(description or "").strip(),
            date=date, time=time, organizer_id=organizer_id,
        )
        logger.info(f"Event {ev.id} created by organizer {organizer_id}")
        return to_event_out(ev)

    async def update_event(self, event_id, changes: Dict[str, Any], requester_id) -> EventOut:
        """
        Update title/description/date/time of an event owned by the requester.

        Fields absent from ``changes`` are left untouched.
        """
        ev = await self._load(event_id)
        self._ensure_owner(ev, requester_id, "You can only update your own events")

        for field in ("title", "date", "time"):
            if field in changes and _is_blank(changes[field]):
                raise InvalidInputError(REQUIRED_FIELDS_MESSAGE)
        if "title" in changes:
            changes = {**changes, "title": changes["title"].strip()}
        if "description" in changes:
            changes = {**changes, "description": (changes["description"] or "").strip()}

        updated = await event_store.update_event(self.session, ev.id, changes)
        if updated is None:
            raise NotFoundError("Event not found")
        return to_event_out(updated)

    async def delete_event(self, event_id, requester_id) -> bool:
        """
        Delete an event owned by the requester together with its registrations.

        Registrations go first so a failure in between leaves an event with
        fewer registrations rather than registrations with no event.
        """
        ev = await self._load(event_id)
        self._ensure_owner(ev, requester_id, "You can only delete your own events")

        removed = await registration_store.delete_all_for_event(self.session, ev.id)
        deleted = await event_store.delete_event(self.session, ev.id)
        logger.info(f"Event {ev.id} deleted by {requester_id} ({removed} registrations removed)")
        return deleted

    async def register_for_event(self, event_id, user_id) -> RegistrationReceipt:
        ev = await self._load(event_id)

        # Fast path only; the unique constraint is what guarantees one row
        if await registration_store.is_registered(self.session, ev.id, user_id):
            raise ConflictError("You are already registered for this event")

        registration = await registration_store.register(self.session, ev.id, user_id)
        if registration is None:
            raise ConflictError("You are already registered for this event")

        user = await user_store.get_user(self.session, user_id)
        if user is not None:
            self._notify(user.email, {
                "title": ev.title,
                "description": ev.description,
                "date": ev.date,
                "time": ev.time,
            })
        else:
            logger.warning(f"Registered user {user_id} not found; skipping confirmation email")

        return RegistrationReceipt(
            event_id=ev.id,
            event_title=ev.title,
            registered_at=registration.created_at,
        )

    async def get_event_registrations(self, event_id, requester_id) -> List[EventRegistrant]:
        ev = await self._load(event_id)
        self._ensure_owner(ev, requester_id, "You can only view registrations for your own events")

        registrations = await registration_store.list_by_event(self.session, ev.id)
        return [
            EventRegistrant(
                registration_id=reg.id,
                user_id=reg.user_id,
                user_name=reg.user.name or "Unknown",
                user_email=reg.user.email or "Unknown",
                registered_at=reg.created_at,
            )
            for reg in registrations
        ]

    async def _load(self, event_id) -> Event:
        ev = await event_store.get_event(self.session, event_id)
        if not ev:
            raise NotFoundError("Event not found")
        return ev

    @staticmethod
    def _ensure_owner(ev: Event, requester_id, message: str) -> None:
        if str(ev.organizer_id) != str(requester_id):
            raise ForbiddenError(message)

    def _notify(self, recipient: str, event: Dict[str, Any]) -> asyncio.Task:
        """Schedule the confirmation email without waiting on it."""
        task = asyncio.create_task(self._send_quietly(recipient, event))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        return task

    async def _send_quietly(self, recipient: str, event: Dict[str, Any]) -> None:
        try:
            result = await self.notifier(recipient, event)
        except Exception as e:
            logger.error(f"Failed to send registration email to {recipient}: {e}")
            return
        if isinstance(result, dict) and not result.get("success", True):
            logger.error(f"Failed to send registration email to {recipient}: {result.get('error')}")
