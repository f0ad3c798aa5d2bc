"""
Event store.

An event's participant list is read from its registration rows on every
load, so it cannot drift from the registration store.
"""
from typing import Optional, List, Dict, Any
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.event import Event
from app.db.repositories.ids import as_uuid

UPDATABLE_FIELDS = ("title", "description", "date", "time")


async def create_event(db: AsyncSession, title: str, description: Optional[str], date: str, time: str,
                       organizer_id) -> Event:
    """
    Create a new event.

    Args:
        db: Database session
        title: Event title
        description: Optional description, stored as "" when missing
        date: Opaque date string
        time: Opaque time string
        organizer_id: UUID of the organizing user

    Returns:
        Created Event object
    """
    ev = Event(
        title=title,
        description=description or "",
        date=date,
        time=time,
        organizer_id=as_uuid(organizer_id),
    )
    db.add(ev)
    await db.commit()
    return await get_event(db, ev.id)


async def get_event(db: AsyncSession, event_id) -> Optional[Event]:
    """Load one event with its organizer and registrations, or None."""
    eid = as_uuid(event_id)
    if eid is None:
        return None
    q = select(Event).where(Event.id == eid).execution_options(populate_existing=True)
    res = await db.execute(q)
    return res.scalars().first()


async def list_events(db: AsyncSession, organizer_id=None) -> List[Event]:
    """All events, newest first, optionally restricted to one organizer."""
    q = select(Event).order_by(Event.created_at.desc()).execution_options(populate_existing=True)
    if organizer_id is not None:
        q = q.where(Event.organizer_id == as_uuid(organizer_id))
    res = await db.execute(q)
    return list(res.scalars().unique().all())


async def update_event(db: AsyncSession, event_id, changes: Dict[str, Any]) -> Optional[Event]:
    """
    Apply the given field changes. Keys outside title/description/date/time
    are ignored so the organizer reference can never be reassigned.
    """
    ev = await get_event(db, event_id)
    if ev is None:
        return None
    for field in UPDATABLE_FIELDS:
        if field in changes:
            setattr(ev, field, changes[field])
    await db.commit()
    return await get_event(db, ev.id)


async def delete_event(db: AsyncSession, event_id) -> bool:
    eid = as_uuid(event_id)
    if eid is None:
        return False
    res = await db.execute(delete(Event).where(Event.id == eid))
    await db.commit()
    return res.rowcount > 0

