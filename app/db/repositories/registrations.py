"""
Registration store.

The (event_id, user_id) pair is unique at the database level. ``register``
reports a duplicate as ``None`` whether it was spotted by the lookup or by
the constraint rejecting a concurrent insert.
"""
from typing import Optional, List
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager
from app.db.models.event import Event
from app.db.models.user import User
from app.db.models.registration import Registration, REGISTRATION_UNIQUE_CONSTRAINT
from app.db.repositories.ids import as_uuid
from app.core.logging import logger


def _is_unique_violation(exc: IntegrityError) -> bool:
    # Postgres names the constraint; SQLite reports the column pair
    message = str(exc.orig).lower()
    return (
        REGISTRATION_UNIQUE_CONSTRAINT in message
        or "duplicate key" in message
        or "unique constraint failed" in message
    )


async def is_registered(db: AsyncSession, event_id, user_id) -> bool:
    eid, uid = as_uuid(event_id), as_uuid(user_id)
    if eid is None or uid is None:
        return False
    q = select(Registration.id).where(Registration.event_id == eid, Registration.user_id == uid)
    res = await db.execute(q)
    return res.first() is not None


async def register(db: AsyncSession, event_id, user_id) -> Optional[Registration]:
    """
    Insert a registration.

    Args:
        db: Database session
        event_id: Event's UUID
        user_id: User's UUID

    Returns:
        The new Registration, or None if the user is already registered.

    Raises:
        IntegrityError: For constraint failures other than the duplicate pair
    """
    eid, uid = as_uuid(event_id), as_uuid(user_id)
    if await is_registered(db, eid, uid):
        return None

    r = Registration(event_id=eid, user_id=uid)
    db.add(r)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if _is_unique_violation(e):
            logger.info(f"Concurrent registration for event {eid} by user {uid} lost the insert race")
            return None
        raise
    await db.refresh(r)
    return r


async def list_by_user(db: AsyncSession, user_id) -> List[Registration]:
    """
    A user's registrations with their events loaded, newest first.

    Registrations whose event no longer exists are excluded by the join.
    """
    uid = as_uuid(user_id)
    if uid is None:
        return []
    q = (
        select(Registration)
        .join(Registration.event)
        .options(contains_eager(Registration.event))
        .where(Registration.user_id == uid)
        .order_by(Registration.created_at.desc())
    )
    res = await db.execute(q)
    return list(res.scalars().unique().all())


async def list_by_event(db: AsyncSession, event_id) -> List[Registration]:
    """An event's registrations with their users loaded, newest first."""
    eid = as_uuid(event_id)
    if eid is None:
        return []
    q = (
        select(Registration)
        .join(Registration.user)
        .options(contains_eager(Registration.user))
        .where(Registration.event_id == eid)
        .order_by(Registration.created_at.desc())
    )
    res = await db.execute(q)
    return list(res.scalars().unique().all())


async def delete_all_for_event(db: AsyncSession, event_id) -> int:
    """Delete every registration for an event and return how many were removed."""
    eid = as_uuid(event_id)
    if eid is None:
        return 0
    res = await db.execute(delete(Registration).where(Registration.event_id == eid))
    await db.commit()
    return res.rowcount or 0
