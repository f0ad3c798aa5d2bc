"""User store: account records keyed by id and lowercase email."""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.user import User, RoleEnum
from app.db.repositories.ids import as_uuid


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def create_user(db: AsyncSession, email: str, hashed_password: str, name: str,
                      role: RoleEnum = RoleEnum.attendee) -> Optional[User]:
    """
    Persist a new account. The password must already be hashed.

    Args:
        db: Database session
        email: Email address in any case; stored lowercase
        hashed_password: Output of ``hash_password``
        name: Display name
        role: Fixed for the lifetime of the account

    Returns:
        Created User object, or None if the email is already taken
    """
    user = User(
        email=normalize_email(email),
        hashed_password=hashed_password,
        name=name,
        role=role,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # email is the only unique column besides the primary key
        await db.rollback()
        return None
    await db.refresh(user)
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """
    Retrieve user by email address, ignoring case.

    Args:
        db: Database session
        email: User's email address

    Returns:
        User object if found, None otherwise
    """
    q = select(User).where(User.email == normalize_email(email))
    res = await db.execute(q)
    return res.scalars().first()


async def get_user(db: AsyncSession, user_id) -> Optional[User]:
    """
    Retrieve user by ID.

    Args:
        db: Database session
        user_id: User's UUID (or its string form)

    Returns:
        User object if found, None otherwise
    """
    uid = as_uuid(user_id)
    if uid is None:
        return None
    q = select(User).where(User.id == uid)
    res = await db.execute(q)
    return res.scalars().first()
