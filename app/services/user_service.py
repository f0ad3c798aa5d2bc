from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.user import User
from app.db.repositories import users as user_store, registrations as registration_store
from app.core.exceptions import NotFoundError
from app.schemas import UserRegistration


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_profile(self, user_id) -> User:
        user = await user_store.get_user(self.session, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_user_registrations(self, user_id) -> List[UserRegistration]:
        """The user's registrations, newest first, with a summary of each event."""
        registrations = await registration_store.list_by_user(self.session, user_id)
        return [
            UserRegistration(
                registration_id=reg.id,
                event_id=reg.event.id,
                event_title=reg.event.title,
                event_date=reg.event.date,
                event_time=reg.event.time,
                event_description=reg.event.description,
                registered_at=reg.created_at,
            )
            for reg in registrations
        ]
