"""Authentication service for account registration and login."""
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.user import User, RoleEnum
from app.db.repositories import users as user_store
from app.core.security import create_access_token, hash_password, verify_password
from app.core.exceptions import ConflictError, InvalidInputError, UnauthenticatedError
from app.core.logging import logger

INVALID_CREDENTIALS = "Invalid email or password"
DUPLICATE_EMAIL = "User with this email already exists"


class AuthService:
    """
    Service layer for authentication operations.

    Handles account registration and login; both return the user together
    with a signed access token.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize AuthService with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def register(self, email: str, password: str, name: str, role: str = RoleEnum.attendee.value) -> dict:
        """
        Register a new account.

        Args:
            email: Email address, unique regardless of case
            password: Plaintext password, hashed before storage
            name: Display name
            role: "attendee" or "organizer"

        Returns:
            Dictionary with the created ``user`` and its ``token``

        Raises:
            InvalidInputError: If the role is not one of the known roles
            ConflictError: If the email is already registered
        """
        try:
            role_value = RoleEnum(role or RoleEnum.attendee.value)
        except ValueError:
            raise InvalidInputError('Role must be either "attendee" or "organizer"')

        existing = await user_store.get_user_by_email(self.session, email)
        if existing:
            raise ConflictError(DUPLICATE_EMAIL)

        user = await user_store.create_user(
            self.session, email=email, hashed_password=hash_password(password), name=name, role=role_value
        )
        if user is None:
            raise ConflictError(DUPLICATE_EMAIL)
        logger.info(f"Registered {user.role.value} account {user.id}")
        return {"user": user, "token": self.generate_token(user)}

    async def login(self, email: str, password: str) -> dict:
        """
        Authenticate a user.

        Unknown email and wrong password produce the same error.

        Raises:
            UnauthenticatedError: If credentials are invalid
        """
        user = await user_store.get_user_by_email(self.session, email)
        if not user or not verify_password(password, user.hashed_password):
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        return {"user": user, "token": self.generate_token(user)}

    @staticmethod
    def generate_token(user: User) -> str:
        return create_access_token({"sub": str(user.id), "email": user.email, "role": user.role.value})
