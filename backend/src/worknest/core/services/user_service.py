"""User service implementation."""

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import transaction
from ..logging import get_logger
from ..models.user import User
from ..repositories.user_repository import UserRepository
from ..schemas.auth import UserUpdate
from .results import Failure, Ok, ServiceResult

logger = get_logger("user")


class UserService:
    """User lookups, profile updates and the OAuth login upsert."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)

    async def fetch_user(
        self,
        user_id: Optional[UUID] = None,
        email: Optional[str] = None,
        with_provider: Optional[str] = None,
    ) -> Optional[User]:
        """Look a user up by id or by email.

        With ``with_provider`` only a user linked to that provider matches.
        """
        if (user_id is None) == (email is None):
            raise ValueError("pass exactly one of user_id or email")

        if email is not None:
            return await self.user_repo.get_by_email(email, with_provider=with_provider)

        user = await self.user_repo.get_by_id(user_id)
        if user is not None and with_provider is not None and not user.has_provider(with_provider):
            return None
        return user

    async def get_user(self, user_id: UUID) -> ServiceResult[User]:
        user = await self.fetch_user(user_id=user_id)
        if user is None:
            return Failure.NOT_FOUND
        return Ok(user)

    async def update_user(self, user_id: UUID, request: UserUpdate) -> ServiceResult[User]:
        changes = request.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)

        async with transaction(self.session):
            user = await self.user_repo.get_by_id(user_id)
            if user is None:
                return Failure.NOT_FOUND
            if changes:
                user = await self.user_repo.update_user(user, changes)

        return Ok(user)

    async def put_user(self, profile: dict, account: Optional[dict] = None) -> User:
        """Find or create the user behind an OAuth login.

        1. a user with this email already linked to the provider is returned as is
        2. an existing user with this email gets the provider account linked
        3. otherwise a new user is created, with the account when given

        A concurrent login creating the same email first wins, the loser
        re-reads and returns that user.
        """
        try:
            async with transaction(self.session):
                user = await self._put_user(profile, account)
        except IntegrityError:
            logger.info("User created concurrently, re-reading", extra={"email": profile["email"]})
            async with transaction(self.session):
                user = await self._put_user(profile, account)
        return user

    async def _put_user(self, profile: dict, account: Optional[dict]) -> User:
        email = profile["email"]
        provider = account["provider"] if account else None

        user = await self.user_repo.get_by_email(email, with_provider=provider)
        if user is not None:
            return user

        if account is not None:
            existing = await self.user_repo.get_by_email(email)
            if existing is not None:
                await self.user_repo.add_account(existing, account)
                logger.info(
                    "Linked provider account",
                    extra={"user_id": str(existing.id), "provider": provider},
                )
                return existing

        user = await self.user_repo.create_user(
            {"email": email, "name": profile["name"], "image": profile.get("image")},
            account,
        )
        logger.info("User created", extra={"user_id": str(user.id), "provider": provider})
        return user
