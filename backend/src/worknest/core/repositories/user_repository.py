"""User repository for database operations."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import Account, User


class UserRepository:
    """Repository for user and linked account operations.

    Writes are flushed, committing is up to the calling service.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID."""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str, with_provider: Optional[str] = None) -> Optional[User]:
        """Get user by email, optionally only if linked to ``with_provider``."""
        stmt = select(User).where(User.email == email)
        if with_provider is not None:
            stmt = stmt.where(User.accounts.any(Account.provider == with_provider))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_user(self, user_data: dict, account_data: Optional[dict] = None) -> User:
        """Create user, with its first linked account when given."""
        user = User(**user_data)
        if account_data is not None:
            user.accounts = [Account(**account_data)]
        else:
            user.accounts = []
        self.session.add(user)
        await self.session.flush()
        return user

    async def add_account(self, user: User, account_data: dict) -> Account:
        """Link another provider account to an existing user."""
        account = Account(user_id=user.id, **account_data)
        self.session.add(account)
        user.touch()
        await self.session.flush()
        await self.session.refresh(user, attribute_names=["accounts"])
        return account

    async def update_user(self, user: User, update_data: dict) -> User:
        """Update user fields."""
        for key, value in update_data.items():
            setattr(user, key, value)
        await self.session.flush()
        await self.session.refresh(user)
        return user
