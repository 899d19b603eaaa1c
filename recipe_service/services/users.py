from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from recipe_service.core.errors import NotFoundError
from recipe_service.core.security import hash_password, verify_password
from recipe_service.db.base import new_id, utcnow
from recipe_service.db.session import write_transaction
from recipe_service.models import User


class UserService:
    """User store plus the credential checks used by the auth routes."""

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
        result = await session.execute(select(User).where(User.email == UserService.normalize_email(email)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_id(session: AsyncSession, user_id: str) -> User | None:
        return await session.get(User, user_id, populate_existing=True)

    @staticmethod
    async def create_user(session: AsyncSession, name: str, email: str, password: str) -> str:
        """Insert a user; a duplicate email raises ``ConstraintError``."""
        user_id = new_id()
        async with write_transaction(session):
            session.add(
                User(
                    id=user_id,
                    name=name.strip(),
                    email=UserService.normalize_email(email),
                    password_hash=hash_password(password),
                )
            )
            await session.flush()
        return user_id

    @staticmethod
    async def authenticate(session: AsyncSession, email: str, password: str) -> User | None:
        user = await UserService.get_user_by_email(session, email)
        if not user or not verify_password(password, user.password_hash):
            return None
        return user

    @staticmethod
    async def touch_user_login(session: AsyncSession, user: User) -> None:
        async with write_transaction(session):
            user.updated_at = utcnow()

    @staticmethod
    async def update_user(session: AsyncSession, user_id: str, *, name: str | None = None, email: str | None = None) -> User:
        async with write_transaction(session):
            user = await UserService.get_user_by_id(session, user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            if name:
                user.name = name.strip()
            if email:
                user.email = UserService.normalize_email(email)
            if name or email:
                user.updated_at = utcnow()
        return user

    @staticmethod
    async def update_user_password(session: AsyncSession, user: User, new_password: str) -> None:
        async with write_transaction(session):
            user.password_hash = hash_password(new_password)
            user.updated_at = utcnow()
            session.add(user)


user_service = UserService()
