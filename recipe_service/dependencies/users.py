from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from recipe_service.core.errors import AuthError
from recipe_service.core.tokens import TokenService, extract_bearer_token
from recipe_service.db.session import get_session
from recipe_service.models.user import User
from recipe_service.services.users import user_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[User]:
    token = extract_bearer_token(request.headers.get("authorization"))
    if not token:
        return None
    identity = tokens.verify_access_token(token)
    return await user_service.get_user_by_id(session, identity.user_id)


async def get_current_user_required(
    current_user: Optional[User] = Depends(get_current_user),
) -> User:
    if current_user is None:
        raise AuthError("Authentication required")
    return current_user
