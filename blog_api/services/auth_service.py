"""
Auth service: registration, login and profile lookup for the User aggregate.

Users are not cached: they are read once per login/profile request and
never listed.  Password hashing is CPU-bound, so it runs in the threadpool
to keep the event loop free.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from blog_api.exceptions import AuthenticationError, ConflictError, NotFoundError
from blog_api.models import User
from blog_api.schemas import UserLogin, UserRegister
from blog_api.security import hash_password, verify_password
from blog_api.services.serializers import user_to_dict

logger = logging.getLogger(__name__)


async def _find_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, data: UserRegister) -> dict:
    """
    Create a user and return it without the password hash.

    The explicit lookup gives a friendly 409 message; the unique index on
    ``users.email`` still catches a concurrent duplicate, which the error
    boundary maps to 409 as well.
    """
    if await _find_by_email(db, data.email) is not None:
        raise ConflictError("User with this email already exists")

    user = User(
        name=data.name,
        email=data.email,
        password=await run_in_threadpool(hash_password, data.password),
    )
    db.add(user)
    await db.flush()
    await db.commit()
    logger.info("Registered user id=%s", user.id)
    return user_to_dict(user)


async def login_user(db: AsyncSession, data: UserLogin) -> dict:
    """
    Return the user matching the credentials.

    Unknown email and wrong password fail identically so the response does
    not reveal which addresses are registered.
    """
    user = await _find_by_email(db, data.email)
    if user is None:
        raise AuthenticationError()
    if not await run_in_threadpool(verify_password, data.password, user.password):
        raise AuthenticationError()
    return user_to_dict(user)


async def get_user_by_id(db: AsyncSession, user_id: int) -> dict:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user_to_dict(user)
