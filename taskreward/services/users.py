import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskreward.models.user import User
from taskreward.services.exceptions import LoginTakenError, StorageError, UserNotFoundError

logger = logging.getLogger(__name__)


async def increase_balance(s: AsyncSession, user_id: int, amount: int) -> None:
    if amount <= 0:
        raise ValueError(f"amount must be positive, got {amount}")

    # balance + amount is evaluated by the database, never in Python
    result = await s.execute(
        update(User)
        .where(User.id == user_id)
        .values(balance=User.balance + amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise UserNotFoundError(f"user {user_id}")
    logger.debug("Balance increased user_id=%s amount=%s", user_id, amount)


async def get_by_id(s: AsyncSession, user_id: int) -> User:
    user = await s.get(User, user_id)
    if user is None:
        raise UserNotFoundError(f"user {user_id}")
    return user


async def get_by_login(s: AsyncSession, login: str) -> User:
    user = await s.scalar(select(User).where(User.login == login))
    if user is None:
        raise UserNotFoundError(f"login {login!r}")
    return user


async def get_top_by_balance(s: AsyncSession, limit: int) -> list[User]:
    return list(
        (await s.scalars(select(User).order_by(User.balance.desc(), User.id).limit(limit))).all()
    )


async def insert_user(s: AsyncSession, user: User) -> int:
    s.add(user)
    try:
        await s.flush()
    except IntegrityError as e:
        raise LoginTakenError(f"login {user.login!r}") from e
    except SQLAlchemyError as e:
        raise StorageError(f"insert user: {e}") from e
    return user.id
