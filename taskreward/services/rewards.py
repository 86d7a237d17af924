"""
RewardService: the single entry point the boundary layer (HTTP, admin bot)
talks to.

Storage failures are translated here, once, into taskreward.errors. Nothing
below this module knows about the domain taxonomy and nothing above it sees a
storage exception.
"""

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from taskreward import errors
from taskreward.auth import MAX_PASSWORD_BYTES, check_password, hash_password
from taskreward.models.task import Task
from taskreward.models.user import User
from taskreward.services import completion, tasks, users
from taskreward.services.completion import DEFAULT_TX_TIMEOUT
from taskreward.services.exceptions import (
    LoginTakenError,
    StorageError,
    TaskAlreadyClosedError,
    TaskNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10

_TRANSLATION = {
    TaskNotFoundError: errors.TaskNotFound,
    TaskAlreadyClosedError: errors.TaskAlreadyCompleted,
    UserNotFoundError: errors.UserNotFound,
    LoginTakenError: errors.UserAlreadyExists,
}


def _translate(op: str, e: Exception) -> errors.RewardError:
    domain = _TRANSLATION.get(type(e))
    if domain is not None:
        return domain()
    if isinstance(e, ValueError):
        return errors.InvalidArgument(str(e))
    logger.error("%s failed", op, exc_info=e)
    return errors.Internal()


class RewardService:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        *,
        tx_timeout: float = DEFAULT_TX_TIMEOUT,
        leaderboard_size: int = LEADERBOARD_SIZE,
    ):
        self._sessions = session_factory
        self._tx_timeout = tx_timeout
        self._leaderboard_size = leaderboard_size

    async def add_task(self, description: str, bonus: int) -> Task:
        description = (description or "").strip()
        if not description:
            raise errors.InvalidArgument("описание задачи обязательно")
        if bonus < 0:
            raise errors.InvalidArgument("бонус не может быть отрицательным")

        task = Task(description=description, bonus=bonus)
        try:
            async with self._sessions() as s:
                async with s.begin():
                    await tasks.insert_task(s, task)
        except (StorageError, SQLAlchemyError, ValueError) as e:
            raise _translate("add_task", e) from e
        return task

    async def complete_task(self, task_id: int, user_id: int) -> Task:
        if task_id <= 0 or user_id <= 0:
            raise errors.InvalidArgument("task_id и user_id должны быть положительными")
        try:
            return await completion.complete_task(
                self._sessions, task_id, user_id, timeout=self._tx_timeout
            )
        except (StorageError, ValueError) as e:
            raise _translate("complete_task", e) from e

    async def get_active_tasks(self) -> list[Task]:
        try:
            async with self._sessions() as s:
                return await tasks.find_active_tasks(s)
        except SQLAlchemyError as e:
            raise _translate("get_active_tasks", e) from e

    async def get_leaderboard(self) -> list[User]:
        try:
            async with self._sessions() as s:
                return await users.get_top_by_balance(s, self._leaderboard_size)
        except SQLAlchemyError as e:
            raise _translate("get_leaderboard", e) from e

    async def get_user(self, user_id: int) -> User:
        if user_id <= 0:
            raise errors.InvalidArgument("user_id должен быть положительным")
        try:
            async with self._sessions() as s:
                return await users.get_by_id(s, user_id)
        except (StorageError, SQLAlchemyError) as e:
            raise _translate("get_user", e) from e

    async def register_user(self, login: str, password: str, refer_id: int = 0) -> User:
        login = (login or "").strip()
        if not login or not password:
            raise errors.InvalidArgument("логин и пароль обязательны")
        if refer_id < 0:
            raise errors.InvalidArgument("некорректный refer_id")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise errors.InvalidArgument(f"пароль длиннее {MAX_PASSWORD_BYTES} байт")

        # CPU-bound, run outside the event loop
        password_hash = await asyncio.to_thread(hash_password, password)
        user = User(login=login, password_hash=password_hash, refer_id=refer_id or None, balance=0)

        try:
            async with self._sessions() as s:
                async with s.begin():
                    if refer_id:
                        try:
                            await users.get_by_id(s, refer_id)
                        except UserNotFoundError:
                            raise errors.ReferrerNotFound() from None
                    await users.insert_user(s, user)
        except (StorageError, SQLAlchemyError) as e:
            raise _translate("register_user", e) from e

        logger.info("User registered id=%s refer_id=%s", user.id, user.refer_id)
        return user

    async def authenticate_user(self, login: str, password: str) -> User:
        login = (login or "").strip()
        if not login or not password:
            raise errors.InvalidArgument("логин и пароль обязательны")
        try:
            async with self._sessions() as s:
                user = await users.get_by_login(s, login)
        except (StorageError, SQLAlchemyError) as e:
            raise _translate("authenticate_user", e) from e

        if not await asyncio.to_thread(check_password, user.password_hash, password):
            raise errors.IncorrectPassword()
        return user
