# tests/helpers.py

from __future__ import annotations

from taskreward.models.task import Task
from taskreward.models.user import User
from taskreward.services import tasks, users


async def create_user(sessions, login: str, balance: int = 0) -> User:
    """Insert a user directly, skipping bcrypt."""
    user = User(login=login, password_hash="x", balance=balance)
    async with sessions() as s:
        async with s.begin():
            await users.insert_user(s, user)
    return user


async def fetch_user(sessions, user_id: int) -> User:
    async with sessions() as s:
        return await users.get_by_id(s, user_id)


async def fetch_task(sessions, task_id: int) -> Task:
    async with sessions() as s:
        return await tasks.get_task(s, task_id)
