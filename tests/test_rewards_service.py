# tests/test_rewards_service.py

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import func, select

from taskreward import errors
from taskreward.models.task import TaskStatus
from taskreward.models.user import User
from taskreward.services import completion
from taskreward.services.exceptions import StorageError, TransactionTimeoutError
from taskreward.services.rewards import RewardService

from helpers import create_user, fetch_user


async def _count_users(sessions) -> int:
    async with sessions() as s:
        return await s.scalar(select(func.count()).select_from(User))


@pytest.mark.asyncio
async def test_end_to_end_scenario(service: RewardService, sessions) -> None:
    user = await create_user(sessions, "alice")

    task = await service.add_task("d0", 10)
    active = await service.get_active_tasks()
    assert [(t.id, t.status) for t in active] == [(task.id, TaskStatus.OPEN)]

    done = await service.complete_task(task.id, user.id)
    assert done.status is TaskStatus.CLOSED
    assert done.user_id == user.id
    assert (await fetch_user(sessions, user.id)).balance == 10

    with pytest.raises(errors.TaskAlreadyCompleted):
        await service.complete_task(task.id, user.id)
    assert (await fetch_user(sessions, user.id)).balance == 10
    assert await service.get_active_tasks() == []


@pytest.mark.asyncio
async def test_concurrent_service_completions(service: RewardService, sessions) -> None:
    user = await create_user(sessions, "alice")
    task = await service.add_task("d0", 10)

    results = await asyncio.gather(
        *(service.complete_task(task.id, user.id) for _ in range(4)),
        return_exceptions=True,
    )

    assert sum(1 for r in results if isinstance(r, errors.TaskAlreadyCompleted)) == 3
    assert (await fetch_user(sessions, user.id)).balance == 10


@pytest.mark.asyncio
async def test_complete_translates_errors(service: RewardService, sessions) -> None:
    user = await create_user(sessions, "alice")
    task = await service.add_task("d0", 10)

    with pytest.raises(errors.TaskNotFound):
        await service.complete_task(task.id + 50, user.id)
    with pytest.raises(errors.UserNotFound):
        await service.complete_task(task.id, 9999)
    with pytest.raises(errors.InvalidArgument):
        await service.complete_task(0, user.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", [StorageError("commit failed"), TransactionTimeoutError("slow")])
async def test_storage_failures_become_internal(service: RewardService, monkeypatch, failure) -> None:
    async def failing(*args, **kwargs):
        raise failure

    monkeypatch.setattr(completion, "complete_task", failing)

    with pytest.raises(errors.Internal):
        await service.complete_task(1, 1)


@pytest.mark.asyncio
async def test_add_task_validation(service: RewardService) -> None:
    with pytest.raises(errors.InvalidArgument):
        await service.add_task("   ", 10)
    with pytest.raises(errors.InvalidArgument):
        await service.add_task("d0", -1)


@pytest.mark.asyncio
async def test_leaderboard_top_ten_descending(service: RewardService, sessions) -> None:
    for i in range(13):
        await create_user(sessions, f"user{i}", balance=i * 5)

    leaders = await service.get_leaderboard()

    assert len(leaders) == 10
    balances = [u.balance for u in leaders]
    assert balances == sorted(balances, reverse=True)
    assert balances[0] == 60


@pytest.mark.asyncio
async def test_leaderboard_empty(service: RewardService) -> None:
    assert await service.get_leaderboard() == []


@pytest.mark.asyncio
async def test_register_and_authenticate(service: RewardService) -> None:
    referrer = await service.register_user("alice", "secret")
    user = await service.register_user("bob", "hunter2", referrer.id)

    assert user.refer_id == referrer.id
    assert user.balance == 0
    assert user.password_hash != "hunter2"

    assert (await service.authenticate_user("bob", "hunter2")).id == user.id
    with pytest.raises(errors.IncorrectPassword):
        await service.authenticate_user("bob", "wrong")
    with pytest.raises(errors.UserNotFound):
        await service.authenticate_user("carol", "whatever")


@pytest.mark.asyncio
async def test_register_unknown_referrer_creates_nothing(service: RewardService, sessions) -> None:
    with pytest.raises(errors.ReferrerNotFound):
        await service.register_user("bob", "hunter2", 4242)

    assert await _count_users(sessions) == 0


@pytest.mark.asyncio
async def test_register_duplicate_login(service: RewardService, sessions) -> None:
    await service.register_user("alice", "secret")

    with pytest.raises(errors.UserAlreadyExists):
        await service.register_user("alice", "other")
    assert await _count_users(sessions) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("login,password", [("", "x"), ("alice", ""), ("  ", "x")])
async def test_register_requires_credentials(service: RewardService, login: str, password: str) -> None:
    with pytest.raises(errors.InvalidArgument):
        await service.register_user(login, password)


@pytest.mark.asyncio
async def test_get_user(service: RewardService, sessions) -> None:
    user = await create_user(sessions, "alice", balance=3)

    assert (await service.get_user(user.id)).balance == 3
    with pytest.raises(errors.UserNotFound):
        await service.get_user(9999)
    with pytest.raises(errors.InvalidArgument):
        await service.get_user(0)


@pytest.mark.asyncio
async def test_register_rejects_password_over_bcrypt_limit(service: RewardService, sessions) -> None:
    with pytest.raises(errors.InvalidArgument):
        await service.register_user("bob", "x" * 100)
    # 36 two-byte characters: 72 bytes, still accepted
    assert (await service.register_user("carol", "ж" * 36)).login == "carol"
    with pytest.raises(errors.InvalidArgument):
        await service.register_user("dave", "ж" * 37)

    assert await _count_users(sessions) == 1
