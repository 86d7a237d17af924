"""
Task completion: close a task and credit its bonus in one transaction.

The closure is a conditional UPDATE guarded by status = open (see
services.tasks.attempt_close), so concurrent completions of one task are
serialized by the database row itself: one caller gets the row, every other
caller gets TaskAlreadyClosedError. That also makes a blind retry safe: a retry
after an unknown commit outcome can only close an open task, never credit an
already closed one twice.
"""

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from taskreward.models.task import Task
from taskreward.services import tasks, users
from taskreward.services.exceptions import StorageError, TransactionTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TX_TIMEOUT = 5.0


async def complete_task(
    session_factory: async_sessionmaker,
    task_id: int,
    user_id: int,
    *,
    timeout: float = DEFAULT_TX_TIMEOUT,
) -> Task:
    if task_id <= 0:
        raise ValueError("task_id must be positive")
    if user_id <= 0:
        raise ValueError("user_id must be positive")

    try:
        task = await asyncio.wait_for(_close_and_credit(session_factory, task_id, user_id), timeout)
    except asyncio.TimeoutError as e:
        raise TransactionTimeoutError(
            f"completion of task {task_id} exceeded {timeout}s, rolled back"
        ) from e
    except SQLAlchemyError as e:
        # includes a failed COMMIT: outcome unknown, retry is safe
        raise StorageError(f"complete task {task_id}: {e}") from e

    logger.info("Task completed task_id=%s user_id=%s bonus=%s", task.id, user_id, task.bonus)
    return task


async def _close_and_credit(session_factory: async_sessionmaker, task_id: int, user_id: int) -> Task:
    async with session_factory() as s:
        async with s.begin():
            task = await tasks.attempt_close(s, task_id, user_id)
            if task.bonus > 0:
                await users.increase_balance(s, user_id, task.bonus)
            else:
                # nothing to credit, but the user must still exist
                await users.get_by_id(s, user_id)
    return task
