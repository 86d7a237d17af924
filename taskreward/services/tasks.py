import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskreward.models.task import Task, TaskStatus, utcnow
from taskreward.services.exceptions import (
    StorageError,
    TaskAlreadyClosedError,
    TaskNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


async def insert_task(s: AsyncSession, task: Task) -> int:
    if not task.description or task.bonus is None or task.bonus < 0:
        raise ValueError("task needs a description and a non-negative bonus")

    task.status = TaskStatus.OPEN
    task.user_id = None
    task.completed_at = None
    s.add(task)
    try:
        await s.flush()
    except SQLAlchemyError as e:
        raise StorageError(f"insert task: {e}") from e

    logger.debug("Task added id=%s bonus=%s", task.id, task.bonus)
    return task.id


async def find_active_tasks(s: AsyncSession) -> list[Task]:
    return list((await s.scalars(select(Task).where(Task.status == TaskStatus.OPEN))).all())


async def get_task(s: AsyncSession, task_id: int) -> Task:
    task = await s.get(Task, task_id)
    if task is None:
        raise TaskNotFoundError(f"task {task_id}")
    return task


async def attempt_close(s: AsyncSession, task_id: int, user_id: int) -> Task:
    """
    Atomically transitions:
      status = open -> status = closed, user_id, completed_at

    The guard and the write are one UPDATE ... RETURNING statement, so of two
    concurrent callers exactly one gets the row back.
    """
    stmt = (
        update(Task)
        .where(Task.id == task_id)
        .where(Task.status == TaskStatus.OPEN)
        .values(status=TaskStatus.CLOSED, user_id=user_id, completed_at=utcnow())
        .returning(Task)
        .execution_options(synchronize_session=False)
    )
    try:
        task = (await s.scalars(stmt)).one_or_none()
    except IntegrityError as e:
        # tasks.user_id references users.id
        raise UserNotFoundError(f"user {user_id}") from e

    if task is not None:
        return task

    # Nothing matched: either no such task or somebody closed it first.
    # Status never goes back to open, so this probe can't contradict the update.
    exists = await s.scalar(select(Task.id).where(Task.id == task_id))
    if exists is None:
        raise TaskNotFoundError(f"task {task_id}")
    raise TaskAlreadyClosedError(f"task {task_id}")
