import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from taskreward.models.base import Base

logger = logging.getLogger(__name__)


def make_engine(url: str, pool_size: int = 10) -> AsyncEngine:
    kwargs = {}
    # :memory: databases get a StaticPool that takes no sizing
    if ":memory:" not in url:
        kwargs.update(poolclass=AsyncAdaptedQueuePool, pool_size=pool_size, max_overflow=0)

    engine = create_async_engine(url, echo=False, **kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

    logger.info("Database engine ready dialect=%s pool_size=%s", engine.dialect.name, pool_size)
    return engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    # import for side effect: register tables on Base.metadata
    from taskreward.models import task, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
