import asyncio

from taskreward.config import load_config
from taskreward.database import init_db, make_engine


async def main():
    cfg = load_config()
    engine = make_engine(cfg.database_url, cfg.db_pool_size)
    await init_db(engine)
    await engine.dispose()

asyncio.run(main())
