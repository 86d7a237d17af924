import asyncio
import sys

from taskreward.config import load_config
from taskreward.database import make_engine, make_session_factory
from taskreward.services.rewards import RewardService


async def main(count: int):
    cfg = load_config()
    engine = make_engine(cfg.database_url, cfg.db_pool_size)
    service = RewardService(make_session_factory(engine), tx_timeout=cfg.tx_timeout)
    for i in range(count):
        task = await service.add_task(f"description{i}", i * 10 + 10)
        print(f"#{task.id} {task.description} +{task.bonus}")
    await engine.dispose()

asyncio.run(main(int(sys.argv[1]) if len(sys.argv) > 1 else 10))
