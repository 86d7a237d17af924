import asyncio
import logging

from aiogram import Bot
from aiohttp import web

from taskreward.auth import TokenIssuer
from taskreward.config import Config, load_config
from taskreward.database import init_db, make_engine, make_session_factory
from taskreward.dispatcher import build_dispatcher
from taskreward.handlers.http import create_app
from taskreward.logging_setup import setup_logging
from taskreward.services.rewards import RewardService

logger = logging.getLogger("taskreward.main")


async def seed_tasks(service: RewardService, count: int) -> None:
    for i in range(count):
        await service.add_task(f"description{i}", i * 10 + 10)
    if count:
        logger.info("Seeded %s tasks", count)


async def run(cfg: Config) -> None:
    engine = make_engine(cfg.database_url, cfg.db_pool_size)
    await init_db(engine)

    service = RewardService(make_session_factory(engine), tx_timeout=cfg.tx_timeout)
    await seed_tasks(service, cfg.seed_tasks)

    app = create_app(service, TokenIssuer(cfg.jwt_secret, cfg.jwt_expiration_minutes))
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, cfg.server_host, cfg.server_port)
    await site.start()
    logger.info("HTTP API listening on %s:%s", cfg.server_host, cfg.server_port)

    bot = None
    try:
        if cfg.bot_token:
            bot = Bot(cfg.bot_token)
            dp = build_dispatcher(service, cfg.admin_ids)
            logger.info("Admin bot polling, admins=%s", sorted(cfg.admin_ids))
            await dp.start_polling(bot, handle_signals=False)
        else:
            await asyncio.Event().wait()
    finally:
        logger.info("Shutting down")
        if bot is not None:
            await bot.session.close()
        await runner.cleanup()
        await engine.dispose()


def main() -> None:
    cfg = load_config()
    setup_logging(cfg.log_level)
    try:
        asyncio.run(run(cfg))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
