
from aiogram import Dispatcher
from taskreward.handlers.admin import router as admin_router
from taskreward.services.rewards import RewardService


def build_dispatcher(service: RewardService, admin_ids: frozenset[int]) -> Dispatcher:
    # service and admin_ids are injected into handlers by argument name
    dp = Dispatcher(service=service, admin_ids=admin_ids)
    dp.include_router(admin_router)
    return dp
