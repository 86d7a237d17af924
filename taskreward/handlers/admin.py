import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message

from taskreward.errors import RewardError
from taskreward.keyboards.inline import admin_menu
from taskreward.models.task import Task
from taskreward.models.user import User
from taskreward.services.rewards import RewardService

logger = logging.getLogger(__name__)

router = Router()

USAGE_ADDTASK = "Использование: /addtask <бонус> <описание>"


def format_tasks(tasks: list[Task]) -> str:
    if not tasks:
        return "Активных заданий нет"
    lines = [f"#{t.id} {t.description} (+{t.bonus})" for t in tasks]
    return "🎯 Активные задания:\n" + "\n".join(lines)


def format_leaderboard(leaders: list[User]) -> str:
    if not leaders:
        return "Пользователей пока нет"
    lines = [f"{i}. {u.login}: {u.balance}" for i, u in enumerate(leaders, start=1)]
    return "🏆 Лидеры:\n" + "\n".join(lines)


@router.message(Command("menu"))
async def menu(m: Message, admin_ids: frozenset[int]):
    if m.from_user.id not in admin_ids:
        return
    await m.answer("Админ-меню:", reply_markup=admin_menu())


@router.message(Command("addtask"))
async def add_task(m: Message, command: CommandObject, service: RewardService, admin_ids: frozenset[int]):
    if m.from_user.id not in admin_ids:
        return

    parts = (command.args or "").split(maxsplit=1)
    if len(parts) != 2 or not parts[0].isdecimal():
        await m.answer(USAGE_ADDTASK)
        return

    try:
        task = await service.add_task(parts[1], int(parts[0]))
    except RewardError as e:
        await m.answer(f"❌ {e}")
        return

    logger.info("Admin %s added task id=%s", m.from_user.id, task.id)
    await m.answer(f"✅ Задание #{task.id} добавлено, бонус {task.bonus}")


@router.message(Command("tasks"))
async def tasks_cmd(m: Message, service: RewardService, admin_ids: frozenset[int]):
    if m.from_user.id not in admin_ids:
        return
    try:
        await m.answer(format_tasks(await service.get_active_tasks()))
    except RewardError as e:
        await m.answer(f"❌ {e}")


@router.message(Command("top"))
async def top_cmd(m: Message, service: RewardService, admin_ids: frozenset[int]):
    if m.from_user.id not in admin_ids:
        return
    try:
        await m.answer(format_leaderboard(await service.get_leaderboard()))
    except RewardError as e:
        await m.answer(f"❌ {e}")


@router.callback_query(F.data == "tasks")
async def tasks_cb(call: CallbackQuery, service: RewardService, admin_ids: frozenset[int]):
    if call.from_user.id not in admin_ids:
        await call.answer()
        return
    try:
        text = format_tasks(await service.get_active_tasks())
    except RewardError as e:
        await call.answer(f"❌ {e}", show_alert=True)
        return
    await call.message.answer(text)
    await call.answer()


@router.callback_query(F.data == "top")
async def top_cb(call: CallbackQuery, service: RewardService, admin_ids: frozenset[int]):
    if call.from_user.id not in admin_ids:
        await call.answer()
        return
    try:
        text = format_leaderboard(await service.get_leaderboard())
    except RewardError as e:
        await call.answer(f"❌ {e}", show_alert=True)
        return
    await call.message.answer(text)
    await call.answer()
