from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

def admin_menu():
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🎯 Задания", callback_data="tasks")],
        [InlineKeyboardButton(text="🏆 Лидеры", callback_data="top")]
    ])
