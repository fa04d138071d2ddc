"""Critical commands that always work regardless of FSM state.

This router must be registered FIRST to ensure these commands
take priority over any FSM state handlers.
"""

from aiogram import F, Router, html
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from posbot.keyboards import CANCEL_TEXT, MENU_COUNT, MENU_STATUS, MENU_STORE, MENU_TRANSFERS, main_menu_keyboard
from posbot.services import count_service

router = Router()


@router.message(Command("start"))
async def cmd_start(message: Message, state: FSMContext) -> None:
    """Handle /start - always clears state and shows main menu."""
    await state.clear()

    user = message.from_user
    name = html.quote(user.first_name) if user else "Ажилтан"

    if user:
        count_service.clear_session(user.id)

    await message.answer(
        f"👋 Сайн байна уу, {name}!\n\n"
        "<b>Боломжтой үйлдлүүд:</b>\n"
        f"{MENU_COUNT} — барааны тооллого, зөрүү засах\n"
        f"{MENU_TRANSFERS} — дэлгүүр хоорондын шилжүүлэг\n"
        f"{MENU_STORE} — ажиллах дэлгүүрээ сонгох\n"
        f"{MENU_STATUS} — холболт шалгах",
        reply_markup=main_menu_keyboard(),
    )


@router.message(Command("cancel"))
@router.message(F.text == CANCEL_TEXT)
async def cmd_cancel(message: Message, state: FSMContext) -> None:
    """Handle /cancel - emergency exit from any state."""
    await state.clear()

    await message.answer(
        "🏠 Үйлдэл цуцлагдлаа. Үндсэн цэс.",
        reply_markup=main_menu_keyboard(),
    )


@router.message(Command("help"))
async def cmd_help(message: Message, state: FSMContext) -> None:
    """Handle /help - show help message."""
    await state.clear()

    await message.answer(
        "📖 <b>Тусламж</b>\n\n"
        "<b>Командууд:</b>\n"
        "/start — үндсэн цэс\n"
        "/count — тооллого эхлүүлэх\n"
        "/cancel — одоогийн үйлдлийг цуцлах\n"
        "/health — төлөв шалгах\n\n"
        "<b>Тооллого:</b>\n"
        "Жагсаалтаас бараа сонгоод тоолсон тоогоо бичнэ.\n"
        "Эсвэл <code>SKU тоо</code> гэж шууд бичиж болно.\n"
        "Дараа нь ⚖️ Харьцуулах, ✅ Засвар хийх.",
        reply_markup=main_menu_keyboard(),
    )
