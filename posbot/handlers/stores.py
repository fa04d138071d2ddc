"""Store selection handlers."""

import logging

from aiogram import F, Router, html
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from posbot import messages
from posbot.api.errors import ApiError
from posbot.keyboards import MENU_STORE, main_menu_keyboard, store_keyboard
from posbot.services import count_service

from .states import StoreState

router = Router()
logger = logging.getLogger(__name__)


async def ask_store(message: Message, state: FSMContext, user_id: int, then_count: bool = False) -> None:
    """Show the tenant's stores as buttons."""
    try:
        stores = await count_service.backend.stores.list_stores()
    except ApiError as e:
        logger.warning("store_list_failed", extra={"user_id": user_id, "error": str(e)})
        await message.answer(f"⚠️ {messages.describe_error(messages.LOAD_FAILED, e)}")
        return

    if not stores:
        await message.answer("🏬 Дэлгүүр бүртгэгдээгүй байна.", reply_markup=main_menu_keyboard())
        return

    await state.set_state(StoreState.choosing)
    await state.update_data(
        store_names={s.id: s.name for s in stores},
        then_count=then_count,
    )
    await message.answer(
        "🏬 <b>Дэлгүүр сонгоно уу:</b>",
        reply_markup=store_keyboard(stores, count_service.selected_store(user_id)),
    )


@router.message(F.text == MENU_STORE)
async def change_store(message: Message, state: FSMContext) -> None:
    if not message.from_user:
        return
    await ask_store(message, state, message.from_user.id)


@router.callback_query(F.data.startswith("store_"))
async def pick_store(callback: CallbackQuery, state: FSMContext) -> None:
    """Remember the store and, when asked from the count menu, start counting."""
    if not callback.data or not callback.from_user:
        return

    store_id = callback.data.removeprefix("store_")
    data = await state.get_data()
    name = data.get("store_names", {}).get(store_id, store_id)

    count_service.select_store(callback.from_user.id, store_id)
    logger.info("store_selected", extra={"user_id": callback.from_user.id, "store_id": store_id})

    await callback.answer()
    await state.clear()
    await callback.message.edit_text(f"✅ Дэлгүүр: {html.bold(html.quote(name))}")

    if data.get("then_count"):
        from .count import begin_count

        await begin_count(callback.message, state, callback.from_user.id)
