"""Store transfer handlers: list, open, change status."""

import logging

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from posbot import messages
from posbot.api.errors import ApiError
from posbot.api.schemas import TransferAction
from posbot.api.transfers import available_actions, status_label
from posbot.formatting import transfer_text
from posbot.keyboards import MENU_TRANSFERS, transfer_actions_keyboard, transfers_keyboard
from posbot.services import count_service

router = Router()
logger = logging.getLogger(__name__)

LIST_LIMIT = 10


async def _store_names() -> dict[str, str]:
    try:
        stores = await count_service.backend.stores.list_stores()
    except ApiError as e:
        logger.debug("Store names unavailable: %s", e)
        return {}
    return {s.id: s.name for s in stores}


async def _transfer_list_view() -> tuple[str, InlineKeyboardMarkup | None]:
    result = await count_service.backend.transfers.list_transfers(limit=LIST_LIMIT)
    if not result.items:
        return "🔁 Шилжүүлэг алга.", None
    text = f"🔁 <b>Сүүлийн шилжүүлгүүд</b> ({len(result.items)}/{result.count})"
    return text, transfers_keyboard(result.items)


@router.message(F.text == MENU_TRANSFERS)
async def list_transfers(message: Message) -> None:
    try:
        text, markup = await _transfer_list_view()
    except ApiError as e:
        await message.answer(f"⚠️ {messages.describe_error(messages.LOAD_FAILED, e)}")
        return
    await message.answer(text, reply_markup=markup)


@router.callback_query(F.data == "transfer_list")
async def back_to_transfers(callback: CallbackQuery) -> None:
    try:
        text, markup = await _transfer_list_view()
    except ApiError as e:
        await callback.answer(messages.describe_error(messages.LOAD_FAILED, e), show_alert=True)
        return
    await callback.answer()
    await callback.message.edit_text(text, reply_markup=markup)


async def _show_transfer(callback: CallbackQuery, transfer_id: str) -> None:
    detail = await count_service.backend.transfers.get_transfer(transfer_id)
    text = transfer_text(detail, await _store_names())
    markup = transfer_actions_keyboard(transfer_id, available_actions(detail.transfer.status))
    try:
        await callback.message.edit_text(text, reply_markup=markup)
    except TelegramBadRequest as e:
        logger.debug("Cannot edit transfer card: %s", e)
        await callback.message.answer(text, reply_markup=markup)


@router.callback_query(F.data.startswith("transfer_open_"))
async def open_transfer(callback: CallbackQuery) -> None:
    if not callback.data:
        return
    try:
        await _show_transfer(callback, callback.data.removeprefix("transfer_open_"))
    except ApiError as e:
        await callback.answer(messages.describe_error(messages.LOAD_FAILED, e), show_alert=True)
        return
    await callback.answer()


@router.callback_query(F.data.startswith("transfer_act_"))
async def change_status(callback: CallbackQuery) -> None:
    """Run one status action; the server decides whether it is allowed."""
    if not callback.data:
        return

    action_value, _, transfer_id = callback.data.removeprefix("transfer_act_").partition("_")
    try:
        action = TransferAction(action_value)
    except ValueError:
        await callback.answer(messages.WRONG_STEP, show_alert=True)
        return

    try:
        status = await count_service.backend.transfers.update_status(transfer_id, action)
    except ApiError as e:
        logger.warning(
            "transfer_action_failed",
            extra={"transfer_id": transfer_id, "action": action.value, "error": str(e)},
        )
        await callback.answer(messages.describe_error("Төлөв солиход алдаа гарлаа", e), show_alert=True)
        return

    await callback.answer(f"✅ {status_label(status)}")
    try:
        await _show_transfer(callback, transfer_id)
    except ApiError as e:
        logger.debug("Transfer reload failed: %s", e)
