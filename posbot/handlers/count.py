"""Stock count handlers: list, enter quantities, compare, apply."""

import logging
import re

from aiogram import F, Router, html
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from posbot import messages
from posbot.api.auth import can_access_feature
from posbot.api.errors import ApiError
from posbot.count import CountSession, InvalidTransitionError
from posbot.formatting import comparison_text, count_list_text, progress_text, report_text
from posbot.keyboards import (
    COUNT_VIEW_SIZE,
    MENU_COUNT,
    MENU_TEXTS,
    apply_confirm_keyboard,
    cancel_keyboard,
    comparison_keyboard,
    count_list_keyboard,
    main_menu_keyboard,
)
from posbot.models import SessionState
from posbot.monitoring import capture_exception
from posbot.services import count_service

from .states import CountState
from .stores import ask_store

router = Router()
logger = logging.getLogger(__name__)

# "SKU qty" typed on the list screen
QUICK_ENTRY = re.compile(r"^(\S+)\s+(\d+)$")

# Progress message is edited every N items (and on the last one)
PROGRESS_STEP = 5


async def show_list(message: Message, session: CountSession, view: int, edit: bool = False) -> None:
    """Render the count list, editing the message when possible."""
    text = count_list_text(session, view)
    markup = count_list_keyboard(session.items, view, session.search.has_more)

    if edit:
        try:
            await message.edit_text(text, reply_markup=markup)
            return
        except TelegramBadRequest as e:
            if "message is not modified" in str(e):
                return
            logger.debug("Cannot edit count list: %s", e)
    await message.answer(text, reply_markup=markup)


async def _session_for(event: Message | CallbackQuery) -> CountSession | None:
    session = count_service.get_session(event.from_user.id) if event.from_user else None
    if session is None:
        if isinstance(event, CallbackQuery):
            await event.answer(messages.SESSION_EXPIRED, show_alert=True)
        else:
            await event.answer(f"⌛ {messages.SESSION_EXPIRED}", reply_markup=main_menu_keyboard())
    return session


async def begin_count(message: Message, state: FSMContext, user_id: int) -> None:
    """Open the count list; an unfinished count for the same store is resumed."""
    store_id = count_service.selected_store(user_id)
    if not store_id:
        await ask_store(message, state, user_id, then_count=True)
        return

    session = count_service.get_session(user_id)
    if session and session.state is SessionState.APPLYING:
        await message.answer("⏳ Засвар хийгдэж байна, түр хүлээнэ үү.")
        return

    if session and session.store_id == store_id and session.items:
        if session.state is SessionState.COMPARED:
            session.resume_counting()
    else:
        session = count_service.create_session(user_id)
        await session.start(store_id)
        logger.info(
            "count_started",
            extra={"user_id": user_id, "store_id": store_id, "rows": len(session.items)},
        )

    await state.set_state(CountState.counting)
    await state.update_data(view=0)
    await show_list(message, session, 0)


@router.message(Command("count"))
@router.message(F.text == MENU_COUNT)
async def start_count(message: Message, state: FSMContext) -> None:
    if not message.from_user:
        return
    await begin_count(message, state, message.from_user.id)


@router.callback_query(F.data == "noop")
async def noop(callback: CallbackQuery) -> None:
    await callback.answer()


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


@router.callback_query(F.data.startswith("count_view_"))
async def change_view(callback: CallbackQuery, state: FSMContext) -> None:
    session = await _session_for(callback)
    if not session or not callback.data:
        return

    view = int(callback.data.removeprefix("count_view_"))
    await state.update_data(view=view)
    await callback.answer()
    await show_list(callback.message, session, view, edit=True)


@router.callback_query(F.data == "count_more")
async def load_more(callback: CallbackQuery, state: FSMContext) -> None:
    """Fetch the next page and jump to its first screen."""
    session = await _session_for(callback)
    if not session:
        return

    try:
        added = await session.load_more()
    except InvalidTransitionError:
        await callback.answer(messages.WRONG_STEP, show_alert=True)
        return

    if session.error:
        await callback.answer(session.error, show_alert=True)
        return

    await callback.answer(f"+{added}")
    if added:
        view = (len(session.items) - added) // COUNT_VIEW_SIZE
    else:
        view = (await state.get_data()).get("view", 0)
    await state.update_data(view=view)
    await show_list(callback.message, session, view, edit=True)


@router.callback_query(F.data == "count_refresh")
async def refresh(callback: CallbackQuery, state: FSMContext) -> None:
    session = await _session_for(callback)
    if not session:
        return

    try:
        await session.refresh()
    except InvalidTransitionError:
        await callback.answer(messages.WRONG_STEP, show_alert=True)
        return

    await callback.answer()
    await state.set_state(CountState.counting)
    await state.update_data(view=0)
    await show_list(callback.message, session, 0, edit=True)


@router.callback_query(F.data == "count_reset")
async def reset(callback: CallbackQuery, state: FSMContext) -> None:
    """Drop every entered count and reload the first page."""
    session = await _session_for(callback)
    if not session:
        return

    if session.state is SessionState.APPLYING:
        await callback.answer(messages.WRONG_STEP, show_alert=True)
        return

    session.reset()
    await session.refresh()
    logger.info("count_reset", extra={"user_id": callback.from_user.id, "store_id": session.store_id})

    await callback.answer("🗑 Тооллого шинээр эхэллээ")
    await state.set_state(CountState.counting)
    await state.update_data(view=0)
    await show_list(callback.message, session, 0, edit=True)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@router.callback_query(F.data == "count_search")
async def start_search(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer()
    await state.set_state(CountState.searching)
    await callback.message.answer(
        "🔍 Барааны нэр эсвэл SKU бичнэ үү.\n"
        "Бүх барааг харах бол <code>-</code> гэж бичнэ.\n\n"
        "⚠️ Хайлт хийхэд оруулсан тоо арилна.",
        reply_markup=cancel_keyboard(),
    )


@router.message(CountState.searching, F.text, ~F.text.startswith("/"))
async def process_search(message: Message, state: FSMContext) -> None:
    session = await _session_for(message)
    if not session:
        await state.clear()
        return

    query = message.text.strip()
    if query == "-":
        query = ""
    if len(query) > 200:
        await message.answer("⚠️ Хайлтын үг хэт урт байна. Дээд тал нь 200 тэмдэгт.")
        return

    try:
        applied = await session.search_items(query)
    except InvalidTransitionError:
        await message.answer(f"⚠️ {messages.WRONG_STEP}")
        return

    # A newer query arrived during the debounce window
    if not applied and not session.error:
        return

    await state.set_state(CountState.counting)
    await state.update_data(view=0)
    await message.answer(f"🔍 {html.quote(query or 'Бүх бараа')}", reply_markup=main_menu_keyboard())
    await show_list(message, session, 0)


# ---------------------------------------------------------------------------
# Quantity entry
# ---------------------------------------------------------------------------


@router.callback_query(F.data.startswith("count_item_"))
async def pick_item(callback: CallbackQuery, state: FSMContext) -> None:
    session = await _session_for(callback)
    if not session or not callback.data:
        return

    item = session.entries.get(callback.data.removeprefix("count_item_"))
    if not item:
        await callback.answer("Бараа олдсонгүй", show_alert=True)
        return

    await callback.answer()
    await state.set_state(CountState.entering_qty)
    await state.update_data(item_id=item.variant_id)

    sku = f"SKU: <code>{html.quote(item.sku)}</code>\n" if item.sku else ""
    await callback.message.answer(
        f"🧮 <b>{html.quote(item.display_name())}</b>\n"
        f"{sku}"
        f"Систем дэх үлдэгдэл: {item.system_qty}\n"
        f"Тоолсон: {item.physical_qty}\n\n"
        "Тоолсон тоогоо оруулна уу. Жишээ: <code>37</code>",
        reply_markup=cancel_keyboard(),
    )


def _apply_quantity(session: CountSession, item_id: str, qty: int) -> str:
    item = session.update_quantity(item_id, qty)
    logger.info(
        "count_quantity_set",
        extra={"store_id": session.store_id, "variant_id": item_id, "qty": item.physical_qty},
    )
    return f"✅ {html.quote(item.display_name())}: {item.physical_qty}"


@router.message(CountState.entering_qty, F.text, ~F.text.startswith("/"))
async def process_quantity(message: Message, state: FSMContext) -> None:
    session = await _session_for(message)
    if not session:
        await state.clear()
        return

    text = message.text.strip()
    if not text.isdigit():
        await message.answer("⚠️ Тэгээс багагүй бүхэл тоо оруулна уу.")
        return

    data = await state.get_data()
    try:
        confirmation = _apply_quantity(session, data["item_id"], int(text))
    except (InvalidTransitionError, KeyError):
        await state.clear()
        await message.answer(f"⚠️ {messages.WRONG_STEP}", reply_markup=main_menu_keyboard())
        return

    await state.set_state(CountState.counting)
    await message.answer(confirmation, reply_markup=main_menu_keyboard())
    await show_list(message, session, data.get("view", 0))


@router.message(CountState.counting, F.text, ~F.text.startswith("/"), ~F.text.in_(MENU_TEXTS))
async def quick_entry(message: Message, state: FSMContext) -> None:
    """`SKU qty` sets the count of a loaded row without opening it."""
    session = await _session_for(message)
    if not session:
        await state.clear()
        return

    match = QUICK_ENTRY.match(message.text.strip())
    sku = match.group(1).lower() if match else None
    item = next((i for i in session.items if sku and i.sku and i.sku.lower() == sku), None)
    if not item:
        await message.answer(
            "⚠️ Ачаалсан бараанаас SKU олдсонгүй.\n"
            "Жишээ: <code>ABC-001 7</code>, эсвэл 🔍 Хайх товчийг ашиглана уу."
        )
        return

    try:
        confirmation = _apply_quantity(session, item.variant_id, int(match.group(2)))
    except InvalidTransitionError:
        await message.answer(f"⚠️ {messages.WRONG_STEP}")
        return

    index = next(n for n, row in enumerate(session.items) if row.variant_id == item.variant_id)
    view = index // COUNT_VIEW_SIZE
    await state.update_data(view=view)
    await message.answer(confirmation)
    await show_list(message, session, view)


# ---------------------------------------------------------------------------
# Compare and apply
# ---------------------------------------------------------------------------


@router.callback_query(F.data == "count_compare")
async def compare(callback: CallbackQuery, state: FSMContext) -> None:
    session = await _session_for(callback)
    if not session:
        return

    try:
        comparison = await session.compare()
    except InvalidTransitionError:
        await callback.answer(messages.WRONG_STEP, show_alert=True)
        return

    if comparison is None:
        await callback.answer(session.error, show_alert=True)
        return

    await callback.answer()
    await state.set_state(CountState.comparing)
    await callback.message.edit_text(
        comparison_text(comparison),
        reply_markup=comparison_keyboard(bool(comparison.discrepancies)),
    )


@router.callback_query(F.data == "count_back")
async def back_to_list(callback: CallbackQuery, state: FSMContext) -> None:
    session = await _session_for(callback)
    if not session:
        return

    if session.state is SessionState.COMPARED:
        session.resume_counting()

    await callback.answer()
    await state.set_state(CountState.counting)
    data = await state.get_data()
    await show_list(callback.message, session, data.get("view", 0), edit=True)


async def _may_adjust(callback: CallbackQuery) -> bool:
    """Inventory adjustments need the Admin or OWNER role."""
    try:
        role = await count_service.backend.current_role()
    except ApiError as e:
        await callback.answer(messages.describe_error(messages.ADJUST_FAILED, e), show_alert=True)
        return False

    if not can_access_feature(role, "inventory"):
        logger.warning(
            "count_apply_denied",
            extra={"user_id": callback.from_user.id, "role": role.value if role else None},
        )
        await callback.answer(messages.ACCESS_DENIED, show_alert=True)
        return False
    return True


@router.callback_query(F.data == "count_apply")
async def confirm_apply(callback: CallbackQuery) -> None:
    session = await _session_for(callback)
    if not session:
        return
    if session.comparison is None:
        await callback.answer(messages.WRONG_STEP, show_alert=True)
        return
    if not await _may_adjust(callback):
        return

    await callback.answer()
    total = len(session.comparison.discrepancies)
    await callback.message.edit_text(
        f"{comparison_text(session.comparison)}\n\n"
        f"❓ <b>{total} барааны үлдэгдлийг засах уу?</b>",
        reply_markup=apply_confirm_keyboard(),
    )


@router.callback_query(F.data == "count_apply_confirm")
async def apply(callback: CallbackQuery, state: FSMContext) -> None:
    """Apply discrepancies one by one, editing a progress message."""
    session = await _session_for(callback)
    if not session:
        return
    if session.state is not SessionState.COMPARED:
        await callback.answer(messages.WRONG_STEP, show_alert=True)
        return
    if not await _may_adjust(callback):
        return

    await callback.answer()
    await state.set_state(CountState.applying)
    status_message = callback.message
    total = len(session.comparison.discrepancies)
    await status_message.edit_text(progress_text(0, total))

    async def on_progress(current: int, total: int) -> None:
        if current % PROGRESS_STEP and current != total:
            return
        try:
            await status_message.edit_text(progress_text(current, total))
        except TelegramBadRequest as e:
            logger.debug("Cannot edit progress message: %s", e)

    store_id = session.store_id
    try:
        report = await session.apply_adjustments(on_progress)
    except Exception as e:
        capture_exception(e, {"store_id": store_id, "user_id": callback.from_user.id})
        # The session was reset; counting starts over from fresh stock
        await status_message.edit_text(f"❌ {messages.ADJUST_FAILED}")
        await session.refresh()
        await state.set_state(CountState.counting)
        await state.update_data(view=0)
        await show_list(status_message, session, 0)
        return

    if report is None:
        await state.set_state(CountState.comparing)
        await status_message.edit_text(
            f"⚠️ {html.quote(session.error or messages.ADJUST_FAILED)}",
            reply_markup=comparison_keyboard(has_discrepancies=False),
        )
        return

    logger.info(
        "count_applied",
        extra={"store_id": store_id, "succeeded": report.succeeded, "failed": report.failed},
    )
    await status_message.edit_text(report_text(report))
    await state.set_state(CountState.counting)
    await state.update_data(view=0)
    await show_list(status_message, session, 0)
