"""Telegram keyboard builders."""

from collections.abc import Sequence

from aiogram.types import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
)
from aiogram.utils.keyboard import InlineKeyboardBuilder

from posbot.api.schemas import Store, Transfer, TransferAction
from posbot.api.transfers import action_label, status_label
from posbot.models import CountableItem

MENU_COUNT = "📦 Тооллого"
MENU_TRANSFERS = "🔁 Шилжүүлэг"
MENU_STORE = "🏬 Дэлгүүр солих"
MENU_STATUS = "🔧 Төлөв"
CANCEL_TEXT = "❌ Цуцлах"

MENU_TEXTS = (MENU_COUNT, MENU_TRANSFERS, MENU_STORE, MENU_STATUS, CANCEL_TEXT)

# Rows shown per screen of the count list
COUNT_VIEW_SIZE = 10


def main_menu_keyboard() -> ReplyKeyboardMarkup:
    """Main menu reply keyboard."""
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=MENU_COUNT), KeyboardButton(text=MENU_TRANSFERS)],
            [KeyboardButton(text=MENU_STORE), KeyboardButton(text=MENU_STATUS)],
        ],
        resize_keyboard=True,
        is_persistent=True,
    )


def cancel_keyboard() -> ReplyKeyboardMarkup:
    """Cancel action keyboard."""
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=CANCEL_TEXT)]],
        resize_keyboard=True,
    )


def store_keyboard(stores: Sequence[Store], current_id: str | None = None) -> InlineKeyboardMarkup:
    """One button per store; the active one is marked."""
    builder = InlineKeyboardBuilder()
    for store in stores:
        mark = "✅ " if store.id == current_id else ""
        builder.button(text=f"{mark}{store.name}", callback_data=f"store_{store.id}")
    builder.adjust(1)
    return builder.as_markup()


def count_view_pages(total_items: int, view_size: int = COUNT_VIEW_SIZE) -> int:
    return max(1, -(-total_items // view_size))


def count_list_keyboard(
    items: Sequence[CountableItem],
    view: int,
    has_more: bool,
    view_size: int = COUNT_VIEW_SIZE,
) -> InlineKeyboardMarkup:
    """Rows of the current screen, navigation, then count actions."""
    start = view * view_size
    builder = InlineKeyboardBuilder()

    for item in items[start : start + view_size]:
        builder.row(
            InlineKeyboardButton(
                text=f"{item.display_name()[:40]} · {item.physical_qty}/{item.system_qty}",
                callback_data=f"count_item_{item.variant_id}",
            )
        )

    nav = []
    if view > 0:
        nav.append(InlineKeyboardButton(text="◀️", callback_data=f"count_view_{view - 1}"))
    pages = count_view_pages(len(items), view_size)
    nav.append(InlineKeyboardButton(text=f"{view + 1}/{pages}", callback_data="noop"))
    if view + 1 < pages:
        nav.append(InlineKeyboardButton(text="▶️", callback_data=f"count_view_{view + 1}"))
    elif has_more:
        nav.append(InlineKeyboardButton(text="⬇️ Цааш ачаалах", callback_data="count_more"))
    builder.row(*nav)

    builder.row(
        InlineKeyboardButton(text="🔍 Хайх", callback_data="count_search"),
        InlineKeyboardButton(text="⚖️ Харьцуулах", callback_data="count_compare"),
    )
    builder.row(
        InlineKeyboardButton(text="🔄 Шинэчлэх", callback_data="count_refresh"),
        InlineKeyboardButton(text="🗑 Дахин эхлэх", callback_data="count_reset"),
    )
    return builder.as_markup()


def comparison_keyboard(has_discrepancies: bool) -> InlineKeyboardMarkup:
    buttons = []
    if has_discrepancies:
        buttons.append(
            [InlineKeyboardButton(text="✅ Засвар хийх", callback_data="count_apply")]
        )
    buttons.append([InlineKeyboardButton(text="↩️ Тооллого руу буцах", callback_data="count_back")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def apply_confirm_keyboard() -> InlineKeyboardMarkup:
    """Confirmation before committing adjustments."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="✅ Тийм, хийх", callback_data="count_apply_confirm"),
                InlineKeyboardButton(text="❌ Болих", callback_data="count_back"),
            ]
        ]
    )


def transfers_keyboard(transfers: Sequence[Transfer]) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for transfer in transfers:
        builder.button(
            text=f"#{transfer.id[:8]} · {status_label(transfer.status)}",
            callback_data=f"transfer_open_{transfer.id}",
        )
    builder.adjust(1)
    return builder.as_markup()


def transfer_actions_keyboard(
    transfer_id: str, actions: Sequence[TransferAction]
) -> InlineKeyboardMarkup:
    """Buttons for the actions the transfer's status allows."""
    buttons = [
        InlineKeyboardButton(
            text=action_label(action),
            callback_data=f"transfer_act_{action.value}_{transfer_id}",
        )
        for action in actions
    ]
    rows = [buttons] if buttons else []
    rows.append([InlineKeyboardButton(text="↩️ Жагсаалт", callback_data="transfer_list")])
    return InlineKeyboardMarkup(inline_keyboard=rows)
