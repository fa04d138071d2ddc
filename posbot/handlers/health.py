"""Health check and status handlers."""

from aiogram import F, Router, html
from aiogram.filters import Command
from aiogram.types import Message

from posbot.api.auth import decode_claims, user_role
from posbot.api.errors import ApiError
from posbot.keyboards import MENU_STATUS, main_menu_keyboard
from posbot.monitoring import with_error_capture
from posbot.services import count_service

router = Router()


@with_error_capture
async def check_backend() -> dict:
    """Sign-in, tenant and store lookups; each failure is reported, not raised."""
    backend = count_service.backend
    status: dict = {"ok": False}
    try:
        token = await backend.auth.get_access_token()
        role = user_role(decode_claims(token))
        status["role"] = role.value if role else None
        status["tenant_id"] = await backend.tenants.get_tenant_id()
        status["stores"] = len(await backend.stores.list_stores())
    except ApiError as e:
        status["error"] = e.message
        return status
    status["ok"] = True
    return status


@router.message(F.text == MENU_STATUS)
async def show_status(message: Message) -> None:
    """Show system status and health checks."""
    await message.answer("🔍 Холболт шалгаж байна...")

    backend_status = await check_backend()
    lines = ["🔧 <b>Системийн төлөв</b>\n"]

    if backend_status["ok"]:
        lines.append("✅ <b>Сервер</b>")
        lines.append(f"   Байгууллага: <code>{backend_status['tenant_id']}</code>")
        lines.append(f"   Эрх: {backend_status.get('role') or '—'}")
        lines.append(f"   Дэлгүүр: {backend_status['stores']}")
    else:
        lines.append("❌ <b>Сервер</b>")
        lines.append(f"   Алдаа: {html.quote(backend_status.get('error') or 'Тодорхойгүй алдаа')}")

    if message.from_user:
        store_id = count_service.selected_store(message.from_user.id)
        lines.append("")
        lines.append(f"🏬 Сонгосон дэлгүүр: <code>{store_id or '—'}</code>")

    await message.answer("\n".join(lines), reply_markup=main_menu_keyboard())


@router.message(Command("health"))
async def health_check(message: Message) -> None:
    """Simple health check for monitoring."""
    backend_status = await check_backend()
    if backend_status["ok"]:
        await message.answer("✅ OK")
    else:
        await message.answer(f"⚠️ DEGRADED: {html.quote(backend_status.get('error') or 'backend')}")
