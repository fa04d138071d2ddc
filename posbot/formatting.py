"""HTML texts for the count and transfer screens."""

from __future__ import annotations

from collections.abc import Sequence

from aiogram import html

from posbot import messages
from posbot.api.schemas import ComparisonResult, TransferDetail
from posbot.api.transfers import status_label
from posbot.count import CountComparison, CountSession
from posbot.count.adjust import adjustment_summary
from posbot.keyboards import COUNT_VIEW_SIZE
from posbot.models import AdjustmentReport, CountStatus

# Discrepancy rows listed per status on the comparison screen
MAX_LISTED = 15


def count_list_text(session: CountSession, view: int, view_size: int = COUNT_VIEW_SIZE) -> str:
    search = session.search
    items = session.items
    summary = session.summary()

    lines = [html.bold("📦 Тооллого")]
    if search.query:
        lines.append(f"🔍 Хайлт: {html.quote(search.query)}")
    lines.append(f"Ачаалсан: {len(items)} / {search.total_count}")
    lines.append(
        f"Тоолсон: {summary.items_counted} төрөл, нийт {summary.total_quantity} ширхэг"
    )
    if session.error:
        lines.append(f"⚠️ {html.quote(session.error)}")

    start = view * view_size
    page = items[start : start + view_size]
    if not page:
        lines.append("\nБараа олдсонгүй.")
        return "\n".join(lines)

    lines.append("")
    for number, item in enumerate(page, start=start + 1):
        sku = f" {html.code(item.sku)}" if item.sku else ""
        lines.append(
            f"{number}. {html.quote(item.display_name())}{sku}\n"
            f"    Систем: {item.system_qty} · Тоолсон: {html.bold(str(item.physical_qty))}"
        )
    lines.append("\nТоо оруулах бараагаа сонгоно уу.")
    return "\n".join(lines)


def _result_line(row: ComparisonResult) -> str:
    sign = "+" if row.delta > 0 else ""
    sku = f" {html.code(row.sku)}" if row.sku else ""
    name = row.product_name or "Тодорхойгүй бараа"
    if row.variant_name:
        name = f"{name} ({row.variant_name})"
    return (
        f"• {html.quote(name)}{sku}: {row.system_qty} → {row.physical_qty} "
        f"({sign}{row.delta})"
    )


def _section(title: str, rows: Sequence[ComparisonResult]) -> list[str]:
    if not rows:
        return []
    lines = ["", html.bold(f"{title} ({len(rows)})")]
    lines.extend(_result_line(r) for r in rows[:MAX_LISTED])
    if len(rows) > MAX_LISTED:
        lines.append(f"… бас {len(rows) - MAX_LISTED}")
    return lines


def comparison_text(comparison: CountComparison) -> str:
    summary = comparison.summary
    lines = [
        html.bold("⚖️ Харьцуулалт"),
        f"✅ {messages.status_text(CountStatus.MATCH)}: {summary.matched}",
        f"🔻 {messages.status_text(CountStatus.SHORT)}: {summary.short}",
        f"🔺 {messages.status_text(CountStatus.OVER)}: {summary.over}",
        f"Нийт зөрүү: {summary.delta_total}",
    ]
    lines += _section(messages.status_text(CountStatus.SHORT), comparison.by_status(CountStatus.SHORT))
    lines += _section(messages.status_text(CountStatus.OVER), comparison.by_status(CountStatus.OVER))

    if comparison.discrepancies:
        plan = adjustment_summary(comparison.items)
        lines.append("")
        lines.append(
            f"Засвар: +{plan.additions_total} ({plan.additions_count}), "
            f"-{plan.subtractions_total} ({plan.subtractions_count}), "
            f"цэвэр өөрчлөлт {plan.net_change}"
        )
    else:
        lines.append("\nЗөрүү алга.")
    return "\n".join(lines)


def progress_text(current: int, total: int) -> str:
    return f"⏳ Засвар хийж байна… {current}/{total}"


def report_text(report: AdjustmentReport) -> str:
    lines = [messages.adjustment_report_text(report)]
    for result in report.results:
        if not result.ok:
            label = result.sku or result.product_name or result.variant_id
            lines.append(f"❌ {html.quote(label)}: {html.quote(result.message or '')}")
    return "\n".join(lines)


def transfer_text(detail: TransferDetail, store_names: dict[str, str] | None = None) -> str:
    names = store_names or {}
    transfer = detail.transfer
    lines = [
        html.bold(f"🔁 Шилжүүлэг #{transfer.id[:8]}"),
        f"Төлөв: {status_label(transfer.status)}",
        f"Хаанаас: {html.quote(names.get(transfer.src_store_id, transfer.src_store_id))}",
        f"Хаашаа: {html.quote(names.get(transfer.dst_store_id, transfer.dst_store_id))}",
    ]
    if transfer.note:
        lines.append(f"Тэмдэглэл: {html.quote(transfer.note)}")
    if transfer.created_at:
        lines.append(f"Үүсгэсэн: {transfer.created_at:%Y-%m-%d %H:%M}")
    if detail.items:
        lines.append("")
        lines.extend(f"• {html.code(i.variant_id[:8])} × {i.qty}" for i in detail.items)
    return "\n".join(lines)
