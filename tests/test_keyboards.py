"""Tests for keyboards and screen texts."""

from posbot.api.schemas import ComparisonResponse, Transfer, TransferAction, TransferStatus
from posbot.count import CountComparison
from posbot.formatting import comparison_text, progress_text, report_text
from posbot.keyboards import (
    comparison_keyboard,
    count_list_keyboard,
    count_view_pages,
    transfer_actions_keyboard,
    transfers_keyboard,
)
from posbot.models import AdjustmentReport, AdjustmentResult, AdjustmentStatus, CountableItem

from conftest import comparison_row


def items(n):
    return [CountableItem(variant_id=f"v{i}", product_name=f"Item {i}", system_qty=i) for i in range(n)]


def callbacks(markup):
    return [button.callback_data for row in markup.inline_keyboard for button in row]


class TestCountListKeyboard:
    def test_one_button_per_row_on_screen(self):
        markup = count_list_keyboard(items(25), view=1, has_more=False)

        data = callbacks(markup)
        assert [d for d in data if d.startswith("count_item_")] == [f"count_item_v{i}" for i in range(10, 20)]
        assert "count_view_0" in data
        assert "count_view_2" in data

    def test_load_more_on_last_screen(self):
        data = callbacks(count_list_keyboard(items(12), view=1, has_more=True))

        assert "count_more" in data
        assert "count_view_2" not in data

    def test_no_load_more_when_everything_is_loaded(self):
        assert "count_more" not in callbacks(count_list_keyboard(items(5), view=0, has_more=False))

    def test_callback_data_fits_telegram_limit(self):
        uuid = "0f8fad5b-d9cb-469f-a165-70867728950e"
        row = CountableItem(variant_id=uuid, product_name="x" * 200, system_qty=1)

        markup = count_list_keyboard([row], view=0, has_more=False)

        assert all(len(d.encode()) <= 64 for d in callbacks(markup))

    def test_view_pages(self):
        assert count_view_pages(0) == 1
        assert count_view_pages(10) == 1
        assert count_view_pages(11) == 2


def test_comparison_keyboard_hides_apply_without_discrepancies():
    assert "count_apply" in callbacks(comparison_keyboard(True))
    assert "count_apply" not in callbacks(comparison_keyboard(False))


def test_transfer_keyboards():
    transfer = Transfer(id="tr-1", src_store_id="a", dst_store_id="b", status=TransferStatus.APPROVED)

    assert callbacks(transfers_keyboard([transfer])) == ["transfer_open_tr-1"]
    assert callbacks(
        transfer_actions_keyboard("tr-1", [TransferAction.SHIP, TransferAction.CANCEL])
    ) == ["transfer_act_ship_tr-1", "transfer_act_cancel_tr-1", "transfer_list"]


def test_comparison_text_groups_by_status():
    response = ComparisonResponse(
        summary={"matched": 1, "short": 1, "over": 1, "delta_total": -1},
        items=[comparison_row("v1", 10, 7), comparison_row("v2", 2, 2), comparison_row("v3", 1, 3)],
    )

    text = comparison_text(CountComparison(items=tuple(response.items), summary=response.summary))

    assert "Дутуу (1)" in text
    assert "Илүү (1)" in text
    assert "10 → 7 (-3)" in text
    assert "1 → 3 (+2)" in text


def test_progress_and_report_text():
    report = AdjustmentReport(
        results=[
            AdjustmentResult(variant_id="v1", delta=-3, status=AdjustmentStatus.SUCCESS),
            AdjustmentResult(
                variant_id="v2", delta=1, status=AdjustmentStatus.ERROR, sku="SKU-2", message="locked"
            ),
        ]
    )

    assert progress_text(2, 5).endswith("2/5")
    text = report_text(report)
    assert "1 амжилттай, 1 алдаатай" in text
    assert "SKU-2: locked" in text
