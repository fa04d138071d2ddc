"""Tests for physical count entry."""

import pytest

from posbot.count import CountEntryStore
from posbot.models import CountableItem, clamp_quantity


@pytest.fixture
def store():
    return CountEntryStore(
        [
            CountableItem(variant_id="v1", product_name="Milk", system_qty=10, sku="MLK"),
            CountableItem(variant_id="v2", product_name="Bread", system_qty=4, sku="BRD"),
            CountableItem(variant_id="v3", product_name="Tea", system_qty=0),
        ]
    )


class TestUpdateQuantity:
    def test_replaces_only_the_edited_row(self, store):
        before = store.items

        after = store.update_quantity("v2", 7)

        assert after[1].physical_qty == 7
        assert after[0] is before[0]
        assert after[2] is before[2]
        assert before[1].physical_qty == 0
        assert [i.variant_id for i in after] == ["v1", "v2", "v3"]

    def test_negative_is_clamped_to_zero(self, store):
        store.update_quantity("v1", -5)

        assert store.get("v1").physical_qty == 0

    def test_ceiling(self, store):
        store.update_quantity("v1", 50, ceiling=12)

        assert store.get("v1").physical_qty == 12

    def test_unknown_id_changes_nothing(self, store):
        before = store.items

        store.update_quantity("missing", 3)

        assert store.items == before

    @pytest.mark.parametrize(
        "qty, ceiling, expected",
        [(3, None, 3), (-1, None, 0), (2.7, None, 2), (9, 5, 5), (4, -2, 0)],
    )
    def test_clamp_quantity(self, qty, ceiling, expected):
        assert clamp_quantity(qty, ceiling) == expected


class TestRows:
    def test_count_pairs_include_zero_counts(self, store):
        store.update_quantity("v1", 8)

        assert store.count_pairs() == [("v1", 8), ("v2", 0), ("v3", 0)]

    def test_append_keeps_existing_counts(self, store):
        store.update_quantity("v1", 8)

        store.append(
            [
                CountableItem(variant_id="v1", product_name="Milk", system_qty=10),
                CountableItem(variant_id="v4", product_name="Salt", system_qty=3),
            ]
        )

        assert [i.variant_id for i in store.items] == ["v1", "v2", "v3", "v4"]
        assert store.get("v1").physical_qty == 8

    def test_summary(self, store):
        store.update_quantity("v1", 8)
        store.update_quantity("v2", 2)

        summary = store.summary()

        assert summary.items_counted == 2
        assert summary.total_quantity == 10

    def test_reset_counts_and_clear(self, store):
        store.update_quantity("v1", 8)

        store.reset_counts()
        assert all(i.physical_qty == 0 for i in store.items)

        store.clear()
        assert len(store) == 0
        assert not store


def test_display_name_includes_variant():
    item = CountableItem(variant_id="v1", product_name="Shirt", system_qty=1, variant_name="XL")

    assert item.display_name() == "Shirt (XL)"
