"""Tests for checkout and returns."""

import pytest

from conftest import STORE_ID

from posbot.api.checkout import CheckoutApi, OrderLine, Payment, normalize_method
from posbot.api.returns import (
    Refund,
    RefundMethod,
    ReturnApi,
    ReturnLineInput,
    map_payment_method,
    map_return_reason,
)

ORDER = {
    "order": {"id": "o1", "store_id": STORE_ID, "status": "PAID", "total": 5000},
    "items": [{"id": "oi1", "variant_id": "v1", "quantity": 2, "unit_price": 2500}],
    "payments": [{"id": "p1", "method": "CASH", "amount": 5000}],
}


@pytest.mark.parametrize(
    "raw, expected",
    [("cash", "CASH"), (" Card ", "CARD"), ("bank transfer", "BANK"), ("", "CASH"), ("voucher", "VOUCHER")],
)
def test_normalize_method(raw, expected):
    assert normalize_method(raw) == expected


class TestCheckout:
    @pytest.mark.asyncio
    async def test_create_order_payload(self, fake_backend, edge_client, tenants):
        fake_backend.add("POST", "/functions/v1/checkout", ORDER)

        order = await CheckoutApi(edge_client, tenants).create_order(
            STORE_ID,
            [OrderLine(variant_id="v1", qty=2, price=2499.6)],
            [Payment(method="cash", amount=4999.2)],
            discount=0.4,
        )

        body = fake_backend.json_body(fake_backend.requests[0])
        assert body["items"] == [{"variant_id": "v1", "quantity": 2, "unit_price": 2500}]
        assert body["payments"] == [{"method": "CASH", "amount": 4999, "ref": None}]
        assert body["discount"] == 0
        assert order.order.total == 5000

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "store_id, lines, payments",
        [
            ("", [OrderLine("v1", 1, 10)], [Payment("cash", 10)]),
            (STORE_ID, [], [Payment("cash", 10)]),
            (STORE_ID, [OrderLine("v1", 1, 10)], []),
            (STORE_ID, [OrderLine("", 1, 10)], [Payment("cash", 10)]),
        ],
    )
    async def test_invalid_orders_make_no_call(
        self, fake_backend, edge_client, tenants, store_id, lines, payments
    ):
        with pytest.raises(ValueError):
            await CheckoutApi(edge_client, tenants).create_order(store_id, lines, payments)

        assert fake_backend.requests == []


@pytest.mark.parametrize(
    "method, expected",
    [("cash", RefundMethod.CASH), ("CARD", RefundMethod.CARD), ("qpay", RefundMethod.ORIGINAL)],
)
def test_map_payment_method(method, expected):
    assert map_payment_method(method) is expected


def test_map_return_reason():
    assert map_return_reason("damaged") == "Эвдэрсэн"
    assert map_return_reason("other", "Late delivery") == "Late delivery"
    assert map_return_reason("other") == "Бусад"


class TestReturns:
    @pytest.mark.asyncio
    async def test_create_return(self, fake_backend, edge_client, tenants):
        fake_backend.add(
            "POST",
            "/functions/v1/return",
            {
                "return": {"id": "r1", "order_id": "o1"},
                "items": [{"id": "ri1", "order_item_id": "oi1", "quantity": 1, "unit_refund": 2500}],
                "refunds": [{"id": "rf1", "method": "CASH", "amount": 2500}],
                "totals": {"refund": 2500},
            },
        )

        result = await ReturnApi(edge_client, tenants).create_return(
            "o1",
            [ReturnLineInput(quantity=1, order_item_id="oi1")],
            [Refund(RefundMethod.CASH, 2500)],
            note=map_return_reason("damaged"),
        )

        body = fake_backend.json_body(fake_backend.requests[0])
        assert body["items"] == [{"quantity": 1, "order_item_id": "oi1"}]
        assert body["refunds"] == [{"method": "CASH", "amount": 2500}]
        assert body["note"] == "Эвдэрсэн"
        assert result.return_.id == "r1"
        assert result.totals.refund == 2500

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "items",
        [[], [ReturnLineInput(quantity=0, order_item_id="oi1")], [ReturnLineInput(quantity=1)]],
    )
    async def test_invalid_returns(self, fake_backend, edge_client, tenants, items):
        with pytest.raises(ValueError):
            await ReturnApi(edge_client, tenants).create_return("o1", items, [])

        assert fake_backend.requests == []


class TestOrders:
    @pytest.mark.asyncio
    async def test_list_orders_params(self, fake_backend, edge_client, tenants):
        fake_backend.add(
            "GET", "/functions/v1/checkout", {"items": [ORDER["order"]], "count": 41, "limit": 20}
        )

        result = await CheckoutApi(edge_client, tenants).list_orders(STORE_ID, offset=20)

        params = fake_backend.requests[0].url.params
        assert params["tenant_id"] == "tenant-1"
        assert params["store_id"] == STORE_ID
        assert params["limit"] == "20"
        assert params["offset"] == "20"
        assert result.count == 41
        assert result.items[0].id == "o1"

    @pytest.mark.asyncio
    async def test_list_orders_without_store(self, fake_backend, edge_client, tenants):
        fake_backend.add("GET", "/functions/v1/checkout", {"items": [], "count": 0})

        await CheckoutApi(edge_client, tenants).list_orders()

        assert "store_id" not in fake_backend.requests[0].url.params

    @pytest.mark.asyncio
    async def test_get_order(self, fake_backend, edge_client, tenants):
        fake_backend.add("GET", "/functions/v1/checkout", ORDER)

        detail = await CheckoutApi(edge_client, tenants).get_order("o1")

        assert fake_backend.requests[0].url.params["id"] == "o1"
        assert detail.order.status == "PAID"
        assert detail.items[0].quantity == 2
        assert detail.payments[0].method == "CASH"
