"""Response schemas of the edge functions.

Every response body is validated here once; call sites only ever see these
models.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from posbot.models import CountStatus, InventoryReason


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _Frozen(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Page(_Schema):
    """Common pagination envelope."""

    count: int = 0
    limit: int | None = None
    offset: int | None = None


# ---------------------------------------------------------------------------
# Count
# ---------------------------------------------------------------------------


class SystemCountItem(_Frozen):
    variant_id: str
    sku: str | None = None
    variant_name: str | None = None
    product_id: str | None = None
    product_name: str | None = None
    system_qty: int = 0


class SystemCountPage(Page):
    items: list[SystemCountItem] = Field(default_factory=list)


class ComparisonResult(_Frozen):
    """One classified row returned by the comparator."""

    variant_id: str
    sku: str | None = None
    variant_name: str | None = None
    product_id: str | None = None
    product_name: str | None = None
    system_qty: int
    physical_qty: int
    delta: int
    status: CountStatus


class ComparisonSummary(_Frozen):
    matched: int = 0
    short: int = 0
    over: int = 0
    delta_total: int = 0


class ComparisonResponse(_Schema):
    summary: ComparisonSummary
    items: list[ComparisonResult] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


class InventoryMovement(_Schema):
    id: str
    tenant_id: str | None = None
    store_id: str
    variant_id: str
    delta: int
    reason: InventoryReason
    created_at: datetime | None = None


class AdjustResponse(_Schema):
    movement: InventoryMovement | None = None


# ---------------------------------------------------------------------------
# Tenant / stores
# ---------------------------------------------------------------------------


class Tenant(_Schema):
    id: str
    name: str | None = None


class TenantList(_Schema):
    items: list[Tenant] = Field(default_factory=list)


class Store(_Schema):
    id: str
    name: str


class StoreList(_Schema):
    items: list[Store] = Field(default_factory=list)


class StoreCreated(_Schema):
    store: Store


# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------


class TransferStatus(str, Enum):
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    SHIPPED = "SHIPPED"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


class TransferAction(str, Enum):
    APPROVE = "approve"
    SHIP = "ship"
    RECEIVE = "receive"
    CANCEL = "cancel"


class TransferItem(_Schema):
    id: str | None = None
    variant_id: str
    qty: int


class Transfer(_Schema):
    id: str
    tenant_id: str | None = None
    src_store_id: str
    dst_store_id: str
    status: TransferStatus
    note: str | None = None
    created_by: str | None = None
    approved_by: str | None = None
    shipped_by: str | None = None
    received_by: str | None = None
    created_at: datetime | None = None
    approved_at: datetime | None = None
    shipped_at: datetime | None = None
    received_at: datetime | None = None


class TransferList(Page):
    items: list[Transfer] = Field(default_factory=list)


class TransferDetail(_Schema):
    transfer: Transfer
    items: list[TransferItem] = Field(default_factory=list)


class TransferCreated(_Schema):
    transfer: Transfer


class TransferStatusUpdate(_Schema):
    ok: bool
    status: TransferStatus


class TransferDeleted(_Schema):
    removed: bool


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


class CheckoutOrder(_Schema):
    id: str
    order_no: str | None = None
    tenant_id: str | None = None
    store_id: str
    status: str
    cashier_id: str | None = None
    subtotal: float = 0
    discount: float = 0
    tax: float = 0
    total: float = 0
    created_at: datetime | None = None


class CheckoutOrderItem(_Schema):
    id: str
    variant_id: str
    quantity: int
    unit_price: float
    discount: float = 0


class CheckoutPayment(_Schema):
    id: str
    method: str
    amount: float
    paid_at: datetime | None = None


class CheckoutOrderDetail(_Schema):
    order: CheckoutOrder
    items: list[CheckoutOrderItem] = Field(default_factory=list)
    payments: list[CheckoutPayment] = Field(default_factory=list)


class CheckoutOrderList(Page):
    items: list[CheckoutOrder] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Returns
# ---------------------------------------------------------------------------


class ReturnRecord(_Schema):
    id: str
    tenant_id: str | None = None
    order_id: str
    store_id: str | None = None
    created_by: str | None = None
    note: str | None = None
    created_at: datetime | None = None


class ReturnLine(_Schema):
    id: str
    order_item_id: str | None = None
    variant_id: str | None = None
    quantity: int
    unit_refund: float = 0


class ReturnRefund(_Schema):
    id: str
    method: str
    amount: float
    refunded_at: datetime | None = None


class ReturnTotals(_Schema):
    refund: float = 0


class ReturnDetail(_Schema):
    return_: ReturnRecord = Field(alias="return")
    items: list[ReturnLine] = Field(default_factory=list)
    refunds: list[ReturnRefund] = Field(default_factory=list)
    totals: ReturnTotals | None = None


class ReturnList(Page):
    items: list[ReturnRecord] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------


class DraftItem(_Schema):
    variant_id: str
    quantity: int
    unit_price: float
    product_name: str
    variant_name: str | None = None


class Draft(_Schema):
    id: str
    name: str
    notes: str | None = None
    items: list[DraftItem] = Field(default_factory=list)
    total_amount: float = 0
    total_quantity: int = 0
    store_id: str
    tenant_id: str | None = None
    created_at: datetime | None = None
    created_by: str | None = None


class DraftList(_Schema):
    drafts: list[Draft] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class SignedUrl(_Schema):
    signed_url: str = Field(alias="signedURL")


class AuthToken(_Schema):
    access_token: str
    refresh_token: str | None = None
    expires_in: int = 3600
    token_type: str = "bearer"


def error_message(body: Any) -> str | None:
    """Extract the server's error text from a JSON error body."""
    if isinstance(body, dict):
        for key in ("error", "message", "msg", "error_description"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None
