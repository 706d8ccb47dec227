from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from app.kwanza.core.money import format_money
from app.kwanza.domain.sales import Sale, SaleLineItem, SaleStatus
from app.kwanza.schemas.catalog import MAX_STOCK, MONEY_DIGITS


class SaleCreateRequest(BaseModel):
    customer_id: int | None = None
    payment_method: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=500)


class SaleUpdateRequest(BaseModel):
    customer_id: int | None = None
    payment_method: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=500)


class SaleItemCreateRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, gt=0, le=MAX_STOCK)


class SaleItemUpdateRequest(BaseModel):
    quantity: int | None = Field(default=None, gt=0, le=MAX_STOCK)
    discount: Decimal | None = Field(default=None, max_digits=MONEY_DIGITS)
    is_percentage: bool = False


class DiscountRequest(BaseModel):
    amount: Decimal = Field(max_digits=MONEY_DIGITS)
    is_percentage: bool = False


class SaleActionRequest(BaseModel):
    action: Literal["finalize", "cancel"]
    payment_method: str | None = Field(default=None, max_length=50)
    reason: str | None = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def strip_text(self):
        if self.payment_method is not None:
            self.payment_method = self.payment_method.strip() or None
        return self


class SaleItemResponse(BaseModel):
    id: int | None
    product_id: int
    product_name: str
    barcode: str | None = None
    unit: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    description: str

    @classmethod
    def from_domain(cls, item: SaleLineItem) -> SaleItemResponse:
        return cls(
            id=item.meta.id,
            product_id=item.product_id,
            product_name=item.product_name,
            barcode=item.barcode,
            unit=item.unit,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
            discount=item.discount,
            total=item.total,
            description=item.description,
        )


class SaleResponse(BaseModel):
    id: int
    operator_id: int
    customer_id: int | None = None
    sold_at: datetime
    status: SaleStatus
    status_label: str
    payment_method: str | None = None
    invoice_number: str | None = None
    notes: str | None = None
    subtotal: Decimal
    discount: Decimal
    discount_percent: Decimal
    total: Decimal
    total_display: str
    item_count: int
    items: list[SaleItemResponse]

    @classmethod
    def from_domain(cls, sale: Sale) -> SaleResponse:
        return cls(
            id=sale.meta.id,
            operator_id=sale.operator_id,
            customer_id=sale.customer_id,
            sold_at=sale.sold_at,
            status=sale.status,
            status_label=sale.status_label,
            payment_method=sale.payment_method,
            invoice_number=sale.invoice_number,
            notes=sale.notes,
            subtotal=sale.subtotal,
            discount=sale.discount,
            discount_percent=sale.discount_percent,
            total=sale.total,
            total_display=format_money(sale.total),
            item_count=sale.item_count,
            items=[SaleItemResponse.from_domain(item) for item in sale.items],
        )


class SaleListResponse(BaseModel):
    rows: list[SaleResponse]
    total: int
