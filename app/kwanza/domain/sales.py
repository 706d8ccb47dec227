"""Sale aggregate and its line items.

A ``Sale`` keeps subtotal, discount and total consistent with its items. All
money is ``Decimal`` rounded to two places after every operation, so
recomputing any number of times never drifts. Mutators record ``SaleEvent``
values that callers drain with ``pull_events()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from app.kwanza.core.error_catalog import AppError, ErrorCatalog
from app.kwanza.core.money import HUNDRED, ZERO, format_money, percentage_of, round_money, to_decimal
from app.kwanza.domain.catalog import DEFAULT_UNIT, Product
from app.kwanza.domain.records import RecordMetadata, utcnow

DEFAULT_INVOICE_PREFIX = "FT"


class SaleStatus(str, Enum):
    PENDING = "PENDING"
    FINALIZED = "FINALIZED"
    CANCELLED = "CANCELLED"


SALE_STATUS_LABELS = {
    SaleStatus.PENDING: "Pendente",
    SaleStatus.FINALIZED: "Finalizada",
    SaleStatus.CANCELLED: "Cancelada",
}


@dataclass(frozen=True)
class SaleEvent:
    name: str
    sale_id: int | None
    payload: dict
    occurred_at: datetime = field(default_factory=utcnow)


def _discount_for(base: Decimal, amount, is_percentage: bool) -> Decimal | None:
    amount = to_decimal(amount)
    if amount < 0:
        return None
    if is_percentage:
        pct = min(amount, HUNDRED)
        return round_money(base * pct / HUNDRED)
    return round_money(min(amount, base))


@dataclass(eq=False)
class SaleLineItem:
    product_id: int | None
    quantity: int = 1
    unit_price: Decimal = ZERO
    discount: Decimal = ZERO
    product_name: str = ""
    barcode: str | None = None
    unit: str = DEFAULT_UNIT
    total: Decimal = ZERO
    meta: RecordMetadata = field(default_factory=RecordMetadata)

    def __post_init__(self):
        self.unit_price = round_money(self.unit_price)
        self.discount = round_money(self.discount)
        self.recompute_total()

    @classmethod
    def for_product(cls, product: Product, quantity: int = 1) -> SaleLineItem:
        return cls(
            product_id=product.meta.id,
            quantity=quantity,
            unit_price=product.sale_price,
            product_name=product.name,
            barcode=product.barcode,
            unit=product.unit,
        )

    @property
    def subtotal(self) -> Decimal:
        return round_money(self.unit_price * self.quantity)

    @property
    def discount_percent(self) -> Decimal:
        return percentage_of(self.discount, self.subtotal)

    @property
    def description(self) -> str:
        text = f"{self.product_name} - {self.quantity} {self.unit}"
        if self.barcode:
            text += f" ({self.barcode})"
        return text

    def recompute_total(self) -> None:
        subtotal = self.subtotal
        if self.discount > subtotal:
            self.discount = subtotal
        self.total = round_money(subtotal - self.discount)

    def set_quantity(self, quantity: int) -> None:
        self.quantity = quantity
        self.recompute_total()
        self.meta.touch()

    def set_unit_price(self, unit_price) -> None:
        self.unit_price = round_money(unit_price)
        self.recompute_total()
        self.meta.touch()

    def apply_discount(self, amount, is_percentage: bool = False) -> None:
        discount = _discount_for(self.subtotal, amount, is_percentage)
        if discount is None:
            return
        self.discount = discount
        self.recompute_total()
        self.meta.touch()

    def add_quantity(self, quantity: int) -> None:
        if quantity <= 0:
            return
        self.quantity += quantity
        self.recompute_total()
        self.meta.touch()

    def remove_quantity(self, quantity: int) -> bool:
        if quantity <= 0 or self.quantity <= quantity:
            return False
        self.quantity -= quantity
        self.recompute_total()
        self.meta.touch()
        return True

    def copy(self) -> SaleLineItem:
        return SaleLineItem(
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount=self.discount,
            product_name=self.product_name,
            barcode=self.barcode,
            unit=self.unit,
        )

    def validate(self) -> list[str]:
        errors = []
        if not self.product_id:
            errors.append("Product is required")
        if self.quantity <= 0:
            errors.append("Quantity must be greater than zero")
        if self.unit_price <= 0:
            errors.append("Unit price must be greater than zero")
        if self.discount < 0:
            errors.append("Discount cannot be negative")
        if self.total < 0:
            errors.append("Item total cannot be negative")
        if self.discount > self.subtotal:
            errors.append("Discount cannot exceed the item subtotal")
        return errors

    def __str__(self) -> str:
        return f"{self.product_name} - Qty: {self.quantity} - Total: {format_money(self.total)}"


@dataclass(eq=False)
class Sale:
    operator_id: int | None
    customer_id: int | None = None
    sold_at: datetime = field(default_factory=utcnow)
    payment_method: str | None = None
    status: SaleStatus = SaleStatus.PENDING
    notes: str | None = None
    invoice_number: str | None = None
    subtotal: Decimal = ZERO
    discount: Decimal = ZERO
    total: Decimal = ZERO
    items: list[SaleLineItem] = field(default_factory=list)
    meta: RecordMetadata = field(default_factory=RecordMetadata)
    _events: list[SaleEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        self.status = SaleStatus(self.status)
        self.discount = round_money(self.discount)
        if self.invoice_number:
            self.invoice_number = self.invoice_number.strip().upper()
        if self.payment_method:
            self.payment_method = self.payment_method.strip()
        self.recompute_totals()

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def discount_percent(self) -> Decimal:
        if self.subtotal <= 0:
            return ZERO
        return percentage_of(self.discount, self.subtotal)

    @property
    def status_label(self) -> str:
        return SALE_STATUS_LABELS[self.status]

    @property
    def is_pending(self) -> bool:
        return self.status == SaleStatus.PENDING

    def _record(self, name: str, **payload) -> None:
        self._events.append(SaleEvent(name=name, sale_id=self.meta.id, payload=payload))

    def pull_events(self) -> list[SaleEvent]:
        events, self._events = self._events, []
        return events

    def find_item(self, product_id: int) -> SaleLineItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def add_item(self, item: SaleLineItem) -> SaleLineItem:
        """Add a line, merging into an existing line for the same product.

        Returns the line that now holds the quantity.
        """
        existing = self.find_item(item.product_id)
        if existing is not None:
            existing.quantity += item.quantity
            existing.recompute_total()
            existing.meta.touch()
            target = existing
        else:
            self.items.append(item)
            target = item
        self.recompute_totals()
        self.meta.touch()
        self._record("sale.item_added", product_id=item.product_id, quantity=item.quantity)
        return target

    def remove_item(self, item: SaleLineItem) -> None:
        for index, existing in enumerate(self.items):
            if existing is item:
                del self.items[index]
                break
        else:
            return
        self.recompute_totals()
        self.meta.touch()
        self._record("sale.item_removed", product_id=item.product_id, quantity=item.quantity)

    def recompute_totals(self) -> None:
        self.subtotal = round_money(sum((item.total for item in self.items), ZERO))
        if self.discount > self.subtotal:
            self.discount = self.subtotal
        self.total = round_money(self.subtotal - self.discount)

    def apply_discount(self, amount, is_percentage: bool = False) -> None:
        discount = _discount_for(self.subtotal, amount, is_percentage)
        if discount is None:
            return
        self.discount = discount
        self.recompute_totals()
        self.meta.touch()
        self._record("sale.discount_applied", discount=self.discount, is_percentage=is_percentage)

    def set_payment_method(self, payment_method: str | None) -> None:
        self.payment_method = (payment_method or "").strip() or None
        self.meta.touch()

    def set_customer(self, customer_id: int | None) -> None:
        self.customer_id = customer_id
        self.meta.touch()

    def set_notes(self, notes: str | None) -> None:
        self.notes = (notes or "").strip() or None
        self.meta.touch()

    def build_invoice_number(self, now: datetime | None = None, prefix: str = DEFAULT_INVOICE_PREFIX) -> str:
        now = now or utcnow()
        return f"{prefix}{now:%Y%m%d}{self.meta.id or 0:06d}".upper()

    def finalize(self, now: datetime | None = None, prefix: str = DEFAULT_INVOICE_PREFIX) -> None:
        if not self.items:
            raise AppError(ErrorCatalog.SALE_HAS_NO_ITEMS)
        if not self.payment_method or not self.payment_method.strip():
            raise AppError(ErrorCatalog.PAYMENT_METHOD_REQUIRED)
        self.status = SaleStatus.FINALIZED
        if not self.invoice_number:
            self.invoice_number = self.build_invoice_number(now, prefix)
        self.meta.touch()
        self._record("sale.finalized", invoice_number=self.invoice_number, total=self.total)

    def cancel(self, reason: str | None = None) -> None:
        previous = self.status
        self.status = SaleStatus.CANCELLED
        if reason and reason.strip():
            line = f"Cancelled: {reason.strip()}"
            self.notes = f"{self.notes}\n{line}" if self.notes else line
        self.meta.touch()
        self._record("sale.cancelled", previous_status=previous.value, reason=reason)

    def validate(self) -> list[str]:
        errors = []
        if not self.operator_id:
            errors.append("Operator is required")
        if not self.payment_method:
            errors.append("Payment method is required")
        elif len(self.payment_method) > 50:
            errors.append("Payment method must be at most 50 characters")
        if self.subtotal < 0:
            errors.append("Subtotal cannot be negative")
        if self.discount < 0:
            errors.append("Discount cannot be negative")
        if self.total < 0:
            errors.append("Total cannot be negative")
        if self.discount > self.subtotal:
            errors.append("Discount cannot exceed the subtotal")
        if self.notes and len(self.notes) > 500:
            errors.append("Notes must be at most 500 characters")
        if not self.items:
            errors.append("Sale must have at least one item")
        for item in self.items:
            errors.extend(f"Item {item.product_name}: {error}" for error in item.validate())
        return errors

    def __str__(self) -> str:
        return f"Sale #{self.meta.id} - {self.sold_at:%d/%m/%Y %H:%M} - {format_money(self.total)}"
