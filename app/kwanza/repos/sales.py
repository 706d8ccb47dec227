from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select

from app.kwanza.core.money import ZERO, round_money
from app.kwanza.db.models import Sale as SaleRow
from app.kwanza.db.models import SaleItem as SaleItemRow
from app.kwanza.domain.records import RecordMetadata
from app.kwanza.domain.sales import Sale, SaleLineItem, SaleStatus
from app.kwanza.repos.records import apply_meta, meta_from_row


@dataclass(frozen=True)
class SaleQueryFilters:
    status: str | None = None
    operator_id: int | None = None
    customer_id: int | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass(frozen=True)
class SalesTotals:
    sale_count: int
    gross_total: Decimal
    discount_total: Decimal
    net_total: Decimal
    items_sold: int


def _item_from_row(row: SaleItemRow) -> SaleLineItem:
    return SaleLineItem(
        product_id=row.product_id,
        quantity=row.quantity,
        unit_price=row.unit_price,
        discount=row.discount,
        product_name=row.product_name,
        barcode=row.barcode,
        unit=row.unit,
        meta=RecordMetadata(id=row.id, created_at=row.created_at, updated_at=row.updated_at),
    )


def sale_from_row(row: SaleRow) -> Sale:
    return Sale(
        operator_id=row.operator_id,
        customer_id=row.customer_id,
        sold_at=row.sold_at,
        payment_method=row.payment_method,
        status=SaleStatus(row.status),
        notes=row.notes,
        invoice_number=row.invoice_number,
        discount=row.discount,
        items=[_item_from_row(item) for item in row.items],
        meta=meta_from_row(row),
    )


def _apply_item(row: SaleItemRow, item: SaleLineItem, position: int) -> None:
    row.product_id = item.product_id
    row.position = position
    row.product_name = item.product_name
    row.barcode = item.barcode
    row.unit = item.unit
    row.quantity = item.quantity
    row.unit_price = item.unit_price
    row.discount = item.discount
    row.total = item.total
    row.created_at = item.meta.created_at
    row.updated_at = item.meta.updated_at


def _apply_filters(stmt, filters: SaleQueryFilters):
    if filters.status:
        stmt = stmt.where(SaleRow.status == filters.status.strip().upper())
    if filters.operator_id is not None:
        stmt = stmt.where(SaleRow.operator_id == filters.operator_id)
    if filters.customer_id is not None:
        stmt = stmt.where(SaleRow.customer_id == filters.customer_id)
    if filters.date_from is not None:
        stmt = stmt.where(SaleRow.sold_at >= filters.date_from)
    if filters.date_to is not None:
        stmt = stmt.where(SaleRow.sold_at <= filters.date_to)
    return stmt


class SaleRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, sale_id: int) -> Sale | None:
        row = self.db.get(SaleRow, sale_id)
        return sale_from_row(row) if row is not None else None

    def get_by_invoice_number(self, invoice_number: str) -> Sale | None:
        stmt = select(SaleRow).where(SaleRow.invoice_number == invoice_number.strip().upper())
        row = self.db.execute(stmt).scalars().first()
        return sale_from_row(row) if row is not None else None

    def list_sales(self, filters: SaleQueryFilters) -> list[Sale]:
        stmt = _apply_filters(select(SaleRow), filters).order_by(SaleRow.sold_at.desc(), SaleRow.id.desc())
        if filters.offset is not None:
            stmt = stmt.offset(filters.offset)
        if filters.limit is not None:
            stmt = stmt.limit(filters.limit)
        return [sale_from_row(row) for row in self.db.execute(stmt).scalars().all()]

    def count_sales(self, filters: SaleQueryFilters) -> int:
        return self.db.execute(_apply_filters(select(func.count(SaleRow.id)), filters)).scalar_one()

    def save(self, sale: Sale) -> Sale:
        """Write the aggregate back, inserting, updating and deleting lines to match."""
        row = self.db.get(SaleRow, sale.meta.id) if sale.meta.id else SaleRow()
        row.operator_id = sale.operator_id
        row.customer_id = sale.customer_id
        row.sold_at = sale.sold_at
        row.payment_method = sale.payment_method
        row.status = sale.status.value
        row.notes = sale.notes
        row.invoice_number = sale.invoice_number
        row.subtotal = sale.subtotal
        row.discount = sale.discount
        row.total = sale.total
        apply_meta(row, sale.meta)

        existing = {item_row.id: item_row for item_row in row.items}
        pending = []
        for position, item in enumerate(sale.items):
            item_row = existing.pop(item.meta.id, None) if item.meta.id else None
            if item_row is None:
                item_row = SaleItemRow()
                row.items.append(item_row)
                pending.append((item, item_row))
            _apply_item(item_row, item, position)
        for stale in existing.values():
            row.items.remove(stale)

        self.db.add(row)
        self.db.flush()
        sale.meta.id = row.id
        for item, item_row in pending:
            item.meta.id = item_row.id
        return sale

    def totals(self, filters: SaleQueryFilters) -> SalesTotals:
        stmt = _apply_filters(
            select(
                func.count(SaleRow.id),
                func.coalesce(func.sum(SaleRow.subtotal), 0),
                func.coalesce(func.sum(SaleRow.discount), 0),
                func.coalesce(func.sum(SaleRow.total), 0),
            ),
            filters,
        )
        count, gross, discount, net = self.db.execute(stmt).one()

        items_stmt = _apply_filters(
            select(func.coalesce(func.sum(SaleItemRow.quantity), 0)).join(SaleRow, SaleItemRow.sale_id == SaleRow.id),
            filters,
        )
        items_sold = self.db.execute(items_stmt).scalar_one()
        return SalesTotals(
            sale_count=int(count or 0),
            gross_total=round_money(gross or ZERO),
            discount_total=round_money(discount or ZERO),
            net_total=round_money(net or ZERO),
            items_sold=int(items_sold or 0),
        )

    def totals_by_payment_method(self, filters: SaleQueryFilters) -> dict[str, Decimal]:
        stmt = _apply_filters(
            select(SaleRow.payment_method, func.coalesce(func.sum(SaleRow.total), 0)).group_by(SaleRow.payment_method),
            filters,
        )
        return {
            (method or "UNKNOWN"): round_money(total or ZERO)
            for method, total in self.db.execute(stmt).all()
        }
