from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from app.kwanza.core.error_catalog import AppError, ErrorCatalog
from app.kwanza.core.money import ZERO, round_money
from app.kwanza.domain.catalog import Product
from app.kwanza.domain.records import utcnow
from app.kwanza.domain.sales import SaleStatus
from app.kwanza.repos.catalog import ProductRepository
from app.kwanza.repos.sales import SaleQueryFilters, SaleRepository


@dataclass(frozen=True)
class ReportDateRange:
    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()


@dataclass(frozen=True)
class SalesSummary:
    date_range: ReportDateRange
    sale_count: int
    cancelled_count: int
    items_sold: int
    gross_total: Decimal
    discount_total: Decimal
    net_total: Decimal
    average_ticket: Decimal
    by_payment_method: dict[str, Decimal]


def resolve_date_range(date_from: date | None, date_to: date | None) -> ReportDateRange:
    """Whole days; defaults to today."""
    today = utcnow().date()
    start_day = date_from or today
    end_day = date_to or today
    if end_day < start_day:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"errors": ["date_to must not be before date_from"]})
    start = datetime.combine(start_day, time.min)
    end = datetime.combine(end_day + timedelta(days=1), time.min) - timedelta(microseconds=1)
    return ReportDateRange(start=start, end=end)


class ReportService:
    def __init__(self, db):
        self.sales = SaleRepository(db)
        self.products = ProductRepository(db)

    def sales_summary(self, date_from: date | None = None, date_to: date | None = None) -> SalesSummary:
        date_range = resolve_date_range(date_from, date_to)
        finalized = SaleQueryFilters(
            status=SaleStatus.FINALIZED.value,
            date_from=date_range.start,
            date_to=date_range.end,
        )
        cancelled = SaleQueryFilters(
            status=SaleStatus.CANCELLED.value,
            date_from=date_range.start,
            date_to=date_range.end,
        )
        totals = self.sales.totals(finalized)
        average = round_money(totals.net_total / totals.sale_count) if totals.sale_count else ZERO
        return SalesSummary(
            date_range=date_range,
            sale_count=totals.sale_count,
            cancelled_count=self.sales.totals(cancelled).sale_count,
            items_sold=totals.items_sold,
            gross_total=totals.gross_total,
            discount_total=totals.discount_total,
            net_total=totals.net_total,
            average_ticket=average,
            by_payment_method=self.sales.totals_by_payment_method(finalized),
        )

    def low_stock(self) -> list[Product]:
        return self.products.list_products(low_stock=True)
