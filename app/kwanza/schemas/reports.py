from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from app.kwanza.core.money import format_money
from app.kwanza.schemas.catalog import ProductResponse
from app.kwanza.services.reports import SalesSummary


class SalesSummaryResponse(BaseModel):
    date_from: date
    date_to: date
    sale_count: int
    cancelled_count: int
    items_sold: int
    gross_total: Decimal
    discount_total: Decimal
    net_total: Decimal
    net_total_display: str
    average_ticket: Decimal
    by_payment_method: dict[str, Decimal]

    @classmethod
    def from_summary(cls, summary: SalesSummary) -> "SalesSummaryResponse":
        return cls(
            date_from=summary.date_range.start_date,
            date_to=summary.date_range.end_date,
            sale_count=summary.sale_count,
            cancelled_count=summary.cancelled_count,
            items_sold=summary.items_sold,
            gross_total=summary.gross_total,
            discount_total=summary.discount_total,
            net_total=summary.net_total,
            net_total_display=format_money(summary.net_total),
            average_ticket=summary.average_ticket,
            by_payment_method=summary.by_payment_method,
        )


class LowStockResponse(BaseModel):
    rows: list[ProductResponse]
    total: int
