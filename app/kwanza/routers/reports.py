from datetime import date

from fastapi import APIRouter, Depends, Query

from app.kwanza.core.context import RequestContext
from app.kwanza.core.deps import require_capability
from app.kwanza.db.session import get_db
from app.kwanza.domain.permissions import Capability
from app.kwanza.schemas.catalog import ProductResponse
from app.kwanza.schemas.errors import ERROR_RESPONSES
from app.kwanza.schemas.reports import LowStockResponse, SalesSummaryResponse
from app.kwanza.services.reports import ReportService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/api/reports/sales-summary", response_model=SalesSummaryResponse)
def sales_summary(
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.REPORTS)),
):
    summary = ReportService(db).sales_summary(date_from, date_to)
    return SalesSummaryResponse.from_summary(summary)


@router.get("/api/reports/low-stock", response_model=LowStockResponse)
def low_stock(
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.REPORTS)),
):
    products = ReportService(db).low_stock()
    return LowStockResponse(rows=[ProductResponse.from_domain(product) for product in products], total=len(products))
