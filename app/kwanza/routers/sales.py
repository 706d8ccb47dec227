from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, Depends, Query

from app.kwanza.core.config import Settings
from app.kwanza.core.context import RequestContext
from app.kwanza.core.deps import get_metrics, get_settings, require_capability
from app.kwanza.core.metrics import Metrics
from app.kwanza.db.session import get_db
from app.kwanza.domain.permissions import Capability
from app.kwanza.repos.sales import SaleQueryFilters
from app.kwanza.schemas.errors import ERROR_RESPONSES
from app.kwanza.schemas.sales import (
    DiscountRequest,
    SaleActionRequest,
    SaleCreateRequest,
    SaleItemCreateRequest,
    SaleItemUpdateRequest,
    SaleListResponse,
    SaleResponse,
    SaleUpdateRequest,
)
from app.kwanza.services.sales import SaleService

router = APIRouter(responses=ERROR_RESPONSES)


def _day_start(value: date | None) -> datetime | None:
    return datetime.combine(value, time.min) if value else None


def _day_end(value: date | None) -> datetime | None:
    if value is None:
        return None
    return datetime.combine(value + timedelta(days=1), time.min) - timedelta(microseconds=1)


@router.get("/api/sales", response_model=SaleListResponse)
def list_sales(
    status: str | None = Query(default=None),
    customer_id: int | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    filters = SaleQueryFilters(
        status=status,
        customer_id=customer_id,
        date_from=_day_start(date_from),
        date_to=_day_end(date_to),
        limit=limit,
        offset=offset,
    )
    service = SaleService(db, settings)
    sales = service.list(filters)
    return SaleListResponse(rows=[SaleResponse.from_domain(sale) for sale in sales], total=service.count(filters))


@router.post("/api/sales", response_model=SaleResponse, status_code=201)
def create_sale(
    payload: SaleCreateRequest,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    sale = SaleService(db, settings).create_sale(
        context,
        customer_id=payload.customer_id,
        payment_method=payload.payment_method,
        notes=payload.notes,
    )
    return SaleResponse.from_domain(sale)


@router.get("/api/sales/invoice/{invoice_number}", response_model=SaleResponse)
def get_sale_by_invoice(
    invoice_number: str,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    return SaleResponse.from_domain(SaleService(db, settings).get_by_invoice(invoice_number))


@router.get("/api/sales/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    return SaleResponse.from_domain(SaleService(db, settings).get(sale_id))


@router.patch("/api/sales/{sale_id}", response_model=SaleResponse)
def update_sale(
    sale_id: int,
    payload: SaleUpdateRequest,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    sale = SaleService(db, settings).update_sale(context, sale_id, payload.model_dump(exclude_unset=True))
    return SaleResponse.from_domain(sale)


@router.post("/api/sales/{sale_id}/items", response_model=SaleResponse)
def add_sale_item(
    sale_id: int,
    payload: SaleItemCreateRequest,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    sale = SaleService(db, settings).add_item(context, sale_id, payload.product_id, payload.quantity)
    return SaleResponse.from_domain(sale)


@router.patch("/api/sales/{sale_id}/items/{item_id}", response_model=SaleResponse)
def update_sale_item(
    sale_id: int,
    item_id: int,
    payload: SaleItemUpdateRequest,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    sale = SaleService(db, settings).update_item(
        context,
        sale_id,
        item_id,
        quantity=payload.quantity,
        discount=payload.discount,
        discount_is_percentage=payload.is_percentage,
    )
    return SaleResponse.from_domain(sale)


@router.delete("/api/sales/{sale_id}/items/{item_id}", response_model=SaleResponse)
def remove_sale_item(
    sale_id: int,
    item_id: int,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    return SaleResponse.from_domain(SaleService(db, settings).remove_item(context, sale_id, item_id))


@router.post("/api/sales/{sale_id}/discount", response_model=SaleResponse)
def apply_sale_discount(
    sale_id: int,
    payload: DiscountRequest,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    sale = SaleService(db, settings).apply_discount(context, sale_id, payload.amount, payload.is_percentage)
    return SaleResponse.from_domain(sale)


@router.post("/api/sales/{sale_id}/actions", response_model=SaleResponse)
def sale_action(
    sale_id: int,
    payload: SaleActionRequest,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
    metrics: Metrics = Depends(get_metrics),
    context: RequestContext = Depends(require_capability(Capability.SALES)),
):
    service = SaleService(db, settings)
    if payload.action == "finalize":
        sale = service.finalize(context, sale_id, payment_method=payload.payment_method)
        metrics.record_sale_finalized(sale.payment_method, sale.total)
    else:
        sale = service.cancel(context, sale_id, reason=payload.reason)
    return SaleResponse.from_domain(sale)
