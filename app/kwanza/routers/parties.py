from fastapi import APIRouter, Depends, Query

from app.kwanza.core.context import RequestContext
from app.kwanza.core.deps import require_capability
from app.kwanza.db.session import get_db
from app.kwanza.domain.parties import Customer, Supplier
from app.kwanza.domain.permissions import Capability
from app.kwanza.schemas.errors import ERROR_RESPONSES
from app.kwanza.schemas.parties import (
    CustomerCreateRequest,
    CustomerResponse,
    CustomerUpdateRequest,
    SupplierCreateRequest,
    SupplierResponse,
    SupplierUpdateRequest,
)
from app.kwanza.services.parties import CustomerService, SupplierService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/api/customers", response_model=list[CustomerResponse])
def list_customers(
    q: str | None = Query(default=None),
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.CUSTOMER_LOOKUP)),
):
    return [CustomerResponse.from_domain(customer) for customer in CustomerService(db).list(search=q)]


@router.get("/api/customers/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.CUSTOMER_LOOKUP)),
):
    return CustomerResponse.from_domain(CustomerService(db).get(customer_id))


@router.post("/api/customers", response_model=CustomerResponse, status_code=201)
def create_customer(
    payload: CustomerCreateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.CUSTOMER_MANAGEMENT)),
):
    customer = CustomerService(db).create(context, Customer(**payload.model_dump()))
    return CustomerResponse.from_domain(customer)


@router.patch("/api/customers/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    payload: CustomerUpdateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.CUSTOMER_MANAGEMENT)),
):
    customer = CustomerService(db).update(context, customer_id, payload.model_dump(exclude_unset=True))
    return CustomerResponse.from_domain(customer)


@router.get("/api/suppliers", response_model=list[SupplierResponse])
def list_suppliers(
    q: str | None = Query(default=None),
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.SUPPLIER_MANAGEMENT)),
):
    return [SupplierResponse.from_domain(supplier) for supplier in SupplierService(db).list(search=q)]


@router.get("/api/suppliers/{supplier_id}", response_model=SupplierResponse)
def get_supplier(
    supplier_id: int,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.SUPPLIER_MANAGEMENT)),
):
    return SupplierResponse.from_domain(SupplierService(db).get(supplier_id))


@router.post("/api/suppliers", response_model=SupplierResponse, status_code=201)
def create_supplier(
    payload: SupplierCreateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.SUPPLIER_MANAGEMENT)),
):
    supplier = SupplierService(db).create(context, Supplier(**payload.model_dump()))
    return SupplierResponse.from_domain(supplier)


@router.patch("/api/suppliers/{supplier_id}", response_model=SupplierResponse)
def update_supplier(
    supplier_id: int,
    payload: SupplierUpdateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.SUPPLIER_MANAGEMENT)),
):
    supplier = SupplierService(db).update(context, supplier_id, payload.model_dump(exclude_unset=True))
    return SupplierResponse.from_domain(supplier)
