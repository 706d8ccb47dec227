from fastapi import APIRouter, Depends, Query

from app.kwanza.core.context import RequestContext
from app.kwanza.core.deps import require_capability
from app.kwanza.db.session import get_db
from app.kwanza.domain.catalog import Category, Product
from app.kwanza.domain.permissions import Capability
from app.kwanza.repos.catalog import CategoryRepository, ProductRepository
from app.kwanza.schemas.catalog import (
    CategoryCreateRequest,
    CategoryResponse,
    CategoryUpdateRequest,
    ProductCreateRequest,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
    StockAdjustmentRequest,
)
from app.kwanza.schemas.errors import ERROR_RESPONSES
from app.kwanza.services.catalog import CatalogService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/api/categories", response_model=list[CategoryResponse])
def list_categories(
    include_inactive: bool = Query(default=False),
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.PRODUCT_LOOKUP)),
):
    categories = CategoryRepository(db).list_categories(active_only=not include_inactive)
    return [CategoryResponse.from_domain(category) for category in categories]


@router.post("/api/categories", response_model=CategoryResponse, status_code=201)
def create_category(
    payload: CategoryCreateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.PRODUCT_MANAGEMENT)),
):
    category = Category(
        name=payload.name,
        description=payload.description,
        color=payload.color,
        icon=payload.icon,
    )
    return CategoryResponse.from_domain(CatalogService(db).create_category(context, category))


@router.patch("/api/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    payload: CategoryUpdateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.PRODUCT_MANAGEMENT)),
):
    category = CatalogService(db).update_category(context, category_id, payload.model_dump(exclude_unset=True))
    return CategoryResponse.from_domain(category)


@router.get("/api/products", response_model=ProductListResponse)
def list_products(
    q: str | None = Query(default=None),
    category_id: int | None = Query(default=None),
    low_stock: bool = Query(default=False),
    include_inactive: bool = Query(default=False),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.PRODUCT_LOOKUP)),
):
    repo = ProductRepository(db)
    criteria = {"search": q, "category_id": category_id, "low_stock": low_stock, "active_only": not include_inactive}
    products = repo.list_products(**criteria, limit=limit, offset=offset)
    return ProductListResponse(
        rows=[ProductResponse.from_domain(product) for product in products],
        total=repo.count_products(**criteria),
    )


@router.get("/api/products/barcode/{barcode}", response_model=ProductResponse)
def get_product_by_barcode(
    barcode: str,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.PRODUCT_LOOKUP)),
):
    return ProductResponse.from_domain(CatalogService(db).get_product_by_barcode(barcode))


@router.get("/api/products/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.PRODUCT_LOOKUP)),
):
    product = CatalogService(db).get_product(product_id)
    return ProductResponse.from_domain(product, product.warnings())


@router.post("/api/products", response_model=ProductResponse, status_code=201)
def create_product(
    payload: ProductCreateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.PRODUCT_MANAGEMENT)),
):
    product = Product(**payload.model_dump())
    product, warnings = CatalogService(db).create_product(context, product)
    return ProductResponse.from_domain(product, warnings)


@router.patch("/api/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    payload: ProductUpdateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.PRODUCT_MANAGEMENT)),
):
    product, warnings = CatalogService(db).update_product(context, product_id, payload.model_dump(exclude_unset=True))
    return ProductResponse.from_domain(product, warnings)


@router.post("/api/products/{product_id}/stock", response_model=ProductResponse)
def adjust_stock(
    product_id: int,
    payload: StockAdjustmentRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.STOCK_CONTROL)),
):
    product = CatalogService(db).adjust_stock(
        context,
        product_id,
        payload.quantity_delta,
        reason=payload.reason,
        reference=payload.reference,
    )
    return ProductResponse.from_domain(product, product.warnings())
