from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.kwanza.domain.catalog import DEFAULT_CATEGORY_ICON, DEFAULT_MIN_STOCK, DEFAULT_UNIT, Category, Product

# Numeric(12, 2) and INTEGER columns
MONEY_DIGITS = 12
MAX_STOCK = 1_000_000_000


class CategoryCreateRequest(BaseModel):
    name: str
    description: str | None = None
    color: str | None = None
    icon: str | None = DEFAULT_CATEGORY_ICON


class CategoryUpdateRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    active: bool | None = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    color: str
    icon: str | None = None
    display_name: str
    active: bool

    @classmethod
    def from_domain(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.meta.id,
            name=category.name,
            description=category.description,
            color=category.color,
            icon=category.icon,
            display_name=category.display_name,
            active=category.meta.active,
        )


class ProductCreateRequest(BaseModel):
    name: str
    category_id: int
    purchase_price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    sale_price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    barcode: str | None = None
    current_stock: int = Field(default=0, ge=0, le=MAX_STOCK)
    min_stock: int = Field(default=DEFAULT_MIN_STOCK, ge=0, le=MAX_STOCK)
    unit: str = DEFAULT_UNIT
    notes: str | None = None


class ProductUpdateRequest(BaseModel):
    name: str | None = None
    category_id: int | None = None
    purchase_price: Decimal | None = Field(default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    sale_price: Decimal | None = Field(default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    barcode: str | None = None
    min_stock: int | None = Field(default=None, ge=0, le=MAX_STOCK)
    unit: str | None = None
    notes: str | None = None
    active: bool | None = None


class StockAdjustmentRequest(BaseModel):
    quantity_delta: int = Field(ge=-MAX_STOCK, le=MAX_STOCK)
    reason: str = "ADJUSTMENT"
    reference: str | None = Field(default=None, max_length=100)


class ProductResponse(BaseModel):
    id: int
    name: str
    barcode: str | None = None
    category_id: int
    category_name: str | None = None
    purchase_price: Decimal
    sale_price: Decimal
    current_stock: int
    min_stock: int
    unit: str
    notes: str | None = None
    active: bool
    is_low_stock: bool
    margin_percent: Decimal
    unit_profit: Decimal
    warnings: list[str] = []
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, product: Product, warnings: list[str] | None = None) -> "ProductResponse":
        return cls(
            id=product.meta.id,
            name=product.name,
            barcode=product.barcode,
            category_id=product.category_id,
            category_name=product.category_name,
            purchase_price=product.purchase_price,
            sale_price=product.sale_price,
            current_stock=product.current_stock,
            min_stock=product.min_stock,
            unit=product.unit,
            notes=product.notes,
            active=product.meta.active,
            is_low_stock=product.is_low_stock,
            margin_percent=product.margin_percent,
            unit_profit=product.unit_profit,
            warnings=list(warnings or []),
            created_at=product.meta.created_at,
            updated_at=product.meta.updated_at,
        )


class ProductListResponse(BaseModel):
    rows: list[ProductResponse]
    total: int
