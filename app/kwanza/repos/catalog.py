from sqlalchemy import func, or_, select

from app.kwanza.db.models import Category as CategoryRow
from app.kwanza.db.models import Product as ProductRow
from app.kwanza.domain.catalog import Category, Product
from app.kwanza.repos.records import apply_meta, meta_from_row


def category_from_row(row: CategoryRow) -> Category:
    return Category(
        name=row.name,
        description=row.description,
        color=row.color,
        icon=row.icon,
        meta=meta_from_row(row),
    )


def product_from_row(row: ProductRow) -> Product:
    return Product(
        name=row.name,
        category_id=row.category_id,
        purchase_price=row.purchase_price,
        sale_price=row.sale_price,
        barcode=row.barcode,
        current_stock=row.current_stock,
        min_stock=row.min_stock,
        unit=row.unit,
        notes=row.notes,
        category_name=row.category.name if row.category is not None else None,
        meta=meta_from_row(row),
    )


class CategoryRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, category_id: int) -> Category | None:
        row = self.db.get(CategoryRow, category_id)
        return category_from_row(row) if row is not None else None

    def get_by_name(self, name: str) -> Category | None:
        stmt = select(CategoryRow).where(func.lower(CategoryRow.name) == name.strip().lower())
        row = self.db.execute(stmt).scalars().first()
        return category_from_row(row) if row is not None else None

    def list_categories(self, *, active_only: bool = True) -> list[Category]:
        stmt = select(CategoryRow)
        if active_only:
            stmt = stmt.where(CategoryRow.active.is_(True))
        rows = self.db.execute(stmt.order_by(CategoryRow.name)).scalars().all()
        return [category_from_row(row) for row in rows]

    def save(self, category: Category) -> Category:
        row = self.db.get(CategoryRow, category.meta.id) if category.meta.id else CategoryRow()
        row.name = category.name
        row.description = category.description
        row.color = category.color
        row.icon = category.icon
        apply_meta(row, category.meta)
        self.db.add(row)
        self.db.flush()
        category.meta.id = row.id
        return category


def _filter_products(stmt, search: str | None, category_id: int | None, low_stock: bool, active_only: bool):
    if active_only:
        stmt = stmt.where(ProductRow.active.is_(True))
    if category_id is not None:
        stmt = stmt.where(ProductRow.category_id == category_id)
    if low_stock:
        stmt = stmt.where(ProductRow.current_stock <= ProductRow.min_stock)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(ProductRow.name.ilike(pattern), ProductRow.barcode.ilike(pattern)))
    return stmt


class ProductRepository:
    def __init__(self, db):
        self.db = db

    def _get_row(self, product_id: int) -> ProductRow | None:
        return self.db.get(ProductRow, product_id)

    def get_by_id(self, product_id: int) -> Product | None:
        row = self._get_row(product_id)
        return product_from_row(row) if row is not None else None

    def get_by_barcode(self, barcode: str) -> Product | None:
        stmt = select(ProductRow).where(ProductRow.barcode == barcode.strip())
        row = self.db.execute(stmt).scalars().first()
        return product_from_row(row) if row is not None else None

    def list_products(
        self,
        *,
        search: str | None = None,
        category_id: int | None = None,
        low_stock: bool = False,
        active_only: bool = True,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Product]:
        stmt = _filter_products(select(ProductRow), search, category_id, low_stock, active_only)
        stmt = stmt.order_by(ProductRow.name)
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [product_from_row(row) for row in self.db.execute(stmt).scalars().all()]

    def count_products(
        self,
        *,
        search: str | None = None,
        category_id: int | None = None,
        low_stock: bool = False,
        active_only: bool = True,
    ) -> int:
        stmt = _filter_products(select(func.count(ProductRow.id)), search, category_id, low_stock, active_only)
        return self.db.execute(stmt).scalar_one()

    def save(self, product: Product) -> Product:
        row = self._get_row(product.meta.id) if product.meta.id else ProductRow()
        row.name = product.name
        row.barcode = product.barcode
        row.category_id = product.category_id
        row.purchase_price = product.purchase_price
        row.sale_price = product.sale_price
        row.current_stock = product.current_stock
        row.min_stock = product.min_stock
        row.unit = product.unit
        row.notes = product.notes
        apply_meta(row, product.meta)
        self.db.add(row)
        self.db.flush()
        product.meta.id = row.id
        category = self.db.get(CategoryRow, row.category_id)
        product.category_name = category.name if category is not None else None
        return product
