import logging

from app.kwanza.core.context import RequestContext
from app.kwanza.core.error_catalog import AppError, ErrorCatalog, validation_failed
from app.kwanza.core.logging import log_json
from app.kwanza.domain.catalog import Category, Product
from app.kwanza.repos.catalog import CategoryRepository, ProductRepository
from app.kwanza.repos.stock import StockMovementRepository
from app.kwanza.services.audit import AuditEventPayload, AuditService

logger = logging.getLogger(__name__)

STOCK_REASONS = {"ADJUSTMENT", "PURCHASE", "LOSS"}


class CatalogService:
    def __init__(self, db):
        self.db = db
        self.categories = CategoryRepository(db)
        self.products = ProductRepository(db)
        self.movements = StockMovementRepository(db)
        self.audit = AuditService(db)

    def get_category(self, category_id: int) -> Category:
        category = self.categories.get_by_id(category_id)
        if category is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"category_id": category_id})
        return category

    def create_category(self, context: RequestContext, category: Category) -> Category:
        errors = category.validate()
        if errors:
            raise validation_failed(errors)
        if self.categories.get_by_name(category.name) is not None:
            raise AppError(ErrorCatalog.CONFLICT, details={"name": category.name})
        self.categories.save(category)
        self.db.commit()
        self._audit(context, "category.create", "category", category.meta.id, {"name": category.name})
        return category

    def update_category(self, context: RequestContext, category_id: int, changes: dict) -> Category:
        category = self.get_category(category_id)
        if "name" in changes:
            existing = self.categories.get_by_name(changes["name"] or "")
            if existing is not None and existing.meta.id != category.meta.id:
                raise AppError(ErrorCatalog.CONFLICT, details={"name": changes["name"]})
            category.rename(changes["name"])
        if "description" in changes:
            category.describe(changes["description"])
        if "color" in changes:
            category.set_color(changes["color"])
        if "icon" in changes:
            category.set_icon(changes["icon"])
        if changes.get("active") is True:
            category.meta.activate()
        elif changes.get("active") is False:
            category.meta.deactivate()
        errors = category.validate()
        if errors:
            raise validation_failed(errors)
        self.categories.save(category)
        self.db.commit()
        self._audit(context, "category.update", "category", category.meta.id, {"fields": sorted(changes)})
        return category

    def get_product(self, product_id: int) -> Product:
        product = self.products.get_by_id(product_id)
        if product is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"product_id": product_id})
        return product

    def get_product_by_barcode(self, barcode: str) -> Product:
        product = self.products.get_by_barcode(barcode)
        if product is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"barcode": barcode})
        return product

    def _check_product(self, product: Product) -> None:
        errors = product.validate()
        if product.category_id and self.categories.get_by_id(product.category_id) is None:
            errors.append("Category does not exist")
        if errors:
            raise validation_failed(errors)
        if product.barcode:
            existing = self.products.get_by_barcode(product.barcode)
            if existing is not None and existing.meta.id != product.meta.id:
                raise AppError(ErrorCatalog.CONFLICT, details={"barcode": product.barcode})

    def create_product(self, context: RequestContext, product: Product) -> tuple[Product, list[str]]:
        self._check_product(product)
        self.products.save(product)
        if product.current_stock:
            self.movements.record(
                product_id=product.meta.id,
                operator_id=context.user_id,
                quantity_delta=product.current_stock,
                stock_after=product.current_stock,
                reason="PURCHASE",
                reference="initial stock",
            )
        self.db.commit()
        self._audit(context, "product.create", "product", product.meta.id, {"name": product.name})
        return product, product.warnings()

    def update_product(self, context: RequestContext, product_id: int, changes: dict) -> tuple[Product, list[str]]:
        product = self.get_product(product_id)
        details = {key: value for key, value in changes.items() if key not in {"purchase_price", "sale_price", "active"}}
        if details:
            product.update_details(**details)
        if "purchase_price" in changes or "sale_price" in changes:
            product.set_prices(changes.get("purchase_price"), changes.get("sale_price"))
        if changes.get("active") is True:
            product.meta.activate()
        elif changes.get("active") is False:
            product.meta.deactivate()
        self._check_product(product)
        self.products.save(product)
        self.db.commit()
        self._audit(context, "product.update", "product", product.meta.id, {"fields": sorted(changes)})
        return product, product.warnings()

    def adjust_stock(
        self,
        context: RequestContext,
        product_id: int,
        quantity_delta: int,
        reason: str = "ADJUSTMENT",
        reference: str | None = None,
    ) -> Product:
        reason = reason.strip().upper()
        if reason not in STOCK_REASONS:
            raise validation_failed([f"Reason must be one of {', '.join(sorted(STOCK_REASONS))}"])
        if quantity_delta == 0:
            raise validation_failed(["Quantity must not be zero"])
        product = self.get_product(product_id)
        if not product.adjust_stock(quantity_delta):
            raise AppError(
                ErrorCatalog.INSUFFICIENT_STOCK,
                details={"product_id": product_id, "available": product.current_stock, "requested": -quantity_delta},
            )
        self.products.save(product)
        self.movements.record(
            product_id=product.meta.id,
            operator_id=context.user_id,
            quantity_delta=quantity_delta,
            stock_after=product.current_stock,
            reason=reason,
            reference=reference,
        )
        self.db.commit()
        log_json(
            logger,
            {
                "event": "stock.adjusted",
                "product_id": product.meta.id,
                "delta": quantity_delta,
                "stock_after": product.current_stock,
                "reason": reason,
                "trace_id": context.trace_id,
            },
        )
        self._audit(
            context,
            "stock.adjust",
            "product",
            product.meta.id,
            {"delta": quantity_delta, "stock_after": product.current_stock, "reason": reason},
        )
        return product

    def _audit(self, context: RequestContext, action: str, entity_type: str, entity_id, metadata: dict) -> None:
        self.audit.record_event(
            AuditEventPayload.from_context(
                context,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                metadata=metadata,
            )
        )
