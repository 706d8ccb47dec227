"""Sale workflow: cart edits, discounts, finalization and cancellation.

Each call rebuilds the ``Sale`` aggregate from the store, applies one domain
operation, writes it back and commits. Checks that can fail run before the
first write, so a rejected operation leaves nothing persisted.
"""

import logging

from app.kwanza.core.config import Settings
from app.kwanza.core.context import RequestContext
from app.kwanza.core.error_catalog import AppError, ErrorCatalog, validation_failed
from app.kwanza.core.logging import log_json
from app.kwanza.domain.catalog import Product
from app.kwanza.domain.sales import Sale, SaleLineItem
from app.kwanza.repos.catalog import ProductRepository
from app.kwanza.repos.parties import CustomerRepository
from app.kwanza.repos.sales import SaleQueryFilters, SaleRepository
from app.kwanza.repos.stock import StockMovementRepository
from app.kwanza.services.audit import AuditEventPayload, AuditService

logger = logging.getLogger(__name__)


class SaleService:
    def __init__(self, db, settings: Settings):
        self.db = db
        self.settings = settings
        self.sales = SaleRepository(db)
        self.products = ProductRepository(db)
        self.customers = CustomerRepository(db)
        self.movements = StockMovementRepository(db)
        self.audit = AuditService(db)

    def get(self, sale_id: int) -> Sale:
        sale = self.sales.get_by_id(sale_id)
        if sale is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"sale_id": sale_id})
        return sale

    def get_by_invoice(self, invoice_number: str) -> Sale:
        sale = self.sales.get_by_invoice_number(invoice_number)
        if sale is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"invoice_number": invoice_number})
        return sale

    def list(self, filters: SaleQueryFilters) -> list[Sale]:
        return self.sales.list_sales(filters)

    def count(self, filters: SaleQueryFilters) -> int:
        return self.sales.count_sales(filters)

    def _get_pending(self, sale_id: int) -> Sale:
        sale = self.get(sale_id)
        if not sale.is_pending:
            raise AppError(ErrorCatalog.SALE_NOT_PENDING, details={"sale_id": sale_id, "status": sale.status.value})
        return sale

    def _get_product(self, product_id: int) -> Product:
        product = self.products.get_by_id(product_id)
        if product is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"product_id": product_id})
        return product

    def _ensure_customer(self, customer_id: int | None) -> None:
        if customer_id is not None and self.customers.get_by_id(customer_id) is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"customer_id": customer_id})

    @staticmethod
    def _ensure_can_sell(product: Product, quantity: int) -> None:
        if not product.meta.active:
            raise validation_failed([f"Product {product.name} is inactive"])
        if not product.can_sell(quantity):
            raise AppError(
                ErrorCatalog.INSUFFICIENT_STOCK,
                details={"product_id": product.meta.id, "available": product.current_stock, "requested": quantity},
            )

    def _find_item(self, sale: Sale, item_id: int) -> SaleLineItem:
        for item in sale.items:
            if item.meta.id == item_id:
                return item
        raise AppError(ErrorCatalog.NOT_FOUND, details={"sale_id": sale.meta.id, "item_id": item_id})

    def create_sale(
        self,
        context: RequestContext,
        *,
        customer_id: int | None = None,
        payment_method: str | None = None,
        notes: str | None = None,
    ) -> Sale:
        self._ensure_customer(customer_id)
        sale = Sale(operator_id=context.user_id, customer_id=customer_id, payment_method=payment_method, notes=notes)
        self.sales.save(sale)
        self.db.commit()
        log_json(logger, {"event": "sale.created", "sale_id": sale.meta.id, "trace_id": context.trace_id})
        self._audit(context, "sale.create", sale, {"customer_id": customer_id})
        return sale

    def update_sale(self, context: RequestContext, sale_id: int, changes: dict) -> Sale:
        sale = self._get_pending(sale_id)
        if "customer_id" in changes:
            self._ensure_customer(changes["customer_id"])
            sale.set_customer(changes["customer_id"])
        if "payment_method" in changes:
            sale.set_payment_method(changes["payment_method"])
        if "notes" in changes:
            sale.set_notes(changes["notes"])
        if sale.payment_method and len(sale.payment_method) > 50:
            raise validation_failed(["Payment method must be at most 50 characters"])
        self.sales.save(sale)
        self.db.commit()
        self._audit(context, "sale.update", sale, {"fields": sorted(changes)})
        return sale

    def add_item(self, context: RequestContext, sale_id: int, product_id: int, quantity: int) -> Sale:
        sale = self._get_pending(sale_id)
        product = self._get_product(product_id)
        existing = sale.find_item(product_id)
        self._ensure_can_sell(product, quantity + (existing.quantity if existing else 0))
        sale.add_item(SaleLineItem.for_product(product, quantity))
        self.sales.save(sale)
        self.db.commit()
        self._publish(context, sale)
        return sale

    def update_item(
        self,
        context: RequestContext,
        sale_id: int,
        item_id: int,
        *,
        quantity: int | None = None,
        discount: object | None = None,
        discount_is_percentage: bool = False,
    ) -> Sale:
        sale = self._get_pending(sale_id)
        item = self._find_item(sale, item_id)
        if quantity is not None:
            if quantity <= 0:
                raise validation_failed(["Quantity must be greater than zero"])
            self._ensure_can_sell(self._get_product(item.product_id), quantity)
            item.set_quantity(quantity)
        if discount is not None:
            item.apply_discount(discount, discount_is_percentage)
        sale.recompute_totals()
        sale.meta.touch()
        self.sales.save(sale)
        self.db.commit()
        self._audit(
            context,
            "sale.item_updated",
            sale,
            {"item_id": item_id, "quantity": item.quantity, "discount": item.discount},
        )
        return sale

    def remove_item(self, context: RequestContext, sale_id: int, item_id: int) -> Sale:
        sale = self._get_pending(sale_id)
        sale.remove_item(self._find_item(sale, item_id))
        self.sales.save(sale)
        self.db.commit()
        self._publish(context, sale)
        return sale

    def apply_discount(self, context: RequestContext, sale_id: int, amount, is_percentage: bool = False) -> Sale:
        sale = self._get_pending(sale_id)
        sale.apply_discount(amount, is_percentage)
        self.sales.save(sale)
        self.db.commit()
        self._publish(context, sale)
        return sale

    def finalize(self, context: RequestContext, sale_id: int, payment_method: str | None = None) -> Sale:
        sale = self._get_pending(sale_id)
        if payment_method:
            sale.set_payment_method(payment_method)

        products = {}
        for item in sale.items:
            product = self._get_product(item.product_id)
            self._ensure_can_sell(product, item.quantity)
            products[item.product_id] = product

        sale.finalize(prefix=self.settings.INVOICE_PREFIX)

        for item in sale.items:
            product = products[item.product_id]
            product.adjust_stock(-item.quantity)
            self.products.save(product)
            self.movements.record(
                product_id=product.meta.id,
                operator_id=context.user_id,
                quantity_delta=-item.quantity,
                stock_after=product.current_stock,
                reason="SALE",
                reference=sale.invoice_number,
            )
        self.sales.save(sale)
        self.db.commit()
        self._publish(context, sale)
        return sale

    def cancel(self, context: RequestContext, sale_id: int, reason: str | None = None) -> Sale:
        # allowed from any status; stock already moved by a finalized sale is not returned
        sale = self.get(sale_id)
        sale.cancel(reason)
        self.sales.save(sale)
        self.db.commit()
        self._publish(context, sale)
        return sale

    def _publish(self, context: RequestContext, sale: Sale) -> None:
        for event in sale.pull_events():
            log_json(
                logger,
                {
                    "event": event.name,
                    "sale_id": sale.meta.id,
                    "operator_id": context.user_id,
                    "trace_id": context.trace_id,
                    **event.payload,
                },
            )
            self._audit(context, event.name, sale, event.payload)

    def _audit(self, context: RequestContext, action: str, sale: Sale, metadata: dict) -> None:
        self.audit.record_event(
            AuditEventPayload.from_context(context, action=action, entity_type="sale", entity_id=sale.meta.id, metadata=metadata)
        )
