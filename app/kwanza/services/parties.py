from app.kwanza.core.context import RequestContext
from app.kwanza.core.error_catalog import AppError, ErrorCatalog, validation_failed
from app.kwanza.domain.parties import Customer, DocumentType, Supplier
from app.kwanza.repos.parties import CustomerRepository, SupplierRepository
from app.kwanza.services.audit import AuditEventPayload, AuditService


def _set_active(entity, active) -> None:
    if active is True:
        entity.meta.activate()
    elif active is False:
        entity.meta.deactivate()


class CustomerService:
    def __init__(self, db):
        self.db = db
        self.repo = CustomerRepository(db)
        self.audit = AuditService(db)

    def get(self, customer_id: int) -> Customer:
        customer = self.repo.get_by_id(customer_id)
        if customer is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"customer_id": customer_id})
        return customer

    def list(self, search: str | None = None) -> list[Customer]:
        return self.repo.list_customers(search=search)

    def create(self, context: RequestContext, customer: Customer) -> Customer:
        errors = customer.validate()
        if errors:
            raise validation_failed(errors)
        self.repo.save(customer)
        self.db.commit()
        self._audit(context, "customer.create", customer, {"name": customer.name})
        return customer

    def update(self, context: RequestContext, customer_id: int, changes: dict) -> Customer:
        customer = self.get(customer_id)
        contact = {key: value for key, value in changes.items() if key not in {"document", "document_type", "active"}}
        if contact:
            customer.update_contact(**contact)
        if "document" in changes or "document_type" in changes:
            customer.set_document(
                changes.get("document", customer.document),
                DocumentType(changes.get("document_type") or customer.document_type),
            )
        _set_active(customer, changes.get("active"))
        errors = customer.validate()
        if errors:
            raise validation_failed(errors)
        self.repo.save(customer)
        self.db.commit()
        self._audit(context, "customer.update", customer, {"fields": sorted(changes)})
        return customer

    def _audit(self, context: RequestContext, action: str, customer: Customer, metadata: dict) -> None:
        self.audit.record_event(
            AuditEventPayload.from_context(
                context, action=action, entity_type="customer", entity_id=customer.meta.id, metadata=metadata
            )
        )


class SupplierService:
    def __init__(self, db):
        self.db = db
        self.repo = SupplierRepository(db)
        self.audit = AuditService(db)

    def get(self, supplier_id: int) -> Supplier:
        supplier = self.repo.get_by_id(supplier_id)
        if supplier is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"supplier_id": supplier_id})
        return supplier

    def list(self, search: str | None = None) -> list[Supplier]:
        return self.repo.list_suppliers(search=search)

    def create(self, context: RequestContext, supplier: Supplier) -> Supplier:
        errors = supplier.validate()
        if errors:
            raise validation_failed(errors)
        self.repo.save(supplier)
        self.db.commit()
        self._audit(context, "supplier.create", supplier, {"name": supplier.name})
        return supplier

    def update(self, context: RequestContext, supplier_id: int, changes: dict) -> Supplier:
        supplier = self.get(supplier_id)
        details = {key: value for key, value in changes.items() if key != "active"}
        if details:
            supplier.update_details(**details)
        _set_active(supplier, changes.get("active"))
        errors = supplier.validate()
        if errors:
            raise validation_failed(errors)
        self.repo.save(supplier)
        self.db.commit()
        self._audit(context, "supplier.update", supplier, {"fields": sorted(changes)})
        return supplier

    def _audit(self, context: RequestContext, action: str, supplier: Supplier, metadata: dict) -> None:
        self.audit.record_event(
            AuditEventPayload.from_context(
                context, action=action, entity_type="supplier", entity_id=supplier.meta.id, metadata=metadata
            )
        )
