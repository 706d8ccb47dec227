from sqlalchemy import or_, select

from app.kwanza.db.models import Customer as CustomerRow
from app.kwanza.db.models import Supplier as SupplierRow
from app.kwanza.domain.parties import Customer, DocumentType, Supplier
from app.kwanza.repos.records import apply_meta, meta_from_row


def customer_from_row(row: CustomerRow) -> Customer:
    return Customer(
        name=row.name,
        phone=row.phone,
        email=row.email,
        address=row.address,
        document=row.document,
        document_type=DocumentType(row.document_type),
        birth_date=row.birth_date,
        notes=row.notes,
        meta=meta_from_row(row),
    )


def supplier_from_row(row: SupplierRow) -> Supplier:
    return Supplier(
        name=row.name,
        contact_name=row.contact_name,
        phone=row.phone,
        email=row.email,
        tax_id=row.tax_id,
        address=row.address,
        notes=row.notes,
        meta=meta_from_row(row),
    )


class CustomerRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, customer_id: int) -> Customer | None:
        row = self.db.get(CustomerRow, customer_id)
        return customer_from_row(row) if row is not None else None

    def list_customers(self, *, search: str | None = None, active_only: bool = True) -> list[Customer]:
        stmt = select(CustomerRow)
        if active_only:
            stmt = stmt.where(CustomerRow.active.is_(True))
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    CustomerRow.name.ilike(pattern),
                    CustomerRow.phone.ilike(pattern),
                    CustomerRow.document.ilike(pattern),
                )
            )
        rows = self.db.execute(stmt.order_by(CustomerRow.name)).scalars().all()
        return [customer_from_row(row) for row in rows]

    def save(self, customer: Customer) -> Customer:
        row = self.db.get(CustomerRow, customer.meta.id) if customer.meta.id else CustomerRow()
        row.name = customer.name
        row.phone = customer.phone
        row.email = customer.email
        row.address = customer.address
        row.document = customer.document
        row.document_type = customer.document_type.value
        row.birth_date = customer.birth_date
        row.notes = customer.notes
        apply_meta(row, customer.meta)
        self.db.add(row)
        self.db.flush()
        customer.meta.id = row.id
        return customer


class SupplierRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, supplier_id: int) -> Supplier | None:
        row = self.db.get(SupplierRow, supplier_id)
        return supplier_from_row(row) if row is not None else None

    def list_suppliers(self, *, search: str | None = None, active_only: bool = True) -> list[Supplier]:
        stmt = select(SupplierRow)
        if active_only:
            stmt = stmt.where(SupplierRow.active.is_(True))
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(SupplierRow.name.ilike(pattern), SupplierRow.tax_id.ilike(pattern)))
        rows = self.db.execute(stmt.order_by(SupplierRow.name)).scalars().all()
        return [supplier_from_row(row) for row in rows]

    def save(self, supplier: Supplier) -> Supplier:
        row = self.db.get(SupplierRow, supplier.meta.id) if supplier.meta.id else SupplierRow()
        row.name = supplier.name
        row.contact_name = supplier.contact_name
        row.phone = supplier.phone
        row.email = supplier.email
        row.tax_id = supplier.tax_id
        row.address = supplier.address
        row.notes = supplier.notes
        apply_meta(row, supplier.meta)
        self.db.add(row)
        self.db.flush()
        supplier.meta.id = row.id
        return supplier
