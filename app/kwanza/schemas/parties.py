from datetime import date

from pydantic import BaseModel

from app.kwanza.domain.parties import Customer, DocumentType, Supplier


class CustomerCreateRequest(BaseModel):
    name: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    document: str | None = None
    document_type: DocumentType = DocumentType.BI
    birth_date: date | None = None
    notes: str | None = None


class CustomerUpdateRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    document: str | None = None
    document_type: DocumentType | None = None
    birth_date: date | None = None
    notes: str | None = None
    active: bool | None = None


class CustomerResponse(BaseModel):
    id: int
    name: str
    phone: str | None = None
    formatted_phone: str
    email: str | None = None
    address: str | None = None
    document: str | None = None
    document_type: DocumentType
    document_type_label: str
    birth_date: date | None = None
    age: int | None = None
    notes: str | None = None
    active: bool

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerResponse":
        return cls(
            id=customer.meta.id,
            name=customer.name,
            phone=customer.phone,
            formatted_phone=customer.formatted_phone,
            email=customer.email,
            address=customer.address,
            document=customer.document,
            document_type=customer.document_type,
            document_type_label=customer.document_type_label,
            birth_date=customer.birth_date,
            age=customer.age,
            notes=customer.notes,
            active=customer.meta.active,
        )


class SupplierCreateRequest(BaseModel):
    name: str
    contact_name: str | None = None
    phone: str | None = None
    email: str | None = None
    tax_id: str | None = None
    address: str | None = None
    notes: str | None = None


class SupplierUpdateRequest(BaseModel):
    name: str | None = None
    contact_name: str | None = None
    phone: str | None = None
    email: str | None = None
    tax_id: str | None = None
    address: str | None = None
    notes: str | None = None
    active: bool | None = None


class SupplierResponse(BaseModel):
    id: int
    name: str
    contact_name: str | None = None
    phone: str | None = None
    formatted_phone: str
    email: str | None = None
    tax_id: str | None = None
    address: str | None = None
    notes: str | None = None
    active: bool

    @classmethod
    def from_domain(cls, supplier: Supplier) -> "SupplierResponse":
        return cls(
            id=supplier.meta.id,
            name=supplier.name,
            contact_name=supplier.contact_name,
            phone=supplier.phone,
            formatted_phone=supplier.formatted_phone,
            email=supplier.email,
            tax_id=supplier.tax_id,
            address=supplier.address,
            notes=supplier.notes,
            active=supplier.meta.active,
        )
