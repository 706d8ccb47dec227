from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from app.kwanza.core import validation
from app.kwanza.domain.records import RecordMetadata

_PHONE_NOISE = re.compile(r"[^\d+\s]")


class DocumentType(str, Enum):
    BI = "BI"
    PASSPORT = "PASSPORT"
    RESIDENCE_CARD = "RESIDENCE_CARD"
    OTHER = "OTHER"


DOCUMENT_TYPE_LABELS = {
    DocumentType.BI: "Bilhete de Identidade",
    DocumentType.PASSPORT: "Passaporte",
    DocumentType.RESIDENCE_CARD: "Cartão de Residência",
    DocumentType.OTHER: "Outro",
}


def clean_phone(phone: str | None) -> str | None:
    if not phone or not phone.strip():
        return None
    return _PHONE_NOISE.sub("", phone.strip())


def _clean(text: str | None) -> str | None:
    if text is None:
        return None
    return text.strip() or None


def _contact_errors(phone: str | None, email: str | None, address: str | None) -> list[str]:
    errors = []
    if phone and not validation.is_valid_angola_phone(phone):
        errors.append("Phone must be a valid Angolan number")
    if email and not validation.is_valid_email(email):
        errors.append("Email must have a valid format")
    if address and len(address) > 255:
        errors.append("Address must be at most 255 characters")
    return errors


@dataclass(eq=False)
class Customer:
    name: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    document: str | None = None
    document_type: DocumentType = DocumentType.BI
    birth_date: date | None = None
    notes: str | None = None
    meta: RecordMetadata = field(default_factory=RecordMetadata)

    def __post_init__(self):
        self.name = _clean(self.name) or ""
        self.phone = clean_phone(self.phone)
        self.email = (_clean(self.email) or "").lower() or None
        self.address = _clean(self.address)
        self.document = (_clean(self.document) or "").upper() or None
        self.document_type = DocumentType(self.document_type)
        self.notes = _clean(self.notes)

    @property
    def age(self) -> int | None:
        if self.birth_date is None:
            return None
        return validation.age_on(self.birth_date)

    @property
    def formatted_phone(self) -> str:
        return validation.format_angola_phone(self.phone)

    @property
    def document_type_label(self) -> str:
        return DOCUMENT_TYPE_LABELS.get(self.document_type, "Não especificado")

    def update_contact(self, **changes) -> None:
        if "name" in changes:
            self.name = _clean(changes["name"]) or ""
        if "phone" in changes:
            self.phone = clean_phone(changes["phone"])
        if "email" in changes:
            self.email = (_clean(changes["email"]) or "").lower() or None
        if "address" in changes:
            self.address = _clean(changes["address"])
        if "notes" in changes:
            self.notes = _clean(changes["notes"])
        if "birth_date" in changes:
            self.birth_date = changes["birth_date"]
        self.meta.touch()

    def set_document(self, document: str | None, document_type: DocumentType = DocumentType.BI) -> None:
        self.document = (_clean(document) or "").upper() or None
        self.document_type = DocumentType(document_type)
        self.meta.touch()

    def validate(self) -> list[str]:
        errors = []
        if not self.name:
            errors.append("Customer name is required")
        elif not 2 <= len(self.name) <= 150:
            errors.append("Customer name must be between 2 and 150 characters")
        errors.extend(_contact_errors(self.phone, self.email, self.address))
        if self.document:
            if len(self.document) > 50:
                errors.append("Document must be at most 50 characters")
            elif self.document_type == DocumentType.BI and not validation.is_valid_national_id(self.document):
                errors.append("Identity card number must be 9 digits followed by 2 letters")
            elif self.document_type == DocumentType.PASSPORT and not validation.is_valid_passport(self.document):
                errors.append("Passport number must be 2 letters followed by 6 to 8 digits")
        if self.birth_date is not None and not validation.is_valid_birth_date(self.birth_date):
            if self.birth_date > date.today():
                errors.append("Birth date cannot be in the future")
            else:
                errors.append(f"Birth date cannot be more than {validation.MAX_AGE_YEARS} years ago")
        if self.notes and len(self.notes) > 500:
            errors.append("Notes must be at most 500 characters")
        return errors

    def __str__(self) -> str:
        if self.phone:
            return f"{self.name} ({self.formatted_phone})"
        return self.name


@dataclass(eq=False)
class Supplier:
    name: str
    contact_name: str | None = None
    phone: str | None = None
    email: str | None = None
    tax_id: str | None = None
    address: str | None = None
    notes: str | None = None
    meta: RecordMetadata = field(default_factory=RecordMetadata)

    def __post_init__(self):
        self.name = _clean(self.name) or ""
        self.contact_name = _clean(self.contact_name)
        self.phone = clean_phone(self.phone)
        self.email = (_clean(self.email) or "").lower() or None
        self.tax_id = (_clean(self.tax_id) or "").upper() or None
        self.address = _clean(self.address)
        self.notes = _clean(self.notes)

    @property
    def formatted_phone(self) -> str:
        return validation.format_angola_phone(self.phone)

    def update_details(self, **changes) -> None:
        for name in ("name", "contact_name", "address", "notes"):
            if name in changes:
                setattr(self, name, _clean(changes[name]) or ("" if name == "name" else None))
        if "phone" in changes:
            self.phone = clean_phone(changes["phone"])
        if "email" in changes:
            self.email = (_clean(changes["email"]) or "").lower() or None
        if "tax_id" in changes:
            self.tax_id = (_clean(changes["tax_id"]) or "").upper() or None
        self.meta.touch()

    def validate(self) -> list[str]:
        errors = []
        if not self.name:
            errors.append("Supplier name is required")
        elif not 2 <= len(self.name) <= 150:
            errors.append("Supplier name must be between 2 and 150 characters")
        if self.contact_name and len(self.contact_name) > 100:
            errors.append("Contact name must be at most 100 characters")
        errors.extend(_contact_errors(self.phone, self.email, self.address))
        if self.tax_id and (len(self.tax_id) > 20 or not validation.is_alphanumeric(self.tax_id)):
            errors.append("Tax id must be alphanumeric with at most 20 characters")
        if self.notes and len(self.notes) > 500:
            errors.append("Notes must be at most 500 characters")
        return errors

    def __str__(self) -> str:
        return self.name
