from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal

from app.kwanza.core import validation
from app.kwanza.core.money import ZERO, format_money, percentage_of, round_money
from app.kwanza.domain.records import RecordMetadata

DEFAULT_CATEGORY_COLOR = "#3498DB"
DEFAULT_CATEGORY_ICON = "📦"
DEFAULT_UNIT = "Unidade"
DEFAULT_MIN_STOCK = 5

SUGGESTED_ICONS = (
    "📦", "🍔", "🥤", "🍞", "🥛", "🧴", "🧽", "💊", "👕", "📱",
    "💻", "🏠", "🚗", "📚", "🎮", "🎵", "🏃", "🌱", "🔧", "🎨",
)
SUGGESTED_COLORS = (
    "#3498DB", "#E74C3C", "#2ECC71", "#F39C12", "#9B59B6",
    "#1ABC9C", "#34495E", "#E67E22", "#95A5A6", "#16A085",
    "#27AE60", "#2980B9", "#8E44AD", "#F1C40F", "#E8F5E8",
)

_HEX_COLOR = re.compile(r"^#[0-9A-F]{6}$")


def normalize_color(color: str | None) -> str:
    if not color or not color.strip():
        return DEFAULT_CATEGORY_COLOR
    color = color.strip().upper()
    if not color.startswith("#"):
        color = "#" + color
    if _HEX_COLOR.match(color):
        return color
    return DEFAULT_CATEGORY_COLOR


def _clean(text: str | None) -> str | None:
    if text is None:
        return None
    return text.strip()


@dataclass(eq=False)
class Category:
    name: str
    description: str | None = None
    color: str = DEFAULT_CATEGORY_COLOR
    icon: str | None = DEFAULT_CATEGORY_ICON
    meta: RecordMetadata = field(default_factory=RecordMetadata)

    def __post_init__(self):
        self.name = _clean(self.name) or ""
        self.description = _clean(self.description)
        self.color = normalize_color(self.color)

    @property
    def display_name(self) -> str:
        if self.icon and self.icon.strip():
            return f"{self.icon} {self.name}"
        return self.name

    def rename(self, name: str) -> None:
        self.name = _clean(name) or ""
        self.meta.touch()

    def describe(self, description: str | None) -> None:
        self.description = _clean(description)
        self.meta.touch()

    def set_color(self, color: str | None) -> None:
        self.color = normalize_color(color)
        self.meta.touch()

    def set_icon(self, icon: str | None) -> None:
        self.icon = icon
        self.meta.touch()

    def validate(self) -> list[str]:
        errors = []
        if not self.name:
            errors.append("Category name is required")
        elif not 2 <= len(self.name) <= 100:
            errors.append("Category name must be between 2 and 100 characters")
        if self.description and len(self.description) > 255:
            errors.append("Description must be at most 255 characters")
        if self.icon and len(self.icon) > 10:
            errors.append("Icon must be at most 10 characters")
        return errors

    def __str__(self) -> str:
        return self.display_name


@dataclass(eq=False)
class Product:
    name: str
    category_id: int | None
    purchase_price: Decimal = ZERO
    sale_price: Decimal = ZERO
    barcode: str | None = None
    current_stock: int = 0
    min_stock: int = DEFAULT_MIN_STOCK
    unit: str = DEFAULT_UNIT
    notes: str | None = None
    category_name: str | None = None
    meta: RecordMetadata = field(default_factory=RecordMetadata)

    def __post_init__(self):
        self.name = _clean(self.name) or ""
        self.barcode = _clean(self.barcode) or None
        self.unit = _clean(self.unit) or ""
        self.notes = _clean(self.notes)
        self.purchase_price = round_money(self.purchase_price)
        self.sale_price = round_money(self.sale_price)

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock

    @property
    def margin_percent(self) -> Decimal:
        if self.purchase_price <= 0:
            return ZERO
        return percentage_of(self.sale_price - self.purchase_price, self.purchase_price)

    @property
    def unit_profit(self) -> Decimal:
        return round_money(self.sale_price - self.purchase_price)

    def can_sell(self, quantity: int) -> bool:
        return self.meta.active and quantity > 0 and self.current_stock >= quantity

    def total_for(self, quantity: int) -> Decimal:
        return round_money(self.sale_price * quantity)

    def adjust_stock(self, delta: int) -> bool:
        """Apply a stock delta; refuses (returns False) when stock would go negative."""
        new_stock = self.current_stock + delta
        if new_stock < 0:
            return False
        self.current_stock = new_stock
        self.meta.touch()
        return True

    def set_prices(self, purchase_price: Decimal | None = None, sale_price: Decimal | None = None) -> None:
        if purchase_price is not None:
            self.purchase_price = round_money(purchase_price)
        if sale_price is not None:
            self.sale_price = round_money(sale_price)
        self.meta.touch()

    def update_details(self, **changes) -> None:
        """Apply a partial update; only the keys present in ``changes`` are touched."""
        if "name" in changes:
            self.name = _clean(changes["name"]) or ""
        if "unit" in changes:
            self.unit = _clean(changes["unit"]) or ""
        if "barcode" in changes:
            self.barcode = _clean(changes["barcode"]) or None
        if "notes" in changes:
            self.notes = _clean(changes["notes"]) or None
        if changes.get("category_id") is not None:
            self.category_id = changes["category_id"]
        if changes.get("min_stock") is not None:
            self.min_stock = changes["min_stock"]
        self.meta.touch()

    def validate(self) -> list[str]:
        errors = []
        if not self.name:
            errors.append("Product name is required")
        elif not 2 <= len(self.name) <= 150:
            errors.append("Product name must be between 2 and 150 characters")
        if not self.unit:
            errors.append("Unit is required")
        elif len(self.unit) > 20:
            errors.append("Unit must be at most 20 characters")
        if not self.category_id:
            errors.append("Category is required")
        if self.barcode:
            if len(self.barcode) > 50:
                errors.append("Barcode must be at most 50 characters")
            elif len(self.barcode) in (8, 13) and self.barcode.isdigit() and not validation.is_valid_barcode(self.barcode):
                errors.append("Barcode check digit is invalid")
        if self.purchase_price < 0:
            errors.append("Purchase price cannot be negative")
        if self.sale_price < 0:
            errors.append("Sale price cannot be negative")
        if self.current_stock < 0:
            errors.append("Current stock cannot be negative")
        if self.min_stock < 0:
            errors.append("Minimum stock cannot be negative")
        if self.notes and len(self.notes) > 500:
            errors.append("Notes must be at most 500 characters")
        return errors

    def warnings(self) -> list[str]:
        if self.sale_price < self.purchase_price:
            return ["Sale price is lower than purchase price"]
        return []

    def __str__(self) -> str:
        return f"{self.name} - {format_money(self.sale_price)}"
