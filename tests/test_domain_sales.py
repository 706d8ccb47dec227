from datetime import datetime
from decimal import Decimal

import pytest

from app.kwanza.core.error_catalog import AppError, ErrorCatalog
from app.kwanza.domain.catalog import Product
from app.kwanza.domain.records import RecordMetadata
from app.kwanza.domain.sales import Sale, SaleLineItem, SaleStatus


def _item(product_id=1, quantity=1, price="1000", **kwargs) -> SaleLineItem:
    return SaleLineItem(product_id=product_id, quantity=quantity, unit_price=Decimal(price), product_name=f"P{product_id}", **kwargs)


@pytest.mark.parametrize(
    ("quantity", "price", "discount", "expected_total", "expected_discount"),
    [
        (1, "1000", "0", "1000.00", "0.00"),
        (3, "333.335", "0", "1000.02", "0.00"),
        (2, "1000", "150", "1850.00", "150.00"),
        (2, "10", "500", "0.00", "20.00"),
        (7, "0.99", "0.93", "6.00", "0.93"),
    ],
)
def test_line_total_is_subtotal_minus_clamped_discount(quantity, price, discount, expected_total, expected_discount):
    item = _item(quantity=quantity, price=price, discount=Decimal(discount))
    item.recompute_total()
    assert item.total == Decimal(expected_total)
    assert item.discount == Decimal(expected_discount)
    assert Decimal("0") <= item.discount <= item.subtotal


def test_line_discount_modes():
    item = _item(quantity=2, price="500")
    item.apply_discount(Decimal("10"), is_percentage=True)
    assert item.discount == Decimal("100.00")
    assert item.total == Decimal("900.00")
    assert item.discount_percent == Decimal("10.00")

    item.apply_discount(Decimal("5000"))
    assert item.discount == Decimal("1000.00")
    assert item.total == Decimal("0.00")

    item.apply_discount(Decimal("-1"))
    assert item.discount == Decimal("1000.00")


def test_line_quantity_changes():
    item = _item(quantity=3, price="100")
    item.add_quantity(2)
    assert item.quantity == 5
    item.add_quantity(0)
    assert item.quantity == 5
    assert item.remove_quantity(4)
    assert item.quantity == 1
    assert not item.remove_quantity(1)
    assert item.quantity == 1
    assert item.total == Decimal("100.00")


def test_line_mutators_touch_metadata():
    item = _item()
    assert item.meta.updated_at is None
    item.set_unit_price(Decimal("12.345"))
    assert item.unit_price == Decimal("12.35")
    assert item.meta.updated_at is not None


def test_line_copy_is_independent():
    item = _item(quantity=2, barcode="4006381333931")
    item.meta.id = 9
    clone = item.copy()
    clone.set_quantity(5)
    assert item.quantity == 2
    assert clone.meta.id is None
    assert clone.barcode == "4006381333931"


def test_line_description_and_validation():
    item = _item(quantity=2, barcode="4006381333931", unit="Caixa")
    assert item.description == "P1 - 2 Caixa (4006381333931)"
    assert item.validate() == []
    bad = SaleLineItem(product_id=None, quantity=0, unit_price=Decimal("0"))
    errors = bad.validate()
    assert "Product is required" in errors
    assert "Quantity must be greater than zero" in errors
    assert "Unit price must be greater than zero" in errors


def test_line_for_product_copies_catalog_data():
    product = Product(name="Sumo Compal", category_id=1, sale_price=Decimal("450"), barcode="96385074", unit="Lata")
    product.meta.id = 4
    item = SaleLineItem.for_product(product, 3)
    assert item.product_id == 4
    assert item.product_name == "Sumo Compal"
    assert item.unit == "Lata"
    assert item.total == Decimal("1350.00")


def test_recompute_totals_is_idempotent():
    sale = Sale(operator_id=1)
    sale.add_item(_item(1, 3, "333.335"))
    sale.add_item(_item(2, 1, "0.015"))
    sale.apply_discount(Decimal("7.5"), is_percentage=True)

    sale.recompute_totals()
    first = (sale.subtotal, sale.discount, sale.total)
    sale.recompute_totals()
    assert (sale.subtotal, sale.discount, sale.total) == first


def test_sale_totals_follow_items():
    sale = Sale(operator_id=1)
    sale.add_item(_item(1, 2, "1000"))
    sale.add_item(_item(2, 1, "250.50"))
    assert sale.subtotal == Decimal("2250.50")
    assert sale.total == Decimal("2250.50")
    assert sale.item_count == 3


def test_add_item_merges_lines_for_same_product():
    sale = Sale(operator_id=1)
    first = sale.add_item(_item(1, 2, "100"))
    merged = sale.add_item(_item(1, 3, "100"))
    assert merged is first
    assert len(sale.items) == 1
    assert sale.items[0].quantity == 5
    assert sale.total == Decimal("500.00")


def test_remove_item_uses_identity():
    sale = Sale(operator_id=1)
    kept = sale.add_item(_item(1, 1, "100"))
    removed = sale.add_item(_item(2, 1, "200"))
    sale.remove_item(_item(1, 1, "100"))
    assert len(sale.items) == 2

    sale.remove_item(removed)
    assert sale.items == [kept]
    assert sale.total == Decimal("100.00")


def test_percentage_discount_is_clamped_to_full_subtotal():
    sale = Sale(operator_id=1)
    sale.add_item(_item(1, 2, "1000"))
    sale.apply_discount(Decimal("150"), is_percentage=True)
    assert sale.discount == sale.subtotal
    assert sale.total == Decimal("0.00")


def test_negative_discount_is_a_no_op():
    sale = Sale(operator_id=1)
    sale.add_item(_item(1, 2, "1000"))
    sale.apply_discount(Decimal("100"))
    before = (sale.subtotal, sale.discount, sale.total, sale.meta.updated_at)
    sale.pull_events()

    sale.apply_discount(Decimal("-5"), is_percentage=False)
    assert (sale.subtotal, sale.discount, sale.total, sale.meta.updated_at) == before
    assert sale.pull_events() == []


def test_discount_shrinks_when_items_are_removed():
    sale = Sale(operator_id=1)
    sale.add_item(_item(1, 1, "1000"))
    small = sale.add_item(_item(2, 1, "100"))
    sale.apply_discount(Decimal("900"))
    big = sale.items[0]
    sale.remove_item(big)
    assert sale.items == [small]
    assert sale.discount == Decimal("100.00")
    assert sale.total == Decimal("0.00")
    assert sale.discount_percent == Decimal("100.00")


def test_finalize_without_items_fails():
    sale = Sale(operator_id=1, payment_method="CASH")
    with pytest.raises(AppError) as exc_info:
        sale.finalize()
    assert exc_info.value.error == ErrorCatalog.SALE_HAS_NO_ITEMS
    assert sale.status == SaleStatus.PENDING
    assert sale.invoice_number is None


def test_finalize_requires_payment_method():
    sale = Sale(operator_id=1, payment_method="   ")
    sale.add_item(_item(1, 1, "100"))
    with pytest.raises(AppError) as exc_info:
        sale.finalize()
    assert exc_info.value.error == ErrorCatalog.PAYMENT_METHOD_REQUIRED


def test_finalize_assigns_invoice_number():
    sale = Sale(operator_id=1, meta=RecordMetadata(id=42))
    sale.add_item(_item(1, 2, "1000"))
    sale.set_payment_method("Multicaixa")
    sale.finalize(now=datetime(2024, 3, 5, 10, 30))

    assert sale.status == SaleStatus.FINALIZED
    assert sale.status_label == "Finalizada"
    assert sale.total == Decimal("2000.00")
    assert sale.invoice_number == "FT20240305000042"


def test_finalize_keeps_existing_invoice_number():
    sale = Sale(operator_id=1, payment_method="CASH", invoice_number=" ft-manual-1 ")
    sale.add_item(_item())
    sale.finalize()
    assert sale.invoice_number == "FT-MANUAL-1"


def test_invoice_number_without_id_uses_zero_padding():
    sale = Sale(operator_id=1)
    assert sale.build_invoice_number(datetime(2024, 12, 31), prefix="fr") == "FR20241231000000"


def test_cancel_appends_reason_to_notes():
    sale = Sale(operator_id=1, notes="Cliente habitual")
    sale.cancel("cliente desistiu")
    assert sale.status == SaleStatus.CANCELLED
    assert sale.notes == "Cliente habitual\nCancelled: cliente desistiu"

    other = Sale(operator_id=1)
    other.cancel(None)
    assert other.notes is None


def test_cancel_is_allowed_from_any_status():
    sale = Sale(operator_id=1, payment_method="CASH")
    sale.add_item(_item())
    sale.finalize()
    sale.cancel("erro de caixa")
    assert sale.status == SaleStatus.CANCELLED
    sale.cancel()
    assert sale.status == SaleStatus.CANCELLED


def test_events_are_drained_once():
    sale = Sale(operator_id=1, payment_method="CASH", meta=RecordMetadata(id=7))
    sale.add_item(_item())
    sale.finalize()
    names = [event.name for event in sale.pull_events()]
    assert names == ["sale.item_added", "sale.finalized"]
    assert sale.pull_events() == []


def test_sale_validation_collects_item_errors():
    sale = Sale(operator_id=None)
    sale.items.append(SaleLineItem(product_id=1, quantity=0, unit_price=Decimal("10"), product_name="Pão"))
    errors = sale.validate()
    assert "Operator is required" in errors
    assert "Payment method is required" in errors
    assert "Item Pão: Quantity must be greater than zero" in errors


def test_sale_equality_is_by_identity():
    first = Sale(operator_id=1, meta=RecordMetadata(id=1))
    second = Sale(operator_id=1, meta=RecordMetadata(id=1))
    assert first != second
    assert first.meta.same_record(second.meta)
