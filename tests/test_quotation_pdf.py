from datetime import date
from decimal import Decimal
from types import SimpleNamespace
import logging

from pavilion.services.document_services.quotation_pdf import (
    CustomerBlock,
    QuotationDocument,
    QuotationPdfRenderer,
    render_quotation_pdf,
    group_items,
    format_money,
    build_document_from_quotation,
)
from pavilion.services.pricing_services.line_item_builder import LineItem
from pavilion.services.pricing_services.totals import compute_totals

PDF_LOGGER = "pavilion.services.document_services.quotation_pdf"


def make_item(product_id, category="Cricket", sub_category="Bats", brand="SG", detailed=False, **extra):
    extra.setdefault("sku", f"SKU-{product_id}")
    return LineItem(
        product_id=product_id,
        name=f"Item {product_id}",
        category_name=category,
        sub_category_name=sub_category,
        brand_name=brand,
        description="English willow, full cane handle, ready to play. " * 3,
        mrp=Decimal("2000"),
        base_price=Decimal("2000"),
        custom_price=Decimal("1700"),
        discount=Decimal("15"),
        quantity=2,
        is_detailed=detailed,
        **extra,
    )


def make_document(items, **extra):
    return QuotationDocument(
        quotation_number="QT-20261019-0001",
        issue_date=date(2026, 10, 19),
        valid_until=date(2026, 11, 18),
        customer=CustomerBlock(name="Ravi Kumar", company_name="Kumar Sports", address="12 MG Road, Pune"),
        items=items,
        totals=compute_totals(items),
        **extra,
    )


def test_renders_pdf_bytes():
    pdf = render_quotation_pdf(make_document([make_item(1), make_item(2)]))
    assert pdf.startswith(b"%PDF")


def test_long_quotation_paginates():
    items = [make_item(i, detailed=True) for i in range(1, 61)]
    renderer = QuotationPdfRenderer(make_document(items))
    pdf = renderer.render()
    assert pdf.startswith(b"%PDF")
    assert renderer.page_number > 1


def test_missing_logo_is_logged_and_skipped(caplog):
    with caplog.at_level(logging.WARNING, logger=PDF_LOGGER):
        pdf = render_quotation_pdf(make_document([make_item(1)]), logo_path="/nonexistent/logo.png")
    assert pdf.startswith(b"%PDF")
    assert "/nonexistent/logo.png" in caplog.text


def test_missing_product_image_is_logged_and_skipped(caplog):
    item = make_item(1, detailed=True, image_url="/nonexistent/bat.jpg")
    with caplog.at_level(logging.WARNING, logger=PDF_LOGGER):
        pdf = render_quotation_pdf(make_document([item]))
    assert pdf.startswith(b"%PDF")
    assert "/nonexistent/bat.jpg" in caplog.text


def test_hidden_totals_and_comments_still_render():
    document = make_document([make_item(1)], show_total=False, comments="Delivery to the academy gate.")
    assert render_quotation_pdf(document).startswith(b"%PDF")


def test_group_items_keeps_first_seen_order():
    items = [
        make_item(1),
        make_item(2, category="Football", sub_category=None, brand="Nivia"),
        make_item(3),
        make_item(4, category=None, sub_category=None, brand=None),
    ]
    groups = group_items(items)
    assert list(groups.keys()) == ["Cricket › Bats › SG", "Football › Nivia", "General"]
    assert [i.product_id for i in groups["Cricket › Bats › SG"]] == [1, 3]


def test_format_money():
    assert format_money(Decimal("123456.5")) == "123,456.50"
    assert format_money(None) == "0.00"
    assert format_money(Decimal("11.859")) == "11.86"
    assert format_money(Decimal("1.805")) == "1.81"


def test_short_row_leaves_room_for_gst_amount():
    renderer = QuotationPdfRenderer(make_document([make_item(1)]))
    bare = make_item(2, sku=None)
    # GST amount baseline sits 20pt under the row top; the separator is drawn 2pt above the row bottom
    assert renderer.item_height(bare) - 2 > 20 + 3
    assert renderer.item_height(bare) < renderer.item_height(make_item(3))


def test_document_from_stored_quotation_prefers_snapshot():
    record = SimpleNamespace(
        product_id=7, product_name="Kashmir Willow Bat", sku="KW-7", slug="kashmir-willow-bat",
        category_name="Cricket", sub_category_name="Bats", brand_name="SS", image_url=None, description=None,
        mrp=Decimal("1500"), dealer_price=Decimal("1000"), base_price=Decimal("1000"), price_mode="dealer",
        unit_price=Decimal("1100.00"), discount=Decimal("10"), quantity=3, gst_rate=Decimal("12"), is_detailed=False,
    )
    quotation = SimpleNamespace(
        quotation_number="QT-20261019-0007", reference_number="PO-55", issue_date=date(2026, 10, 19),
        valid_until=date(2026, 11, 18), payment_terms=None, delivery_terms=None, show_total=True,
        terms_and_conditions=None, notes=None, tax_rate=Decimal("18"), items=[record],
        customer=SimpleNamespace(name="Renamed Later", company_name=None, email=None, phone=None,
                                 gst_number=None, address=None, primary_contact=None),
        customer_snapshot={"name": "Ravi Kumar", "company_name": "Kumar Sports"},
    )
    document = build_document_from_quotation(quotation)
    assert document.customer.company_name == "Kumar Sports"
    assert document.items[0].custom_price == Decimal("1100.00")
    assert document.totals.subtotal == Decimal("3300.00")
    assert document.totals.total == Decimal("3894.00")
    assert render_quotation_pdf(document).startswith(b"%PDF")
