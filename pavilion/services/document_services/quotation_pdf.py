# pavilion/services/document_services/quotation_pdf.py
from datetime import date
from decimal import Decimal
from io import BytesIO
import logging
from typing import Optional, List, Dict, Any

from pydantic import BaseModel
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from pavilion.core.config import COMPANY_NAME, COMPANY_ADDRESS, DEFAULT_TERMS, DEFAULT_PAYMENT_TERMS
from pavilion.services.pricing_services.calculator import round_money
from pavilion.services.pricing_services.line_item_builder import LineItem
from pavilion.services.pricing_services.totals import DocumentTotals, compute_totals, line_gst_amount

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 40
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
TOP = PAGE_HEIGHT - MARGIN
BOTTOM_THRESHOLD = 80  # cursor below this starts a new page
FOOTER_Y = 30

ROW_HEIGHT = 16
MIN_ITEM_HEIGHT = 26  # price row plus the GST amount drawn under it
IMAGE_SIZE = 48

COL_ITEM = MARGIN + 4
COL_QTY = MARGIN + 300
COL_PRICE = MARGIN + 375
COL_GST = MARGIN + 420
COL_TOTAL = PAGE_WIDTH - MARGIN - 4
ITEM_TEXT_WIDTH = 250

HEADER_FILL = colors.HexColor("#E6E6E6")
GROUP_FILL = colors.HexColor("#F3F4F6")
CUSTOMER_FILL = colors.HexColor("#F5F7FA")
MUTED = colors.HexColor("#6B7280")
ACCENT = colors.HexColor("#DC2626")

FOOTER_TEXT = "This is a computer-generated quotation. No signature required."


class CustomerBlock(BaseModel):
    name: Optional[str] = None
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gst_number: Optional[str] = None
    address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None


class QuotationDocument(BaseModel):
    quotation_number: str
    reference_number: Optional[str] = None
    issue_date: Optional[date] = None
    valid_until: Optional[date] = None
    payment_terms: Optional[str] = None
    delivery_terms: Optional[str] = None
    customer: CustomerBlock
    items: List[LineItem]
    totals: DocumentTotals
    show_total: bool = True
    terms_and_conditions: Optional[str] = None
    comments: Optional[str] = None
    company_name: str = COMPANY_NAME
    company_address: Optional[str] = COMPANY_ADDRESS


def format_money(value: Any) -> str:
    try:
        return f"{round_money(Decimal(str(value))):,.2f}"
    except (ArithmeticError, ValueError):
        return "0.00"


def group_items(items: List[LineItem]) -> Dict[str, List[LineItem]]:
    """Group lines by 'Category › Sub-category › Brand', keeping first-seen order."""
    groups: Dict[str, List[LineItem]] = {}
    for item in items:
        parts = [item.category_name or "General", item.sub_category_name, item.brand_name]
        key = " › ".join(p for p in parts if p)
        groups.setdefault(key, []).append(item)
    return groups


class QuotationPdfRenderer:
    def __init__(self, document: QuotationDocument, logo_path: Optional[str] = None):
        self.document = document
        self.logo_path = logo_path
        self.buffer = BytesIO()
        self.pdf = canvas.Canvas(self.buffer, pagesize=A4)
        self.pdf.setTitle(f"Quotation {document.quotation_number}")
        self.page_number = 1
        self.y = TOP
        self._images: Dict[str, Optional[ImageReader]] = {}

    # ----------------------
    # Cursor & pages
    # ----------------------
    def new_page(self):
        self.draw_footer()
        self.pdf.showPage()
        self.page_number += 1
        self.y = TOP

    def ensure_space(self, height: float) -> bool:
        """Start a new page when the next block would cross the bottom threshold."""
        if self.y - height < BOTTOM_THRESHOLD:
            self.new_page()
            return True
        return False

    def load_image(self, path: Optional[str]) -> Optional[ImageReader]:
        if not path:
            return None
        if path not in self._images:
            try:
                self._images[path] = ImageReader(path)
            except Exception as e:
                logger.warning("Could not load image '%s' for quotation %s: %s", path, self.document.quotation_number, e)
                self._images[path] = None
        return self._images[path]

    def draw_image(self, path: Optional[str], x: float, y: float, width: float, height: float) -> bool:
        image = self.load_image(path)
        if image is None:
            return False
        try:
            self.pdf.drawImage(image, x, y, width=width, height=height, preserveAspectRatio=True, mask="auto")
            return True
        except Exception as e:
            logger.warning("Could not embed image '%s': %s", path, e)
            return False

    # ----------------------
    # Blocks
    # ----------------------
    def draw_header(self):
        doc = self.document
        pdf = self.pdf
        logo_drawn = self.draw_image(self.logo_path, MARGIN, self.y - 40, 120, 40)
        if not logo_drawn:
            pdf.setFont("Helvetica-Bold", 14)
            pdf.setFillColor(colors.black)
            pdf.drawString(MARGIN, self.y - 16, doc.company_name)
        if doc.company_address:
            pdf.setFont("Helvetica", 8)
            pdf.setFillColor(MUTED)
            for i, line in enumerate(simpleSplit(doc.company_address, "Helvetica", 8, 220)[:3]):
                pdf.drawString(MARGIN, self.y - 52 - i * 10, line)

        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica-Bold", 20)
        pdf.drawRightString(PAGE_WIDTH - MARGIN, self.y - 16, "QUOTATION")
        pdf.setFont("Helvetica", 9)
        pdf.setFillColor(MUTED)
        meta = [
            f"Quotation #: {doc.quotation_number}",
            f"Date: {doc.issue_date.isoformat() if doc.issue_date else 'N/A'}",
            f"Valid Until: {doc.valid_until.isoformat() if doc.valid_until else 'N/A'}",
            f"Payment Terms: {doc.payment_terms or DEFAULT_PAYMENT_TERMS}",
        ]
        if doc.reference_number:
            meta.append(f"Reference: {doc.reference_number}")
        if doc.delivery_terms:
            meta.append(f"Delivery: {doc.delivery_terms}")
        for i, line in enumerate(meta):
            pdf.drawRightString(PAGE_WIDTH - MARGIN, self.y - 32 - i * 11, line)
        self.y -= max(90, 36 + len(meta) * 11)

    def draw_customer(self):
        customer = self.document.customer
        lines = []
        if customer.address:
            lines.extend(simpleSplit(customer.address, "Helvetica", 9, 250))
        if customer.email:
            lines.append(customer.email)
        if customer.phone:
            lines.append(customer.phone)
        if customer.gst_number:
            lines.append(f"GSTIN: {customer.gst_number}")
        if customer.contact_name:
            contact = f"Attn: {customer.contact_name}"
            extra = ", ".join(v for v in (customer.contact_email, customer.contact_phone) if v)
            lines.append(f"{contact} ({extra})" if extra else contact)

        height = 36 + len(lines) * 11
        self.ensure_space(height)
        pdf = self.pdf
        pdf.setFillColor(CUSTOMER_FILL)
        pdf.rect(MARGIN, self.y - height, 270, height, stroke=0, fill=1)
        pdf.setFillColor(MUTED)
        pdf.setFont("Helvetica-Bold", 8)
        pdf.drawString(MARGIN + 8, self.y - 12, "BILL TO")
        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawString(MARGIN + 8, self.y - 26, customer.company_name or customer.name or "Walk-in Customer")
        pdf.setFont("Helvetica", 9)
        for i, line in enumerate(lines):
            pdf.drawString(MARGIN + 8, self.y - 38 - i * 11, line)
        self.y -= height + 18

    def draw_table_header(self):
        pdf = self.pdf
        pdf.setFillColor(HEADER_FILL)
        pdf.rect(MARGIN, self.y - ROW_HEIGHT, CONTENT_WIDTH, ROW_HEIGHT, stroke=0, fill=1)
        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica-Bold", 8)
        text_y = self.y - ROW_HEIGHT + 5
        pdf.drawString(COL_ITEM, text_y, "PRODUCT")
        pdf.drawCentredString(COL_QTY, text_y, "QTY")
        pdf.drawRightString(COL_PRICE, text_y, "PRICE")
        pdf.drawCentredString(COL_GST, text_y, "GST")
        pdf.drawRightString(COL_TOTAL, text_y, "TOTAL")
        self.y -= ROW_HEIGHT + 4

    def draw_group_header(self, name: str):
        if self.ensure_space(ROW_HEIGHT * 2):
            self.draw_table_header()
        pdf = self.pdf
        pdf.setFillColor(GROUP_FILL)
        pdf.rect(MARGIN, self.y - 14, CONTENT_WIDTH, 14, stroke=0, fill=1)
        pdf.setFillColor(MUTED)
        pdf.setFont("Helvetica-Bold", 8)
        pdf.drawString(COL_ITEM, self.y - 10, name.upper())
        self.y -= 18

    def item_height(self, item: LineItem) -> float:
        name_lines = simpleSplit(item.name, "Helvetica-Bold", 9, ITEM_TEXT_WIDTH)
        height = max(len(name_lines) * 11 + (10 if item.sku else 0) + 8, MIN_ITEM_HEIGHT)
        if item.is_detailed:
            desc_lines = simpleSplit(item.description or "", "Helvetica", 8, ITEM_TEXT_WIDTH - IMAGE_SIZE - 8)
            height += max(IMAGE_SIZE if item.image_url else 0, len(desc_lines) * 10) + 6
        return height

    def draw_item(self, item: LineItem):
        height = self.item_height(item)
        if self.ensure_space(height):
            self.draw_table_header()
        pdf = self.pdf
        top = self.y
        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica-Bold", 9)
        name_lines = simpleSplit(item.name, "Helvetica-Bold", 9, ITEM_TEXT_WIDTH)
        for i, line in enumerate(name_lines):
            pdf.drawString(COL_ITEM, top - 10 - i * 11, line)
        cursor = top - 10 - len(name_lines) * 11

        if item.sku:
            pdf.setFont("Helvetica", 7)
            pdf.setFillColor(MUTED)
            pdf.drawString(COL_ITEM, cursor, f"SKU: {item.sku}")
            cursor -= 10

        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica", 9)
        pdf.drawCentredString(COL_QTY, top - 10, str(item.quantity))
        pdf.drawRightString(COL_PRICE, top - 10, format_money(item.custom_price))
        pdf.setFont("Helvetica", 8)
        pdf.drawCentredString(COL_GST, top - 10, f"{item.gst_rate.normalize():f}%")
        pdf.setFont("Helvetica", 7)
        pdf.setFillColor(MUTED)
        pdf.drawCentredString(COL_GST, top - 20, format_money(line_gst_amount(item)))
        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica-Bold", 9)
        pdf.drawRightString(COL_TOTAL, top - 10, format_money(item.line_total))

        if item.is_detailed:
            text_x = COL_ITEM
            if item.image_url and self.draw_image(item.image_url, COL_ITEM, cursor - IMAGE_SIZE, IMAGE_SIZE, IMAGE_SIZE):
                text_x = COL_ITEM + IMAGE_SIZE + 8
            if item.description:
                pdf.setFont("Helvetica", 8)
                pdf.setFillColor(MUTED)
                for i, line in enumerate(simpleSplit(item.description, "Helvetica", 8, ITEM_TEXT_WIDTH - IMAGE_SIZE - 8)):
                    pdf.drawString(text_x, cursor - 8 - i * 10, line)
                pdf.setFillColor(colors.black)

        self.y = top - height
        pdf.setStrokeColor(HEADER_FILL)
        pdf.line(MARGIN, self.y + 2, PAGE_WIDTH - MARGIN, self.y + 2)

    def draw_items(self):
        groups = group_items(self.document.items)
        self.ensure_space(ROW_HEIGHT * 3)
        self.draw_table_header()
        for name, items in groups.items():
            if len(groups) > 1:
                self.draw_group_header(name)
            for item in items:
                self.draw_item(item)
        self.y -= 10

    def draw_totals(self):
        totals = self.document.totals
        rows = [("Subtotal", format_money(totals.subtotal))]
        if totals.discount:
            rows.append(("Discount", f"-{format_money(totals.discount)}"))
        rows.append((f"GST ({totals.tax_rate.normalize():f}%)", format_money(totals.tax)))
        if totals.shipping_cost:
            rows.append(("Shipping", format_money(totals.shipping_cost)))

        self.ensure_space(len(rows) * 14 + 30)
        pdf = self.pdf
        label_x = PAGE_WIDTH - MARGIN - 180
        pdf.setFont("Helvetica", 9)
        pdf.setFillColor(colors.black)
        for label, value in rows:
            pdf.drawString(label_x, self.y - 10, f"{label}:")
            pdf.drawRightString(COL_TOTAL, self.y - 10, value)
            self.y -= 14
        pdf.setStrokeColor(colors.black)
        pdf.line(label_x, self.y - 2, COL_TOTAL, self.y - 2)
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawString(label_x, self.y - 16, "Grand Total:")
        pdf.setFillColor(ACCENT)
        pdf.drawRightString(COL_TOTAL, self.y - 16, f"Rs. {format_money(totals.total)}")
        pdf.setFillColor(colors.black)
        self.y -= 34

    def draw_text_block(self, title: str, text: str):
        lines = []
        for paragraph in text.splitlines() or [""]:
            lines.extend(simpleSplit(paragraph, "Helvetica", 8, CONTENT_WIDTH) or [""])
        self.ensure_space(24)
        pdf = self.pdf
        pdf.setFont("Helvetica-Bold", 8)
        pdf.setFillColor(MUTED)
        pdf.drawString(MARGIN, self.y - 10, title.upper())
        self.y -= 22
        pdf.setFont("Helvetica", 8)
        for line in lines:
            if self.ensure_space(11):
                pdf.setFont("Helvetica", 8)
                pdf.setFillColor(MUTED)
            pdf.drawString(MARGIN, self.y, line)
            self.y -= 11
        pdf.setFillColor(colors.black)
        self.y -= 8

    def draw_footer(self):
        pdf = self.pdf
        pdf.setStrokeColor(HEADER_FILL)
        pdf.line(MARGIN, FOOTER_Y + 14, PAGE_WIDTH - MARGIN, FOOTER_Y + 14)
        pdf.setFont("Helvetica", 7)
        pdf.setFillColor(MUTED)
        pdf.drawCentredString(PAGE_WIDTH / 2, FOOTER_Y, FOOTER_TEXT)
        pdf.drawRightString(PAGE_WIDTH - MARGIN, FOOTER_Y, f"Page {self.page_number}")
        pdf.setFillColor(colors.black)

    def render(self) -> bytes:
        self.draw_header()
        self.draw_customer()
        self.draw_items()
        if self.document.show_total:
            self.draw_totals()
        self.draw_text_block("Terms & Conditions", self.document.terms_and_conditions or DEFAULT_TERMS)
        if self.document.comments:
            self.draw_text_block("Comments", self.document.comments)
        self.draw_footer()
        self.pdf.save()
        return self.buffer.getvalue()


def render_quotation_pdf(document: QuotationDocument, logo_path: Optional[str] = None) -> bytes:
    renderer = QuotationPdfRenderer(document, logo_path=logo_path)
    pdf_bytes = renderer.render()
    logger.info(
        "Rendered quotation %s: %d items, %d pages", document.quotation_number, len(document.items), renderer.page_number
    )
    return pdf_bytes


# --------------------------
# Builders
# --------------------------
def customer_block(customer: Any, snapshot: Optional[dict] = None) -> CustomerBlock:
    # The snapshot taken at save time wins over the live customer record
    if snapshot:
        return CustomerBlock(**{k: v for k, v in snapshot.items() if k in CustomerBlock.model_fields})
    if customer is None:
        return CustomerBlock()
    contact = getattr(customer, "primary_contact", None)
    return CustomerBlock(
        name=customer.name,
        company_name=customer.company_name,
        email=customer.email,
        phone=customer.phone,
        gst_number=customer.gst_number,
        address=customer.address,
        contact_name=contact.name if contact else None,
        contact_email=contact.email if contact else None,
        contact_phone=contact.phone if contact else None,
    )


def line_item_from_record(record: Any) -> LineItem:
    return LineItem(
        product_id=record.product_id,
        name=record.product_name,
        sku=record.sku,
        slug=record.slug,
        category_name=record.category_name,
        sub_category_name=record.sub_category_name,
        brand_name=record.brand_name,
        image_url=record.image_url,
        description=record.description,
        mrp=record.mrp or 0,
        dealer_price=record.dealer_price,
        base_price=record.base_price or 0,
        price_mode=record.price_mode or "mrp",
        custom_price=record.unit_price,
        discount=record.discount or 0,
        quantity=record.quantity,
        gst_rate=record.gst_rate if record.gst_rate is not None else 18,
        is_detailed=bool(record.is_detailed),
    )


def build_document_from_quotation(quotation: Any) -> QuotationDocument:
    items = [line_item_from_record(item) for item in quotation.items]
    totals = compute_totals(items, quotation.tax_rate)
    return QuotationDocument(
        quotation_number=quotation.quotation_number,
        reference_number=quotation.reference_number,
        issue_date=quotation.issue_date,
        valid_until=quotation.valid_until,
        payment_terms=quotation.payment_terms,
        delivery_terms=quotation.delivery_terms,
        customer=customer_block(quotation.customer, quotation.customer_snapshot),
        items=items,
        totals=totals,
        show_total=quotation.show_total is not False,
        terms_and_conditions=quotation.terms_and_conditions,
        comments=quotation.notes,
    )
