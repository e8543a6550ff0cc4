"""
Sale receipt generation.

Renders a completed sale as a PDF (for printing or download) and as plain
text (for the thermal printer bridge).
"""
from io import BytesIO
from decimal import Decimal
from reportlab.lib.pagesizes import A5
from reportlab.lib.units import mm
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER

from pharmaflow.core.config import settings
from pharmaflow.models.sale import Sale, SaleItem
from pharmaflow.services.loyalty import effective_unit_price


def line_total(item: SaleItem) -> Decimal:
    """Effective unit price x quantity, less the line discount percent."""
    price = Decimal(str(effective_unit_price(item.price, item.is_unit, item.units_per_pack)))
    gross = price * item.quantity
    discount = Decimal(str(item.discount or 0))
    return (gross * (Decimal("100") - discount) / Decimal("100")).quantize(Decimal("0.01"))


def _amount(value) -> str:
    return f"{float(value or 0):.2f} {settings.CURRENCY}"


def generate_receipt_pdf(sale: Sale) -> BytesIO:
    """
    Build the receipt PDF for a sale.

    Returns:
        BytesIO buffer positioned at the start
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A5, topMargin=10*mm, bottomMargin=10*mm,
                            leftMargin=10*mm, rightMargin=10*mm)

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'ReceiptTitle',
        parent=styles['Heading1'],
        fontSize=16,
        textColor=colors.HexColor('#0f766e'),
        alignment=TA_CENTER,
        spaceAfter=4
    )
    normal_style = ParagraphStyle(
        'ReceiptNormal',
        parent=styles['Normal'],
        fontSize=9,
        textColor=colors.HexColor('#374151')
    )
    footer_style = ParagraphStyle(
        'ReceiptFooter',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER
    )

    elements.append(Paragraph(settings.PHARMACY_NAME, title_style))
    elements.append(Paragraph(
        f"<b>Receipt #:</b> {sale.id} &nbsp; <b>Order:</b> {sale.daily_order_number}<br/>"
        f"<b>Date:</b> {sale.date.strftime('%d %b %Y, %I:%M %p')}<br/>"
        f"<b>Customer:</b> {sale.customer_name}"
        + (f" ({sale.customer_code})" if sale.customer_code else "")
        + f"<br/><b>Payment:</b> {sale.payment_method.upper()}",
        normal_style,
    ))
    if sale.sale_type == "delivery" and sale.customer_address:
        elements.append(Paragraph(f"<b>Deliver to:</b> {sale.customer_address}", normal_style))
    elements.append(Spacer(1, 4*mm))

    rows = [["Item", "Qty", "Price", "Total"]]
    for item in sale.items:
        unit_label = "unit" if item.is_unit else "pack"
        price = effective_unit_price(item.price, item.is_unit, item.units_per_pack)
        rows.append([
            Paragraph(item.name, normal_style),
            f"{item.quantity} {unit_label}",
            f"{price:.2f}",
            f"{line_total(item):.2f}",
        ])

    items_table = Table(rows, colWidths=[55*mm, 22*mm, 22*mm, 25*mm])
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f3f4f6')),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('LINEBELOW', (0, 0), (-1, 0), 0.5, colors.grey),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 3*mm))

    totals = []
    if sale.subtotal is not None:
        totals.append(["Subtotal:", _amount(sale.subtotal)])
    if sale.global_discount:
        totals.append(["Discount:", _amount(sale.global_discount)])
    if sale.delivery_fee:
        totals.append(["Delivery:", _amount(sale.delivery_fee)])
    totals.append(["TOTAL:", _amount(sale.total)])
    if sale.has_returns:
        totals.append(["After returns:", _amount(sale.net_total)])

    total_table = Table(totals, colWidths=[99*mm, 25*mm])
    total_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (0, -1), (-1, -1), 1, colors.black),
    ]))
    elements.append(total_table)
    elements.append(Spacer(1, 6*mm))

    if sale.points_earned:
        elements.append(Paragraph(f"Loyalty points earned: {sale.points_earned:.1f}", footer_style))
    elements.append(Paragraph("Thank you for your visit. Get well soon!", footer_style))

    doc.build(elements)
    buffer.seek(0)
    return buffer


def format_receipt_text(sale: Sale, width: int = 32) -> str:
    """Plain-text receipt sized for a thermal printer."""
    lines = [
        settings.PHARMACY_NAME.center(width),
        f"Receipt #{sale.id}  Order {sale.daily_order_number}",
        sale.date.strftime('%d/%m/%Y %H:%M'),
        f"Customer: {sale.customer_name}",
        "-" * width,
    ]
    for item in sale.items:
        lines.append(item.name[:width])
        qty = f"  {item.quantity} {'unit' if item.is_unit else 'pack'}"
        amount = f"{line_total(item):.2f}"
        lines.append(qty + amount.rjust(width - len(qty)))
    lines.append("-" * width)
    total = f"{float(sale.total):.2f} {settings.CURRENCY}"
    lines.append("TOTAL" + total.rjust(width - 5))
    return "\n".join(lines)
