"""
PDF Invoice Generation Service
Creates A4 tax invoices with line items, schemes and H1 prescriber details
"""
from io import BytesIO
from datetime import datetime
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER

from pharmabill.billing.checkout import Invoice
from pharmabill.core.config import settings


def _money(value) -> str:
    return f"Rs. {float(value):,.2f}"


def generate_invoice_pdf(invoice: Invoice, store_name: Optional[str] = None) -> BytesIO:
    """
    Generate PDF for a finalized invoice

    Args:
        invoice: Invoice returned by checkout (or rebuilt from storage)
        store_name: Header override (defaults to settings.STORE_NAME)

    Returns:
        BytesIO buffer containing PDF data
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=0.5*inch, bottomMargin=0.5*inch)

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=22,
        textColor=colors.HexColor('#1a56db'),
        alignment=TA_CENTER,
        spaceAfter=6
    )

    heading_style = ParagraphStyle(
        'CustomHeading',
        parent=styles['Heading2'],
        fontSize=13,
        textColor=colors.HexColor('#1f2937'),
        spaceAfter=6
    )

    normal_style = ParagraphStyle(
        'CustomNormal',
        parent=styles['Normal'],
        fontSize=9,
        textColor=colors.HexColor('#374151')
    )

    # Title
    elements.append(Paragraph(escape(store_name or settings.STORE_NAME), title_style))
    elements.append(Paragraph(f"{escape(settings.STORE_TAGLINE)} - TAX INVOICE", ParagraphStyle(
        'Subtitle', parent=normal_style, alignment=TA_CENTER)))
    elements.append(Spacer(1, 0.25*inch))

    # Bill-to and invoice info
    info_data = [
        [
            Paragraph(f"<b>Bill To:</b><br/>{escape(invoice.customer_name)}", normal_style),
            Paragraph(f"<b>Invoice #:</b> {invoice.number}<br/>"
                      f"<b>Date:</b> {invoice.created_at.strftime('%d %b %Y, %I:%M %p')}", normal_style)
        ]
    ]
    info_table = Table(info_data, colWidths=[3.5*inch, 3.5*inch])
    info_table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.2*inch))

    # Line items
    header = ["Product", "Batch", "Exp", "Sch", "Qty+Free", "Rate", "Net Rate", "Amount"]
    items_data = [[Paragraph(f"<b>{h}</b>", normal_style) for h in header]]
    for item in invoice.items:
        product = item.product
        items_data.append([
            Paragraph(escape(product.name), normal_style),
            product.batch,
            product.expiry or "-",
            product.schedule.value,
            f"{item.billed_qty}+{item.free_qty}",
            f"{float(product.rate):.2f}",
            f"{float(item.net_rate):.2f}",
            f"{float(item.amount):.2f}",
        ])

    items_table = Table(
        items_data,
        colWidths=[2.1*inch, 0.8*inch, 0.8*inch, 0.45*inch, 0.75*inch, 0.65*inch, 0.7*inch, 0.85*inch],
        repeatRows=1,
    )
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f3f4f6')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.HexColor('#1f2937')),
        ('ALIGN', (4, 1), (-1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 1), (-1, -1), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#fafafa')]),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.2*inch))

    # Totals with flat GST estimate
    gst_rate_percent = float(invoice.gst_rate) * 100
    total_data = [
        ['', Paragraph("<b>Taxable:</b>", normal_style), Paragraph(_money(invoice.total_amount), normal_style)],
        ['', Paragraph(f"<b>GST est. ({gst_rate_percent:.0f}%):</b>", normal_style),
         Paragraph(_money(invoice.gst_amount), normal_style)],
        ['', Paragraph("<b>PAYABLE:</b>", heading_style), Paragraph(f"<b>{_money(invoice.payable_amount)}</b>", heading_style)],
    ]
    total_table = Table(total_data, colWidths=[4.3*inch, 1.4*inch, 1.4*inch])
    total_table.setStyle(TableStyle([
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('LINEABOVE', (1, 2), (-1, 2), 1, colors.black),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    elements.append(total_table)

    # Schedule H1 register block
    if invoice.doctor_details:
        details = invoice.doctor_details
        elements.append(Spacer(1, 0.3*inch))
        elements.append(Paragraph("<b>Schedule H1 - Prescription Details</b>", heading_style))
        elements.append(Paragraph(
            f"<b>Doctor:</b> {escape(details.doctor_name)}<br/>"
            f"<b>Patient:</b> {escape(details.patient_name)}<br/>"
            f"<b>Rx No:</b> {escape(details.rx_number) or '-'}",
            normal_style,
        ))

    # Footer
    footer_style = ParagraphStyle(
        'Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER
    )
    elements.append(Spacer(1, 0.5*inch))
    elements.append(Paragraph("GST shown is an estimate. Thank you for your business!", footer_style))
    elements.append(Paragraph(f"Invoice generated on {datetime.now().strftime('%d %b %Y at %I:%M %p')}", footer_style))

    doc.build(elements)

    buffer.seek(0)
    return buffer
