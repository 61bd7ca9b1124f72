"""
Receipt rendering for sales.

Formats:
- JSON receipt data for the till front-end
- HTML receipts for browser printing (80mm)
- Plain text for 58mm thermal printers (32 columns)
- PDF receipts (reportlab) for sharing
- A4 invoice HTML
"""
import base64
import io
import logging
import re
from decimal import Decimal
from typing import Optional
from urllib.parse import quote
from xml.sax.saxutils import escape

import qrcode
from django.template.loader import render_to_string
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch, mm
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import HRFlowable

from retailpos.departments.models import BusinessSettings
from retailpos.perfume.pricing import MIXTURE_SEPARATOR

logger = logging.getLogger(__name__)

TEXT_WIDTH = 32
WHATSAPP_GREETING = "Hello! I'd like to connect."


def format_amount(value):
    """1234567 -> '1,234,567'; keeps cents only when there are any"""
    value = Decimal(str(value or 0))
    if value == value.to_integral_value():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def whatsapp_link(number, message=WHATSAPP_GREETING):
    digits = re.sub(r'\D', '', number or '')
    return f"https://wa.me/{digits}?text={quote(message)}"


def whatsapp_qr_data_url(number) -> Optional[str]:
    """PNG data URL of a QR code opening a WhatsApp chat, or None"""
    if not number or not re.sub(r'\D', '', number):
        return None
    try:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=6,
            border=1,
        )
        qr.add_data(whatsapp_link(number))
        qr.make(fit=True)
        image = qr.make_image(fill_color='black', back_color='white')
        buffer = io.BytesIO()
        image.save(buffer, format='PNG')
        return 'data:image/png;base64,' + base64.b64encode(buffer.getvalue()).decode('utf-8')
    except Exception as e:
        # A receipt without a QR code is still a receipt
        logger.warning(f"QR code generation failed for {number}: {e}")
        return None


def _local_time(value):
    return timezone.localtime(value).strftime('%d/%m/%Y %H:%M')


def receipt_data(sale, business=None):
    """Everything a receipt shows, as plain values"""
    business = business or BusinessSettings.for_department(sale.department_id)
    items = []
    for item in sale.items.all():
        items.append({
            'name': item.name,
            'quantity': item.quantity,
            'unit_price': item.unit_price,
            'total': item.total,
            'unit_price_display': format_amount(item.unit_price),
            'total_display': format_amount(item.total),
            'ml_amount': item.ml_amount,
            'customer_type': item.customer_type,
            'scent_mixture': item.scent_mixture,
            'scents': [s.strip() for s in (item.scent_mixture or '').split(MIXTURE_SEPARATOR) if s.strip()],
        })

    discount = sale.displayed_discount
    return {
        'receipt_number': sale.receipt_number,
        'sale_number': sale.sale_number,
        'invoice_number': sale.invoice_number,
        'date': _local_time(sale.created_at),
        'cashier_name': sale.cashier_name or 'Staff',
        'customer_name': sale.customer.name if sale.customer_id else None,
        'customer_phone': sale.customer.phone if sale.customer_id else None,
        'department_name': sale.department.name,
        'payment_method': sale.payment_method,
        'status': sale.status,
        'items': items,
        'subtotal': sale.subtotal,
        'discount': discount,
        'tax': sale.tax,
        'total': sale.total,
        'amount_paid': sale.amount_paid,
        'change_amount': sale.change_amount,
        'currency': business.currency or 'UGX',
        'business': {
            'name': business.business_name,
            'address': business.business_address or '',
            'phone': business.business_phone or '',
            'email': business.business_email or '',
            'website': business.website or '',
            'whatsapp': business.whatsapp_number or '',
            'logo': business.receipt_logo_url or business.logo_url or '',
        },
        'footer': business.receipt_footer or '',
        'seasonal_remark': business.seasonal_remark or '',
        'show_back_page': business.show_back_page,
    }


def _template_context(sale):
    data = receipt_data(sale)
    data.update({
        'subtotal_display': format_amount(data['subtotal']),
        'discount_display': format_amount(data['discount']),
        'tax_display': format_amount(data['tax']),
        'total_display': format_amount(data['total']),
        'amount_paid_display': format_amount(data['amount_paid']),
        'change_display': format_amount(data['change_amount']),
        'payment_method_display': (data['payment_method'] or 'N/A').replace('_', ' ').upper(),
        'qr_code_url': whatsapp_qr_data_url(data['business']['whatsapp']),
    })
    return data


def render_receipt_html(sale):
    return render_to_string('pos/receipt.html', _template_context(sale))


def render_invoice_html(sale):
    context = _template_context(sale)
    context['document_number'] = sale.invoice_number or sale.receipt_number
    return render_to_string('pos/invoice.html', context)


def _center(text, width=TEXT_WIDTH):
    return ' ' * max(0, (width - len(text)) // 2) + text


def _columns(left, right, width=TEXT_WIDTH):
    return left + ' ' * max(1, width - len(left) - len(right)) + right


def render_receipt_text(sale):
    """Plain text receipt for 58mm thermal printers"""
    data = receipt_data(sale)
    business = data['business']
    currency = data['currency']
    separator = '=' * TEXT_WIDTH
    dotted = '-' * TEXT_WIDTH

    lines = [_center(business['name']), _center(business['address']), _center(f"Tel: {business['phone']}"), separator]
    lines.append(f"Receipt: {data['receipt_number']}")
    lines.append(f"Date: {data['date']}")
    lines.append(f"Cashier: {data['cashier_name']}")
    lines.append(f"Dept: {data['department_name']}")
    lines.append(dotted)

    for item in data['items']:
        lines.append(item['name'][:20])
        lines.append(_columns(f"  x{item['quantity']} @ {item['unit_price_display']}", item['total_display']))
        for scent in item['scents']:
            lines.append(f"  - {scent[:26]}")

    lines.append(dotted)
    lines.append(_columns('Subtotal:', f"{format_amount(data['subtotal'])} {currency}"))
    if data['discount'] > 0:
        lines.append(_columns('Discount:', f"-{format_amount(data['discount'])} {currency}"))
    lines.append(separator)
    lines.append(_columns('TOTAL:', f"{format_amount(data['total'])} {currency}"))
    lines.append(separator)
    lines.append(_center(f"Paid by: {(data['payment_method'] or 'N/A').upper()}"))

    if data['customer_name']:
        lines.append(dotted)
        lines.append(f"Customer: {data['customer_name']}")
        if data['customer_phone']:
            lines.append(f"Phone: {data['customer_phone']}")

    lines.append(dotted)
    lines.append(_center('THANK YOU!'))
    lines.append(_center('Visit again'))
    if data['seasonal_remark']:
        lines.append(_center(data['seasonal_remark']))
    if business['whatsapp']:
        lines.append(_center(f"WhatsApp: {business['whatsapp']}"))
    return '\n'.join(lines) + '\n\n\n'


class ReceiptPDF:
    """80mm receipt as a PDF document"""

    WIDTH = 80 * mm
    MARGIN = 4 * mm

    def __init__(self, sale):
        self.sale = sale
        self.data = receipt_data(sale)
        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            'ReceiptTitle', parent=styles['Heading1'], fontSize=12, spaceAfter=4,
            alignment=1, fontName='Helvetica-Bold',
        )
        self.body_style = ParagraphStyle(
            'ReceiptBody', parent=styles['Normal'], fontSize=8, spaceAfter=2, alignment=0,
        )
        self.center_style = ParagraphStyle('ReceiptCenter', parent=self.body_style, alignment=1)
        self.total_style = ParagraphStyle(
            'ReceiptTotal', parent=styles['Normal'], fontSize=10, alignment=2, fontName='Helvetica-Bold',
        )

    def render(self) -> bytes:
        buffer = io.BytesIO()
        height = (120 + 12 * len(self.data['items'])) * mm
        doc = SimpleDocTemplate(
            buffer,
            pagesize=(self.WIDTH, height),
            rightMargin=self.MARGIN,
            leftMargin=self.MARGIN,
            topMargin=self.MARGIN,
            bottomMargin=self.MARGIN,
            title=f"Receipt {self.data['receipt_number']}",
        )
        doc.build(self._story())
        pdf = buffer.getvalue()
        buffer.close()
        return pdf

    def _story(self):
        data = self.data
        business = data['business']
        currency = data['currency']
        story = [Paragraph(escape(business['name']), self.title_style)]
        for line in (business['address'], business['phone'] and f"Tel: {business['phone']}"):
            if line:
                story.append(Paragraph(escape(line), self.center_style))
        story.append(HRFlowable(width='100%', thickness=1, color=colors.black))
        story.append(Spacer(1, 4))
        story.append(Paragraph(f"Receipt #: {data['receipt_number']}", self.body_style))
        story.append(Paragraph(f"Date: {data['date']} | Cashier: {data['cashier_name']}", self.body_style))
        story.append(Spacer(1, 4))

        rows = [['Item', 'Qty', 'Unit', 'Total']]
        for item in data['items']:
            rows.append([Paragraph(escape(item['name']), self.body_style), str(item['quantity']),
                         item['unit_price_display'], item['total_display']])
            if item['scents']:
                mixed = '<br/>'.join(f"+ {escape(scent)}" for scent in item['scents'])
                rows.append([Paragraph(f"<b>Scents Mixed:</b><br/>{mixed}", self.body_style), '', '', ''])
        table = Table(rows, colWidths=[32 * mm, 8 * mm, 14 * mm, 17 * mm])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 7),
            ('LINEBELOW', (0, 0), (-1, 0), 0.5, colors.black),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]))
        story.append(table)
        story.append(Spacer(1, 4))
        story.append(HRFlowable(width='100%', thickness=1, color=colors.black))

        story.append(Paragraph(f"Subtotal: {format_amount(data['subtotal'])} {currency}", self.body_style))
        story.append(Paragraph(f"Discount: {format_amount(data['discount'])} {currency}", self.body_style))
        story.append(Paragraph(f"TOTAL PAID: {format_amount(data['total'])} {currency}", self.total_style))
        story.append(Spacer(1, 4))
        story.append(Paragraph(
            f"Payment Mode: {(data['payment_method'] or 'N/A').replace('_', ' ').upper()}", self.center_style
        ))
        story.append(Paragraph(f"Customer: {data['customer_name'] or 'Walk-in'}", self.center_style))
        story.append(Spacer(1, 6))
        story.append(Paragraph('<b>THANK YOU! Visit again.</b>', self.center_style))
        if data['seasonal_remark']:
            story.append(Paragraph(data['seasonal_remark'], self.center_style))

        qr_image = self._whatsapp_qr(business['whatsapp'])
        if qr_image is not None:
            story.append(Spacer(1, 4))
            story.append(qr_image)
            story.append(Paragraph(f"WhatsApp: {business['whatsapp']}", self.center_style))
        return story

    def _whatsapp_qr(self, number):
        data_url = whatsapp_qr_data_url(number)
        if not data_url:
            return None
        raw = base64.b64decode(data_url.split(',', 1)[1])
        image = Image(io.BytesIO(raw), width=1 * inch, height=1 * inch)
        image.hAlign = 'CENTER'
        return image


def render_receipt_pdf(sale) -> bytes:
    return ReceiptPDF(sale).render()
