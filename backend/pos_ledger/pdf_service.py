"""
Receipt PDF Generation Service

Generates an 80mm thermal-paper receipt with:
- Header: "Gas Prices / Self Serve", store name, address, phone
- Identification block: GST, transaction #, date/time, S/S, terminal, authorization
- Item table: retail products, then gasoline
- Totals and payment footer

Filename format: "receipt_NNNNN.pdf" (assigned by ReceiptWriter)
"""

from reportlab.lib.units import inch, mm
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.enums import TA_CENTER
from datetime import timezone, tzinfo
from typing import List
from io import BytesIO
from xml.sax.saxutils import escape
import logging

from pos_ledger.financial_precision import format_currency, format_litres
from pos_ledger.models import PaymentMethod, Transaction
from pos_ledger.receipt_service import StoreInfo, generate_regulatory_numbers

logger = logging.getLogger(__name__)


class ReceiptPDFGenerator:
    """Generate thermal-format receipt PDFs"""

    THERMAL_WIDTH = 80 * mm
    THERMAL_HEIGHT = 11 * inch
    MARGIN = 5 * mm

    def __init__(self, store_info: StoreInfo, display_tz: tzinfo = timezone.utc):
        self.store_info = store_info
        self.display_tz = display_tz
        self.content_width = self.THERMAL_WIDTH - 2 * self.MARGIN
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom paragraph styles"""
        self.styles.add(ParagraphStyle(
            name='ReceiptTitle',
            parent=self.styles['Heading1'],
            fontSize=12,
            alignment=TA_CENTER,
            spaceAfter=4,
            fontName='Helvetica-Bold'
        ))

        self.styles.add(ParagraphStyle(
            name='ReceiptStore',
            parent=self.styles['Normal'],
            fontSize=8,
            alignment=TA_CENTER,
            leading=10
        ))

        self.styles.add(ParagraphStyle(
            name='ReceiptSection',
            parent=self.styles['Normal'],
            fontSize=8,
            spaceBefore=6,
            spaceAfter=2,
            fontName='Helvetica-Bold'
        ))

        self.styles.add(ParagraphStyle(
            name='ReceiptFooter',
            parent=self.styles['Normal'],
            fontSize=8,
            alignment=TA_CENTER,
            spaceBefore=8,
            fontName='Helvetica-Bold'
        ))

    def generate_pdf(self, transaction: Transaction) -> bytes:
        """
        Generate a receipt PDF

        Args:
            transaction: Persisted transaction to print

        Returns:
            PDF bytes
        """
        buffer = BytesIO()

        doc = SimpleDocTemplate(
            buffer,
            pagesize=(self.THERMAL_WIDTH, self.THERMAL_HEIGHT),
            rightMargin=self.MARGIN,
            leftMargin=self.MARGIN,
            topMargin=self.MARGIN,
            bottomMargin=self.MARGIN
        )

        story = []
        story.extend(self._build_header())
        story.extend(self._build_identification(transaction))
        story.extend(self._build_items(transaction))
        story.extend(self._build_totals(transaction))
        story.append(Paragraph(
            f"THANK YOU FOR SHOPPING AT {escape(self.store_info.name.upper())}",
            self.styles['ReceiptFooter']
        ))

        doc.build(story)
        pdf_bytes = buffer.getvalue()
        buffer.close()

        logger.info(f"[RECEIPT] Generated PDF for transaction #{transaction.transaction_number} ({len(pdf_bytes)} bytes)")
        return pdf_bytes

    # -------------------------------------------------------------------------

    def _build_header(self) -> List:
        elements = [
            Paragraph("Gas Prices<br/>Self Serve", self.styles['ReceiptTitle']),
            Paragraph(escape(self.store_info.name), self.styles['ReceiptStore']),
        ]
        for line in self.store_info.address_lines:
            elements.append(Paragraph(escape(line), self.styles['ReceiptStore']))
        if self.store_info.phone:
            elements.append(Paragraph(escape(self.store_info.phone), self.styles['ReceiptStore']))
        elements.append(Spacer(1, 4 * mm))
        return elements

    def _build_identification(self, transaction: Transaction) -> List:
        numbers = generate_regulatory_numbers(transaction.transaction_number)
        when = transaction.timestamp.astimezone(self.display_tz)

        data = [
            ["GST:", numbers.gst, "TRANSACTION #:", str(transaction.transaction_number)],
            ["DATE:", f"{when:%Y-%m-%d}", "TIME:", f"{when:%H:%M}"],
            ["S/S:", numbers.service_station, "TERMINAL:", numbers.terminal],
            ["AUTH #:", numbers.authorization, "", ""],
        ]
        table = Table(data, colWidths=[self.content_width * w for w in (0.15, 0.32, 0.30, 0.23)])
        table.setStyle(self._compact_style())
        return [table, Spacer(1, 3 * mm)]

    def _build_items(self, transaction: Transaction) -> List:
        elements = []

        elements.append(Paragraph("RETAIL PRODUCT", self.styles['ReceiptSection']))
        retail_rows = [
            [str(item.quantity), item.product_name, format_currency(item.total_price)]
            for item in transaction.retail_items
        ]
        if retail_rows:
            elements.append(self._item_table(retail_rows))

        elements.append(Paragraph("GASOLINE", self.styles['ReceiptSection']))
        fuel_rows = [
            [f"{format_litres(item.quantity_litres)}L", item.product_name, format_currency(item.total_price)]
            for item in transaction.fuel_items
        ]
        if fuel_rows:
            elements.append(self._item_table(fuel_rows))

        return elements

    def _build_totals(self, transaction: Transaction) -> List:
        total = format_currency(transaction.total_amount)
        data = [
            [f"{transaction.item_count} Items", "SUBTOTAL:", total],
            ["", "TOTAL:", total],
        ]
        if transaction.payment_method == PaymentMethod.CARD:
            card_tail = generate_regulatory_numbers(transaction.transaction_number).card_tail
            data.append([f"VISA CARD XXXX{card_tail}", "CONTACTLESS", ""])
        else:
            data.append(["CASH", "", ""])
        data.append(["", "TENDERED:", format_currency(transaction.tendered_amount)])
        data.append(["", "CASH CHANGE:", format_currency(transaction.change_amount)])

        table = Table(data, colWidths=[self.content_width * w for w in (0.40, 0.35, 0.25)])
        style = self._compact_style()
        style.add('ALIGN', (2, 0), (2, -1), 'RIGHT')
        style.add('LINEABOVE', (0, 0), (-1, 0), 0.5, colors.black)
        style.add('FONTNAME', (1, 1), (2, 1), 'Helvetica-Bold')
        table.setStyle(style)
        return [Spacer(1, 3 * mm), table]

    def _item_table(self, rows: List[List[str]]) -> Table:
        table = Table(rows, colWidths=[self.content_width * w for w in (0.22, 0.53, 0.25)])
        style = self._compact_style()
        style.add('ALIGN', (2, 0), (2, -1), 'RIGHT')
        table.setStyle(style)
        return table

    @staticmethod
    def _compact_style() -> TableStyle:
        return TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 7),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LEFTPADDING', (0, 0), (-1, -1), 1),
            ('RIGHTPADDING', (0, 0), (-1, -1), 1),
            ('TOPPADDING', (0, 0), (-1, -1), 1),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 1),
        ])
