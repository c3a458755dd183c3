"""
Thermal receipt PDF generation
"""
from pos_ledger.models import PaymentMethod, Transaction
from pos_ledger.pdf_service import ReceiptPDFGenerator
from pos_ledger.receipt_service import StoreInfo


class TestReceiptPDFGenerator:

    def test_generates_pdf_bytes(self, store_info, chips, regular_fuel):
        t = Transaction(
            transaction_number=4,
            retail_items=(chips,),
            fuel_items=(regular_fuel,),
            payment_method=PaymentMethod.CARD,
            total_amount="17.50",
            change_amount="0"
        )
        pdf = ReceiptPDFGenerator(store_info).generate_pdf(t)
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 500

    def test_fuel_only_cash_sale(self, store_info, regular_fuel):
        t = Transaction(
            transaction_number=1,
            fuel_items=(regular_fuel,),
            payment_method=PaymentMethod.CASH,
            total_amount="15.00",
            change_amount="5.00"
        )
        assert ReceiptPDFGenerator(store_info).generate_pdf(t).startswith(b"%PDF")

    def test_markup_characters_in_store_name(self, chips):
        info = StoreInfo(name="Fuel & Go <Main St>", address_lines=("1 Road",), phone="")
        t = Transaction(
            transaction_number=2,
            retail_items=(chips,),
            payment_method=PaymentMethod.CASH,
            total_amount="2.50",
            change_amount="0"
        )
        assert ReceiptPDFGenerator(info).generate_pdf(t).startswith(b"%PDF")
