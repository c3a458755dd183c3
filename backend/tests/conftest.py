"""
Shared fixtures for POS ledger tests
"""
import pytest
from decimal import Decimal

from pos_ledger.ledger_store import LedgerStore
from pos_ledger.models import FuelGrade, FuelLineItem, PaymentMethod, RetailLineItem, Transaction
from pos_ledger.receipt_service import StoreInfo
from pos_ledger.transaction_service import TransactionService


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "data" / "transactions.json"


@pytest.fixture
def store(ledger_path):
    return LedgerStore(ledger_path)


@pytest.fixture
def service(store):
    return TransactionService(store)


@pytest.fixture
def store_info():
    return StoreInfo(
        name="Shake-Stack Petrol",
        address_lines=("2808 W.Broadway", "Vancouver", "British Columbia", "V6K2G7"),
        phone="(604)-XXX-XXXX"
    )


@pytest.fixture
def chips():
    return RetailLineItem.create(product_id=1, product_name="Chips", unit_price="2.50", quantity=1)


@pytest.fixture
def water():
    # 2 x $5.00
    return RetailLineItem.create(product_id=2, product_name="Water", unit_price="5.00", quantity=2)


@pytest.fixture
def regular_fuel():
    # 10.000 L x $1.50 = $15.00
    return FuelLineItem.create(
        product_id=101,
        product_name="Regular 87",
        fuel_grade=FuelGrade.REGULAR,
        price_per_litre="1.50",
        quantity_litres="10"
    )


@pytest.fixture
def make_transaction():
    """Factory for a consistent transaction (total = sum of line totals)"""
    def _make(number, retail_items=(), fuel_items=(), payment_method=PaymentMethod.CASH, change="0.00"):
        total = sum((item.total_price for item in (*retail_items, *fuel_items)), Decimal("0.00"))
        return Transaction(
            transaction_number=number,
            retail_items=retail_items,
            fuel_items=fuel_items,
            payment_method=payment_method,
            total_amount=total,
            change_amount=change
        )
    return _make
