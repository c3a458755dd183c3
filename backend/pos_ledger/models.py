from pydantic import BaseModel, Field, TypeAdapter, field_validator
from typing import Annotated, List, Literal, Optional, Tuple, Union
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from pos_ledger.financial_precision import (
    FinancialPrecisionError,
    calculate_line_total,
    round_currency,
    round_litres,
    to_decimal,
)


def _as_currency(value):
    try:
        return round_currency(value)
    except FinancialPrecisionError as e:
        raise ValueError(str(e))


def _as_litres(value):
    try:
        return round_litres(value)
    except FinancialPrecisionError as e:
        raise ValueError(str(e))


def _as_optional_decimal(value):
    if value is None:
        return None
    try:
        return to_decimal(value)
    except FinancialPrecisionError as e:
        raise ValueError(str(e))


# ============================================
# ENUMS
# ============================================
class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"


class FuelGrade(str, Enum):
    REGULAR = "REGULAR"
    PLUS = "PLUS"
    SUPREME = "SUPREME"
    DIESEL = "DIESEL"


# ============================================
# LINE ITEM MODELS
# ============================================
class RetailLineItem(BaseModel):
    kind: Literal["retail"] = "retail"
    product_id: int
    product_name: str
    unit_price: Decimal  # 2 dp
    quantity: int  # Must be > 0
    total_price: Decimal  # Calculated: unit_price * quantity
    product_volume_litres: Optional[Decimal] = None
    product_size_variation: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("unit_price", "total_price", mode="before")
    @classmethod
    def round_currency_fields(cls, value):
        return _as_currency(value)

    @field_validator("product_volume_litres", mode="before")
    @classmethod
    def convert_volume(cls, value):
        return _as_optional_decimal(value)

    @classmethod
    def create(
        cls,
        product_id: int,
        product_name: str,
        unit_price,
        quantity: int,
        **extra
    ) -> "RetailLineItem":
        """Build a retail line with its total computed from price and quantity."""
        return cls(
            product_id=product_id,
            product_name=product_name,
            unit_price=unit_price,
            quantity=quantity,
            total_price=calculate_line_total(round_currency(unit_price), quantity),
            **extra
        )

    @property
    def display_quantity(self) -> str:
        return str(self.quantity)


class FuelLineItem(BaseModel):
    kind: Literal["fuel"] = "fuel"
    product_id: int
    product_name: str
    fuel_grade: FuelGrade
    price_per_litre: Decimal  # 2 dp
    quantity_litres: Decimal  # 3 dp, must be > 0
    total_price: Decimal  # Calculated: price_per_litre * quantity_litres

    class Config:
        frozen = True

    @field_validator("price_per_litre", "total_price", mode="before")
    @classmethod
    def round_currency_fields(cls, value):
        return _as_currency(value)

    @field_validator("quantity_litres", mode="before")
    @classmethod
    def round_litre_fields(cls, value):
        return _as_litres(value)

    @classmethod
    def create(
        cls,
        product_id: int,
        product_name: str,
        fuel_grade: FuelGrade,
        price_per_litre,
        quantity_litres
    ) -> "FuelLineItem":
        """Build a fuel line with its total computed from price per litre and volume."""
        litres = round_litres(quantity_litres)
        return cls(
            product_id=product_id,
            product_name=product_name,
            fuel_grade=fuel_grade,
            price_per_litre=price_per_litre,
            quantity_litres=litres,
            total_price=calculate_line_total(round_currency(price_per_litre), litres)
        )

    @property
    def unit_price(self) -> Decimal:
        return self.price_per_litre

    @property
    def display_quantity(self) -> str:
        return f"{self.quantity_litres:.3f}L"


LineItem = Annotated[Union[RetailLineItem, FuelLineItem], Field(discriminator="kind")]

line_items_adapter = TypeAdapter(List[LineItem])


def parse_line_items(data: list) -> List[Union[RetailLineItem, FuelLineItem]]:
    """
    Parse raw dicts (e.g. from a cart payload) into line item models.
    Entries that are already models pass through unchanged.
    Raises pydantic.ValidationError on malformed entries.
    """
    return line_items_adapter.validate_python(data)


# ============================================
# TRANSACTION MODEL
# ============================================
class Transaction(BaseModel):
    transaction_number: int = Field(ge=1)  # Assigned by TransactionService only
    retail_items: Tuple[RetailLineItem, ...] = ()
    fuel_items: Tuple[FuelLineItem, ...] = ()
    payment_method: PaymentMethod
    total_amount: Decimal
    change_amount: Decimal  # tendered - total, >= 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        frozen = True

    @field_validator("total_amount", "change_amount", mode="before")
    @classmethod
    def round_currency_fields(cls, value):
        return _as_currency(value)

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are stored as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def tendered_amount(self) -> Decimal:
        return round_currency(self.total_amount + self.change_amount)

    @property
    def line_items(self) -> List[Union[RetailLineItem, FuelLineItem]]:
        """Retail items first, then fuel items, each in recorded order."""
        return [*self.retail_items, *self.fuel_items]

    @property
    def item_count(self) -> int:
        return len(self.retail_items) + len(self.fuel_items)

    def to_record(self) -> dict:
        """JSON-safe dict for the ledger file (decimals as strings)."""
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, record: dict) -> "Transaction":
        return cls.model_validate(record)
