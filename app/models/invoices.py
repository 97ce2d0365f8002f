# app/models/invoices.py

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

InvoiceStatus = Literal["pending", "paid"]

# invoices.amount is a 32-bit integer column of cents
MAX_AMOUNT_CENTS = 2_147_483_647
MAX_AMOUNT = Decimal(MAX_AMOUNT_CENTS) / 100


def to_cents(amount: Decimal) -> int:
    """Dollars to whole cents, rounding half up: Decimal("99.999") -> 10000."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class InvoiceRow(BaseModel):
    """One line of the invoices table: the invoice joined with its customer."""

    id: UUID
    customer_id: UUID
    name: str
    email: str
    image_url: str
    date: date
    amount: int  # cents
    # Not narrowed: rows written outside this service may carry other values
    status: str

    class Config:
        from_attributes = True


class InvoicesPage(BaseModel):
    items: List[InvoiceRow]
    total_pages: int


class InvoiceForm(BaseModel):
    """An invoice as loaded into the edit form, amount in dollars."""

    id: UUID
    customer_id: UUID
    amount: Decimal
    status: InvoiceStatus


class CreateInvoice(BaseModel):
    """Submitted invoice fields, shared by create and update."""

    model_config = ConfigDict(str_strip_whitespace=True)

    customer_id: UUID
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    status: InvoiceStatus

    @field_validator("amount")
    @classmethod
    def amount_fits_in_cents(cls, value: Decimal) -> Decimal:
        # Upper bound first: quantize overflows on large exponents
        if value > MAX_AMOUNT or to_cents(value) < 1:
            raise ValueError("amount must be between $0.01 and $21,474,836.47")
        return value


UpdateInvoice = CreateInvoice


class ActionState(BaseModel):
    """
    Outcome of an invoice mutation.

    `errors` maps a field name to its messages when `status == "invalid"`;
    `values` echoes what was submitted so a form can be redisplayed.
    """

    status: Literal["ok", "invalid", "not_found", "error"]
    message: Optional[str] = None
    errors: Dict[str, List[str]] = Field(default_factory=dict)
    values: Optional[Dict[str, Optional[str]]] = None
    invoice_id: Optional[UUID] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"
