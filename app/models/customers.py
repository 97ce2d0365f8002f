# app/models/customers.py

from uuid import UUID

from pydantic import BaseModel


class CustomerField(BaseModel):
    id: UUID
    name: str
    image_url: str

    class Config:
        from_attributes = True


class CustomerTableRow(BaseModel):
    id: UUID
    name: str
    email: str
    image_url: str
    total_invoices: int
    total_pending: str
    total_paid: str


class TopCustomer(BaseModel):
    id: UUID
    name: str
    image_url: str
    total_invoices: int
    total_amount: str
    total_pending: str
    total_paid: str
