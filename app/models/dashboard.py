# app/models/dashboard.py

from typing import List
from uuid import UUID

from pydantic import BaseModel


class Revenue(BaseModel):
    month: str
    revenue: int  # cents

    class Config:
        from_attributes = True


class RevenueChartOut(BaseModel):
    months: List[Revenue]
    y_axis_labels: List[str]
    top_label: int


class CardData(BaseModel):
    number_of_invoices: int
    number_of_customers: int
    total_paid_invoices: str
    total_pending_invoices: str


class LatestInvoice(BaseModel):
    id: UUID
    amount: str
    name: str
    email: str
    image_url: str
