# app/api/dashboard.py

from typing import List

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_data, require_user
from app.lib.formatting import generate_y_axis
from app.models.customers import TopCustomer
from app.models.dashboard import CardData, LatestInvoice, RevenueChartOut
from app.services.data import DashboardData

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(require_user)],
)


@router.get("/revenue", response_model=RevenueChartOut)
async def revenue_chart(data: DashboardData = Depends(get_data)) -> RevenueChartOut:
    months = await data.fetch_revenue()
    labels, top_label = generate_y_axis(months)
    return RevenueChartOut(months=months, y_axis_labels=labels, top_label=top_label)


@router.get("/cards", response_model=CardData)
async def cards(data: DashboardData = Depends(get_data)) -> CardData:
    return await data.fetch_card_data()


@router.get("/latest-invoices", response_model=List[LatestInvoice])
async def latest_invoices(
    limit: int = Query(5, ge=1, le=50),
    data: DashboardData = Depends(get_data),
) -> List[LatestInvoice]:
    return await data.fetch_latest_invoices(limit)


@router.get("/top-customers", response_model=List[TopCustomer])
async def top_customers(
    limit: int = Query(5, ge=1, le=50),
    data: DashboardData = Depends(get_data),
) -> List[TopCustomer]:
    return await data.fetch_top_customers(limit)
