# app/api/customers.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_data, require_user
from app.models.customers import CustomerField, CustomerTableRow
from app.services.data import DashboardData

router = APIRouter(
    prefix="/customers",
    tags=["customers"],
    dependencies=[Depends(require_user)],
)


@router.get("/", response_model=List[CustomerTableRow])
async def list_customers(
    query: str = Query("", description="Matches customer name or email"),
    data: DashboardData = Depends(get_data),
) -> List[CustomerTableRow]:
    """
    Return customers with their invoice totals, ordered by name.
    """
    return await data.fetch_filtered_customers(query)


@router.get("/names", response_model=List[CustomerField])
async def customer_names(data: DashboardData = Depends(get_data)) -> List[CustomerField]:
    """
    Id, name and avatar of every customer, for select inputs.
    """
    return await data.fetch_customers()


@router.get("/{customer_id}", response_model=CustomerTableRow)
async def get_customer(
    customer_id: str, data: DashboardData = Depends(get_data)
) -> CustomerTableRow:
    """
    Return a single customer with invoice totals.
    """
    customer = await data.fetch_customer_by_id(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer
