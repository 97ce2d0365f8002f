# app/api/invoices.py

import asyncio
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response

from app.api.deps import get_actions, get_data, require_user
from app.models.invoices import ActionState, InvoiceForm, InvoicesPage
from app.services.actions import InvoiceActions
from app.services.data import DashboardData

router = APIRouter(
    prefix="/invoices",
    tags=["invoices"],
    dependencies=[Depends(require_user)],
)

_STATUS_CODES = {"ok": 200, "invalid": 422, "not_found": 404, "error": 500}


def _with_status(response: Response, state: ActionState, ok_code: int = 200) -> ActionState:
    response.status_code = ok_code if state.ok else _STATUS_CODES[state.status]
    return state


@router.get("/", response_model=InvoicesPage)
async def list_invoices(
    query: str = Query("", description="Matches customer name/email, amount, date or status"),
    page: int = Query(1, ge=1),
    data: DashboardData = Depends(get_data),
) -> InvoicesPage:
    """
    One page of invoices matching `query`, plus the total page count.
    """
    items, total_pages = await asyncio.gather(
        data.fetch_filtered_invoices(query, page),
        data.fetch_invoice_pages(query),
    )
    return InvoicesPage(items=items, total_pages=total_pages)


@router.get("/{invoice_id}", response_model=InvoiceForm)
async def get_invoice(
    invoice_id: str, data: DashboardData = Depends(get_data)
) -> InvoiceForm:
    """
    Look up a single invoice for the edit form.
    """
    invoice = await data.fetch_invoice_by_id(invoice_id)
    if invoice is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.post("/", response_model=ActionState)
async def create_invoice(
    response: Response,
    payload: Dict[str, Any] = Body(...),
    actions: InvoiceActions = Depends(get_actions),
) -> ActionState:
    state = await actions.create_invoice(payload)
    return _with_status(response, state, ok_code=201)


@router.put("/{invoice_id}", response_model=ActionState)
async def update_invoice(
    invoice_id: str,
    response: Response,
    payload: Dict[str, Any] = Body(...),
    actions: InvoiceActions = Depends(get_actions),
) -> ActionState:
    state = await actions.update_invoice(invoice_id, payload)
    return _with_status(response, state)


@router.delete("/{invoice_id}", response_model=ActionState)
async def delete_invoice(
    invoice_id: str,
    response: Response,
    actions: InvoiceActions = Depends(get_actions),
) -> ActionState:
    state = await actions.delete_invoice(invoice_id)
    return _with_status(response, state)
