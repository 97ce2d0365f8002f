# app/services/actions.py
"""
Write side of the dashboard: create, update and delete invoices.

Each action validates its input before touching the database, runs exactly
one statement and, on success, tells the staleness hook that the invoice list
needs to be re-rendered.
"""

import inspect
import logging
import uuid
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.db.schema import invoices
from app.errors import DataAccessError
from app.lib.ids import parse_id
from app.models.invoices import ActionState, CreateInvoice, UpdateInvoice, to_cents
from app.services.data import database_errors

logger = logging.getLogger(__name__)

INVOICES_PATH = "/dashboard/invoices"

FIELD_MESSAGES = {
    "customer_id": "Please select a customer.",
    "amount": "Please enter an amount greater than $0.",
    "status": "Please select an invoice status.",
}

RevalidateHook = Callable[[str], Union[None, Awaitable[None]]]


def log_revalidation(path: str) -> None:
    logger.info("Marked %s as stale", path)


def _form_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Pick the invoice fields out of submitted data (form posts use camelCase)."""
    fields = {name: data.get(name) for name in FIELD_MESSAGES}
    if fields["customer_id"] is None:
        fields["customer_id"] = data.get("customerId")
    return fields


def _submitted_values(data: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    return {
        name: None if value is None else str(value)
        for name, value in _form_fields(data).items()
    }


def validate_invoice(
    data: Mapping[str, Any], schema=CreateInvoice
) -> Tuple[Optional[CreateInvoice], Dict[str, List[str]]]:
    """
    Validate submitted invoice fields.

    Returns the parsed form and no errors, or None and a mapping of field
    name to messages.
    """
    try:
        return schema.model_validate(_form_fields(data)), {}
    except ValidationError as exc:
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "form"
            message = FIELD_MESSAGES.get(field, error["msg"])
            messages = errors.setdefault(field, [])
            if message not in messages:
                messages.append(message)
        return None, errors


class InvoiceActions:
    """Invoice mutations bound to one engine and one staleness hook."""

    def __init__(
        self,
        engine: AsyncEngine,
        revalidate: Optional[RevalidateHook] = None,
        timezone: str = "UTC",
    ) -> None:
        self.engine = engine
        self.revalidate = revalidate or log_revalidation
        self.timezone = ZoneInfo(timezone)

    def today(self) -> date:
        return datetime.now(self.timezone).date()

    async def _mark_stale(self) -> None:
        result = self.revalidate(INVOICES_PATH)
        if inspect.isawaitable(result):
            await result

    async def create_invoice(self, data: Mapping[str, Any]) -> ActionState:
        form, errors = validate_invoice(data, CreateInvoice)
        if form is None:
            return ActionState(
                status="invalid",
                errors=errors,
                message="Missing Fields. Failed to Create Invoice.",
                values=_submitted_values(data),
            )

        invoice_id = uuid.uuid4()
        stmt = invoices.insert().values(
            id=invoice_id,
            customer_id=form.customer_id,
            amount=to_cents(form.amount),
            status=form.status,
            date=self.today(),
        )

        try:
            async with database_errors("Database Error: Failed to Create Invoice."):
                async with self.engine.begin() as conn:
                    await conn.execute(stmt)
        except DataAccessError as exc:
            return ActionState(status="error", message=exc.message)

        logger.info("Created invoice %s", invoice_id)
        await self._mark_stale()
        return ActionState(status="ok", message="Invoice created.", invoice_id=invoice_id)

    async def update_invoice(
        self, invoice_id: Union[str, uuid.UUID], data: Mapping[str, Any]
    ) -> ActionState:
        """
        Replace an invoice's customer, amount and status. The date never changes.

        Returns `not_found` when no invoice has this id.
        """
        form, errors = validate_invoice(data, UpdateInvoice)
        if form is None:
            return ActionState(
                status="invalid",
                errors=errors,
                message="Missing Fields. Failed to Update Invoice.",
                values=_submitted_values(data),
            )

        parsed = parse_id(invoice_id)
        if parsed is None:
            return ActionState(status="not_found", message="Invoice not found.")

        stmt = (
            invoices.update()
            .where(invoices.c.id == parsed)
            .values(
                customer_id=form.customer_id,
                amount=to_cents(form.amount),
                status=form.status,
            )
        )

        try:
            async with database_errors("Database Error: Failed to Update Invoice."):
                async with self.engine.begin() as conn:
                    result = await conn.execute(stmt)
        except DataAccessError as exc:
            return ActionState(status="error", message=exc.message)

        if result.rowcount == 0:
            return ActionState(status="not_found", message="Invoice not found.")

        logger.info("Updated invoice %s", parsed)
        await self._mark_stale()
        return ActionState(status="ok", message="Invoice updated.", invoice_id=parsed)

    async def delete_invoice(self, invoice_id: Union[str, uuid.UUID]) -> ActionState:
        """Hard-delete an invoice. Unknown ids are not an error."""
        parsed = parse_id(invoice_id)

        if parsed is not None:
            try:
                async with database_errors("Database Error: Failed to Delete Invoice."):
                    async with self.engine.begin() as conn:
                        await conn.execute(invoices.delete().where(invoices.c.id == parsed))
            except DataAccessError as exc:
                return ActionState(status="error", message=exc.message)
            logger.info("Deleted invoice %s", parsed)

        await self._mark_stale()
        return ActionState(status="ok", message="Deleted Invoice.", invoice_id=parsed)
