# app/services/data.py
"""
Read side of the dashboard: revenue, card totals, invoice search and the
customer directory.

Every method opens its own connection, so independent reads may run
concurrently. Driver errors never escape: they are logged here and turned
into `DataAccessError` with a message safe to show to users.
"""

import asyncio
import logging
import math
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, List, Optional, Union
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import String, case, cast, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.db.schema import customers, invoices, revenue
from app.errors import DataAccessError
from app.lib.formatting import format_currency
from app.lib.ids import parse_id
from app.models.customers import CustomerField, CustomerTableRow, TopCustomer
from app.models.dashboard import CardData, LatestInvoice, Revenue
from app.models.invoices import InvoiceForm, InvoiceRow

logger = logging.getLogger(__name__)

ITEMS_PER_PAGE = 6


@asynccontextmanager
async def database_errors(message: str) -> AsyncIterator[None]:
    """Log driver failures and re-raise them as `DataAccessError(message)`."""
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        logger.exception("Database Error: %s", message)
        raise DataAccessError(message) from exc


def _status_total(status: str):
    """SUM(amount) over invoices with `status`; 0 when there are none."""
    return func.coalesce(
        func.sum(case((invoices.c.status == status, invoices.c.amount), else_=0)),
        0,
    )


def _invoice_search(query: str):
    """
    Case-insensitive substring match across the searchable invoice columns.

    `%` and `_` in the query are escaped and match themselves, so "%" finds
    only values containing a literal percent sign rather than every row.
    """
    return or_(
        customers.c.name.icontains(query, autoescape=True),
        customers.c.email.icontains(query, autoescape=True),
        cast(invoices.c.amount, String).icontains(query, autoescape=True),
        cast(invoices.c.date, String).icontains(query, autoescape=True),
        invoices.c.status.icontains(query, autoescape=True),
    )


def _customer_search(query: str):
    """Name or email substring match; wildcards are literal as in `_invoice_search`."""
    return or_(
        customers.c.name.icontains(query, autoescape=True),
        customers.c.email.icontains(query, autoescape=True),
    )


_CUSTOMER_COLUMNS = (
    customers.c.id,
    customers.c.name,
    customers.c.email,
    customers.c.image_url,
)


def _customer_table_row(row) -> CustomerTableRow:
    return CustomerTableRow(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        image_url=row["image_url"],
        total_invoices=row["total_invoices"],
        total_pending=format_currency(row["total_pending"]),
        total_paid=format_currency(row["total_paid"]),
    )


class DashboardData:
    """Queries behind the dashboard pages, bound to one engine."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    async def _one(self, stmt):
        async with self.engine.connect() as conn:
            return (await conn.execute(stmt)).one()

    async def fetch_revenue(self) -> List[Revenue]:
        """
        All revenue rows in the order they were stored.

        No ORDER BY: month labels do not sort chronologically, so rows come
        back in stored order, which the seed makes chronological.
        """
        async with database_errors("Failed to fetch revenue data."):
            async with self.engine.connect() as conn:
                stmt = select(revenue.c.month, revenue.c.revenue)
                rows = (await conn.execute(stmt)).mappings().all()

        return [Revenue(month=row["month"], revenue=row["revenue"]) for row in rows]

    async def fetch_latest_invoices(self, limit: int = 5) -> List[LatestInvoice]:
        async with database_errors("Failed to fetch the latest invoices."):
            async with self.engine.connect() as conn:
                stmt = (
                    select(
                        invoices.c.id,
                        invoices.c.amount,
                        customers.c.name,
                        customers.c.email,
                        customers.c.image_url,
                    )
                    .select_from(invoices.join(customers))
                    .order_by(invoices.c.date.desc(), invoices.c.id)
                    .limit(limit)
                )
                rows = (await conn.execute(stmt)).mappings().all()

        return [
            LatestInvoice(
                id=row["id"],
                amount=format_currency(row["amount"]),
                name=row["name"],
                email=row["email"],
                image_url=row["image_url"],
            )
            for row in rows
        ]

    async def fetch_card_data(self) -> CardData:
        """
        Invoice and customer counts plus paid/pending totals.

        The three aggregates run concurrently on separate connections and
        are not wrapped in a transaction.
        """
        invoice_count = select(func.count()).select_from(invoices)
        customer_count = select(func.count()).select_from(customers)
        status_totals = select(
            _status_total("paid").label("paid"),
            _status_total("pending").label("pending"),
        ).select_from(invoices)

        async with database_errors("Failed to fetch card data."):
            invoice_row, customer_row, totals = await asyncio.gather(
                self._one(invoice_count),
                self._one(customer_count),
                self._one(status_totals),
            )

        return CardData(
            number_of_invoices=invoice_row[0] or 0,
            number_of_customers=customer_row[0] or 0,
            total_paid_invoices=format_currency(totals.paid),
            total_pending_invoices=format_currency(totals.pending),
        )

    async def fetch_filtered_invoices(
        self,
        query: str,
        current_page: int,
        page_size: int = ITEMS_PER_PAGE,
    ) -> List[InvoiceRow]:
        """
        One page of invoices matching `query`, newest first.

        Pages are 1-indexed; a page past the end is simply empty.
        """
        offset = (max(current_page, 1) - 1) * page_size

        async with database_errors("Failed to fetch invoices."):
            async with self.engine.connect() as conn:
                stmt = (
                    select(
                        invoices.c.id,
                        invoices.c.customer_id,
                        invoices.c.amount,
                        invoices.c.date,
                        invoices.c.status,
                        customers.c.name,
                        customers.c.email,
                        customers.c.image_url,
                    )
                    .select_from(invoices.join(customers))
                    .where(_invoice_search(query))
                    .order_by(invoices.c.date.desc(), invoices.c.id)
                    .limit(page_size)
                    .offset(offset)
                )
                rows = (await conn.execute(stmt)).mappings().all()

        return [InvoiceRow.model_validate(dict(row)) for row in rows]

    async def fetch_invoice_pages(
        self, query: str, page_size: int = ITEMS_PER_PAGE
    ) -> int:
        async with database_errors("Failed to fetch total number of invoices."):
            async with self.engine.connect() as conn:
                stmt = (
                    select(func.count())
                    .select_from(invoices.join(customers))
                    .where(_invoice_search(query))
                )
                total = (await conn.execute(stmt)).scalar_one()

        return math.ceil(total / page_size)

    async def fetch_invoice_by_id(
        self, invoice_id: Union[str, UUID]
    ) -> Optional[InvoiceForm]:
        """
        Load an invoice for editing, with the amount in dollars.

        Returns None for malformed ids without querying. A stored status other
        than pending/paid is a data error and raises.
        """
        parsed = parse_id(invoice_id)
        if parsed is None:
            return None

        async with database_errors("Failed to fetch invoice."):
            async with self.engine.connect() as conn:
                stmt = select(
                    invoices.c.id,
                    invoices.c.customer_id,
                    invoices.c.amount,
                    invoices.c.status,
                ).where(invoices.c.id == parsed)
                row = (await conn.execute(stmt)).mappings().first()

        if row is None:
            return None

        try:
            return InvoiceForm(
                id=row["id"],
                customer_id=row["customer_id"],
                amount=Decimal(row["amount"]) / 100,
                status=row["status"],
            )
        except ValidationError as exc:
            logger.error("Invoice %s has unexpected status %r", parsed, row["status"])
            raise DataAccessError("Failed to fetch invoice.") from exc

    async def fetch_customers(self) -> List[CustomerField]:
        async with database_errors("Failed to fetch all customers."):
            async with self.engine.connect() as conn:
                stmt = select(
                    customers.c.id, customers.c.name, customers.c.image_url
                ).order_by(customers.c.name)
                rows = (await conn.execute(stmt)).mappings().all()

        return [CustomerField.model_validate(dict(row)) for row in rows]

    async def fetch_filtered_customers(self, query: str) -> List[CustomerTableRow]:
        """
        Customers matching `query` on name or email, with invoice totals.

        Customers without invoices are included with zero totals.
        """
        async with database_errors("Failed to fetch customer table."):
            async with self.engine.connect() as conn:
                stmt = (
                    select(
                        *_CUSTOMER_COLUMNS,
                        func.count(invoices.c.id).label("total_invoices"),
                        _status_total("pending").label("total_pending"),
                        _status_total("paid").label("total_paid"),
                    )
                    .select_from(customers.outerjoin(invoices))
                    .where(_customer_search(query))
                    .group_by(*_CUSTOMER_COLUMNS)
                    .order_by(customers.c.name)
                )
                rows = (await conn.execute(stmt)).mappings().all()

        return [_customer_table_row(row) for row in rows]

    async def fetch_customer_by_id(
        self, customer_id: Union[str, UUID]
    ) -> Optional[CustomerTableRow]:
        parsed = parse_id(customer_id)
        if parsed is None:
            return None

        async with database_errors("Failed to fetch customer."):
            async with self.engine.connect() as conn:
                stmt = (
                    select(
                        *_CUSTOMER_COLUMNS,
                        func.count(invoices.c.id).label("total_invoices"),
                        _status_total("pending").label("total_pending"),
                        _status_total("paid").label("total_paid"),
                    )
                    .select_from(customers.outerjoin(invoices))
                    .where(customers.c.id == parsed)
                    .group_by(*_CUSTOMER_COLUMNS)
                )
                row = (await conn.execute(stmt)).mappings().first()

        if row is None:
            return None
        return _customer_table_row(row)

    async def fetch_top_customers(self, limit: int = 5) -> List[TopCustomer]:
        """Customers ranked by total invoiced amount; those with no invoices are left out."""
        total_amount = func.sum(invoices.c.amount).label("total_amount")

        async with database_errors("Failed to fetch top customers."):
            async with self.engine.connect() as conn:
                stmt = (
                    select(
                        customers.c.id,
                        customers.c.name,
                        customers.c.image_url,
                        func.count(invoices.c.id).label("total_invoices"),
                        total_amount,
                        _status_total("pending").label("total_pending"),
                        _status_total("paid").label("total_paid"),
                    )
                    .select_from(customers.join(invoices))
                    .group_by(*_CUSTOMER_COLUMNS)
                    .order_by(total_amount.desc(), customers.c.name)
                    .limit(limit)
                )
                rows = (await conn.execute(stmt)).mappings().all()

        return [
            TopCustomer(
                id=row["id"],
                name=row["name"],
                image_url=row["image_url"],
                total_invoices=row["total_invoices"],
                total_amount=format_currency(row["total_amount"]),
                total_pending=format_currency(row["total_pending"]),
                total_paid=format_currency(row["total_paid"]),
            )
            for row in rows
        ]
