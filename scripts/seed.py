# scripts/seed.py
"""
Load the demo dataset into the database.

Safe to run repeatedly: every row has a fixed key and inserts skip rows that
already exist.
"""

import asyncio
import logging
import uuid
from datetime import date

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import get_settings
from app.db.engine import create_engine
from app.db.schema import customers, invoices, revenue, users
from app.services.auth import hash_password
from app.utils.logging import configure_logging
from scripts import placeholder_data

logger = logging.getLogger(__name__)

# Namespace for deriving stable invoice ids from their contents
INVOICE_NAMESPACE = uuid.UUID("6f1c2a9e-3b8d-4e5f-9a7c-1d2e3f4a5b6c")


# ---- Helpers ----

def invoice_id(invoice: dict) -> uuid.UUID:
    key = f"{invoice['customer_id']}:{invoice['date']}:{invoice['amount']}:{invoice['status']}"
    return uuid.uuid5(INVOICE_NAMESPACE, key)


def insert_ignore(engine: AsyncEngine, table):
    """INSERT ... ON CONFLICT DO NOTHING for the engine's dialect."""
    insert = pg_insert if engine.dialect.name == "postgresql" else sqlite_insert
    return insert(table).on_conflict_do_nothing()


async def hash_users(user_rows, rounds: int = 10):
    hashed = await asyncio.gather(
        *(asyncio.to_thread(hash_password, u["password"], rounds) for u in user_rows)
    )
    return [
        {
            "id": uuid.UUID(u["id"]),
            "name": u["name"],
            "email": u["email"],
            "password": password,
        }
        for u, password in zip(user_rows, hashed)
    ]


async def seed_database(
    engine: AsyncEngine,
    data=placeholder_data,
    rounds: int = 10,
) -> dict:
    """
    Insert users, customers, invoices and revenue in one transaction.

    Returns how many rows of each kind the dataset holds.
    """
    user_rows = await hash_users(data.users, rounds)

    customer_rows = [
        {
            "id": uuid.UUID(c["id"]),
            "name": c["name"],
            "email": c["email"],
            "image_url": c["image_url"],
        }
        for c in data.customers
    ]

    invoice_rows = [
        {
            "id": invoice_id(inv),
            "customer_id": uuid.UUID(inv["customer_id"]),
            "amount": inv["amount"],
            "status": inv["status"],
            "date": date.fromisoformat(inv["date"]),
        }
        for inv in data.invoices
    ]

    async with engine.begin() as conn:
        await conn.execute(insert_ignore(engine, users), user_rows)
        await conn.execute(insert_ignore(engine, customers), customer_rows)
        await conn.execute(insert_ignore(engine, invoices), invoice_rows)
        # One row at a time so stored order follows the calendar
        for row in data.revenue:
            await conn.execute(insert_ignore(engine, revenue).values(**row))

    return {
        "n_users": len(user_rows),
        "n_customers": len(customer_rows),
        "n_invoices": len(invoice_rows),
        "n_revenue": len(data.revenue),
    }


async def _run() -> dict:
    settings = get_settings()
    engine = create_engine(settings)
    try:
        return await seed_database(engine, rounds=settings.bcrypt_rounds)
    finally:
        await engine.dispose()


def main():
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    stats = asyncio.run(_run())

    logger.info(f"Users:        {stats['n_users']}")
    logger.info(f"Customers:    {stats['n_customers']}")
    logger.info(f"Invoices:     {stats['n_invoices']}")
    logger.info(f"Revenue rows: {stats['n_revenue']}")


if __name__ == "__main__":
    main()
