# app/db/schema.py

import uuid

from sqlalchemy import (
    MetaData, Table, Column, Integer, String, Text,
    Date, ForeignKey, CheckConstraint, Uuid
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("name", String(255), nullable=False),
    Column("email", Text, nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt hash
)

customers = Table(
    "customers",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False),
    Column("image_url", String(255), nullable=False),
)

invoices = Table(
    "invoices",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    # No ON DELETE: a customer with invoices cannot be removed
    Column("customer_id", Uuid, ForeignKey("customers.id"), nullable=False),
    Column("amount", Integer, nullable=False),  # cents
    Column("status", String(255), nullable=False),
    Column("date", Date, nullable=False),
    CheckConstraint("amount >= 0", name="ck_invoices_amount_nonneg"),
)

revenue = Table(
    "revenue",
    metadata,
    Column("month", String(4), nullable=False, unique=True),
    Column("revenue", Integer, nullable=False),  # cents
)
