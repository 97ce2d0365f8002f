"""
Tests for the dashboard read queries, run against a throwaway SQLite database.
"""

from __future__ import annotations

import math
import uuid
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from app.errors import DataAccessError
from app.services.data import DashboardData


class TestCardData:
    @pytest.mark.asyncio
    async def test_totals_for_single_customer(self, data, acme):
        cards = await data.fetch_card_data()

        assert cards.number_of_invoices == 2
        assert cards.number_of_customers == 1
        assert cards.total_paid_invoices == "$100.00"
        assert cards.total_pending_invoices == "$50.00"

    @pytest.mark.asyncio
    async def test_empty_database(self, data):
        cards = await data.fetch_card_data()

        assert cards.number_of_invoices == 0
        assert cards.number_of_customers == 0
        assert cards.total_paid_invoices == "$0.00"
        assert cards.total_pending_invoices == "$0.00"

    @pytest.mark.asyncio
    async def test_unknown_status_counts_but_sums_nowhere(self, data, acme, make_invoice):
        await make_invoice(acme["customer_id"], 99900, "void")

        cards = await data.fetch_card_data()

        assert cards.number_of_invoices == 3
        assert cards.total_paid_invoices == "$100.00"
        assert cards.total_pending_invoices == "$50.00"


class TestRevenue:
    @pytest.mark.asyncio
    async def test_rows_come_back_in_stored_order(self, data, make_revenue):
        for month, cents in [("Dec", 480000), ("Jan", 200000), ("Feb", 180000)]:
            await make_revenue(month, cents)

        rows = await data.fetch_revenue()

        assert [(r.month, r.revenue) for r in rows] == [
            ("Dec", 480000),
            ("Jan", 200000),
            ("Feb", 180000),
        ]


class TestLatestInvoices:
    @pytest.mark.asyncio
    async def test_newest_first_with_formatted_amount(self, data, acme):
        latest = await data.fetch_latest_invoices()

        assert [i.id for i in latest] == [acme["pending_id"], acme["paid_id"]]
        assert latest[0].amount == "$50.00"
        assert latest[0].name == "Acme Co"
        assert latest[0].email == "billing@acme.co"

    @pytest.mark.asyncio
    async def test_respects_limit(self, data, make_customer, make_invoice):
        customer_id = await make_customer("Lee Robinson")
        for day in range(1, 9):
            await make_invoice(customer_id, day * 100, on=date(2023, 1, day))

        latest = await data.fetch_latest_invoices()

        assert len(latest) == 5
        assert latest[0].amount == "$8.00"
        assert latest[-1].amount == "$4.00"

    @pytest.mark.asyncio
    async def test_same_day_ties_break_on_id(self, data, make_customer, make_invoice):
        customer_id = await make_customer("Amy Burns")
        ids = [await make_invoice(customer_id, 100, on=date(2023, 1, 1)) for _ in range(3)]

        latest = await data.fetch_latest_invoices()

        assert [i.id for i in latest] == sorted(ids, key=lambda u: u.hex)


class TestFilteredInvoices:
    @pytest_asyncio.fixture
    async def populated(self, make_customer, make_invoice):
        evil = await make_customer("Evil Rabbit", email="evil@rabbit.com")
        delba = await make_customer("Delba de Oliveira", email="delba@oliveira.com")
        await make_invoice(evil, 15795, "pending", date(2022, 12, 6))
        await make_invoice(delba, 20348, "pending", date(2022, 11, 14))
        await make_invoice(delba, 666, "paid", date(2023, 6, 27))
        return {"evil": evil, "delba": delba}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "query, expected",
        [
            ("", 3),
            ("rabbit", 1),
            ("RABBIT", 1),
            ("oliveira.com", 2),
            ("666", 1),
            ("2022-1", 2),
            ("PAID", 1),
            ("pend", 2),
            ("nobody", 0),
        ],
    )
    async def test_search_matches_any_column(self, data, populated, query, expected):
        rows = await data.fetch_filtered_invoices(query, 1)
        assert len(rows) == expected

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, data, populated):
        assert await data.fetch_filtered_invoices("%", 1) == []
        assert await data.fetch_filtered_invoices("_", 1) == []

    @pytest.mark.asyncio
    async def test_rows_carry_customer_and_raw_cents(self, data, populated):
        rows = await data.fetch_filtered_invoices("evil", 1)

        assert rows[0].customer_id == populated["evil"]
        assert rows[0].amount == 15795
        assert rows[0].date == date(2022, 12, 6)
        assert rows[0].image_url == "/customers/x.png"

    @pytest.mark.asyncio
    async def test_pagination(self, data, make_customer, make_invoice):
        customer_id = await make_customer("Balazs Orban")
        for day in range(1, 15):
            await make_invoice(customer_id, 1000 + day, on=date(2023, 3, day))

        first = await data.fetch_filtered_invoices("", 1)
        third = await data.fetch_filtered_invoices("", 3)

        assert len(first) == 6
        assert first[0].date == date(2023, 3, 14)
        assert len(third) == 2
        assert await data.fetch_filtered_invoices("", 999) == []

    @pytest.mark.asyncio
    async def test_page_count(self, data, make_customer, make_invoice):
        assert await data.fetch_invoice_pages("") == 0

        customer_id = await make_customer("Michael Novotny")
        for day in range(1, 14):
            await make_invoice(customer_id, 500, on=date(2023, 4, day))

        assert await data.fetch_invoice_pages("") == math.ceil(13 / 6)
        assert await data.fetch_invoice_pages("novotny") == 3
        assert await data.fetch_invoice_pages("nobody") == 0

    @pytest.mark.asyncio
    async def test_unknown_status_is_listed(self, data, acme, make_invoice):
        await make_invoice(acme["customer_id"], 100, "void")

        rows = await data.fetch_filtered_invoices("void", 1)

        assert [r.status for r in rows] == ["void"]


class TestInvoiceById:
    @pytest.mark.asyncio
    async def test_amount_in_dollars(self, data, acme):
        invoice = await data.fetch_invoice_by_id(str(acme["paid_id"]))

        assert invoice.id == acme["paid_id"]
        assert invoice.customer_id == acme["customer_id"]
        assert invoice.amount == Decimal("100")
        assert invoice.status == "paid"

    @pytest.mark.asyncio
    async def test_malformed_and_missing_ids(self, data, acme):
        assert await data.fetch_invoice_by_id("not-a-uuid") is None
        assert await data.fetch_invoice_by_id(str(uuid.uuid4())) is None

    @pytest.mark.asyncio
    async def test_unknown_status_is_an_error(self, data, acme, make_invoice):
        invoice_id = await make_invoice(acme["customer_id"], 100, "void")

        with pytest.raises(DataAccessError, match="Failed to fetch invoice."):
            await data.fetch_invoice_by_id(invoice_id)


class TestCustomers:
    @pytest.mark.asyncio
    async def test_directory_aggregates(self, data, acme):
        rows = await data.fetch_filtered_customers("")

        assert len(rows) == 1
        assert rows[0].name == "Acme Co"
        assert rows[0].total_invoices == 2
        assert rows[0].total_paid == "$100.00"
        assert rows[0].total_pending == "$50.00"

    @pytest.mark.asyncio
    async def test_customers_without_invoices_are_kept(self, data, acme, make_customer):
        await make_customer("Zed Newcomer")
        await make_customer("Amy Burns")

        rows = await data.fetch_filtered_customers("")

        assert [r.name for r in rows] == ["Acme Co", "Amy Burns", "Zed Newcomer"]
        assert rows[1].total_invoices == 0
        assert rows[1].total_paid == "$0.00"
        assert rows[1].total_pending == "$0.00"

    @pytest.mark.asyncio
    async def test_directory_search_on_name_or_email(self, data, acme, make_customer):
        await make_customer("Lee Robinson", email="lee@robinson.com")

        assert [r.name for r in await data.fetch_filtered_customers("ROBIN")] == ["Lee Robinson"]
        assert [r.name for r in await data.fetch_filtered_customers("acme.co")] == ["Acme Co"]
        assert await data.fetch_filtered_customers("nobody") == []

    @pytest.mark.asyncio
    async def test_customer_by_id(self, data, acme, make_customer):
        lonely = await make_customer("Lonely Customer")

        customer = await data.fetch_customer_by_id(str(acme["customer_id"]))
        empty = await data.fetch_customer_by_id(lonely)

        assert customer.total_invoices == 2
        assert customer.total_paid == "$100.00"
        assert empty.total_invoices == 0
        assert empty.total_pending == "$0.00"
        assert await data.fetch_customer_by_id("not-a-uuid") is None
        assert await data.fetch_customer_by_id(str(uuid.uuid4())) is None

    @pytest.mark.asyncio
    async def test_names_sorted(self, data, make_customer):
        for name in ["Michael Novotny", "Amy Burns", "Evil Rabbit"]:
            await make_customer(name)

        names = await data.fetch_customers()

        assert [c.name for c in names] == ["Amy Burns", "Evil Rabbit", "Michael Novotny"]

    @pytest.mark.asyncio
    async def test_top_customers(self, data, acme, make_customer, make_invoice):
        big = await make_customer("Big Spender")
        await make_invoice(big, 500000, "paid")
        await make_customer("No Invoices")

        top = await data.fetch_top_customers()

        assert [c.name for c in top] == ["Big Spender", "Acme Co"]
        assert top[0].total_amount == "$5,000.00"
        assert top[1].total_amount == "$150.00"
        assert top[1].total_invoices == 2
        assert top[1].total_pending == "$50.00"


class TestStoreFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call, message",
        [
            (lambda d: d.fetch_revenue(), "Failed to fetch revenue data."),
            (lambda d: d.fetch_card_data(), "Failed to fetch card data."),
            (lambda d: d.fetch_filtered_invoices("", 1), "Failed to fetch invoices."),
            (lambda d: d.fetch_invoice_pages(""), "Failed to fetch total number of invoices."),
            (lambda d: d.fetch_filtered_customers(""), "Failed to fetch customer table."),
            (lambda d: d.fetch_customers(), "Failed to fetch all customers."),
        ],
    )
    async def test_driver_errors_become_opaque(self, bare_engine, call, message):
        with pytest.raises(DataAccessError) as excinfo:
            await call(DashboardData(bare_engine))

        assert excinfo.value.message == message
        assert "SELECT" not in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_lookup_by_id_still_raises_on_outage(self, bare_engine):
        with pytest.raises(DataAccessError):
            await DashboardData(bare_engine).fetch_customer_by_id(str(uuid.uuid4()))
