# app/lib/formatting.py
"""
Display helpers for money and dates.

Output is fixed to en-US conventions so rendered values do not depend on the
server locale.
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple, Union

from app.models.dashboard import Revenue

Cents = Union[int, Decimal]


def format_currency(amount: Optional[Cents]) -> str:
    """
    Render an amount in cents as US dollars, e.g. 123456 -> "$1,234.56".
    """
    dollars = Decimal(amount or 0) / 100
    sign = "-" if dollars < 0 else ""
    return f"{sign}${abs(dollars):,.2f}"


def format_date(value: Union[str, date, None]) -> str:
    """
    Render a calendar date as "Dec 6, 2022".

    Anything that is not an ISO date (or datetime) comes back as a plain
    string instead of raising.
    """
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    else:
        text = "" if value is None else str(value).strip()
        try:
            parsed = date.fromisoformat(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text).date()
            except ValueError:
                return text
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def generate_y_axis(revenue: Iterable[Revenue]) -> Tuple[List[str], int]:
    """
    Build the revenue chart's y-axis labels in $1K steps.

    Returns the labels from the top down and the top value in dollars.
    """
    amounts = [row.revenue for row in revenue]
    if not amounts:
        return [], 0

    highest_dollars = max(amounts) / 100
    top_label = int(math.ceil(highest_dollars / 1000) * 1000)

    labels = [f"${step // 1000}K" for step in range(top_label, -1, -1000)]
    return labels, top_label
