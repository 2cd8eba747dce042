"""Display formatting for amounts and dates"""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

DEFAULT_CURRENCY = "LAK"


def format_currency(amount: Any, currency: Optional[str] = DEFAULT_CURRENCY) -> str:
    """Format an amount with thousands separators and the currency code"""
    try:
        value = Decimal(str(amount if amount not in (None, "") else 0))
    except InvalidOperation:
        value = Decimal("0")
    return f"{value:,.2f} {currency or DEFAULT_CURRENCY}"


def format_date(value: Optional[str]) -> str:
    """Format an ISO timestamp as '15 January 2024 14:30', '-' when empty"""
    if not value:
        return "-"
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return f"{moment.day} {moment:%B %Y %H:%M}"
