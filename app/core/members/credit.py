"""Credit operation helpers"""
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Optional

from core.error.exceptions import InvalidInputException

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMATS = ("%H:%M:%S", "%H:%M")


class CreditOperation(Enum):
    """Credit operations available on a member"""
    ADD = "add"
    REMOVE = "remove"
    CASHOUT = "cashout"
    DEPOSIT = "deposit"


def combine_deposit_datetime(
    date_deposit: str,
    time_deposit: str,
    tz: Optional[tzinfo] = None
) -> datetime:
    """Combine a deposit date and time field into one aware datetime

    Args:
        date_deposit: Date as YYYY-MM-DD
        time_deposit: Time as HH:MM or HH:MM:SS
        tz: Zone the fields are expressed in, local time when omitted

    Returns:
        datetime: Aware datetime for the entered wall-clock time

    Raises:
        InvalidInputException: If either field does not parse
    """
    try:
        day = datetime.strptime((date_deposit or "").strip(), DATE_FORMAT).date()
    except ValueError:
        raise InvalidInputException(f"Invalid deposit date: {date_deposit!r}", "date_deposit")

    moment = None
    for time_format in TIME_FORMATS:
        try:
            moment = datetime.strptime((time_deposit or "").strip(), time_format).time()
            break
        except ValueError:
            continue
    if moment is None:
        raise InvalidInputException(f"Invalid deposit time: {time_deposit!r}", "time_deposit")

    naive = datetime.combine(day, moment)
    if tz is not None:
        return naive.replace(tzinfo=tz)
    # Naive astimezone() interprets the value as local time
    return naive.astimezone()


def to_iso_utc(value: datetime) -> str:
    """Format an aware datetime as UTC ISO-8601 with milliseconds and Z"""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
