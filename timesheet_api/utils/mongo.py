"""Conversions between API values and MongoDB document values."""
from datetime import date, datetime, time
from decimal import Decimal
from bson import Decimal128, ObjectId
from bson.errors import InvalidId

from timesheet_api.errors import NotFoundError


def to_decimal128(value: Decimal) -> Decimal128:
    """Store a Decimal without float rounding."""
    return Decimal128(Decimal(value))


def to_decimal(value) -> Decimal:
    """
    Read a numeric document value back as a Decimal.

    Accepts Decimal128 (what we write) as well as ints, floats and strings
    found in hand-edited or legacy documents.

    Example:
        >>> to_decimal(Decimal128("2.50"))
        Decimal('2.50')
    """
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def entry_day(d: date) -> datetime:
    """Datetime stored for a calendar day (noon keeps the day unambiguous)."""
    return datetime.combine(d, time(12, 0))


def day_start(d: date) -> datetime:
    return datetime.combine(d, time.min)


def day_end(d: date) -> datetime:
    return datetime.combine(d, time.max)


def as_date(value) -> date:
    """Convert a stored datetime back to a calendar date."""
    return value.date() if isinstance(value, datetime) else value


def parse_object_id(value: str, what: str = "Document") -> ObjectId:
    """
    Parse a path id.

    Raises:
        NotFoundError: If the id can't be an ObjectId, since no such
            document can exist
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"{what} not found")