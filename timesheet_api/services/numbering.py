"""Invoice numbering scheme."""
from datetime import date


def iso_week_number(d: date) -> int:
    """
    ISO-8601 week number: weeks start on Monday and week 1 contains the
    year's first Thursday.

    Example:
        >>> iso_week_number(date(2025, 1, 20))
        4
        >>> iso_week_number(date(2024, 12, 30))
        1
    """
    return d.isocalendar()[1]


def generate_invoice_number(user_id: str, period_start: date) -> str:
    """
    Build the human-readable invoice number for a user's period.

    Format is ``INV-{year}-W{week:02d}-{last4}``. The year is the calendar
    year of ``period_start``, not the ISO week-year, so 2024-12-30 gives
    ``INV-2024-W01-...``. Two invoices for the same user and week share a
    number.

    Args:
        user_id: Owner of the invoice
        period_start: First day of the invoiced period

    Returns:
        Invoice number string

    Example:
        >>> generate_invoice_number("cm5abc9xyz", date(2025, 1, 20))
        'INV-2025-W04-9XYZ'
    """
    short_id = user_id[-4:].upper()
    return f"INV-{period_start.year}-W{iso_week_number(period_start):02d}-{short_id}"
