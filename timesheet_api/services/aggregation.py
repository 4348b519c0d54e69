"""Invoice aggregation - turns draft time entries into priced line items."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from pydantic import BaseModel

from timesheet_api.errors import NoEntriesFound
from timesheet_api.models.time_entry import TimeEntry

CENTS = Decimal("0.01")
NO_PROJECT = "none"
DESCRIPTION_SEPARATOR = "; "


class LineItemSpec(BaseModel):
    """Unpriced line item: one (client, project, category) group."""

    client_id: str
    project_id: Optional[str]
    category_id: str
    hours: Decimal = Decimal("0")
    descriptions: list[str] = []
    entry_ids: list[str] = []

    @property
    def description(self) -> str:
        return DESCRIPTION_SEPARATOR.join(self.descriptions)


class PricedLineItem(BaseModel):
    """Line item with its rate and amount applied."""

    client_id: str
    project_id: Optional[str]
    category_id: str
    description: str
    hours: Decimal
    rate: Decimal
    amount: Decimal

    model_config = {"frozen": True}


def group_key(entry: TimeEntry) -> tuple[str, str, str]:
    """Composite grouping key; entries without a project share a sentinel."""
    return (entry.client_id, entry.project_id or NO_PROJECT, entry.category_id)


def aggregate_entries(entries: Iterable[TimeEntry]) -> list[LineItemSpec]:
    """
    Group entries by (client, project, category).

    Hours are summed without rounding and activity descriptions are kept in
    the order the entries were given. Groups come out in first-seen order.

    Args:
        entries: Draft time entries selected for the period

    Returns:
        One spec per group

    Raises:
        NoEntriesFound: If there are no entries to aggregate
    """
    groups: dict[tuple[str, str, str], dict] = {}

    for entry in entries:
        group = groups.setdefault(group_key(entry), {
            "client_id": entry.client_id,
            "project_id": entry.project_id,
            "category_id": entry.category_id,
            "hours": Decimal("0"),
            "descriptions": [],
            "entry_ids": [],
        })
        group["hours"] += entry.hours
        group["descriptions"].append(entry.what_did_you_do)
        group["entry_ids"].append(entry.id)

    if not groups:
        raise NoEntriesFound("No draft entries found for this period")

    return [LineItemSpec(**group) for group in groups.values()]


def line_amount(hours: Decimal, rate: Decimal) -> Decimal:
    """hours x rate rounded half-up to cents."""
    return (hours * rate).quantize(CENTS, rounding=ROUND_HALF_UP)


def price_line_items(specs: list[LineItemSpec], rate: Decimal) -> list[PricedLineItem]:
    """Apply one hourly rate to every spec."""
    rate = Decimal(rate).quantize(CENTS, rounding=ROUND_HALF_UP)
    return [
        PricedLineItem(
            client_id=spec.client_id,
            project_id=spec.project_id,
            category_id=spec.category_id,
            description=spec.description,
            hours=spec.hours,
            rate=rate,
            amount=line_amount(spec.hours, rate),
        )
        for spec in specs
    ]


def summarize(items: list[PricedLineItem]) -> tuple[Decimal, Decimal]:
    """Return (total_hours, total_amount) over priced line items."""
    total_hours = sum((item.hours for item in items), Decimal("0"))
    total_amount = sum((item.amount for item in items), Decimal("0"))
    return total_hours, total_amount
