"""Tests for Pydantic models."""
import pytest
from datetime import date, datetime
from decimal import Decimal
from pydantic import ValidationError


class TestTimeEntryModel:
    """Tests for time entry models."""

    def test_time_entry_status_enum_values(self):
        """Test TimeEntryStatus enum has correct values."""
        from timesheet_api.models.time_entry import TimeEntryStatus

        assert TimeEntryStatus.DRAFT.value == "draft"
        assert TimeEntryStatus.SUBMITTED.value == "submitted"
        assert TimeEntryStatus.LOCKED.value == "locked"

    def test_time_entry_create_minimal(self):
        """Test creating an entry with required fields only."""
        from timesheet_api.models.time_entry import TimeEntryCreate

        entry = TimeEntryCreate(
            date=date(2025, 1, 21),
            client_id="acme",
            category_id="design",
            hours="2.5",
            what_did_you_do="Wireframes",
        )

        assert entry.hours == Decimal("2.5")
        assert entry.project_id is None
        assert entry.what_got_completed is None

    def test_time_entry_create_blank_optionals(self):
        """Test empty optional strings are stored as None."""
        from timesheet_api.models.time_entry import TimeEntryCreate

        entry = TimeEntryCreate(
            date=date(2025, 1, 21),
            client_id="acme",
            project_id="",
            category_id="design",
            hours="1",
            what_did_you_do="Call",
            what_got_completed="",
        )

        assert entry.project_id is None
        assert entry.what_got_completed is None

    @pytest.mark.parametrize("hours", ["0", "-1", "24.5", "1.234"])
    def test_time_entry_create_invalid_hours(self, hours):
        """Test hours must be positive, at most a day, in hundredths."""
        from timesheet_api.models.time_entry import TimeEntryCreate

        with pytest.raises(ValidationError):
            TimeEntryCreate(
                date=date(2025, 1, 21),
                client_id="acme",
                category_id="design",
                hours=hours,
                what_did_you_do="Work",
            )

    def test_time_entry_create_requires_activity(self):
        """Test the activity description can't be blank."""
        from timesheet_api.models.time_entry import TimeEntryCreate

        with pytest.raises(ValidationError):
            TimeEntryCreate(
                date=date(2025, 1, 21),
                client_id="acme",
                category_id="design",
                hours="1",
                what_did_you_do="   ",
            )

    def test_time_entry_update_all_optional(self):
        """Test an empty update is valid."""
        from timesheet_api.models.time_entry import TimeEntryUpdate

        update = TimeEntryUpdate()

        assert update.model_dump(exclude_unset=True) == {}

    def test_time_entry_reads_stored_hours_as_is(self):
        """Test stored hours outside the input rules still load."""
        from timesheet_api.models.time_entry import TimeEntry

        now = datetime.utcnow()
        entry = TimeEntry(
            _id="abc",
            user_id="user123",
            date=date(2025, 1, 21),
            client_id="acme",
            category_id="design",
            hours=Decimal("1.125"),
            what_did_you_do="Wireframes",
            created_at=now,
            updated_at=now,
        )

        assert entry.hours == Decimal("1.125")


class TestInvoiceModel:
    """Tests for invoice models."""

    def test_invoice_status_enum_values(self):
        """Test InvoiceStatus enum has correct values."""
        from timesheet_api.models.invoice import InvoiceStatus

        assert [s.value for s in InvoiceStatus] == [
            "draft", "submitted", "approved", "rejected", "paid",
        ]

    def test_invoice_create_period(self):
        """Test a single-day period is valid."""
        from timesheet_api.models.invoice import InvoiceCreate

        invoice = InvoiceCreate(period_start="2025-01-20", period_end="2025-01-20")

        assert invoice.period_start == invoice.period_end == date(2025, 1, 20)

    def test_invoice_create_inverted_period(self):
        """Test the end can't come before the start."""
        from timesheet_api.models.invoice import InvoiceCreate

        with pytest.raises(ValidationError):
            InvoiceCreate(period_start="2025-01-26", period_end="2025-01-20")

    def test_invoice_create_missing_period(self):
        """Test both period dates are required."""
        from timesheet_api.models.invoice import InvoiceCreate

        with pytest.raises(ValidationError):
            InvoiceCreate(period_start="2025-01-20")

    def test_line_item_is_frozen(self):
        """Test line items can't be modified once created."""
        from timesheet_api.models.invoice import LineItem

        item = LineItem(
            id="li1",
            client_id="acme",
            category_id="design",
            description="Wireframes",
            hours=Decimal("2.5"),
            rate=Decimal("75.00"),
            amount=Decimal("187.50"),
        )

        with pytest.raises(ValidationError):
            item.amount = Decimal("1")

    def test_invoice_serializes_id(self):
        """Test the Mongo _id is exposed as id."""
        from timesheet_api.models.invoice import Invoice

        now = datetime.utcnow()
        invoice = Invoice(
            _id="abc",
            user_id="user123",
            invoice_number="INV-2025-W04-R123",
            period_start=date(2025, 1, 20),
            period_end=date(2025, 1, 26),
            total_hours=Decimal("0"),
            total_amount=Decimal("0"),
            created_at=now,
            updated_at=now,
        )

        assert invoice.model_dump(by_alias=True)["id"] == "abc"


class TestUserModel:
    """Tests for user models."""

    def test_caller_defaults_to_user(self):
        """Test callers are regular users unless told otherwise."""
        from timesheet_api.models.user import Caller, UserRole

        caller = Caller(user_id="user123")

        assert caller.role == UserRole.USER
        assert caller.is_admin is False

    def test_admin_caller(self):
        """Test admin callers."""
        from timesheet_api.models.user import Caller

        assert Caller(user_id="a", role="admin").is_admin is True
