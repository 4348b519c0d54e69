"""Tests for invoice numbering."""
from datetime import date


class TestIsoWeekNumber:
    """Tests for iso_week_number."""

    def test_mid_january(self):
        """Test a Monday in late January."""
        from timesheet_api.services.numbering import iso_week_number

        assert iso_week_number(date(2025, 1, 20)) == 4

    def test_sunday_belongs_to_previous_monday(self):
        """Test weeks start on Monday."""
        from timesheet_api.services.numbering import iso_week_number

        assert iso_week_number(date(2025, 1, 26)) == 4
        assert iso_week_number(date(2025, 1, 27)) == 5

    def test_first_thursday_rule(self):
        """Test week 1 is the week containing the first Thursday."""
        from timesheet_api.services.numbering import iso_week_number

        # 2021-01-01 is a Friday, so it belongs to the last week of 2020
        assert iso_week_number(date(2021, 1, 1)) == 53
        assert iso_week_number(date(2021, 1, 4)) == 1
        # 2024-12-30 is in the week containing 2025-01-02 (Thursday)
        assert iso_week_number(date(2024, 12, 30)) == 1


class TestGenerateInvoiceNumber:
    """Tests for generate_invoice_number."""

    def test_format(self):
        """Test the number layout."""
        from timesheet_api.services.numbering import generate_invoice_number

        number = generate_invoice_number("cm5abc9xyz", date(2025, 1, 20))

        assert number == "INV-2025-W04-9XYZ"

    def test_week_zero_padded(self):
        """Test single digit weeks are zero padded."""
        from timesheet_api.services.numbering import generate_invoice_number

        assert generate_invoice_number("user1234", date(2025, 3, 3)) == "INV-2025-W10-1234"
        assert generate_invoice_number("user1234", date(2025, 1, 6)) == "INV-2025-W02-1234"

    def test_year_is_calendar_year(self):
        """Test year comes from the calendar, not the ISO week-year."""
        from timesheet_api.services.numbering import generate_invoice_number

        assert generate_invoice_number("abcd", date(2024, 12, 30)) == "INV-2024-W01-ABCD"

    def test_short_user_id(self):
        """Test user IDs shorter than four characters are used whole."""
        from timesheet_api.services.numbering import generate_invoice_number

        assert generate_invoice_number("ab", date(2025, 1, 20)) == "INV-2025-W04-AB"

    def test_deterministic(self):
        """Test same inputs always give the same number."""
        from timesheet_api.services.numbering import generate_invoice_number

        first = generate_invoice_number("cm5fellow0a1b", date(2025, 1, 20))
        second = generate_invoice_number("cm5fellow0a1b", date(2025, 1, 20))

        assert first == second

    def test_differs_by_week_year_and_user(self):
        """Test different weeks, years and users give different numbers."""
        from timesheet_api.services.numbering import generate_invoice_number

        base = generate_invoice_number("cm5fellow0a1b", date(2025, 1, 20))

        assert generate_invoice_number("cm5fellow0a1b", date(2025, 1, 27)) != base
        assert generate_invoice_number("cm5fellow0a1b", date(2026, 1, 19)) != base
        assert generate_invoice_number("cm5fellow9z8y", date(2025, 1, 20)) != base

    def test_same_week_collides(self):
        """Test any two days of the same week share a number."""
        from timesheet_api.services.numbering import generate_invoice_number

        monday = generate_invoice_number("cm5fellow0a1b", date(2025, 1, 20))
        thursday = generate_invoice_number("cm5fellow0a1b", date(2025, 1, 23))

        assert monday == thursday
