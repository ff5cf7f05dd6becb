"""Tests for domain entities."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from gigbook.domain.entities import (
    AccommodationMetadata,
    DEFAULT_CITY,
    DEFAULT_CLIENT,
    Event,
    EventStatus,
    ExpenseMetadata,
    HoursMetadata,
    IncomeMetadata,
    KmMetadata,
    Settings,
    Transaction,
    TransactionType,
    metadata_from_record,
)
from gigbook.domain.errors import InvalidStateError, ValidationError


class TestEvent:
    """Tests for Event entity."""

    def test_create_event_is_planned_and_editable(self):
        """Test that a new event starts PLANNED and editable."""
        event = Event.create(name="Feira de Negócios", date=date.today())
        assert event.status == EventStatus.PLANNED
        assert event.is_editable
        assert event.is_planned()
        assert event.id.startswith("event_")
        assert event.start_date == event.date
        assert event.end_date is None

    def test_name_is_trimmed_and_validated(self):
        """Test name length bounds."""
        event = Event.create(name="  Show  ", date=date.today())
        assert event.name == "Show"
        with pytest.raises(ValidationError, match="at least 3"):
            Event.create(name="ab", date=date.today())
        with pytest.raises(ValidationError, match="cannot exceed 200"):
            Event.create(name="x" * 201, date=date.today())
        with pytest.raises(ValidationError, match="required"):
            Event.create(name="   ", date=date.today())

    def test_date_window(self):
        """Test that dates beyond 10 years back or 5 years ahead are rejected."""
        today = date.today()
        Event.create(name="Antigo", date=today - relativedelta(years=10))
        Event.create(name="Futuro", date=today + relativedelta(years=5))
        with pytest.raises(ValidationError, match="10 years"):
            Event.create(name="Antigo", date=today - relativedelta(years=10, days=1))
        with pytest.raises(ValidationError, match="5 years"):
            Event.create(name="Futuro", date=today + relativedelta(years=5, days=1))

    def test_restore_skips_date_window(self):
        """Test that a stored event keeps loading after it turns ten years old."""
        old_date = date.today() - relativedelta(years=10, days=1)
        event = Event.restore(
            {"id": "event_1", "name": "Evento antigo", "date": old_date.isoformat(), "status": "PAID"}
        )
        assert event.date == old_date

    def test_update_details_applies_date_window(self):
        """Test that editing the date is still bounded."""
        event = Event.create(name="Evento", date=date.today())
        with pytest.raises(ValidationError, match="5 years"):
            event.update_details(date=date.today() + relativedelta(years=5, days=1))

    def test_date_accepts_iso_string(self):
        """Test that ISO strings are parsed."""
        today = date.today()
        event = Event.create(name="Evento", date=today.isoformat())
        assert event.date == today

    def test_end_date_before_start_date_rejected(self):
        """Test period ordering."""
        today = date.today()
        with pytest.raises(ValidationError, match="End date"):
            Event.create(name="Evento", date=today, end_date=today - timedelta(days=1))

    def test_client_and_city_optional_but_bounded(self):
        """Test optional client/city validation."""
        event = Event.create(name="Evento", date=date.today(), client="", city=None)
        assert event.client == ""
        assert event.city == ""
        with pytest.raises(ValidationError, match="Client"):
            Event.create(name="Evento", date=date.today(), client="AB")

    def test_restore_fills_missing_client_and_city(self):
        """Test that older records get placeholder client and city."""
        record = {
            "id": "event_1",
            "name": "Evento antigo",
            "date": date.today().isoformat(),
            "status": "DONE",
            "createdAt": "2024-01-01T10:00:00+00:00",
        }
        event = Event.restore(record)
        assert event.client == DEFAULT_CLIENT
        assert event.city == DEFAULT_CITY
        assert event.status == EventStatus.DONE
        assert event.updated_at == event.created_at

    def test_record_round_trip(self):
        """Test Event.restore(event.to_record())."""
        event = Event.create(
            name="Evento",
            date=date.today(),
            description="Descrição",
            client="Cliente",
            city="Recife",
            end_date=date.today() + timedelta(days=2),
        )
        restored = Event.restore(event.to_record())
        assert restored == event

    def test_update_details_moves_matching_dates(self):
        """Test that changing the date moves start/end dates equal to the old date."""
        today = date.today()
        event = Event.create(name="Evento", date=today, end_date=today)
        new_date = today + timedelta(days=7)
        event.update_details(date=new_date)
        assert event.date == new_date
        assert event.start_date == new_date
        assert event.end_date == new_date

    def test_update_details_rejected_when_not_editable(self):
        """Test that REPORT_SENT and PAID events cannot be edited."""
        event = Event.create(name="Evento", date=date.today())
        event.mark_report_sent(date.today(), 21)
        with pytest.raises(InvalidStateError, match="cannot be edited"):
            event.update_details(name="Outro nome")
        event.mark_paid()
        assert not event.is_editable

    def test_mark_report_sent_schedules_payment(self):
        """Test expected payment date computation."""
        event = Event.create(name="Evento", date=date.today())
        sent = date.today()
        event.mark_report_sent(sent, 21)
        assert event.is_report_sent()
        assert event.expected_payment_date == sent + timedelta(days=21)

    def test_mark_paid_clears_expected_payment(self):
        """Test that paying clears the expected payment date."""
        event = Event.create(name="Evento", date=date.today())
        event.mark_report_sent(date.today(), 10)
        event.mark_paid()
        assert event.is_paid()
        assert event.expected_payment_date is None

    def test_can_transition_to(self):
        """Test the transition table."""
        event = Event.create(name="Evento", date=date.today())
        assert event.can_transition_to(EventStatus.DONE)
        assert not event.can_transition_to(EventStatus.REPORT_SENT)
        assert not event.can_transition_to(EventStatus.PAID)
        event.change_status(EventStatus.PAID)
        assert not any(event.can_transition_to(s) for s in EventStatus)


class TestTransaction:
    """Tests for Transaction entity."""

    def test_amount_bounds(self):
        """Test 0 < amount <= 10,000,000."""
        ok = Transaction.create_expense("event_1", "Compra", "10000000")
        assert ok.amount == Decimal("10000000")
        for bad in ("0", "-1", "10000000.01"):
            with pytest.raises(ValidationError):
                Transaction.create_expense("event_1", "Compra", bad)

    def test_non_numeric_amount_rejected(self):
        """Test that text amounts are rejected."""
        with pytest.raises(ValidationError, match="must be a number"):
            Transaction.create_expense("event_1", "Compra", "abc")

    def test_description_bounds(self):
        """Test description length."""
        with pytest.raises(ValidationError, match="at least 3"):
            Transaction.create_expense("event_1", "ab", 10)
        with pytest.raises(ValidationError, match="cannot exceed 500"):
            Transaction.create_expense("event_1", "x" * 501, 10)

    def test_expense_metadata(self):
        """Test plain and accommodation expense metadata."""
        expense = Transaction.create_expense("event_1", "Compra", 10, has_receipt=True)
        assert isinstance(expense.metadata, ExpenseMetadata)
        assert expense.has_receipt
        assert expense.category is None

        hotel = Transaction.create_expense(
            "event_1",
            "Hotel",
            280,
            category="accommodation",
            check_in="2024-05-09",
            check_out="2024-05-11",
        )
        assert isinstance(hotel.metadata, AccommodationMetadata)
        assert hotel.metadata.check_in == date(2024, 5, 9)
        assert hotel.to_record()["metadata"]["checkOut"] == "2024-05-11"

    def test_check_out_before_check_in_rejected(self):
        """Test accommodation date ordering."""
        with pytest.raises(ValidationError, match="Check-out"):
            Transaction.create_expense(
                "event_1",
                "Hotel",
                280,
                category="accommodation",
                check_in="2024-05-11",
                check_out="2024-05-09",
            )

    def test_invalid_expense_category_rejected(self):
        """Test that only accommodation is an expense category."""
        with pytest.raises(ValidationError):
            Transaction.create_expense("event_1", "Compra", 10, category="food")

    def test_km_income_amount_and_description(self):
        """Test km amount is distance times rate, frozen at creation."""
        transaction = Transaction.create_km_income(
            "event_1", "ida e volta", 100, Decimal("0.90"), origin="Recife", destination="Caruaru"
        )
        assert transaction.amount == Decimal("90.00")
        assert transaction.is_reimbursement
        assert transaction.description == "Deslocamento: Recife → Caruaru - ida e volta"
        assert isinstance(transaction.metadata, KmMetadata)
        assert transaction.metadata.distance == Decimal("100")

    def test_km_amount_rounds_half_up(self):
        """Test cent rounding of computed amounts."""
        transaction = Transaction.create_km_income("event_1", "Deslocamento", "10.5", Decimal("0.45"))
        # 4.725 -> 4.73
        assert transaction.amount == Decimal("4.73")

    def test_zero_km_rejected_by_amount_bound(self):
        """Test that zero distance yields a zero amount, which is rejected."""
        with pytest.raises(ValidationError, match="greater than zero"):
            Transaction.create_km_income("event_1", "Deslocamento", 0, Decimal("0.90"))

    def test_negative_distance_rejected(self):
        """Test negative distance."""
        with pytest.raises(ValidationError, match="negative"):
            Transaction.create_km_income("event_1", "Deslocamento", -5, Decimal("0.90"))

    def test_travel_time_income(self):
        """Test travel time amount is hours times rate."""
        transaction = Transaction.create_travel_time_income(
            "event_1", "Tempo de viagem", "2.5", Decimal("75.00")
        )
        assert transaction.amount == Decimal("187.50")
        assert isinstance(transaction.metadata, HoursMetadata)
        assert transaction.metadata.hours == Decimal("2.5")

    def test_travel_time_requires_hours(self):
        """Test that travel time metadata needs hours."""
        with pytest.raises(ValidationError, match="Hours are required"):
            HoursMetadata(category="tempo_viagem")

    def test_overtime_hours_optional(self):
        """Test that hora_extra metadata may omit hours."""
        transaction = Transaction.create_income("event_1", "Hora extra", 150, category="hora_extra")
        assert isinstance(transaction.metadata, HoursMetadata)
        assert transaction.metadata.hours is None

    def test_income_metadata_rejects_wrong_category(self):
        """Test variant/category consistency."""
        with pytest.raises(ValidationError):
            IncomeMetadata(category="km")
        with pytest.raises(ValidationError):
            IncomeMetadata(category="transporte")

    def test_metadata_from_record_picks_variant(self):
        """Test variant dispatch on type and category."""
        assert isinstance(metadata_from_record(TransactionType.EXPENSE, {}), ExpenseMetadata)
        assert isinstance(
            metadata_from_record(TransactionType.INCOME, {"category": "km", "distance": 10}),
            KmMetadata,
        )
        assert isinstance(
            metadata_from_record(TransactionType.INCOME, {"category": "tempo_viagem", "hours": 1}),
            HoursMetadata,
        )
        with pytest.raises(ValidationError):
            metadata_from_record(TransactionType.EXPENSE, {"category": "diaria"})

    def test_record_round_trip(self):
        """Test Transaction.restore(transaction.to_record())."""
        original = Transaction.create_km_income(
            "event_1", "Deslocamento", 42, Decimal("0.90"), origin="A", destination="B"
        )
        restored = Transaction.restore(original.to_record())
        assert restored.id == original.id
        assert restored.event_id == original.event_id
        assert restored.type == original.type
        assert restored.description == original.description
        assert restored.amount == original.amount
        assert restored.metadata == original.metadata

    def test_update_details_merges_metadata(self):
        """Test that a metadata dict is merged and revalidated."""
        transaction = Transaction.create_expense("event_1", "Compra", 10)
        transaction.update_details(amount="12.50", metadata={"hasReceipt": True})
        assert transaction.amount == Decimal("12.50")
        assert transaction.has_receipt
        with pytest.raises(ValidationError):
            transaction.update_details(amount=0)
        assert transaction.amount == Decimal("12.50")

    def test_mark_receipt_issued_only_for_expenses(self):
        """Test receipt flag is for expenses."""
        income = Transaction.create_income("event_1", "Diária", 300, category="diaria")
        with pytest.raises(ValidationError, match="EXPENSE"):
            income.mark_receipt_issued()


class TestSettings:
    """Tests for Settings entity."""

    def test_defaults(self):
        """Test default values."""
        settings = Settings.create_default()
        assert settings.rate_km == Decimal("0.90")
        assert settings.rate_travel_time == Decimal("75.00")
        assert settings.default_reimbursement_days == 21
        assert settings.max_hotel_rate == Decimal("280.00")
        assert settings.standard_daily_rate == Decimal("300.00")
        assert settings.overtime_rate == Decimal("75.00")

    def test_restore_fills_missing_fields(self):
        """Test that missing fields fall back to defaults."""
        settings = Settings.restore({"rateKm": 1.2})
        assert settings.rate_km == Decimal("1.2")
        assert settings.overtime_rate == Decimal("75.00")

    def test_update_overtime_moves_travel_time_rate(self):
        """Test overtime and travel time rates stay in sync."""
        settings = Settings.create_default()
        settings.update(overtime_rate="90")
        assert settings.overtime_rate == Decimal("90")
        assert settings.rate_travel_time == Decimal("90")

        settings.update(overtime_rate="100", rate_travel_time="80")
        assert settings.rate_travel_time == Decimal("80")

    def test_update_bounds(self):
        """Test ceilings and day range."""
        settings = Settings.create_default()
        with pytest.raises(ValidationError, match="KM rate"):
            settings.update(rate_km="1000.01")
        with pytest.raises(ValidationError, match="negative"):
            settings.update(standard_daily_rate="-1")
        with pytest.raises(ValidationError, match="365"):
            settings.update(default_reimbursement_days=366)
        with pytest.raises(ValidationError, match="at least 1"):
            settings.update(default_reimbursement_days=0)
        with pytest.raises(ValidationError, match="Unknown"):
            settings.update(hourly_rate=10)
        assert settings.rate_km == Decimal("0.90")

    def test_calculations(self):
        """Test derived values."""
        settings = Settings.create_default()
        assert settings.calculate_km_value(100) == Decimal("90.00")
        assert settings.calculate_travel_time_value(2) == Decimal("150.00")
        assert settings.calculate_expected_reimbursement_date(date(2024, 1, 1)) == date(2024, 1, 22)
