"""Tests for the event summary."""

from datetime import timedelta
from decimal import Decimal

from gigbook.domain.summary import GetEventSummary
from gigbook.domain.transaction import AddTransactionInput


def summarize(storage, event_id):
    result = GetEventSummary(storage.events, storage.transactions, storage.settings).execute(
        event_id
    )
    assert result.success, result.error
    return result.data


def add_income(add_transaction, event_id, **kwargs):
    kwargs.setdefault("description", "Honorário")
    result = add_transaction.execute(AddTransactionInput(event_id=event_id, type="INCOME", **kwargs))
    assert result.success, result.error
    return result.data


def test_empty_event(storage, sample_event):
    """Test summary of an event without transactions."""
    summary = summarize(storage, sample_event.id)
    assert summary.upfront_cost == Decimal("0")
    assert summary.total_to_receive == Decimal("0")
    assert summary.transaction_count == 0


def test_expense_only(storage, sample_event, make_expense):
    """Test that an expense is upfront cost and fully reimbursed."""
    make_expense(amount="150.00")
    summary = summarize(storage, sample_event.id)
    assert summary.total_expenses == Decimal("150.00")
    assert summary.upfront_cost == Decimal("150.00")
    assert summary.reimbursement_value == Decimal("150.00")
    assert summary.net_profit == Decimal("0")
    assert summary.total_to_receive == Decimal("150.00")


def test_expense_and_km(storage, sample_event, make_expense, add_transaction):
    """Test that km driven adds to upfront cost and reimbursement."""
    make_expense(amount="150.00")
    add_income(add_transaction, sample_event.id, description="Deslocamento", category="km", distance=100)
    summary = summarize(storage, sample_event.id)
    assert summary.total_km_cost == Decimal("90.00")
    assert summary.upfront_cost == Decimal("240.00")
    assert summary.reimbursement_value == Decimal("240.00")
    assert summary.net_profit == Decimal("0")


def test_daily_fee_is_profit(storage, sample_event, make_expense, add_transaction):
    """Test that fees are profit, not upfront cost."""
    make_expense(amount="150.00")
    add_income(add_transaction, sample_event.id, description="Deslocamento", category="km", distance=100)
    add_income(add_transaction, sample_event.id, description="Diária", category="diaria", amount=300)
    summary = summarize(storage, sample_event.id)
    assert summary.net_profit == Decimal("300")
    assert summary.upfront_cost == Decimal("240.00")
    assert summary.total_to_receive == Decimal("540.00")


def test_travel_time_counts_as_fee(storage, sample_event, add_transaction):
    """Test that travel time is profit and not reimbursement."""
    add_income(
        add_transaction, sample_event.id, description="Tempo de viagem", category="tempo_viagem", hours=2
    )
    add_income(add_transaction, sample_event.id, category="hora_extra", amount=100)
    summary = summarize(storage, sample_event.id)
    assert summary.total_travel_time_cost == Decimal("150.00")
    assert summary.total_fees == Decimal("250.00")
    assert summary.reimbursement_value == Decimal("0")
    assert summary.upfront_cost == Decimal("0")
    assert summary.net_profit == Decimal("250.00")


def test_uncategorized_income(storage, sample_event, add_transaction):
    """Test that uncategorized income is a fee unless flagged as reimbursement."""
    add_income(add_transaction, sample_event.id, description="Bônus", amount=50)
    add_income(
        add_transaction, sample_event.id, description="Estacionamento", amount=20, is_reimbursement=True
    )
    summary = summarize(storage, sample_event.id)
    assert summary.net_profit == Decimal("50")
    assert summary.reimbursement_value == Decimal("20")
    assert summary.upfront_cost == Decimal("0")
    assert summary.total_to_receive == Decimal("70")


def test_receipt_counts_and_dates(storage, sample_event, make_expense):
    """Test receipt counters and expected receipt date."""
    make_expense(has_receipt=True)
    make_expense()
    make_expense()
    summary = summarize(storage, sample_event.id)
    assert summary.expenses_with_receipt == 1
    assert summary.expenses_without_receipt == 2
    assert summary.expense_count == 3
    assert summary.expected_receipt_date == sample_event.date + timedelta(days=21)


def test_summary_ignores_other_events(storage, sample_event, make_expense, event_date):
    """Test that only the event's own transactions are summarized."""
    from gigbook.domain.entities import Event

    other = Event.create(name="Outro evento", date=event_date)
    storage.events.save(other)
    make_expense(amount="100")
    make_expense(amount="999", event_id=other.id)
    assert summarize(storage, sample_event.id).total_expenses == Decimal("100")


def test_summary_missing_event(storage):
    """Test not found."""
    result = GetEventSummary(storage.events, storage.transactions, storage.settings).execute(
        "event_missing"
    )
    assert not result.success
    assert "not found" in result.error
