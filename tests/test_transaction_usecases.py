"""Tests for transaction use cases."""

import pytest
from decimal import Decimal

from gigbook.domain.settings import UpdateSettings, UpdateSettingsInput
from gigbook.domain.transaction import (
    AddTransactionInput,
    DeleteTransaction,
    ListTransactions,
    MarkReceiptIssued,
    UpdateTransaction,
    UpdateTransactionInput,
)


def income(event_id, **kwargs):
    kwargs.setdefault("description", "Honorário")
    return AddTransactionInput(event_id=event_id, type="INCOME", **kwargs)


class TestAddTransaction:
    """Tests for AddTransaction."""

    def test_add_expense(self, storage, sample_event, add_transaction):
        """Test adding a plain expense."""
        result = add_transaction.execute(
            AddTransactionInput(
                event_id=sample_event.id,
                type="EXPENSE",
                description="Material de escritório",
                amount="150.00",
                has_receipt=True,
            )
        )
        assert result.success
        transaction = result.data
        assert transaction.amount == Decimal("150.00")
        assert transaction.has_receipt
        assert storage.transactions.find_by_id(transaction.id) is not None

    def test_add_accommodation_keeps_dates(self, sample_event, add_transaction):
        """Test that hotel check-in and check-out are kept."""
        result = add_transaction.execute(
            AddTransactionInput(
                event_id=sample_event.id,
                type="EXPENSE",
                description="Hotel Central",
                amount=560,
                category="accommodation",
                check_in="2024-05-09",
                check_out="2024-05-11",
            )
        )
        assert result.success
        record = result.data.to_record()["metadata"]
        assert record == {
            "hasReceipt": False,
            "category": "accommodation",
            "checkIn": "2024-05-09",
            "checkOut": "2024-05-11",
        }

    @pytest.mark.parametrize(
        "amount,ok",
        [("0", False), ("-10", False), ("10000000.01", False), ("10000000", True), ("0.01", True)],
    )
    def test_amount_boundaries(self, sample_event, add_transaction, amount, ok):
        """Test amount bounds through the use case."""
        result = add_transaction.execute(
            AddTransactionInput(
                event_id=sample_event.id, type="EXPENSE", description="Compra", amount=amount
            )
        )
        assert result.success is ok

    def test_expense_requires_amount(self, sample_event, add_transaction):
        """Test missing amount."""
        result = add_transaction.execute(
            AddTransactionInput(event_id=sample_event.id, type="EXPENSE", description="Compra")
        )
        assert not result.success
        assert "Amount is required" in result.error

    def test_missing_fields(self, sample_event, add_transaction):
        """Test required input fields."""
        assert "Event ID" in add_transaction.execute(
            AddTransactionInput(event_id="", type="EXPENSE", description="Compra", amount=1)
        ).error
        assert "type" in add_transaction.execute(
            AddTransactionInput(event_id=sample_event.id, type="", description="Compra", amount=1)
        ).error
        assert "description" in add_transaction.execute(
            AddTransactionInput(event_id=sample_event.id, type="EXPENSE", description="  ", amount=1)
        ).error

    def test_invalid_type_and_category(self, sample_event, add_transaction):
        """Test type and category validation."""
        result = add_transaction.execute(
            AddTransactionInput(event_id=sample_event.id, type="TRANSFER", description="X", amount=1)
        )
        assert "Invalid transaction type" in result.error

        result = add_transaction.execute(income(sample_event.id, category="bonus", amount=1))
        assert "Invalid category 'bonus'" in result.error

        result = add_transaction.execute(
            AddTransactionInput(
                event_id=sample_event.id,
                type="EXPENSE",
                description="Compra",
                amount=1,
                category="diaria",
            )
        )
        assert not result.success

    def test_unknown_event(self, add_transaction):
        """Test that the event must exist."""
        result = add_transaction.execute(income("event_missing", amount=100))
        assert not result.success
        assert "not found" in result.error

    def test_km_income_uses_rate(self, sample_event, add_transaction):
        """Test km amount = distance x rate_km at 0.90."""
        result = add_transaction.execute(
            income(sample_event.id, description="Deslocamento", category="km", distance=100)
        )
        assert result.success
        assert result.data.amount == Decimal("90.00")
        assert result.data.is_reimbursement

    def test_km_requires_distance(self, sample_event, add_transaction):
        """Test missing distance."""
        result = add_transaction.execute(income(sample_event.id, category="km"))
        assert not result.success
        assert "Distance is required" in result.error

    def test_zero_distance_fails_amount_bound(self, sample_event, add_transaction):
        """Test that zero km passes input checks but yields a rejected zero amount."""
        result = add_transaction.execute(income(sample_event.id, category="km", distance=0))
        assert not result.success
        assert "greater than zero" in result.error

    def test_km_amount_is_frozen(self, storage, sample_event, add_transaction):
        """Test that later rate changes do not touch existing transactions."""
        result = add_transaction.execute(income(sample_event.id, category="km", distance=100))
        UpdateSettings(storage.settings).execute(UpdateSettingsInput(rate_km="2.00"))
        stored = storage.transactions.find_by_id(result.data.id)
        assert stored.amount == Decimal("90.00")

    def test_travel_time_uses_overtime_rate(self, sample_event, add_transaction):
        """Test tempo_viagem amount = hours x overtime rate."""
        result = add_transaction.execute(
            income(sample_event.id, description="Tempo de viagem", category="tempo_viagem", hours="2")
        )
        assert result.success
        assert result.data.amount == Decimal("150.00")
        assert result.data.metadata.hours == Decimal("2")

    @pytest.mark.parametrize("hours", [None, "0", "-1", "abc"])
    def test_travel_time_requires_positive_hours(self, sample_event, add_transaction, hours):
        """Test hours validation for travel time."""
        result = add_transaction.execute(
            income(sample_event.id, category="tempo_viagem", hours=hours)
        )
        assert not result.success
        assert "hours" in result.error.lower()

    def test_daily_fee(self, sample_event, add_transaction):
        """Test a diaria fee with caller-supplied amount."""
        result = add_transaction.execute(
            income(sample_event.id, description="Diária", category="diaria", amount=300)
        )
        assert result.success
        assert result.data.category == "diaria"
        assert not result.data.is_reimbursement

    def test_overtime_with_hours(self, sample_event, add_transaction):
        """Test hora_extra keeps its hours."""
        result = add_transaction.execute(
            income(sample_event.id, category="hora_extra", amount=150, hours=2)
        )
        assert result.success
        assert result.data.metadata.hours == Decimal("2")

    def test_paid_event_blocks_add(self, paid_event, add_transaction):
        """Test that PAID events accept no new transactions."""
        result = add_transaction.execute(income(paid_event.id, amount=100))
        assert not result.success
        assert "paid event" in result.error


class TestUpdateTransaction:
    """Tests for UpdateTransaction."""

    def test_update_amount_and_description(self, storage, make_expense):
        """Test updating fields."""
        expense = make_expense()
        use_case = UpdateTransaction(storage.transactions, storage.events)
        result = use_case.execute(
            expense.id, UpdateTransactionInput(description="Papelaria", amount="175.50")
        )
        assert result.success
        stored = storage.transactions.find_by_id(expense.id)
        assert stored.description == "Papelaria"
        assert stored.amount == Decimal("175.50")

    def test_update_rejects_invalid_amount(self, storage, make_expense):
        """Test entity validation on update."""
        expense = make_expense()
        result = UpdateTransaction(storage.transactions, storage.events).execute(
            expense.id, UpdateTransactionInput(amount="0")
        )
        assert not result.success
        assert storage.transactions.find_by_id(expense.id).amount == Decimal("150.00")

    def test_update_requires_a_field(self, storage, make_expense):
        """Test empty update."""
        expense = make_expense()
        result = UpdateTransaction(storage.transactions, storage.events).execute(
            expense.id, UpdateTransactionInput()
        )
        assert not result.success

    def test_update_missing_transaction(self, storage):
        """Test not found."""
        result = UpdateTransaction(storage.transactions, storage.events).execute(
            "expense_missing", UpdateTransactionInput(amount=1)
        )
        assert "not found" in result.error

    def test_update_blocked_when_paid(self, storage, paid_event):
        """Test that transactions of PAID events are locked."""
        expense = storage.transactions.find_by_event_id(paid_event.id)[0]
        result = UpdateTransaction(storage.transactions, storage.events).execute(
            expense.id, UpdateTransactionInput(amount="1")
        )
        assert not result.success
        assert "paid event" in result.error

    def test_transactions_editable_while_report_sent(
        self, storage, sample_event, make_expense, update_status
    ):
        """Test that only PAID locks transactions."""
        expense = make_expense()
        update_status.execute(sample_event.id, "DONE")
        update_status.execute(sample_event.id, "REPORT_SENT")
        result = UpdateTransaction(storage.transactions, storage.events).execute(
            expense.id, UpdateTransactionInput(amount="10")
        )
        assert result.success


class TestDeleteTransaction:
    """Tests for DeleteTransaction."""

    def test_delete(self, storage, make_expense):
        """Test deleting a transaction returns its ID."""
        expense = make_expense()
        result = DeleteTransaction(storage.transactions, storage.events).execute(expense.id)
        assert result.success
        assert result.data == expense.id
        assert storage.transactions.find_by_id(expense.id) is None

    def test_delete_missing(self, storage):
        """Test not found."""
        result = DeleteTransaction(storage.transactions, storage.events).execute("expense_missing")
        assert not result.success
        assert "not found" in result.error

    def test_delete_blocked_when_paid(self, storage, paid_event):
        """Test that transactions of PAID events cannot be deleted."""
        expense = storage.transactions.find_by_event_id(paid_event.id)[0]
        result = DeleteTransaction(storage.transactions, storage.events).execute(expense.id)
        assert not result.success
        assert "Cannot delete transactions of a paid event" in result.error
        assert storage.transactions.find_by_id(expense.id) is not None


class TestReceiptAndList:
    """Tests for MarkReceiptIssued and ListTransactions."""

    def test_mark_receipt(self, storage, make_expense):
        """Test flagging the receipt."""
        expense = make_expense()
        result = MarkReceiptIssued(storage.transactions, storage.events).execute(expense.id)
        assert result.success
        assert storage.transactions.find_by_id(expense.id).has_receipt

    def test_list_in_creation_order(self, storage, sample_event, make_expense, add_transaction):
        """Test list order and type filter."""
        first = make_expense()
        fee = add_transaction.execute(income(sample_event.id, category="diaria", amount=300)).data
        second = make_expense(amount="20")

        result = ListTransactions(storage.transactions).execute(event_id=sample_event.id)
        assert [t.id for t in result.data] == [first.id, fee.id, second.id]

        result = ListTransactions(storage.transactions).execute(type="income")
        assert [t.id for t in result.data] == [fee.id]
