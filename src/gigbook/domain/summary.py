"""Financial summary of one event."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from gigbook.database.base import EventRepository, SettingsRepository, TransactionRepository
from gigbook.domain.entities import EventStatus, IncomeCategory, Transaction
from gigbook.domain.errors import NotFoundError, ValidationError, event_not_found
from gigbook.domain.settings import load_settings
from gigbook.domain.usecase import UseCase

FEE_CATEGORIES = frozenset({IncomeCategory.DIARIA.value, IncomeCategory.HORA_EXTRA.value})


def _total(transactions: tuple[Transaction, ...]) -> Decimal:
    return sum((t.amount for t in transactions), Decimal("0"))


@dataclass(frozen=True)
class EventSummary:
    """What an event cost up front versus what it earned.

    ``upfront_cost`` is money the worker advanced (expenses and km driven).
    ``reimbursement_value`` is what the client pays back for it and
    ``net_profit`` is what the worker actually earned (fees and travel time).
    """

    event_id: str
    event_name: str
    event_date: date
    status: EventStatus
    expenses: tuple[Transaction, ...]
    km: tuple[Transaction, ...]
    travel_time: tuple[Transaction, ...]
    fees: tuple[Transaction, ...]
    other_reimbursements: tuple[Transaction, ...]
    expected_receipt_date: date
    expected_payment_date: Optional[date] = None

    @property
    def total_expenses(self) -> Decimal:
        return _total(self.expenses)

    @property
    def total_km_cost(self) -> Decimal:
        return _total(self.km)

    @property
    def total_travel_time_cost(self) -> Decimal:
        return _total(self.travel_time)

    @property
    def total_fees(self) -> Decimal:
        """Daily, overtime and uncategorized fees plus travel time."""
        return _total(self.fees) + self.total_travel_time_cost

    @property
    def total_other_reimbursements(self) -> Decimal:
        return _total(self.other_reimbursements)

    @property
    def upfront_cost(self) -> Decimal:
        return self.total_expenses + self.total_km_cost

    @property
    def reimbursement_value(self) -> Decimal:
        return self.total_expenses + self.total_km_cost + self.total_other_reimbursements

    @property
    def net_profit(self) -> Decimal:
        return self.total_fees

    @property
    def total_to_receive(self) -> Decimal:
        return self.reimbursement_value + self.net_profit

    @property
    def expenses_with_receipt(self) -> int:
        return sum(1 for t in self.expenses if t.has_receipt)

    @property
    def expenses_without_receipt(self) -> int:
        return sum(1 for t in self.expenses if not t.has_receipt)

    @property
    def expense_count(self) -> int:
        return len(self.expenses)

    @property
    def income_count(self) -> int:
        return len(self.km) + len(self.travel_time) + len(self.fees) + len(self.other_reimbursements)

    @property
    def transaction_count(self) -> int:
        return self.expense_count + self.income_count


class GetEventSummary(UseCase):
    """Build the EventSummary of an event."""

    def __init__(
        self,
        event_repository: EventRepository,
        transaction_repository: TransactionRepository,
        settings_repository: SettingsRepository,
    ):
        self.event_repository = event_repository
        self.transaction_repository = transaction_repository
        self.settings_repository = settings_repository

    def _run(self, event_id: str) -> EventSummary:
        if not event_id:
            raise ValidationError("Event ID is required")
        event = self.event_repository.find_by_id(event_id)
        if event is None:
            raise NotFoundError(event_not_found(event_id))
        settings = load_settings(self.settings_repository)

        transactions = sorted(
            self.transaction_repository.find_by_event_id(event.id), key=lambda t: t.created_at
        )
        expenses, km, travel_time, fees, other = [], [], [], [], []
        for transaction in transactions:
            category = transaction.category
            if transaction.is_expense():
                expenses.append(transaction)
            elif category == IncomeCategory.KM:
                km.append(transaction)
            elif category == IncomeCategory.TEMPO_VIAGEM:
                travel_time.append(transaction)
            elif category in FEE_CATEGORIES or not transaction.is_reimbursement:
                fees.append(transaction)
            else:
                other.append(transaction)

        return EventSummary(
            event_id=event.id,
            event_name=event.name,
            event_date=event.date,
            status=event.status,
            expenses=tuple(expenses),
            km=tuple(km),
            travel_time=tuple(travel_time),
            fees=tuple(fees),
            other_reimbursements=tuple(other),
            expected_receipt_date=settings.calculate_expected_reimbursement_date(event.date),
            expected_payment_date=event.expected_payment_date,
        )
