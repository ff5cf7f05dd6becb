"""Transaction use cases."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from gigbook.database.base import EventRepository, SettingsRepository, TransactionRepository
from gigbook.domain.entities import (
    ExpenseCategory,
    IncomeCategory,
    Transaction,
    TransactionType,
    to_decimal,
)
from gigbook.domain.errors import (
    InvalidStateError,
    NotFoundError,
    ValidationError,
    event_not_found,
    event_paid_locked,
    transaction_not_found,
)
from gigbook.domain.settings import load_settings
from gigbook.domain.usecase import UseCase

logger = logging.getLogger(__name__)


@dataclass
class AddTransactionInput:
    """Raw input for a new transaction.

    Which optional fields matter depends on type and category: km income
    takes ``distance``, travel time takes ``hours``, everything else takes
    ``amount``.
    """

    event_id: str
    type: str
    description: str
    amount: Any = None
    category: Optional[str] = None
    distance: Any = None
    hours: Any = None
    has_receipt: Optional[bool] = None
    is_reimbursement: Optional[bool] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    check_in: Any = None
    check_out: Any = None


@dataclass
class UpdateTransactionInput:
    description: Optional[str] = None
    amount: Any = None
    metadata: Optional[dict] = None

    def is_empty(self) -> bool:
        return self.description is None and self.amount is None and self.metadata is None


def ensure_event_not_paid(events: EventRepository, event_id: str, action: str) -> None:
    """Raise InvalidStateError when the owning event is PAID."""
    event = events.find_by_id(event_id)
    if event is not None and event.is_paid():
        raise InvalidStateError(event_paid_locked(action))


def _parse_type(value: Any) -> TransactionType:
    if not value:
        raise ValidationError("Transaction type is required")
    try:
        return TransactionType(str(value).upper())
    except ValueError:
        raise ValidationError(
            f"Invalid transaction type '{value}'. Must be one of: EXPENSE, INCOME"
        )


def _parse_category(transaction_type: TransactionType, value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    allowed = ExpenseCategory if transaction_type == TransactionType.EXPENSE else IncomeCategory
    try:
        return allowed(value).value
    except ValueError:
        names = ", ".join(member.value for member in allowed)
        raise ValidationError(
            f"Invalid category '{value}' for {transaction_type.value}. Must be one of: {names}"
        )


class AddTransaction(UseCase):
    """Record an expense or income on an event."""

    def __init__(
        self,
        transaction_repository: TransactionRepository,
        event_repository: EventRepository,
        settings_repository: SettingsRepository,
    ):
        self.transaction_repository = transaction_repository
        self.event_repository = event_repository
        self.settings_repository = settings_repository

    def _run(self, data: AddTransactionInput) -> Transaction:
        if data is None:
            raise ValidationError("Transaction input is required")
        if not data.event_id or not str(data.event_id).strip():
            raise ValidationError("Event ID is required")
        transaction_type = _parse_type(data.type)
        if not isinstance(data.description, str) or not data.description.strip():
            raise ValidationError("Transaction description is required")
        category = _parse_category(transaction_type, data.category)

        event = self.event_repository.find_by_id(data.event_id)
        if event is None:
            raise NotFoundError(event_not_found(data.event_id))
        if event.is_paid():
            raise InvalidStateError(event_paid_locked("add"))

        if transaction_type == TransactionType.EXPENSE:
            transaction = self._build_expense(data, category)
        elif category == IncomeCategory.KM:
            transaction = self._build_km(data)
        elif category == IncomeCategory.TEMPO_VIAGEM:
            transaction = self._build_travel_time(data)
        else:
            if data.amount is None:
                raise ValidationError("Amount is required for this transaction")
            transaction = Transaction.create_income(
                event_id=event.id,
                description=data.description,
                amount=data.amount,
                is_reimbursement=bool(data.is_reimbursement),
                category=category,
                hours=data.hours,
            )

        self.transaction_repository.save(transaction)
        logger.info(
            "Added %s %s of %s to event %s",
            transaction.type.value,
            transaction.category or "uncategorized",
            transaction.amount,
            event.id,
        )
        return transaction

    def _build_expense(self, data: AddTransactionInput, category: Optional[str]) -> Transaction:
        if data.amount is None:
            raise ValidationError("Amount is required for EXPENSE transactions")
        return Transaction.create_expense(
            event_id=data.event_id,
            description=data.description,
            amount=data.amount,
            has_receipt=bool(data.has_receipt),
            category=category,
            check_in=data.check_in,
            check_out=data.check_out,
        )

    def _build_km(self, data: AddTransactionInput) -> Transaction:
        if data.distance is None or data.distance == "":
            raise ValidationError("Distance is required for km transactions")
        settings = load_settings(self.settings_repository)
        return Transaction.create_km_income(
            event_id=data.event_id,
            description=data.description,
            distance=data.distance,
            rate_km=settings.rate_km,
            is_reimbursement=True if data.is_reimbursement is None else data.is_reimbursement,
            origin=data.origin,
            destination=data.destination,
        )

    def _build_travel_time(self, data: AddTransactionInput) -> Transaction:
        if data.hours is None or data.hours == "":
            raise ValidationError("Hours are required for travel time")
        hours = to_decimal(data.hours, "Travel hours")
        if hours <= 0:
            raise ValidationError("Travel hours must be greater than zero")
        settings = load_settings(self.settings_repository)
        return Transaction.create_travel_time_income(
            event_id=data.event_id,
            description=data.description,
            hours=hours,
            rate=settings.overtime_rate,
            is_reimbursement=True if data.is_reimbursement is None else data.is_reimbursement,
        )


class UpdateTransaction(UseCase):
    """Edit description, amount or metadata of a transaction."""

    def __init__(
        self,
        transaction_repository: TransactionRepository,
        event_repository: EventRepository,
    ):
        self.transaction_repository = transaction_repository
        self.event_repository = event_repository

    def _run(self, transaction_id: str, data: UpdateTransactionInput) -> Transaction:
        if not transaction_id:
            raise ValidationError("Transaction ID is required")
        if data is None or data.is_empty():
            raise ValidationError("At least one field must be provided for update")

        transaction = self.transaction_repository.find_by_id(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        ensure_event_not_paid(self.event_repository, transaction.event_id, "update")

        transaction.update_details(
            description=data.description,
            amount=data.amount,
            metadata=data.metadata,
        )
        return self.transaction_repository.save(transaction)


class MarkReceiptIssued(UseCase):
    """Flag an expense as backed by a receipt (nota fiscal)."""

    def __init__(
        self,
        transaction_repository: TransactionRepository,
        event_repository: EventRepository,
    ):
        self.transaction_repository = transaction_repository
        self.event_repository = event_repository

    def _run(self, transaction_id: str) -> Transaction:
        if not transaction_id:
            raise ValidationError("Transaction ID is required")
        transaction = self.transaction_repository.find_by_id(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        ensure_event_not_paid(self.event_repository, transaction.event_id, "update")

        transaction.mark_receipt_issued()
        return self.transaction_repository.save(transaction)


class DeleteTransaction(UseCase):
    """Remove a transaction. Returns the deleted ID."""

    def __init__(
        self,
        transaction_repository: TransactionRepository,
        event_repository: EventRepository,
    ):
        self.transaction_repository = transaction_repository
        self.event_repository = event_repository

    def _run(self, transaction_id: str) -> str:
        if not transaction_id:
            raise ValidationError("Transaction ID is required")
        transaction = self.transaction_repository.find_by_id(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        ensure_event_not_paid(self.event_repository, transaction.event_id, "delete")

        self.transaction_repository.delete(transaction_id)
        logger.info("Deleted transaction %s from event %s", transaction_id, transaction.event_id)
        return transaction_id


class ListTransactions(UseCase):
    def __init__(self, transaction_repository: TransactionRepository):
        self.transaction_repository = transaction_repository

    def _run(self, event_id: Optional[str] = None, type: Optional[str] = None) -> list[Transaction]:
        transaction_type = _parse_type(type) if type else None
        transactions = self.transaction_repository.find_all(event_id=event_id, type=transaction_type)
        return sorted(transactions, key=lambda t: t.created_at)
