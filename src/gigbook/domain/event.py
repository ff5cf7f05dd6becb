"""Event use cases: creation, editing, listing, deletion and the status workflow."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from gigbook.database.base import EventRepository, SettingsRepository, TransactionRepository
from gigbook.domain.entities import (
    WORKFLOW_STATUSES,
    Event,
    EventStatus,
    IncomeCategory,
    TransactionType,
    to_date,
)
from gigbook.domain.errors import (
    DomainError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    event_delete_blocked,
    event_not_editable,
    event_not_found,
    no_transactions_for_done,
    status_transition_rejected,
)
from gigbook.domain.settings import load_settings
from gigbook.domain.transaction import AddTransaction, AddTransactionInput
from gigbook.domain.usecase import UseCase

logger = logging.getLogger(__name__)

DAILY_FEE_DESCRIPTION = "Diária Técnica Padrão"

# Next step of the workflow, used to explain skipped transitions.
NEXT_STATUS = {
    EventStatus.PLANNED: EventStatus.DONE,
    EventStatus.DONE: EventStatus.REPORT_SENT,
    EventStatus.REPORT_SENT: EventStatus.PAID,
}


@dataclass
class CreateEventInput:
    name: str
    date: Any
    description: str = ""
    client: str = ""
    city: str = ""
    start_date: Any = None
    end_date: Any = None
    auto_create_daily: bool = False


@dataclass
class UpdateEventInput:
    """Fields to change; None leaves a field untouched."""

    name: Optional[str] = None
    date: Any = None
    description: Optional[str] = None
    client: Optional[str] = None
    city: Optional[str] = None
    start_date: Any = None
    end_date: Any = None
    clear_end_date: bool = False

    def is_empty(self) -> bool:
        values = (
            self.name,
            self.date,
            self.description,
            self.client,
            self.city,
            self.start_date,
            self.end_date,
        )
        return all(value is None for value in values) and not self.clear_end_date


@dataclass
class DeleteEventOutcome:
    """Result of a cascading event delete.

    ``failed_transactions`` holds (transaction_id, error message) pairs for
    children that could not be removed.
    """

    event_id: str
    deleted_transactions: list[str] = field(default_factory=list)
    failed_transactions: list[tuple[str, str]] = field(default_factory=list)


def _require_event(repository: EventRepository, event_id: str) -> Event:
    if not event_id or not str(event_id).strip():
        raise ValidationError("Event ID is required")
    event = repository.find_by_id(event_id)
    if event is None:
        raise NotFoundError(event_not_found(event_id))
    return event


def _parse_workflow_status(value: Any) -> EventStatus:
    if not value:
        raise ValidationError("New status is required")
    try:
        status = EventStatus(str(value).upper())
    except ValueError:
        status = None
    if status not in WORKFLOW_STATUSES:
        allowed = ", ".join(s.value for s in WORKFLOW_STATUSES)
        raise ValidationError(f"Invalid status '{value}'. Must be one of: {allowed}")
    return status


class CreateEvent(UseCase):
    """Create a PLANNED event, optionally with the standard daily fee."""

    def __init__(
        self,
        event_repository: EventRepository,
        add_transaction: Optional[AddTransaction] = None,
        settings_repository: Optional[SettingsRepository] = None,
    ):
        self.event_repository = event_repository
        self.add_transaction = add_transaction
        self.settings_repository = settings_repository

    def _run(self, data: CreateEventInput) -> Event:
        if data is None:
            raise ValidationError("Event input is required")
        event = Event.create(
            name=data.name,
            date=data.date,
            description=data.description,
            client=data.client,
            city=data.city,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        self.event_repository.save(event)
        logger.info("Created event %s (%s)", event.id, event.name)

        if data.auto_create_daily:
            self._add_daily_fee(event)
        return event

    def _add_daily_fee(self, event: Event) -> None:
        if self.add_transaction is None or self.settings_repository is None:
            logger.warning("Daily fee requested for %s but no transaction service is wired", event.id)
            return
        try:
            rate = load_settings(self.settings_repository).standard_daily_rate
        except DomainError as e:
            logger.warning("Could not read the daily rate for event %s: %s", event.id, e)
            return
        result = self.add_transaction.execute(
            AddTransactionInput(
                event_id=event.id,
                type=TransactionType.INCOME.value,
                description=DAILY_FEE_DESCRIPTION,
                amount=rate,
                category=IncomeCategory.DIARIA.value,
                is_reimbursement=False,
            )
        )
        if not result.success:
            logger.warning("Could not add daily fee to event %s: %s", event.id, result.error)


class GetEvent(UseCase):
    def __init__(self, event_repository: EventRepository):
        self.event_repository = event_repository

    def _run(self, event_id: str) -> Event:
        return _require_event(self.event_repository, event_id)


class ListEvents(UseCase):
    """List events. CANCELLED events are hidden unless asked for."""

    def __init__(self, event_repository: EventRepository):
        self.event_repository = event_repository

    def _run(
        self,
        status: Optional[str] = None,
        include_cancelled: bool = False,
        order_by: str = "date",
        descending: bool = True,
    ) -> list[Event]:
        status_filter = None
        if status:
            try:
                status_filter = EventStatus(str(status).upper())
            except ValueError:
                allowed = ", ".join(s.value for s in EventStatus)
                raise ValidationError(f"Invalid status '{status}'. Must be one of: {allowed}")
        if order_by not in ("date", "name", "created_at"):
            raise ValidationError(
                f"Invalid order '{order_by}'. Must be one of: date, name, created_at"
            )

        events = self.event_repository.find_all(
            status=status_filter, order_by=order_by, descending=descending
        )
        if include_cancelled or status_filter == EventStatus.CANCELLED:
            return events
        return [e for e in events if not e.is_cancelled()]


class UpdateEvent(UseCase):
    """Edit the details of a PLANNED or DONE event."""

    def __init__(self, event_repository: EventRepository):
        self.event_repository = event_repository

    def _run(self, event_id: str, data: UpdateEventInput) -> Event:
        if data is None or data.is_empty():
            raise ValidationError("At least one field must be provided for update")
        event = _require_event(self.event_repository, event_id)
        if not event.is_editable:
            raise InvalidStateError(event_not_editable(event.status.value))

        event.update_details(
            name=data.name,
            date=data.date,
            description=data.description,
            client=data.client,
            city=data.city,
            start_date=data.start_date,
            end_date=data.end_date,
            clear_end_date=data.clear_end_date,
        )
        return self.event_repository.save(event)


class UpdateEventStatus(UseCase):
    """Move an event along PLANNED -> DONE -> REPORT_SENT -> PAID.

    Requesting the current status is a no-op, except REPORT_SENT which
    reschedules the expected payment date from the new sent date.
    """

    def __init__(
        self,
        event_repository: EventRepository,
        transaction_repository: TransactionRepository,
        settings_repository: SettingsRepository,
    ):
        self.event_repository = event_repository
        self.transaction_repository = transaction_repository
        self.settings_repository = settings_repository

    def _run(
        self,
        event_id: str,
        new_status: Any,
        report_sent_date: Optional[Any] = None,
    ) -> Event:
        target = _parse_workflow_status(new_status)
        event = _require_event(self.event_repository, event_id)
        current = event.status

        if not event.can_transition_to(target):
            raise InvalidStateError(
                status_transition_rejected(
                    current.value, target.value, self._required_step(current, target)
                )
            )

        if target == current and target != EventStatus.REPORT_SENT:
            return event

        if target == EventStatus.DONE:
            if not self.transaction_repository.find_by_event_id(event.id):
                raise InvalidStateError(no_transactions_for_done(event.id))
            event.change_status(EventStatus.DONE)
        elif target == EventStatus.REPORT_SENT:
            sent_date = (
                to_date(report_sent_date, "Report sent date") if report_sent_date else date.today()
            )
            settings = load_settings(self.settings_repository)
            event.mark_report_sent(sent_date, settings.default_reimbursement_days)
        elif target == EventStatus.PAID:
            event.mark_paid()

        self.event_repository.save(event)
        logger.info("Event %s moved from %s to %s", event.id, current.value, target.value)
        return event

    @staticmethod
    def _required_step(current: EventStatus, target: EventStatus) -> Optional[str]:
        if current not in NEXT_STATUS:
            return None
        order = list(WORKFLOW_STATUSES)
        if order.index(target) > order.index(current) + 1:
            return NEXT_STATUS[current].value
        return None


class DeleteEvent(UseCase):
    """Delete a PLANNED event and, best effort, its transactions."""

    def __init__(
        self,
        event_repository: EventRepository,
        transaction_repository: TransactionRepository,
    ):
        self.event_repository = event_repository
        self.transaction_repository = transaction_repository

    def _run(self, event_id: str) -> DeleteEventOutcome:
        event = _require_event(self.event_repository, event_id)
        if not event.is_planned():
            raise InvalidStateError(event_delete_blocked(event.status.value))

        outcome = DeleteEventOutcome(event_id=event.id)
        for transaction in self.transaction_repository.find_by_event_id(event.id):
            try:
                self.transaction_repository.delete(transaction.id)
            except Exception as e:
                logger.warning(
                    "Could not delete transaction %s of event %s: %s", transaction.id, event.id, e
                )
                outcome.failed_transactions.append((transaction.id, str(e)))
            else:
                outcome.deleted_transactions.append(transaction.id)

        self.event_repository.delete(event.id)
        logger.info(
            "Deleted event %s with %d transaction(s)", event.id, len(outcome.deleted_transactions)
        )
        return outcome
