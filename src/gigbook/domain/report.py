"""Event and monthly reports used for client invoicing."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from gigbook.database.base import EventRepository, SettingsRepository, TransactionRepository
from gigbook.domain.entities import (
    CENTS,
    Event,
    EventStatus,
    HoursMetadata,
    IncomeCategory,
    KmMetadata,
    Transaction,
    utc_now,
)
from gigbook.domain.errors import NotFoundError, ValidationError, event_not_found
from gigbook.domain.settings import load_settings
from gigbook.domain.usecase import UseCase

MONTH_NAMES = (
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
)

CATEGORY_LABELS = {
    IncomeCategory.DIARIA: "Diária",
    IncomeCategory.HORA_EXTRA: "Hora Extra",
    IncomeCategory.KM: "KM Rodado",
    IncomeCategory.TEMPO_VIAGEM: "Tempo de Viagem",
}

SERVICE_CATEGORIES = frozenset({IncomeCategory.DIARIA, IncomeCategory.HORA_EXTRA})
TRAVEL_CATEGORIES = frozenset({IncomeCategory.KM, IncomeCategory.TEMPO_VIAGEM})


@dataclass(frozen=True)
class ReportLine:
    transaction_id: str
    description: str
    amount: Decimal
    created_at: datetime
    category: Optional[str] = None
    category_label: Optional[str] = None
    has_receipt: Optional[bool] = None
    distance: Optional[Decimal] = None
    hours: Optional[Decimal] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    event_id: Optional[str] = None
    event_name: Optional[str] = None
    event_date: Optional[date] = None


@dataclass(frozen=True)
class ReportSection:
    lines: tuple[ReportLine, ...] = ()

    @property
    def total(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal("0"))

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class EventReport:
    event_id: str
    event_name: str
    event_date: date
    description: str
    client: str
    city: str
    status: EventStatus
    generated_at: datetime
    services: ReportSection
    expenses: ReportSection
    travel: ReportSection

    @property
    def grand_total(self) -> Decimal:
        return self.services.total + self.expenses.total + self.travel.total


@dataclass(frozen=True)
class EventHours:
    """Hours worked on one event of a monthly report."""

    event_id: str
    event_name: str
    event_date: date
    status: EventStatus
    overtime_hours: Decimal
    travel_hours: Decimal


@dataclass(frozen=True)
class MonthlyReport:
    month: int
    year: int
    month_name: str
    payment_days: int
    generated_at: datetime
    events: tuple[EventHours, ...]
    services: ReportSection
    expenses: ReportSection
    travel: ReportSection

    @property
    def period(self) -> str:
        return f"{self.month_name} de {self.year}"

    @property
    def grand_total(self) -> Decimal:
        return self.services.total + self.expenses.total + self.travel.total

    @property
    def total_overtime_hours(self) -> Decimal:
        return sum((e.overtime_hours for e in self.events), Decimal("0"))

    @property
    def total_travel_hours(self) -> Decimal:
        return sum((e.travel_hours for e in self.events), Decimal("0"))


def _to_line(transaction: Transaction, event: Optional[Event] = None) -> ReportLine:
    metadata = transaction.metadata
    category = metadata.category
    return ReportLine(
        transaction_id=transaction.id,
        description=transaction.description,
        amount=transaction.amount,
        created_at=transaction.created_at,
        category=transaction.category,
        category_label=CATEGORY_LABELS.get(category) if transaction.is_income() else None,
        has_receipt=transaction.has_receipt if transaction.is_expense() else None,
        distance=metadata.distance if isinstance(metadata, KmMetadata) else None,
        hours=metadata.hours if isinstance(metadata, HoursMetadata) else None,
        origin=metadata.origin if isinstance(metadata, KmMetadata) else None,
        destination=metadata.destination if isinstance(metadata, KmMetadata) else None,
        event_id=event.id if event else None,
        event_name=event.name if event else None,
        event_date=event.date if event else None,
    )


def _split(
    transactions: list[Transaction],
) -> tuple[list[Transaction], list[Transaction], list[Transaction]]:
    """Split transactions into services, expenses and travel, oldest first."""
    services, expenses, travel = [], [], []
    for transaction in sorted(transactions, key=lambda t: t.created_at):
        category = transaction.metadata.category
        if transaction.is_expense():
            expenses.append(transaction)
        elif category in SERVICE_CATEGORIES:
            services.append(transaction)
        elif category in TRAVEL_CATEGORIES:
            travel.append(transaction)
    return services, expenses, travel


def _hours(transaction: Transaction, overtime_rate: Decimal) -> Decimal:
    """Recorded hours, or hours implied by amount and the overtime rate."""
    hours = getattr(transaction.metadata, "hours", None)
    if hours is not None:
        return hours
    if overtime_rate <= 0:
        return Decimal("0")
    return (transaction.amount / overtime_rate).quantize(CENTS)


class GenerateEventReport(UseCase):
    """Itemized report of one event."""

    def __init__(
        self,
        event_repository: EventRepository,
        transaction_repository: TransactionRepository,
    ):
        self.event_repository = event_repository
        self.transaction_repository = transaction_repository

    def _run(self, event_id: str) -> EventReport:
        if not event_id:
            raise ValidationError("Event ID is required")
        event = self.event_repository.find_by_id(event_id)
        if event is None:
            raise NotFoundError(event_not_found(event_id))

        services, expenses, travel = _split(self.transaction_repository.find_by_event_id(event.id))
        return EventReport(
            event_id=event.id,
            event_name=event.name,
            event_date=event.date,
            description=event.description,
            client=event.client,
            city=event.city,
            status=event.status,
            generated_at=utc_now(),
            services=ReportSection(tuple(_to_line(t) for t in services)),
            expenses=ReportSection(tuple(_to_line(t) for t in expenses)),
            travel=ReportSection(tuple(_to_line(t) for t in travel)),
        )


class GenerateMonthlyReport(UseCase):
    """Consolidated report of every non-cancelled event in a month."""

    def __init__(
        self,
        event_repository: EventRepository,
        transaction_repository: TransactionRepository,
        settings_repository: SettingsRepository,
    ):
        self.event_repository = event_repository
        self.transaction_repository = transaction_repository
        self.settings_repository = settings_repository

    def _run(self, month: int, year: int) -> MonthlyReport:
        month, year = self._validate_period(month, year)
        settings = load_settings(self.settings_repository)

        events = [
            e
            for e in self.event_repository.find_all(order_by="date", descending=False)
            if e.date.month == month and e.date.year == year and e.status != EventStatus.CANCELLED
        ]

        services, expenses, travel, hours = [], [], [], []
        for event in events:
            event_services, event_expenses, event_travel = _split(
                self.transaction_repository.find_by_event_id(event.id)
            )
            services.extend(_to_line(t, event) for t in event_services)
            expenses.extend(_to_line(t, event) for t in event_expenses)
            travel.extend(_to_line(t, event) for t in event_travel)

            overtime_hours = sum(
                (
                    _hours(t, settings.overtime_rate)
                    for t in event_services
                    if t.metadata.category == IncomeCategory.HORA_EXTRA
                ),
                Decimal("0"),
            )
            travel_hours = sum(
                (
                    _hours(t, settings.overtime_rate)
                    for t in event_travel
                    if t.metadata.category == IncomeCategory.TEMPO_VIAGEM
                ),
                Decimal("0"),
            )
            hours.append(
                EventHours(
                    event_id=event.id,
                    event_name=event.name,
                    event_date=event.date,
                    status=event.status,
                    overtime_hours=overtime_hours,
                    travel_hours=travel_hours,
                )
            )

        return MonthlyReport(
            month=month,
            year=year,
            month_name=MONTH_NAMES[month - 1],
            payment_days=settings.default_reimbursement_days,
            generated_at=utc_now(),
            events=tuple(hours),
            services=ReportSection(tuple(services)),
            expenses=ReportSection(tuple(expenses)),
            travel=ReportSection(tuple(travel)),
        )

    @staticmethod
    def _validate_period(month, year) -> tuple[int, int]:
        try:
            month = int(month)
            year = int(year)
        except (TypeError, ValueError):
            raise ValidationError("Month and year must be integers")
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")
        if not 2000 <= year <= 2100:
            raise ValidationError("Year must be between 2000 and 2100")
        return month, year
