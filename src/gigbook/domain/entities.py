"""Domain model entities for gigbook.

Events are the aggregate root: each one owns a small ledger of transactions
(expenses advanced by the worker, fees and travel income). Settings hold the
rates used when a transaction amount is derived from a quantity.

Entities validate themselves on construction and on every mutation, and
convert to and from the plain camelCase records kept in storage.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, UTC
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import StrEnum
from typing import Any, ClassVar, Optional, Union
from uuid import uuid4

from dateutil.relativedelta import relativedelta

from gigbook.domain.errors import InvalidStateError, ValidationError, event_not_editable

MAX_TRANSACTION_AMOUNT = Decimal("10000000")
CENTS = Decimal("0.01")

DEFAULT_CLIENT = "Cliente não informado"
DEFAULT_CITY = "Cidade não informada"


class EventStatus(StrEnum):
    """Workflow status of an event."""

    PLANNED = "PLANNED"
    DONE = "DONE"
    REPORT_SENT = "REPORT_SENT"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


# Targets reachable from each status. Same-status entries are no-ops.
ALLOWED_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.PLANNED: frozenset({EventStatus.PLANNED, EventStatus.DONE}),
    EventStatus.DONE: frozenset({EventStatus.DONE, EventStatus.REPORT_SENT}),
    EventStatus.REPORT_SENT: frozenset({EventStatus.REPORT_SENT, EventStatus.PAID}),
    EventStatus.PAID: frozenset(),
    EventStatus.CANCELLED: frozenset(),
}

WORKFLOW_STATUSES = (
    EventStatus.PLANNED,
    EventStatus.DONE,
    EventStatus.REPORT_SENT,
    EventStatus.PAID,
)

EDITABLE_STATUSES = frozenset({EventStatus.PLANNED, EventStatus.DONE})


class TransactionType(StrEnum):
    """Direction of a transaction."""

    EXPENSE = "EXPENSE"
    INCOME = "INCOME"


class ExpenseCategory(StrEnum):
    ACCOMMODATION = "accommodation"


class IncomeCategory(StrEnum):
    DIARIA = "diaria"
    HORA_EXTRA = "hora_extra"
    KM = "km"
    TEMPO_VIAGEM = "tempo_viagem"


def utc_now() -> datetime:
    """Return the current aware UTC timestamp."""
    return datetime.now(UTC)


def new_id(prefix: str) -> str:
    """Return a fresh opaque identifier such as ``event_3f2a...``."""
    return f"{prefix}_{uuid4().hex}"


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Coerce a number-like value to Decimal.

    Raises:
        ValidationError: If the value is missing or not numeric
    """
    if value is None:
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(f"{field_name} must be a number")
    else:
        raise ValidationError(f"{field_name} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    return result


def to_date(value: Any, field_name: str) -> date:
    """Coerce an ISO string, datetime or date to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise ValidationError(f"{field_name} is not a valid date: '{value}'")
    raise ValidationError(f"{field_name} is required")


def to_optional_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    return to_date(value, field_name)


def to_timestamp(value: Any) -> datetime:
    """Coerce a stored timestamp to an aware datetime (naive values are UTC)."""
    if isinstance(value, datetime):
        timestamp = value
    elif isinstance(value, str) and value.strip():
        try:
            timestamp = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Invalid timestamp: '{value}'")
    else:
        return utc_now()
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp


def to_number(value: Decimal) -> Union[int, float]:
    """Convert a Decimal to a JSON number."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _validate_text(value: Any, label: str, min_length: int, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    text = value.strip()
    if len(text) < min_length:
        raise ValidationError(f"{label} must have at least {min_length} characters")
    if len(text) > max_length:
        raise ValidationError(f"{label} cannot exceed {max_length} characters")
    return text


def _validate_amount(value: Any) -> Decimal:
    amount = to_decimal(value, "Transaction amount")
    if amount <= 0:
        raise ValidationError("Transaction amount must be greater than zero")
    if amount > MAX_TRANSACTION_AMOUNT:
        raise ValidationError("Transaction amount cannot exceed R$ 10.000.000,00")
    return amount


def _coerce_enum(enum_type, value: Any, label: str):
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationError(f"Invalid {label} '{value}'. Must be one of: {allowed}")


# Transaction metadata variants


@dataclass(frozen=True)
class ExpenseMetadata:
    """Metadata of a plain EXPENSE."""

    has_receipt: bool = False
    category: Optional[ExpenseCategory] = None

    expected_category: ClassVar[Optional[ExpenseCategory]] = None

    def __post_init__(self) -> None:
        if not isinstance(self.has_receipt, bool):
            raise ValidationError("has_receipt must be a boolean")
        if self.category is not None:
            object.__setattr__(
                self, "category", _coerce_enum(ExpenseCategory, self.category, "expense category")
            )
        if self.category != self.expected_category:
            raise ValidationError(
                f"{type(self).__name__} does not accept category '{self.category}'"
            )

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {"hasReceipt": self.has_receipt}
        if self.category is not None:
            record["category"] = self.category.value
        return record


@dataclass(frozen=True)
class AccommodationMetadata(ExpenseMetadata):
    """Hotel expense with optional check-in/check-out dates."""

    category: Optional[ExpenseCategory] = ExpenseCategory.ACCOMMODATION
    check_in: Optional[date] = None
    check_out: Optional[date] = None

    expected_category: ClassVar[Optional[ExpenseCategory]] = ExpenseCategory.ACCOMMODATION

    def __post_init__(self) -> None:
        super().__post_init__()
        check_in = to_optional_date(self.check_in, "Check-in")
        check_out = to_optional_date(self.check_out, "Check-out")
        if check_in and check_out and check_out < check_in:
            raise ValidationError("Check-out date cannot be earlier than check-in date")
        object.__setattr__(self, "check_in", check_in)
        object.__setattr__(self, "check_out", check_out)

    def to_record(self) -> dict[str, Any]:
        record = super().to_record()
        if self.check_in is not None:
            record["checkIn"] = self.check_in.isoformat()
        if self.check_out is not None:
            record["checkOut"] = self.check_out.isoformat()
        return record


@dataclass(frozen=True)
class IncomeMetadata:
    """Metadata of an INCOME without a quantity (daily fee or uncategorized)."""

    is_reimbursement: bool = False
    category: Optional[IncomeCategory] = None

    allowed_categories: ClassVar[frozenset] = frozenset({None, IncomeCategory.DIARIA})

    def __post_init__(self) -> None:
        if not isinstance(self.is_reimbursement, bool):
            raise ValidationError("is_reimbursement must be a boolean")
        if self.category is not None:
            object.__setattr__(
                self, "category", _coerce_enum(IncomeCategory, self.category, "income category")
            )
        if self.category not in self.allowed_categories:
            raise ValidationError(
                f"{type(self).__name__} does not accept category '{self.category}'"
            )

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {"isReimbursement": self.is_reimbursement}
        if self.category is not None:
            record["category"] = self.category.value
        return record


@dataclass(frozen=True)
class KmMetadata(IncomeMetadata):
    """Kilometers driven, priced at the km rate in force when recorded."""

    category: Optional[IncomeCategory] = IncomeCategory.KM
    distance: Decimal = Decimal("0")
    origin: Optional[str] = None
    destination: Optional[str] = None

    allowed_categories: ClassVar[frozenset] = frozenset({IncomeCategory.KM})

    def __post_init__(self) -> None:
        super().__post_init__()
        distance = to_decimal(self.distance, "Distance")
        if distance < 0:
            raise ValidationError("Distance cannot be negative")
        object.__setattr__(self, "distance", distance)
        object.__setattr__(self, "origin", (self.origin or "").strip() or None)
        object.__setattr__(self, "destination", (self.destination or "").strip() or None)

    def to_record(self) -> dict[str, Any]:
        record = super().to_record()
        record["distance"] = to_number(self.distance)
        if self.origin is not None:
            record["origin"] = self.origin
        if self.destination is not None:
            record["destination"] = self.destination
        return record


@dataclass(frozen=True)
class HoursMetadata(IncomeMetadata):
    """Hour-based income: travel time (hours required) or overtime."""

    category: Optional[IncomeCategory] = IncomeCategory.TEMPO_VIAGEM
    hours: Optional[Decimal] = None

    allowed_categories: ClassVar[frozenset] = frozenset(
        {IncomeCategory.TEMPO_VIAGEM, IncomeCategory.HORA_EXTRA}
    )

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.hours is None:
            if self.category == IncomeCategory.TEMPO_VIAGEM:
                raise ValidationError("Hours are required for travel time")
            return
        hours = to_decimal(self.hours, "Hours")
        if hours <= 0:
            raise ValidationError("Hours must be greater than zero")
        object.__setattr__(self, "hours", hours)

    def to_record(self) -> dict[str, Any]:
        record = super().to_record()
        if self.hours is not None:
            record["hours"] = to_number(self.hours)
        return record


Metadata = Union[ExpenseMetadata, IncomeMetadata]


def metadata_from_record(transaction_type: TransactionType, record: Optional[dict]) -> Metadata:
    """Build the metadata variant matching a transaction type and category."""
    record = dict(record or {})
    category = record.get("category") or None

    if transaction_type == TransactionType.EXPENSE:
        has_receipt = record.get("hasReceipt", False)
        if category is None:
            return ExpenseMetadata(has_receipt=has_receipt)
        if category == ExpenseCategory.ACCOMMODATION:
            return AccommodationMetadata(
                has_receipt=has_receipt,
                check_in=record.get("checkIn"),
                check_out=record.get("checkOut"),
            )
        raise ValidationError(
            f"Invalid expense category '{category}'. Must be one of: accommodation"
        )

    is_reimbursement = record.get("isReimbursement", False)
    if category == IncomeCategory.KM:
        return KmMetadata(
            is_reimbursement=is_reimbursement,
            distance=record.get("distance"),
            origin=record.get("origin"),
            destination=record.get("destination"),
        )
    if category in (IncomeCategory.TEMPO_VIAGEM, IncomeCategory.HORA_EXTRA):
        return HoursMetadata(
            is_reimbursement=is_reimbursement,
            category=category,
            hours=record.get("hours"),
        )
    if category is None or category == IncomeCategory.DIARIA:
        return IncomeMetadata(is_reimbursement=is_reimbursement, category=category)
    allowed = ", ".join(member.value for member in IncomeCategory)
    raise ValidationError(f"Invalid income category '{category}'. Must be one of: {allowed}")


@dataclass
class Event:
    """Billable engagement with its own ledger of transactions."""

    id: str
    name: str
    date: date
    status: EventStatus = EventStatus.PLANNED
    description: str = ""
    client: str = ""
    city: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    expected_payment_date: Optional[date] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValidationError("Event ID is required")
        if len(self.id) > 100:
            raise ValidationError("Event ID cannot exceed 100 characters")
        self.name = _validate_text(self.name, "Event name", 3, 200)
        self.date = to_date(self.date, "Event date")
        self.status = _coerce_enum(EventStatus, self.status, "event status")
        self.description = self._validate_description(self.description)
        self.client = self._validate_optional_text(self.client, "Client")
        self.city = self._validate_optional_text(self.city, "City")
        self.start_date = to_optional_date(self.start_date, "Start date") or self.date
        self.end_date = to_optional_date(self.end_date, "End date")
        self._validate_range(self.start_date, self.end_date)
        self.expected_payment_date = to_optional_date(
            self.expected_payment_date, "Expected payment date"
        )
        if self.updated_at is None:
            self.updated_at = self.created_at

    @staticmethod
    def _validate_date(value: Any, label: str) -> date:
        event_date = to_date(value, label)
        today = date.today()
        if event_date < today - relativedelta(years=10):
            raise ValidationError(f"{label} cannot be more than 10 years in the past")
        if event_date > today + relativedelta(years=5):
            raise ValidationError(f"{label} cannot be more than 5 years in the future")
        return event_date

    @staticmethod
    def _validate_description(value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValidationError("Description must be text")
        if len(value) > 1000:
            raise ValidationError("Description cannot exceed 1000 characters")
        return value.strip()

    @staticmethod
    def _validate_optional_text(value: Any, label: str) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return ""
        return _validate_text(value, label, 3, 200)

    @staticmethod
    def _validate_range(start: Optional[date], end: Optional[date]) -> None:
        if start and end and end < start:
            raise ValidationError("End date cannot be earlier than start date")

    @classmethod
    def create(
        cls,
        name: str,
        date: Any,
        description: str = "",
        client: str = "",
        city: str = "",
        start_date: Any = None,
        end_date: Any = None,
    ) -> "Event":
        """Create a new PLANNED event with a fresh ID."""
        return cls(
            id=new_id("event"),
            name=name,
            date=cls._validate_date(date, "Event date"),
            status=EventStatus.PLANNED,
            description=description,
            client=client,
            city=city,
            start_date=start_date,
            end_date=end_date,
        )

    @classmethod
    def restore(cls, record: dict[str, Any]) -> "Event":
        """Rebuild an event from its stored record.

        Older records without client or city get placeholder values.
        """
        if not record:
            raise ValidationError("Event data is required")
        return cls(
            id=record.get("id"),
            name=record.get("name"),
            date=record.get("date"),
            status=record.get("status") or EventStatus.PLANNED,
            description=record.get("description") or "",
            client=record.get("client") or DEFAULT_CLIENT,
            city=record.get("city") or DEFAULT_CITY,
            start_date=record.get("startDate"),
            end_date=record.get("endDate"),
            expected_payment_date=record.get("expectedPaymentDate"),
            created_at=to_timestamp(record.get("createdAt")),
            updated_at=to_timestamp(record.get("updatedAt") or record.get("createdAt")),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date.isoformat(),
            "status": self.status.value,
            "description": self.description,
            "expectedPaymentDate": (
                self.expected_payment_date.isoformat() if self.expected_payment_date else None
            ),
            "client": self.client,
            "city": self.city,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @property
    def is_editable(self) -> bool:
        """Details may change only while PLANNED or DONE."""
        return self.status in EDITABLE_STATUSES

    def is_planned(self) -> bool:
        return self.status == EventStatus.PLANNED

    def is_done(self) -> bool:
        return self.status == EventStatus.DONE

    def is_report_sent(self) -> bool:
        return self.status == EventStatus.REPORT_SENT

    def is_paid(self) -> bool:
        return self.status == EventStatus.PAID

    def is_cancelled(self) -> bool:
        return self.status == EventStatus.CANCELLED

    def can_transition_to(self, status: EventStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]

    def _touch(self) -> None:
        self.updated_at = utc_now()

    def update_details(
        self,
        name: Optional[str] = None,
        date: Any = None,
        description: Optional[str] = None,
        client: Optional[str] = None,
        city: Optional[str] = None,
        start_date: Any = None,
        end_date: Any = None,
        clear_end_date: bool = False,
    ) -> None:
        """Update the given fields.

        Changing the date also moves start/end dates that matched the old date.

        Raises:
            InvalidStateError: If the event is no longer editable
            ValidationError: If a field is invalid
        """
        if not self.is_editable:
            raise InvalidStateError(event_not_editable(self.status.value))

        new_name = _validate_text(name, "Event name", 3, 200) if name is not None else self.name
        new_description = (
            self._validate_description(description) if description is not None else self.description
        )
        new_client = self._validate_optional_text(client, "Client") if client is not None else self.client
        new_city = self._validate_optional_text(city, "City") if city is not None else self.city

        new_date = self.date
        new_start = self.start_date
        new_end = self.end_date
        if date is not None:
            new_date = self._validate_date(date, "Event date")
            if new_start is None or new_start == self.date:
                new_start = new_date
            if new_end is not None and new_end == self.date:
                new_end = new_date
        if start_date is not None:
            new_start = self._validate_date(start_date, "Start date")
        if clear_end_date:
            new_end = None
        elif end_date is not None:
            new_end = self._validate_date(end_date, "End date")
        self._validate_range(new_start, new_end)

        self.name = new_name
        self.description = new_description
        self.client = new_client
        self.city = new_city
        self.date = new_date
        self.start_date = new_start
        self.end_date = new_end
        self._touch()

    def change_status(self, status: EventStatus) -> None:
        """Set a workflow status without any side effect."""
        self.status = _coerce_enum(EventStatus, status, "event status")
        self._touch()

    def mark_report_sent(self, sent_date: date, reimbursement_days: int) -> None:
        """Move to REPORT_SENT and schedule the expected payment date."""
        if isinstance(reimbursement_days, bool) or not isinstance(reimbursement_days, int):
            raise ValidationError("Reimbursement days must be a positive integer")
        if reimbursement_days < 1:
            raise ValidationError("Reimbursement days must be a positive integer")
        sent_date = to_date(sent_date, "Report sent date")
        self.status = EventStatus.REPORT_SENT
        self.expected_payment_date = sent_date + timedelta(days=reimbursement_days)
        self._touch()

    def mark_paid(self) -> None:
        self.status = EventStatus.PAID
        self.expected_payment_date = None
        self._touch()


@dataclass
class Transaction:
    """Expense or income line item belonging to one event."""

    id: str
    event_id: str
    type: TransactionType
    description: str
    amount: Decimal
    metadata: Metadata = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValidationError("Transaction ID is required")
        if len(self.id) > 100:
            raise ValidationError("Transaction ID cannot exceed 100 characters")
        if not isinstance(self.event_id, str) or not self.event_id.strip():
            raise ValidationError("Event ID is required")
        self.type = _coerce_enum(TransactionType, self.type, "transaction type")
        self.description = _validate_text(self.description, "Transaction description", 3, 500)
        self.amount = _validate_amount(self.amount)
        if self.metadata is None or isinstance(self.metadata, dict):
            self.metadata = metadata_from_record(self.type, self.metadata)
        self._check_metadata_type(self.metadata)
        if self.updated_at is None:
            self.updated_at = self.created_at

    def _check_metadata_type(self, metadata: Metadata) -> None:
        expected = ExpenseMetadata if self.type == TransactionType.EXPENSE else IncomeMetadata
        if not isinstance(metadata, expected):
            raise ValidationError(
                f"{type(metadata).__name__} is not valid for {self.type.value} transactions"
            )

    @classmethod
    def create_expense(
        cls,
        event_id: str,
        description: str,
        amount: Any,
        has_receipt: bool = False,
        category: Optional[str] = None,
        check_in: Any = None,
        check_out: Any = None,
    ) -> "Transaction":
        if category:
            metadata: Metadata = AccommodationMetadata(
                has_receipt=has_receipt, category=category, check_in=check_in, check_out=check_out
            )
        else:
            metadata = ExpenseMetadata(has_receipt=has_receipt)
        return cls(
            id=new_id("expense"),
            event_id=event_id,
            type=TransactionType.EXPENSE,
            description=description,
            amount=amount,
            metadata=metadata,
        )

    @classmethod
    def create_income(
        cls,
        event_id: str,
        description: str,
        amount: Any,
        is_reimbursement: bool = False,
        category: Optional[str] = None,
        hours: Any = None,
    ) -> "Transaction":
        if category == IncomeCategory.HORA_EXTRA:
            metadata: Metadata = HoursMetadata(
                is_reimbursement=is_reimbursement, category=category, hours=hours
            )
        else:
            metadata = IncomeMetadata(is_reimbursement=is_reimbursement, category=category)
        return cls(
            id=new_id("income"),
            event_id=event_id,
            type=TransactionType.INCOME,
            description=description,
            amount=amount,
            metadata=metadata,
        )

    @classmethod
    def create_km_income(
        cls,
        event_id: str,
        description: Optional[str],
        distance: Any,
        rate_km: Decimal,
        is_reimbursement: bool = True,
        origin: Optional[str] = None,
        destination: Optional[str] = None,
    ) -> "Transaction":
        """Create a km income whose amount is frozen at distance x rate."""
        metadata = KmMetadata(
            is_reimbursement=is_reimbursement,
            distance=distance,
            origin=origin,
            destination=destination,
        )
        final_description = description
        if metadata.origin and metadata.destination:
            final_description = f"Deslocamento: {metadata.origin} → {metadata.destination}"
            if description and description.strip():
                final_description += f" - {description.strip()}"
        return cls(
            id=new_id("income"),
            event_id=event_id,
            type=TransactionType.INCOME,
            description=final_description,
            amount=quantize_money(metadata.distance * to_decimal(rate_km, "KM rate")),
            metadata=metadata,
        )

    @classmethod
    def create_travel_time_income(
        cls,
        event_id: str,
        description: str,
        hours: Any,
        rate: Decimal,
        is_reimbursement: bool = True,
    ) -> "Transaction":
        """Create a travel-time income whose amount is frozen at hours x rate."""
        metadata = HoursMetadata(
            is_reimbursement=is_reimbursement,
            category=IncomeCategory.TEMPO_VIAGEM,
            hours=hours,
        )
        return cls(
            id=new_id("income"),
            event_id=event_id,
            type=TransactionType.INCOME,
            description=description,
            amount=quantize_money(metadata.hours * to_decimal(rate, "Travel time rate")),
            metadata=metadata,
        )

    @classmethod
    def restore(cls, record: dict[str, Any]) -> "Transaction":
        if not record:
            raise ValidationError("Transaction data is required")
        transaction_type = _coerce_enum(TransactionType, record.get("type"), "transaction type")
        return cls(
            id=record.get("id"),
            event_id=record.get("eventId"),
            type=transaction_type,
            description=record.get("description"),
            amount=record.get("amount"),
            metadata=metadata_from_record(transaction_type, record.get("metadata")),
            created_at=to_timestamp(record.get("createdAt")),
            updated_at=to_timestamp(record.get("updatedAt") or record.get("createdAt")),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "eventId": self.event_id,
            "type": self.type.value,
            "description": self.description,
            "amount": to_number(self.amount),
            "metadata": self.metadata.to_record(),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def category(self) -> Optional[str]:
        """Category value of the metadata, if any."""
        if self.metadata.category is None:
            return None
        return self.metadata.category.value

    @property
    def has_receipt(self) -> bool:
        return self.is_expense() and self.metadata.has_receipt

    @property
    def is_reimbursement(self) -> bool:
        return self.is_income() and self.metadata.is_reimbursement

    def update_details(
        self,
        description: Optional[str] = None,
        amount: Any = None,
        metadata: Union[Metadata, dict, None] = None,
    ) -> None:
        """Update description, amount and/or metadata.

        A metadata dict is merged over the current record before validation.
        The amount is only recomputed when explicitly given.
        """
        new_description = (
            _validate_text(description, "Transaction description", 3, 500)
            if description is not None
            else self.description
        )
        new_amount = _validate_amount(amount) if amount is not None else self.amount
        new_metadata = self.metadata
        if isinstance(metadata, dict):
            new_metadata = metadata_from_record(self.type, {**self.metadata.to_record(), **metadata})
        elif metadata is not None:
            new_metadata = metadata
        self._check_metadata_type(new_metadata)

        self.description = new_description
        self.amount = new_amount
        self.metadata = new_metadata
        self.updated_at = utc_now()

    def mark_receipt_issued(self) -> None:
        if not self.is_expense():
            raise ValidationError("Only EXPENSE transactions carry a receipt")
        self.update_details(metadata={"hasReceipt": True})


SETTINGS_DEFAULTS: dict[str, Any] = {
    "rate_km": Decimal("0.90"),
    "rate_travel_time": Decimal("75.00"),
    "default_reimbursement_days": 21,
    "max_hotel_rate": Decimal("280.00"),
    "standard_daily_rate": Decimal("300.00"),
    "overtime_rate": Decimal("75.00"),
}

SETTINGS_CEILINGS: dict[str, tuple[Decimal, str]] = {
    "rate_km": (Decimal("1000"), "KM rate"),
    "rate_travel_time": (Decimal("10000"), "Travel time rate"),
    "max_hotel_rate": (Decimal("100000"), "Hotel rate ceiling"),
    "standard_daily_rate": (Decimal("100000"), "Standard daily rate"),
    "overtime_rate": (Decimal("10000"), "Overtime rate"),
}

SETTINGS_RECORD_KEYS = {
    "rate_km": "rateKm",
    "rate_travel_time": "rateTravelTime",
    "default_reimbursement_days": "defaultReimbursementDays",
    "max_hotel_rate": "maxHotelRate",
    "standard_daily_rate": "standardDailyRate",
    "overtime_rate": "overtimeRate",
}


def _validate_rate(name: str, value: Any) -> Decimal:
    ceiling, label = SETTINGS_CEILINGS[name]
    rate = to_decimal(value, label)
    if rate < 0:
        raise ValidationError(f"{label} cannot be negative")
    if rate > ceiling:
        raise ValidationError(f"{label} cannot exceed {ceiling}")
    return rate


def _validate_reimbursement_days(value: Any) -> int:
    if value is None:
        raise ValidationError("Default reimbursement days is required")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Default reimbursement days must be an integer")
    if value < 1:
        raise ValidationError("Default reimbursement days must be at least 1")
    if value > 365:
        raise ValidationError("Default reimbursement days cannot exceed 365")
    return value


@dataclass
class Settings:
    """System-wide rates used when transactions are created."""

    rate_km: Decimal = SETTINGS_DEFAULTS["rate_km"]
    rate_travel_time: Decimal = SETTINGS_DEFAULTS["rate_travel_time"]
    default_reimbursement_days: int = SETTINGS_DEFAULTS["default_reimbursement_days"]
    max_hotel_rate: Decimal = SETTINGS_DEFAULTS["max_hotel_rate"]
    standard_daily_rate: Decimal = SETTINGS_DEFAULTS["standard_daily_rate"]
    overtime_rate: Decimal = SETTINGS_DEFAULTS["overtime_rate"]
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        for name in SETTINGS_CEILINGS:
            setattr(self, name, _validate_rate(name, getattr(self, name)))
        self.default_reimbursement_days = _validate_reimbursement_days(
            self.default_reimbursement_days
        )

    @classmethod
    def create_default(cls) -> "Settings":
        return cls()

    @classmethod
    def restore(cls, record: Optional[dict[str, Any]]) -> "Settings":
        """Rebuild settings from a record; missing fields use defaults."""
        if not record:
            return cls.create_default()
        values = {
            name: record[key]
            for name, key in SETTINGS_RECORD_KEYS.items()
            if record.get(key) is not None
        }
        return cls(**values, updated_at=to_timestamp(record.get("updatedAt")))

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            key: to_number(getattr(self, name)) if name in SETTINGS_CEILINGS else getattr(self, name)
            for name, key in SETTINGS_RECORD_KEYS.items()
        }
        record["updatedAt"] = self.updated_at.isoformat()
        return record

    def update(self, **changes: Any) -> None:
        """Update the given fields; None values are ignored.

        Changing overtime_rate alone also moves rate_travel_time, which
        follows the overtime rate by convention.

        Raises:
            ValidationError: If a field is unknown or out of range
        """
        changes = {name: value for name, value in changes.items() if value is not None}
        unknown = set(changes) - set(SETTINGS_DEFAULTS)
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if "overtime_rate" in changes and "rate_travel_time" not in changes:
            changes["rate_travel_time"] = changes["overtime_rate"]

        validated: dict[str, Any] = {}
        for name, value in changes.items():
            if name == "default_reimbursement_days":
                validated[name] = _validate_reimbursement_days(value)
            else:
                validated[name] = _validate_rate(name, value)

        for name, value in validated.items():
            setattr(self, name, value)
        self.updated_at = utc_now()

    def calculate_km_value(self, distance: Any) -> Decimal:
        distance = to_decimal(distance, "Distance")
        if distance < 0:
            raise ValidationError("Distance cannot be negative")
        return quantize_money(distance * self.rate_km)

    def calculate_travel_time_value(self, hours: Any) -> Decimal:
        hours = to_decimal(hours, "Hours")
        if hours <= 0:
            raise ValidationError("Hours must be greater than zero")
        return quantize_money(hours * self.overtime_rate)

    def calculate_expected_reimbursement_date(self, event_date: Any) -> date:
        return to_date(event_date, "Event date") + timedelta(days=self.default_reimbursement_days)
