"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested event or transaction does not exist."""


class InvalidStateError(DomainError):
    """Operation forbidden by the current event status."""


class StorageError(DomainError):
    """Stored data could not be serialized or deserialized."""


def event_not_found(event_id: str) -> str:
    """Return message for missing event."""
    return f"Event '{event_id}' not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction '{transaction_id}' not found"


def event_paid_locked(action: str) -> str:
    """Return message when a PAID event blocks a transaction change."""
    return (
        f"Cannot {action} transactions of a paid event. "
        "Events with status PAID are closed for changes."
    )


def event_not_editable(status: str) -> str:
    """Return message when event details can no longer be edited."""
    return (
        f"Event cannot be edited in status {status}. "
        "Only PLANNED or DONE events can be edited."
    )


def event_delete_blocked(status: str) -> str:
    """Return message when an event past PLANNED is deleted."""
    return f"Cannot delete event in status {status}: only PLANNED events can be deleted"


def status_transition_rejected(current: str, requested: str, via: str | None = None) -> str:
    """Return message for a transition the status workflow forbids."""
    message = f"Cannot change event status from {current} to {requested}"
    if via is not None:
        return f"{message}: the event must pass through {via} first"
    return message


def no_transactions_for_done(event_id: str) -> str:
    """Return message when an empty event is marked as done."""
    return (
        f"Cannot mark event '{event_id}' as DONE: it has no transactions. "
        "Add at least one transaction first."
    )
