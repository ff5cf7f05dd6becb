"""Shared pytest fixtures for gigbook tests."""

import os
import tempfile
from datetime import date, timedelta

import pytest
from click.testing import CliRunner

from gigbook.database.factories import create_memory_storage, create_sqlite_storage
from gigbook.domain.event import CreateEvent, CreateEventInput, UpdateEventStatus
from gigbook.domain.transaction import AddTransaction, AddTransactionInput


@pytest.fixture
def storage():
    """Create an in-memory storage bundle."""
    storage = create_memory_storage()
    yield storage
    storage.close()


@pytest.fixture
def temp_db_path():
    """Path of a temporary SQLite database file."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield db_path
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def sqlite_storage(temp_db_path):
    """Create a storage bundle on a temporary SQLite database."""
    storage = create_sqlite_storage(database_path=temp_db_path)
    yield storage
    storage.close()


@pytest.fixture
def event_date():
    """A date safely inside the accepted event range."""
    return date.today() - timedelta(days=3)


@pytest.fixture
def add_transaction(storage):
    return AddTransaction(storage.transactions, storage.events, storage.settings)


@pytest.fixture
def update_status(storage):
    return UpdateEventStatus(storage.events, storage.transactions, storage.settings)


@pytest.fixture
def sample_event(storage, event_date):
    """Create a PLANNED event."""
    result = CreateEvent(storage.events).execute(
        CreateEventInput(
            name="Congresso Médico",
            date=event_date,
            client="Acme Eventos",
            city="Recife",
        )
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
def make_expense(add_transaction, sample_event):
    """Factory adding an EXPENSE to the sample event."""

    def _make(amount="150.00", description="Material de escritório", **kwargs):
        result = add_transaction.execute(
            AddTransactionInput(
                event_id=kwargs.pop("event_id", sample_event.id),
                type="EXPENSE",
                description=description,
                amount=amount,
                **kwargs,
            )
        )
        assert result.success, result.error
        return result.data

    return _make


@pytest.fixture
def paid_event(storage, sample_event, make_expense, update_status):
    """An event walked through the whole workflow up to PAID."""
    make_expense()
    for status in ("DONE", "REPORT_SENT", "PAID"):
        result = update_status.execute(sample_event.id, status)
        assert result.success, result.error
    return storage.events.find_by_id(sample_event.id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI runner."""
    return CliRunner()
