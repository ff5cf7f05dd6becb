"""Backup, restore and CSV export of all stored data."""

import csv
import io
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from gigbook.database.base import EventRepository, SettingsRepository, TransactionRepository
from gigbook.domain.entities import (
    Event,
    IncomeCategory,
    Settings,
    Transaction,
    utc_now,
)
from gigbook.domain.errors import StorageError, ValidationError
from gigbook.domain.settings import load_settings
from gigbook.domain.usecase import UseCase
from gigbook.utils.formatters import format_currency, format_date

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"

CSV_HEADER = ["Data", "Evento", "Tipo", "Descrição", "Valor", "Nota Fiscal", "Origem", "Destino"]
CSV_EMPTY_ROW = "Nenhuma transação encontrada;;;;;;;"
UNKNOWN_EVENT = "Evento não encontrado"


@dataclass(frozen=True)
class ImportSummary:
    events: int
    transactions: int
    export_date: Optional[str] = None


class ExportData(UseCase):
    """Dump every event, transaction and the settings as plain records."""

    def __init__(
        self,
        event_repository: EventRepository,
        transaction_repository: TransactionRepository,
        settings_repository: SettingsRepository,
    ):
        self.event_repository = event_repository
        self.transaction_repository = transaction_repository
        self.settings_repository = settings_repository

    def _run(self) -> dict[str, Any]:
        events = self.event_repository.find_all(order_by="created_at", descending=False)
        transactions = sorted(self.transaction_repository.find_all(), key=lambda t: t.created_at)
        settings = load_settings(self.settings_repository)
        return {
            "version": BACKUP_VERSION,
            "exportDate": utc_now().isoformat(),
            "events": [e.to_record() for e in events],
            "transactions": [t.to_record() for t in transactions],
            "settings": settings.to_record(),
        }


class ImportData(UseCase):
    """Replace all stored data with the content of a backup.

    Every record is validated before anything is deleted, so a bad backup
    leaves the current data untouched.
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

    def _run(self, payload: Union[str, bytes, dict]) -> ImportSummary:
        data = self._parse(payload)
        self._validate_structure(data)

        try:
            events = [Event.restore(record) for record in data["events"]]
            transactions = [Transaction.restore(record) for record in data["transactions"]]
            settings = Settings.restore(data["settings"])
        except (ValidationError, TypeError, AttributeError) as e:
            raise ValidationError(f"Invalid backup data: {e}") from e

        self.transaction_repository.delete_all()
        self.event_repository.delete_all()

        for event in events:
            self.event_repository.save(event)
        for transaction in transactions:
            self.transaction_repository.save(transaction)
        self.settings_repository.save(settings)

        logger.info(
            "Imported %d event(s) and %d transaction(s)", len(events), len(transactions)
        )
        return ImportSummary(
            events=len(events),
            transactions=len(transactions),
            export_date=data.get("exportDate"),
        )

    @staticmethod
    def _parse(payload: Union[str, bytes, dict]) -> dict:
        if payload is None:
            raise ValidationError("Backup data is required")
        if isinstance(payload, dict):
            return payload
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid backup file: malformed JSON ({e.msg})") from e
        if not isinstance(data, dict):
            raise ValidationError("Invalid backup file: expected a JSON object")
        return data

    @staticmethod
    def _validate_structure(data: dict) -> None:
        if not data.get("version"):
            raise ValidationError("Invalid backup file: missing version")
        if not isinstance(data.get("events"), list):
            raise ValidationError("Invalid backup file: 'events' must be a list")
        if not isinstance(data.get("transactions"), list):
            raise ValidationError("Invalid backup file: 'transactions' must be a list")
        if not isinstance(data.get("settings"), dict):
            raise ValidationError("Invalid backup file: 'settings' must be an object")


def transaction_type_label(transaction: Transaction) -> str:
    """Spreadsheet label of a transaction, e.g. ``Honorário - Diária``."""
    if transaction.is_expense():
        return "Compra (Reembolso)"
    category = transaction.category
    if category == IncomeCategory.KM:
        return "KM Rodado"
    if category == IncomeCategory.TEMPO_VIAGEM:
        return "Tempo de Viagem"
    if category == IncomeCategory.DIARIA:
        return "Honorário - Diária"
    if category == IncomeCategory.HORA_EXTRA:
        return "Honorário - Hora Extra"
    if transaction.is_reimbursement:
        return "Reembolso"
    return "Honorário"


class ExportTransactionsToCSV(UseCase):
    """Semicolon-separated ledger of every transaction, oldest first."""

    def __init__(
        self,
        event_repository: EventRepository,
        transaction_repository: TransactionRepository,
    ):
        self.event_repository = event_repository
        self.transaction_repository = transaction_repository

    def _run(self) -> str:
        transactions = sorted(self.transaction_repository.find_all(), key=lambda t: t.created_at)
        if not transactions:
            return ";".join(CSV_HEADER) + "\n" + CSV_EMPTY_ROW

        output = io.StringIO()
        writer = csv.writer(output, delimiter=";", lineterminator="\n")
        writer.writerow(CSV_HEADER)

        event_names: dict[str, str] = {}
        for transaction in transactions:
            if transaction.event_id not in event_names:
                event_names[transaction.event_id] = self._event_name(transaction.event_id)

            receipt = ""
            if transaction.is_expense():
                receipt = "Sim" if transaction.has_receipt else "Não"
            origin = destination = ""
            if transaction.category == IncomeCategory.KM:
                origin = transaction.metadata.origin or ""
                destination = transaction.metadata.destination or ""

            writer.writerow(
                [
                    format_date(transaction.created_at),
                    event_names[transaction.event_id],
                    transaction_type_label(transaction),
                    transaction.description,
                    format_currency(transaction.amount),
                    receipt,
                    origin,
                    destination,
                ]
            )
        return output.getvalue()

    def _event_name(self, event_id: str) -> str:
        try:
            event = self.event_repository.find_by_id(event_id)
        except StorageError as e:
            logger.warning("Could not load event %s for CSV export: %s", event_id, e)
            return UNKNOWN_EVENT
        return event.name if event else UNKNOWN_EVENT
