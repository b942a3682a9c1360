"""CSV statement import.

Reads a file with a fixed header (``date``, ``description``, ``amount`` and
optionally ``type``, ``category``, ``payment_method``, ``owner``) and hands
the rows to ``TransactionService.import_transactions`` for de-duplication.
Negative amounts without an explicit type are read as expenses.
"""

import csv
from dataclasses import dataclass, field
from pathlib import Path

from finlove.database.base import Database
from finlove.domain.entities import PaymentMethod, TransactionType
from finlove.domain.errors import ValidationError
from finlove.domain.transaction import ImportCandidate, ImportResult, TransactionService
from finlove.utils.amount_parser import parse_amount
from finlove.utils.date_parser import parse_date

REQUIRED_COLUMNS = {"date", "description", "amount"}


@dataclass(frozen=True)
class CSVImportReport:
    """Outcome of importing one file."""

    result: ImportResult
    errors: list[str] = field(default_factory=list)


class CSVImportService:
    """Service for importing CSV files."""

    def __init__(self, db: Database):
        """Initialize CSV import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transaction_service = TransactionService(db)

    def read_candidates(self, csv_file_path: str) -> tuple[list[ImportCandidate], list[str]]:
        """Parse a CSV file into import candidates.

        Rows that cannot be parsed are reported in the returned error list.

        Raises:
            FileNotFoundError: If the file does not exist
            ValidationError: If required columns are missing
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        candidates = []
        errors = []

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                raise ValidationError("CSV file has no columns")
            columns = {name.strip().lower(): name for name in reader.fieldnames}
            missing = REQUIRED_COLUMNS - set(columns)
            if missing:
                raise ValidationError(f"CSV file missing required columns: {', '.join(sorted(missing))}")

            for row_num, row in enumerate(reader, start=2):
                values = {key: (row.get(original) or "").strip() for key, original in columns.items()}
                try:
                    candidates.append(self._to_candidate(values))
                except ValueError as e:
                    errors.append(f"Row {row_num}: {e}")

        return candidates, errors

    @staticmethod
    def _to_candidate(values: dict[str, str]) -> ImportCandidate:
        if not values["description"]:
            raise ValueError("Missing description")
        txn_date = parse_date(values["date"])
        amount = parse_amount(values["amount"])

        raw_type = values.get("type", "").upper()
        if raw_type:
            txn_type = TransactionType(raw_type)
        else:
            txn_type = TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME

        raw_method = values.get("payment_method", "").upper()
        method = PaymentMethod(raw_method) if raw_method else PaymentMethod.DEBIT

        return ImportCandidate(
            date=txn_date,
            description=values["description"],
            amount=abs(amount),
            type=txn_type,
            category=values.get("category") or "Other",
            payment_method=method,
            owner=values.get("owner") or None,
        )

    def import_csv(self, user_id: int, csv_file_path: str) -> CSVImportReport:
        """Import a CSV file for a user.

        Returns:
            CSVImportReport with counts and per-row errors
        """
        candidates, errors = self.read_candidates(csv_file_path)
        result = self.transaction_service.import_transactions(user_id, candidates)
        return CSVImportReport(result=result, errors=errors)
