import csv
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import StringIO

from models import TransactionType
from schemas import CSVRow


def parse_date(value: str) -> date:
    value = value.strip()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return datetime.strptime(value, "%d.%m.%Y").date()


def parse_amount(value: str) -> Decimal:
    clean = value.strip().replace("€", "").replace("$", "").replace(" ", "")
    clean = clean.replace(",", ".")
    if clean.count(".") > 1:
        parts = clean.split(".")
        clean = "".join(parts[:-1]) + "." + parts[-1]
    try:
        amount = Decimal(clean)
    except InvalidOperation as exc:
        raise ValueError("Invalid amount") from exc
    if not amount.is_finite():
        raise ValueError("Amount must be a finite number")
    if amount <= 0:
        raise ValueError("Amount must be positive")
    return amount


def _optional(raw: dict[str, str], key: str) -> str | None:
    value = (raw.get(key) or "").strip()
    return value or None


def parse_csv(content: str) -> tuple[list[tuple[int, CSVRow]], list[tuple[int, str]]]:
    """Parse an import file into numbered rows.

    Row numbers start at 1 for the first data line so they line up with the
    numbering used in import results.
    """
    reader = csv.DictReader(StringIO(content))
    rows: list[tuple[int, CSVRow]] = []
    errors: list[tuple[int, str]] = []
    for idx, raw in enumerate(reader, start=1):
        try:
            type_raw = (raw.get("Type") or "").strip().lower()
            account = (raw.get("Account") or "").strip()
            if not account:
                raise ValueError("Account is required")
            rows.append(
                (
                    idx,
                    CSVRow(
                        date=parse_date(raw.get("Date") or ""),
                        type=TransactionType(type_raw),
                        amount=parse_amount(raw.get("Amount") or "0"),
                        description=_optional(raw, "Description"),
                        category=_optional(raw, "Category"),
                        account=account,
                        to_account=_optional(raw, "ToAccount"),
                    ),
                )
            )
        except ValueError as exc:
            errors.append((idx, str(exc)))
    return rows, errors
