from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from models import (
    AccountKind,
    BudgetPeriod,
    CategoryType,
    TransactionType,
    quantize_money,
)
from periods import start_of_day, to_utc_naive


# Largest magnitude whose cents still fit a signed 64-bit column.
MAX_MONEY = Decimal("10000000000000")


def _finite_money(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    if not value.is_finite():
        raise ValueError("Amount must be a finite number")
    if abs(value) > MAX_MONEY:
        raise ValueError(f"Amount must not exceed {MAX_MONEY}")
    if value.normalize().as_tuple().exponent < -2:
        raise ValueError("Amount must have at most 2 decimal places")
    return quantize_money(value)


def _positive_money(value: Optional[Decimal]) -> Optional[Decimal]:
    value = _finite_money(value)
    if value is not None and value <= 0:
        raise ValueError("Amount must be greater than zero")
    return value


MoneyAmount = Annotated[Decimal, AfterValidator(_finite_money)]
PositiveMoney = Annotated[Decimal, Field(gt=0), AfterValidator(_positive_money)]


def _coerce_instant(value: object) -> object:
    # Bare dates are midnight UTC.
    if isinstance(value, date) and not isinstance(value, datetime):
        return start_of_day(value)
    if isinstance(value, str) and len(value.strip()) == 10:
        return start_of_day(date.fromisoformat(value.strip()))
    return value


class AccountIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    type: AccountKind
    initial_balance: MoneyAmount
    icon: Optional[str] = Field(default="💰", max_length=16)
    color: Optional[str] = Field(default="#3B82F6", max_length=9)


class CategoryIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryType
    parent_id: Optional[int] = None
    icon: Optional[str] = Field(default="📁", max_length=16)
    color: Optional[str] = Field(default="#6B7280", max_length=9)


class TransactionIn(BaseModel):
    type: TransactionType
    amount: PositiveMoney
    description: Optional[str] = Field(default=None, max_length=500)
    transaction_date: datetime
    category_id: Optional[int] = None
    payment_method_id: int
    to_payment_method_id: Optional[int] = None

    @field_validator("transaction_date", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> object:
        return _coerce_instant(value)

    @field_validator("transaction_date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return to_utc_naive(value)


class TransactionPatch(BaseModel):
    """Partial edit of a transaction; only fields that were set are applied."""

    model_config = ConfigDict(extra="forbid")

    type: Optional[TransactionType] = None
    amount: Optional[PositiveMoney] = None
    description: Optional[str] = Field(default=None, max_length=500)
    transaction_date: Optional[datetime] = None
    category_id: Optional[int] = None
    payment_method_id: Optional[int] = None
    to_payment_method_id: Optional[int] = None

    @field_validator("transaction_date", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> object:
        return _coerce_instant(value)

    @field_validator("transaction_date")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc_naive(value) if value is not None else None

    @model_validator(mode="after")
    def _required_fields_not_cleared(self) -> "TransactionPatch":
        for name in ("type", "amount", "transaction_date", "payment_method_id"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


class BudgetIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    amount: PositiveMoney
    period_type: BudgetPeriod
    start_date: date
    end_date: Optional[date] = None
    category_id: Optional[int] = None


class BudgetPatch(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    amount: Optional[PositiveMoney] = None
    period_type: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category_id: Optional[int] = None

    @model_validator(mode="after")
    def _required_fields_not_cleared(self) -> "BudgetPatch":
        for name in ("name", "amount", "period_type", "start_date"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


class CSVRow(BaseModel):
    date: date
    type: TransactionType
    amount: Decimal
    description: Optional[str]
    category: Optional[str]
    account: str
    to_account: Optional[str]


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    type: AccountKind
    initial_balance: Decimal
    current_balance: Decimal
    icon: Optional[str]
    color: Optional[str]
    is_active: bool
    created_at: datetime


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    type: CategoryType
    parent_id: Optional[int]
    icon: Optional[str]
    color: Optional[str]


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: TransactionType
    amount: Decimal
    description: Optional[str]
    transaction_date: datetime
    category_id: Optional[int]
    payment_method_id: int
    to_payment_method_id: Optional[int]
    is_deleted: bool
    created_at: datetime
    updated_at: datetime


class BudgetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    amount: Decimal
    period_type: BudgetPeriod
    start_date: date
    end_date: Optional[date]
    category_id: Optional[int]
    is_active: bool
    spent_amount: Optional[Decimal] = None
    remaining: Optional[Decimal] = None
    percentage: Optional[Decimal] = None


class ImportIn(BaseModel):
    # Rows stay untyped here so each one is validated and reported on its own.
    transactions: list[dict[str, Any]] = Field(..., min_length=1)


class ImportFailureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    row: int
    code: str
    message: str


class ImportResultOut(BaseModel):
    imported: int
    failed: int
    errors: list[ImportFailureOut]


class SummaryOut(BaseModel):
    income: Decimal
    expense: Decimal
    net: Decimal
    total_balance: Decimal


class CategoryTotalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category_id: int
    name: str
    amount: Decimal
    percent: Decimal


class BalanceDriftOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    account_id: int
    name: str
    expected: Decimal
    actual: Decimal
