from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from config import get_settings
from csv_utils import parse_csv
from database import unit_of_work
from errors import NotFoundError, ValidationError
from models import (
    CENT,
    Account,
    Budget,
    BudgetPeriod,
    Category,
    CategoryType,
    Transaction,
    TransactionStatus,
    TransactionType,
    quantize_money,
)
from periods import Period, lower_bound, start_of_day, upper_bound
from schemas import (
    AccountIn,
    BudgetIn,
    BudgetPatch,
    CategoryIn,
    TransactionIn,
    TransactionPatch,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def active_transactions(user_id: int) -> tuple:
    """Predicate shared by every read path over the ledger."""
    return (
        Transaction.user_id == user_id,
        Transaction.status == TransactionStatus.active,
    )


@dataclass
class TransactionFilters:
    type: Optional[TransactionType] = None
    category_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


def _filter_clauses(user_id: int, filters: Optional[TransactionFilters]) -> list:
    clauses = list(active_transactions(user_id))
    if filters is None:
        return clauses
    if filters.type:
        clauses.append(Transaction.type == filters.type)
    if filters.category_id:
        clauses.append(Transaction.category_id == filters.category_id)
    if filters.date_from:
        clauses.append(Transaction.transaction_date >= lower_bound(filters.date_from))
    if filters.date_to:
        clauses.append(Transaction.transaction_date <= upper_bound(filters.date_to))
    return clauses


@dataclass(frozen=True)
class BalanceDrift:
    account_id: int
    name: str
    expected: Decimal
    actual: Decimal


@dataclass(frozen=True)
class ImportFailure:
    row: int
    code: str
    message: str


@dataclass
class ImportResult:
    imported: int = 0
    failed: list[ImportFailure] = field(default_factory=list)


@dataclass(frozen=True)
class PeriodTotals:
    income: Decimal
    expense: Decimal
    net: Decimal


@dataclass(frozen=True)
class CategoryTotal:
    category_id: int
    name: str
    amount: Decimal
    percent: Decimal


@dataclass(frozen=True)
class BudgetStatus:
    spent: Decimal
    remaining: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class _Draft:
    """The ledger-relevant fields of a transaction, before or after an edit."""

    type: TransactionType
    amount: Decimal
    description: Optional[str]
    transaction_date: datetime
    category_id: Optional[int]
    payment_method_id: int
    to_payment_method_id: Optional[int]

    @classmethod
    def from_input(cls, data: TransactionIn) -> _Draft:
        return cls(**data.model_dump())

    @classmethod
    def from_transaction(cls, txn: Transaction) -> _Draft:
        return cls(
            type=txn.type,
            amount=txn.amount,
            description=txn.description,
            transaction_date=txn.transaction_date,
            category_id=txn.category_id,
            payment_method_id=txn.payment_method_id,
            to_payment_method_id=txn.to_payment_method_id,
        )

    def merge(self, changes: Mapping[str, object]) -> _Draft:
        values = asdict(self)
        values.update(changes)
        new_type = values["type"]
        # A type switch drops the fields the new type forbids unless the
        # caller supplied them explicitly.
        if "type" in changes and new_type != self.type:
            if new_type == TransactionType.transfer and "category_id" not in changes:
                values["category_id"] = None
            if (
                new_type != TransactionType.transfer
                and "to_payment_method_id" not in changes
            ):
                values["to_payment_method_id"] = None
        return _Draft(**values)

    def accounts(self) -> frozenset[int]:
        ids = {self.payment_method_id}
        if self.to_payment_method_id is not None:
            ids.add(self.to_payment_method_id)
        return frozenset(ids)

    def effects(self) -> dict[int, Decimal]:
        if self.type == TransactionType.income:
            return {self.payment_method_id: self.amount}
        if self.type == TransactionType.expense:
            return {self.payment_method_id: -self.amount}
        return {
            self.payment_method_id: -self.amount,
            self.to_payment_method_id: self.amount,
        }


def _net_effects(
    before: Optional[_Draft], after: Optional[_Draft]
) -> dict[int, Decimal]:
    net: dict[int, Decimal] = defaultdict(lambda: ZERO)
    if before is not None:
        for account_id, delta in before.effects().items():
            net[account_id] -= delta
    if after is not None:
        for account_id, delta in after.effects().items():
            net[account_id] += delta
    return {account_id: delta for account_id, delta in net.items() if delta}


def _schema_message(exc: SchemaError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


class AccountService:
    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    def list_active(self) -> list[Account]:
        stmt = (
            select(Account)
            .where(Account.user_id == self.user_id, Account.is_active.is_(True))
            .order_by(Account.created_at.asc(), Account.id.asc())
        )
        return self.session.scalars(stmt).all()

    def get(self, account_id: int, *, require_active: bool = False) -> Account:
        account = self.session.get(Account, account_id)
        if not account or account.user_id != self.user_id:
            raise NotFoundError("Payment method")
        if require_active and not account.is_active:
            raise NotFoundError("Payment method")
        return account

    def create(self, data: AccountIn) -> Account:
        with unit_of_work(self.session, "account_create"):
            account = Account(
                user_id=self.user_id,
                name=data.name,
                type=data.type,
                icon=data.icon,
                color=data.color,
                initial_balance=data.initial_balance,
                current_balance=data.initial_balance,
                is_active=True,
            )
            self.session.add(account)
            self.session.flush()
        logger.info(f"account_create: user={self.user_id} id={account.id}")
        return account

    def deactivate(self, account_id: int) -> Account:
        with unit_of_work(self.session, "account_deactivate"):
            account = self.get(account_id, require_active=True)
            account.is_active = False
            self.session.flush()
        return account

    def adjust_balance(self, account_id: int, delta: Decimal) -> None:
        """Apply ``current_balance += delta`` as one statement.

        Must only be called from ledger mutations, inside their unit of work.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id, Account.user_id == self.user_id)
            .values(current_balance=Account.current_balance + delta)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            raise NotFoundError("Payment method")
        cached = self.session.identity_map.get(identity_key(Account, account_id))
        if cached is not None:
            self.session.expire(cached, ["current_balance"])

    def _logged_effects(self) -> dict[int, Decimal]:
        live = active_transactions(self.user_id)
        totals: dict[int, Decimal] = defaultdict(lambda: ZERO)

        credits = (
            select(
                Transaction.payment_method_id,
                func.sum(Transaction.amount).label("total"),
            )
            .where(*live, Transaction.type == TransactionType.income)
            .group_by(Transaction.payment_method_id)
        )
        for account_id, total in self.session.execute(credits):
            totals[account_id] += total or ZERO

        debits = (
            select(
                Transaction.payment_method_id,
                func.sum(Transaction.amount).label("total"),
            )
            .where(
                *live,
                Transaction.type.in_(
                    [TransactionType.expense, TransactionType.transfer]
                ),
            )
            .group_by(Transaction.payment_method_id)
        )
        for account_id, total in self.session.execute(debits):
            totals[account_id] -= total or ZERO

        incoming = (
            select(
                Transaction.to_payment_method_id,
                func.sum(Transaction.amount).label("total"),
            )
            .where(*live, Transaction.type == TransactionType.transfer)
            .group_by(Transaction.to_payment_method_id)
        )
        for account_id, total in self.session.execute(incoming):
            totals[account_id] += total or ZERO
        return totals

    def reconcile(self) -> list[BalanceDrift]:
        """Compare stored balances against a replay of the transaction log."""
        effects = self._logged_effects()
        accounts = self.session.scalars(
            select(Account)
            .where(Account.user_id == self.user_id)
            .order_by(Account.id.asc())
        ).all()
        drifts: list[BalanceDrift] = []
        for account in accounts:
            expected = account.initial_balance + effects.get(account.id, ZERO)
            if expected != account.current_balance:
                logger.warning(
                    f"balance_drift: user={self.user_id} account={account.id} "
                    f"expected={expected} actual={account.current_balance}"
                )
                drifts.append(
                    BalanceDrift(
                        account_id=account.id,
                        name=account.name,
                        expected=expected,
                        actual=account.current_balance,
                    )
                )
        return drifts


class CategoryService:
    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    def list_all(self) -> list[Category]:
        stmt = (
            select(Category)
            .where(Category.user_id == self.user_id)
            .order_by(
                Category.parent_id.is_not(None),
                func.lower(Category.name),
                Category.id,
            )
        )
        return self.session.scalars(stmt).all()

    def get(self, category_id: int) -> Category:
        category = self.session.get(Category, category_id)
        if not category or category.user_id != self.user_id:
            raise NotFoundError("Category")
        return category

    def create(self, data: CategoryIn) -> Category:
        if data.parent_id is not None:
            parent = self.session.get(Category, data.parent_id)
            if not parent or parent.user_id != self.user_id:
                raise ValidationError("Parent category not found")
            if parent.parent_id is not None:
                raise ValidationError("Categories can only be nested one level deep")
            if parent.type != data.type:
                raise ValidationError("Parent category type mismatch")

        existing = self.session.scalar(
            select(Category).where(
                Category.user_id == self.user_id,
                Category.type == data.type,
                Category.parent_id.is_(None)
                if data.parent_id is None
                else Category.parent_id == data.parent_id,
                func.lower(Category.name) == data.name.lower(),
            )
        )
        if existing:
            raise ValidationError("Category with this name already exists")

        with unit_of_work(self.session, "category_create"):
            category = Category(
                user_id=self.user_id,
                name=data.name,
                type=data.type,
                parent_id=data.parent_id,
                icon=data.icon,
                color=data.color,
            )
            self.session.add(category)
            self.session.flush()
        return category


class TransactionService:
    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id
        self.accounts = AccountService(session, user_id)

    def get(
        self,
        transaction_id: int,
        *,
        include_deleted: bool = False,
        for_update: bool = False,
    ) -> Transaction:
        stmt = select(Transaction).where(
            Transaction.user_id == self.user_id, Transaction.id == transaction_id
        )
        if not include_deleted:
            stmt = stmt.where(Transaction.status == TransactionStatus.active)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        txn = self.session.scalar(stmt)
        if not txn:
            raise NotFoundError("Transaction")
        return txn

    def _require_account(self, account_id: int, known: frozenset[int]) -> None:
        # Accounts the transaction already touched may have been deactivated
        # since; edits and reversals must still reach them.
        self.accounts.get(account_id, require_active=account_id not in known)

    def _validate(self, draft: _Draft, known: frozenset[int] = frozenset()) -> None:
        if not draft.amount.is_finite() or draft.amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        self._require_account(draft.payment_method_id, known)

        if draft.type != TransactionType.transfer:
            if draft.category_id is None:
                raise ValidationError(
                    "Category is required for income and expense transactions"
                )
            category = self.session.get(Category, draft.category_id)
            if not category or category.user_id != self.user_id:
                raise NotFoundError("Category")
            if category.type.value != draft.type.value:
                raise ValidationError("Category type mismatch")
            if draft.to_payment_method_id is not None:
                raise ValidationError(
                    "Only transfers can have a destination payment method"
                )
        else:
            if draft.category_id is not None:
                raise ValidationError("Transfers cannot have a category")
            if draft.to_payment_method_id is None:
                raise ValidationError("Transfers require a destination payment method")
            self._require_account(draft.to_payment_method_id, known)
            if draft.to_payment_method_id == draft.payment_method_id:
                raise ValidationError(
                    "Transfer source and destination must be different"
                )

        if not isinstance(draft.transaction_date, datetime):
            raise ValidationError("Invalid transaction date")

    def _apply(self, deltas: Mapping[int, Decimal]) -> None:
        # Fixed lock order so concurrent writers cannot deadlock.
        for account_id in sorted(deltas):
            self.accounts.adjust_balance(account_id, deltas[account_id])

    def create(self, data: TransactionIn) -> Transaction:
        draft = _Draft.from_input(data)
        with unit_of_work(self.session, "transaction_create"):
            self._validate(draft)
            txn = Transaction(
                user_id=self.user_id,
                status=TransactionStatus.active,
                **asdict(draft),
            )
            self.session.add(txn)
            self.session.flush()
            self._apply(_net_effects(None, draft))
        logger.info(
            f"transaction_create: user={self.user_id} id={txn.id} "
            f"type={txn.type.value} amount={txn.amount}"
        )
        return txn

    def update(self, transaction_id: int, patch: TransactionPatch) -> Transaction:
        changes = patch.changes()
        if not changes:
            raise ValidationError("No fields to update")
        with unit_of_work(self.session, "transaction_update"):
            txn = self.get(transaction_id, for_update=True)
            before = _Draft.from_transaction(txn)
            after = before.merge(changes)
            self._validate(after, known=before.accounts())

            for name, value in asdict(after).items():
                if getattr(txn, name) != value:
                    setattr(txn, name, value)
            self.session.flush()
            self._apply(_net_effects(before, after))
        logger.info(
            f"transaction_update: user={self.user_id} id={txn.id} "
            f"fields={','.join(sorted(changes))}"
        )
        return txn

    def delete(self, transaction_id: int) -> Transaction:
        with unit_of_work(self.session, "transaction_delete"):
            txn = self.get(transaction_id, for_update=True)
            before = _Draft.from_transaction(txn)
            txn.status = TransactionStatus.deleted
            self.session.flush()
            self._apply(_net_effects(before, None))
        logger.info(f"transaction_delete: user={self.user_id} id={txn.id}")
        return txn

    @staticmethod
    def page_window(limit: Optional[int], offset: Optional[int]) -> tuple[int, int]:
        settings = get_settings()
        if limit is None:
            limit = settings.default_page_size
        limit = min(max(limit, 1), settings.max_page_size)
        return limit, max(offset or 0, 0)

    def list(
        self,
        filters: Optional[TransactionFilters] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        limit, offset = self.page_window(limit, offset)
        stmt = (
            select(Transaction)
            .where(*_filter_clauses(self.user_id, filters))
            .order_by(Transaction.transaction_date.desc(), Transaction.id.asc())
            .offset(offset)
            .limit(limit)
        )
        return self.session.scalars(stmt).all()

    def count(self, filters: Optional[TransactionFilters] = None) -> int:
        stmt = select(func.count(Transaction.id)).where(
            *_filter_clauses(self.user_id, filters)
        )
        return int(self.session.execute(stmt).scalar_one() or 0)

    def bulk_import(self, rows: Iterable[Mapping[str, object]]) -> ImportResult:
        """Create each row independently; bad rows are reported, not fatal."""
        result = self._import_numbered(enumerate(rows, start=1))
        logger.info(
            f"transaction_import: user={self.user_id} imported={result.imported} "
            f"failed={len(result.failed)}"
        )
        return result

    def _import_numbered(
        self, rows: Iterable[tuple[int, Mapping[str, object]]]
    ) -> ImportResult:
        result = ImportResult()
        for idx, row in rows:
            try:
                self.create(TransactionIn.model_validate(row))
            except SchemaError as exc:
                result.failed.append(
                    ImportFailure(idx, "VALIDATION_ERROR", _schema_message(exc))
                )
            except (ValidationError, NotFoundError) as exc:
                result.failed.append(ImportFailure(idx, exc.code, exc.message))
            else:
                result.imported += 1
        return result

    def import_csv(self, content: str) -> ImportResult:
        parsed, errors = parse_csv(content)
        failures = [ImportFailure(idx, "VALIDATION_ERROR", msg) for idx, msg in errors]

        accounts: dict[str, int] = {}
        for account in self.accounts.list_active():
            accounts.setdefault(account.name.lower(), account.id)
        categories: dict[tuple[str, str], int] = {}
        for category in CategoryService(self.session, self.user_id).list_all():
            key = (category.type.value, category.name.lower())
            categories.setdefault(key, category.id)

        resolved: list[tuple[int, dict[str, object]]] = []
        for idx, row in parsed:
            account_id = accounts.get(row.account.lower())
            if account_id is None:
                failures.append(
                    ImportFailure(
                        idx, "NOT_FOUND", f"Payment method '{row.account}' not found"
                    )
                )
                continue
            to_account_id = None
            if row.to_account:
                to_account_id = accounts.get(row.to_account.lower())
                if to_account_id is None:
                    failures.append(
                        ImportFailure(
                            idx,
                            "NOT_FOUND",
                            f"Payment method '{row.to_account}' not found",
                        )
                    )
                    continue
            category_id = None
            if row.category and row.type == TransactionType.transfer:
                failures.append(
                    ImportFailure(
                        idx, "VALIDATION_ERROR", "Transfers cannot have a category"
                    )
                )
                continue
            if row.category:
                category_id = categories.get((row.type.value, row.category.lower()))
                if category_id is None:
                    failures.append(
                        ImportFailure(
                            idx,
                            "NOT_FOUND",
                            f"Category '{row.category}' not found for {row.type.value}",
                        )
                    )
                    continue
            resolved.append(
                (
                    idx,
                    {
                        "type": row.type,
                        "amount": row.amount,
                        "description": row.description,
                        "transaction_date": row.date,
                        "category_id": category_id,
                        "payment_method_id": account_id,
                        "to_payment_method_id": to_account_id,
                    },
                )
            )

        result = self._import_numbered(resolved)
        result.failed = sorted(failures + result.failed, key=lambda f: f.row)
        logger.info(
            f"transaction_import_csv: user={self.user_id} imported={result.imported} "
            f"failed={len(result.failed)}"
        )
        return result


class BudgetService:
    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    def _check_scope(self, category_id: Optional[int]) -> None:
        if category_id is None:
            return
        category = self.session.get(Category, category_id)
        if not category or category.user_id != self.user_id:
            raise NotFoundError("Category")
        if category.type != CategoryType.expense:
            raise ValidationError("Budgets can only be set for expense categories")

    @staticmethod
    def _check_window(
        period_type: BudgetPeriod, start_date: date, end_date: Optional[date]
    ) -> None:
        if period_type == BudgetPeriod.one_time and end_date is None:
            raise ValidationError("One-time budgets require an end date")
        if end_date is not None and end_date <= start_date:
            raise ValidationError("End date must be after start date")

    def list_active(self) -> list[Budget]:
        stmt = (
            select(Budget)
            .where(Budget.user_id == self.user_id, Budget.is_active.is_(True))
            .order_by(Budget.created_at.desc(), Budget.id.desc())
        )
        return self.session.scalars(stmt).all()

    def get(self, budget_id: int) -> Budget:
        budget = self.session.get(Budget, budget_id)
        if not budget or budget.user_id != self.user_id or not budget.is_active:
            raise NotFoundError("Budget")
        return budget

    def create(self, data: BudgetIn) -> Budget:
        if data.amount <= 0:
            raise ValidationError("Budget amount must be greater than zero")
        self._check_window(data.period_type, data.start_date, data.end_date)
        self._check_scope(data.category_id)
        with unit_of_work(self.session, "budget_create"):
            budget = Budget(
                user_id=self.user_id,
                name=data.name,
                amount=data.amount,
                period_type=data.period_type,
                start_date=data.start_date,
                end_date=data.end_date,
                category_id=data.category_id,
                is_active=True,
            )
            self.session.add(budget)
            self.session.flush()
        return budget

    def update(self, budget_id: int, patch: BudgetPatch) -> Budget:
        changes = patch.changes()
        if not changes:
            raise ValidationError("No fields to update")
        with unit_of_work(self.session, "budget_update"):
            budget = self.get(budget_id)
            period_type = changes.get("period_type", budget.period_type)
            start_date = changes.get("start_date", budget.start_date)
            end_date = changes.get("end_date", budget.end_date)
            self._check_window(period_type, start_date, end_date)
            if "category_id" in changes:
                self._check_scope(changes["category_id"])
            for name, value in changes.items():
                setattr(budget, name, value)
            self.session.flush()
        return budget

    def deactivate(self, budget_id: int) -> Budget:
        with unit_of_work(self.session, "budget_deactivate"):
            budget = self.get(budget_id)
            budget.is_active = False
            self.session.flush()
        return budget

    def compute_spent(self, budget: Budget) -> Decimal:
        """Replay active expenses inside ``[start_date, end_date)``.

        Never cached: the answer always reflects the ledger as it is now.
        """
        if budget.user_id != self.user_id:
            raise NotFoundError("Budget")
        stmt = select(func.sum(Transaction.amount)).where(
            *active_transactions(budget.user_id),
            Transaction.type == TransactionType.expense,
            Transaction.transaction_date >= start_of_day(budget.start_date),
        )
        if budget.end_date is not None:
            stmt = stmt.where(
                Transaction.transaction_date < start_of_day(budget.end_date)
            )
        if budget.category_id is not None:
            stmt = stmt.where(Transaction.category_id == budget.category_id)
        spent = self.session.execute(stmt).scalar_one()
        return quantize_money(spent) if spent is not None else ZERO

    def status(self, budget: Budget) -> BudgetStatus:
        if budget.amount <= 0:
            raise ValidationError("Budget amount must be greater than zero")
        spent = self.compute_spent(budget)
        percentage = (spent / budget.amount * 100).quantize(
            CENT, rounding=ROUND_HALF_UP
        )
        return BudgetStatus(
            spent=spent,
            remaining=budget.amount - spent,
            percentage=percentage,
        )

    def list_with_status(self) -> list[tuple[Budget, BudgetStatus]]:
        return [(budget, self.status(budget)) for budget in self.list_active()]


class ReportService:
    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    def summary(self, period: Period) -> PeriodTotals:
        stmt = (
            select(Transaction.type, func.sum(Transaction.amount).label("total"))
            .where(
                *active_transactions(self.user_id),
                Transaction.type.in_([TransactionType.income, TransactionType.expense]),
                Transaction.transaction_date.between(period.starts_at, period.ends_at),
            )
            .group_by(Transaction.type)
        )
        totals = {row.type: row.total or ZERO for row in self.session.execute(stmt)}
        income = totals.get(TransactionType.income, ZERO)
        expense = totals.get(TransactionType.expense, ZERO)
        return PeriodTotals(income=income, expense=expense, net=income - expense)

    def category_breakdown(
        self,
        period: Period,
        transaction_type: TransactionType = TransactionType.expense,
    ) -> list[CategoryTotal]:
        if transaction_type == TransactionType.transfer:
            raise ValidationError("Transfers have no categories")
        total_col = func.sum(Transaction.amount).label("total")
        stmt = (
            select(Category.id, Category.name, total_col)
            .select_from(Transaction)
            .join(Category, Category.id == Transaction.category_id)
            .where(
                *active_transactions(self.user_id),
                Transaction.type == transaction_type,
                Transaction.transaction_date.between(period.starts_at, period.ends_at),
            )
            .group_by(Category.id, Category.name)
        )
        rows = self.session.execute(stmt).all()
        total = sum((row.total or ZERO for row in rows), ZERO)
        breakdown = []
        for row in rows:
            amount = row.total or ZERO
            percent = (amount / total * 100).quantize(CENT) if total else ZERO
            breakdown.append(
                CategoryTotal(
                    category_id=row.id,
                    name=row.name,
                    amount=amount,
                    percent=percent,
                )
            )
        breakdown.sort(key=lambda item: item.amount, reverse=True)
        return breakdown

    def total_balance(self) -> Decimal:
        stmt = select(func.sum(Account.current_balance)).where(
            Account.user_id == self.user_id, Account.is_active.is_(True)
        )
        total = self.session.execute(stmt).scalar_one()
        return total if total is not None else ZERO


def seed_defaults(session: Session, user_id: int) -> None:
    """Starter accounts and categories for a fresh user."""
    with unit_of_work(session, "seed_defaults"):
        accounts = AccountService(session, user_id)
        accounts.create(
            AccountIn(
                name="Cash",
                type="cash",
                initial_balance=Decimal("100"),
                icon="💵",
                color="#10B981",
            )
        )
        accounts.create(
            AccountIn(
                name="Bank Account",
                type="bank_account",
                initial_balance=Decimal("1000"),
                icon="🏦",
                color="#3B82F6",
            )
        )

        categories = CategoryService(session, user_id)
        food = categories.create(
            CategoryIn(
                name="Food & Dining", type="expense", icon="🍔", color="#F59E0B"
            )
        )
        categories.create(
            CategoryIn(
                name="Groceries",
                type="expense",
                parent_id=food.id,
                icon="🛒",
                color="#F59E0B",
            )
        )
        categories.create(
            CategoryIn(name="Salary", type="income", icon="💼", color="#10B981")
        )
    logger.info(f"seed_defaults: user={user_id}")
