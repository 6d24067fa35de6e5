from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import Base
from errors import ValidationError
from models import AccountKind, CategoryType, TransactionType
from periods import Period, resolve_period
from schemas import AccountIn, CategoryIn, TransactionIn
from services import (
    AccountService,
    CategoryService,
    PeriodTotals,
    ReportService,
    TransactionService,
)

USER = 1


def make_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    return SessionLocal()


def _seed_month(session):
    accounts = AccountService(session, USER)
    cash = accounts.create(
        AccountIn(name="Cash", type=AccountKind.cash, initial_balance=Decimal("100"))
    )
    bank = accounts.create(
        AccountIn(name="Bank", type=AccountKind.bank_account, initial_balance=0)
    )
    categories = CategoryService(session, USER)
    food = categories.create(CategoryIn(name="Food", type=CategoryType.expense))
    rent = categories.create(CategoryIn(name="Rent", type=CategoryType.expense))
    salary = categories.create(CategoryIn(name="Salary", type=CategoryType.income))

    service = TransactionService(session, USER)

    def add(type_, amount, category=None, when=date(2025, 1, 10), **extra):
        return service.create(
            TransactionIn(
                type=type_,
                amount=Decimal(amount),
                transaction_date=when,
                category_id=category.id if category else None,
                payment_method_id=extra.get("source", cash).id,
                to_payment_method_id=extra["to"].id if "to" in extra else None,
            )
        )

    add(TransactionType.income, "2000", salary, source=bank)
    add(TransactionType.expense, "30", food)
    add(TransactionType.expense, "10", food)
    add(TransactionType.expense, "800", rent, source=bank)
    add(TransactionType.transfer, "50", source=bank, to=cash)
    add(TransactionType.expense, "999", food, when=date(2025, 2, 1))
    gone = add(TransactionType.expense, "70", food)
    service.delete(gone.id)


def test_summary_counts_income_and_expense_only() -> None:
    session = make_session()
    _seed_month(session)
    january = Period("custom", date(2025, 1, 1), date(2025, 1, 31))

    totals = ReportService(session, USER).summary(january)

    assert totals == PeriodTotals(
        income=Decimal("2000.00"),
        expense=Decimal("840.00"),
        net=Decimal("1160.00"),
    )


def test_category_breakdown_sorted_by_amount() -> None:
    session = make_session()
    _seed_month(session)
    january = Period("custom", date(2025, 1, 1), date(2025, 1, 31))

    rows = ReportService(session, USER).category_breakdown(january)

    assert [(r.name, r.amount) for r in rows] == [
        ("Rent", Decimal("800.00")),
        ("Food", Decimal("40.00")),
    ]
    assert rows[0].percent == Decimal("95.24")


def test_category_breakdown_rejects_transfers() -> None:
    session = make_session()
    with pytest.raises(ValidationError):
        ReportService(session, USER).category_breakdown(
            resolve_period("all", None, None), TransactionType.transfer
        )


def test_total_balance_sums_active_accounts() -> None:
    session = make_session()
    _seed_month(session)
    # 100 - 30 - 10 + 50 - 999 and 0 + 2000 - 800 - 50
    assert ReportService(session, USER).total_balance() == Decimal("261.00")


def test_resolve_period_variants() -> None:
    today = date(2025, 3, 15)
    this_month = resolve_period("this_month", None, None, today=today)
    assert (this_month.start, this_month.end) == (date(2025, 3, 1), date(2025, 3, 31))

    last_month = resolve_period("last_month", None, None, today=today)
    assert (last_month.start, last_month.end) == (date(2025, 2, 1), date(2025, 2, 28))

    custom = resolve_period("custom", "2025-01-01", "2025-01-31", today=today)
    assert custom.ends_at.isoformat() == "2025-01-31T23:59:59.999000"

    with pytest.raises(ValueError):
        resolve_period("custom", "2025-02-01", "2025-01-01", today=today)
