from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import Base
from models import AccountKind, CategoryType, TransactionType
from schemas import AccountIn, CategoryIn, TransactionIn
from services import (
    AccountService,
    CategoryService,
    TransactionFilters,
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


def _setup(session, user_id: int = USER):
    cash = AccountService(session, user_id).create(
        AccountIn(name="Cash", type=AccountKind.cash, initial_balance=Decimal("0"))
    )
    categories = CategoryService(session, user_id)
    food = categories.create(CategoryIn(name="Food", type=CategoryType.expense))
    salary = categories.create(CategoryIn(name="Salary", type=CategoryType.income))
    return cash, food, salary


def _add(session, cash, category, when, type_=TransactionType.expense, user_id=USER):
    return TransactionService(session, user_id).create(
        TransactionIn(
            type=type_,
            amount=Decimal("1"),
            transaction_date=when,
            category_id=category.id,
            payment_method_id=cash.id,
        )
    )


def test_date_to_includes_the_whole_day() -> None:
    session = make_session()
    cash, food, _ = _setup(session)
    txn = _add(session, cash, food, datetime(2025, 3, 10, 18, 30))
    service = TransactionService(session, USER)

    same_day = TransactionFilters(
        date_from=date(2025, 3, 10), date_to=date(2025, 3, 10)
    )
    assert [t.id for t in service.list(same_day)] == [txn.id]
    assert service.count(same_day) == 1

    day_before = TransactionFilters(date_to=date(2025, 3, 9))
    assert service.list(day_before) == []
    assert service.count(day_before) == 0

    day_after = TransactionFilters(date_from=date(2025, 3, 11))
    assert service.count(day_after) == 0


def test_datetime_bounds_are_taken_as_given() -> None:
    session = make_session()
    cash, food, _ = _setup(session)
    _add(session, cash, food, datetime(2025, 3, 10, 18, 30))
    service = TransactionService(session, USER)

    before_noon = TransactionFilters(date_to=datetime(2025, 3, 10, 12, 0))
    assert service.count(before_noon) == 0


def test_list_orders_newest_first_with_stable_ties() -> None:
    session = make_session()
    cash, food, _ = _setup(session)
    older = _add(session, cash, food, date(2025, 1, 1))
    tie_a = _add(session, cash, food, date(2025, 2, 1))
    tie_b = _add(session, cash, food, date(2025, 2, 1))

    ids = [t.id for t in TransactionService(session, USER).list()]
    assert ids == [tie_a.id, tie_b.id, older.id]


def test_paging_agrees_with_count() -> None:
    session = make_session()
    cash, food, _ = _setup(session)
    start = date(2025, 1, 1)
    created = [
        _add(session, cash, food, start + timedelta(days=i)).id for i in range(25)
    ]
    service = TransactionService(session, USER)

    pages = [service.list(limit=10, offset=offset) for offset in (0, 10, 20)]
    assert [len(p) for p in pages] == [10, 10, 5]
    seen = [t.id for page in pages for t in page]
    assert sorted(seen) == sorted(created)
    assert len(set(seen)) == 25
    assert service.count() == 25
    assert service.list(limit=10, offset=30) == []


def test_page_window_clamps_limit_and_offset() -> None:
    assert TransactionService.page_window(1000, 0) == (100, 0)
    assert TransactionService.page_window(0, -5) == (1, 0)
    assert TransactionService.page_window(None, None) == (20, 0)
    assert TransactionService.page_window(15, 30) == (15, 30)


def test_filters_narrow_list_and_count_together() -> None:
    session = make_session()
    cash, food, salary = _setup(session)
    _add(session, cash, food, date(2025, 1, 5))
    _add(session, cash, food, date(2025, 1, 6))
    _add(session, cash, salary, date(2025, 1, 7), TransactionType.income)
    deleted = _add(session, cash, food, date(2025, 1, 8))
    service = TransactionService(session, USER)
    service.delete(deleted.id)

    by_type = TransactionFilters(type=TransactionType.income)
    assert service.count(by_type) == len(service.list(by_type)) == 1

    by_category = TransactionFilters(category_id=food.id)
    assert service.count(by_category) == len(service.list(by_category)) == 2

    assert service.count() == 3
    assert deleted.id not in {t.id for t in service.list()}


def test_other_users_transactions_are_invisible() -> None:
    session = make_session()
    cash, food, _ = _setup(session)
    their_cash, their_food, _ = _setup(session, user_id=2)
    _add(session, cash, food, date(2025, 1, 5))
    _add(session, their_cash, their_food, date(2025, 1, 5), user_id=2)
    _add(session, their_cash, their_food, date(2025, 1, 6), user_id=2)

    assert TransactionService(session, USER).count() == 1
    assert TransactionService(session, 2).count() == 2
