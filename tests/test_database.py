from datetime import date
from decimal import Decimal, InvalidOperation

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.exc import StaleDataError

import database
from database import Base, session_scope, unit_of_work
from errors import ConflictError, InternalError, StoreUnavailable, ValidationError
from models import Account, AccountKind, Transaction, TransactionType
from schemas import AccountIn, TransactionIn, TransactionPatch
from services import AccountService, TransactionService

USER = 1


def make_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    return SessionLocal()


def test_session_scope_commits_on_success() -> None:
    Base.metadata.create_all(database.engine)

    with session_scope() as session:
        AccountService(session, 42).create(
            AccountIn(name="Cash", type=AccountKind.cash, initial_balance=Decimal("5"))
        )

    with session_scope() as session:
        names = [a.name for a in AccountService(session, 42).list_active()]
    assert names == ["Cash"]


@pytest.mark.parametrize(
    "raised, expected",
    [
        (StaleDataError("version mismatch"), ConflictError),
        (
            OperationalError("UPDATE", {}, Exception("database is locked")),
            StoreUnavailable,
        ),
        (IntegrityError("INSERT", {}, Exception("constraint")), InternalError),
        (OverflowError("int too big to convert"), InternalError),
        (InvalidOperation(), InternalError),
    ],
)
def test_unit_of_work_maps_storage_failures(raised, expected) -> None:
    session = make_session()
    with pytest.raises(expected):
        with unit_of_work(session, "test"):
            raise raised


def test_unit_of_work_rolls_back_on_app_error() -> None:
    session = make_session()
    with pytest.raises(ValidationError):
        with unit_of_work(session, "test"):
            session.add(
                Account(
                    user_id=USER,
                    name="Ghost",
                    type=AccountKind.cash,
                    initial_balance=Decimal("1"),
                    current_balance=Decimal("1"),
                )
            )
            session.flush()
            raise ValidationError("nope")

    assert AccountService(session, USER).list_active() == []


def test_nested_unit_of_work_commits_once_with_the_outer_block() -> None:
    session = make_session()
    with pytest.raises(ValidationError):
        with unit_of_work(session, "outer"):
            AccountService(session, USER).create(
                AccountIn(name="Cash", type=AccountKind.cash, initial_balance=0)
            )
            raise ValidationError("later step failed")

    assert AccountService(session, USER).list_active() == []
    assert "unit_of_work" not in session.info


def make_file_sessions(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"check_same_thread": False, "timeout": 5},
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    return SessionLocal(), SessionLocal()


def _expense(account_id: int, amount: str) -> TransactionIn:
    return TransactionIn(
        type=TransactionType.expense,
        amount=Decimal(amount),
        transaction_date=date(2025, 1, 10),
        payment_method_id=account_id,
    )


def test_interleaved_sessions_do_not_lose_balance_updates(tmp_path) -> None:
    session_a, session_b = make_file_sessions(tmp_path)
    account = AccountService(session_a, USER).create(
        AccountIn(name="Cash", type=AccountKind.cash, initial_balance=Decimal("100"))
    )

    # Session B caches the account at its opening balance.
    stale = session_b.get(Account, account.id)
    assert stale.current_balance == Decimal("100.00")
    session_b.commit()

    TransactionService(session_a, USER).create(_expense(account.id, "30"))
    TransactionService(session_b, USER).create(_expense(account.id, "20"))

    session_a.close()
    session_b.close()
    fresh, _ = make_file_sessions(tmp_path)
    assert fresh.get(Account, account.id).current_balance == Decimal("50.00")
    assert AccountService(fresh, USER).reconcile() == []


def test_concurrent_edit_of_same_transaction_conflicts(tmp_path) -> None:
    session_a, session_b = make_file_sessions(tmp_path)
    account = AccountService(session_a, USER).create(
        AccountIn(name="Cash", type=AccountKind.cash, initial_balance=Decimal("100"))
    )
    txn = TransactionService(session_a, USER).create(_expense(account.id, "30"))

    stale = session_b.get(Transaction, txn.id)
    session_b.commit()

    TransactionService(session_a, USER).update(
        txn.id, TransactionPatch(description="first edit")
    )

    with pytest.raises(ConflictError):
        with unit_of_work(session_b, "late_edit"):
            stale.description = "late edit"
            session_b.flush()

    session_a.expire_all()
    assert session_a.get(Transaction, txn.id).description == "first edit"
