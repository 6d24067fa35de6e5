import logging
import math
from datetime import date, datetime
from typing import Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config import get_settings
from database import SessionLocal
from errors import AppError, AuthenticationError, ValidationError
from models import Budget, TransactionType
from periods import Period, resolve_period
from schemas import (
    AccountIn,
    AccountOut,
    BalanceDriftOut,
    BudgetIn,
    BudgetOut,
    BudgetPatch,
    CategoryIn,
    CategoryOut,
    CategoryTotalOut,
    ImportFailureOut,
    ImportIn,
    ImportResultOut,
    SummaryOut,
    TransactionIn,
    TransactionOut,
    TransactionPatch,
)
from services import (
    AccountService,
    BudgetService,
    BudgetStatus,
    CategoryService,
    ImportResult,
    ReportService,
    TransactionFilters,
    TransactionService,
    seed_defaults,
)

logging.basicConfig(level=get_settings().log_level)

app = FastAPI(title="Ledger")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def current_user(x_user_id: Optional[str] = Header(default=None)) -> int:
    if not x_user_id:
        raise AuthenticationError()
    try:
        user_id = int(x_user_id)
    except ValueError as exc:
        raise AuthenticationError("Invalid X-User-Id header") from exc
    if user_id <= 0:
        raise AuthenticationError("Invalid X-User-Id header")
    return user_id


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.to_dict()},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": {"code": "VALIDATION_ERROR", "message": "; ".join(parts)},
        },
    )


def ok(data) -> dict:
    return {"success": True, "data": data}


def parse_bound(value: Optional[str], name: str) -> Optional[date]:
    """Bare ``YYYY-MM-DD`` stays a date so the range widens to whole days."""
    if not value:
        return None
    value = value.strip()
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"Invalid {name}") from exc


def period_from_query(
    period: Optional[str], start: Optional[str], end: Optional[str]
) -> Period:
    try:
        return resolve_period(period, start, end)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def budget_out(budget: Budget, status: BudgetStatus) -> BudgetOut:
    return BudgetOut.model_validate(budget).model_copy(
        update={
            "spent_amount": status.spent,
            "remaining": status.remaining,
            "percentage": status.percentage,
        }
    )


def import_out(result: ImportResult) -> ImportResultOut:
    return ImportResultOut(
        imported=result.imported,
        failed=len(result.failed),
        errors=[ImportFailureOut.model_validate(f) for f in result.failed],
    )


@app.get("/api/v1/payment-methods")
def list_payment_methods(
    db: Session = Depends(get_db), user_id: int = Depends(current_user)
):
    accounts = AccountService(db, user_id).list_active()
    return ok([AccountOut.model_validate(a) for a in accounts])


@app.post("/api/v1/payment-methods", status_code=201)
def create_payment_method(
    data: AccountIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    account = AccountService(db, user_id).create(data)
    return ok(AccountOut.model_validate(account))


@app.get("/api/v1/payment-methods/reconcile")
def reconcile_payment_methods(
    db: Session = Depends(get_db), user_id: int = Depends(current_user)
):
    drifts = AccountService(db, user_id).reconcile()
    return ok([BalanceDriftOut.model_validate(d) for d in drifts])


@app.delete("/api/v1/payment-methods/{account_id}")
def delete_payment_method(
    account_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    account = AccountService(db, user_id).deactivate(account_id)
    return ok(AccountOut.model_validate(account))


@app.get("/api/v1/categories")
def list_categories(
    db: Session = Depends(get_db), user_id: int = Depends(current_user)
):
    categories = CategoryService(db, user_id).list_all()
    return ok([CategoryOut.model_validate(c) for c in categories])


@app.post("/api/v1/categories", status_code=201)
def create_category(
    data: CategoryIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    category = CategoryService(db, user_id).create(data)
    return ok(CategoryOut.model_validate(category))


@app.get("/api/v1/transactions")
def list_transactions(
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    type: Optional[TransactionType] = Query(None),
    category_id: Optional[int] = Query(None),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    filters = TransactionFilters(
        type=type,
        category_id=category_id,
        date_from=parse_bound(date_from, "date_from"),
        date_to=parse_bound(date_to, "date_to"),
    )
    page = max(page, 1)
    limit, _ = TransactionService.page_window(limit, 0)
    service = TransactionService(db, user_id)
    items = service.list(filters, limit=limit, offset=(page - 1) * limit)
    total = service.count(filters)
    return {
        "success": True,
        "data": [TransactionOut.model_validate(t) for t in items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@app.post("/api/v1/transactions", status_code=201)
def create_transaction(
    data: TransactionIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    txn = TransactionService(db, user_id).create(data)
    return ok(TransactionOut.model_validate(txn))


@app.post("/api/v1/transactions/import")
def import_transactions(
    data: ImportIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    result = TransactionService(db, user_id).bulk_import(data.transactions)
    return ok(import_out(result))


@app.post("/api/v1/transactions/import/csv")
async def import_transactions_csv(
    request: Request,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    raw = await request.body()
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationError("CSV body must be UTF-8 encoded") from exc
    if not content.strip():
        raise ValidationError("CSV body is empty")
    result = TransactionService(db, user_id).import_csv(content)
    return ok(import_out(result))


@app.put("/api/v1/transactions/{transaction_id}")
def update_transaction(
    transaction_id: int,
    patch: TransactionPatch,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    txn = TransactionService(db, user_id).update(transaction_id, patch)
    return ok(TransactionOut.model_validate(txn))


@app.delete("/api/v1/transactions/{transaction_id}")
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    TransactionService(db, user_id).delete(transaction_id)
    return ok({"id": transaction_id})


@app.get("/api/v1/budgets")
def list_budgets(db: Session = Depends(get_db), user_id: int = Depends(current_user)):
    rows = BudgetService(db, user_id).list_with_status()
    return ok([budget_out(budget, status) for budget, status in rows])


@app.post("/api/v1/budgets", status_code=201)
def create_budget(
    data: BudgetIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    service = BudgetService(db, user_id)
    budget = service.create(data)
    return ok(budget_out(budget, service.status(budget)))


@app.get("/api/v1/budgets/{budget_id}")
def get_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    service = BudgetService(db, user_id)
    budget = service.get(budget_id)
    return ok(budget_out(budget, service.status(budget)))


@app.put("/api/v1/budgets/{budget_id}")
def update_budget(
    budget_id: int,
    patch: BudgetPatch,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    service = BudgetService(db, user_id)
    budget = service.update(budget_id, patch)
    return ok(budget_out(budget, service.status(budget)))


@app.delete("/api/v1/budgets/{budget_id}")
def delete_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    BudgetService(db, user_id).deactivate(budget_id)
    return ok({"id": budget_id})


@app.get("/api/v1/reports/summary")
def report_summary(
    period: Optional[str] = Query(None),
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    window = period_from_query(period, start, end)
    reports = ReportService(db, user_id)
    totals = reports.summary(window)
    return ok(
        SummaryOut(
            income=totals.income,
            expense=totals.expense,
            net=totals.net,
            total_balance=reports.total_balance(),
        )
    )


@app.get("/api/v1/reports/categories")
def report_categories(
    period: Optional[str] = Query(None),
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    type: TransactionType = Query(TransactionType.expense),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user),
):
    window = period_from_query(period, start, end)
    breakdown = ReportService(db, user_id).category_breakdown(window, type)
    return ok([CategoryTotalOut.model_validate(item) for item in breakdown])


@app.post("/api/v1/seed", status_code=201)
def seed(db: Session = Depends(get_db), user_id: int = Depends(current_user)):
    if AccountService(db, user_id).list_active():
        raise ValidationError("Data already exists for this user")
    seed_defaults(db, user_id)
    return ok({"seeded": True})


def main():
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
