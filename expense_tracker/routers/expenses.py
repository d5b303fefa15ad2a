from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from starlette import status

from expense_tracker.core.errors import error_response
from expense_tracker.core.results import Err
from expense_tracker.models.constants import PERIOD_OFFSETS
from expense_tracker.models.errors import ValidationError
from expense_tracker.models.expense import Expense, ExpenseFilter, ExpenseIn, ExpenseOut
from expense_tracker.models.user import User
from expense_tracker.routers.deps import current_user, get_ledger
from expense_tracker.services.ledger import ExpenseLedger

router = APIRouter(prefix="/api/expenses", tags=["expenses"])


# Request / Response Models ----------------------------------------
class ExpenseRequest(BaseModel):
    expense: ExpenseIn


class ExpenseResponse(BaseModel):
    data: ExpenseOut


class ExpenseListResponse(BaseModel):
    data: List[ExpenseOut]


class MessageOut(BaseModel):
    message: str


class MessageResponse(BaseModel):
    data: MessageOut


# Helpers ----------------------------------------------------------
def _owned_expense(ledger: ExpenseLedger, user: User, expense_id: int) -> Expense:
    result = ledger.get(user.id, expense_id)
    if isinstance(result, Err):
        raise HTTPException(status_code=404, detail="Expense not found")
    return result.value


def _validation_failed(errors):
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", errors
    )


# Routes -----------------------------------------------------------
@router.get(
    "",
    response_model=ExpenseListResponse,
    summary="List expenses with optional date filters",
)
def list_expenses(
    period: Optional[str] = Query(
        None,
        description=f"Predefined window: {', '.join(PERIOD_OFFSETS)}. Takes precedence over dates.",
    ),
    from_date: Optional[str] = Query(
        None, description="Start date inclusive (YYYY-MM-DD); malformed values are ignored"
    ),
    to_date: Optional[str] = Query(
        None, description="End date inclusive (YYYY-MM-DD); malformed values are ignored"
    ),
    user: User = Depends(current_user),
    ledger: ExpenseLedger = Depends(get_ledger),
):
    expense_filter = ExpenseFilter.from_query(period, from_date, to_date)
    expenses = ledger.list(user.id, expense_filter)
    return ExpenseListResponse(data=[ExpenseOut.from_expense(e) for e in expenses])


@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an expense",
)
def create_expense(
    payload: ExpenseRequest,
    user: User = Depends(current_user),
    ledger: ExpenseLedger = Depends(get_ledger),
):
    result = ledger.create(user.id, payload.expense)
    if isinstance(result, Err):
        return _validation_failed(result.error.errors)
    return ExpenseResponse(data=ExpenseOut.from_expense(result.value))


@router.get("/{expense_id}", response_model=ExpenseResponse, summary="Get an expense")
def show_expense(
    expense_id: int,
    user: User = Depends(current_user),
    ledger: ExpenseLedger = Depends(get_ledger),
):
    expense = _owned_expense(ledger, user, expense_id)
    return ExpenseResponse(data=ExpenseOut.from_expense(expense))


@router.put("/{expense_id}", response_model=ExpenseResponse, summary="Update an expense")
@router.patch(
    "/{expense_id}", response_model=ExpenseResponse, summary="Update an expense (partial)"
)
def update_expense(
    expense_id: int,
    payload: ExpenseRequest,
    user: User = Depends(current_user),
    ledger: ExpenseLedger = Depends(get_ledger),
):
    expense = _owned_expense(ledger, user, expense_id)
    result = ledger.update(expense, payload.expense)
    if isinstance(result, Err):
        if isinstance(result.error, ValidationError):
            return _validation_failed(result.error.errors)
        raise HTTPException(status_code=404, detail="Expense not found")
    return ExpenseResponse(data=ExpenseOut.from_expense(result.value))


@router.delete(
    "/{expense_id}", response_model=MessageResponse, summary="Delete an expense"
)
def delete_expense(
    expense_id: int,
    user: User = Depends(current_user),
    ledger: ExpenseLedger = Depends(get_ledger),
):
    expense = _owned_expense(ledger, user, expense_id)
    result = ledger.delete(expense)
    if isinstance(result, Err):
        raise HTTPException(status_code=404, detail="Expense not found")
    return MessageResponse(data=MessageOut(message="Expense deleted successfully"))
