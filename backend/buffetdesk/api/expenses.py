"""
Expenses API Routes
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from buffetdesk.api.deps import get_expense_service, require_user
from buffetdesk.core.database import get_db
from buffetdesk.core.exceptions import NotFoundError
from buffetdesk.models import ExpenseStatus
from buffetdesk.schemas import CategoryTotal, ExpenseCreate, ExpenseResponse, ExpenseUpdate
from buffetdesk.services import ExpenseService, StatsService

router = APIRouter(prefix="/expenses", tags=["Expenses"], dependencies=require_user)


@router.get("/categories", response_model=List[CategoryTotal])
def get_expenses_by_category(db: Session = Depends(get_db)):
    """Paid expense totals per category, largest first"""
    return StatsService(db).get_expenses_by_category()


@router.get("", response_model=List[ExpenseResponse])
def list_expenses(
    category: Optional[str] = None,
    status_filter: Optional[ExpenseStatus] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    """List expenses, newest first"""
    return expense_service.get_all(
        category,
        status_filter.value if status_filter else None,
        start_date,
        end_date
    )


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense_data: ExpenseCreate,
    expense_service: ExpenseService = Depends(get_expense_service),
):
    return expense_service.create(expense_data)


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(expense_id: str, expense_service: ExpenseService = Depends(get_expense_service)):
    expense = expense_service.get_by_id(expense_id)
    if not expense:
        raise NotFoundError("Expense", expense_id)
    return expense


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: str,
    expense_data: ExpenseUpdate,
    expense_service: ExpenseService = Depends(get_expense_service),
):
    return expense_service.update(expense_id, expense_data)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: str, expense_service: ExpenseService = Depends(get_expense_service)):
    expense_service.delete(expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
