"""
Expense Service - Manage business expenses
"""
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import desc
from datetime import date
from enum import Enum

from buffetdesk.core.exceptions import NotFoundError
from buffetdesk.core.money import day_range, to_money, utcnow
from buffetdesk.models import Event, Expense, ExpenseStatus
from buffetdesk.schemas import ExpenseCreate, ExpenseUpdate
from buffetdesk.services.cashflow_service import CashFlowService


class ExpenseService:
    REQUIRED_FIELDS = {"description", "amount", "category", "payment_method", "expense_date", "status"}

    def __init__(self, db: Session, record_cash_flow: bool = True):
        self.db = db
        self.record_cash_flow = record_cash_flow

    def _ensure_event(self, event_id: Optional[str]) -> None:
        if event_id and not self.db.query(Event.id).filter(Event.id == event_id).first():
            raise NotFoundError("Event", event_id)

    def get_by_id(self, expense_id: str) -> Optional[Expense]:
        return self.db.query(Expense).filter(Expense.id == expense_id).first()

    def get_all(self, category: str = None, status: str = None,
                start_date: date = None, end_date: date = None) -> List[Expense]:
        """Get expenses newest first with optional filters"""
        query = self.db.query(Expense)
        lower, upper = day_range(start_date, end_date)

        if category:
            query = query.filter(Expense.category == category)
        if status:
            query = query.filter(Expense.status == status)
        if lower is not None:
            query = query.filter(Expense.expense_date >= lower)
        if upper is not None:
            query = query.filter(Expense.expense_date < upper)

        return query.order_by(desc(Expense.expense_date)).all()

    def create(self, expense_data: ExpenseCreate) -> Expense:
        self._ensure_event(expense_data.event_id)

        expense = Expense(
            description=expense_data.description,
            amount=to_money(expense_data.amount),
            category=expense_data.category,
            payment_method=expense_data.payment_method.value,
            supplier=expense_data.supplier,
            receipt_number=expense_data.receipt_number,
            expense_date=expense_data.expense_date or utcnow(),
            status=expense_data.status.value,
            event_id=expense_data.event_id,
        )
        self.db.add(expense)
        self.db.flush()

        if self.record_cash_flow and expense.status == ExpenseStatus.PAID.value:
            CashFlowService(self.db).record_expense(expense)

        self.db.commit()
        self.db.refresh(expense)
        return expense

    def update(self, expense_id: str, expense_data: ExpenseUpdate) -> Expense:
        expense = self.get_by_id(expense_id)
        if not expense:
            raise NotFoundError("Expense", expense_id)

        update_data = expense_data.model_dump(exclude_unset=True)
        if "event_id" in update_data:
            self._ensure_event(update_data["event_id"])

        for key, value in update_data.items():
            if value is None and key in self.REQUIRED_FIELDS:
                continue
            if isinstance(value, Enum):
                value = value.value
            if key == "amount":
                value = to_money(value)
            setattr(expense, key, value)
        self.db.flush()

        if self.record_cash_flow and expense.status == ExpenseStatus.PAID.value:
            CashFlowService(self.db).record_expense(expense)

        self.db.commit()
        self.db.refresh(expense)
        return expense

    def delete(self, expense_id: str) -> None:
        """Hard delete. Cash flow entries are kept as history."""
        expense = self.get_by_id(expense_id)
        if not expense:
            raise NotFoundError("Expense", expense_id)
        self.db.delete(expense)
        self.db.commit()
