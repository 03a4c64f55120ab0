"""
Cash Flow Service - Income/Expense Ledger
"""
from typing import Optional, List
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import desc

from buffetdesk.core.money import day_range, to_money, utcnow
from buffetdesk.models import (
    CashFlowEntry, CashFlowType, CashFlowReferenceType, Expense, Payment
)
from buffetdesk.schemas import CashFlowEntryCreate


class CashFlowService:
    """Service for cash flow entries"""

    def __init__(self, db: Session):
        self.db = db

    def create_entry(self, entry_data: CashFlowEntryCreate) -> CashFlowEntry:
        """Create a manual cash flow entry"""
        entry = self._build_entry(
            entry_type=entry_data.type.value,
            description=entry_data.description,
            amount=entry_data.amount,
            category=entry_data.category,
            payment_method=entry_data.payment_method,
            reference_id=entry_data.reference_id,
            reference_type=entry_data.reference_type.value if entry_data.reference_type else None,
            transaction_date=entry_data.transaction_date,
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def _build_entry(self, entry_type: str, description: str, amount, category: str,
                     payment_method: str, reference_id: str = None, reference_type: str = None,
                     transaction_date=None) -> CashFlowEntry:
        return CashFlowEntry(
            type=entry_type,
            description=description,
            amount=to_money(amount),
            category=category,
            payment_method=payment_method,
            reference_id=reference_id,
            reference_type=reference_type,
            transaction_date=transaction_date or utcnow(),
        )

    def _has_entry_for(self, reference_type: CashFlowReferenceType, reference_id: str) -> bool:
        return self.db.query(CashFlowEntry.id).filter(
            CashFlowEntry.reference_type == reference_type.value,
            CashFlowEntry.reference_id == reference_id
        ).first() is not None

    def record_payment(self, payment: Payment) -> Optional[CashFlowEntry]:
        """
        Add the income entry for a completed payment. Does nothing if the
        payment already has one. Caller commits.
        """
        if self._has_entry_for(CashFlowReferenceType.PAYMENT, payment.id):
            return None
        event = payment.event
        if event is not None:
            description = f"Payment for {event.child_name}'s party"
        else:
            description = "Event payment"
        if payment.description:
            description = f"{description} - {payment.description}"

        entry = self._build_entry(
            entry_type=CashFlowType.INCOME.value,
            description=description,
            amount=payment.amount,
            category="event_payment",
            payment_method=payment.payment_method,
            reference_id=payment.id,
            reference_type=CashFlowReferenceType.PAYMENT.value,
            transaction_date=payment.payment_date,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def record_expense(self, expense: Expense) -> Optional[CashFlowEntry]:
        """Add the expense entry for a paid expense. Caller commits."""
        if self._has_entry_for(CashFlowReferenceType.EXPENSE, expense.id):
            return None
        entry = self._build_entry(
            entry_type=CashFlowType.EXPENSE.value,
            description=f"Expense: {expense.category} - {expense.description}",
            amount=expense.amount,
            category=expense.category,
            payment_method=expense.payment_method,
            reference_id=expense.id,
            reference_type=CashFlowReferenceType.EXPENSE.value,
            transaction_date=expense.expense_date,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_entries(self, start_date: date = None, end_date: date = None,
                    entry_type: str = None) -> List[CashFlowEntry]:
        """Get cash flow entries newest first; both date bounds are inclusive"""
        lower, upper = day_range(start_date, end_date)
        query = self.db.query(CashFlowEntry)

        if lower is not None:
            query = query.filter(CashFlowEntry.transaction_date >= lower)
        if upper is not None:
            query = query.filter(CashFlowEntry.transaction_date < upper)
        if entry_type:
            query = query.filter(CashFlowEntry.type == entry_type)

        return query.order_by(desc(CashFlowEntry.transaction_date), desc(CashFlowEntry.created_at)).all()
