"""
Stats Service - Dashboard Statistics and Financial Aggregation

Everything here is read-only and computed live from the ledger tables.
Sums come back as 2-place Decimals and default to 0.00 when nothing
matches.
"""
from collections import defaultdict
from typing import Dict, List
from sqlalchemy.orm import Session
from sqlalchemy import func, desc, distinct
from decimal import Decimal
from datetime import date

from buffetdesk.core.exceptions import ValidationError
from buffetdesk.core.money import ZERO, day_range, month_bounds, to_money, utctoday
from buffetdesk.models import (
    Event, Expense, ExpenseStatus, InventoryItem, Payment, PaymentStatus, CashFlowEntry
)
from buffetdesk.services.cashflow_service import CashFlowService
from buffetdesk.services.inventory_service import InventoryService


class StatsService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== HELPERS ====================

    def _sum_payments(self, status: str, lower=None, upper=None) -> Decimal:
        query = self.db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
            Payment.status == status
        )
        if lower is not None:
            query = query.filter(Payment.payment_date >= lower)
        if upper is not None:
            query = query.filter(Payment.payment_date < upper)
        return to_money(query.scalar())

    def _sum_paid_expenses(self, lower=None, upper=None) -> Decimal:
        query = self.db.query(func.coalesce(func.sum(Expense.amount), 0)).filter(
            Expense.status == ExpenseStatus.PAID.value
        )
        if lower is not None:
            query = query.filter(Expense.expense_date >= lower)
        if upper is not None:
            query = query.filter(Expense.expense_date < upper)
        return to_money(query.scalar())

    def _paid_expenses_by_category(self, lower=None, upper=None) -> List[Dict]:
        total = func.sum(Expense.amount)
        query = self.db.query(Expense.category, func.coalesce(total, 0)).filter(
            Expense.status == ExpenseStatus.PAID.value
        )
        if lower is not None:
            query = query.filter(Expense.expense_date >= lower)
        if upper is not None:
            query = query.filter(Expense.expense_date < upper)

        rows = query.group_by(Expense.category).order_by(desc(total), Expense.category).all()
        return [{"category": category, "total": to_money(amount)} for category, amount in rows]

    def _inventory_value(self) -> Decimal:
        """Sum of stock x unit cost; items without a cost count as zero"""
        rows = self.db.query(InventoryItem.current_stock, InventoryItem.unit_cost).all()
        value = ZERO
        for stock, unit_cost in rows:
            if unit_cost is None:
                continue
            value += to_money(unit_cost) * stock
        return to_money(value)

    # ==================== OPERATIONS ====================

    def get_monthly_stats(self, today: date = None) -> Dict:
        """Get main dashboard statistics for the current month"""
        today = today or utctoday()
        month_start, next_month = month_bounds(today)

        # Revenue and expenses (this month)
        monthly_revenue = self._sum_payments(PaymentStatus.COMPLETED.value, month_start, next_month)
        monthly_expenses = self._sum_paid_expenses(month_start, next_month)

        # Events this month
        events_count = self.db.query(func.count(Event.id)).filter(
            Event.event_date >= month_start.date(),
            Event.event_date < next_month.date()
        ).scalar() or 0

        # Active clients: anyone with an event this calendar year
        active_clients = self.db.query(func.count(distinct(Event.client_id))).filter(
            Event.event_date >= date(today.year, 1, 1),
            Event.event_date <= date(today.year, 12, 31)
        ).scalar() or 0

        # Pending payments are a running total, not month-scoped
        pending_payments = self._sum_payments(PaymentStatus.PENDING.value)

        low_stock = self.db.query(func.count(InventoryItem.id)).filter(
            InventoryItem.current_stock <= InventoryItem.minimum_stock
        ).scalar() or 0

        return {
            "monthly_revenue": monthly_revenue,
            "monthly_expenses": monthly_expenses,
            "monthly_profit": monthly_revenue - monthly_expenses,
            "events_count": int(events_count),
            "active_clients": int(active_clients),
            "pending_payments": pending_payments,
            "low_stock_items_count": int(low_stock),
            "total_inventory_value": self._inventory_value(),
        }

    def get_financial_summary(self, start_date: date, end_date: date) -> Dict:
        """Revenue, expenses and breakdowns for an inclusive date range"""
        if start_date > end_date:
            raise ValidationError("startDate must not be after endDate")
        lower, upper = day_range(start_date, end_date)

        total_revenue = self._sum_payments(PaymentStatus.COMPLETED.value, lower, upper)
        total_expenses = self._sum_paid_expenses(lower, upper)
        net_profit = total_revenue - total_expenses

        if total_revenue > 0:
            profit_margin = to_money(net_profit / total_revenue * 100)
        else:
            profit_margin = ZERO

        return {
            "total_revenue": total_revenue,
            "total_expenses": total_expenses,
            "net_profit": net_profit,
            "profit_margin": profit_margin,
            "expenses_by_category": self._paid_expenses_by_category(lower, upper),
            "revenue_by_month": self._revenue_by_month(lower, upper),
        }

    def _revenue_by_month(self, lower, upper) -> List[Dict]:
        """
        Completed revenue bucketed by YYYY-MM. Bucketing happens in Python
        so the label format does not depend on the database's date functions.
        """
        rows = self.db.query(Payment.payment_date, Payment.amount).filter(
            Payment.status == PaymentStatus.COMPLETED.value,
            Payment.payment_date >= lower,
            Payment.payment_date < upper
        ).all()

        buckets = defaultdict(lambda: ZERO)
        for payment_date, amount in rows:
            buckets[payment_date.strftime("%Y-%m")] += to_money(amount)

        return [{"month": month, "revenue": to_money(buckets[month])} for month in sorted(buckets)]

    def get_expenses_by_category(self) -> List[Dict]:
        """Paid expenses per category over all time, largest first"""
        return self._paid_expenses_by_category()

    def get_low_stock_items(self) -> List[InventoryItem]:
        return InventoryService(self.db).get_low_stock()

    def get_cash_flow(self, start_date: date = None, end_date: date = None) -> List[CashFlowEntry]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("startDate must not be after endDate")
        return CashFlowService(self.db).get_entries(start_date, end_date)
