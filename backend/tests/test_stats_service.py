"""
Tests for dashboard statistics and the financial summary.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from buffetdesk.core.exceptions import ValidationError
from buffetdesk.models import ExpensePaymentMethod, ExpenseStatus, PaymentMethod, PaymentStatus
from buffetdesk.schemas import ExpenseCreate, PaymentCreate
from buffetdesk.services import ExpenseService, InventoryMovementService, PaymentService, StatsService


@pytest.fixture
def add_payment(db_session, make_event):
    event = make_event()

    def _add_payment(amount, paid_at, status=PaymentStatus.COMPLETED):
        return PaymentService(db_session).create(PaymentCreate(
            event_id=event.id,
            amount=Decimal(amount),
            payment_method=PaymentMethod.TRANSFER,
            payment_date=paid_at,
            status=status,
        ))
    return _add_payment


@pytest.fixture
def add_expense(db_session):
    def _add_expense(amount, category, spent_at, status=ExpenseStatus.PAID):
        return ExpenseService(db_session).create(ExpenseCreate(
            description=f"{category} purchase",
            amount=Decimal(amount),
            category=category,
            payment_method=ExpensePaymentMethod.CARD,
            expense_date=spent_at,
            status=status,
        ))
    return _add_expense


@pytest.fixture
def march_ledger(add_payment, add_expense):
    add_payment("1000.00", datetime(2024, 2, 10, 15, 0))
    add_payment("500.00", datetime(2024, 3, 5, 10, 0))
    add_payment("300.00", datetime(2024, 3, 18, 16, 0))
    add_payment("200.00", datetime(2024, 3, 10, 11, 0), status=PaymentStatus.PENDING)
    add_expense("50.00", "decorations", datetime(2024, 2, 20, 9, 0))
    add_expense("150.00", "food", datetime(2024, 3, 2, 9, 0))
    add_expense("80.00", "staff", datetime(2024, 3, 3, 9, 0), status=ExpenseStatus.PENDING)


class TestMonthlyStats:
    def test_empty_database_reports_zeros(self, db_session):
        stats = StatsService(db_session).get_monthly_stats(today=date(2024, 3, 20))

        assert stats["monthly_revenue"] == Decimal("0.00")
        assert stats["monthly_expenses"] == Decimal("0.00")
        assert stats["monthly_profit"] == Decimal("0.00")
        assert stats["pending_payments"] == Decimal("0.00")
        assert stats["events_count"] == 0
        assert stats["active_clients"] == 0
        assert stats["low_stock_items_count"] == 0
        assert stats["total_inventory_value"] == Decimal("0.00")

    def test_current_month_totals(self, db_session, march_ledger, make_event):
        make_event(event_date=date(2024, 4, 6), child_name="Julia")

        stats = StatsService(db_session).get_monthly_stats(today=date(2024, 3, 20))

        assert stats["monthly_revenue"] == Decimal("800.00")
        assert stats["monthly_expenses"] == Decimal("150.00")
        assert stats["monthly_profit"] == Decimal("650.00")
        assert stats["pending_payments"] == Decimal("200.00")
        assert stats["events_count"] == 1
        assert stats["active_clients"] == 1

    def test_month_boundaries(self, db_session, add_payment):
        add_payment("10.00", datetime(2024, 2, 29, 23, 59))
        add_payment("20.00", datetime(2024, 3, 1, 0, 0))
        add_payment("40.00", datetime(2024, 4, 1, 0, 0))

        stats = StatsService(db_session).get_monthly_stats(today=date(2024, 3, 31))

        assert stats["monthly_revenue"] == Decimal("20.00")

    def test_low_stock_and_inventory_value(self, db_session, make_item):
        make_item(name="Napkins", initial_stock=3, minimum_stock=10)
        make_item(name="Plates", initial_stock=50, minimum_stock=10, unit_cost="2.50")
        make_item(name="Candles", initial_stock=10, minimum_stock=10, unit_cost="0.75")

        stats = StatsService(db_session).get_monthly_stats(today=date(2024, 3, 20))

        # stock == minimum counts as low
        assert stats["low_stock_items_count"] == 2
        assert stats["total_inventory_value"] == Decimal("132.50")

    def test_low_stock_follows_movements(self, db_session, make_item):
        item = make_item(name="Juice", initial_stock=20, minimum_stock=5)
        service = StatsService(db_session)
        assert service.get_low_stock_items() == []

        InventoryMovementService(db_session).record_movement(item.id, "out", 16)

        assert [i.name for i in service.get_low_stock_items()] == ["Juice"]
        assert service.get_monthly_stats()["low_stock_items_count"] == 1


class TestFinancialSummary:
    def test_range_totals(self, db_session, march_ledger):
        summary = StatsService(db_session).get_financial_summary(date(2024, 2, 1), date(2024, 3, 31))

        assert summary["total_revenue"] == Decimal("1800.00")
        assert summary["total_expenses"] == Decimal("200.00")
        assert summary["net_profit"] == Decimal("1600.00")
        assert summary["profit_margin"] == Decimal("88.89")

    def test_breakdowns(self, db_session, march_ledger):
        summary = StatsService(db_session).get_financial_summary(date(2024, 2, 1), date(2024, 3, 31))

        assert summary["expenses_by_category"] == [
            {"category": "food", "total": Decimal("150.00")},
            {"category": "decorations", "total": Decimal("50.00")},
        ]
        assert summary["revenue_by_month"] == [
            {"month": "2024-02", "revenue": Decimal("1000.00")},
            {"month": "2024-03", "revenue": Decimal("800.00")},
        ]

    def test_end_date_is_inclusive(self, db_session, add_payment):
        add_payment("75.00", datetime(2024, 3, 31, 23, 30))

        summary = StatsService(db_session).get_financial_summary(date(2024, 3, 31), date(2024, 3, 31))

        assert summary["total_revenue"] == Decimal("75.00")

    def test_no_revenue_gives_zero_margin(self, db_session, add_expense):
        add_expense("40.00", "utilities", datetime(2024, 3, 4, 8, 0))

        summary = StatsService(db_session).get_financial_summary(date(2024, 3, 1), date(2024, 3, 31))

        assert summary["total_revenue"] == Decimal("0.00")
        assert summary["net_profit"] == Decimal("-40.00")
        assert summary["profit_margin"] == Decimal("0.00")
        assert summary["revenue_by_month"] == []

    def test_start_after_end_is_rejected(self, db_session):
        with pytest.raises(ValidationError):
            StatsService(db_session).get_financial_summary(date(2024, 4, 1), date(2024, 3, 1))


class TestExpensesByCategory:
    def test_only_paid_expenses_count(self, db_session, march_ledger, add_expense):
        add_expense("25.00", "food", datetime(2023, 12, 1, 9, 0))
        add_expense("999.00", "food", datetime(2024, 1, 1, 9, 0), status=ExpenseStatus.CANCELLED)

        categories = StatsService(db_session).get_expenses_by_category()

        assert categories == [
            {"category": "food", "total": Decimal("175.00")},
            {"category": "decorations", "total": Decimal("50.00")},
        ]


class TestLowStockScenarios:
    def test_below_minimum_is_low_and_above_is_not(self, db_session, make_item):
        make_item(name="Forks", initial_stock=5, minimum_stock=10)
        make_item(name="Spoons", initial_stock=15, minimum_stock=10)

        low = StatsService(db_session).get_low_stock_items()

        assert [item.name for item in low] == ["Forks"]

    def test_pending_supplies_are_excluded(self, db_session, add_expense):
        add_expense("150.00", "supplies", datetime(2024, 1, 10, 12, 0))
        add_expense("50.00", "supplies", datetime(2024, 1, 12, 12, 0), status=ExpenseStatus.PENDING)

        assert StatsService(db_session).get_expenses_by_category() == [
            {"category": "supplies", "total": Decimal("150.00")},
        ]
