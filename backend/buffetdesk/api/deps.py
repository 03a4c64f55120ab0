"""
Shared API dependencies
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from buffetdesk.core.config import Settings
from buffetdesk.core.database import get_db
from buffetdesk.core.security import get_current_user, get_settings
from buffetdesk.services import (
    ExpenseService, InventoryMovementService, InventoryService, PaymentService
)

# Router-level guard: every business endpoint needs a logged-in user
require_user = [Depends(get_current_user)]


def get_movement_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> InventoryMovementService:
    return InventoryMovementService(db, allow_negative_stock=settings.ALLOW_NEGATIVE_STOCK)


def get_inventory_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> InventoryService:
    return InventoryService(db, allow_negative_stock=settings.ALLOW_NEGATIVE_STOCK)


def get_payment_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> PaymentService:
    return PaymentService(db, record_cash_flow=settings.CASHFLOW_AUTO_RECORD)


def get_expense_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ExpenseService:
    return ExpenseService(db, record_cash_flow=settings.CASHFLOW_AUTO_RECORD)
