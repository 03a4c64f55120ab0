"""
SQLAlchemy Models for the Ledger Store
"""
import enum
import uuid

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Date, Time, Numeric,
    ForeignKey, Index, CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship

from buffetdesk.core.database import Base
from buffetdesk.core.money import utcnow


def new_id() -> str:
    return str(uuid.uuid4())


def Money(**kwargs):
    """Money column: exact decimal, 2 fraction digits"""
    return Column(Numeric(10, 2, asdecimal=True), **kwargs)


# ==================== ENUMS ====================

class EventStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    INSTALLMENT = "installment"


class ExpensePaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    CHECK = "check"


class ExpenseStatus(str, enum.Enum):
    PAID = "paid"
    PENDING = "pending"
    CANCELLED = "cancelled"


class MovementType(str, enum.Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"


class CashFlowType(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"


class CashFlowReferenceType(str, enum.Enum):
    PAYMENT = "payment"
    EXPENSE = "expense"
    ADJUSTMENT = "adjustment"


# ==================== USERS ====================

class User(Base):
    """Back-office user; only used for authentication"""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(100), nullable=False, unique=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="admin")
    created_at = Column(DateTime, default=utcnow)


# ==================== CLIENTS & EVENTS ====================

class Client(Base):
    __tablename__ = 'clients'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    events = relationship("Event", back_populates="client")


class Event(Base):
    """A booked party"""
    __tablename__ = 'events'

    id = Column(String(36), primary_key=True, default=new_id)
    child_name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False)
    client_id = Column(String(36), ForeignKey('clients.id'), nullable=False)
    event_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    guest_count = Column(Integer, nullable=False)
    total_value = Money(nullable=False)
    status = Column(String(20), nullable=False, default=EventStatus.PENDING.value)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    client = relationship("Client", back_populates="events")
    payments = relationship("Payment", back_populates="event")

    __table_args__ = (
        Index('ix_events_event_date', 'event_date'),
        Index('ix_events_client_id', 'client_id'),
    )


# ==================== PAYMENTS & EXPENSES ====================

class Payment(Base):
    __tablename__ = 'payments'

    id = Column(String(36), primary_key=True, default=new_id)
    event_id = Column(String(36), ForeignKey('events.id'), nullable=False)
    amount = Money(nullable=False)
    payment_method = Column(String(20), nullable=False)
    payment_date = Column(DateTime, nullable=False, default=utcnow)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=PaymentStatus.COMPLETED.value)

    # Relationships
    event = relationship("Event", back_populates="payments")

    __table_args__ = (
        CheckConstraint('amount > 0', name='ck_payments_amount_positive'),
        Index('ix_payments_payment_date', 'payment_date'),
        Index('ix_payments_status', 'status'),
    )


class Expense(Base):
    """Business expense, optionally attributed to an event"""
    __tablename__ = 'expenses'

    id = Column(String(36), primary_key=True, default=new_id)
    description = Column(Text, nullable=False)
    amount = Money(nullable=False)
    category = Column(String(100), nullable=False)  # supplies, staff, utilities, food, ...
    payment_method = Column(String(20), nullable=False)
    supplier = Column(String(255), nullable=True)
    receipt_number = Column(String(100), nullable=True)
    expense_date = Column(DateTime, nullable=False, default=utcnow)
    status = Column(String(20), nullable=False, default=ExpenseStatus.PAID.value)
    event_id = Column(String(36), ForeignKey('events.id'), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    event = relationship("Event")

    __table_args__ = (
        CheckConstraint('amount > 0', name='ck_expenses_amount_positive'),
        Index('ix_expenses_expense_date', 'expense_date'),
        Index('ix_expenses_category', 'category'),
    )


# ==================== INVENTORY ====================

class InventoryItem(Base):
    """
    Stock-keeping item. ``current_stock`` is derived state: only the
    movement engine writes it.
    """
    __tablename__ = 'inventory'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False)  # decorations, food, toys, equipment
    current_stock = Column(Integer, nullable=False, default=0)
    minimum_stock = Column(Integer, nullable=False, default=0)
    unit = Column(String(50), nullable=False)  # pieces, kg, liters
    unit_cost = Money(nullable=True)
    supplier = Column(String(255), nullable=True)
    last_restock_date = Column(DateTime, nullable=True)
    expiration_date = Column(Date, nullable=True)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    movements = relationship(
        "InventoryMovement",
        back_populates="item",
        cascade="all, delete-orphan",
    )


class InventoryMovement(Base):
    """Append-only stock ledger row"""
    __tablename__ = 'inventory_movements'

    id = Column(String(36), primary_key=True, default=new_id)
    inventory_id = Column(String(36), ForeignKey('inventory.id', ondelete='CASCADE'), nullable=False)
    movement_type = Column(String(20), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_cost = Money(nullable=True)
    reason = Column(String(100), nullable=True)  # purchase, used_in_event, damaged, expired, ...
    event_id = Column(String(36), ForeignKey('events.id'), nullable=True)
    notes = Column(Text, nullable=True)
    movement_date = Column(DateTime, nullable=False, default=utcnow)
    stock_after = Column(Integer, nullable=False)
    # Per-item application order; breaks ties between equal movement dates
    sequence = Column(Integer, nullable=False)

    # Relationships
    item = relationship("InventoryItem", back_populates="movements")
    event = relationship("Event")

    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_inventory_movements_quantity_positive'),
        UniqueConstraint('inventory_id', 'sequence', name='uq_inventory_movements_sequence'),
        Index('ix_inventory_movements_inventory_id', 'inventory_id'),
        Index('ix_inventory_movements_movement_date', 'movement_date'),
    )


# ==================== CASH FLOW ====================

class CashFlowEntry(Base):
    """
    Audit-style cash ledger row. ``reference_id``/``reference_type`` point
    at the originating payment or expense without owning it.
    """
    __tablename__ = 'cash_flow'

    id = Column(String(36), primary_key=True, default=new_id)
    type = Column(String(20), nullable=False)
    description = Column(Text, nullable=False)
    amount = Money(nullable=False)
    category = Column(String(100), nullable=False)
    payment_method = Column(String(20), nullable=False)
    reference_id = Column(String(36), nullable=True)
    reference_type = Column(String(20), nullable=True)
    transaction_date = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index('ix_cash_flow_transaction_date', 'transaction_date'),
        Index('ix_cash_flow_reference', 'reference_type', 'reference_id'),
    )


__all__ = [
    "EventStatus", "PaymentStatus", "PaymentMethod", "ExpensePaymentMethod",
    "ExpenseStatus", "MovementType", "CashFlowType", "CashFlowReferenceType",
    "User", "Client", "Event", "Payment", "Expense", "InventoryItem",
    "InventoryMovement", "CashFlowEntry",
]
