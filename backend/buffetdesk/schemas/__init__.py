"""
Pydantic Schemas for API Validation

JSON bodies use camelCase field names; Python code uses snake_case.
"""
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, PlainSerializer
from pydantic.alias_generators import to_camel
from typing import Annotated, List, Optional
from datetime import datetime, date, time
from decimal import Decimal

from buffetdesk.core.money import to_utc_naive
from buffetdesk.models import (
    EventStatus, PaymentStatus, PaymentMethod, ExpensePaymentMethod,
    ExpenseStatus, MovementType, CashFlowType, CashFlowReferenceType
)


# Exact Decimal inside the app, JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]

# Input timestamps are stored as naive UTC; an offset is converted, not dropped
UtcDateTime = Annotated[datetime, AfterValidator(to_utc_naive)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ==================== ERRORS ====================

class ErrorResponse(CamelModel):
    code: str
    message: str
    request_id: Optional[str] = None


# ==================== AUTH SCHEMAS ====================

class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(CamelModel):
    id: str
    username: str
    name: str
    role: str
    created_at: Optional[datetime] = None


# ==================== CLIENT SCHEMAS ====================

class ClientBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None


class ClientCreate(ClientBase):
    pass


class ClientUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None


class ClientResponse(ClientBase):
    id: str
    created_at: Optional[datetime] = None


# ==================== EVENT SCHEMAS ====================

class EventBase(CamelModel):
    child_name: str = Field(..., min_length=1, max_length=255)
    age: int = Field(..., ge=0, le=120)
    client_id: str
    event_date: date
    start_time: time
    end_time: time
    guest_count: int = Field(..., ge=0)
    total_value: Money = Field(..., ge=0, max_digits=10, decimal_places=2)
    status: EventStatus = EventStatus.PENDING
    notes: Optional[str] = None


class EventCreate(EventBase):
    pass


class EventUpdate(CamelModel):
    child_name: Optional[str] = Field(None, min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=0, le=120)
    client_id: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    guest_count: Optional[int] = Field(None, ge=0)
    total_value: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: Optional[EventStatus] = None
    notes: Optional[str] = None


class EventResponse(EventBase):
    id: str
    created_at: Optional[datetime] = None
    client: Optional[ClientResponse] = None


# ==================== PAYMENT SCHEMAS ====================

class PaymentCreate(CamelModel):
    event_id: str
    amount: Money = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_method: PaymentMethod
    payment_date: Optional[UtcDateTime] = None
    description: Optional[str] = None
    status: PaymentStatus = PaymentStatus.COMPLETED


class PaymentUpdate(CamelModel):
    status: Optional[PaymentStatus] = None
    description: Optional[str] = None


class PaymentResponse(CamelModel):
    id: str
    event_id: str
    amount: Money
    payment_method: str
    payment_date: datetime
    description: Optional[str] = None
    status: str


class PaymentWithEventResponse(PaymentResponse):
    event: Optional[EventResponse] = None


# ==================== EXPENSE SCHEMAS ====================

class ExpenseBase(CamelModel):
    description: str = Field(..., min_length=1)
    amount: Money = Field(..., gt=0, max_digits=10, decimal_places=2)
    category: str = Field(..., min_length=2, max_length=100)
    payment_method: ExpensePaymentMethod
    supplier: Optional[str] = Field(None, max_length=255)
    receipt_number: Optional[str] = Field(None, max_length=100)
    status: ExpenseStatus = ExpenseStatus.PAID
    event_id: Optional[str] = None


class ExpenseCreate(ExpenseBase):
    expense_date: Optional[UtcDateTime] = None


class ExpenseUpdate(CamelModel):
    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[Money] = Field(None, gt=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(None, min_length=2, max_length=100)
    payment_method: Optional[ExpensePaymentMethod] = None
    supplier: Optional[str] = Field(None, max_length=255)
    receipt_number: Optional[str] = Field(None, max_length=100)
    expense_date: Optional[UtcDateTime] = None
    status: Optional[ExpenseStatus] = None
    event_id: Optional[str] = None


class ExpenseResponse(ExpenseBase):
    id: str
    expense_date: datetime
    created_at: Optional[datetime] = None


# ==================== INVENTORY SCHEMAS ====================

class InventoryItemBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=100)
    minimum_stock: int = Field(default=0, ge=0)
    unit: str = Field(..., min_length=1, max_length=50)
    unit_cost: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    supplier: Optional[str] = Field(None, max_length=255)
    expiration_date: Optional[date] = None
    location: Optional[str] = Field(None, max_length=255)


class InventoryItemCreate(InventoryItemBase):
    initial_stock: int = Field(default=0, ge=0, description="Recorded as an opening 'in' movement")


class InventoryItemUpdate(CamelModel):
    """Stock levels are not writable here; use inventory movements"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    minimum_stock: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    unit_cost: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    supplier: Optional[str] = Field(None, max_length=255)
    expiration_date: Optional[date] = None
    location: Optional[str] = Field(None, max_length=255)


class InventoryItemResponse(InventoryItemBase):
    id: str
    current_stock: int
    last_restock_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class InventoryMovementCreate(CamelModel):
    inventory_id: str
    movement_type: MovementType
    quantity: int = Field(..., gt=0, description="Always positive; direction comes from movementType")
    unit_cost: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    reason: Optional[str] = Field(None, max_length=100)
    event_id: Optional[str] = None
    notes: Optional[str] = None
    movement_date: Optional[UtcDateTime] = None


class InventoryMovementResponse(CamelModel):
    id: str
    inventory_id: str
    movement_type: str
    quantity: int
    unit_cost: Optional[Money] = None
    reason: Optional[str] = None
    event_id: Optional[str] = None
    notes: Optional[str] = None
    movement_date: datetime
    stock_after: int


# ==================== CASH FLOW SCHEMAS ====================

class CashFlowEntryCreate(CamelModel):
    type: CashFlowType
    description: str = Field(..., min_length=1)
    amount: Money = Field(..., gt=0, max_digits=10, decimal_places=2)
    category: str = Field(..., min_length=1, max_length=100)
    payment_method: str = Field(..., min_length=1, max_length=20)
    reference_id: Optional[str] = None
    reference_type: Optional[CashFlowReferenceType] = None
    transaction_date: Optional[UtcDateTime] = None


class CashFlowEntryResponse(CamelModel):
    id: str
    type: str
    description: str
    amount: Money
    category: str
    payment_method: str
    reference_id: Optional[str] = None
    reference_type: Optional[str] = None
    transaction_date: datetime
    created_at: Optional[datetime] = None


# ==================== STATISTICS SCHEMAS ====================

class MonthlyStats(CamelModel):
    monthly_revenue: Money
    monthly_expenses: Money
    monthly_profit: Money
    events_count: int
    active_clients: int
    pending_payments: Money
    low_stock_items_count: int
    total_inventory_value: Money


class CategoryTotal(CamelModel):
    category: str
    total: Money


class MonthlyRevenue(CamelModel):
    month: str  # YYYY-MM
    revenue: Money


class FinancialSummary(CamelModel):
    total_revenue: Money
    total_expenses: Money
    net_profit: Money
    profit_margin: Money
    expenses_by_category: List[CategoryTotal]
    revenue_by_month: List[MonthlyRevenue]


class MessageResponse(BaseModel):
    message: str
