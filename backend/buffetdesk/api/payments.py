"""
Payments API Routes
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status

from buffetdesk.api.deps import get_payment_service, require_user
from buffetdesk.core.exceptions import NotFoundError
from buffetdesk.schemas import PaymentCreate, PaymentResponse, PaymentUpdate, PaymentWithEventResponse
from buffetdesk.services import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"], dependencies=require_user)


@router.get("/recent", response_model=List[PaymentWithEventResponse])
def list_recent_payments(
    limit: int = Query(10, ge=1, le=100),
    payment_service: PaymentService = Depends(get_payment_service),
):
    return payment_service.get_recent(limit)


@router.get("/event/{event_id}", response_model=List[PaymentResponse])
def list_event_payments(event_id: str, payment_service: PaymentService = Depends(get_payment_service)):
    return payment_service.get_by_event(event_id)


@router.get("", response_model=List[PaymentWithEventResponse])
def list_payments(payment_service: PaymentService = Depends(get_payment_service)):
    return payment_service.get_all()


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    payment_data: PaymentCreate,
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Record a payment against an event"""
    return payment_service.create(payment_data)


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: str, payment_service: PaymentService = Depends(get_payment_service)):
    payment = payment_service.get_by_id(payment_id)
    if not payment:
        raise NotFoundError("Payment", payment_id)
    return payment


@router.put("/{payment_id}", response_model=PaymentResponse)
def update_payment(
    payment_id: str,
    payment_data: PaymentUpdate,
    payment_service: PaymentService = Depends(get_payment_service),
):
    return payment_service.update(payment_id, payment_data)
