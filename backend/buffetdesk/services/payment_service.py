"""
Payment Service - Event Payments
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import desc

from buffetdesk.core.exceptions import NotFoundError
from buffetdesk.core.money import to_money, utcnow
from buffetdesk.models import Event, Payment, PaymentStatus
from buffetdesk.schemas import PaymentCreate, PaymentUpdate
from buffetdesk.services.cashflow_service import CashFlowService


class PaymentService:
    def __init__(self, db: Session, record_cash_flow: bool = True):
        self.db = db
        self.record_cash_flow = record_cash_flow

    def _with_event(self):
        return self.db.query(Payment).options(
            joinedload(Payment.event).joinedload(Event.client)
        )

    def get_by_id(self, payment_id: str) -> Optional[Payment]:
        return self.db.query(Payment).filter(Payment.id == payment_id).first()

    def get_all(self) -> List[Payment]:
        return self._with_event().order_by(desc(Payment.payment_date)).all()

    def get_recent(self, limit: int = 10) -> List[Payment]:
        return self._with_event().order_by(desc(Payment.payment_date)).limit(limit).all()

    def get_by_event(self, event_id: str) -> List[Payment]:
        return self.db.query(Payment).filter(
            Payment.event_id == event_id
        ).order_by(desc(Payment.payment_date)).all()

    def create(self, payment_data: PaymentCreate) -> Payment:
        """Create a payment; completed payments also land in the cash flow ledger"""
        event = self.db.query(Event).filter(Event.id == payment_data.event_id).first()
        if not event:
            raise NotFoundError("Event", payment_data.event_id)

        payment = Payment(
            event_id=event.id,
            amount=to_money(payment_data.amount),
            payment_method=payment_data.payment_method.value,
            payment_date=payment_data.payment_date or utcnow(),
            description=payment_data.description,
            status=payment_data.status.value,
        )
        self.db.add(payment)
        self.db.flush()

        if self.record_cash_flow and payment.status == PaymentStatus.COMPLETED.value:
            CashFlowService(self.db).record_payment(payment)

        self.db.commit()
        self.db.refresh(payment)
        return payment

    def update(self, payment_id: str, payment_data: PaymentUpdate) -> Payment:
        """Update status/description, e.g. when a pending payment clears"""
        payment = self.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)

        update_data = payment_data.model_dump(exclude_unset=True)
        if update_data.get("status") is not None:
            payment.status = update_data["status"].value
        if "description" in update_data:
            payment.description = update_data["description"]
        self.db.flush()

        if self.record_cash_flow and payment.status == PaymentStatus.COMPLETED.value:
            CashFlowService(self.db).record_payment(payment)

        self.db.commit()
        self.db.refresh(payment)
        return payment
