"""
Inventory Movement Service - the only write path for stock levels

Semantics:
- in: current_stock += quantity, and the movement date becomes the item's
  last_restock_date.
- out: current_stock -= quantity. Refused when it would go below zero
  unless ALLOW_NEGATIVE_STOCK is set.
- adjustment: current_stock = quantity (a physical count replaces the
  book value).

Every movement appends exactly one InventoryMovement row carrying the
resulting stock. The stock change is a single UPDATE evaluated by the
database, so concurrent movements on the same item serialize on the row
instead of racing through a read-then-write in Python.

Movements are applied in date order: a movement dated before the item's
latest movement is refused, and each row gets the next per-item sequence
number. Reading the ledger by (movement_date, sequence) therefore replays
it in the order it was applied.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import desc, exists, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from buffetdesk.core.exceptions import (
    BuffetDeskError, InfrastructureError, InsufficientStockError,
    NotFoundError, ValidationError
)
from buffetdesk.core.money import to_money, to_utc_naive, utcnow
from buffetdesk.models import Event, InventoryItem, InventoryMovement, MovementType

logger = logging.getLogger(__name__)


class InventoryMovementService:
    def __init__(self, db: Session, allow_negative_stock: bool = False):
        self.db = db
        self.allow_negative_stock = allow_negative_stock

    @staticmethod
    def _parse_movement_type(movement_type) -> MovementType:
        try:
            return MovementType(movement_type)
        except ValueError:
            allowed = ", ".join(m.value for m in MovementType)
            raise ValidationError(f"Invalid movement type '{movement_type}'. Expected one of: {allowed}")

    @staticmethod
    def _validate_quantity(quantity) -> int:
        # bool is an int subclass; True is not a quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("Quantity must be an integer")
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")
        return quantity

    @staticmethod
    def _later_movement(inventory_id: str, movement_date: datetime):
        return exists().where(
            InventoryMovement.inventory_id == inventory_id,
            InventoryMovement.movement_date > movement_date,
        )

    def _apply_stock_change(self, inventory_id: str, movement_type: MovementType,
                            quantity: int, movement_date: Optional[datetime]) -> int:
        """Run the conditional UPDATE and return the number of rows it touched"""
        query = self.db.query(InventoryItem).filter(InventoryItem.id == inventory_id)
        if movement_date is not None:
            query = query.filter(~self._later_movement(inventory_id, movement_date))

        if movement_type == MovementType.IN:
            values = {InventoryItem.current_stock: InventoryItem.current_stock + quantity}
        elif movement_type == MovementType.OUT:
            if not self.allow_negative_stock:
                query = query.filter(InventoryItem.current_stock >= quantity)
            values = {InventoryItem.current_stock: InventoryItem.current_stock - quantity}
        else:
            values = {InventoryItem.current_stock: quantity}

        return query.update(values, synchronize_session=False)

    def _current_stock(self, inventory_id: str) -> Optional[int]:
        return self.db.query(InventoryItem.current_stock).filter(
            InventoryItem.id == inventory_id
        ).scalar()

    def _latest_movement_date(self, inventory_id: str) -> Optional[datetime]:
        return self.db.query(func.max(InventoryMovement.movement_date)).filter(
            InventoryMovement.inventory_id == inventory_id
        ).scalar()

    def _next_sequence(self, inventory_id: str) -> int:
        last = self.db.query(func.max(InventoryMovement.sequence)).filter(
            InventoryMovement.inventory_id == inventory_id
        ).scalar()
        return (last or 0) + 1

    @staticmethod
    def _backdated(movement_date: datetime, latest: datetime) -> ValidationError:
        return ValidationError(
            f"Movement date {movement_date.isoformat()} is earlier than the item's "
            f"latest movement ({latest.isoformat()})"
        )

    def record_movement(
        self,
        inventory_id: str,
        movement_type,
        quantity: int,
        unit_cost: Optional[Decimal] = None,
        reason: Optional[str] = None,
        event_id: Optional[str] = None,
        notes: Optional[str] = None,
        movement_date: Optional[datetime] = None,
    ) -> InventoryMovement:
        """
        Apply one movement to one item and append it to the ledger.

        ``movement_date`` defaults to now, or to the item's latest movement
        date when the clock is behind it. An explicit date earlier than the
        latest movement is a ValidationError.

        The stock update and the ledger insert are committed together. On
        any failure the session is rolled back and neither is kept.
        """
        movement_type = self._parse_movement_type(movement_type)
        quantity = self._validate_quantity(quantity)
        if unit_cost is not None:
            unit_cost = to_money(unit_cost)
            if unit_cost < 0:
                raise ValidationError("Unit cost cannot be negative")
        movement_date = to_utc_naive(movement_date)

        try:
            if event_id and not self.db.query(Event.id).filter(Event.id == event_id).first():
                raise NotFoundError("Event", event_id)

            updated = self._apply_stock_change(inventory_id, movement_type, quantity, movement_date)
            if updated == 0:
                available = self._current_stock(inventory_id)
                if available is None:
                    raise NotFoundError("Inventory item", inventory_id)
                latest = self._latest_movement_date(inventory_id)
                if movement_date is not None and latest is not None and movement_date < latest:
                    raise self._backdated(movement_date, latest)
                raise InsufficientStockError(inventory_id, quantity, available)

            # The item row is locked from here on, so the ledger tail is stable
            latest = self._latest_movement_date(inventory_id)
            if movement_date is None:
                movement_date = utcnow()
                if latest is not None and movement_date < latest:
                    movement_date = latest
            elif latest is not None and movement_date < latest:
                raise self._backdated(movement_date, latest)

            if movement_type == MovementType.IN:
                self.db.query(InventoryItem).filter(InventoryItem.id == inventory_id).update(
                    {InventoryItem.last_restock_date: movement_date}, synchronize_session=False
                )

            # Same transaction, so this sees our own update
            stock_after = self._current_stock(inventory_id)

            movement = InventoryMovement(
                inventory_id=inventory_id,
                movement_type=movement_type.value,
                quantity=quantity,
                unit_cost=unit_cost,
                reason=reason,
                event_id=event_id,
                notes=notes,
                movement_date=movement_date,
                stock_after=stock_after,
                sequence=self._next_sequence(inventory_id),
            )
            self.db.add(movement)
            self.db.flush()
            self.db.commit()
        except BuffetDeskError as exc:
            self.db.rollback()
            logger.warning(
                "Movement rejected: item=%s type=%s qty=%s (%s)",
                inventory_id, movement_type.value, quantity, exc.message
            )
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Movement failed: item=%s type=%s qty=%s", inventory_id, movement_type.value, quantity, exc_info=True)
            raise InfrastructureError("Failed to record inventory movement") from exc

        # Objects loaded before the UPDATE carry the old stock value
        self.db.expire_all()
        logger.info(
            "Movement recorded: item=%s type=%s qty=%s stock_after=%s",
            inventory_id, movement_type.value, quantity, stock_after
        )
        return movement

    def get_movements(self, inventory_id: Optional[str] = None, limit: Optional[int] = None) -> List[InventoryMovement]:
        """List movements newest first, optionally for one item"""
        query = self.db.query(InventoryMovement)
        if inventory_id:
            query = query.filter(InventoryMovement.inventory_id == inventory_id)
        query = query.order_by(desc(InventoryMovement.movement_date), desc(InventoryMovement.sequence))
        if limit:
            query = query.limit(limit)
        return query.all()

    def replay_stock(self, inventory_id: str) -> int:
        """
        Recompute an item's stock from its movement log, oldest first.
        Used to audit that current_stock matches the ledger.
        """
        movements = self.db.query(InventoryMovement).filter(
            InventoryMovement.inventory_id == inventory_id
        ).order_by(InventoryMovement.movement_date, InventoryMovement.sequence).all()

        stock = 0
        for movement in movements:
            if movement.movement_type == MovementType.IN.value:
                stock += movement.quantity
            elif movement.movement_type == MovementType.OUT.value:
                stock -= movement.quantity
            else:
                stock = movement.quantity
        return stock
