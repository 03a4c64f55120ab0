"""
Inventory Service - Items and Low-Stock Detection
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from buffetdesk.core.exceptions import NotFoundError
from buffetdesk.models import InventoryItem, MovementType
from buffetdesk.schemas import InventoryItemCreate, InventoryItemUpdate
from buffetdesk.services.movement_service import InventoryMovementService


class InventoryService:
    REQUIRED_FIELDS = {"name", "category", "minimum_stock", "unit"}

    def __init__(self, db: Session, allow_negative_stock: bool = False):
        self.db = db
        self.movements = InventoryMovementService(db, allow_negative_stock=allow_negative_stock)

    def get_by_id(self, item_id: str) -> Optional[InventoryItem]:
        return self.db.query(InventoryItem).filter(InventoryItem.id == item_id).first()

    def get_or_404(self, item_id: str) -> InventoryItem:
        item = self.get_by_id(item_id)
        if not item:
            raise NotFoundError("Inventory item", item_id)
        return item

    def get_all(self, category: str = None) -> List[InventoryItem]:
        query = self.db.query(InventoryItem)
        if category:
            query = query.filter(InventoryItem.category == category)
        return query.order_by(InventoryItem.name).all()

    def get_low_stock(self) -> List[InventoryItem]:
        """Get items at or below their minimum stock"""
        return self.db.query(InventoryItem).filter(
            InventoryItem.current_stock <= InventoryItem.minimum_stock
        ).order_by(InventoryItem.name).all()

    def create(self, item_data: InventoryItemCreate) -> InventoryItem:
        """
        Create an item with zero stock. A non-zero initial stock goes
        through the movement engine as an opening 'in' movement, so the
        ledger explains every unit from day one. The item and its opening
        movement are committed together.
        """
        item = InventoryItem(
            **item_data.model_dump(exclude={"initial_stock"}),
            current_stock=0,
        )
        self.db.add(item)
        try:
            self.db.flush()
            if item_data.initial_stock > 0:
                # Commits the pending item along with the movement
                self.movements.record_movement(
                    inventory_id=item.id,
                    movement_type=MovementType.IN,
                    quantity=item_data.initial_stock,
                    unit_cost=item_data.unit_cost,
                    reason="opening_stock",
                )
            else:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(item)
        return item

    def update(self, item_id: str, item_data: InventoryItemUpdate) -> InventoryItem:
        item = self.get_or_404(item_id)

        update_data = item_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if value is None and key in self.REQUIRED_FIELDS:
                continue
            setattr(item, key, value)

        self.db.commit()
        self.db.refresh(item)
        return item

    def delete(self, item_id: str) -> None:
        """Hard delete; the item's movement log goes with it"""
        item = self.get_or_404(item_id)
        self.db.delete(item)
        self.db.commit()
