"""
Inventory API Routes - Items, Low Stock and Stock Movements
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from buffetdesk.api.deps import get_inventory_service, get_movement_service, require_user
from buffetdesk.schemas import (
    InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate,
    InventoryMovementCreate, InventoryMovementResponse
)
from buffetdesk.services import InventoryMovementService, InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"], dependencies=require_user)


# ==================== LOW STOCK ====================

@router.get("/low-stock", response_model=List[InventoryItemResponse])
def list_low_stock(inventory_service: InventoryService = Depends(get_inventory_service)):
    """Items at or below their minimum stock"""
    return inventory_service.get_low_stock()


# ==================== MOVEMENTS ====================

@router.get("/movements", response_model=List[InventoryMovementResponse])
def list_movements(
    inventory_id: Optional[str] = Query(None, alias="inventoryId"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    movement_service: InventoryMovementService = Depends(get_movement_service),
):
    """List stock movements, newest first"""
    return movement_service.get_movements(inventory_id, limit)


@router.post("/movements", response_model=InventoryMovementResponse, status_code=status.HTTP_201_CREATED)
def create_movement(
    movement_data: InventoryMovementCreate,
    movement_service: InventoryMovementService = Depends(get_movement_service),
):
    """Record a stock movement and apply it to the item"""
    return movement_service.record_movement(
        inventory_id=movement_data.inventory_id,
        movement_type=movement_data.movement_type,
        quantity=movement_data.quantity,
        unit_cost=movement_data.unit_cost,
        reason=movement_data.reason,
        event_id=movement_data.event_id,
        notes=movement_data.notes,
        movement_date=movement_data.movement_date,
    )


# ==================== ITEMS ====================

@router.get("", response_model=List[InventoryItemResponse])
def list_items(
    category: Optional[str] = None,
    inventory_service: InventoryService = Depends(get_inventory_service),
):
    return inventory_service.get_all(category)


@router.post("", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    item_data: InventoryItemCreate,
    inventory_service: InventoryService = Depends(get_inventory_service),
):
    """Create an inventory item; initialStock is booked as an opening movement"""
    return inventory_service.create(item_data)


@router.get("/{item_id}", response_model=InventoryItemResponse)
def get_item(item_id: str, inventory_service: InventoryService = Depends(get_inventory_service)):
    return inventory_service.get_or_404(item_id)


@router.put("/{item_id}", response_model=InventoryItemResponse)
def update_item(
    item_id: str,
    item_data: InventoryItemUpdate,
    inventory_service: InventoryService = Depends(get_inventory_service),
):
    return inventory_service.update(item_id, item_data)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: str, inventory_service: InventoryService = Depends(get_inventory_service)):
    inventory_service.delete(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
