from typing import Optional

from sqlalchemy.orm import Session

from ops_platform.errors import InvalidInput, NotFound
from ops_platform.models.inventory import InventoryItem


def _check_non_negative(**values) -> None:
    for field, value in values.items():
        if value is not None and value < 0:
            raise InvalidInput(f"{field} cannot be negative")


def list_inventory(db: Session, workspace_id: int) -> list[InventoryItem]:
    return db.query(InventoryItem).filter(
        InventoryItem.workspace_id == workspace_id
    ).order_by(InventoryItem.name).all()


def create_inventory_item(
    db: Session,
    workspace_id: int,
    name: str,
    quantity_available: int,
    quantity_used_per_booking: Optional[int] = None,
    low_stock_threshold: Optional[int] = None,
    unit: Optional[str] = None,
) -> InventoryItem:
    if not name or not name.strip():
        raise InvalidInput("Name is required")
    _check_non_negative(
        quantity_available=quantity_available,
        quantity_used_per_booking=quantity_used_per_booking,
        low_stock_threshold=low_stock_threshold,
    )

    item = InventoryItem(
        workspace_id=workspace_id,
        name=name.strip(),
        quantity_available=quantity_available,
        quantity_used_per_booking=1 if quantity_used_per_booking is None else quantity_used_per_booking,
        low_stock_threshold=5 if low_stock_threshold is None else low_stock_threshold,
        unit=unit or "unit",
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def update_inventory_item(
    db: Session,
    workspace_id: int,
    item_id: int,
    quantity_available: Optional[int] = None,
    low_stock_threshold: Optional[int] = None,
    quantity_used_per_booking: Optional[int] = None,
    unit: Optional[str] = None,
) -> InventoryItem:
    """Fields left as None keep their stored value."""
    item = db.query(InventoryItem).filter(
        InventoryItem.id == item_id,
        InventoryItem.workspace_id == workspace_id,
    ).first()
    if not item:
        raise NotFound("Inventory item not found")
    _check_non_negative(
        quantity_available=quantity_available,
        quantity_used_per_booking=quantity_used_per_booking,
        low_stock_threshold=low_stock_threshold,
    )

    if quantity_available is not None:
        item.quantity_available = quantity_available
    if low_stock_threshold is not None:
        item.low_stock_threshold = low_stock_threshold
    if quantity_used_per_booking is not None:
        item.quantity_used_per_booking = quantity_used_per_booking
    if unit is not None:
        item.unit = unit

    db.commit()
    db.refresh(item)
    return item


def get_low_stock_items(db: Session, workspace_id: int) -> list[InventoryItem]:
    return db.query(InventoryItem).filter(
        InventoryItem.workspace_id == workspace_id,
        InventoryItem.quantity_available <= InventoryItem.low_stock_threshold,
    ).order_by(InventoryItem.quantity_available.asc(), InventoryItem.id).all()
