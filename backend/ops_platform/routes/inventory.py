from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List, Optional
from ops_platform.database import get_db
from ops_platform.dependencies import get_workspace_member, require_owner
from ops_platform.models.user import WorkspaceUser
from ops_platform.schemas.inventory import InventoryItemResponse
from ops_platform.services import inventory_service

router = APIRouter()


class InventoryItemCreate(BaseModel):
    name: str
    quantity_available: int = Field(ge=0)
    quantity_used_per_booking: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = None


class InventoryItemUpdate(BaseModel):
    quantity_available: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    quantity_used_per_booking: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = None


@router.get("/{workspace_id}", response_model=List[InventoryItemResponse])
def get_inventory(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    return inventory_service.list_inventory(db, workspace_id)


@router.post("/{workspace_id}", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    workspace_id: int,
    data: InventoryItemCreate,
    owner: WorkspaceUser = Depends(require_owner),
    db: Session = Depends(get_db)
):
    return inventory_service.create_inventory_item(db, workspace_id, **data.model_dump())


@router.get("/{workspace_id}/low-stock", response_model=List[InventoryItemResponse])
def get_low_stock(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    return inventory_service.get_low_stock_items(db, workspace_id)


@router.patch("/{workspace_id}/{item_id}", response_model=InventoryItemResponse)
def update_item(
    workspace_id: int,
    item_id: int,
    update: InventoryItemUpdate,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    """Adjust stock; omitted fields are left unchanged"""
    return inventory_service.update_inventory_item(db, workspace_id, item_id, **update.model_dump())
