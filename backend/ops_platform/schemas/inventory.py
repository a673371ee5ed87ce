from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class InventoryItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    quantity_available: int
    quantity_used_per_booking: int
    low_stock_threshold: int
    unit: str
    is_low_stock: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
