from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from ops_platform.database import Base, utcnow

class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    quantity_available = Column(Integer, nullable=False, default=0)
    quantity_used_per_booking = Column(Integer, nullable=False, default=1)
    low_stock_threshold = Column(Integer, nullable=False, default=5)
    unit = Column(String(50), nullable=False, default="unit")

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_available <= self.low_stock_threshold
