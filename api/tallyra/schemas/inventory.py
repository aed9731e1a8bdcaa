from pydantic import BaseModel, Field

from tallyra.core.enums import MovementType


class StockUpdate(BaseModel):
    item_id: str
    previous_quantity: int
    new_quantity: int = Field(ge=0)


class InventoryMovement(BaseModel):
    shop_id: str
    item_id: str
    transaction_id: str | None = None
    movement_type: MovementType
    quantity_change: int
    previous_quantity: int
    new_quantity: int = Field(ge=0)
    notes: str | None = None


class LowStockItem(BaseModel):
    item_id: str
    name: str
    base_price: float
    stock_quantity: int
    min_stock_alert: int


class RestockRequest(BaseModel):
    item_id: str
    quantity: int = Field(gt=0)
    reason: str | None = None
