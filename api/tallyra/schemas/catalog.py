from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class CatalogItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    base_price: Decimal = Field(ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    min_stock_alert: int = Field(default=0, ge=0)
    max_discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    max_discount_fixed: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.min_stock_alert


class RealItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["real"] = "real"
    item: CatalogItem

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def quantity(self) -> int:
        return 1

    @property
    def base_price(self) -> Decimal:
        return self.item.base_price

    @property
    def max_discount_percentage(self) -> Decimal:
        return self.item.max_discount_percentage

    @property
    def max_discount_fixed(self) -> Decimal:
        return self.item.max_discount_fixed


class VirtualItem(BaseModel):
    """Bulk sale of a catalog item. Never persisted."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["virtual"] = "virtual"
    item: CatalogItem
    quantity: int = Field(ge=2)

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def name(self) -> str:
        return f"{self.item.name} ({self.quantity} pcs)"

    @property
    def base_price(self) -> Decimal:
        return self.item.base_price * self.quantity

    @property
    def max_discount_percentage(self) -> Decimal:
        return self.item.max_discount_percentage

    @property
    def max_discount_fixed(self) -> Decimal:
        return self.item.max_discount_fixed * self.quantity


class CustomItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    name: str = Field(min_length=1, max_length=250)
    base_price: Decimal = Field(ge=0)
    max_discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    max_discount_fixed: Decimal = Field(default=Decimal("0"), ge=0)

    @property
    def item_id(self) -> None:
        return None

    @property
    def quantity(self) -> int:
        return 1


MatchedItem = Annotated[Union[RealItem, VirtualItem, CustomItem], Field(discriminator="kind")]


class InferenceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: MatchedItem | None = None
    discount_amount: Decimal = Decimal("0")


class CatalogItemResponse(BaseModel):
    id: str
    name: str
    base_price: float
    stock_quantity: int
    min_stock_alert: int
    max_discount_percentage: float
    max_discount_fixed: float


class InferRequest(BaseModel):
    entered_amount: Decimal = Field(gt=0)
    selected_item_id: str | None = None


class MatchedItemResponse(BaseModel):
    kind: str
    item_id: str | None
    name: str
    quantity: int
    base_price: float


class InferResponse(BaseModel):
    item: MatchedItemResponse
    discount_amount: float
    discount_percentage: float
    within_policy: bool
    requires_override: bool
