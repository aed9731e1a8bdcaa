from pydantic import BaseModel, ConfigDict

from tallyra.core.config import settings
from tallyra.core.enums import Role


class ShopProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    currency: str = settings.default_currency
    upi_id: str | None = None
    upi_qr_url: str | None = None


class OperatorSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    shop: ShopProfile
    role: Role
    staff_id: str | None = None

    @property
    def is_owner(self) -> bool:
        return self.role == Role.OWNER
