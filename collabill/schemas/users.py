import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from collabill.models.enums import Role

class UserOut(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    roles: list[Role]
    created_at: datetime

class RatesIn(BaseModel):
    daily_rate: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    rate_xs: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    rate_s: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    rate_m: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    rate_l: Decimal = Field(ge=0, max_digits=10, decimal_places=2)

class RatesOut(RatesIn):
    user_id: uuid.UUID
