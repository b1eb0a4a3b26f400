from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from pms.domain.common import VehicleType, VehicleSize
from pms.infrastructure.api.schemas.common import CamelModel, PageMeta, make_datetime_aware


class VehicleBase(CamelModel):
    plate: str = Field(..., min_length=1, max_length=20)
    model: Optional[str] = Field(None, max_length=50)
    type: Optional[VehicleType] = None
    size: Optional[VehicleSize] = None
    color: Optional[str] = Field(None, max_length=30)

    @field_validator('plate')
    def validate_plate(cls, v):  # pylint: disable=no-self-argument
        v = v.upper().strip()
        if not v:
            raise ValueError("plate cannot be blank")
        return v


class VehicleCreate(VehicleBase):
    pass


class VehicleUpdate(VehicleBase):
    pass


class VehicleResponse(CamelModel):
    id: int
    user_id: int
    plate: str
    model: Optional[str] = None
    type: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator('created_at')
    @classmethod
    def aware(cls, dt: Optional[datetime]) -> Optional[datetime]:
        return make_datetime_aware(dt)


class VehicleListResponse(CamelModel):
    vehicles: List[VehicleResponse]
    meta: PageMeta
