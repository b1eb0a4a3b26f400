from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from pms.domain.common import ParkingStatus
from pms.infrastructure.api.schemas.common import CamelModel, PageMeta, make_datetime_aware


class ParkingCreate(CamelModel):
    parking_code: str = Field(..., min_length=1, max_length=30)
    total_spaces: int = Field(..., gt=0, le=10000)
    name: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    fee_per_hour: Optional[float] = Field(None, gt=0)
    status: Optional[ParkingStatus] = None

    @field_validator('parking_code')
    def validate_parking_code(cls, v):  # pylint: disable=no-self-argument
        v = v.strip()
        if not v:
            raise ValueError("parkingCode cannot be blank")
        return v


class ParkingUpdate(CamelModel):
    parking_code: Optional[str] = Field(None, min_length=1, max_length=30)
    name: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    fee_per_hour: Optional[float] = Field(None, gt=0)
    status: Optional[ParkingStatus] = None


class ParkingLotResponse(CamelModel):
    id: int
    parking_id: int
    lot_number: str
    is_occupied: bool


class ParkingResponse(CamelModel):
    id: int
    parking_code: str
    name: str
    location: str
    total_spaces: int
    available_spaces: int
    fee_per_hour: float
    status: ParkingStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('created_at', 'updated_at')
    @classmethod
    def aware(cls, dt: Optional[datetime]) -> Optional[datetime]:
        return make_datetime_aware(dt)


class ParkingWithLotsResponse(ParkingResponse):
    parking_lots: List[ParkingLotResponse] = []


class ParkingListResponse(CamelModel):
    parkings: List[ParkingResponse]
    meta: PageMeta
