from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from pms.domain.common import SessionStatus, PaymentStatus
from pms.infrastructure.api.schemas.common import CamelModel, make_datetime_aware


class SessionStart(CamelModel):
    vehicle_id: int = Field(..., gt=0)
    parking_id: int = Field(..., gt=0)
    user_id: Optional[int] = Field(None, gt=0)


class ParkingSessionResponse(CamelModel):
    id: int
    vehicle_id: int
    parking_id: int
    parking_lot_id: int
    user_id: Optional[int] = None
    status: SessionStatus
    entry_time: datetime
    exit_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    total_amount: Optional[float] = None

    @field_validator('entry_time', 'exit_time')
    @classmethod
    def aware(cls, dt: Optional[datetime]) -> Optional[datetime]:
        return make_datetime_aware(dt)


class TicketResponse(CamelModel):
    id: int
    session_id: int
    created_at: datetime


class BillResponse(CamelModel):
    id: int
    session_id: int
    user_id: Optional[int] = None
    vehicle_id: int
    parking_id: int
    total_amount: float
    status: PaymentStatus
    created_at: datetime


class SessionStartedResponse(CamelModel):
    session: ParkingSessionResponse
    ticket: TicketResponse


class SessionEndedResponse(CamelModel):
    session: ParkingSessionResponse
    bill: BillResponse


class SessionDetailsResponse(ParkingSessionResponse):
    ticket: Optional[TicketResponse] = None
    bill: Optional[BillResponse] = None
