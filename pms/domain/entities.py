from datetime import datetime
from typing import Optional

from pms.domain.common import ParkingStatus, SessionStatus, PaymentStatus


class Parking:
    def __init__(
        self,
        parking_code: str,
        name: str,
        location: str,
        total_spaces: int,
        available_spaces: int,
        fee_per_hour: float,
        status: ParkingStatus = ParkingStatus.AVAILABLE,
        id: Optional[int] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.parking_code = parking_code
        self.name = name
        self.location = location
        self.total_spaces = total_spaces
        self.available_spaces = available_spaces
        self.fee_per_hour = fee_per_hour
        self.status = status
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def is_under_maintenance(self) -> bool:
        return self.status == ParkingStatus.MAINTENANCE


class ParkingLot:
    def __init__(self, parking_id: int, lot_number: str, is_occupied: bool = False, id: Optional[int] = None):
        self.id = id
        self.parking_id = parking_id
        self.lot_number = lot_number
        self.is_occupied = is_occupied


class Vehicle:
    def __init__(
        self,
        user_id: int,
        plate: str,
        model: Optional[str] = None,
        type: Optional[str] = None,
        size: Optional[str] = None,
        color: Optional[str] = None,
        id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ):
        self.id = id
        self.user_id = user_id
        self.plate = plate
        self.model = model
        self.type = type
        self.size = size
        self.color = color
        self.created_at = created_at


class ParkingSession:
    def __init__(
        self,
        vehicle_id: int,
        parking_id: int,
        parking_lot_id: int,
        entry_time: datetime,
        user_id: Optional[int] = None,
        status: SessionStatus = SessionStatus.ACTIVE,
        id: Optional[int] = None,
        exit_time: Optional[datetime] = None,
        duration_minutes: Optional[int] = None,
        total_amount: Optional[float] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.parking_id = parking_id
        self.parking_lot_id = parking_lot_id
        self.user_id = user_id
        self.status = status
        self.entry_time = entry_time
        self.exit_time = exit_time
        self.duration_minutes = duration_minutes
        self.total_amount = total_amount

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE


class Ticket:
    def __init__(self, session_id: int, id: Optional[int] = None, created_at: Optional[datetime] = None):
        self.id = id
        self.session_id = session_id
        self.created_at = created_at


class Bill:
    def __init__(
        self,
        session_id: int,
        vehicle_id: int,
        parking_id: int,
        total_amount: float,
        user_id: Optional[int] = None,
        status: PaymentStatus = PaymentStatus.PENDING,
        id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ):
        self.id = id
        self.session_id = session_id
        self.user_id = user_id
        self.vehicle_id = vehicle_id
        self.parking_id = parking_id
        self.total_amount = total_amount
        self.status = status
        self.created_at = created_at
