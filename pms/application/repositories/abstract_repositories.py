from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from pms.domain.common import SessionStatus
from pms.domain.entities import Parking, ParkingLot, Vehicle, ParkingSession, Ticket, Bill


class AbstractParkingRepository(ABC):
    @abstractmethod
    async def get_by_id(self, parking_id: int) -> Optional[Parking]:
        pass

    @abstractmethod
    async def get_by_code(self, parking_code: str) -> Optional[Parking]:
        pass

    @abstractmethod
    async def add(self, parking: Parking, lot_numbers: List[str]) -> Parking:
        pass

    @abstractmethod
    async def update(self, parking: Parking) -> Parking:
        pass

    @abstractmethod
    async def delete(self, parking_id: int) -> None:
        pass

    @abstractmethod
    async def search(self, offset: int, limit: int, search_key: Optional[str] = None) -> List[Parking]:
        pass

    @abstractmethod
    async def count(self, search_key: Optional[str] = None) -> int:
        pass

    @abstractmethod
    async def take_space(self, parking_id: int) -> bool:
        """Decrement the free-space counter unless it is already zero."""
        pass

    @abstractmethod
    async def return_space(self, parking_id: int) -> bool:
        """Increment the free-space counter unless it is already at capacity."""
        pass


class AbstractParkingLotRepository(ABC):
    @abstractmethod
    async def get_by_id(self, lot_id: int) -> Optional[ParkingLot]:
        pass

    @abstractmethod
    async def get_available_lot(self, parking_id: int, exclude_ids: Iterable[int] = ()) -> Optional[ParkingLot]:
        pass

    @abstractmethod
    async def claim(self, lot_id: int) -> bool:
        pass

    @abstractmethod
    async def release(self, lot_id: int) -> bool:
        pass

    @abstractmethod
    async def get_by_parking(self, parking_id: int) -> List[ParkingLot]:
        pass

    @abstractmethod
    async def get_available_lots(self, parking_id: Optional[int] = None) -> List[ParkingLot]:
        pass

    @abstractmethod
    async def count_occupied(self, parking_id: int) -> int:
        pass


class AbstractVehicleRepository(ABC):
    @abstractmethod
    async def get_by_id(self, vehicle_id: int) -> Optional[Vehicle]:
        pass

    @abstractmethod
    async def get_by_plate(self, plate: str) -> Optional[Vehicle]:
        pass

    @abstractmethod
    async def add(self, vehicle: Vehicle) -> Vehicle:
        pass

    @abstractmethod
    async def update(self, vehicle: Vehicle) -> Vehicle:
        pass

    @abstractmethod
    async def delete(self, vehicle_id: int) -> None:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: int, offset: int, limit: int, search_key: Optional[str] = None) -> List[Vehicle]:
        pass

    @abstractmethod
    async def count_by_user(self, user_id: int, search_key: Optional[str] = None) -> int:
        pass


class AbstractParkingSessionRepository(ABC):
    @abstractmethod
    async def add(self, session: ParkingSession) -> ParkingSession:
        pass

    @abstractmethod
    async def get_by_id(self, session_id: int) -> Optional[ParkingSession]:
        pass

    @abstractmethod
    async def get_active_by_vehicle(self, vehicle_id: int) -> Optional[ParkingSession]:
        pass

    @abstractmethod
    async def complete(self, session: ParkingSession) -> Optional[ParkingSession]:
        """Move an ACTIVE session to COMPLETED; None when it was no longer active."""
        pass

    @abstractmethod
    async def get_active_sessions(self) -> List[ParkingSession]:
        pass

    @abstractmethod
    async def get_by_parking(
        self,
        parking_id: int,
        status: Optional[SessionStatus] = None,
        entered_from: Optional[datetime] = None,
        entered_before: Optional[datetime] = None,
    ) -> List[ParkingSession]:
        pass


class AbstractTicketRepository(ABC):
    @abstractmethod
    async def add(self, ticket: Ticket) -> Ticket:
        pass

    @abstractmethod
    async def get_by_session(self, session_id: int) -> Optional[Ticket]:
        pass


class AbstractBillRepository(ABC):
    @abstractmethod
    async def add(self, bill: Bill) -> Bill:
        pass

    @abstractmethod
    async def get_by_session(self, session_id: int) -> Optional[Bill]:
        pass


class AbstractUnitOfWork(ABC):
    """One database transaction and the repositories bound to it.

    Leaving the ``async with`` block normally commits; leaving it with an
    exception rolls every write back.
    """

    parkings: AbstractParkingRepository
    lots: AbstractParkingLotRepository
    vehicles: AbstractVehicleRepository
    sessions: AbstractParkingSessionRepository
    tickets: AbstractTicketRepository
    bills: AbstractBillRepository

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
