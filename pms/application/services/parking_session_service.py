from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, List, NamedTuple, Optional

from loguru import logger

from pms.application.repositories import AbstractUnitOfWork
from pms.config.settings_env import settings
from pms.domain.billing import calculate_fee
from pms.domain.common import SessionStatus, PaymentStatus
from pms.domain.entities import ParkingLot, ParkingSession, Ticket, Bill
from pms.domain.exceptions import (
    ValidationError,
    NotFoundError,
    NoAvailabilityError,
    NotActiveError,
    ConflictError,
)
from pms.shared.custom_types import utc_now


class SessionStarted(NamedTuple):
    session: ParkingSession
    ticket: Ticket


class SessionEnded(NamedTuple):
    session: ParkingSession
    bill: Bill


class SessionDetails(NamedTuple):
    session: ParkingSession
    ticket: Optional[Ticket]
    bill: Optional[Bill]


def _require_id(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be a positive integer")
    return value


class ParkingSessionService:
    """Opens and closes parking sessions.

    Each transition runs inside one unit of work: the session, its ticket or
    bill, the lot occupancy flag and the facility's free-space counter are
    committed together or not at all.
    """

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        clock: Callable[[], datetime] = utc_now,
        claim_attempts: Optional[int] = None,
    ):
        self.uow = uow
        self.clock = clock
        self.claim_attempts = claim_attempts or settings.LOT_CLAIM_ATTEMPTS

    async def start_session(self, vehicle_id: int, parking_id: int, user_id: Optional[int] = None) -> SessionStarted:
        _require_id(vehicle_id, "Vehicle ID")
        _require_id(parking_id, "Parking ID")
        if user_id is not None:
            _require_id(user_id, "User ID")

        async with self.uow as uow:
            vehicle = await uow.vehicles.get_by_id(vehicle_id)
            if not vehicle:
                raise NotFoundError("Vehicle not found")

            parking = await uow.parkings.get_by_id(parking_id)
            if not parking:
                raise NotFoundError("Parking not found")
            if parking.is_under_maintenance:
                raise NoAvailabilityError(f"Parking {parking.parking_code} is under maintenance")

            if await uow.sessions.get_active_by_vehicle(vehicle_id):
                raise ConflictError(f"Vehicle {vehicle.plate} already has an active parking session")

            lot = await self._claim_lot(uow, parking_id)
            if not lot or not await uow.parkings.take_space(parking_id):
                logger.warning(f"No available parking spaces in {parking.parking_code}")
                raise NoAvailabilityError("No available parking spaces")

            session = await uow.sessions.add(
                ParkingSession(
                    vehicle_id=vehicle_id,
                    parking_id=parking_id,
                    parking_lot_id=lot.id,
                    user_id=user_id or vehicle.user_id,
                    status=SessionStatus.ACTIVE,
                    entry_time=self.clock(),
                )
            )
            ticket = await uow.tickets.add(Ticket(session_id=session.id, created_at=session.entry_time))

        logger.info(f"Vehicle {vehicle.plate} entered {parking.parking_code} at lot {lot.lot_number} (session {session.id})")
        return SessionStarted(session=session, ticket=ticket)

    async def _claim_lot(self, uow: AbstractUnitOfWork, parking_id: int) -> Optional[ParkingLot]:
        # A lot picked by the allocator may be taken by a concurrent start
        # before the claim lands; skip it and look again.
        lost: List[int] = []
        for _ in range(self.claim_attempts):
            lot = await uow.lots.get_available_lot(parking_id, exclude_ids=lost)
            if not lot:
                return None
            if await uow.lots.claim(lot.id):
                return lot
            logger.debug(f"Lot {lot.lot_number} was claimed concurrently, retrying")
            lost.append(lot.id)
        return None

    async def end_session(self, session_id: int) -> SessionEnded:
        _require_id(session_id, "Session ID")

        async with self.uow as uow:
            session = await uow.sessions.get_by_id(session_id)
            if not session:
                raise NotFoundError("Parking session not found")
            if not session.is_active:
                raise NotActiveError("Active parking session not found")

            parking = await uow.parkings.get_by_id(session.parking_id)
            vehicle = await uow.vehicles.get_by_id(session.vehicle_id)

            exit_time = self.clock()
            quote = calculate_fee(session.entry_time, exit_time, parking.fee_per_hour)

            session.exit_time = exit_time
            session.duration_minutes = quote.duration_minutes
            session.total_amount = quote.total_amount
            session = await uow.sessions.complete(session)
            if not session:
                # Ended by a concurrent call between the read and the update
                raise NotActiveError("Active parking session not found")

            bill = await uow.bills.add(
                Bill(
                    session_id=session.id,
                    user_id=session.user_id or (vehicle.user_id if vehicle else None),
                    vehicle_id=session.vehicle_id,
                    parking_id=session.parking_id,
                    total_amount=quote.total_amount,
                    status=PaymentStatus.PENDING,
                    created_at=exit_time,
                )
            )

            # The counter only moves together with a lot flip
            if await uow.lots.release(session.parking_lot_id):
                await uow.parkings.return_space(session.parking_id)
            else:
                logger.warning(f"Lot {session.parking_lot_id} was already free when session {session.id} ended")

        logger.info(
            f"Session {session.id} completed after {quote.duration_minutes} min. Amount: {quote.total_amount}"
        )
        return SessionEnded(session=session, bill=bill)

    async def get_active_sessions(self) -> List[ParkingSession]:
        async with self.uow as uow:
            return await uow.sessions.get_active_sessions()

    async def get_session_details(self, session_id: int) -> SessionDetails:
        _require_id(session_id, "Session ID")

        async with self.uow as uow:
            session = await uow.sessions.get_by_id(session_id)
            if not session:
                raise NotFoundError("Session not found")
            ticket = await uow.tickets.get_by_session(session_id)
            bill = await uow.bills.get_by_session(session_id)
        return SessionDetails(session=session, ticket=ticket, bill=bill)

    async def get_sessions_by_parking(
        self,
        parking_id: int,
        status: Optional[SessionStatus] = None,
        day: Optional[date] = None,
    ) -> List[ParkingSession]:
        _require_id(parking_id, "Parking ID")

        entered_from = entered_before = None
        if day is not None:
            entered_from = datetime.combine(day, time.min, tzinfo=timezone.utc)
            entered_before = entered_from + timedelta(days=1)

        async with self.uow as uow:
            if not await uow.parkings.get_by_id(parking_id):
                raise NotFoundError("Parking not found")
            return await uow.sessions.get_by_parking(
                parking_id, status=status, entered_from=entered_from, entered_before=entered_before
            )
