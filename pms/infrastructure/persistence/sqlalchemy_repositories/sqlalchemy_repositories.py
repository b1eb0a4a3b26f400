from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_, or_, update, delete, case
from sqlalchemy.exc import IntegrityError

from pms.domain.entities import Parking, ParkingLot, Vehicle, ParkingSession, Ticket, Bill
from pms.domain.common import ParkingStatus, SessionStatus, PaymentStatus
from pms.domain.exceptions import ConflictError
from pms.infrastructure.persistence.models.models import (
    Parking as ORMParking,
    ParkingLot as ORMParkingLot,
    Vehicle as ORMVehicle,
    ParkingSession as ORMParkingSession,
    Ticket as ORMTicket,
    Bill as ORMBill,
)
from pms.application.repositories import (
    AbstractParkingRepository,
    AbstractParkingLotRepository,
    AbstractVehicleRepository,
    AbstractParkingSessionRepository,
    AbstractTicketRepository,
    AbstractBillRepository,
)


def _to_parking(orm_parking: ORMParking) -> Parking:
    return Parking(
        id=orm_parking.id,
        parking_code=orm_parking.parking_code,
        name=orm_parking.name,
        location=orm_parking.location,
        total_spaces=orm_parking.total_spaces,
        available_spaces=orm_parking.available_spaces,
        fee_per_hour=orm_parking.fee_per_hour,
        status=ParkingStatus(orm_parking.status),
        created_at=orm_parking.created_at,
        updated_at=orm_parking.updated_at,
    )


def _to_lot(orm_lot: ORMParkingLot) -> ParkingLot:
    return ParkingLot(
        id=orm_lot.id,
        parking_id=orm_lot.parking_id,
        lot_number=orm_lot.lot_number,
        is_occupied=orm_lot.is_occupied,
    )


def _to_vehicle(orm_vehicle: ORMVehicle) -> Vehicle:
    return Vehicle(
        id=orm_vehicle.id,
        user_id=orm_vehicle.user_id,
        plate=orm_vehicle.plate,
        model=orm_vehicle.model,
        type=orm_vehicle.type,
        size=orm_vehicle.size,
        color=orm_vehicle.color,
        created_at=orm_vehicle.created_at,
    )


def _to_session(orm_session: ORMParkingSession) -> ParkingSession:
    return ParkingSession(
        id=orm_session.id,
        vehicle_id=orm_session.vehicle_id,
        parking_id=orm_session.parking_id,
        parking_lot_id=orm_session.parking_lot_id,
        user_id=orm_session.user_id,
        status=SessionStatus(orm_session.status),
        entry_time=orm_session.entry_time,
        exit_time=orm_session.exit_time,
        duration_minutes=orm_session.duration_minutes,
        total_amount=orm_session.total_amount,
    )


def _to_ticket(orm_ticket: ORMTicket) -> Ticket:
    return Ticket(id=orm_ticket.id, session_id=orm_ticket.session_id, created_at=orm_ticket.created_at)


def _to_bill(orm_bill: ORMBill) -> Bill:
    return Bill(
        id=orm_bill.id,
        session_id=orm_bill.session_id,
        user_id=orm_bill.user_id,
        vehicle_id=orm_bill.vehicle_id,
        parking_id=orm_bill.parking_id,
        total_amount=orm_bill.total_amount,
        status=PaymentStatus(orm_bill.status),
        created_at=orm_bill.created_at,
    )


class SQLAlchemyParkingRepository(AbstractParkingRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    def _search_condition(self, search_key: Optional[str]):
        if not search_key:
            return None
        pattern = f"%{search_key}%"
        return or_(
            ORMParking.parking_code.ilike(pattern),
            ORMParking.name.ilike(pattern),
            ORMParking.location.ilike(pattern),
        )

    async def get_by_id(self, parking_id: int) -> Optional[Parking]:
        result = await self.session.execute(
            select(ORMParking).where(ORMParking.id == parking_id).execution_options(populate_existing=True)
        )
        orm_parking = result.scalars().first()
        return _to_parking(orm_parking) if orm_parking else None

    async def get_by_code(self, parking_code: str) -> Optional[Parking]:
        result = await self.session.execute(
            select(ORMParking).where(ORMParking.parking_code == parking_code)
        )
        orm_parking = result.scalars().first()
        return _to_parking(orm_parking) if orm_parking else None

    async def add(self, parking: Parking, lot_numbers: List[str]) -> Parking:
        orm_parking = ORMParking(
            parking_code=parking.parking_code,
            name=parking.name,
            location=parking.location,
            total_spaces=parking.total_spaces,
            available_spaces=parking.available_spaces,
            fee_per_hour=parking.fee_per_hour,
            status=parking.status.value,
            parking_lots=[ORMParkingLot(lot_number=number, is_occupied=False) for number in lot_numbers],
        )
        self.session.add(orm_parking)
        await self.session.flush()
        await self.session.refresh(orm_parking)
        return _to_parking(orm_parking)

    async def update(self, parking: Parking) -> Parking:
        orm_parking = await self.session.get(ORMParking, parking.id)
        if orm_parking:
            orm_parking.parking_code = parking.parking_code
            orm_parking.name = parking.name
            orm_parking.location = parking.location
            orm_parking.fee_per_hour = parking.fee_per_hour
            orm_parking.status = parking.status.value
            await self.session.flush()
            await self.session.refresh(orm_parking)
            return _to_parking(orm_parking)
        raise ValueError(f"Parking with ID {parking.id} not found.")

    async def delete(self, parking_id: int) -> None:
        session_ids = select(ORMParkingSession.id).where(ORMParkingSession.parking_id == parking_id)
        await self.session.execute(delete(ORMTicket).where(ORMTicket.session_id.in_(session_ids)))
        await self.session.execute(delete(ORMBill).where(ORMBill.parking_id == parking_id))
        await self.session.execute(delete(ORMParkingSession).where(ORMParkingSession.parking_id == parking_id))
        await self.session.execute(delete(ORMParkingLot).where(ORMParkingLot.parking_id == parking_id))
        await self.session.execute(delete(ORMParking).where(ORMParking.id == parking_id))

    async def search(self, offset: int, limit: int, search_key: Optional[str] = None) -> List[Parking]:
        query = select(ORMParking)
        condition = self._search_condition(search_key)
        if condition is not None:
            query = query.where(condition)
        result = await self.session.execute(query.order_by(ORMParking.id).offset(offset).limit(limit))
        return [_to_parking(p) for p in result.scalars().all()]

    async def count(self, search_key: Optional[str] = None) -> int:
        query = select(func.count(ORMParking.id))
        condition = self._search_condition(search_key)
        if condition is not None:
            query = query.where(condition)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def take_space(self, parking_id: int) -> bool:
        result = await self.session.execute(
            update(ORMParking)
            .where(and_(ORMParking.id == parking_id, ORMParking.available_spaces > 0))
            .values(
                available_spaces=ORMParking.available_spaces - 1,
                status=case(
                    (ORMParking.available_spaces == 1, ParkingStatus.FULL.value),
                    else_=ORMParking.status,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def return_space(self, parking_id: int) -> bool:
        result = await self.session.execute(
            update(ORMParking)
            .where(and_(ORMParking.id == parking_id, ORMParking.available_spaces < ORMParking.total_spaces))
            .values(
                available_spaces=ORMParking.available_spaces + 1,
                status=case(
                    (ORMParking.status == ParkingStatus.FULL.value, ParkingStatus.AVAILABLE.value),
                    else_=ORMParking.status,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class SQLAlchemyParkingLotRepository(AbstractParkingLotRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, lot_id: int) -> Optional[ParkingLot]:
        result = await self.session.execute(
            select(ORMParkingLot).where(ORMParkingLot.id == lot_id).execution_options(populate_existing=True)
        )
        orm_lot = result.scalars().first()
        return _to_lot(orm_lot) if orm_lot else None

    async def get_available_lot(self, parking_id: int, exclude_ids: Iterable[int] = ()) -> Optional[ParkingLot]:
        conditions = [
            ORMParkingLot.parking_id == parking_id,
            ORMParkingLot.is_occupied == False,  # noqa: E712
        ]
        excluded = list(exclude_ids)
        if excluded:
            conditions.append(ORMParkingLot.id.not_in(excluded))

        result = await self.session.execute(
            select(ORMParkingLot).where(and_(*conditions)).order_by(ORMParkingLot.id).limit(1)
        )
        orm_lot = result.scalars().first()
        return _to_lot(orm_lot) if orm_lot else None

    async def claim(self, lot_id: int) -> bool:
        # Only one transaction can move a lot from free to occupied.
        result = await self.session.execute(
            update(ORMParkingLot)
            .where(and_(ORMParkingLot.id == lot_id, ORMParkingLot.is_occupied == False))  # noqa: E712
            .values(is_occupied=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def release(self, lot_id: int) -> bool:
        result = await self.session.execute(
            update(ORMParkingLot)
            .where(and_(ORMParkingLot.id == lot_id, ORMParkingLot.is_occupied == True))  # noqa: E712
            .values(is_occupied=False)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def get_by_parking(self, parking_id: int) -> List[ParkingLot]:
        result = await self.session.execute(
            select(ORMParkingLot).where(ORMParkingLot.parking_id == parking_id).order_by(ORMParkingLot.id)
        )
        return [_to_lot(lot) for lot in result.scalars().all()]

    async def get_available_lots(self, parking_id: Optional[int] = None) -> List[ParkingLot]:
        query = select(ORMParkingLot).where(ORMParkingLot.is_occupied == False)  # noqa: E712
        if parking_id is not None:
            query = query.where(ORMParkingLot.parking_id == parking_id)
        result = await self.session.execute(query.order_by(ORMParkingLot.parking_id, ORMParkingLot.id))
        return [_to_lot(lot) for lot in result.scalars().all()]

    async def count_occupied(self, parking_id: int) -> int:
        result = await self.session.execute(
            select(func.count(ORMParkingLot.id)).where(
                and_(ORMParkingLot.parking_id == parking_id, ORMParkingLot.is_occupied == True)  # noqa: E712
            )
        )
        return result.scalar() or 0


class SQLAlchemyVehicleRepository(AbstractVehicleRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    def _user_conditions(self, user_id: int, search_key: Optional[str]):
        conditions = [ORMVehicle.user_id == user_id]
        if search_key:
            pattern = f"%{search_key}%"
            conditions.append(or_(ORMVehicle.plate.ilike(pattern), ORMVehicle.model.ilike(pattern)))
        return and_(*conditions)

    async def get_by_id(self, vehicle_id: int) -> Optional[Vehicle]:
        result = await self.session.execute(
            select(ORMVehicle).where(ORMVehicle.id == vehicle_id)
        )
        orm_vehicle = result.scalars().first()
        return _to_vehicle(orm_vehicle) if orm_vehicle else None

    async def get_by_plate(self, plate: str) -> Optional[Vehicle]:
        result = await self.session.execute(
            select(ORMVehicle).where(ORMVehicle.plate == plate.upper().strip())
        )
        orm_vehicle = result.scalars().first()
        return _to_vehicle(orm_vehicle) if orm_vehicle else None

    async def add(self, vehicle: Vehicle) -> Vehicle:
        orm_vehicle = ORMVehicle(
            user_id=vehicle.user_id,
            plate=vehicle.plate,
            model=vehicle.model,
            type=vehicle.type,
            size=vehicle.size,
            color=vehicle.color,
        )
        self.session.add(orm_vehicle)
        await self.session.flush()
        await self.session.refresh(orm_vehicle)
        return _to_vehicle(orm_vehicle)

    async def update(self, vehicle: Vehicle) -> Vehicle:
        orm_vehicle = await self.session.get(ORMVehicle, vehicle.id)
        if orm_vehicle:
            orm_vehicle.plate = vehicle.plate
            orm_vehicle.model = vehicle.model
            orm_vehicle.type = vehicle.type
            orm_vehicle.size = vehicle.size
            orm_vehicle.color = vehicle.color
            await self.session.flush()
            await self.session.refresh(orm_vehicle)
            return _to_vehicle(orm_vehicle)
        raise ValueError(f"Vehicle with ID {vehicle.id} not found.")

    async def delete(self, vehicle_id: int) -> None:
        await self.session.execute(delete(ORMVehicle).where(ORMVehicle.id == vehicle_id))

    async def list_by_user(self, user_id: int, offset: int, limit: int, search_key: Optional[str] = None) -> List[Vehicle]:
        result = await self.session.execute(
            select(ORMVehicle)
            .where(self._user_conditions(user_id, search_key))
            .order_by(ORMVehicle.id)
            .offset(offset)
            .limit(limit)
        )
        return [_to_vehicle(v) for v in result.scalars().all()]

    async def count_by_user(self, user_id: int, search_key: Optional[str] = None) -> int:
        result = await self.session.execute(
            select(func.count(ORMVehicle.id)).where(self._user_conditions(user_id, search_key))
        )
        return result.scalar() or 0


class SQLAlchemyParkingSessionRepository(AbstractParkingSessionRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, session: ParkingSession) -> ParkingSession:
        orm_session = ORMParkingSession(
            vehicle_id=session.vehicle_id,
            parking_id=session.parking_id,
            parking_lot_id=session.parking_lot_id,
            user_id=session.user_id,
            status=session.status.value,
            entry_time=session.entry_time,
        )
        self.session.add(orm_session)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # uq_sessions_active_vehicle: another start for this vehicle committed first
            raise ConflictError("Vehicle already has an active parking session") from e
        await self.session.refresh(orm_session)
        return _to_session(orm_session)

    async def get_by_id(self, session_id: int) -> Optional[ParkingSession]:
        result = await self.session.execute(
            select(ORMParkingSession)
            .where(ORMParkingSession.id == session_id)
            .execution_options(populate_existing=True)
        )
        orm_session = result.scalars().first()
        return _to_session(orm_session) if orm_session else None

    async def get_active_by_vehicle(self, vehicle_id: int) -> Optional[ParkingSession]:
        result = await self.session.execute(
            select(ORMParkingSession).where(
                and_(
                    ORMParkingSession.vehicle_id == vehicle_id,
                    ORMParkingSession.status == SessionStatus.ACTIVE.value,
                )
            ).order_by(ORMParkingSession.entry_time.desc())
        )
        orm_session = result.scalars().first()
        return _to_session(orm_session) if orm_session else None

    async def complete(self, session: ParkingSession) -> Optional[ParkingSession]:
        result = await self.session.execute(
            update(ORMParkingSession)
            .where(and_(
                ORMParkingSession.id == session.id,
                ORMParkingSession.status == SessionStatus.ACTIVE.value,
            ))
            .values(
                status=SessionStatus.COMPLETED.value,
                exit_time=session.exit_time,
                duration_minutes=session.duration_minutes,
                total_amount=session.total_amount,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.get_by_id(session.id)

    async def get_active_sessions(self) -> List[ParkingSession]:
        result = await self.session.execute(
            select(ORMParkingSession)
            .where(ORMParkingSession.status == SessionStatus.ACTIVE.value)
            .order_by(ORMParkingSession.entry_time.desc(), ORMParkingSession.id.desc())
        )
        return [_to_session(s) for s in result.scalars().all()]

    async def get_by_parking(
        self,
        parking_id: int,
        status: Optional[SessionStatus] = None,
        entered_from: Optional[datetime] = None,
        entered_before: Optional[datetime] = None,
    ) -> List[ParkingSession]:
        conditions = [ORMParkingSession.parking_id == parking_id]
        if status is not None:
            conditions.append(ORMParkingSession.status == status.value)
        if entered_from is not None:
            conditions.append(ORMParkingSession.entry_time >= entered_from)
        if entered_before is not None:
            conditions.append(ORMParkingSession.entry_time < entered_before)

        result = await self.session.execute(
            select(ORMParkingSession)
            .where(and_(*conditions))
            .order_by(ORMParkingSession.entry_time.desc(), ORMParkingSession.id.desc())
        )
        return [_to_session(s) for s in result.scalars().all()]


class SQLAlchemyTicketRepository(AbstractTicketRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, ticket: Ticket) -> Ticket:
        orm_ticket = ORMTicket(session_id=ticket.session_id)
        if ticket.created_at is not None:
            orm_ticket.created_at = ticket.created_at
        self.session.add(orm_ticket)
        await self.session.flush()
        await self.session.refresh(orm_ticket)
        return _to_ticket(orm_ticket)

    async def get_by_session(self, session_id: int) -> Optional[Ticket]:
        result = await self.session.execute(
            select(ORMTicket).where(ORMTicket.session_id == session_id)
        )
        orm_ticket = result.scalars().first()
        return _to_ticket(orm_ticket) if orm_ticket else None


class SQLAlchemyBillRepository(AbstractBillRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, bill: Bill) -> Bill:
        orm_bill = ORMBill(
            session_id=bill.session_id,
            user_id=bill.user_id,
            vehicle_id=bill.vehicle_id,
            parking_id=bill.parking_id,
            total_amount=bill.total_amount,
            status=bill.status.value,
        )
        if bill.created_at is not None:
            orm_bill.created_at = bill.created_at
        self.session.add(orm_bill)
        await self.session.flush()
        await self.session.refresh(orm_bill)
        return _to_bill(orm_bill)

    async def get_by_session(self, session_id: int) -> Optional[Bill]:
        result = await self.session.execute(
            select(ORMBill).where(ORMBill.session_id == session_id)
        )
        orm_bill = result.scalars().first()
        return _to_bill(orm_bill) if orm_bill else None
