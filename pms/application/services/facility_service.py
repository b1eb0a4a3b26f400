from typing import List, NamedTuple, Optional

from loguru import logger

from pms.application.repositories import AbstractUnitOfWork
from pms.config.settings_env import settings
from pms.domain.common import ParkingStatus
from pms.domain.entities import Parking, ParkingLot
from pms.domain.exceptions import ValidationError, NotFoundError, ConflictError
from pms.shared.pagination import PageMeta, paginate, page_offset


class ParkingPage(NamedTuple):
    parkings: List[Parking]
    meta: PageMeta
    search_key: Optional[str]


class ParkingWithLots(NamedTuple):
    parking: Parking
    lots: List[ParkingLot]


def lot_numbers_for(parking_code: str, total_spaces: int) -> List[str]:
    return [f"{parking_code}-{n}" for n in range(1, total_spaces + 1)]


def _admin_status(requested: ParkingStatus, available_spaces: int) -> ParkingStatus:
    """Only maintenance is set by hand; otherwise the status follows the free-space counter."""
    if requested == ParkingStatus.FULL:
        raise ValidationError("Status full is derived from available spaces and cannot be set")
    if requested == ParkingStatus.MAINTENANCE:
        return requested
    return ParkingStatus.AVAILABLE if available_spaces > 0 else ParkingStatus.FULL


class FacilityService:
    def __init__(self, uow: AbstractUnitOfWork):
        self.uow = uow

    async def create_facility(
        self,
        parking_code: str,
        total_spaces: int,
        name: Optional[str] = None,
        location: Optional[str] = None,
        fee_per_hour: Optional[float] = None,
        status: Optional[ParkingStatus] = None,
    ) -> ParkingWithLots:
        parking_code = (parking_code or "").strip()
        if not parking_code:
            raise ValidationError("parkingCode and totalSpaces are required")
        if not isinstance(total_spaces, int) or total_spaces < 1:
            raise ValidationError("totalSpaces must be a positive integer")
        if fee_per_hour is not None and fee_per_hour <= 0:
            raise ValidationError("feePerHour must be positive")
        if status is not None:
            status = _admin_status(status, total_spaces)

        async with self.uow as uow:
            if await uow.parkings.get_by_code(parking_code):
                raise ConflictError("Parking with this code already exists")

            parking = await uow.parkings.add(
                Parking(
                    parking_code=parking_code,
                    name=name or settings.DEFAULT_PARKING_NAME,
                    location=location or settings.DEFAULT_LOCATION,
                    total_spaces=total_spaces,
                    available_spaces=total_spaces,
                    fee_per_hour=fee_per_hour or settings.DEFAULT_FEE_PER_HOUR,
                    status=status or ParkingStatus.AVAILABLE,
                ),
                lot_numbers_for(parking_code, total_spaces),
            )
            lots = await uow.lots.get_by_parking(parking.id)

        logger.info(f"Parking {parking.parking_code} created with {len(lots)} lots")
        return ParkingWithLots(parking=parking, lots=lots)

    async def list_facilities(self, page: int = 1, limit: Optional[int] = None, search_key: Optional[str] = None) -> ParkingPage:
        limit = limit or settings.DEFAULT_PAGE_SIZE
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        search_key = (search_key or "").strip() or None

        async with self.uow as uow:
            parkings = await uow.parkings.search(page_offset(page, limit), limit, search_key)
            total = await uow.parkings.count(search_key)
        return ParkingPage(parkings=parkings, meta=paginate(page, limit, total), search_key=search_key)

    async def get_facility_with_lots(self, parking_id: int) -> ParkingWithLots:
        async with self.uow as uow:
            parking = await uow.parkings.get_by_id(parking_id)
            if not parking:
                raise NotFoundError("Parking not found")
            lots = await uow.lots.get_by_parking(parking_id)
        return ParkingWithLots(parking=parking, lots=lots)

    async def list_available_lots(self, parking_id: Optional[int] = None) -> List[ParkingLot]:
        async with self.uow as uow:
            return await uow.lots.get_available_lots(parking_id)

    async def update_facility(
        self,
        parking_id: int,
        parking_code: Optional[str] = None,
        name: Optional[str] = None,
        location: Optional[str] = None,
        fee_per_hour: Optional[float] = None,
        status: Optional[ParkingStatus] = None,
    ) -> Parking:
        if fee_per_hour is not None and fee_per_hour <= 0:
            raise ValidationError("feePerHour must be positive")

        async with self.uow as uow:
            parking = await uow.parkings.get_by_id(parking_id)
            if not parking:
                raise NotFoundError("Parking not found")

            if parking_code and parking_code != parking.parking_code:
                if await uow.parkings.get_by_code(parking_code):
                    raise ConflictError("Parking with this code already exists")
                parking.parking_code = parking_code
            if name is not None:
                parking.name = name
            if location is not None:
                parking.location = location
            if fee_per_hour is not None:
                parking.fee_per_hour = fee_per_hour
            if status is not None:
                parking.status = _admin_status(status, parking.available_spaces)

            parking = await uow.parkings.update(parking)

        logger.info(f"Parking {parking.id} updated")
        return parking

    async def delete_facility(self, parking_id: int) -> None:
        async with self.uow as uow:
            parking = await uow.parkings.get_by_id(parking_id)
            if not parking:
                raise NotFoundError("Parking not found")
            if await uow.lots.count_occupied(parking_id):
                raise ConflictError("Parking has active sessions and cannot be deleted")
            await uow.parkings.delete(parking_id)

        logger.info(f"Parking {parking.parking_code} and all associated lots deleted")
