from typing import List, NamedTuple, Optional

from loguru import logger

from pms.application.repositories import AbstractUnitOfWork
from pms.config.settings_env import settings
from pms.domain.entities import Vehicle
from pms.domain.exceptions import ValidationError, NotFoundError, ConflictError, PermissionDeniedError
from pms.shared.pagination import PageMeta, paginate, page_offset


class VehiclePage(NamedTuple):
    vehicles: List[Vehicle]
    meta: PageMeta
    search_key: Optional[str]


def normalize_plate(plate: Optional[str]) -> str:
    plate = (plate or "").upper().strip()
    if not plate:
        raise ValidationError("Plate is required")
    return plate


class VehicleService:
    def __init__(self, uow: AbstractUnitOfWork):
        self.uow = uow

    async def register_vehicle(
        self,
        user_id: int,
        plate: str,
        model: Optional[str] = None,
        type: Optional[str] = None,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Vehicle:
        plate = normalize_plate(plate)

        async with self.uow as uow:
            if await uow.vehicles.get_by_plate(plate):
                raise ConflictError("Plate number already exists")
            vehicle = await uow.vehicles.add(
                Vehicle(user_id=user_id, plate=plate, model=model, type=type, size=size, color=color)
            )

        logger.info(f"Vehicle {vehicle.plate} registered for user {user_id}")
        return vehicle

    async def list_vehicles(
        self, user_id: int, page: int = 1, limit: Optional[int] = None, search_key: Optional[str] = None
    ) -> VehiclePage:
        limit = limit or settings.DEFAULT_PAGE_SIZE
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        search_key = (search_key or "").strip() or None

        async with self.uow as uow:
            vehicles = await uow.vehicles.list_by_user(user_id, page_offset(page, limit), limit, search_key)
            total = await uow.vehicles.count_by_user(user_id, search_key)
        return VehiclePage(vehicles=vehicles, meta=paginate(page, limit, total), search_key=search_key)

    async def update_vehicle(
        self,
        user_id: int,
        vehicle_id: int,
        plate: str,
        model: Optional[str] = None,
        type: Optional[str] = None,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Vehicle:
        plate = normalize_plate(plate)

        async with self.uow as uow:
            vehicle = await uow.vehicles.get_by_id(vehicle_id)
            if not vehicle or vehicle.user_id != user_id:
                raise NotFoundError("Vehicle not found or does not belong to user")

            if plate != vehicle.plate and await uow.vehicles.get_by_plate(plate):
                raise ConflictError("Plate number already exists")

            vehicle.plate = plate
            vehicle.model = model or None
            vehicle.type = type or None
            vehicle.size = size or None
            vehicle.color = color or None
            vehicle = await uow.vehicles.update(vehicle)

        logger.info(f"Vehicle {vehicle.id} updated")
        return vehicle

    async def delete_vehicle(self, user_id: int, vehicle_id: int) -> None:
        async with self.uow as uow:
            vehicle = await uow.vehicles.get_by_id(vehicle_id)
            if not vehicle:
                raise NotFoundError("Vehicle not found")
            if vehicle.user_id != user_id:
                raise PermissionDeniedError("Not allowed to delete this vehicle")
            if await uow.sessions.get_active_by_vehicle(vehicle_id):
                raise ConflictError("Vehicle is currently parked and cannot be deleted")
            await uow.vehicles.delete(vehicle_id)

        logger.info(f"Vehicle {vehicle.plate} deleted")
