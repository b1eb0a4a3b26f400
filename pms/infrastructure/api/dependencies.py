from typing import Optional

from fastapi import Depends, Header

from pms.application.repositories import AbstractUnitOfWork
from pms.application.services.facility_service import FacilityService
from pms.application.services.parking_session_service import ParkingSessionService
from pms.application.services.vehicle_service import VehicleService
from pms.domain.exceptions import PermissionDeniedError
from pms.infrastructure.persistence.database import get_unit_of_work


def get_facility_service(uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> FacilityService:
    return FacilityService(uow)


def get_vehicle_service(uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> VehicleService:
    return VehicleService(uow)


def get_parking_session_service(uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> ParkingSessionService:
    return ParkingSessionService(uow)


# Authentication happens upstream; the gateway forwards the caller's id.
def get_current_user_id(x_user_id: Optional[int] = Header(default=None, gt=0)) -> Optional[int]:
    return x_user_id


def require_user_id(user_id: Optional[int] = Depends(get_current_user_id)) -> int:
    if user_id is None:
        raise PermissionDeniedError("You are not logged in")
    return user_id
