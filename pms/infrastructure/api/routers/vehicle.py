from typing import Optional

from fastapi import APIRouter, Depends, Query

from pms.application.services.vehicle_service import VehicleService
from pms.config.settings_env import settings
from pms.infrastructure.api.dependencies import get_vehicle_service, require_user_id
from pms.infrastructure.api.schemas.common import ApiResponse, PageMeta, ok
from pms.infrastructure.api.schemas.vehicle import (
    VehicleCreate, VehicleUpdate, VehicleResponse, VehicleListResponse,
)

router = APIRouter(prefix="/api/vehicle", tags=["vehicles"])


def _enum_value(value):
    return value.value if value is not None else None


@router.post("/create", response_model=ApiResponse[VehicleResponse])
async def create_vehicle(
    vehicle_data: VehicleCreate,
    user_id: int = Depends(require_user_id),
    service: VehicleService = Depends(get_vehicle_service),
):
    vehicle = await service.register_vehicle(
        user_id,
        plate=vehicle_data.plate,
        model=vehicle_data.model,
        type=_enum_value(vehicle_data.type),
        size=_enum_value(vehicle_data.size),
        color=vehicle_data.color,
    )
    return ok("Vehicle registered", VehicleResponse.model_validate(vehicle))


@router.get("/all", response_model=ApiResponse[VehicleListResponse])
async def get_my_vehicles(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search_key: Optional[str] = Query(None, alias="searchKey"),
    searchkey: Optional[str] = Query(None, include_in_schema=False),
    user_id: int = Depends(require_user_id),
    service: VehicleService = Depends(get_vehicle_service),
):
    result = await service.list_vehicles(user_id, page=page, limit=limit, search_key=search_key or searchkey)
    return ok("Vehicles fetched", VehicleListResponse(
        vehicles=[VehicleResponse.model_validate(v) for v in result.vehicles],
        meta=PageMeta(**result.meta, search_key=result.search_key),
    ))


@router.put("/{vehicle_id}", response_model=ApiResponse[VehicleResponse])
async def update_vehicle(
    vehicle_id: int,
    vehicle_data: VehicleUpdate,
    user_id: int = Depends(require_user_id),
    service: VehicleService = Depends(get_vehicle_service),
):
    vehicle = await service.update_vehicle(
        user_id,
        vehicle_id,
        plate=vehicle_data.plate,
        model=vehicle_data.model,
        type=_enum_value(vehicle_data.type),
        size=_enum_value(vehicle_data.size),
        color=vehicle_data.color,
    )
    return ok("Vehicle updated successfully", VehicleResponse.model_validate(vehicle))


@router.delete("/{vehicle_id}", response_model=ApiResponse[None])
async def delete_vehicle(
    vehicle_id: int,
    user_id: int = Depends(require_user_id),
    service: VehicleService = Depends(get_vehicle_service),
):
    await service.delete_vehicle(user_id, vehicle_id)
    return ok("Vehicle deleted")
