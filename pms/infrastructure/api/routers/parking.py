from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from pms.application.services.facility_service import FacilityService
from pms.config.settings_env import settings
from pms.infrastructure.api.dependencies import get_facility_service
from pms.infrastructure.api.schemas.common import ApiResponse, PageMeta, ok
from pms.infrastructure.api.schemas.parking import (
    ParkingCreate, ParkingUpdate, ParkingResponse, ParkingLotResponse,
    ParkingWithLotsResponse, ParkingListResponse,
)

router = APIRouter(prefix="/api/parking", tags=["parkings"])


def _with_lots(result) -> ParkingWithLotsResponse:
    return ParkingWithLotsResponse(
        **ParkingResponse.model_validate(result.parking).model_dump(),
        parking_lots=[ParkingLotResponse.model_validate(lot) for lot in result.lots],
    )


@router.post("/create", response_model=ApiResponse[ParkingWithLotsResponse])
async def create_parking(
    parking_data: ParkingCreate,
    service: FacilityService = Depends(get_facility_service),
):
    result = await service.create_facility(
        parking_code=parking_data.parking_code,
        total_spaces=parking_data.total_spaces,
        name=parking_data.name,
        location=parking_data.location,
        fee_per_hour=parking_data.fee_per_hour,
        status=parking_data.status,
    )
    return ok("Parking created successfully", _with_lots(result))


@router.get("/all", response_model=ApiResponse[ParkingListResponse])
async def get_all_parkings(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search_key: Optional[str] = Query(None, alias="searchKey"),
    searchkey: Optional[str] = Query(None, include_in_schema=False),
    service: FacilityService = Depends(get_facility_service),
):
    result = await service.list_facilities(page=page, limit=limit, search_key=search_key or searchkey)
    return ok("Parkings fetched", ParkingListResponse(
        parkings=[ParkingResponse.model_validate(p) for p in result.parkings],
        meta=PageMeta(**result.meta, search_key=result.search_key),
    ))


@router.get("/available-lots", response_model=ApiResponse[List[ParkingLotResponse]])
async def get_available_parking_lots(
    parking_id: Optional[int] = Query(None, alias="parkingId", ge=1),
    service: FacilityService = Depends(get_facility_service),
):
    lots = await service.list_available_lots(parking_id)
    return ok("Available parking lots retrieved", [ParkingLotResponse.model_validate(lot) for lot in lots])


@router.get("/{parking_id}/lots", response_model=ApiResponse[ParkingWithLotsResponse])
async def get_parking_with_lots(
    parking_id: int,
    service: FacilityService = Depends(get_facility_service),
):
    result = await service.get_facility_with_lots(parking_id)
    return ok("Parking with lots retrieved", _with_lots(result))


@router.put("/{parking_id}", response_model=ApiResponse[ParkingResponse])
async def update_parking(
    parking_id: int,
    parking_data: ParkingUpdate,
    service: FacilityService = Depends(get_facility_service),
):
    parking = await service.update_facility(
        parking_id,
        parking_code=parking_data.parking_code,
        name=parking_data.name,
        location=parking_data.location,
        fee_per_hour=parking_data.fee_per_hour,
        status=parking_data.status,
    )
    return ok("Parking updated successfully", ParkingResponse.model_validate(parking))


@router.delete("/{parking_id}", response_model=ApiResponse[None])
async def delete_parking(
    parking_id: int,
    service: FacilityService = Depends(get_facility_service),
):
    await service.delete_facility(parking_id)
    return ok("Parking and all associated lots deleted successfully")
