from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from pms.application.services.parking_session_service import ParkingSessionService
from pms.domain.common import SessionStatus
from pms.infrastructure.api.dependencies import get_parking_session_service, get_current_user_id
from pms.infrastructure.api.schemas.common import ApiResponse, ok
from pms.infrastructure.api.schemas.session import (
    SessionStart, ParkingSessionResponse, TicketResponse, BillResponse,
    SessionStartedResponse, SessionEndedResponse, SessionDetailsResponse,
)

router = APIRouter(prefix="/api/parking-session", tags=["sessions"])


@router.post("/create", response_model=ApiResponse[SessionStartedResponse])
async def start_parking_session(
    session_data: SessionStart,
    caller_id: Optional[int] = Depends(get_current_user_id),
    service: ParkingSessionService = Depends(get_parking_session_service),
):
    started = await service.start_session(
        session_data.vehicle_id,
        session_data.parking_id,
        user_id=session_data.user_id or caller_id,
    )
    return ok("Parking session started successfully", SessionStartedResponse(
        session=ParkingSessionResponse.model_validate(started.session),
        ticket=TicketResponse.model_validate(started.ticket),
    ))


@router.get("/active", response_model=ApiResponse[List[ParkingSessionResponse]])
async def get_active_sessions(service: ParkingSessionService = Depends(get_parking_session_service)):
    sessions = await service.get_active_sessions()
    return ok("Active sessions retrieved", [ParkingSessionResponse.model_validate(s) for s in sessions])


@router.put("/{session_id}/end", response_model=ApiResponse[SessionEndedResponse])
async def end_parking_session(
    session_id: int,
    service: ParkingSessionService = Depends(get_parking_session_service),
):
    ended = await service.end_session(session_id)
    return ok("Parking session completed successfully", SessionEndedResponse(
        session=ParkingSessionResponse.model_validate(ended.session),
        bill=BillResponse.model_validate(ended.bill),
    ))


@router.get("/parking/{parking_id}", response_model=ApiResponse[List[ParkingSessionResponse]])
async def get_sessions_by_parking(
    parking_id: int,
    status: Optional[SessionStatus] = None,
    day: Optional[date] = Query(None, alias="date"),
    service: ParkingSessionService = Depends(get_parking_session_service),
):
    sessions = await service.get_sessions_by_parking(parking_id, status=status, day=day)
    return ok("Parking sessions retrieved", [ParkingSessionResponse.model_validate(s) for s in sessions])


@router.get("/{session_id}", response_model=ApiResponse[SessionDetailsResponse])
async def get_session_details(
    session_id: int,
    service: ParkingSessionService = Depends(get_parking_session_service),
):
    details = await service.get_session_details(session_id)
    return ok("Session details retrieved", SessionDetailsResponse(
        **ParkingSessionResponse.model_validate(details.session).model_dump(),
        ticket=TicketResponse.model_validate(details.ticket) if details.ticket else None,
        bill=BillResponse.model_validate(details.bill) if details.bill else None,
    ))
