from datetime import datetime, timezone
import pytest
from pydantic import ValidationError

from pms.infrastructure.api.schemas.common import ApiResponse, PageMeta
from pms.infrastructure.api.schemas.parking import ParkingCreate, ParkingUpdate, ParkingResponse
from pms.infrastructure.api.schemas.vehicle import VehicleCreate, VehicleResponse
from pms.infrastructure.api.schemas.session import SessionStart, ParkingSessionResponse, BillResponse
from pms.domain.common import ParkingStatus, SessionStatus, PaymentStatus, VehicleType, VehicleSize
from pms.domain.entities import Parking, ParkingSession


def test_parking_status_enum():
    assert ParkingStatus.AVAILABLE == "available"
    assert ParkingStatus.MAINTENANCE == "maintenance"
    assert ParkingStatus.FULL == "full"


def test_session_and_payment_status_enums():
    assert SessionStatus.ACTIVE == "ACTIVE"
    assert SessionStatus.COMPLETED == "COMPLETED"
    assert PaymentStatus.PENDING == "PENDING"
    assert PaymentStatus.PAID == "PAID"
    assert PaymentStatus.CANCELLED == "CANCELLED"


def test_parking_create_accepts_camel_case():
    data = ParkingCreate.model_validate({"parkingCode": " P9 ", "totalSpaces": 4, "feePerHour": 75})
    assert data.parking_code == "P9"
    assert data.total_spaces == 4
    assert data.fee_per_hour == 75
    assert data.name is None
    assert data.status is None


def test_parking_create_requires_positive_spaces():
    with pytest.raises(ValidationError):
        ParkingCreate.model_validate({"parkingCode": "P9", "totalSpaces": 0})
    with pytest.raises(ValidationError):
        ParkingCreate.model_validate({"parkingCode": "P9"})


def test_parking_create_rejects_blank_code_and_bad_fee():
    with pytest.raises(ValidationError):
        ParkingCreate.model_validate({"parkingCode": "   ", "totalSpaces": 2})
    with pytest.raises(ValidationError):
        ParkingCreate.model_validate({"parkingCode": "P9", "totalSpaces": 2, "feePerHour": 0})


def test_parking_create_rejects_unknown_status():
    with pytest.raises(ValidationError):
        ParkingCreate.model_validate({"parkingCode": "P9", "totalSpaces": 2, "status": "closed"})


def test_parking_update_all_optional():
    data = ParkingUpdate.model_validate({})
    assert data.parking_code is None
    assert data.status is None


def test_parking_response_from_entity_dumps_camel_case():
    parking = Parking(
        id=1, parking_code="P1", name="Downtown", location="Main street",
        total_spaces=3, available_spaces=2, fee_per_hour=100.0,
    )
    dumped = ParkingResponse.model_validate(parking).model_dump(by_alias=True)
    assert dumped["parkingCode"] == "P1"
    assert dumped["availableSpaces"] == 2
    assert dumped["status"] == ParkingStatus.AVAILABLE


def test_vehicle_create_normalizes_plate():
    vehicle = VehicleCreate.model_validate({"plate": " abc-123 ", "type": "suv", "size": "large"})
    assert vehicle.plate == "ABC-123"
    assert vehicle.type == VehicleType.SUV
    assert vehicle.size == VehicleSize.LARGE


def test_vehicle_create_validation():
    with pytest.raises(ValidationError):
        VehicleCreate.model_validate({"plate": ""})
    with pytest.raises(ValidationError):
        VehicleCreate.model_validate({"plate": "a" * 21})
    with pytest.raises(ValidationError):
        VehicleCreate.model_validate({"plate": "ABC", "type": "bicycle"})
    with pytest.raises(ValidationError):
        VehicleCreate.model_validate({"plate": "ABC", "size": "huge"})


def test_vehicle_response_makes_created_at_aware():
    naive = datetime(2024, 1, 1, 12, 0, 0)
    vehicle = VehicleResponse(id=1, user_id=2, plate="ABC", created_at=naive)
    assert vehicle.created_at.tzinfo == timezone.utc


def test_session_start_requires_positive_ids():
    data = SessionStart.model_validate({"vehicleId": 1, "parkingId": 2})
    assert data.user_id is None
    with pytest.raises(ValidationError):
        SessionStart.model_validate({"vehicleId": 0, "parkingId": 2})
    with pytest.raises(ValidationError):
        SessionStart.model_validate({"vehicleId": 1})
    with pytest.raises(ValidationError):
        SessionStart.model_validate({"vehicleId": "abc", "parkingId": 2})


def test_session_response_from_entity():
    entry = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)
    session = ParkingSession(id=4, vehicle_id=1, parking_id=2, parking_lot_id=3, entry_time=entry)
    response = ParkingSessionResponse.model_validate(session)
    assert response.status == SessionStatus.ACTIVE
    assert response.exit_time is None
    assert response.model_dump(by_alias=True)["parkingLotId"] == 3


def test_bill_response_status():
    bill = BillResponse(
        id=1, session_id=2, vehicle_id=3, parking_id=4, total_amount=0.0,
        status=PaymentStatus.PENDING, created_at=datetime.now(timezone.utc),
    )
    assert bill.status == "PENDING"


def test_api_response_envelope():
    meta = PageMeta(total=0, last_page=0, current_page=1, per_page=10)
    envelope = ApiResponse[PageMeta](success=True, message="ok", data=meta)
    dumped = envelope.model_dump(by_alias=True)
    assert dumped["success"] is True
    assert dumped["data"]["lastPage"] == 0
    assert dumped["data"]["searchKey"] is None
