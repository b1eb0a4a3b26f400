from datetime import datetime, timezone
from pms.domain.entities import Parking, ParkingLot, Vehicle, ParkingSession, Ticket, Bill
from pms.domain.common import ParkingStatus, SessionStatus, PaymentStatus


def test_parking_creation_defaults():
    parking = Parking(
        parking_code="P1", name="Downtown", location="Main street",
        total_spaces=10, available_spaces=10, fee_per_hour=100.0,
    )
    assert parking.id is None
    assert parking.status == ParkingStatus.AVAILABLE
    assert parking.is_under_maintenance is False


def test_parking_under_maintenance():
    parking = Parking(
        parking_code="P2", name="Harbour", location="Dock 4",
        total_spaces=5, available_spaces=5, fee_per_hour=50.0,
        status=ParkingStatus.MAINTENANCE,
    )
    assert parking.is_under_maintenance is True


def test_parking_lot_defaults_to_free():
    lot = ParkingLot(parking_id=1, lot_number="P1-1")
    assert lot.is_occupied is False
    assert lot.id is None


def test_vehicle_optional_attributes():
    vehicle = Vehicle(user_id=3, plate="ABC123")
    assert vehicle.model is None
    assert vehicle.type is None
    assert vehicle.size is None
    assert vehicle.color is None


def test_parking_session_starts_active():
    entry = datetime.now(timezone.utc)
    session = ParkingSession(vehicle_id=1, parking_id=2, parking_lot_id=3, entry_time=entry)
    assert session.status == SessionStatus.ACTIVE
    assert session.is_active is True
    assert session.exit_time is None
    assert session.duration_minutes is None
    assert session.total_amount is None


def test_completed_session_is_not_active():
    entry = datetime.now(timezone.utc)
    session = ParkingSession(
        vehicle_id=1, parking_id=2, parking_lot_id=3, entry_time=entry,
        status=SessionStatus.COMPLETED, exit_time=entry, duration_minutes=0, total_amount=0.0,
    )
    assert session.is_active is False


def test_ticket_and_bill():
    ticket = Ticket(session_id=9)
    bill = Bill(session_id=9, vehicle_id=1, parking_id=2, total_amount=12.5)
    assert ticket.session_id == 9
    assert bill.status == PaymentStatus.PENDING
    assert bill.user_id is None
