from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, CheckConstraint, Index, UniqueConstraint, text
from sqlalchemy.orm import declarative_base, relationship

from pms.shared.custom_types import UTCDateTime

Base = declarative_base()


def _now():
    return datetime.now(timezone.utc)


class Parking(Base):
    __tablename__ = "parkings"
    __table_args__ = (
        CheckConstraint("total_spaces > 0", name="ck_parkings_total_positive"),
        CheckConstraint(
            "available_spaces >= 0 AND available_spaces <= total_spaces",
            name="ck_parkings_available_in_range",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    parking_code = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    location = Column(String, nullable=False)
    total_spaces = Column(Integer, nullable=False)
    available_spaces = Column(Integer, nullable=False)
    fee_per_hour = Column(Float, nullable=False)
    status = Column(String, default="available", nullable=False)  # available, maintenance, full
    created_at = Column(UTCDateTime, default=_now)
    updated_at = Column(UTCDateTime, default=_now, onupdate=_now)

    parking_lots = relationship(
        "ParkingLot", back_populates="parking", cascade="all, delete-orphan", order_by="ParkingLot.id"
    )
    parking_sessions = relationship("ParkingSession", back_populates="parking", cascade="all, delete-orphan")


class ParkingLot(Base):
    __tablename__ = "parking_lots"
    __table_args__ = (UniqueConstraint("parking_id", "lot_number", name="uq_lots_parking_number"),)

    id = Column(Integer, primary_key=True, index=True)
    parking_id = Column(Integer, ForeignKey("parkings.id", ondelete="CASCADE"), nullable=False, index=True)
    lot_number = Column(String, nullable=False)
    is_occupied = Column(Boolean, default=False, nullable=False)

    parking = relationship("Parking", back_populates="parking_lots")
    parking_sessions = relationship("ParkingSession", back_populates="parking_lot")


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    plate = Column(String, unique=True, index=True, nullable=False)
    model = Column(String, nullable=True)
    type = Column(String, nullable=True)  # car, motorcycle, truck, van, suv
    size = Column(String, nullable=True)  # small, medium, large
    color = Column(String, nullable=True)
    created_at = Column(UTCDateTime, default=_now)

    parking_sessions = relationship("ParkingSession", back_populates="vehicle")


class ParkingSession(Base):
    __tablename__ = "parking_sessions"
    __table_args__ = (
        CheckConstraint("duration_minutes IS NULL OR duration_minutes >= 0", name="ck_sessions_duration"),
        CheckConstraint("total_amount IS NULL OR total_amount >= 0", name="ck_sessions_amount"),
        # At most one ACTIVE session per vehicle
        Index(
            "uq_sessions_active_vehicle",
            "vehicle_id",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    parking_id = Column(Integer, ForeignKey("parkings.id", ondelete="CASCADE"), nullable=False, index=True)
    parking_lot_id = Column(Integer, ForeignKey("parking_lots.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=True)
    status = Column(String, default="ACTIVE", nullable=False)  # ACTIVE, COMPLETED
    entry_time = Column(UTCDateTime, default=_now, nullable=False)
    exit_time = Column(UTCDateTime, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    total_amount = Column(Float, nullable=True)

    vehicle = relationship("Vehicle", back_populates="parking_sessions")
    parking = relationship("Parking", back_populates="parking_sessions")
    parking_lot = relationship("ParkingLot", back_populates="parking_sessions")
    ticket = relationship("Ticket", back_populates="session", uselist=False, cascade="all, delete-orphan")
    bill = relationship("Bill", back_populates="session", uselist=False, cascade="all, delete-orphan")


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("parking_sessions.id", ondelete="CASCADE"), unique=True, nullable=False)
    created_at = Column(UTCDateTime, default=_now, nullable=False)

    session = relationship("ParkingSession", back_populates="ticket")


class Bill(Base):
    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("parking_sessions.id", ondelete="CASCADE"), unique=True, nullable=False)
    user_id = Column(Integer, nullable=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    parking_id = Column(Integer, ForeignKey("parkings.id", ondelete="CASCADE"), nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(String, default="PENDING", nullable=False)  # PENDING, PAID, CANCELLED
    created_at = Column(UTCDateTime, default=_now, nullable=False)

    session = relationship("ParkingSession", back_populates="bill")
