from .sqlalchemy_repositories import (
    SQLAlchemyParkingRepository,
    SQLAlchemyParkingLotRepository,
    SQLAlchemyVehicleRepository,
    SQLAlchemyParkingSessionRepository,
    SQLAlchemyTicketRepository,
    SQLAlchemyBillRepository,
)

__all__ = [
    "SQLAlchemyParkingRepository",
    "SQLAlchemyParkingLotRepository",
    "SQLAlchemyVehicleRepository",
    "SQLAlchemyParkingSessionRepository",
    "SQLAlchemyTicketRepository",
    "SQLAlchemyBillRepository",
]
