from .abstract_repositories import (
    AbstractParkingRepository,
    AbstractParkingLotRepository,
    AbstractVehicleRepository,
    AbstractParkingSessionRepository,
    AbstractTicketRepository,
    AbstractBillRepository,
    AbstractUnitOfWork,
)

__all__ = [
    "AbstractParkingRepository",
    "AbstractParkingLotRepository",
    "AbstractVehicleRepository",
    "AbstractParkingSessionRepository",
    "AbstractTicketRepository",
    "AbstractBillRepository",
    "AbstractUnitOfWork",
]
