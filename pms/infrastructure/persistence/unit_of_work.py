from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pms.application.repositories import AbstractUnitOfWork
from pms.domain.exceptions import StorageError
from pms.infrastructure.persistence.sqlalchemy_repositories import (
    SQLAlchemyParkingRepository,
    SQLAlchemyParkingLotRepository,
    SQLAlchemyVehicleRepository,
    SQLAlchemyParkingSessionRepository,
    SQLAlchemyTicketRepository,
    SQLAlchemyBillRepository,
)


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """Runs the repositories inside a single ``AsyncSession`` transaction.

    A fresh session is opened on every ``async with``, so one instance can be
    reused for consecutive transactions but not nested ones.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.parkings = SQLAlchemyParkingRepository(self.session)
        self.lots = SQLAlchemyParkingLotRepository(self.session)
        self.vehicles = SQLAlchemyVehicleRepository(self.session)
        self.sessions = SQLAlchemyParkingSessionRepository(self.session)
        self.tickets = SQLAlchemyTicketRepository(self.session)
        self.bills = SQLAlchemyBillRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            await self.session.close()
            self.session = None

        if isinstance(exc_val, SQLAlchemyError):
            logger.error(f"Transaction rolled back: {exc_val}")
            raise StorageError("The operation could not be saved") from exc_val

    async def commit(self):
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Commit failed: {e}")
            raise StorageError("The operation could not be saved") from e

    async def rollback(self):
        await self.session.rollback()
