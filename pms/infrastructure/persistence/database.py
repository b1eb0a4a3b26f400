from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import create_engine
from loguru import logger

from pms.config.settings_env import settings
from pms.infrastructure.persistence.models.models import Base
from pms.infrastructure.persistence.unit_of_work import SQLAlchemyUnitOfWork

DATABASE_URL = settings.DATABASE_URL
ASYNC_DATABASE_URL = settings.ASYNC_DATABASE_URL

# Sync engine for initialization
engine = create_engine(DATABASE_URL, connect_args={
                       "check_same_thread": False} if "sqlite" in DATABASE_URL else {})

# Async engine for application
async_engine = create_async_engine(ASYNC_DATABASE_URL, echo=False)
AsyncSessionLocal = async_sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False)


def get_unit_of_work() -> SQLAlchemyUnitOfWork:
    return SQLAlchemyUnitOfWork(AsyncSessionLocal)


async def create_tables(target_engine=None):
    async with (target_engine or async_engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def init_db():
    logger.info(f"Initializing database at: {DATABASE_URL}")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Tables created")
