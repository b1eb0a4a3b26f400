from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Development
    DEV_MODE: bool = Field(default=True, description="Enable debug mode")

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./parking.db", description="Database connection URL")
    ASYNC_DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./parking.db", description="Async database URL")

    # FastAPI
    FASTAPI_HOST: str = Field(default="localhost", description="FastAPI host")
    FASTAPI_PORT: int = Field(default=8080, description="FastAPI port")

    # Facility defaults
    DEFAULT_FEE_PER_HOUR: float = Field(default=100.0, gt=0, description="Hourly fee for facilities created without one")
    DEFAULT_PARKING_NAME: str = Field(default="Public Parking", description="Name for facilities created without one")
    DEFAULT_LOCATION: str = Field(default="Unknown location", description="Location for facilities created without one")

    # Listing
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1, description="Items per page when no limit is given")
    MAX_PAGE_SIZE: int = Field(default=100, ge=1, description="Upper bound for the limit query parameter")

    # Lot allocation
    LOT_CLAIM_ATTEMPTS: int = Field(default=3, ge=1, description="How many free lots to try before giving up")


# Create settings instance
settings = Settings()
