from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from pms.domain.exceptions import ParkingError
from pms.infrastructure.api.routers import parking, vehicle, parking_session
from pms.infrastructure.api.schemas.common import failed, ok
from pms.infrastructure.persistence.database import create_tables


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    yield


async def parking_error_handler(request: Request, exc: ParkingError):
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=failed(exc.message))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=failed("Invalid request", jsonable_encoder(exc.errors())),
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=failed("Internal server error"))


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(title="Parking Management API", lifespan=lifespan if with_lifespan else None)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ParkingError, parking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(parking.router)
    app.include_router(vehicle.router)
    app.include_router(parking_session.router)

    @app.get("/health")
    async def health():
        return ok("Server is running")

    return app
