"""Run the parking management API."""
import uvicorn

from pms.config.settings_env import settings
from pms.infrastructure.api.app import create_app
from pms.shared.utils import logger

app = create_app()


def main():
    logger.info(f"Starting API on {settings.FASTAPI_HOST}:{settings.FASTAPI_PORT}")
    uvicorn.run(app, host=settings.FASTAPI_HOST, port=settings.FASTAPI_PORT)


if __name__ == "__main__":
    main()
