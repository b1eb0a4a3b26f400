"""Initialize the parking database."""
from pms.infrastructure.persistence.database import init_db
from pms.shared.utils import logger


def main():
    logger.info("Initializing parking database...")
    init_db()
    logger.info("Database initialization complete!")


if __name__ == "__main__":
    main()
