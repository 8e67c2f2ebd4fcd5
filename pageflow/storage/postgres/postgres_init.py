from loguru import logger
from tortoise import Tortoise

from pageflow.storage.models import MODEL_MODULES
from pageflow.utils.config_loader import Config
from pageflow.utils.db_utils import redact_url, to_tortoise_url


async def init_db(config: Config) -> None:
    """
    Connect Tortoise to the configured database and create/verify tables.
    """
    db_url = to_tortoise_url(config.database_url)

    logger.info(f"Initializing database {redact_url(db_url)} and ORM models...")

    await Tortoise.init(
        db_url=db_url,
        modules={"models": MODEL_MODULES},
    )

    await Tortoise.generate_schemas(safe=True)
    logger.info("Workflow tables created or verified.")


async def close_db() -> None:
    await Tortoise.close_connections()
    logger.info("Database connections closed.")
