import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import get_settings
from app.db.engine import create_engine
from app.db.schema import metadata
from app.utils.logging import configure_logging

logger = logging.getLogger(__name__)


async def create_schema(engine: AsyncEngine, drop: bool = True) -> None:
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)


async def _run() -> None:
    engine = create_engine()
    try:
        await create_schema(engine)
    finally:
        await engine.dispose()


def main():
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    asyncio.run(_run())
    logger.info("DB schema created.")

if __name__ == "__main__":
    main()
