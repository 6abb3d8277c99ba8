"""
Company Database Initialization Script.

Creates the tables of the company auth service (currently ``companies``) in the
database configured by DATABASE_URL, or by the POSTGRES_* variables when
DATABASE_URL is empty. Existing tables are left untouched.

**Example Usage:**
    ```bash
    python scripts/init_db.py

    # Drop and recreate (destroys stored provider tokens; every company must reinstall)
    python scripts/init_db.py --recreate
    ```

**Error Handling:**
    - Exits with code 0 on success
    - Exits with code 1 on failure (connection or SQL errors)

**Logging:**
    - Console output: INFO level with timestamps
    - File output: logs/init_db.log (rotates at 500 MB)
"""

import asyncio
from pathlib import Path
import sys

from dotenv import load_dotenv
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

# Add the project's root directory to the Python path
sys.path.append(str(Path(__file__).parent.parent.resolve()))

from common.config import get_settings
from common.database import Base, create_async_engine_from_settings
import common.models  # noqa: F401  registers the ORM tables on Base.metadata


async def init_db(recreate: bool = False) -> None:
    settings = get_settings("company-auth-service")
    engine = create_async_engine_from_settings(settings)
    try:
        async with engine.begin() as conn:
            if recreate:
                logger.warning("Dropping existing tables")
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"✓ Tables ready: {', '.join(sorted(Base.metadata.tables))}")
    finally:
        await engine.dispose()


async def main() -> None:
    recreate = "--recreate" in sys.argv[1:]
    try:
        await init_db(recreate=recreate)
    except (SQLAlchemyError, ValueError, OSError) as e:
        logger.error(f"✗ Error during initialization: {e}")
        sys.exit(1)


if __name__ == "__main__":
    logger.add("logs/init_db.log", rotation="500 MB")  # For logging to a file

    asyncio.run(main())
