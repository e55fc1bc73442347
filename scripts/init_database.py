#!/usr/bin/env python3
"""Initialize ledger tables without migrations (local development)."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger

from affiliate_ledger.config.database import create_engine, init_models
from affiliate_ledger.config.settings import get_settings

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")


async def init_database() -> None:
    """Create all ledger tables."""
    settings = get_settings()

    logger.info("Connecting to database...")
    engine = create_engine(settings, null_pool=True)

    try:
        logger.info("Creating tables (checkfirst=True)...")
        await init_models(engine)
    finally:
        await engine.dispose()

    logger.success("Ledger tables created successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
