"""Seed database: create tables, the company row and validate pricing tables."""

import asyncio

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

import src.models  # noqa: F401  (registers every table on Base.metadata)
from src.config import settings
from src.models.base import Base
from src.pricing.tables import PRICING_TABLES, validate_table
from src.repositories.sql import SqlCrmRepository


async def seed():
    """Create the schema and the configured company."""
    for sku, table in PRICING_TABLES.items():
        validate_table(table)
        print(f"  + Pricing table OK: {sku} ({len(table.tiers)} tiers)")

    engine = create_async_engine(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        company = await SqlCrmRepository(session).get_or_create_company(settings.company_name)
        print(f"  + Company: {company.name} ({company.id})")

    await engine.dispose()
    print("\nSeed completed!")


if __name__ == "__main__":
    asyncio.run(seed())
