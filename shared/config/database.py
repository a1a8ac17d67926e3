from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from shared.config.settings import Settings, get_settings

# Each service keeps its tables in its own Postgres schema
SERVICE_SCHEMAS = ("order_schema", "notification_schema")

Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    if settings.is_sqlite:
        # SQLite has no schemas; an in-memory database must share one connection
        return create_async_engine(
            settings.database_url,
            echo=settings.sql_echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            execution_options={"schema_translate_map": {name: None for name in SERVICE_SCHEMAS}},
        )
    return create_async_engine(settings.database_url, echo=settings.sql_echo)


engine = build_engine(get_settings())

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(schema: str, db_engine: AsyncEngine = engine) -> None:
    """Create the service schema (Postgres only) and every registered table."""
    async with db_engine.begin() as conn:
        if conn.dialect.name == "postgresql":
            await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))
        await conn.run_sync(Base.metadata.create_all)
