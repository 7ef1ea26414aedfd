"""Database entry points re-exported for models, alembic and the app lifespan."""

from src.platform.database.orm_db_setting import (
    Base,
    Database,
    create_db_and_tables,
    dispose_engine,
    get_async_session,
    get_engine,
    get_session_maker,
)

__all__ = [
    'Base',
    'Database',
    'create_db_and_tables',
    'dispose_engine',
    'get_async_session',
    'get_engine',
    'get_session_maker',
]
