"""Database access layer.

Exposes the shared DatabaseAdapter as a FastAPI dependency. Tests override
get_db with an adapter bound to their own SQLite file.
"""
from config import settings
from database_adapter import DatabaseAdapter

db_adapter = DatabaseAdapter(settings)
db_adapter.init()


def get_db():
    """
    Dependency for FastAPI endpoints to get database adapter.

    Usage:
        @app.get("/example")
        def example(db = Depends(get_db)):
            result = db.table('users').select('*').execute()
            return result.data
    """
    return db_adapter
