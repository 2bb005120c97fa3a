from .connection import Base, create_engine, create_session_factory, init_db, get_db

__all__ = [
    "Base",
    "create_engine",
    "create_session_factory",
    "init_db",
    "get_db",
]
