"""Database engine lifecycle."""

from keyforge.db.session import close_db, create_engine, init_db

__all__ = ["close_db", "create_engine", "init_db"]
