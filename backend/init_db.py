# init_db.py (in backend folder)

import logging

from sqlalchemy import inspect

from wastebin.config import get_settings
from wastebin.infra.database import build_engine, drop_db, init_db
from wastebin.utils.logger import setup_logger

logger = logging.getLogger("init_db")


def reset_db():
    """Drop and recreate all tables"""
    engine = build_engine(get_settings().database_url)
    drop_db(engine)
    init_db(engine)

    inspector = inspect(engine)
    for table in inspector.get_table_names():
        columns = ", ".join(f"{col['name']}: {col['type']}" for col in inspector.get_columns(table))
        logger.info("%s -> %s", table, columns)


if __name__ == "__main__":
    setup_logger()
    reset_db()
