"""
Initialize database schema
Creates the email_signups table
"""
import sys
import os

# Add parent directory to path to import backend modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import logger
from core.database import Base, init_db


def init_database():
    """Create all tables in the database"""
    logger.info("Creating tables...")

    try:
        init_db()
        logger.info("Tables created: " + ", ".join(sorted(Base.metadata.tables)))
    except Exception as e:
        logger.error(f"Error creating tables: {e}")
        sys.exit(1)


if __name__ == "__main__":
    init_database()
