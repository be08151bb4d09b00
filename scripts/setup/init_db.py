# scripts/setup/init_db.py
"""
Initialize the SQL store database - creates all tables.
Only needed with STORE_BACKEND=sql; the managed backend owns its own schema.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from parkdesk.database import Base, create_tables, get_engine
from parkdesk.config import settings
from sqlalchemy import text


def main():
    print("Parkdesk DB Initialization")
    print("=" * 40)
    print(f"Database: {settings.DATABASE_URL}")

    engine = get_engine()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print(f"Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  sudo systemctl start postgresql")
        sys.exit(1)

    print("\nCreating tables...")
    create_tables(engine)

    tables = sorted(Base.metadata.tables)
    print(f"\nTables ({len(tables)} total):")
    for t in tables:
        print(f"   - {t}")

    print("\nDatabase ready! Start the backend with STORE_BACKEND=sql:")
    print("   uvicorn parkdesk.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
