from portfolio_api.db import create_db_and_tables
from portfolio_api.core.config import settings

if __name__ == "__main__":
    print(f"Creating tables in {settings.DATABASE_URL.split('@')[-1]}...")
    create_db_and_tables()
    print("Tables created successfully!")
