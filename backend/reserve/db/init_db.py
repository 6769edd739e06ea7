"""
Database initialization script.
"""
from reserve.db.session import init_db

# Import all models so SQLAlchemy can register them
from reserve.models import (  # noqa: F401
    User, Deposit, RainyDayLog, Connection, CircleInvite,
    SharedDeposit, SharedDepositUsage
)

if __name__ == "__main__":
    print("Initializing database...")
    init_db()
    print("Database initialized successfully!")
