from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from leave_service.core.config import settings

# Support both PostgreSQL and SQLite via centralized settings
DATABASE_URL = settings.database_url
STORE_TIMEOUT = settings.store_timeout_seconds

if DATABASE_URL.startswith("postgresql"):
    # Bound every store call: connection setup and each statement
    engine = create_engine(
        DATABASE_URL,
        pool_timeout=STORE_TIMEOUT,
        pool_pre_ping=True,
        connect_args={
            "connect_timeout": max(1, int(STORE_TIMEOUT)),
            "options": f"-c statement_timeout={int(STORE_TIMEOUT * 1000)}",
        },
    )
else:
    # SQLite configuration for local development/testing.
    # "timeout" bounds how long a writer waits on the database lock.
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False, "timeout": STORE_TIMEOUT},
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the Service Layer.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """
    Registers all domain models and initializes the database schema.
    This should be called during the application startup lifespan.
    """
    # Import all models to ensure they are registered with Base.metadata before create_all
    from leave_service.models import account, leave_balance, leave_request  # noqa: F401
    Base.metadata.create_all(bind=engine)
