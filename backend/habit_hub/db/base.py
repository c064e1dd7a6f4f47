from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from habit_hub.core.config import settings


# Database setup
if settings.database_url.startswith("sqlite"):
    engine = create_engine(settings.database_url, connect_args={"check_same_thread": False})
else:
    engine = create_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
