from sqlalchemy import create_engine, Column, Integer, String, Boolean, Float, DateTime
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from datetime import datetime, timezone

from ..config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite gets thread-safe connect args instead of pool sizing"""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False}
        )
    return create_engine(
        database_url,
        echo=settings.DEBUG,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=300
    )


# Create engine
engine = build_engine(settings.DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models
Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisRecord(Base):
    """One row per completed store analysis"""
    __tablename__ = "analysis_records"

    id = Column(Integer, primary_key=True, index=True)
    store_key = Column(String(255), nullable=False, index=True)
    store_url = Column(String(500), nullable=False)
    store_title = Column(String(500))
    total_products = Column(Integer, default=0)
    average_price = Column(Float, default=0.0)
    health_overall = Column(Integer, default=0)
    product_score = Column(Integer, default=0)
    operations_score = Column(Integer, default=0)
    marketing_score = Column(Integer, default=0)
    from_cache = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)

    def __repr__(self):
        return f"<AnalysisRecord(id={self.id}, store_key='{self.store_key}', total_products={self.total_products})>"


# Database utility functions
def create_tables(bind: Engine = None):
    """Create all database tables"""
    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind: Engine = None):
    """Drop all database tables (use with caution)"""
    Base.metadata.drop_all(bind=bind or engine)
