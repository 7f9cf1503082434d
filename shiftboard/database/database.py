# shiftboard/database/database.py
"""
SQLAlchemy setup and the read-only shift table.

The schedule itself is maintained elsewhere; this service only reads it.
"""

from sqlalchemy import Column, Date, DateTime, Integer, String, Time, create_engine, func
from sqlalchemy.orm import declarative_base, sessionmaker

from shiftboard.core.config import DATABASE_URL

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class Shift(Base):
    """One scheduled shift of one employee."""

    __tablename__ = "shifts"

    id = Column(String(64), primary_key=True)
    employee_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    timezone = Column(String(64), nullable=False)  # IANA name, e.g. "Europe/Paris"
    role = Column(String(100), nullable=False)
    schedule_name = Column(String(200), nullable=False)
    version = Column(Integer, default=1, nullable=False)
    updated_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Shift(id={self.id}, employee_id={self.employee_id}, date={self.date}, role={self.role})>"


def create_tables(bind=engine) -> None:
    """Create the shift table if it is missing."""
    Base.metadata.create_all(bind=bind)
