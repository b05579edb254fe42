"""
Database configuration and models for the allocation history log.
"""

from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import create_engine, Column, Date, Float, Integer, String
from sqlalchemy.orm import declarative_base, Session

from config import DATA_DIR, DATABASE_URL

if DATABASE_URL.startswith(f"sqlite:///{DATA_DIR}"):
    DATA_DIR.mkdir(exist_ok=True)

# SQLite engine configuration
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)

# Base class for SQLAlchemy models
Base = declarative_base()


class AllocationHistoryRow(Base):
    """One committed contribution to a vault"""
    __tablename__ = "allocation_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vault_id = Column(Integer, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False, index=True)
    source = Column(String(32), nullable=True)
    note = Column(String(120), nullable=True)


def init_db(bind=None) -> None:
    """Create tables if they don't exist"""
    Base.metadata.create_all(bind or engine)


def get_session() -> Session:
    """Get a new database session"""
    return Session(engine)


def record_allocations(
    session: Session,
    amounts: Iterable[tuple],
    on: date,
    source: str,
    note: Optional[str] = None,
) -> List[AllocationHistoryRow]:
    """Append (vault_id, amount) pairs to the history log and commit."""
    rows = [
        AllocationHistoryRow(vault_id=vault_id, amount=amount, date=on, source=source,
                             note=note[:120] if note else None)
        for vault_id, amount in amounts
        if amount > 0
    ]
    session.add_all(rows)
    session.commit()
    return rows


def list_history(session: Session, vault_id: Optional[int] = None) -> List[AllocationHistoryRow]:
    query = session.query(AllocationHistoryRow)
    if vault_id is not None:
        query = query.filter_by(vault_id=vault_id)
    return query.order_by(AllocationHistoryRow.date.desc(), AllocationHistoryRow.id.desc()).all()
