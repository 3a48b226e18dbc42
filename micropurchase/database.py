"""
SQLAlchemy persistence layer for the bidding service.
Stores users, auctions and bids.
"""

from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import (
    create_engine, Column, Integer, String, Boolean,
    DateTime, Index, ForeignKey, event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from micropurchase import config
from micropurchase.core.utils import utcnow
from micropurchase.domain.models import AuctionState, ExistingBid, Identity


def make_engine(url: str, **kwargs) -> Engine:
    """Create an engine.

    SQLite connections get WAL, a busy timeout and foreign keys, and every
    transaction opens with ``BEGIN IMMEDIATE`` so the write lock is held from
    the first read until commit.
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    eng = create_engine(url, connect_args=connect_args, echo=config.DATABASE_ECHO, **kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(eng, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(eng, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return eng


engine = make_engine(config.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False)
Base = declarative_base()


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class User(Base):
    """A vendor who can bid; linked to GitHub by ``github_id``."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    github_id = Column(String(64), nullable=True, unique=True, index=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    duns_number = Column(String(32), nullable=True)
    # Set once the DUNS number is confirmed as registered in SAM.gov.
    sam_account = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def identity(self) -> Identity:
        return Identity(internal_id=self.id, external_id=self.github_id)


class Auction(Base):
    """A reverse auction: the lowest bid at ``end_datetime`` wins."""
    __tablename__ = "auctions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    start_datetime = Column(DateTime, nullable=False)
    end_datetime = Column(DateTime, nullable=False)
    start_price = Column(Integer, nullable=True)      # whole dollars
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def state(self, now: Optional[datetime] = None) -> AuctionState:
        return AuctionState.at(
            start=self.start_datetime,
            end=self.end_datetime,
            now=now or utcnow(),
            max_amount=self.start_price,
        )


class Bid(Base):
    __tablename__ = "bids"

    id = Column(Integer, primary_key=True, autoincrement=True)
    auction_id = Column(Integer, ForeignKey("auctions.id"), nullable=False)
    bidder_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(Integer, nullable=False)          # whole dollars
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_bids_auction_amount", "auction_id", "amount"),
    )


# ---------------------------------------------------------------------------
# Database initialization
# ---------------------------------------------------------------------------

def init_db(bind: Optional[Engine] = None):
    """Create all tables if they don't exist."""
    Base.metadata.create_all(bind=bind or engine)


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request, always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------------------------------------------------------------------------
# Helper queries
# ---------------------------------------------------------------------------

def get_auction(db: Session, auction_id: int, for_update: bool = False) -> Optional[Auction]:
    """Load an auction; ``for_update`` locks the row until the transaction ends."""
    query = db.query(Auction).filter(Auction.id == auction_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_auction_bids(db: Session, auction_id: int) -> List[Bid]:
    """All bids on an auction, lowest first."""
    return (
        db.query(Bid)
        .filter(Bid.auction_id == auction_id)
        .order_by(Bid.amount.asc(), Bid.created_at.asc())
        .all()
    )


def existing_bids(bids: List[Bid]) -> List[ExistingBid]:
    return [ExistingBid(amount=b.amount, bidder_id=b.bidder_id) for b in bids]


def is_eligible_bidder(db: Session, user_id: int) -> bool:
    user = db.get(User, user_id)
    return bool(user is not None and user.sam_account)


class SqlUserDirectory:
    """Local user lookups backing ``IdentityResolver``."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: int) -> Optional[Identity]:
        user = self.db.get(User, user_id)
        return user.identity() if user is not None else None

    def find_by_external_id(self, external_id: str) -> Optional[Identity]:
        user = self.db.query(User).filter(User.github_id == str(external_id)).first()
        return user.identity() if user is not None else None
