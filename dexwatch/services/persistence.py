"""
Opportunity persistence.

Append-only SQLite table, compatible with existing arbitrage.db files:

    arbitrage_bot(id INTEGER PRIMARY KEY AUTOINCREMENT, buy_dex TEXT,
                  sell_dex TEXT, profit_usdc REAL, timestamp TEXT)
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from sqlalchemy import Column, Float, Integer, Text, create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from dexwatch.core.config import Settings, get_settings
from dexwatch.core.errors import StoreError
from dexwatch.core.logging import get_logger
from dexwatch.core.timeutil import format_timestamp, parse_timestamp
from dexwatch.domain.models import OpportunityRecord

logger = get_logger("persistence")

Base = declarative_base()


class OpportunityRow(Base):
    """Database model for recorded opportunities."""

    __tablename__ = "arbitrage_bot"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    buy_dex = Column(Text)
    sell_dex = Column(Text)
    profit_usdc = Column(Float)
    timestamp = Column(Text)

    def to_record(self) -> OpportunityRecord:
        """Raises StoreError for rows this process could not have written."""
        if self.profit_usdc is None or self.timestamp is None:
            raise StoreError(f"Incomplete opportunity row #{self.id}")
        try:
            observed_at = parse_timestamp(self.timestamp)
        except ValueError as e:
            raise StoreError(
                f"Bad timestamp in opportunity row #{self.id}: {self.timestamp!r}", cause=e
            ) from e

        return OpportunityRecord(
            id=self.id,
            buy_venue=self.buy_dex,
            sell_venue=self.sell_dex,
            profit=Decimal(str(self.profit_usdc)),
            observed_at=observed_at,
        )


class OpportunityStore:
    """
    Append-only store for opportunities.

    Owns its engine; call close() (or use as a context manager) on shutdown.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.database_url = database_url or settings.database_url

        try:
            # Ensure data directory exists
            if self.database_url.startswith("sqlite:///"):
                db_path = Path(self.database_url.replace("sqlite:///", ""))
                if db_path.parent != Path(""):
                    db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine = create_engine(self.database_url)
            self.ensure_schema()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Cannot open store {self.database_url}: {e}", cause=e) from e
        self.Session = sessionmaker(bind=self.engine)

        logger.info(f"Initialized opportunity store: {self.database_url}")

    def ensure_schema(self) -> None:
        """Create the table if it does not exist. Safe to call repeatedly."""
        Base.metadata.create_all(self.engine, checkfirst=True)

    def record(self, opportunity: OpportunityRecord) -> int:
        """
        Append one opportunity.

        Returns:
            The id assigned to the new row

        Raises:
            StoreError: on any database failure; nothing is written in that case
        """
        row = OpportunityRow(
            buy_dex=opportunity.buy_venue,
            sell_dex=opportunity.sell_venue,
            profit_usdc=float(opportunity.profit),
            timestamp=format_timestamp(opportunity.observed_at),
        )

        session = self.Session()
        try:
            session.add(row)
            session.commit()
            logger.debug(f"Saved opportunity #{row.id}")
            return row.id
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f"Failed to save opportunity: {e}", cause=e) from e
        finally:
            session.close()

    def list_recent(self, limit: int = 10) -> list[OpportunityRecord]:
        """Most recent opportunities first."""
        session = self.Session()
        try:
            rows = session.scalars(
                select(OpportunityRow).order_by(OpportunityRow.id.desc()).limit(limit)
            ).all()
            return [row.to_record() for row in rows]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read opportunities: {e}", cause=e) from e
        finally:
            session.close()

    def count(self) -> int:
        session = self.Session()
        try:
            return session.scalar(select(func.count()).select_from(OpportunityRow)) or 0
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to count opportunities: {e}", cause=e) from e
        finally:
            session.close()

    def close(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    def __enter__(self) -> "OpportunityStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_opportunity_store(
    settings: Optional[Settings] = None,
) -> OpportunityStore:
    """Create the store configured by DATABASE_URL."""
    return OpportunityStore(settings=settings)
