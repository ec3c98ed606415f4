"""SQLite persistence for resolved family networks.

Networks are stored as pydantic JSON so a restarted process can serve
previously resolved families without parsing them again.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Column, Float, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from kalvian_roots.schemas import FamilyNetwork
from kalvian_roots.storage.base import CachedFamily

logger = logging.getLogger(__name__)

Base = declarative_base()


class CachedNetworkRecord(Base):
    """One cached family network."""

    __tablename__ = "cached_networks"

    family_id = Column(String, primary_key=True)
    network_json = Column(Text, nullable=False)
    extraction_time = Column(Float, nullable=False)
    cached_at = Column(String, nullable=False)

    def __repr__(self) -> str:
        return f"<CachedNetworkRecord(family_id='{self.family_id}', cached_at='{self.cached_at}')>"

    def to_entry(self) -> CachedFamily:
        return CachedFamily(
            network=FamilyNetwork.model_validate_json(self.network_json),
            extraction_time=self.extraction_time,
            cached_at=datetime.fromisoformat(self.cached_at),
        )


class SQLiteNetworkStore:
    """Network store backed by a SQLite database."""

    def __init__(self, db_path: Path | None = None):
        """Initialize the database.

        Args:
            db_path: Path to SQLite database file (default: ./network_cache.db)
        """
        self.db_path = db_path or Path("./network_cache.db")
        self.engine = create_engine(f"sqlite:///{self.db_path}")
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine)

    def get_session(self):
        """Get a new database session."""
        return self.Session()

    def save(self, family_id: str, entry: CachedFamily) -> None:
        """Insert or replace the entry for a family."""
        session = self.get_session()
        try:
            session.merge(
                CachedNetworkRecord(
                    family_id=family_id,
                    network_json=entry.network.model_dump_json(),
                    extraction_time=entry.extraction_time,
                    cached_at=entry.cached_at.astimezone(timezone.utc).isoformat(),
                )
            )
            session.commit()
        finally:
            session.close()

    def load_family(self, family_id: str) -> CachedFamily | None:
        session = self.get_session()
        try:
            record = session.get(CachedNetworkRecord, family_id)
            return record.to_entry() if record else None
        finally:
            session.close()

    def load_all(self) -> dict[str, CachedFamily]:
        session = self.get_session()
        try:
            records = session.query(CachedNetworkRecord).all()
            entries = {record.family_id: record.to_entry() for record in records}
        finally:
            session.close()
        logger.debug("Loaded %d cached networks from %s", len(entries), self.db_path)
        return entries

    def delete(self, family_id: str) -> None:
        session = self.get_session()
        try:
            session.query(CachedNetworkRecord).filter(
                CachedNetworkRecord.family_id == family_id
            ).delete()
            session.commit()
        finally:
            session.close()

    def clear(self) -> None:
        session = self.get_session()
        try:
            session.query(CachedNetworkRecord).delete()
            session.commit()
        finally:
            session.close()
