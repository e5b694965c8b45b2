"""Investor record store and duplicate gate."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.errors import PersistenceError
from app.models import CanonicalIdentifier
from app.models.database import DBInvestor, init_db

logger = logging.getLogger(__name__)


@dataclass
class ExistingMatch:
    """An already-stored record for an identifier."""

    record_id: str
    reason: str  # domain_exists | linkedin_exists


class InvestorStore:
    """Keyed upsert store for investor records.

    Records are addressed by ``domain`` or ``linkedin_url``; lookups try the
    domain first, then the LinkedIn path.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None, db_url: Optional[str] = None):
        self.session_factory = session_factory or init_db(db_url)

    def find_existing(
        self,
        domain: Optional[str],
        linkedin_url: Optional[str],
    ) -> Optional[ExistingMatch]:
        """Return the first record matching the domain, else the LinkedIn path."""
        session = self.session_factory()
        try:
            if domain:
                row = (
                    session.query(DBInvestor.id)
                    .filter(DBInvestor.domain == domain)
                    .limit(1)
                    .first()
                )
                if row:
                    return ExistingMatch(record_id=row.id, reason="domain_exists")
            if linkedin_url:
                row = (
                    session.query(DBInvestor.id)
                    .filter(DBInvestor.linkedin_url == linkedin_url)
                    .limit(1)
                    .first()
                )
                if row:
                    return ExistingMatch(record_id=row.id, reason="linkedin_exists")
            return None
        except SQLAlchemyError as e:
            logger.error(f"Investor lookup failed: {e}")
            raise PersistenceError("Failed to look up investor", details=str(e)) from e
        finally:
            session.close()

    def upsert_base(self, identifier: CanonicalIdentifier, fields: dict[str, Any]) -> str:
        """Insert or update the base row for an identifier; return its id."""
        existing = self.find_existing(identifier.domain, identifier.linkedin_url)
        values = {
            **fields,
            "domain": identifier.domain,
            "linkedin_url": identifier.linkedin_url,
        }

        session = self.session_factory()
        try:
            if existing:
                investor = session.get(DBInvestor, existing.record_id)
                for key, value in values.items():
                    setattr(investor, key, value)
                action = "update"
            else:
                investor = DBInvestor(**values)
                session.add(investor)
                action = "insert"
            session.commit()
            logger.info(f"Investor base row {action}: {investor.id} ({identifier.value})")
            return investor.id
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Investor {identifier.value} base write failed: {e}")
            raise PersistenceError(f"Failed to {'update' if existing else 'insert'} investor", details=str(e)) from e
        finally:
            session.close()

    def update(self, record_id: str, fields: dict[str, Any]) -> None:
        """Apply ``fields`` to an existing record in place."""
        session = self.session_factory()
        try:
            investor = session.get(DBInvestor, record_id)
            if investor is None:
                raise PersistenceError("Failed to update investor", details=f"No investor with id {record_id}")
            for key, value in fields.items():
                setattr(investor, key, value)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Investor {record_id} update failed: {e}")
            raise PersistenceError("Failed to update investor with deep research", details=str(e)) from e
        finally:
            session.close()

    def get(self, record_id: str) -> Optional[dict]:
        """Return a stored record as a dict, or None."""
        session = self.session_factory()
        try:
            investor = session.get(DBInvestor, record_id)
            return investor.to_dict() if investor else None
        finally:
            session.close()

    def count(self) -> int:
        session = self.session_factory()
        try:
            return session.query(DBInvestor).count()
        finally:
            session.close()


class DedupGate:
    """Short-circuit a run when the identifier is already stored."""

    def __init__(self, store: InvestorStore):
        self.store = store

    def check(self, identifier: CanonicalIdentifier, skip_existing: bool) -> Optional[ExistingMatch]:
        """Return the existing match when skipping is requested, else None.

        This is a plain look-then-insert check; two concurrent runs for the
        same new identifier can both pass it.
        """
        if not skip_existing:
            return None
        match = self.store.find_existing(identifier.domain, identifier.linkedin_url)
        if match:
            logger.info(f"Skipped ({match.reason}): {identifier.value}")
        return match
