"""SQLAlchemy database models and setup."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class DBInvestor(Base):
    """Stored investor record, addressed by domain or LinkedIn path."""

    __tablename__ = "investors"

    id = Column(String(36), primary_key=True, default=_new_id)
    type = Column(String(20))  # person | firm
    name = Column(String(500))

    # Canonical keys; exactly one is set per record
    domain = Column(String(255))
    linkedin_url = Column(String(500))

    # Classification
    investor_type = Column(JSON)  # list of investor types
    links = Column(JSON)  # list of [title](url) citations
    research_status = Column(String(50))  # to_do for non-investors

    # Deep research / extraction
    email = Column(Text)  # comma-separated
    twitter_url = Column(String(500))
    active = Column(Boolean)
    role = Column(String(100))
    hq_state = Column(String(20))
    hq_country = Column(String(20))
    fund_size_usd = Column(Float)
    check_size_min_usd = Column(Float)
    check_size_max_usd = Column(Float)
    investment_stages = Column(JSON)
    investment_industries = Column(JSON)
    investment_geographies = Column(JSON)
    investment_thesis = Column(Text)
    notable_investments = Column(JSON)
    deep_research = Column(Text)
    leads_round = Column(Boolean)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Not unique: the dedup check is look-then-insert
    __table_args__ = (
        Index("idx_investor_domain", "domain"),
        Index("idx_investor_linkedin", "linkedin_url"),
    )

    def to_dict(self) -> dict:
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


# Database initialization
def init_db(db_url: Optional[str] = None) -> sessionmaker:
    """Initialize database and return session maker."""
    url = db_url or settings.database_url
    engine = create_engine(url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
