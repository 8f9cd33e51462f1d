"""SQLAlchemy ORM models for locally persisted client state"""

from sqlalchemy import Column, DateTime, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class LocalState(Base):
    """
    Key/value entry, e.g. walletPlans_<address> -> '["7", "3"]'.

    Untrusted cache: the ledger stays the source of truth.
    """

    __tablename__ = "local_state"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
