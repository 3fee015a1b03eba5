import sqlalchemy as sa
from sqlalchemy import Column, Index, String

from orderdesk.core.config import RECORDS_TABLE
from orderdesk.core.database import Base


class Record(Base):
    __tablename__ = RECORDS_TABLE
    __table_args__ = (Index("ix_records_entity_created_at", "entity", "created_at"),)

    id = Column(String(64), primary_key=True)
    entity = Column(String(32), nullable=False, index=True)  # CUSTOMER / PRODUCT / ORDER
    created_at = Column(String(40), nullable=False)  # ISO-8601 UTC, ordena lexicograficamente
    data = Column(sa.JSON(), nullable=False, default=dict)
