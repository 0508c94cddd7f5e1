"""
Append-only activity log.

Records are never updated or deleted.
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from hospital_docs.core.database import Base


class ActivityLogORM(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    action = Column(Text, nullable=False)
    resource_type = Column(Text, nullable=False)
    resource_id = Column(Integer, nullable=False)
    details = Column(JSONB)

    __table_args__ = (
        Index("idx_activity_logs_timestamp", "timestamp"),
        Index("idx_activity_logs_resource", "resource_type", "resource_id"),
    )

    def __repr__(self):
        return f"<ActivityLog {self.action} {self.resource_type}:{self.resource_id}>"
