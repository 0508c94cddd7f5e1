"""
Personal storage entries (files and folders) with soft delete.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from hospital_docs.core.database import Base


class StorageFileORM(Base):
    __tablename__ = "storage_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    file_path = Column(Text, nullable=False)
    file_type = Column(Text, nullable=False)
    file_size = Column(Integer, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    upload_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_modified = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    parent_id = Column(Integer, ForeignKey("storage_files.id"), nullable=True)
    is_folder = Column(Boolean, nullable=False, default=False, server_default="false")
    is_deleted = Column(Boolean, nullable=False, default=False, server_default="false")
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    access_level = Column(Text, nullable=False)
    shared_with = Column(JSONB, nullable=False, server_default="[]", default=list)

    __table_args__ = (
        Index("idx_storage_files_owner_parent", "owner_id", "parent_id"),
    )

    def __repr__(self):
        kind = "folder" if self.is_folder else "file"
        return f"<StorageFile {kind} {self.name}>"
