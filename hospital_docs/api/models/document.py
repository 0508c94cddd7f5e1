"""
Download center tables: categories, documents and download history.
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from hospital_docs.core.database import Base


class DocumentCategoryORM(Base):
    """Hierarchical category (internal form, external form, template)."""
    __tablename__ = "document_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    type = Column(Text, nullable=False)
    parent_id = Column(Integer, ForeignKey("document_categories.id"), nullable=True)

    def __repr__(self):
        return f"<DocumentCategory {self.name}>"


class DocumentORM(Base):
    """Downloadable form or template."""
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    file_name = Column(Text, nullable=False)
    file_type = Column(Text, nullable=False)
    file_path = Column(Text, nullable=False)
    file_size = Column(Integer, nullable=False)
    upload_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    category_id = Column(Integer, ForeignKey("document_categories.id"), nullable=True, index=True)
    uploaded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    download_count = Column(Integer, nullable=False, server_default="0", default=0)
    tags = Column(JSONB, nullable=False, server_default="[]", default=list)
    access_roles = Column(JSONB, nullable=False, server_default="[]", default=list)
    access_departments = Column(JSONB, nullable=False, server_default="[]", default=list)

    def __repr__(self):
        return f"<Document {self.title}>"


class DownloadHistoryORM(Base):
    """One row per recorded download."""
    __tablename__ = "download_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_id = Column(Integer, ForeignKey("documents.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    download_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ip_address = Column(Text)
