"""
Workflow definitions and the circulation documents routed through them.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from hospital_docs.core.database import Base


class WorkflowORM(Base):
    """
    Approval workflow.

    steps is a JSON array of {order, role, description}.
    """
    __tablename__ = "workflows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    steps = Column(JSONB, nullable=False)
    is_default = Column(Boolean, nullable=False, default=False, server_default="false")
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    is_locked = Column(Boolean, nullable=False, default=False, server_default="false")

    def __repr__(self):
        return f"<Workflow {self.name} steps={len(self.steps or [])}>"


class CirculationDocumentORM(Base):
    """Internal memo under approval."""
    __tablename__ = "circulation_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    document_number = Column(Text, nullable=False)
    content = Column(Text)
    status = Column(Text, nullable=False, index=True)
    current_step = Column(Integer, nullable=False, default=0, server_default="0")
    workflow_id = Column(Integer, ForeignKey("workflows.id"), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    file_path = Column(Text)
    file_type = Column(Text)
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    comments = Column(JSONB, nullable=False, server_default="[]", default=list)
    tags = Column(JSONB, nullable=False, server_default="[]", default=list)

    def __repr__(self):
        return f"<CirculationDocument {self.document_number} status={self.status}>"
