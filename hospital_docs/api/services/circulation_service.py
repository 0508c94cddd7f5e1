"""
Circulation documents and the status transition handler.

A transition (approve, reject, or a raw status write) re-reads the
document, mutates it, persists it and appends one activity entry, all
while holding the document's lock. Concurrent transitions on one
document are applied one after the other.
"""

import logging
from typing import List, Optional

from hospital_docs.api.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from hospital_docs.api.services.activity_service import ActivityService
from hospital_docs.auth.models import User
from hospital_docs.auth.repositories import UserRepository
from hospital_docs.core.locks import KeyedLocks
from hospital_docs.persistence.models import CirculationDocument, CirculationStatus, Workflow
from hospital_docs.persistence.repositories import CirculationRepository, WorkflowRepository

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "circulation"

FINAL_STATUSES = frozenset({CirculationStatus.APPROVED, CirculationStatus.REJECTED})


class AssigneeResolver:
    """
    Chooses who acts next on a document.

    In "placeholder" mode the configured ids are returned as is. In "role"
    mode the first user holding the step's role is chosen, falling back
    to the configured id when nobody holds it.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        mode: str = "placeholder",
        initial_assignee_id: int = 2,
        next_step_assignee_id: int = 1,
    ):
        self._user_repo = user_repo
        self._mode = mode
        self._initial_assignee_id = initial_assignee_id
        self._next_step_assignee_id = next_step_assignee_id

    async def initial(self, workflow: Optional[Workflow]) -> int:
        return await self._resolve(workflow, 0, self._initial_assignee_id)

    async def for_step(self, workflow: Optional[Workflow], step_index: int) -> int:
        return await self._resolve(workflow, step_index, self._next_step_assignee_id)

    async def _resolve(self, workflow: Optional[Workflow], step_index: int, fallback: int) -> int:
        if self._mode != "role" or workflow is None:
            return fallback
        step = workflow.step_at(step_index)
        if step is None:
            return fallback
        user = await self._user_repo.get_first_by_role(step.role)
        return user.id if user else fallback


class CirculationService:

    def __init__(
        self,
        circulation_repo: CirculationRepository,
        workflow_repo: WorkflowRepository,
        activity: ActivityService,
        resolver: AssigneeResolver,
        locks: KeyedLocks,
    ):
        self._circulation_repo = circulation_repo
        self._workflow_repo = workflow_repo
        self._activity = activity
        self._resolver = resolver
        self._locks = locks

    async def create_document(
        self,
        title: str,
        document_number: str,
        created_by: int,
        content: Optional[str] = None,
        workflow_id: Optional[int] = None,
        assigned_to: Optional[int] = None,
        tags: Optional[List[str]] = None,
        file_path: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> CirculationDocument:
        if not title or not title.strip():
            raise ValidationError("Title is required")
        if not document_number or not document_number.strip():
            raise ValidationError("Document number is required")

        workflow = None
        if workflow_id is not None:
            workflow = await self._workflow_repo.get(workflow_id)
            if workflow is None:
                raise ValidationError(f"Workflow {workflow_id} does not exist")

        if assigned_to is None:
            assigned_to = await self._resolver.initial(workflow)

        document = await self._circulation_repo.create(CirculationDocument(
            title=title,
            document_number=document_number,
            content=content,
            created_by=created_by,
            workflow_id=workflow_id,
            assigned_to=assigned_to,
            tags=list(tags or []),
            file_path=file_path,
            file_type=file_type,
        ))
        await self._activity.record(
            user_id=created_by,
            action="create",
            resource_type=RESOURCE_TYPE,
            resource_id=document.id,
            details={"title": document.title, "documentNumber": document.document_number},
        )
        return document

    async def get_document(self, document_id: int) -> CirculationDocument:
        document = await self._circulation_repo.get(document_id)
        if document is None:
            raise NotFoundError("Circulation document", document_id)
        return document

    async def list_documents(self, user_id: Optional[int] = None) -> List[CirculationDocument]:
        if user_id is None:
            return await self._circulation_repo.list_all()
        return await self._circulation_repo.list_for_user(user_id)

    @staticmethod
    def ensure_can_act(document: CirculationDocument, user: User) -> None:
        """Only the current assignee or an admin may move a document."""
        if user.is_admin or document.assigned_to == user.id:
            return
        raise PermissionDeniedError(
            f"User {user.id} is not assigned to circulation document {document.id}"
        )

    @staticmethod
    def _ensure_open(document: CirculationDocument) -> None:
        """Approve and reject act only on documents still in circulation."""
        if document.status in FINAL_STATUSES:
            raise ConflictError(
                f"Circulation document {document.id} is already {document.status.value}"
            )

    async def authorize(self, document_id: int, user: User) -> CirculationDocument:
        """Load a document and check that the user may transition it."""
        document = await self.get_document(document_id)
        self.ensure_can_act(document, user)
        return document

    async def approve(
        self,
        document_id: int,
        actor_id: int,
        comment: Optional[str] = None,
    ) -> CirculationDocument:
        async with self._locks.hold(document_id):
            document = await self.get_document(document_id)
            self._ensure_open(document)
            workflow = None
            if document.workflow_id is not None:
                workflow = await self._workflow_repo.get(document.workflow_id)
            total_steps = len(workflow.steps) if workflow else 0

            next_assignee = await self._resolver.for_step(workflow, document.current_step + 1)
            document.advance(total_steps, next_assignee)
            return await self._commit(document, actor_id, comment)

    async def reject(
        self,
        document_id: int,
        actor_id: int,
        comment: Optional[str] = None,
    ) -> CirculationDocument:
        async with self._locks.hold(document_id):
            document = await self.get_document(document_id)
            self._ensure_open(document)
            document.reject()
            return await self._commit(document, actor_id, comment)

    async def set_status(
        self,
        document_id: int,
        actor_id: int,
        status: str,
        step: int,
        assigned_to: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> CirculationDocument:
        """
        Raw transition: store the given status and step.
        Unlike approve and reject this may reopen a finished document.

        The assignee is replaced only when one is supplied.
        """
        try:
            new_status = CirculationStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in CirculationStatus)
            raise ValidationError(f"Invalid status '{status}', expected one of: {allowed}")
        if step < 0:
            raise ValidationError("Step must not be negative")

        async with self._locks.hold(document_id):
            document = await self.get_document(document_id)
            document.status = new_status
            document.current_step = step
            if assigned_to is not None:
                document.assigned_to = assigned_to
            return await self._commit(document, actor_id, comment)

    async def _commit(
        self,
        document: CirculationDocument,
        actor_id: int,
        comment: Optional[str],
    ) -> CirculationDocument:
        if comment:
            document.add_comment(actor_id, comment, document.status.value)

        updated = await self._circulation_repo.update(document)
        await self._activity.record(
            user_id=actor_id,
            action=updated.status.value,
            resource_type=RESOURCE_TYPE,
            resource_id=updated.id,
            details={
                "title": updated.title,
                "documentNumber": updated.document_number,
                "comment": comment,
            },
        )
        logger.info(
            f"Circulation document {updated.id} -> {updated.status.value} "
            f"(step {updated.current_step}, assignee {updated.assigned_to})"
        )
        return updated
