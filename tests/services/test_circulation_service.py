"""Tests for the circulation status transition handler."""

import asyncio

import pytest
import pytest_asyncio

from hospital_docs.api.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from hospital_docs.api.services.circulation_service import AssigneeResolver, CirculationService
from hospital_docs.core.locks import KeyedLocks
from hospital_docs.persistence.models import CirculationStatus, Workflow, WorkflowStep

ADMIN_ID, MANAGER_ID, STAFF_ID, OTHER_STAFF_ID = 1, 2, 3, 4
LEAVE_WORKFLOW_ID, PURCHASE_WORKFLOW_ID = 1, 2


def _service(repos, activity, mode="placeholder", circulation_repo=None) -> CirculationService:
    resolver = AssigneeResolver(repos.users, mode=mode, initial_assignee_id=2, next_step_assignee_id=1)
    return CirculationService(
        circulation_repo or repos.circulation, repos.workflows, activity, resolver, KeyedLocks(),
    )


@pytest_asyncio.fixture
async def service(seeded_repos, activity) -> CirculationService:
    return _service(seeded_repos, activity)


async def _create(service, workflow_id=PURCHASE_WORKFLOW_ID, **kwargs):
    return await service.create_document(
        title="Purchase request",
        document_number="MEMO-2026-0001",
        created_by=STAFF_ID,
        workflow_id=workflow_id,
        **kwargs,
    )


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_defaults(self, service):
        doc = await _create(service)
        assert doc.status == CirculationStatus.PENDING
        assert doc.current_step == 0
        assert doc.assigned_to == 2

    @pytest.mark.asyncio
    async def test_explicit_assignee_kept(self, service):
        doc = await _create(service, assigned_to=OTHER_STAFF_ID)
        assert doc.assigned_to == OTHER_STAFF_ID

    @pytest.mark.asyncio
    async def test_create_logs_activity(self, service, seeded_repos):
        doc = await _create(service)
        logs = await seeded_repos.activity_logs.list_for_resource("circulation", doc.id)
        assert [log.action for log in logs] == ["create"]

    @pytest.mark.asyncio
    async def test_unknown_workflow_rejected(self, service):
        with pytest.raises(ValidationError):
            await _create(service, workflow_id=999)

    @pytest.mark.asyncio
    async def test_missing_title_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.create_document(title=" ", document_number="M-1", created_by=STAFF_ID)


class TestApprove:

    @pytest.mark.asyncio
    async def test_two_step_workflow_approved_after_two_approvals(self, service):
        doc = await _create(service, workflow_id=LEAVE_WORKFLOW_ID)

        first = await service.approve(doc.id, actor_id=MANAGER_ID)
        assert first.status == CirculationStatus.IN_PROGRESS
        assert first.current_step == 1
        assert first.assigned_to == 1

        second = await service.approve(doc.id, actor_id=ADMIN_ID)
        assert second.status == CirculationStatus.APPROVED
        assert second.current_step == 2
        assert second.assigned_to is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("step_count", [1, 2, 3, 5])
    async def test_n_approvals_walk_every_step(self, seeded_repos, activity, step_count):
        service = _service(seeded_repos, activity)
        workflow = await seeded_repos.workflows.create(Workflow(
            name=f"{step_count}-step",
            steps=[WorkflowStep(order=i, role="admin", description=f"s{i}") for i in range(1, step_count + 1)],
        ))
        doc = await _create(service, workflow_id=workflow.id)

        steps_seen = []
        for _ in range(step_count):
            doc = await service.approve(doc.id, actor_id=ADMIN_ID)
            steps_seen.append(doc.current_step)

        assert steps_seen == list(range(1, step_count + 1))
        assert doc.status == CirculationStatus.APPROVED
        assert doc.assigned_to is None

    @pytest.mark.asyncio
    async def test_document_without_workflow_approves_immediately(self, service):
        doc = await _create(service, workflow_id=None)
        approved = await service.approve(doc.id, actor_id=ADMIN_ID)
        assert approved.status == CirculationStatus.APPROVED
        assert approved.assigned_to is None

    @pytest.mark.asyncio
    async def test_approve_logs_one_entry_with_details(self, service, seeded_repos):
        doc = await _create(service)
        await service.approve(doc.id, actor_id=MANAGER_ID, comment="looks fine")

        logs = await seeded_repos.activity_logs.list_for_resource("circulation", doc.id)
        assert [log.action for log in logs] == ["create", "in_progress"]
        assert logs[-1].user_id == MANAGER_ID
        assert logs[-1].details == {
            "title": "Purchase request",
            "documentNumber": "MEMO-2026-0001",
            "comment": "looks fine",
        }

    @pytest.mark.asyncio
    async def test_comment_appended(self, service):
        doc = await _create(service)
        updated = await service.approve(doc.id, actor_id=MANAGER_ID, comment="ok")
        assert len(updated.comments) == 1
        assert updated.comments[0]["userId"] == MANAGER_ID
        assert updated.comments[0]["status"] == "in_progress"

    @pytest.mark.asyncio
    async def test_no_comment_no_entry(self, service):
        doc = await _create(service)
        updated = await service.approve(doc.id, actor_id=MANAGER_ID)
        assert updated.comments == []

    @pytest.mark.asyncio
    async def test_unknown_document(self, service, seeded_repos):
        before = len(await seeded_repos.activity_logs.list_recent(100))
        with pytest.raises(NotFoundError):
            await service.approve(404, actor_id=ADMIN_ID)
        assert len(await seeded_repos.activity_logs.list_recent(100)) == before


class TestReject:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("approvals", [0, 1, 2])
    async def test_reject_at_any_step(self, service, approvals):
        doc = await _create(service)
        for _ in range(approvals):
            await service.approve(doc.id, actor_id=ADMIN_ID)

        rejected = await service.reject(doc.id, actor_id=ADMIN_ID, comment="no budget")

        assert rejected.status == CirculationStatus.REJECTED
        assert rejected.current_step == 0
        assert rejected.assigned_to is None
        assert rejected.comments[-1]["comment"] == "no budget"


class TestRawStatus:

    @pytest.mark.asyncio
    async def test_set_status_keeps_assignee_when_omitted(self, service):
        doc = await _create(service)
        updated = await service.set_status(doc.id, actor_id=ADMIN_ID, status="in_progress", step=1)
        assert updated.status == CirculationStatus.IN_PROGRESS
        assert updated.current_step == 1
        assert updated.assigned_to == 2

    @pytest.mark.asyncio
    async def test_set_status_replaces_assignee(self, service):
        doc = await _create(service)
        updated = await service.set_status(
            doc.id, actor_id=ADMIN_ID, status="in_progress", step=1, assigned_to=OTHER_STAFF_ID,
        )
        assert updated.assigned_to == OTHER_STAFF_ID

    @pytest.mark.asyncio
    async def test_invalid_status(self, service):
        doc = await _create(service)
        with pytest.raises(ValidationError):
            await service.set_status(doc.id, actor_id=ADMIN_ID, status="archived", step=0)

    @pytest.mark.asyncio
    async def test_action_is_resulting_status(self, service, seeded_repos):
        doc = await _create(service)
        await service.set_status(doc.id, actor_id=ADMIN_ID, status="rejected", step=0, comment="dup")
        logs = await seeded_repos.activity_logs.list_for_resource("circulation", doc.id)
        assert logs[-1].action == "rejected"
        assert logs[-1].details["comment"] == "dup"


class TestAuthorization:

    @pytest.mark.asyncio
    async def test_assignee_may_act(self, service, seeded_repos):
        doc = await _create(service)
        manager = await seeded_repos.users.get_by_id(MANAGER_ID)
        assert (await service.authorize(doc.id, manager)).id == doc.id

    @pytest.mark.asyncio
    async def test_admin_may_act(self, service, seeded_repos):
        doc = await _create(service)
        admin = await seeded_repos.users.get_by_id(ADMIN_ID)
        await service.authorize(doc.id, admin)

    @pytest.mark.asyncio
    async def test_other_user_denied(self, service, seeded_repos):
        doc = await _create(service)
        staff = await seeded_repos.users.get_by_id(OTHER_STAFF_ID)
        with pytest.raises(PermissionDeniedError):
            await service.authorize(doc.id, staff)


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_concurrent_approvals_are_serialized(self, seeded_repos, activity, interleaving):
        service = _service(seeded_repos, activity, circulation_repo=interleaving(seeded_repos.circulation))
        doc = await _create(service, workflow_id=PURCHASE_WORKFLOW_ID)

        results = await asyncio.gather(
            service.approve(doc.id, actor_id=ADMIN_ID),
            service.approve(doc.id, actor_id=MANAGER_ID),
        )

        assert sorted(r.current_step for r in results) == [1, 2]
        final = await service.get_document(doc.id)
        assert final.current_step == 2
        assert final.status == CirculationStatus.IN_PROGRESS

        logs = await seeded_repos.activity_logs.list_for_resource("circulation", doc.id)
        assert [log.action for log in logs] == ["create", "in_progress", "in_progress"]


class TestRoleResolution:

    @pytest.mark.asyncio
    async def test_role_mode_picks_first_user_with_step_role(self, seeded_repos, activity):
        service = _service(seeded_repos, activity, mode="role")
        doc = await _create(service, workflow_id=LEAVE_WORKFLOW_ID)
        # Step 1 of the leave workflow is the manager's
        assert doc.assigned_to == MANAGER_ID

        approved = await service.approve(doc.id, actor_id=MANAGER_ID)
        # Step 2 belongs to admin
        assert approved.assigned_to == ADMIN_ID

    @pytest.mark.asyncio
    async def test_role_mode_falls_back_to_placeholder(self, seeded_repos, activity):
        service = _service(seeded_repos, activity, mode="role")
        workflow = await seeded_repos.workflows.create(Workflow(
            name="pharmacy",
            steps=[
                WorkflowStep(order=1, role="pharmacist", description="Pharmacy"),
                WorkflowStep(order=2, role="pharmacist", description="Pharmacy head"),
            ],
        ))
        doc = await _create(service, workflow_id=workflow.id)
        assert doc.assigned_to == 2

        approved = await service.approve(doc.id, actor_id=ADMIN_ID)
        assert approved.assigned_to == 1


class TestFinalStatuses:

    async def _approved(self, service):
        doc = await _create(service, workflow_id=LEAVE_WORKFLOW_ID)
        await service.approve(doc.id, actor_id=MANAGER_ID)
        return await service.approve(doc.id, actor_id=ADMIN_ID)

    @pytest.mark.asyncio
    async def test_approved_document_cannot_be_approved_again(self, service, seeded_repos):
        doc = await self._approved(service)
        before = await seeded_repos.activity_logs.list_for_resource("circulation", doc.id)

        with pytest.raises(ConflictError) as exc_info:
            await service.approve(doc.id, actor_id=ADMIN_ID)

        assert exc_info.value.status_code == 409
        unchanged = await service.get_document(doc.id)
        assert unchanged.status == CirculationStatus.APPROVED
        assert unchanged.current_step == 2
        after = await seeded_repos.activity_logs.list_for_resource("circulation", doc.id)
        assert len(after) == len(before)

    @pytest.mark.asyncio
    async def test_approved_document_cannot_be_rejected(self, service):
        doc = await self._approved(service)
        with pytest.raises(ConflictError):
            await service.reject(doc.id, actor_id=ADMIN_ID)
        assert (await service.get_document(doc.id)).status == CirculationStatus.APPROVED

    @pytest.mark.asyncio
    async def test_rejected_document_is_not_revived_by_approve(self, service):
        doc = await _create(service)
        await service.reject(doc.id, actor_id=ADMIN_ID)

        with pytest.raises(ConflictError):
            await service.approve(doc.id, actor_id=ADMIN_ID)

        unchanged = await service.get_document(doc.id)
        assert unchanged.status == CirculationStatus.REJECTED
        assert unchanged.current_step == 0

    @pytest.mark.asyncio
    async def test_rejected_document_cannot_be_rejected_again(self, service):
        doc = await _create(service)
        await service.reject(doc.id, actor_id=ADMIN_ID)
        with pytest.raises(ConflictError):
            await service.reject(doc.id, actor_id=ADMIN_ID)

    @pytest.mark.asyncio
    async def test_raw_status_may_reopen(self, service):
        doc = await _create(service)
        await service.reject(doc.id, actor_id=ADMIN_ID)

        reopened = await service.set_status(doc.id, actor_id=ADMIN_ID, status="pending", step=0, assigned_to=2)

        assert reopened.status == CirculationStatus.PENDING
        assert (await service.approve(doc.id, actor_id=MANAGER_ID)).current_step == 1
