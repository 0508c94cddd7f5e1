"""Tests for workflow definitions."""

import pytest
import pytest_asyncio

from hospital_docs.api.exceptions import ConflictError, NotFoundError, ValidationError
from hospital_docs.api.services.workflow_service import WorkflowService, validate_steps
from hospital_docs.persistence.models import WorkflowStep


def _steps(*roles):
    return [WorkflowStep(order=i, role=r, description=f"Step {i}") for i, r in enumerate(roles, 1)]


@pytest_asyncio.fixture
async def service(seeded_repos, activity) -> WorkflowService:
    return WorkflowService(seeded_repos.workflows, activity)


class TestValidateSteps:

    def test_valid(self):
        validate_steps(_steps("manager", "admin"))

    def test_unsorted_but_contiguous(self):
        steps = _steps("manager", "admin")
        validate_steps(list(reversed(steps)))

    def test_empty(self):
        with pytest.raises(ValidationError):
            validate_steps([])

    def test_gap_in_orders(self):
        steps = [
            WorkflowStep(order=1, role="manager", description="a"),
            WorkflowStep(order=3, role="admin", description="b"),
        ]
        with pytest.raises(ValidationError) as exc_info:
            validate_steps(steps)
        assert exc_info.value.details == {"orders": [1, 3]}

    def test_blank_role(self):
        with pytest.raises(ValidationError):
            validate_steps([WorkflowStep(order=1, role=" ", description="a")])

    def test_blank_description(self):
        with pytest.raises(ValidationError):
            validate_steps([WorkflowStep(order=1, role="admin", description="")])


class TestWorkflowService:

    @pytest.mark.asyncio
    async def test_seeded_workflows(self, service):
        workflows = await service.list_workflows()
        assert [len(w.steps) for w in workflows] == [2, 3]
        assert workflows[0].is_default and workflows[0].is_locked

    @pytest.mark.asyncio
    async def test_create_logs_activity(self, service, seeded_repos):
        workflow = await service.create_workflow("IT request", _steps("staff", "admin"), created_by=1)

        assert workflow.id == 3
        logs = await seeded_repos.activity_logs.list_for_resource("workflow", workflow.id)
        assert [(log.action, log.details) for log in logs] == [("create", {"name": "IT request"})]

    @pytest.mark.asyncio
    async def test_create_requires_name(self, service):
        with pytest.raises(ValidationError):
            await service.create_workflow("", _steps("admin"), created_by=1)

    @pytest.mark.asyncio
    async def test_update(self, service):
        updated = await service.update_workflow(2, actor_id=1, steps=_steps("manager", "admin"))
        assert len(updated.steps) == 2
        assert updated.name == "ขั้นตอนการอนุมัติจัดซื้อ"

    @pytest.mark.asyncio
    async def test_update_locked(self, service):
        with pytest.raises(ConflictError):
            await service.update_workflow(1, actor_id=1, name="renamed")
        assert (await service.get_workflow(1)).name == "ขั้นตอนการอนุมัติลางาน"

    @pytest.mark.asyncio
    async def test_unknown_workflow(self, service):
        with pytest.raises(NotFoundError):
            await service.get_workflow(99)
