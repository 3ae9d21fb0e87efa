"""Unit tests for the deployment step ledger."""

from __future__ import annotations

import asyncio

import pytest

from provisioner.domain.errors import (
    DeploymentNotFoundError,
    InvalidStepKindError,
    StepNotFoundError,
)
from provisioner.domain.models.deployment import StepKind, StepStatus
from provisioner.domain.services.ledger import DeploymentLedger
from provisioner.infrastructure.messaging.event_publisher import InMemoryEventPublisher
from tests.conftest import make_result


async def _new_deployment(ledger: DeploymentLedger) -> str:
    identity = await ledger.record_init_step(
        None,
        project_id="proj-1",
        space_id="dev",
        project_name="webshop",
        result=make_result(),
    )
    return identity.deployment_id


class TestRecordInitStep:
    @pytest.mark.asyncio
    async def test_creates_deployment(self, ledger: DeploymentLedger) -> None:
        identity = await ledger.record_init_step(
            None, project_id="proj-1", space_id="dev", project_name="webshop", result=make_result()
        )

        deployment = await ledger.get_deployment(identity.deployment_id)
        assert deployment.project_id == "proj-1"
        assert deployment.space_id == "dev"
        assert identity.deployment_name.startswith("webshop-dev-")
        assert [s.kind for s in deployment.steps] == [StepKind.INIT]

    @pytest.mark.asyncio
    async def test_reinit_keeps_single_entry(self, ledger: DeploymentLedger) -> None:
        deployment_id = await _new_deployment(ledger)

        identity = await ledger.record_init_step(
            deployment_id,
            project_id="proj-1",
            space_id="dev",
            project_name="webshop",
            result=make_result(exit_code=1, stdout="", stderr="backend error"),
        )

        assert identity.deployment_id == deployment_id
        deployment = await ledger.get_deployment(deployment_id)
        inits = deployment.steps_of(StepKind.INIT)
        assert len(inits) == 1
        assert inits[0].status == StepStatus.FAILED
        assert inits[0].message == "backend error"

    @pytest.mark.asyncio
    async def test_reinit_unknown_deployment(self, ledger: DeploymentLedger) -> None:
        with pytest.raises(DeploymentNotFoundError):
            await ledger.record_init_step(
                "missing", project_id="proj-1", space_id="dev", project_name="webshop",
                result=make_result(),
            )

    @pytest.mark.asyncio
    async def test_publishes_events(
        self, ledger: DeploymentLedger, event_publisher: InMemoryEventPublisher
    ) -> None:
        await _new_deployment(ledger)
        types = [event_type for event_type, _ in event_publisher.published_events]
        assert types == ["deployment.created", "deployment.step_recorded"]


class TestAppendStep:
    @pytest.mark.asyncio
    async def test_every_run_is_kept(self, ledger: DeploymentLedger) -> None:
        deployment_id = await _new_deployment(ledger)
        for _ in range(3):
            await ledger.append_step(deployment_id, StepKind.PLAN, make_result())

        deployment = await ledger.get_deployment(deployment_id)
        assert len(deployment.steps_of(StepKind.PLAN)) == 3

    @pytest.mark.asyncio
    async def test_concurrent_appends_are_all_kept(self, ledger: DeploymentLedger) -> None:
        deployment_id = await _new_deployment(ledger)

        await asyncio.gather(*(
            ledger.append_step(deployment_id, StepKind.PLAN, make_result(stdout=f"plan {i}\n"))
            for i in range(20)
        ))

        deployment = await ledger.get_deployment(deployment_id)
        plans = deployment.steps_of(StepKind.PLAN)
        assert len(plans) == 20
        assert {s.message for s in plans} == {f"plan {i}\n" for i in range(20)}

    @pytest.mark.asyncio
    async def test_cancel_racing_appends(self, ledger: DeploymentLedger) -> None:
        deployment_id = await _new_deployment(ledger)
        await ledger.append_step(deployment_id, StepKind.PLAN, make_result(stdout="first\n"))

        await asyncio.gather(
            ledger.cancel_step(deployment_id),
            *(ledger.append_step(deployment_id, StepKind.PLAN, make_result()) for _ in range(5)),
        )

        plans = (await ledger.get_deployment(deployment_id)).steps_of(StepKind.PLAN)
        assert len(plans) == 6
        assert plans[0].status == StepStatus.CANCELLED
        assert all(s.status == StepStatus.SUCCESSFUL for s in plans[1:])

    @pytest.mark.asyncio
    async def test_order_is_preserved(self, ledger: DeploymentLedger) -> None:
        deployment_id = await _new_deployment(ledger)
        await ledger.append_step(deployment_id, StepKind.PLAN, make_result())
        await ledger.append_step(deployment_id, StepKind.APPLY, make_result())
        await ledger.append_step(deployment_id, StepKind.DESTROY, make_result(exit_code=1))

        deployment = await ledger.get_deployment(deployment_id)
        assert [(s.kind, s.status) for s in deployment.steps] == [
            (StepKind.INIT, StepStatus.SUCCESSFUL),
            (StepKind.PLAN, StepStatus.SUCCESSFUL),
            (StepKind.APPLY, StepStatus.SUCCESSFUL),
            (StepKind.DESTROY, StepStatus.FAILED),
        ]

    @pytest.mark.asyncio
    async def test_init_kind_rejected(self, ledger: DeploymentLedger) -> None:
        deployment_id = await _new_deployment(ledger)
        with pytest.raises(InvalidStepKindError):
            await ledger.append_step(deployment_id, StepKind.INIT, make_result())

    @pytest.mark.asyncio
    async def test_unknown_deployment(self, ledger: DeploymentLedger) -> None:
        with pytest.raises(DeploymentNotFoundError):
            await ledger.append_step("missing", StepKind.PLAN, make_result())


class TestCancelStep:
    @pytest.mark.asyncio
    async def test_cancels_first_plan(self, ledger: DeploymentLedger) -> None:
        deployment_id = await _new_deployment(ledger)
        await ledger.append_step(deployment_id, StepKind.PLAN, make_result(stdout="first\n"))
        await ledger.append_step(deployment_id, StepKind.PLAN, make_result(stdout="second\n"))

        cancelled = await ledger.cancel_step(deployment_id)

        assert cancelled.message == "first\n"
        deployment = await ledger.get_deployment(deployment_id)
        plans = deployment.steps_of(StepKind.PLAN)
        assert [p.status for p in plans] == [StepStatus.CANCELLED, StepStatus.SUCCESSFUL]
        assert len(deployment.steps) == 3

    @pytest.mark.asyncio
    async def test_unknown_deployment(self, ledger: DeploymentLedger) -> None:
        with pytest.raises(DeploymentNotFoundError):
            await ledger.cancel_step("missing")

    @pytest.mark.asyncio
    async def test_no_plan_leaves_ledger_unchanged(self, ledger: DeploymentLedger) -> None:
        deployment_id = await _new_deployment(ledger)
        before = await ledger.get_deployment(deployment_id)

        with pytest.raises(StepNotFoundError):
            await ledger.cancel_step(deployment_id)

        after = await ledger.get_deployment(deployment_id)
        assert after.steps == before.steps
        assert after.version == before.version

    @pytest.mark.asyncio
    async def test_publishes_cancel_event(
        self, ledger: DeploymentLedger, event_publisher: InMemoryEventPublisher
    ) -> None:
        deployment_id = await _new_deployment(ledger)
        await ledger.append_step(deployment_id, StepKind.PLAN, make_result())
        event_publisher.clear()

        await ledger.cancel_step(deployment_id)

        assert event_publisher.published_events[0][0] == "deployment.step_cancelled"
