"""Tests for the ledger service."""

import logging

import pytest
from pydantic import ValidationError

from runledger.core.config import Settings
from runledger.core.exceptions import InvalidTransitionError, UnknownOperationError
from runledger.schemas import (
    RunCreateArgs,
    RunDeleteArgs,
    RunMarkCompletedArgs,
    RunMarkProcessingArgs,
    RunStorePayloadArgs,
    TemplateDeactivateArgs,
    TemplateUpsertArgs,
)
from runledger.services.ledger_service import LedgerService

from .helpers import T0, T1, T2, fetch


class TestLedgerServiceOperations:
    """Operations run through the service, one transaction each."""

    @pytest.mark.asyncio
    async def test_template_scenario(self, service, engine, clock):
        args = TemplateUpsertArgs(id="t1", name="Invoice", schema_json="{}", created_at="", updated_at="")
        await service.template_upsert(args)
        clock.current = T1
        await service.template_upsert(args)

        template = await service.get_template("t1")
        assert template.created_at == T0
        assert template.updated_at == T1

    @pytest.mark.asyncio
    async def test_run_lifecycle(self, service):
        await service.run_create(RunCreateArgs(
            id="r1", filename="a.pdf", mime_type="application/pdf", byte_size=10,
        ))
        await service.run_mark_processing(RunMarkProcessingArgs(id="r1", started_at=T1))
        await service.run_store_payload(RunStorePayloadArgs(id="r1", md_results="text", page_count=1))
        await service.run_mark_completed(RunMarkCompletedArgs(id="r1", completed_at=T2))

        detail = await service.get_run_detail("r1")
        assert detail.run.status == "completed"
        assert detail.run.page_count == 1
        assert detail.payload.md_results == "text"

        await service.run_delete(RunDeleteArgs(id="r1"))
        assert await service.get_run_detail("r1") is None
        assert await service.get_run("r1") is None

    @pytest.mark.asyncio
    async def test_call_by_name(self, service, engine):
        await service.call("run_create", {
            "id": "r1",
            "mode": "everything",
            "status": "pending",
            "filename": "scan.png",
            "mime_type": "image/png",
            "byte_size": 512,
            "created_at": "",
        })
        await service.call("run_mark_failed", {
            "id": "r1",
            "completed_at": T1,
            "timing_json": {"totalMs": 5},
            "error_message": "unsupported file",
        })

        run = await fetch(engine, "runs", "r1")
        assert run.status == "failed"
        assert run.timing_json == '{"totalMs":5}'
        assert run.created_at == T0

    @pytest.mark.asyncio
    async def test_call_unknown_operation(self, service):
        with pytest.raises(UnknownOperationError):
            await service.call("run_archive", {"id": "r1"})

    @pytest.mark.asyncio
    async def test_call_rejects_invalid_payload(self, service, engine):
        with pytest.raises(ValidationError):
            await service.call("run_create", {"id": "r1"})
        assert await fetch(engine, "runs", "r1") is None

    def test_operation_names(self, service):
        assert service.operations == [
            "run_create",
            "run_delete",
            "run_mark_completed",
            "run_mark_failed",
            "run_mark_processing",
            "run_store_payload",
            "template_deactivate",
            "template_upsert",
        ]

    @pytest.mark.asyncio
    async def test_strict_transitions_from_settings(self, engine):
        service = LedgerService(engine, Settings(_env_file=None, STRICT_RUN_TRANSITIONS=True))
        await service.run_create(RunCreateArgs(id="r1", filename="a.pdf", mime_type="application/pdf"))

        with pytest.raises(InvalidTransitionError):
            await service.run_mark_completed(RunMarkCompletedArgs(id="r1", completed_at=T1))
        assert (await service.get_run("r1")).status == "pending"


class TestLedgerServiceQueries:
    """Read queries and their ordering."""

    @pytest.mark.asyncio
    async def test_list_templates_newest_update_first(self, service, clock):
        for template_id, ts in [("a", T0), ("b", T2), ("c", T1)]:
            clock.current = ts
            await service.template_upsert(TemplateUpsertArgs(id=template_id, name=template_id, schema_json="{}"))
        clock.current = "2024-05-01T13:00:00+00:00"
        await service.template_deactivate(TemplateDeactivateArgs(id="a"))

        assert [t.id for t in await service.list_templates()] == ["a", "b", "c"]
        assert [t.id for t in await service.list_templates(active_only=True)] == ["b", "c"]

    @pytest.mark.asyncio
    async def test_list_runs_newest_first(self, service):
        for run_id, created in [("old", T0), ("new", T2), ("mid", T1)]:
            await service.run_create(RunCreateArgs(
                id=run_id, filename=f"{run_id}.pdf", mime_type="application/pdf", created_at=created,
            ))

        assert [r.id for r in await service.list_runs()] == ["new", "mid", "old"]

    @pytest.mark.asyncio
    async def test_missing_provider_is_inferred_not_stored(self, service, engine):
        await service.run_create(RunCreateArgs(id="r1", filename="a.pdf", mime_type="application/pdf"))
        await service.run_store_payload(RunStorePayloadArgs(
            id="r1", raw_provider_json={"document_annotation": "{}", "pages": []},
        ))

        assert (await service.get_run("r1")).provider == "mistral"
        assert (await service.list_runs())[0].provider == "mistral"
        assert (await fetch(engine, "runs", "r1")).provider is None

    @pytest.mark.asyncio
    async def test_get_missing(self, service):
        assert await service.get_template("nope") is None
        assert await service.get_run("nope") is None
        assert await service.get_run_detail("nope") is None

    @pytest.mark.asyncio
    async def test_run_detail_without_payload(self, service):
        await service.run_create(RunCreateArgs(id="r1", filename="a.pdf", mime_type="application/pdf"))
        detail = await service.get_run_detail("r1")
        assert detail.run.id == "r1"
        assert detail.payload is None


class TestLedgerServiceLifecycle:
    """Hooks leave the stores untouched."""

    @pytest.mark.asyncio
    async def test_hooks_are_noops(self, service, caplog):
        caplog.set_level(logging.DEBUG, logger="runledger.services.hooks")
        await service.startup()
        await service.client_connected("client-1")
        await service.client_disconnected("client-1")

        assert await service.list_templates() == []
        assert await service.list_runs() == []
        assert "Client connected: client-1" in caplog.text
