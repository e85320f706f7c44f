"""Ledger service running each operation in its own transaction."""

import logging
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel

from ..core.config import Settings, get_settings
from ..core.exceptions import UnknownOperationError
from ..core.transaction import TransactionContext, TransactionEngine
from ..schemas.args import (
    RunCreateArgs,
    RunDeleteArgs,
    RunMarkCompletedArgs,
    RunMarkFailedArgs,
    RunMarkProcessingArgs,
    RunStorePayloadArgs,
    TemplateDeactivateArgs,
    TemplateUpsertArgs,
)
from ..schemas.records import Run, RunDetail, Template
from . import hooks
from .payloads import with_inferred_provider
from .runs import (
    run_create,
    run_delete,
    run_mark_completed,
    run_mark_failed,
    run_mark_processing,
    run_store_payload,
)
from .templates import template_deactivate, template_upsert

logger = logging.getLogger(__name__)

Handler = Callable[[TransactionContext, Any], Awaitable[None]]


class LedgerService:
    """Service for templates, runs and run payloads."""

    def __init__(self, engine: TransactionEngine, settings: Optional[Settings] = None):
        self.engine = engine
        self.settings = settings or get_settings()
        strict = self.settings.STRICT_RUN_TRANSITIONS

        self._operations: Dict[str, Tuple[Type[BaseModel], Handler]] = {
            "template_upsert": (TemplateUpsertArgs, template_upsert),
            "template_deactivate": (TemplateDeactivateArgs, template_deactivate),
            "run_create": (RunCreateArgs, run_create),
            "run_mark_processing": (RunMarkProcessingArgs, partial(run_mark_processing, strict=strict)),
            "run_store_payload": (RunStorePayloadArgs, run_store_payload),
            "run_mark_completed": (RunMarkCompletedArgs, partial(run_mark_completed, strict=strict)),
            "run_mark_failed": (RunMarkFailedArgs, partial(run_mark_failed, strict=strict)),
            "run_delete": (RunDeleteArgs, run_delete),
        }

    @property
    def operations(self) -> List[str]:
        return sorted(self._operations)

    async def _execute(self, name: str, args: BaseModel) -> None:
        _, handler = self._operations[name]
        async with self.engine.transaction() as ctx:
            await handler(ctx, args)
        logger.debug(f"Committed {name} at {ctx.timestamp}")

    async def call(self, name: str, payload: Dict[str, Any]) -> None:
        """Validate a raw argument dict and run the named operation.

        Raises:
            UnknownOperationError: name is not a ledger operation
            pydantic.ValidationError: payload does not match the arguments
        """
        if name not in self._operations:
            raise UnknownOperationError(name)
        args_model, _ = self._operations[name]
        await self._execute(name, args_model.model_validate(payload))

    # Lifecycle

    async def startup(self) -> None:
        await self.engine.startup()
        async with self.engine.transaction() as ctx:
            await hooks.on_startup(ctx)

    async def client_connected(self, client_id: Optional[str] = None) -> None:
        async with self.engine.transaction() as ctx:
            await hooks.on_client_connect(ctx, client_id)

    async def client_disconnected(self, client_id: Optional[str] = None) -> None:
        async with self.engine.transaction() as ctx:
            await hooks.on_client_disconnect(ctx, client_id)

    async def shutdown(self) -> None:
        await self.engine.shutdown()

    # Templates

    async def template_upsert(self, args: TemplateUpsertArgs) -> None:
        await self._execute("template_upsert", args)

    async def template_deactivate(self, args: TemplateDeactivateArgs) -> None:
        await self._execute("template_deactivate", args)

    async def list_templates(self, active_only: bool = False) -> List[Template]:
        """List templates, most recently updated first."""
        async with self.engine.transaction() as ctx:
            templates = await ctx.templates.scan()
        if active_only:
            templates = [t for t in templates if t.is_active]
        return sorted(templates, key=lambda t: t.updated_at, reverse=True)

    async def get_template(self, template_id: str) -> Optional[Template]:
        async with self.engine.transaction() as ctx:
            return await ctx.templates.find(template_id)

    # Runs

    async def run_create(self, args: RunCreateArgs) -> None:
        await self._execute("run_create", args)

    async def run_mark_processing(self, args: RunMarkProcessingArgs) -> None:
        await self._execute("run_mark_processing", args)

    async def run_store_payload(self, args: RunStorePayloadArgs) -> None:
        await self._execute("run_store_payload", args)

    async def run_mark_completed(self, args: RunMarkCompletedArgs) -> None:
        await self._execute("run_mark_completed", args)

    async def run_mark_failed(self, args: RunMarkFailedArgs) -> None:
        await self._execute("run_mark_failed", args)

    async def run_delete(self, args: RunDeleteArgs) -> None:
        await self._execute("run_delete", args)

    async def list_runs(self) -> List[Run]:
        """List runs, newest first, with missing providers inferred."""
        async with self.engine.transaction() as ctx:
            runs = await ctx.runs.scan()
            payloads = {p.run_id: p for p in await ctx.run_payloads.scan()}
        runs = [with_inferred_provider(run, payloads.get(run.id)) for run in runs]
        return sorted(runs, key=lambda r: r.created_at, reverse=True)

    async def get_run(self, run_id: str) -> Optional[Run]:
        async with self.engine.transaction() as ctx:
            run = await ctx.runs.find(run_id)
            if run is None:
                return None
            payload = await ctx.run_payloads.find(run_id)
        return with_inferred_provider(run, payload)

    async def get_run_detail(self, run_id: str) -> Optional[RunDetail]:
        async with self.engine.transaction() as ctx:
            run = await ctx.runs.find(run_id)
            if run is None:
                return None
            payload = await ctx.run_payloads.find(run_id)
        return RunDetail(run=run, payload=payload)
