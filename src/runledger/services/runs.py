"""Run lifecycle operations.

Each operation overwrites the fields it owns on an existing run and is a
silent no-op when the run does not exist. The transition table below is the
protocol callers follow. It is only enforced when ``strict`` is set.
"""

import logging
from typing import Dict, FrozenSet

from ..core.exceptions import InvalidTransitionError
from ..core.transaction import TransactionContext
from ..schemas.args import (
    RunCreateArgs,
    RunDeleteArgs,
    RunMarkCompletedArgs,
    RunMarkFailedArgs,
    RunMarkProcessingArgs,
    RunStorePayloadArgs,
)
from ..schemas.records import EMPTY_JSON, Run, RunPayload, RunStatus
from .payloads import payload_upsert
from .timestamps import resolve_timestamp

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[RunStatus, FrozenSet[RunStatus]] = {
    RunStatus.PENDING: frozenset({RunStatus.PROCESSING, RunStatus.FAILED}),
    RunStatus.PROCESSING: frozenset({RunStatus.PROCESSING, RunStatus.COMPLETED, RunStatus.FAILED}),
    RunStatus.COMPLETED: frozenset(),
    RunStatus.FAILED: frozenset(),
}


def can_transition(current: str, target: RunStatus) -> bool:
    """Whether a run in ``current`` status may move to ``target``.

    Statuses outside RunStatus are treated as not yet started.
    """
    try:
        state = RunStatus(current)
    except ValueError:
        state = RunStatus.PENDING
    return target in ALLOWED_TRANSITIONS[state]


def _check_transition(row: Run, target: RunStatus, strict: bool) -> None:
    if strict and not can_transition(row.status, target):
        raise InvalidTransitionError(row.id, row.status, target.value)


async def run_create(ctx: TransactionContext, args: RunCreateArgs) -> None:
    """Insert the run, or replace a run with the same id.

    A replaced run loses its progress: page count, timings, stats, error and
    start/completion times go back to their defaults.
    """
    row = Run(
        id=args.id,
        mode=args.mode,
        template_id=args.template_id,
        status=args.status,
        filename=args.filename,
        mime_type=args.mime_type,
        byte_size=args.byte_size,
        page_count=0,
        timing_json=EMPTY_JSON,
        stats_json=EMPTY_JSON,
        error_message="",
        created_at=resolve_timestamp(args.created_at, ctx.timestamp),
        started_at="",
        completed_at="",
        provider=args.provider,
        document_key=args.document_key,
    )

    if await ctx.runs.find(row.id) is not None:
        await ctx.runs.update(row)
        logger.debug(f"Reset run {row.id} to status {row.status}")
    else:
        await ctx.runs.insert(row)
        logger.debug(f"Created run {row.id} with status {row.status}")


async def run_mark_processing(
    ctx: TransactionContext,
    args: RunMarkProcessingArgs,
    strict: bool = False,
) -> None:
    row = await ctx.runs.find(args.id)
    if row is None:
        logger.debug(f"Run {args.id} not found, skipping mark_processing")
        return

    _check_transition(row, RunStatus.PROCESSING, strict)
    await ctx.runs.update(row.model_copy(update={
        "status": RunStatus.PROCESSING.value,
        "started_at": args.started_at,
    }))
    logger.debug(f"Run {args.id} processing since {args.started_at}")


async def run_store_payload(ctx: TransactionContext, args: RunStorePayloadArgs) -> None:
    """Record the page count on the run and upsert its payload.

    The payload is written even when the run row is missing.
    """
    row = await ctx.runs.find(args.id)
    if row is not None:
        await ctx.runs.update(row.model_copy(update={"page_count": args.page_count}))
    else:
        logger.debug(f"Run {args.id} not found, storing payload only")

    await payload_upsert(ctx, RunPayload(
        run_id=args.id,
        md_results=args.md_results,
        layout_details_json=args.layout_details_json,
        layout_visualization_json=args.layout_visualization_json,
        extracted_fields_json=args.extracted_fields_json,
        raw_provider_json=args.raw_provider_json,
    ))


async def run_mark_completed(
    ctx: TransactionContext,
    args: RunMarkCompletedArgs,
    strict: bool = False,
) -> None:
    row = await ctx.runs.find(args.id)
    if row is None:
        logger.debug(f"Run {args.id} not found, skipping mark_completed")
        return

    _check_transition(row, RunStatus.COMPLETED, strict)
    await ctx.runs.update(row.model_copy(update={
        "status": RunStatus.COMPLETED.value,
        "completed_at": args.completed_at,
        "timing_json": args.timing_json,
        "stats_json": args.stats_json,
    }))
    logger.debug(f"Run {args.id} completed at {args.completed_at}")


async def run_mark_failed(
    ctx: TransactionContext,
    args: RunMarkFailedArgs,
    strict: bool = False,
) -> None:
    row = await ctx.runs.find(args.id)
    if row is None:
        logger.debug(f"Run {args.id} not found, skipping mark_failed")
        return

    _check_transition(row, RunStatus.FAILED, strict)
    await ctx.runs.update(row.model_copy(update={
        "status": RunStatus.FAILED.value,
        "completed_at": args.completed_at,
        "timing_json": args.timing_json,
        "error_message": args.error_message,
    }))
    logger.debug(f"Run {args.id} failed: {args.error_message}")


async def run_delete(ctx: TransactionContext, args: RunDeleteArgs) -> None:
    """Remove the run and its payload, whichever of them exist."""
    payload_deleted = await ctx.run_payloads.delete(args.id)
    run_deleted = await ctx.runs.delete(args.id)
    logger.debug(f"Deleted run {args.id} (run={run_deleted}, payload={payload_deleted})")
