"""Run payload storage and provider inference."""

import json
import logging
from typing import Optional

from ..core.transaction import TransactionContext
from ..schemas.records import Run, RunPayload, RunProvider

logger = logging.getLogger(__name__)


async def payload_upsert(ctx: TransactionContext, payload: RunPayload) -> None:
    """Insert the payload, or replace every blob of an existing one.

    The owning run is not checked; callers write both in one transaction.
    """
    existing = await ctx.run_payloads.find(payload.run_id)
    if existing is not None:
        await ctx.run_payloads.update(payload)
    else:
        await ctx.run_payloads.insert(payload)
    logger.debug(f"Stored payload for run {payload.run_id}")


def infer_provider(raw_provider_json: str) -> Optional[RunProvider]:
    """Guess which OCR provider produced a raw response.

    Runs recorded before the provider column existed only carry the raw
    response. Mistral responses have a document annotation or a page list,
    GLM responses carry layout details or markdown results.
    """
    if not raw_provider_json or not raw_provider_json.strip() or raw_provider_json == "{}":
        return None
    try:
        raw = json.loads(raw_provider_json)
    except ValueError:
        return None
    if not isinstance(raw, dict):
        return None

    pages = raw.get("pages")
    if "document_annotation" in raw or (isinstance(pages, list) and len(pages) > 0):
        return RunProvider.MISTRAL
    if "layout_details" in raw or "md_results" in raw:
        return RunProvider.GLM
    return None


def with_inferred_provider(run: Run, payload: Optional[RunPayload]) -> Run:
    """Return the run with provider filled in from its payload when missing."""
    if run.provider is not None or payload is None:
        return run
    provider = infer_provider(payload.raw_provider_json)
    if provider is None:
        return run
    return run.model_copy(update={"provider": provider.value})
