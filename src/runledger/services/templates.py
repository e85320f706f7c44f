"""Template operations."""

import logging

from ..core.transaction import TransactionContext
from ..schemas.args import TemplateDeactivateArgs, TemplateUpsertArgs
from ..schemas.records import Template
from .timestamps import resolve_timestamp

logger = logging.getLogger(__name__)


async def template_upsert(ctx: TransactionContext, args: TemplateUpsertArgs) -> None:
    """Create or replace a template.

    created_at is kept from the existing row unless the caller supplies one;
    updated_at is refreshed unless the caller supplies one.
    """
    existing = await ctx.templates.find(args.id)

    row = Template(
        id=args.id,
        name=args.name,
        description=args.description,
        template_schema=args.template_schema,
        extraction_rules=args.extraction_rules,
        is_active=args.is_active,
        created_at=resolve_timestamp(
            args.created_at,
            ctx.timestamp,
            preserved=existing.created_at if existing is not None else None,
        ),
        updated_at=resolve_timestamp(args.updated_at, ctx.timestamp),
    )

    if existing is not None:
        await ctx.templates.update(row)
        logger.debug(f"Updated template {row.id}")
    else:
        await ctx.templates.insert(row)
        logger.debug(f"Inserted template {row.id}")


async def template_deactivate(ctx: TransactionContext, args: TemplateDeactivateArgs) -> None:
    """Soft-delete a template. Unknown ids are ignored."""
    row = await ctx.templates.find(args.id)
    if row is None:
        logger.debug(f"Template {args.id} not found, nothing to deactivate")
        return

    await ctx.templates.update(
        row.model_copy(update={"is_active": False, "updated_at": ctx.timestamp})
    )
    logger.debug(f"Deactivated template {args.id}")
