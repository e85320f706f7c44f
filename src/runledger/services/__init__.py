"""Ledger operations and the service that runs them."""

from .hooks import on_client_connect, on_client_disconnect, on_startup
from .ledger_service import LedgerService
from .payloads import infer_provider, payload_upsert
from .runs import (
    ALLOWED_TRANSITIONS,
    can_transition,
    run_create,
    run_delete,
    run_mark_completed,
    run_mark_failed,
    run_mark_processing,
    run_store_payload,
)
from .templates import template_deactivate, template_upsert
from .timestamps import resolve_timestamp

__all__ = [
    "ALLOWED_TRANSITIONS",
    "LedgerService",
    "can_transition",
    "infer_provider",
    "on_client_connect",
    "on_client_disconnect",
    "on_startup",
    "payload_upsert",
    "resolve_timestamp",
    "run_create",
    "run_delete",
    "run_mark_completed",
    "run_mark_failed",
    "run_mark_processing",
    "run_store_payload",
    "template_deactivate",
    "template_upsert",
]
