"""Records and argument schemas for ledger operations."""

from .args import (
    RunCreateArgs,
    RunDeleteArgs,
    RunMarkCompletedArgs,
    RunMarkFailedArgs,
    RunMarkProcessingArgs,
    RunStorePayloadArgs,
    TemplateDeactivateArgs,
    TemplateUpsertArgs,
)
from .records import (
    EMPTY_JSON,
    Run,
    RunDetail,
    RunMode,
    RunPayload,
    RunProvider,
    RunStatus,
    Template,
)

__all__ = [
    "EMPTY_JSON",
    "Run",
    "RunCreateArgs",
    "RunDeleteArgs",
    "RunDetail",
    "RunMarkCompletedArgs",
    "RunMarkFailedArgs",
    "RunMarkProcessingArgs",
    "RunMode",
    "RunPayload",
    "RunProvider",
    "RunStatus",
    "RunStorePayloadArgs",
    "Template",
    "TemplateDeactivateArgs",
    "TemplateUpsertArgs",
]
