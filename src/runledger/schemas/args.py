"""Argument records accepted by the ledger operations."""

import json
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .records import EMPTY_JSON, RunMode, RunStatus


def _to_timestamp_arg(value: Any) -> Any:
    # None means "not supplied", same as the empty string
    return "" if value is None else value


def _to_json_arg(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return value


TimestampArg = Annotated[str, BeforeValidator(_to_timestamp_arg)]
JsonArg = Annotated[str, BeforeValidator(_to_json_arg)]


class TemplateUpsertArgs(BaseModel):
    """Full template field set with optional timestamp overrides."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str = ""
    template_schema: JsonArg = Field(alias="schema_json")
    extraction_rules: JsonArg = ""
    is_active: bool = True
    created_at: TimestampArg = ""
    updated_at: TimestampArg = ""


class TemplateDeactivateArgs(BaseModel):
    id: str


class RunCreateArgs(BaseModel):
    """Initial state of a run; status is stored as given."""
    id: str
    mode: str = RunMode.TEMPLATE.value
    template_id: str = ""
    status: str = RunStatus.PENDING.value
    provider: Optional[str] = None
    document_key: Optional[str] = None
    filename: str
    mime_type: str
    byte_size: int = Field(default=0, ge=0)
    created_at: TimestampArg = ""

    @field_validator("mode", "status", "provider", mode="before")
    @classmethod
    def unwrap_enum(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value


class RunMarkProcessingArgs(BaseModel):
    id: str
    started_at: str


class RunStorePayloadArgs(BaseModel):
    """Payload blobs for a run plus its final page count."""
    id: str
    md_results: str = ""
    layout_details_json: JsonArg = ""
    layout_visualization_json: JsonArg = ""
    extracted_fields_json: JsonArg = ""
    raw_provider_json: JsonArg = ""
    page_count: int = Field(default=0, ge=0)


class RunMarkCompletedArgs(BaseModel):
    id: str
    completed_at: str
    timing_json: JsonArg = EMPTY_JSON
    stats_json: JsonArg = EMPTY_JSON


class RunMarkFailedArgs(BaseModel):
    id: str
    completed_at: str
    timing_json: JsonArg = EMPTY_JSON
    error_message: str = ""


class RunDeleteArgs(BaseModel):
    id: str
