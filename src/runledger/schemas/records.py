"""Row records stored by the ledger tables."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RunStatus(str, Enum):
    """Run lifecycle states."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class RunMode(str, Enum):
    """How a run selects what to extract."""
    TEMPLATE = "template"
    EVERYTHING = "everything"


class RunProvider(str, Enum):
    """OCR providers that produce run payloads."""
    GLM = "glm"
    MISTRAL = "mistral"


EMPTY_JSON = "{}"


class LedgerRecord(BaseModel):
    """Base for immutable rows; new values are built with model_copy."""
    model_config = ConfigDict(frozen=True, from_attributes=True, populate_by_name=True)


class Template(LedgerRecord):
    """A named extraction configuration."""
    id: str
    name: str
    description: str = ""
    # Stored and exchanged as schema_json
    template_schema: str = Field(alias="schema_json")
    extraction_rules: str = ""
    is_active: bool = True
    created_at: str
    updated_at: str


class Run(LedgerRecord):
    """One execution of a template (or ad hoc mode) against a document."""
    id: str
    mode: str
    template_id: str = ""
    # Stored verbatim; see status_enum for the parsed value
    status: str
    filename: str
    mime_type: str
    byte_size: int = Field(default=0, ge=0)
    page_count: int = Field(default=0, ge=0)
    timing_json: str = EMPTY_JSON
    stats_json: str = EMPTY_JSON
    error_message: str = ""
    created_at: str
    started_at: str = ""
    completed_at: str = ""
    provider: Optional[str] = None
    document_key: Optional[str] = None

    @property
    def status_enum(self) -> Optional[RunStatus]:
        try:
            return RunStatus(self.status)
        except ValueError:
            return None

    @property
    def mode_enum(self) -> Optional[RunMode]:
        try:
            return RunMode(self.mode)
        except ValueError:
            return None


class RunPayload(LedgerRecord):
    """Large result artifacts owned by exactly one run."""
    run_id: str
    md_results: str = ""
    layout_details_json: str = ""
    layout_visualization_json: str = ""
    extracted_fields_json: str = ""
    raw_provider_json: str = ""


class RunDetail(BaseModel):
    """A run together with its payload, when one has been stored."""
    run: Run
    payload: Optional[RunPayload] = None
