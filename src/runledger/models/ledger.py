"""Ledger tables: templates, runs and run payloads.

Timestamps are stored as the ISO-8601 strings handed to the operations, and
none of the tables declare foreign keys. A run's template_id and a payload's
run_id are logical references kept consistent by the operations.
"""

from typing import Optional

from sqlalchemy import BigInteger, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class TemplateRow(Base):
    """Named extraction configuration."""
    __tablename__ = "templates"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    schema_json: Mapped[str] = mapped_column(Text, nullable=False)
    extraction_rules: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_at: Mapped[str] = mapped_column(String(64), nullable=False)


class RunRow(Base):
    """Run metadata; large results live in run_payloads."""
    __tablename__ = "runs"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    mode: Mapped[str] = mapped_column(String(32), nullable=False)
    template_id: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    # pending|processing|completed|failed, not constrained here
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    byte_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    page_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    timing_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    stats_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    error_message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(String(64), nullable=False)
    started_at: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    completed_at: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    provider: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    document_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class RunPayloadRow(Base):
    """Result blobs for a run, keyed by the run id."""
    __tablename__ = "run_payloads"

    run_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    md_results: Mapped[str] = mapped_column(Text, nullable=False, default="")
    layout_details_json: Mapped[str] = mapped_column(Text, nullable=False, default="")
    layout_visualization_json: Mapped[str] = mapped_column(Text, nullable=False, default="")
    extracted_fields_json: Mapped[str] = mapped_column(Text, nullable=False, default="")
    raw_provider_json: Mapped[str] = mapped_column(Text, nullable=False, default="")
