"""Database models for the run ledger."""

from .base import Base
from .ledger import RunPayloadRow, RunRow, TemplateRow

__all__ = ["Base", "RunPayloadRow", "RunRow", "TemplateRow"]
