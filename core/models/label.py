# =============================================================================
# core/models/label.py - Label Schemas
# =============================================================================

from datetime import datetime

from pydantic import Field

from .common import InputSchema, OutputSchema

HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"
DEFAULT_LABEL_COLOR = "#6366f1"


class LabelCreate(InputSchema):
    name: str = Field(..., min_length=1, max_length=30)
    color: str = Field(default=DEFAULT_LABEL_COLOR, pattern=HEX_COLOR_PATTERN)


class LabelUpdate(InputSchema):
    name: str | None = Field(default=None, min_length=1, max_length=30)
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)


class LabelResponse(OutputSchema):
    id: str
    name: str
    color: str
    created_at: datetime
    updated_at: datetime
