# =============================================================================
# core/models/note.py - Note Schemas
# =============================================================================

from datetime import datetime

from pydantic import Field

from .common import InputSchema, OutputSchema


class NoteCreate(InputSchema):
    application_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=5000)


class NoteUpdate(InputSchema):
    content: str = Field(..., min_length=1, max_length=5000)


class NoteResponse(OutputSchema):
    id: str
    application_id: str
    content: str
    created_at: datetime
    updated_at: datetime
