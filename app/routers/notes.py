# =============================================================================
# app/routers/notes.py - Application Note Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.common import ItemList, OkResponse
from core.models.note import NoteCreate, NoteResponse, NoteUpdate
from core.services.note_service import NoteService
from lib.rate_limiter import rate_limit

router = APIRouter()

NoteId = Annotated[str, Path(description="Note ID")]


@router.get("", response_model=ItemList[NoteResponse])
async def list_notes(
    db: DbDep,
    application_id: Annotated[str, Query(description="Application the notes belong to")],
    user: AuthUser = Depends(get_current_user),
):
    """Notes of one application, newest first."""
    notes = NoteService.list_notes(db, user.id, application_id)
    return ItemList[NoteResponse](items=[NoteResponse.model_validate(n) for n in notes])


@router.post(
    "",
    response_model=NoteResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("notes:create", 30))],
)
async def create_note(
    body: NoteCreate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    return NoteResponse.model_validate(NoteService.create_note(db, user.id, body, ctx))


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: NoteId,
    body: NoteUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    return NoteResponse.model_validate(NoteService.update_note(db, user.id, note_id, body, ctx))


@router.delete("/{note_id}", response_model=OkResponse)
async def delete_note(
    note_id: NoteId,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    NoteService.delete_note(db, user.id, note_id, ctx)
    return OkResponse()
