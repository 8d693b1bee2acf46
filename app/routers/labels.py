# =============================================================================
# app/routers/labels.py - Label Endpoints
# =============================================================================
# Named, coloured labels. Names are unique per user ignoring case.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.common import ItemList, OkResponse
from core.models.label import LabelCreate, LabelResponse, LabelUpdate
from core.services.label_service import LabelService

router = APIRouter()

LabelId = Annotated[str, Path(description="Label ID")]


@router.get("", response_model=ItemList[LabelResponse])
async def list_labels(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    labels = LabelService.list_labels(db, user.id)
    return ItemList[LabelResponse](items=[LabelResponse.model_validate(label) for label in labels])


@router.post("", response_model=LabelResponse, status_code=201)
async def create_label(
    body: LabelCreate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a label.

    Returns 409 DUPLICATE when a label with the same name exists.
    """
    return LabelResponse.model_validate(LabelService.create_label(db, user.id, body, ctx))


@router.patch("/{label_id}", response_model=LabelResponse)
async def update_label(
    label_id: LabelId,
    body: LabelUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    return LabelResponse.model_validate(LabelService.update_label(db, user.id, label_id, body, ctx))


@router.delete("/{label_id}", response_model=OkResponse)
async def delete_label(
    label_id: LabelId,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    LabelService.delete_label(db, user.id, label_id, ctx)
    return OkResponse()
