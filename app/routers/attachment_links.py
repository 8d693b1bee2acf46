# =============================================================================
# app/routers/attachment_links.py - Attachment Link Endpoints
# =============================================================================
# Links to external files (job posting PDF, take-home repo, shared docs).
# Files themselves are never stored.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.attachment_link import (
    AttachmentLinkCreate,
    AttachmentLinkResponse,
    AttachmentLinkUpdate,
)
from core.models.common import ItemList, OkResponse
from core.services.attachment_link_service import AttachmentLinkService

router = APIRouter()

LinkId = Annotated[str, Path(description="Attachment link ID")]


@router.get("", response_model=ItemList[AttachmentLinkResponse])
async def list_links(
    db: DbDep,
    application_id: Annotated[str, Query(description="Application the links belong to")],
    user: AuthUser = Depends(get_current_user),
):
    links = AttachmentLinkService.list_links(db, user.id, application_id)
    return ItemList[AttachmentLinkResponse](
        items=[AttachmentLinkResponse.model_validate(link) for link in links]
    )


@router.post("", response_model=AttachmentLinkResponse, status_code=201)
async def create_link(
    body: AttachmentLinkCreate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    link = AttachmentLinkService.create_link(db, user.id, body, ctx)
    return AttachmentLinkResponse.model_validate(link)


@router.patch("/{link_id}", response_model=AttachmentLinkResponse)
async def update_link(
    link_id: LinkId,
    body: AttachmentLinkUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    link = AttachmentLinkService.update_link(db, user.id, link_id, body, ctx)
    return AttachmentLinkResponse.model_validate(link)


@router.delete("/{link_id}", response_model=OkResponse)
async def delete_link(
    link_id: LinkId,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    AttachmentLinkService.delete_link(db, user.id, link_id, ctx)
    return OkResponse()
