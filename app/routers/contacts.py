# =============================================================================
# app/routers/contacts.py - Contact Endpoints
# =============================================================================
# Recruiters, hiring managers and referrals. A contact may be tied to an
# application or stand alone.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.common import ItemList, OkResponse
from core.models.contact import ContactCreate, ContactResponse, ContactUpdate
from core.services.contact_service import ContactService

router = APIRouter()

ContactId = Annotated[str, Path(description="Contact ID")]


@router.get("", response_model=ItemList[ContactResponse])
async def list_contacts(
    db: DbDep,
    application_id: Annotated[str | None, Query(description="Only this application")] = None,
    user: AuthUser = Depends(get_current_user),
):
    contacts = ContactService.list_contacts(db, user.id, application_id=application_id)
    return ItemList[ContactResponse](items=[ContactResponse.model_validate(c) for c in contacts])


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(
    body: ContactCreate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    return ContactResponse.model_validate(ContactService.create_contact(db, user.id, body, ctx))


@router.patch("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: ContactId,
    body: ContactUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    contact = ContactService.update_contact(db, user.id, contact_id, body, ctx)
    return ContactResponse.model_validate(contact)


@router.delete("/{contact_id}", response_model=OkResponse)
async def delete_contact(
    contact_id: ContactId,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    ContactService.delete_contact(db, user.id, contact_id, ctx)
    return OkResponse()
