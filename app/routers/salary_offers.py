# =============================================================================
# app/routers/salary_offers.py - Salary Offer Endpoints
# =============================================================================
# Offer history per application: initial offer, counters, revisions, final.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.common import ItemList, OkResponse
from core.models.salary_offer import SalaryOfferCreate, SalaryOfferResponse, SalaryOfferUpdate
from core.services.salary_offer_service import SalaryOfferService

router = APIRouter()

OfferId = Annotated[str, Path(description="Salary offer ID")]


@router.get("", response_model=ItemList[SalaryOfferResponse])
async def list_offers(
    db: DbDep,
    application_id: Annotated[str | None, Query(description="Only this application")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Offers, most recent offer date first."""
    offers = SalaryOfferService.list_offers(db, user.id, application_id=application_id)
    return ItemList[SalaryOfferResponse](items=[SalaryOfferResponse.model_validate(o) for o in offers])


@router.post("", response_model=SalaryOfferResponse, status_code=201)
async def create_offer(
    body: SalaryOfferCreate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    offer = SalaryOfferService.create_offer(db, user.id, body, ctx)
    return SalaryOfferResponse.model_validate(offer)


@router.patch("/{offer_id}", response_model=SalaryOfferResponse)
async def update_offer(
    offer_id: OfferId,
    body: SalaryOfferUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    offer = SalaryOfferService.update_offer(db, user.id, offer_id, body, ctx)
    return SalaryOfferResponse.model_validate(offer)


@router.delete("/{offer_id}", response_model=OkResponse)
async def delete_offer(
    offer_id: OfferId,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    SalaryOfferService.delete_offer(db, user.id, offer_id, ctx)
    return OkResponse()
