# =============================================================================
# core/models/salary_offer.py - Salary Offer Schemas
# =============================================================================
# Offer history for an application (initial offer, counters, final).
# =============================================================================

from datetime import datetime

from pydantic import Field

from .common import InputSchema, OfferType, OutputSchema, UTCDatetime


class SalaryOfferCreate(InputSchema):
    application_id: str = Field(..., min_length=1)
    type: OfferType = OfferType.INITIAL
    base_salary: int = Field(..., gt=0)
    bonus: int | None = Field(default=None, ge=0)
    signing_bonus: int | None = Field(default=None, ge=0)
    equity: str | None = Field(default=None, max_length=500)
    benefits: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=2000)
    offer_date: UTCDatetime | None = None
    is_accepted: bool | None = None
    currency: str = Field(default="USD", pattern=r"^[A-Za-z]{3}$")


class SalaryOfferUpdate(InputSchema):
    type: OfferType | None = None
    base_salary: int | None = Field(default=None, gt=0)
    bonus: int | None = Field(default=None, ge=0)
    signing_bonus: int | None = Field(default=None, ge=0)
    equity: str | None = Field(default=None, max_length=500)
    benefits: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=2000)
    offer_date: UTCDatetime | None = None
    is_accepted: bool | None = None
    currency: str | None = Field(default=None, pattern=r"^[A-Za-z]{3}$")


class SalaryOfferResponse(OutputSchema):
    id: str
    application_id: str
    type: OfferType
    base_salary: int
    bonus: int | None = None
    signing_bonus: int | None = None
    equity: str | None = None
    benefits: str | None = None
    notes: str | None = None
    offer_date: datetime
    is_accepted: bool | None = None
    currency: str
    created_at: datetime
    updated_at: datetime
