# =============================================================================
# app/routers/applications.py - Job Application Endpoints
# =============================================================================
# CRUD, search, bulk operations, tags, timeline and CSV import/export.
# All endpoints require authentication and only touch the caller's rows.
# =============================================================================

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, File, Path, Query, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.application import (
    ApplicationCreate,
    ApplicationListParams,
    ApplicationResponse,
    ApplicationUpdate,
    BulkOperationRequest,
    BulkOperationResult,
    ImportRequest,
    ImportResult,
    TagCount,
)
from core.models.common import ItemList, OkResponse, Page
from core.models.dashboard import TimelineEvent
from core.services.application_service import ApplicationService
from core.services.csv_service import CsvService
from lib.rate_limiter import rate_limit

router = APIRouter()


# =============================================================================
# Query Parsing
# =============================================================================

def get_list_params(
    q: Annotated[str | None, Query(description="Search company, title and location")] = None,
    stage: Annotated[str | None, Query(description="Filter by stage")] = None,
    tags: Annotated[str | None, Query(description="Comma-separated tags (any match)")] = None,
    from_date: Annotated[str | None, Query(alias="from", description="Applied on/after (ISO 8601)")] = None,
    to_date: Annotated[str | None, Query(alias="to", description="Applied on/before (ISO 8601)")] = None,
    sort_by: Annotated[str | None, Query(description="company, title, stage, updated_at, applied_date, created_at")] = None,
    sort_dir: Annotated[str | None, Query(description="asc or desc")] = None,
    page: Annotated[str | None, Query(description="Page number (1-based)")] = None,
    page_size: Annotated[str | None, Query(description="Items per page (max 100)")] = None,
) -> ApplicationListParams:
    """
    Validate the list query through ApplicationListParams so bad values
    come back in the standard VALIDATION_ERROR envelope.
    """
    raw = {
        "q": q,
        "stage": stage.upper() if stage else stage,
        "tags": tags,
        "from": from_date,
        "to": to_date,
        "sort_by": sort_by,
        "sort_dir": sort_dir,
        "page": page,
        "page_size": page_size,
    }
    try:
        return ApplicationListParams.model_validate({k: v for k, v in raw.items() if v is not None})
    except ValidationError as e:
        raise RequestValidationError(e.errors())


ListParamsDep = Annotated[ApplicationListParams, Depends(get_list_params)]
ApplicationId = Annotated[str, Path(description="Application ID")]


# =============================================================================
# Collection Endpoints
# =============================================================================

@router.get("", response_model=Page[ApplicationResponse])
async def list_applications(
    db: DbDep,
    params: ListParamsDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    List applications with search, filters, sorting and pagination.

    Tags match if the application has any of the given tags.
    """
    items, total = ApplicationService.list_applications(db, user.id, params)
    return Page[ApplicationResponse](
        page=params.page,
        page_size=params.page_size,
        total=total,
        items=[ApplicationResponse.model_validate(app) for app in items],
    )


@router.post(
    "",
    response_model=ApplicationResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("applications:create", 60))],
)
async def create_application(
    body: ApplicationCreate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create an application.

    FREE accounts are capped at 200 live applications (403 PLAN_LIMIT).
    """
    app = ApplicationService.create_application(db, user.id, user.plan, body, ctx)
    return ApplicationResponse.model_validate(app)


@router.post(
    "/bulk",
    response_model=BulkOperationResult,
    dependencies=[Depends(rate_limit("applications:bulk", 10))],
)
async def bulk_operation(
    body: BulkOperationRequest,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """Update stage/priority/tags of, or delete, up to 100 applications."""
    return ApplicationService.bulk_operation(db, user.id, body, ctx)


@router.get("/tags", response_model=ItemList[TagCount])
async def list_tags(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """Distinct tags with usage counts, most used first."""
    return ItemList[TagCount](items=ApplicationService.tag_counts(db, user.id))


# =============================================================================
# CSV Import / Export
# =============================================================================

@router.get("/export")
async def export_applications(
    db: DbDep,
    ctx: ContextDep,
    params: ListParamsDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Download applications as CSV (Pro only).

    Accepts the same filters as the list endpoint.
    """
    content = CsvService.export_csv(db, user.id, user.plan, params, ctx)
    filename = f"applications-{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/import",
    response_model=ImportResult,
    dependencies=[Depends(rate_limit("applications:import", 5))],
)
async def import_applications(
    body: ImportRequest,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Import up to 500 rows given as JSON objects.

    Keys may be camelCase (as exported) or snake_case. Invalid rows are
    reported in `failures`; FREE accounts are truncated at their cap.
    """
    return CsvService.import_rows(db, user.id, user.plan, body.rows, ctx)


@router.post(
    "/import/csv",
    response_model=ImportResult,
    dependencies=[Depends(rate_limit("applications:import", 5))],
)
async def import_applications_csv(
    db: DbDep,
    ctx: ContextDep,
    file: Annotated[UploadFile, File(description="CSV file with a header row")],
    user: AuthUser = Depends(get_current_user),
):
    """Import applications from an uploaded CSV file."""
    content = await file.read()
    rows = CsvService.parse_csv(content)
    return CsvService.import_rows(db, user.id, user.plan, rows, ctx)


# =============================================================================
# Single Application Endpoints
# =============================================================================

@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: ApplicationId,
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    app = ApplicationService.get_owned(db, user.id, application_id)
    return ApplicationResponse.model_validate(app)


@router.patch("/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: ApplicationId,
    body: ApplicationUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """Partial update; only fields present in the body change."""
    app = ApplicationService.update_application(db, user.id, application_id, body, ctx)
    return ApplicationResponse.model_validate(app)


@router.delete("/{application_id}", response_model=OkResponse)
async def delete_application(
    application_id: ApplicationId,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """Soft delete; the application disappears from every list."""
    ApplicationService.delete_application(db, user.id, application_id, ctx)
    return OkResponse()


@router.get("/{application_id}/timeline", response_model=ItemList[TimelineEvent])
async def get_timeline(
    application_id: ApplicationId,
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """Everything that happened to an application, newest first."""
    events = ApplicationService.timeline(db, user.id, application_id)
    return ItemList[TimelineEvent](items=[TimelineEvent(**event) for event in events])
