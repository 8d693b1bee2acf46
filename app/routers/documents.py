# =============================================================================
# app/routers/documents.py - Document Endpoints
# =============================================================================
# Resumes, cover letters and portfolios. At most one default per type:
# marking a document as default clears the flag on its siblings.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.common import DocumentType, ItemList, OkResponse
from core.models.document import DocumentCreate, DocumentResponse, DocumentUpdate
from core.services.document_service import DocumentService

router = APIRouter()

DocumentId = Annotated[str, Path(description="Document ID")]


@router.get("", response_model=ItemList[DocumentResponse])
async def list_documents(
    db: DbDep,
    type: Annotated[DocumentType | None, Query(description="Filter by document type")] = None,
    application_id: Annotated[str | None, Query(description="Only this application")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """List documents grouped by type, defaults first, then most recently updated."""
    documents = DocumentService.list_documents(
        db,
        user.id,
        doc_type=type.value if type else None,
        application_id=application_id,
    )
    return ItemList[DocumentResponse](items=[DocumentResponse.model_validate(d) for d in documents])


@router.post("", response_model=DocumentResponse, status_code=201)
async def create_document(
    body: DocumentCreate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    document = DocumentService.create_document(db, user.id, body, ctx)
    return DocumentResponse.model_validate(document)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: DocumentId,
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    return DocumentResponse.model_validate(DocumentService.get_owned(db, user.id, document_id))


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: DocumentId,
    body: DocumentUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    document = DocumentService.update_document(db, user.id, document_id, body, ctx)
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", response_model=OkResponse)
async def delete_document(
    document_id: DocumentId,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    DocumentService.delete_document(db, user.id, document_id, ctx)
    return OkResponse()
