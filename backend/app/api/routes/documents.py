"""Document endpoints - CRUD under /api/documents."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.auth import get_current_context
from backend.app.db.context import RequestContext
from backend.app.db.engine import get_session
from backend.app.db.repositories import DocumentRepository
from backend.app.db.sql_repositories import SqlDocumentRepository
from backend.app.middleware.ratelimit import enforce_rate_limit
from backend.app.models.documents import (
    Document,
    DocumentCreate,
    DocumentListResponse,
    DocumentUpdate,
)

router = APIRouter(
    prefix="/api/documents",
    tags=["documents"],
    dependencies=[Depends(enforce_rate_limit)],
)
logger = logging.getLogger(__name__)


async def get_document_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DocumentRepository:
    """FastAPI dependency for the document repository."""
    return SqlDocumentRepository(session)


def _not_found(document_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"code": "document_not_found", "message": f"Document {document_id} was not found."},
    )


@router.post("", response_model=Document, status_code=status.HTTP_201_CREATED)
async def create_document(
    request: DocumentCreate,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repository: Annotated[DocumentRepository, Depends(get_document_repository)],
) -> Document:
    """Create a document; ``plain_text`` is derived from ``rich_content``."""
    document = await repository.create_document(ctx, request)
    logger.info(f"[POST /api/documents] user_id={ctx.user_id} created document {document.id}")
    return document


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repository: Annotated[DocumentRepository, Depends(get_document_repository)],
) -> DocumentListResponse:
    """List the current user's documents, most recently updated first."""
    return DocumentListResponse(documents=await repository.list_documents(ctx))


@router.get("/{document_id}", response_model=Document)
async def get_document(
    document_id: int,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repository: Annotated[DocumentRepository, Depends(get_document_repository)],
) -> Document:
    """Fetch one document."""
    document = await repository.get_document(ctx, document_id)
    if document is None:
        raise _not_found(document_id)
    return document


@router.patch("/{document_id}", response_model=Document)
async def update_document(
    document_id: int,
    request: DocumentUpdate,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repository: Annotated[DocumentRepository, Depends(get_document_repository)],
) -> Document:
    """Partially update a document."""
    document = await repository.update_document(ctx, document_id, request)
    if document is None:
        raise _not_found(document_id)
    return document


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: int,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repository: Annotated[DocumentRepository, Depends(get_document_repository)],
) -> Response:
    """Delete a document."""
    if not await repository.delete_document(ctx, document_id):
        raise _not_found(document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
