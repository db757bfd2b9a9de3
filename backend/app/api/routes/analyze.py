"""Analysis endpoint - POST /api/analyze."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from backend.app.analysis.errors import AnalysisError, RateLimitedError
from backend.app.analysis.orchestrator import AnalysisOrchestrator
from backend.app.analysis.rubrics import coerce_mode
from backend.app.api.auth import get_current_context
from backend.app.api.routes.documents import get_document_repository
from backend.app.config import get_settings
from backend.app.db.context import RequestContext
from backend.app.db.repositories import DocumentRepository
from backend.app.editor.state import EditorState
from backend.app.llm.client import AnalysisEngine, get_analysis_engine
from backend.app.middleware.ratelimit import enforce_rate_limit
from backend.app.models.analysis import AnalyzeRequest, AnalyzeResponse
from backend.app.models.documents import DocumentUpdate

router = APIRouter(prefix="/api", tags=["analysis"])
logger = logging.getLogger(__name__)


async def get_orchestrator(
    engine: Annotated[AnalysisEngine, Depends(get_analysis_engine)],
) -> AnalysisOrchestrator:
    """FastAPI dependency building a per-request orchestrator."""
    settings = get_settings()
    return AnalysisOrchestrator(
        engine,
        max_words=settings.max_words,
        suggestion_threshold=settings.mode_suggestion_threshold,
    )


def to_http_exception(error: AnalysisError) -> HTTPException:
    """Translate an analysis error into its HTTP response."""
    headers = None
    if isinstance(error, RateLimitedError) and error.retry_after:
        headers = {"Retry-After": str(error.retry_after)}
    return HTTPException(
        status_code=error.status_code,
        detail={"code": error.code, "message": error.user_message},
        headers=headers,
    )


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(enforce_rate_limit)],
)
async def analyze(
    request: AnalyzeRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    orchestrator: Annotated[AnalysisOrchestrator, Depends(get_orchestrator)],
    repository: Annotated[DocumentRepository, Depends(get_document_repository)],
) -> AnalyzeResponse:
    """Analyze text for non-inclusive language.

    When ``document_id`` is given, the stored document is highlighted and
    saved together with the new analysis. Nothing is written if the analysis
    fails.

    Args:
        request: Content, mode and optional document ID
        ctx: Request context (user_id from auth)
        orchestrator: Analysis orchestrator
        repository: Document repository

    Returns:
        AnalyzeResponse with the analysis and an optional mode suggestion

    Raises:
        HTTPException: 400 validation, 404 unknown document, 429 rate limited,
            500 engine or internal failure
    """
    logger.info(f"[POST /api/analyze] user_id={ctx.user_id}, mode={request.mode}")

    editor: EditorState | None = None
    if request.document_id is not None:
        document = await repository.get_document(ctx, request.document_id)
        if document is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={
                    "code": "document_not_found",
                    "message": f"Document {request.document_id} was not found.",
                },
            )
        editor = EditorState.from_html(document.rich_content)

    try:
        outcome = await orchestrator.analyze(request.content, request.mode, editor=editor)
    except AnalysisError as e:
        logger.warning(f"[POST /api/analyze] user_id={ctx.user_id} failed: {e.code}")
        raise to_http_exception(e) from e
    except Exception as e:
        logger.error(f"[POST /api/analyze] user_id={ctx.user_id} failed: {e}", exc_info=True)
        raise to_http_exception(AnalysisError()) from e

    if editor is not None and request.document_id is not None:
        changes = DocumentUpdate(
            analysis_mode=coerce_mode(request.mode),
            analysis_result=outcome.analysis,
        )
        if outcome.applied:
            changes = DocumentUpdate(
                rich_content=editor.serialize(),
                analysis_mode=changes.analysis_mode,
                analysis_result=changes.analysis_result,
            )
        await repository.update_document(ctx, request.document_id, changes)

    logger.info(
        f"[POST /api/analyze] user_id={ctx.user_id} succeeded, "
        f"{len(outcome.analysis.issues)} issues, {len(outcome.highlights)} highlights"
    )

    return AnalyzeResponse(analysis=outcome.analysis, mode_suggestion=outcome.mode_suggestion)
