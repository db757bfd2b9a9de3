"""SQL implementations of repository interfaces."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.context import RequestContext
from backend.app.db.models import Document as DocumentRow
from backend.app.db.models import User, utcnow
from backend.app.editor.html import html_to_plain_text
from backend.app.models.analysis import AnalysisResult
from backend.app.models.common import AnalysisMode
from backend.app.models.documents import Document, DocumentCreate, DocumentUpdate, update_fields


def _to_domain(row: DocumentRow) -> Document:
    return Document(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        plain_text=row.content,
        rich_content=row.html_content,
        analysis_mode=AnalysisMode(row.analysis_mode) if row.analysis_mode else None,
        analysis_result=(
            AnalysisResult.model_validate(row.analysis_result)
            if row.analysis_result is not None
            else None
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlDocumentRepository:
    """SQL implementation of DocumentRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_row(self, ctx: RequestContext, document_id: int) -> DocumentRow | None:
        result = await self._session.execute(
            select(DocumentRow).where(
                DocumentRow.id == document_id,
                DocumentRow.user_id == ctx.user_id,
            )
        )
        return result.scalar_one_or_none()

    async def _ensure_user(self, ctx: RequestContext) -> None:
        # Identities come from the auth provider; provision the row on first write
        if await self._session.get(User, ctx.user_id) is None:
            self._session.add(
                User(id=ctx.user_id, email="", external_id=str(ctx.user_id), created_at=utcnow())
            )
            await self._session.flush()

    async def create_document(self, ctx: RequestContext, data: DocumentCreate) -> Document:
        """Create a new document."""
        await self._ensure_user(ctx)
        now = utcnow()
        row = DocumentRow(
            user_id=ctx.user_id,
            title=data.title,
            content=html_to_plain_text(data.rich_content),
            html_content=data.rich_content,
            analysis_mode=data.analysis_mode.value if data.analysis_mode else None,
            analysis_result=(
                data.analysis_result.model_dump(mode="json") if data.analysis_result else None
            ),
            created_at=now,
            updated_at=now,
        )

        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)

        return _to_domain(row)

    async def get_document(self, ctx: RequestContext, document_id: int) -> Document | None:
        """Get document by ID."""
        row = await self._get_row(ctx, document_id)
        return _to_domain(row) if row is not None else None

    async def update_document(
        self, ctx: RequestContext, document_id: int, data: DocumentUpdate
    ) -> Document | None:
        """Update an existing document."""
        row = await self._get_row(ctx, document_id)
        if row is None:
            return None

        changes = update_fields(data)
        if "title" in changes:
            row.title = changes["title"]
        if "rich_content" in changes:
            row.html_content = changes["rich_content"]
            row.content = html_to_plain_text(changes["rich_content"])
        if "analysis_mode" in changes:
            mode = changes["analysis_mode"]
            row.analysis_mode = mode.value if mode else None
        if "analysis_result" in changes:
            result = changes["analysis_result"]
            row.analysis_result = result.model_dump(mode="json") if result else None
        row.updated_at = utcnow()

        await self._session.commit()
        await self._session.refresh(row)

        return _to_domain(row)

    async def delete_document(self, ctx: RequestContext, document_id: int) -> bool:
        """Delete a document."""
        row = await self._get_row(ctx, document_id)
        if row is None:
            return False

        await self._session.delete(row)
        await self._session.commit()
        return True

    async def list_documents(self, ctx: RequestContext) -> list[Document]:
        """List the user's documents."""
        result = await self._session.execute(
            select(DocumentRow)
            .where(DocumentRow.user_id == ctx.user_id)
            .order_by(DocumentRow.updated_at.desc(), DocumentRow.id.desc())
        )
        return [_to_domain(row) for row in result.scalars().all()]
