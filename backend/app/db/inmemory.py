"""In-memory implementations of repository interfaces."""

from datetime import datetime, timedelta, timezone

from backend.app.db.context import RequestContext
from backend.app.db.repositories import RetryAfter
from backend.app.editor.html import html_to_plain_text
from backend.app.models.documents import Document, DocumentCreate, DocumentUpdate, update_fields


class InMemoryDocumentRepository:
    """In-memory implementation of DocumentRepository."""

    def __init__(self) -> None:
        self._documents: dict[int, Document] = {}
        self._next_id = 1

    async def create_document(self, ctx: RequestContext, data: DocumentCreate) -> Document:
        """Create a new document."""
        now = datetime.now(timezone.utc)
        document = Document(
            id=self._next_id,
            user_id=ctx.user_id,
            title=data.title,
            plain_text=html_to_plain_text(data.rich_content),
            rich_content=data.rich_content,
            analysis_mode=data.analysis_mode,
            analysis_result=data.analysis_result,
            created_at=now,
            updated_at=now,
        )
        self._documents[document.id] = document
        self._next_id += 1
        return document

    async def get_document(self, ctx: RequestContext, document_id: int) -> Document | None:
        """Get document by ID."""
        document = self._documents.get(document_id)

        if document is None:
            return None

        # Enforce ownership
        if document.user_id != ctx.user_id:
            return None

        return document

    async def update_document(
        self, ctx: RequestContext, document_id: int, data: DocumentUpdate
    ) -> Document | None:
        """Update an existing document."""
        document = await self.get_document(ctx, document_id)
        if document is None:
            return None

        changes = update_fields(data)
        if "rich_content" in changes:
            changes["plain_text"] = html_to_plain_text(changes["rich_content"])
        changes["updated_at"] = datetime.now(timezone.utc)

        updated = document.model_copy(update=changes)
        self._documents[document_id] = updated
        return updated

    async def delete_document(self, ctx: RequestContext, document_id: int) -> bool:
        """Delete a document."""
        if await self.get_document(ctx, document_id) is None:
            return False
        del self._documents[document_id]
        return True

    async def list_documents(self, ctx: RequestContext) -> list[Document]:
        """List the user's documents."""
        documents = [d for d in self._documents.values() if d.user_id == ctx.user_id]
        documents.sort(key=lambda d: (d.updated_at, d.id), reverse=True)
        return documents


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._windows: dict[str, tuple[datetime, int]] = {}

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        if key not in self._windows:
            # First request
            self._windows[key] = (now, 1)
            return None

        window_start, count = self._windows[key]
        window_end = window_start + timedelta(seconds=self._window_seconds)

        if now >= window_end:
            # New window
            self._windows[key] = (now, 1)
            return None

        if count >= self._max_requests:
            return RetryAfter(seconds=max(1, int((window_end - now).total_seconds())))

        self._windows[key] = (window_start, count + 1)
        return None
