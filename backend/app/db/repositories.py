"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from backend.app.db.context import RequestContext
from backend.app.models.documents import Document, DocumentCreate, DocumentUpdate


class DocumentRepository(Protocol):
    """Repository for document operations.

    Every method is scoped to ``ctx.user_id``; documents owned by other users
    behave as if they did not exist. Implementations derive ``plain_text``
    from ``rich_content`` on every write.
    """

    async def create_document(self, ctx: RequestContext, data: DocumentCreate) -> Document:
        """Create a new document.

        Args:
            ctx: Request context with the owner's user ID
            data: Title, rich content and optional analysis fields

        Returns:
            Persisted document
        """
        ...

    async def get_document(self, ctx: RequestContext, document_id: int) -> Document | None:
        """Get document by ID.

        Args:
            ctx: Request context (enforces ownership)
            document_id: Document ID

        Returns:
            Document or None if not found
        """
        ...

    async def update_document(
        self, ctx: RequestContext, document_id: int, data: DocumentUpdate
    ) -> Document | None:
        """Apply a partial update; fields not set on ``data`` are left untouched.

        Args:
            ctx: Request context (enforces ownership)
            document_id: Document ID
            data: Partial update

        Returns:
            Updated document or None if not found
        """
        ...

    async def delete_document(self, ctx: RequestContext, document_id: int) -> bool:
        """Delete a document.

        Returns:
            True if a document was deleted
        """
        ...

    async def list_documents(self, ctx: RequestContext) -> list[Document]:
        """List the user's documents, most recently updated first."""
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...
