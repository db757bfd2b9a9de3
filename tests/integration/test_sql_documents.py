"""Integration tests for the SQL document repository (SQLite via aiosqlite)."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.context import RequestContext
from backend.app.db.models import User
from backend.app.db.sql_repositories import SqlDocumentRepository
from backend.app.models.analysis import AnalysisResult, Issue
from backend.app.models.common import AnalysisMode, Severity
from backend.app.models.documents import DocumentCreate, DocumentUpdate

RICH = "<p>The <strong>chairman</strong> will decide.</p>"


@pytest.mark.asyncio
async def test_create_provisions_user_and_derives_plain_text(
    sqlite_session: AsyncSession, ctx: RequestContext
) -> None:
    repository = SqlDocumentRepository(sqlite_session)

    document = await repository.create_document(ctx, DocumentCreate(title="Memo", rich_content=RICH))

    assert document.id is not None
    assert document.user_id == ctx.user_id
    assert document.plain_text == "The chairman will decide."
    assert document.rich_content == RICH

    users = (await sqlite_session.execute(select(User))).scalars().all()
    assert [user.id for user in users] == [ctx.user_id]


@pytest.mark.asyncio
async def test_second_document_reuses_user(
    sqlite_session: AsyncSession, ctx: RequestContext
) -> None:
    repository = SqlDocumentRepository(sqlite_session)

    await repository.create_document(ctx, DocumentCreate(title="One", rich_content="<p>1</p>"))
    await repository.create_document(ctx, DocumentCreate(title="Two", rich_content="<p>2</p>"))

    users = (await sqlite_session.execute(select(User))).scalars().all()
    assert len(users) == 1
    titles = [d.title for d in await repository.list_documents(ctx)]
    assert titles == ["Two", "One"]


@pytest.mark.asyncio
async def test_update_round_trips_analysis_result(
    sqlite_session: AsyncSession, ctx: RequestContext
) -> None:
    repository = SqlDocumentRepository(sqlite_session)
    document = await repository.create_document(ctx, DocumentCreate(title="Memo", rich_content=RICH))
    result = AnalysisResult(
        issues=(Issue(text="chairman", suggestion="chairperson", severity=Severity.medium),)
    )

    updated = await repository.update_document(
        ctx,
        document.id,
        DocumentUpdate(
            rich_content="<p>The chairperson will decide.</p>",
            analysis_mode=AnalysisMode.language,
            analysis_result=result,
        ),
    )

    assert updated is not None
    assert updated.title == "Memo"
    assert updated.plain_text == "The chairperson will decide."
    assert updated.analysis_mode is AnalysisMode.language
    assert updated.analysis_result == result

    fetched = await repository.get_document(ctx, document.id)
    assert fetched == updated


@pytest.mark.asyncio
async def test_documents_are_scoped_to_owner(
    sqlite_session: AsyncSession, ctx: RequestContext
) -> None:
    repository = SqlDocumentRepository(sqlite_session)
    document = await repository.create_document(ctx, DocumentCreate(title="Memo", rich_content=RICH))
    other = RequestContext(user_id=2)

    assert await repository.get_document(other, document.id) is None
    assert await repository.update_document(other, document.id, DocumentUpdate(title="x")) is None
    assert await repository.delete_document(other, document.id) is False
    assert await repository.list_documents(other) == []


@pytest.mark.asyncio
async def test_delete_document(sqlite_session: AsyncSession, ctx: RequestContext) -> None:
    repository = SqlDocumentRepository(sqlite_session)
    document = await repository.create_document(ctx, DocumentCreate(title="Memo", rich_content=RICH))

    assert await repository.delete_document(ctx, document.id) is True
    assert await repository.get_document(ctx, document.id) is None


@pytest.mark.postgres
@pytest.mark.asyncio
async def test_analysis_result_is_stored_as_jsonb(
    postgres_session: AsyncSession, ctx: RequestContext
) -> None:
    repository = SqlDocumentRepository(postgres_session)
    result = AnalysisResult(issues=(Issue(text="guys", suggestion="everyone"),))

    document = await repository.create_document(
        ctx, DocumentCreate(title="Memo", rich_content="<p>Hi guys</p>", analysis_result=result)
    )

    fetched = await repository.get_document(ctx, document.id)
    assert fetched is not None
    assert fetched.analysis_result == result
