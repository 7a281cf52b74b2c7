import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.exceptions import InvalidIdentifierError
from features.embedding_jobs.repositories import ContentRepository, QueueRepository
from features.embedding_jobs.repositories.identifiers import TableAllowList, quote_identifier


def _session_factory(result):
    session = MagicMock()
    session.execute = AsyncMock(return_value=result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    factory = MagicMock(return_value=session)
    return factory, session


def _executed(session):
    statement, params = session.execute.await_args.args
    return str(statement), params


def test_quote_identifier_quotes_valid_names():
    assert quote_identifier("documents", field="table") == '"documents"'
    assert quote_identifier("Documents", field="table") == '"Documents"'
    assert quote_identifier("user", field="table") == '"user"'
    assert quote_identifier("util.doc_text", field="contentFunction", allow_qualified=True) == '"util"."doc_text"'


@pytest.mark.parametrize(
    ("name", "allow_qualified"),
    [
        ("docs; DROP TABLE x", False),
        ("util.doc_text", False),
        ("a.b.c", True),
        ("1table", False),
        ('docs"', False),
        ("", False),
    ],
)
def test_quote_identifier_rejects_unsafe_names(name, allow_qualified):
    with pytest.raises(InvalidIdentifierError):
        quote_identifier(name, field="table", allow_qualified=allow_qualified)


def test_table_allow_list():
    allow_list = TableAllowList(["public.documents", " "])

    allow_list.check("public", "documents")
    with pytest.raises(InvalidIdentifierError):
        allow_list.check("public", "secrets")

    TableAllowList().check("anything", "goes")


@pytest.mark.parametrize(("schema", "table"), [("PUBLIC", "DOCUMENTS"), ("public", "Documents"), ("Public", "documents")])
def test_table_allow_list_is_case_sensitive(schema, table):
    allow_list = TableAllowList(["public.documents"])

    with pytest.raises(InvalidIdentifierError):
        allow_list.check(schema, table)


@pytest.mark.asyncio
async def test_fetch_content_selects_through_content_function():
    result = MagicMock()
    result.mappings.return_value.first.return_value = {"id": 10, "content": "hello"}
    factory, session = _session_factory(result)

    row = await ContentRepository(factory).fetch_content("public", "documents", "document_content", 10)

    sql, params = _executed(session)
    assert '"document_content"(t)' in sql
    assert 'FROM "public"."documents" AS t' in sql
    assert sql.endswith("WHERE t.id = :row_id")
    assert "::text" not in sql
    assert params == {"row_id": 10}
    assert row.content == "hello"
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_fetch_content_missing_row_returns_none():
    result = MagicMock()
    result.mappings.return_value.first.return_value = None
    factory, _ = _session_factory(result)

    assert await ContentRepository(factory).fetch_content("public", "documents", "fn", "abc") is None


@pytest.mark.asyncio
async def test_fetch_content_compares_string_ids_as_text():
    result = MagicMock()
    result.mappings.return_value.first.return_value = None
    factory, session = _session_factory(result)

    await ContentRepository(factory).fetch_content("public", "documents", "fn", "6f1c")

    sql, params = _executed(session)
    assert sql.endswith("WHERE t.id::text = :row_id")
    assert params == {"row_id": "6f1c"}


@pytest.mark.asyncio
async def test_fetch_content_respects_allow_list():
    factory, session = _session_factory(MagicMock())
    repository = ContentRepository(factory, allowed_tables=["public.documents"])

    with pytest.raises(InvalidIdentifierError):
        await repository.fetch_content("public", "users", "fn", 1)

    session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_vector_writes_pgvector_literal():
    result = MagicMock(rowcount=1)
    factory, session = _session_factory(result)

    affected = await ContentRepository(factory).update_vector("public", "documents", "embedding", 10, [0.5, 1.5])

    sql, params = _executed(session)
    assert sql.startswith('UPDATE "public"."documents" SET "embedding" = CAST(:embedding AS vector)')
    assert json.loads(params["embedding"]) == [0.5, 1.5]
    assert sql.endswith("WHERE id = :row_id")
    assert params["row_id"] == 10
    assert affected == 1


@pytest.mark.asyncio
async def test_update_vector_reports_zero_rows():
    factory, _ = _session_factory(MagicMock(rowcount=0))

    assert await ContentRepository(factory).update_vector("public", "documents", "embedding", 10, [0.1]) == 0


@pytest.mark.asyncio
async def test_update_vector_respects_allow_list_case():
    factory, session = _session_factory(MagicMock(rowcount=1))
    repository = ContentRepository(factory, allowed_tables=["public.documents"])

    with pytest.raises(InvalidIdentifierError):
        await repository.update_vector("PUBLIC", "DOCUMENTS", "embedding", 10, [0.1])

    session.execute.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(("scalar", "expected"), [(True, 1), (False, 0)])
async def test_queue_delete(scalar, expected):
    result = MagicMock()
    result.scalar.return_value = scalar
    factory, session = _session_factory(result)

    deleted = await QueueRepository(factory, queue_name="embedding_jobs").delete(42)

    sql, params = _executed(session)
    assert "pgmq.delete" in sql
    assert params == {"queue_name": "embedding_jobs", "msg_id": 42}
    assert deleted == expected
