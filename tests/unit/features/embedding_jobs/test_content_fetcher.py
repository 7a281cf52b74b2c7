import pytest

from core.exceptions import ContentFetchError, EmptyContentError, InvalidIdentifierError, RowNotFoundError
from features.embedding_jobs.content_fetcher import ContentFetcher
from features.embedding_jobs.report import BatchReportBuilder
from tests.helpers.embedding_jobs import FakeContentStore, make_job


@pytest.mark.asyncio
async def test_fetch_content_returns_trimmed_text():
    store = FakeContentStore({10: "  hello world \n"})
    fetcher = ContentFetcher(store)

    assert await fetcher.fetch_content(make_job(1)) == "hello world"


@pytest.mark.asyncio
async def test_fetch_content_missing_row():
    fetcher = ContentFetcher(FakeContentStore())

    with pytest.raises(RowNotFoundError) as exc_info:
        await fetcher.fetch_content(make_job(1))

    assert exc_info.value.job_id == 1
    assert "public.documents/10" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", None, 12, {"text": "x"}])
async def test_fetch_content_rejects_empty_or_non_text(content):
    fetcher = ContentFetcher(FakeContentStore({10: content}))

    with pytest.raises(EmptyContentError):
        await fetcher.fetch_content(make_job(1))


@pytest.mark.asyncio
async def test_fetch_content_wraps_storage_errors():
    fetcher = ContentFetcher(FakeContentStore({10: RuntimeError("connection reset")}))

    with pytest.raises(ContentFetchError) as exc_info:
        await fetcher.fetch_content(make_job(1))

    assert "connection reset" in exc_info.value.message


@pytest.mark.asyncio
async def test_fetch_content_reports_invalid_identifier_per_job():
    error = InvalidIdentifierError("Invalid SQL identifier for table: 'x;drop'", field="table")
    fetcher = ContentFetcher(FakeContentStore({10: error}))

    with pytest.raises(ContentFetchError) as exc_info:
        await fetcher.fetch_content(make_job(1))

    assert exc_info.value.message.startswith("Invalid job target")


@pytest.mark.asyncio
@pytest.mark.parametrize("max_concurrency", [1, 4])
async def test_fetch_all_isolates_failures_and_keeps_order(max_concurrency):
    store = FakeContentStore({10: "first", 30: "third", 40: "   "})
    fetcher = ContentFetcher(store, max_concurrency=max_concurrency)
    jobs = [make_job(1), make_job(2), make_job(3), make_job(4)]
    report = BatchReportBuilder()

    enriched = await fetcher.fetch_all(jobs, report)

    assert [(item.job.job_id, item.content) for item in enriched] == [(1, "first"), (3, "third")]
    assert report.is_resolved(2) and report.is_resolved(4)
    assert not report.is_resolved(1) and not report.is_resolved(3)
    assert store.fetch_calls.count(10) == 1

    built = report.build(jobs)
    reasons = {failed.job_id: failed.reason for failed in built.failed_jobs}
    assert reasons[2].startswith("Row not found")
    assert reasons[4].startswith("Invalid or empty content")
