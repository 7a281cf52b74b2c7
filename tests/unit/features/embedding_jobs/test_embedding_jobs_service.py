import asyncio

import pytest

from core.exceptions import BatchPollingError, MalformedBatchError
from core.providers.batch import BatchJobState, BatchResult
from features.embedding_jobs.report import BatchReport
from features.embedding_jobs.service import EmbeddingJobsService
from tests.helpers.embedding_jobs import FakeBatchProvider, FakeContentStore, FakeQueue, make_job, success_result


def _service(provider, content_store, queue, clock, **kwargs):
    return EmbeddingJobsService(
        content_repository=content_store,
        vector_store=content_store,
        queue=queue,
        provider=provider,
        poll_interval=1.0,
        sleep=clock.sleep,
        clock=clock,
        **kwargs,
    )


def _assert_partition(report: BatchReport, jobs):
    completed = set(report.completed_job_ids)
    failed = {failed.job_id for failed in report.failed_jobs}
    assert completed.isdisjoint(failed)
    assert completed | failed == {job.job_id for job in jobs}
    assert len(report.completed_jobs) + len(report.failed_jobs) == len(jobs)


@pytest.mark.asyncio
async def test_run_batch_happy_path(provider, clock):
    content_store = FakeContentStore({10: "alpha", 20: "beta"})
    queue = FakeQueue()
    provider.statuses = [
        BatchJobState(id="batch_1", status="in_progress"),
        BatchJobState(id="batch_1", status="completed", output_file_id="file-out", input_file_id="file-input"),
    ]
    provider.results = {"file-out": [success_result("1"), success_result("2")]}
    jobs = [make_job(1), make_job(2)]

    report = await _service(provider, content_store, queue, clock).run_batch(jobs)

    assert report.completed_job_ids == [1, 2]
    assert report.failed_jobs == []
    assert [request.input_text for request in provider.submitted_requests] == ["alpha", "beta"]
    assert sorted(queue.deleted) == [1, 2]
    assert provider.cleaned == ["file-input", "file-out"]
    assert all(not path.exists() for path in provider.staged_paths)


@pytest.mark.asyncio
async def test_run_batch_mixed_outcomes(provider, clock):
    content_store = FakeContentStore({10: "alpha", 20: "beta", 30: "gamma", 40: ""})
    content_store.vanished_rows.add(30)
    queue = FakeQueue()
    provider.statuses = [BatchJobState(id="batch_1", status="completed", output_file_id="file-out")]
    provider.results = {
        "file-out": [
            success_result("1"),
            BatchResult(custom_id="2", status_code=400, error_message="invalid input"),
            success_result("3"),
        ]
    }
    jobs = [make_job(1), make_job(2), make_job(3), make_job(4)]

    report = await _service(provider, content_store, queue, clock).run_batch(jobs)

    _assert_partition(report, jobs)
    assert report.completed_job_ids == [1]
    reasons = {failed.job_id: failed.reason for failed in report.failed_jobs}
    assert reasons[2] == "OpenAI Batch Error: invalid input"
    assert reasons[3].startswith("DB update failed after embedding")
    assert reasons[4].startswith("Invalid or empty content received from document_content")
    assert queue.deleted == [1]
    assert [request.custom_id for request in provider.submitted_requests] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_run_batch_skips_provider_when_nothing_to_embed(provider, clock):
    jobs = [make_job(1), make_job(2)]

    report = await _service(provider, FakeContentStore({20: ""}), FakeQueue(), clock).run_batch(jobs)

    _assert_partition(report, jobs)
    assert report.completed_job_ids == []
    assert provider.staged_paths == []
    assert provider.poll_count == 0


@pytest.mark.asyncio
async def test_run_batch_empty_input(provider, clock):
    report = await _service(provider, FakeContentStore(), FakeQueue(), clock).run_batch([])

    assert report.completed_jobs == [] and report.failed_jobs == []


@pytest.mark.asyncio
async def test_run_batch_upload_failure_fails_only_enriched_jobs(provider, clock):
    provider.upload_error = RuntimeError("connection refused")
    jobs = [make_job(1), make_job(2)]

    report = await _service(provider, FakeContentStore({10: "alpha"}), FakeQueue(), clock).run_batch(jobs)

    _assert_partition(report, jobs)
    reasons = {failed.job_id: failed.reason for failed in report.failed_jobs}
    assert reasons[1] == "Failed to submit batch to OpenAI: connection refused"
    assert reasons[2].startswith("Row not found")


@pytest.mark.asyncio
async def test_run_batch_polling_failure_fails_batch(provider, clock):
    provider.statuses = [BatchJobState(id="batch_1", status="in_progress")]
    provider.poll_error = BatchPollingError("Failed while polling batch job: 502")
    jobs = [make_job(1)]
    queue = FakeQueue()

    report = await _service(provider, FakeContentStore({10: "alpha"}), queue, clock).run_batch(jobs)

    assert report.failed_jobs[0].reason == "Failed while polling batch job: 502"
    assert queue.deleted == []
    assert provider.cleaned == ["file-input"]


@pytest.mark.asyncio
async def test_run_batch_deadline_cancels_remote_batch(provider, clock):
    provider.statuses = [BatchJobState(id="batch_1", status="in_progress")]
    jobs = [make_job(1), make_job(2)]

    report = await _service(
        provider, FakeContentStore({10: "alpha", 20: "beta"}), FakeQueue(), clock
    ).run_batch(jobs, deadline_seconds=3)

    _assert_partition(report, jobs)
    assert report.completed_jobs == []
    assert all(failed.reason.startswith("Timed out") for failed in report.failed_jobs)
    assert provider.cancelled == ["batch_1"]


@pytest.mark.asyncio
async def test_run_batch_cancel_event(provider, clock):
    provider.statuses = [BatchJobState(id="batch_1", status="in_progress")]
    cancel = asyncio.Event()
    cancel.set()

    report = await _service(provider, FakeContentStore({10: "alpha"}), FakeQueue(), clock).run_batch(
        [make_job(1)], cancel_event=cancel
    )

    assert "cancelled" in report.failed_jobs[0].reason
    assert provider.cancelled == ["batch_1"]


@pytest.mark.asyncio
async def test_run_batch_keeps_remote_files_when_cleanup_disabled(provider, clock):
    provider.statuses = [BatchJobState(id="batch_1", status="completed", output_file_id="file-out")]
    provider.results = {"file-out": [success_result("1")]}

    report = await _service(
        provider, FakeContentStore({10: "alpha"}), FakeQueue(), clock, cleanup_remote_files=False
    ).run_batch([make_job(1)])

    assert report.completed_job_ids == [1]
    assert provider.cleaned == []


@pytest.mark.asyncio
async def test_run_batch_rejects_duplicate_job_ids(provider, clock):
    content_store = FakeContentStore({10: "alpha", 20: "beta"})
    queue = FakeQueue()
    service = _service(provider, content_store, queue, clock)

    with pytest.raises(MalformedBatchError, match="duplicate jobId"):
        await service.run_batch([make_job(1, 10), make_job(1, 20)])

    assert content_store.fetch_calls == []
    assert content_store.updates == []
    assert provider.staged_paths == []
    assert queue.deleted == []


@pytest.mark.asyncio
async def test_process_payload_rejects_malformed_body(provider, clock):
    service = _service(provider, FakeContentStore(), FakeQueue(), clock)

    with pytest.raises(MalformedBatchError):
        await service.process_payload('{"jobId": 1}')


@pytest.mark.asyncio
async def test_process_payload_runs_decoded_jobs(provider, clock):
    provider.statuses = [BatchJobState(id="batch_1", status="completed", output_file_id="file-out")]
    provider.results = {"file-out": [success_result("5")]}
    service = _service(provider, FakeContentStore({"r-5": "text"}), FakeQueue(), clock)

    report = await service.process_payload(
        [
            {
                "jobId": 5,
                "id": "r-5",
                "schema": "public",
                "table": "documents",
                "contentFunction": "document_content",
                "embeddingColumn": "embedding",
            }
        ]
    )

    assert report.completed_job_ids == [5]
